"""Central error mapping for questionnaire domain errors.

Single source of truth for mapping error codes raised by the lifecycle
operations to problem+json titles and HTTP statuses. Handlers must import
from here instead of hardcoding numbers.
"""

from __future__ import annotations

QUESTIONNAIRE_ERROR_MAP = {
    "QUESTIONNAIRE_NOT_FOUND": {"status": 404, "title": "Not Found"},
    "ORDER_NOT_FOUND": {"status": 404, "title": "Not Found"},
    "QUESTIONNAIRE_FORBIDDEN": {"status": 403, "title": "Forbidden"},
    "QUESTIONNAIRE_LINK_EXPIRED": {"status": 410, "title": "Gone"},
    "QUESTIONNAIRE_ALREADY_COMPLETED": {"status": 409, "title": "Conflict"},
    "QUESTIONNAIRE_INCOMPLETE": {"status": 422, "title": "Unprocessable Entity"},
    "ORDER_MISSING_USER": {"status": 422, "title": "Unprocessable Entity"},
    "QUESTIONNAIRE_SUBMIT_FAILED": {"status": 500, "title": "Internal Server Error"},
}

# Caller identity header absent
MISSING_USER = {"code": "CALLER_IDENTITY_MISSING", "status": 401, "title": "Unauthorized"}

DEFAULT_ERROR = {"status": 500, "title": "Internal Server Error"}


def lookup(code: str) -> dict:
    return QUESTIONNAIRE_ERROR_MAP.get(code, DEFAULT_ERROR)


__all__ = ["QUESTIONNAIRE_ERROR_MAP", "MISSING_USER", "DEFAULT_ERROR", "lookup"]
