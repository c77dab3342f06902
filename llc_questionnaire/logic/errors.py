"""Domain errors raised by the questionnaire lifecycle operations.

Each error carries a stable `code`; the HTTP layer maps codes to statuses in
`llc_questionnaire.http.error_mapping`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class QuestionnaireError(Exception):
    code = "QUESTIONNAIRE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_problem_extras(self) -> Dict[str, Any]:
        return {}


class NotFound(QuestionnaireError):
    code = "QUESTIONNAIRE_NOT_FOUND"


class OrderNotFound(NotFound):
    code = "ORDER_NOT_FOUND"


class Unauthorized(QuestionnaireError):
    code = "QUESTIONNAIRE_FORBIDDEN"


class Expired(QuestionnaireError):
    code = "QUESTIONNAIRE_LINK_EXPIRED"


class AlreadyCompleted(QuestionnaireError):
    code = "QUESTIONNAIRE_ALREADY_COMPLETED"


class OrderMissingUser(QuestionnaireError):
    code = "ORDER_MISSING_USER"


class ValidationFailed(QuestionnaireError):
    code = "QUESTIONNAIRE_INCOMPLETE"

    def __init__(self, message: str, blocking_items: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.blocking_items = list(blocking_items or [])

    def to_problem_extras(self) -> Dict[str, Any]:
        return {"blocking_items": self.blocking_items}


class TransactionFailed(QuestionnaireError):
    code = "QUESTIONNAIRE_SUBMIT_FAILED"


__all__ = [
    "QuestionnaireError",
    "NotFound",
    "OrderNotFound",
    "Unauthorized",
    "Expired",
    "AlreadyCompleted",
    "OrderMissingUser",
    "ValidationFailed",
    "TransactionFailed",
]
