"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that produce
application/problem+json responses for domain errors, HTTP errors, request
validation errors and anything unexpected.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from llc_questionnaire.http.error_mapping import lookup
from llc_questionnaire.logic.errors import QuestionnaireError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


async def handle_questionnaire_error(request: Request, exc: QuestionnaireError) -> JSONResponse:  # noqa: D401
    mapping = lookup(exc.code)
    status = int(mapping["status"])
    problem = {
        "type": f"about:blank#{exc.code.lower()}",
        "title": mapping["title"],
        "status": status,
        "detail": exc.message,
        "code": exc.code,
        **exc.to_problem_extras(),
    }
    if status >= 500:
        logger.error("questionnaire_error code=%s path=%s", exc.code, request.url.path, exc_info=exc.__cause__)
    else:
        logger.info("questionnaire_error code=%s status=%s path=%s", exc.code, status, request.url.path)
    return JSONResponse(problem, status_code=status, media_type=PROBLEM_MEDIA_TYPE)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status = int(getattr(exc, "status_code", 500) or 500)
    if isinstance(exc.detail, dict):
        detail = {"status": status, **exc.detail}
    else:
        detail = {"title": "Error", "status": status, "detail": str(exc.detail or "")}
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    return JSONResponse(detail, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers or None)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "errors": [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
            for e in exc.errors()
        ],
    }
    return JSONResponse(problem, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse({"title": "Internal Server Error", "status": 500}, status_code=500, media_type=PROBLEM_MEDIA_TYPE)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "handle_questionnaire_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
