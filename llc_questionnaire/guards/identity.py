"""Caller identity dependency.

The portal's auth gateway forwards the authenticated user id in the
`X-User-Id` header. Routes that act on behalf of a user depend on
`require_user_id`; a missing or blank header short-circuits with 401.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import Header, HTTPException

from llc_questionnaire.http.error_mapping import MISSING_USER

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


def require_user_id(
    user_id: Annotated[Optional[str], Header(alias=USER_ID_HEADER)] = None,
) -> str:
    if user_id is None or not user_id.strip():
        logger.info("caller_identity_missing header=%s", USER_ID_HEADER)
        raise HTTPException(
            status_code=MISSING_USER["status"],
            detail={
                "title": MISSING_USER["title"],
                "detail": f"{USER_ID_HEADER} header is required",
                "code": MISSING_USER["code"],
            },
        )
    return user_id.strip()


__all__ = ["USER_ID_HEADER", "require_user_id"]
