"""Questionnaire lifecycle events.

Lifecycle operations call `publish` once their transaction has committed.
Each event is logged and kept in a bounded in-process buffer of the most
recent events, which tests read through `get_buffered_events`. Payloads
carry ids and statuses only, never access tokens.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Dict, List, Mapping

logger = logging.getLogger(__name__)

QUESTIONNAIRE_CREATED = "questionnaire.created"
QUESTIONNAIRE_SAVED = "questionnaire.saved"
QUESTIONNAIRE_SUBMITTED = "questionnaire.submitted"

RECENT_EVENTS_LIMIT = 256

_recent: Deque[Dict[str, Any]] = deque(maxlen=RECENT_EVENTS_LIMIT)


def publish(event_type: str, payload: Mapping[str, Any]) -> None:
    event = {"type": event_type, "payload": dict(payload)}
    logger.info("questionnaire_event type=%s payload=%s", event_type, event["payload"])
    _recent.append(event)


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return the retained events, oldest first; optionally clear them."""
    out = list(_recent)
    if clear:
        _recent.clear()
    return out


__all__ = [
    "QUESTIONNAIRE_CREATED",
    "QUESTIONNAIRE_SAVED",
    "QUESTIONNAIRE_SUBMITTED",
    "RECENT_EVENTS_LIMIT",
    "publish",
    "get_buffered_events",
]
