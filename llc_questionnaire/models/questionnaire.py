"""Questionnaire instance model and status/task constants."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class QuestionnaireStatus:
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"


class TaskStatus:
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TaskPriority:
    HIGH = "HIGH"


class QuestionnaireInstance(BaseModel):
    id: str
    order_id: str
    user_id: str
    state_code: str
    products: List[str] = Field(default_factory=list)
    pre_populated_data: Dict[str, Any] = Field(default_factory=dict)
    responses: Dict[str, Any] = Field(default_factory=dict)
    status: str = QuestionnaireStatus.NOT_STARTED
    current_section: Optional[str] = None
    access_token: str
    token_expires_at: datetime
    last_saved_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    @property
    def is_completed(self) -> bool:
        return self.status == QuestionnaireStatus.COMPLETED

    def public_view(self) -> Dict[str, Any]:
        """Client-facing projection; the access token is omitted."""
        return {
            "id": self.id,
            "order_id": self.order_id,
            "state_code": self.state_code,
            "status": self.status,
            "current_section": self.current_section,
            "responses": self.responses,
            "pre_populated_data": self.pre_populated_data,
            "products": self.products,
            "last_saved_at": self.last_saved_at.isoformat() if self.last_saved_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


__all__ = [
    "QuestionnaireStatus",
    "TaskStatus",
    "TaskPriority",
    "QuestionnaireInstance",
]
