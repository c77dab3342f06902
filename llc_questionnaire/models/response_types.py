"""Pydantic models for request and response bodies."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SaveProgressRequest(BaseModel):
    responses: Dict[str, Any] = Field(default_factory=dict)
    current_section: Optional[str] = None


class SubmitRequest(BaseModel):
    responses: Dict[str, Any] = Field(default_factory=dict)


class SaveResult(BaseModel):
    success: bool
    saved_at: str


class SubmitResult(BaseModel):
    success: bool
    completed_at: str


class QuestionnaireEnvelope(BaseModel):
    """Body for GET /questionnaires/{token}."""

    questionnaire: Dict[str, Any]
    sections: List[Dict[str, Any]]
    state_config: Dict[str, Any]


class OrderQuestionnaireEnvelope(BaseModel):
    """Body for create/fetch by order; carries the access token to the owner."""

    questionnaire: Dict[str, Any]
    access_token: str
    created: bool = False


__all__ = [
    "SaveProgressRequest",
    "SubmitRequest",
    "SaveResult",
    "SubmitResult",
    "QuestionnaireEnvelope",
    "OrderQuestionnaireEnvelope",
]
