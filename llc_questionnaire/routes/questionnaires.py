"""Link-based questionnaire endpoints, addressed by access token."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from llc_questionnaire.guards.identity import require_user_id
from llc_questionnaire.logic.lifecycle import (
    get_questionnaire_by_token,
    save_questionnaire_progress,
    submit_questionnaire,
)
from llc_questionnaire.logic.questionnaire_schema import schema_as_data
from llc_questionnaire.models.response_types import (
    QuestionnaireEnvelope,
    SaveProgressRequest,
    SaveResult,
    SubmitRequest,
    SubmitResult,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/questionnaires/{token}",
    summary="Get questionnaire with visible sections and state configuration",
    operation_id="getQuestionnaireByToken",
    response_model=QuestionnaireEnvelope,
)
def get_questionnaire(
    token: str,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> QuestionnaireEnvelope:
    return get_questionnaire_by_token(token, user_id, engine=request.app.state.engine)


@router.patch(
    "/questionnaires/{token}",
    summary="Save questionnaire progress",
    operation_id="saveQuestionnaireProgress",
    response_model=SaveResult,
)
def save_progress(
    token: str,
    body: SaveProgressRequest,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> SaveResult:
    return save_questionnaire_progress(
        token,
        user_id,
        body.responses,
        body.current_section,
        engine=request.app.state.engine,
    )


@router.post(
    "/questionnaires/{token}/submit",
    summary="Submit the completed questionnaire",
    operation_id="submitQuestionnaire",
    response_model=SubmitResult,
)
def submit(
    token: str,
    body: SubmitRequest,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> SubmitResult:
    return submit_questionnaire(
        token,
        user_id,
        body.responses,
        engine=request.app.state.engine,
        config=request.app.state.config,
    )


@router.get(
    "/questionnaire-schema",
    summary="Full static questionnaire schema",
    operation_id="getQuestionnaireSchema",
)
def get_schema_document() -> dict:
    return {"sections": schema_as_data()}


__all__ = ["router"]
