"""Order-scoped questionnaire endpoints.

Implements:
- POST /orders/{order_id}/questionnaire
  - Creates the questionnaire for a paid order (201), or returns the
    existing one unchanged (200)
- GET /orders/{order_id}/questionnaire
  - Returns the questionnaire and its access token to the order owner
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response

from llc_questionnaire.guards.identity import require_user_id
from llc_questionnaire.logic.lifecycle import (
    create_questionnaire_for_order_id,
    get_questionnaire_by_order_id,
)
from llc_questionnaire.models.response_types import OrderQuestionnaireEnvelope

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/orders/{order_id}/questionnaire",
    summary="Create the formation questionnaire for an order",
    operation_id="createQuestionnaireForOrder",
    response_model=OrderQuestionnaireEnvelope,
    status_code=201,
)
def create_for_order(
    order_id: str,
    request: Request,
    response: Response,
    user_id: str = Depends(require_user_id),
) -> OrderQuestionnaireEnvelope:
    instance, created = create_questionnaire_for_order_id(
        order_id,
        requested_by=user_id,
        engine=request.app.state.engine,
        config=request.app.state.config,
    )
    if not created:
        response.status_code = 200
    return OrderQuestionnaireEnvelope(
        questionnaire=instance.public_view(),
        access_token=instance.access_token,
        created=created,
    )


@router.get(
    "/orders/{order_id}/questionnaire",
    summary="Get the questionnaire for an order",
    operation_id="getQuestionnaireByOrder",
    response_model=OrderQuestionnaireEnvelope,
)
def get_for_order(
    order_id: str,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> OrderQuestionnaireEnvelope:
    return get_questionnaire_by_order_id(order_id, user_id, engine=request.app.state.engine)


__all__ = ["router"]
