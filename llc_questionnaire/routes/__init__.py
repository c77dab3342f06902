"""APIRouter registration for the questionnaire service."""

from __future__ import annotations

from fastapi import APIRouter

from llc_questionnaire.routes.orders import router as orders_router
from llc_questionnaire.routes.questionnaires import router as questionnaires_router

api_router = APIRouter()
api_router.include_router(orders_router, tags=["Orders"])
api_router.include_router(questionnaires_router, tags=["Questionnaires"])

__all__ = ["api_router"]
