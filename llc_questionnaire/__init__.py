"""FastAPI application package for the LLC formation questionnaire service.

This package exposes a small FastAPI application factory. It wires only
cross-cutting middleware (request-id) and problem+json handlers and mounts
the API routers. Business logic lives in `llc_questionnaire/logic/` and
route handlers in `llc_questionnaire/routes/`.
"""

from __future__ import annotations

from llc_questionnaire.main import create_app

__all__ = ["create_app"]
