from __future__ import annotations

import logging
import os
from typing import Callable

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from llc_questionnaire.config import AppConfig, load_config
from llc_questionnaire.db.base import get_engine
from llc_questionnaire.db.migrations_runner import apply_migrations
from llc_questionnaire.http.problem import (
    handle_http_exception,
    handle_questionnaire_error,
    handle_request_validation_error,
    handle_unexpected_error,
)
from llc_questionnaire.http.request_id import RequestIdMiddleware
from llc_questionnaire.logging_setup import configure_logging
from llc_questionnaire.logic.errors import QuestionnaireError
from llc_questionnaire.routes import api_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _health_check(engine: Engine) -> Callable[[], dict]:
    def check() -> dict:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def _auto_apply_migrations(engine: Engine) -> None:
    enable_flag = os.getenv("AUTO_APPLY_MIGRATIONS", "true").strip().lower() in {"1", "true", "yes", "on"}
    if not enable_flag:
        logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
        return
    try:
        applied = apply_migrations(engine)
    except Exception:
        logger.error("Failed to apply migrations at startup", exc_info=True)
        raise
    logger.info("migrations_ready newly_applied=%s", applied)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the FastAPI application.

    The engine URL comes from TEST_DATABASE_URL when set, else from the
    loaded configuration.
    """
    configure_logging()
    cfg = config or load_config()
    engine = get_engine(os.getenv("TEST_DATABASE_URL") or cfg.database.dsn)
    _auto_apply_migrations(engine)

    app = FastAPI(title="LLC Formation Questionnaire")
    app.state.config = cfg
    app.state.engine = engine

    app.add_exception_handler(QuestionnaireError, handle_questionnaire_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix=API_PREFIX)

    # Health endpoint (out of prefix for simplicity in local runs)
    health_check = _health_check(engine)

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return health_check()

    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
