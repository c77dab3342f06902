"""Database bootstrap utilities for the formation questionnaire service.

This module exposes convenience imports for engine construction, the
transaction scope used by the lifecycle operations, and the migrations runner
that applies SQL files from the local migrations/ directory. The DB layer does
not leak ORM models into route handlers.
"""

from llc_questionnaire.db.base import get_engine, transaction
from llc_questionnaire.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "transaction",
    "apply_migrations",
]
