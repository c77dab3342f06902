"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from the local `migrations/` directory.
Skips rollback files and records applied filenames in a `schema_migrations`
table so the same migration is never applied twice against one database.
Intended for local development and CI; production environments should use
the platform's migration mechanism.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        if "rollback" in p.name.lower():
            continue
        yield p


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute SQL text, tolerating multi-statement files on SQLite.

    pysqlite does not allow multiple statements in a single execute() call,
    so SQLite scripts are split on ';'. Other dialects receive the full
    script as-is.
    """
    name = (conn.dialect.name or "").lower()
    if "sqlite" not in name:
        conn.exec_driver_sql(sql)
        return
    for stmt in sql.split(";"):
        lines = [ln for ln in stmt.splitlines() if not ln.strip().startswith("--")]
        s = "\n".join(lines).strip()
        if not s or s.upper() in {"BEGIN", "COMMIT", "END"}:
            continue
        conn.exec_driver_sql(s)


def _ensure_journal(conn: Connection) -> set[str]:
    conn.exec_driver_sql(
        "CREATE TABLE IF NOT EXISTS schema_migrations ("
        "filename TEXT PRIMARY KEY, applied_at TEXT NOT NULL)"
    )
    rows = conn.execute(sql_text("SELECT filename FROM schema_migrations")).fetchall()
    return {str(r[0]) for r in rows}


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] | None = None) -> list[str]:
    """Apply pending migrations and return the filenames applied by this call."""
    root = Path(migrations_dir) if migrations_dir else DEFAULT_MIGRATIONS_DIR
    if not root.exists():  # pragma: no cover - optional
        logger.warning("migrations_dir_missing path=%s", str(root))
        return []

    applied_now: list[str] = []
    with engine.begin() as conn:
        applied = _ensure_journal(conn)
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            if not sql.strip():
                continue
            _exec_sql_compat(conn, sql)
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :at)"),
                {
                    "f": fname,
                    # ISO-8601 UTC without fractional seconds
                    "at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                },
            )
            applied_now.append(fname)
            logger.info("migration_applied file=%s", fname)
    return applied_now
