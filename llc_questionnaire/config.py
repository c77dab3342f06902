"""Configuration utilities for the questionnaire service.

Settings come from environment variables first, then optional text files
under `config/`, then `questionnaire_config.json` at the project root, then
defaults. Pydantic models enforce value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_QUESTIONNAIRE_CONFIG = Path("questionnaire_config.json")
DEFAULT_ACTION_URL_TEMPLATE = "/en/questionnaire/{order_number}?t={token}"
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class TokenConfig(BaseModel):
    ttl_days: int = Field(default=30, gt=0)


class TaskConfig(BaseModel):
    due_days: int = Field(default=7, ge=0)
    action_url_template: str = DEFAULT_ACTION_URL_TEMPLATE

    @field_validator("action_url_template")
    @classmethod
    def template_must_reference_token(cls, v: str) -> str:
        if "{token}" not in v:
            raise ValueError("tasks.action_url_template must contain {token}")
        return v


class SubmissionConfig(BaseModel):
    enforce_required: bool = True


class AppConfig(BaseModel):
    database: DatabaseConfig
    tokens: TokenConfig = Field(default_factory=TokenConfig)
    tasks: TaskConfig = Field(default_factory=TaskConfig)
    submission: SubmissionConfig = Field(default_factory=SubmissionConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) questionnaire_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_QUESTIONNAIRE_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = (
        _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )
    ttl_days_text = _env("QUESTIONNAIRE_TOKEN_TTL_DAYS") or _read_config_file("tokens.ttl_days") or _base("tokens.ttl_days", "30")
    due_days_text = _env("QUESTIONNAIRE_TASK_DUE_DAYS") or _read_config_file("tasks.due_days") or _base("tasks.due_days", "7")
    url_template = (
        _env("QUESTIONNAIRE_ACTION_URL_TEMPLATE")
        or _read_config_file("tasks.action_url_template")
        or _base("tasks.action_url_template", DEFAULT_ACTION_URL_TEMPLATE)
    )
    enforce_text = (
        _env("QUESTIONNAIRE_ENFORCE_REQUIRED")
        or _read_config_file("submission.enforce_required")
        or _base("submission.enforce_required", "true")
    )

    try:
        return AppConfig(
            database=DatabaseConfig(dsn=dsn),
            tokens=TokenConfig(ttl_days=int(str(ttl_days_text).strip())),
            tasks=TaskConfig(due_days=int(str(due_days_text).strip()), action_url_template=url_template),
            submission=SubmissionConfig(enforce_required=_as_bool(enforce_text)),
        )
    except (PydanticValidationError, ValueError) as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "TokenConfig",
    "TaskConfig",
    "SubmissionConfig",
    "load_config",
]
