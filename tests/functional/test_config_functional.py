"""Functional tests for configuration loading and the state configuration merge."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from llc_questionnaire.config import DEFAULT_ACTION_URL_TEMPLATE, TaskConfig, load_config
from llc_questionnaire.logic.state_config import merge_state_config

_ENV_KEYS = (
    "DATABASE_URL",
    "QUESTIONNAIRE_TOKEN_TTL_DAYS",
    "QUESTIONNAIRE_TASK_DUE_DAYS",
    "QUESTIONNAIRE_ACTION_URL_TEMPLATE",
    "QUESTIONNAIRE_ENFORCE_REQUIRED",
)


@pytest.fixture
def clean_env(tmp_path, monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults(clean_env) -> None:
    cfg = load_config()
    assert cfg.database.dsn.startswith("sqlite")
    assert cfg.tokens.ttl_days == 30
    assert cfg.tasks.due_days == 7
    assert cfg.tasks.action_url_template == DEFAULT_ACTION_URL_TEMPLATE
    assert cfg.submission.enforce_required is True


def test_precedence_env_over_files_over_json(clean_env, monkeypatch) -> None:
    (clean_env / "questionnaire_config.json").write_text(
        json.dumps(
            {
                "database": {"dsn": "postgresql://json/db"},
                "tokens": {"ttl_days": 10},
                "tasks": {"due_days": 3},
                "submission": {"enforce_required": False},
            }
        ),
        encoding="utf-8",
    )
    (clean_env / "config").mkdir()
    (clean_env / "config" / "tokens.ttl_days").write_text("14\n", encoding="utf-8")
    monkeypatch.setenv("QUESTIONNAIRE_TASK_DUE_DAYS", "1")

    cfg = load_config()

    assert cfg.database.dsn == "postgresql://json/db"
    assert cfg.tokens.ttl_days == 14
    assert cfg.tasks.due_days == 1
    assert cfg.submission.enforce_required is False


def test_invalid_values_raise(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("QUESTIONNAIRE_TOKEN_TTL_DAYS", "0")
    with pytest.raises(ValidationError):
        load_config()


def test_action_url_template_must_carry_token() -> None:
    with pytest.raises(ValidationError):
        TaskConfig(action_url_template="/en/questionnaire/{order_number}")


def test_state_config_merge_state_overrides_all() -> None:
    rows = [
        {"state_code": "TX", "config_type": "filing_fee", "config_data": {"amount": 300}, "is_active": True},
        {"state_code": "ALL", "config_type": "filing_fee", "config_data": {"amount": 0}, "is_active": True},
        {"state_code": "ALL", "config_type": "banner", "config_data": "hello", "is_active": True},
        {"state_code": "TX", "config_type": "banner", "config_data": "old", "is_active": False},
    ]
    assert merge_state_config("TX", rows) == {
        "state_code": "TX",
        "filing_fee": {"amount": 300},
        "banner": "hello",
    }


def test_state_config_merge_without_rows() -> None:
    assert merge_state_config("WY", []) == {"state_code": "WY"}
