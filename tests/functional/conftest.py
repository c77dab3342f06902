"""Functional test bootstrap for the questionnaire service.

Every test gets its own file-backed SQLite database under pytest's tmp_path,
with the schema applied by the project's migrations runner. File-backed
databases keep data visible across the separate connections each lifecycle
operation opens.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict

import pytest

from llc_questionnaire.config import AppConfig, DatabaseConfig
from llc_questionnaire.db.base import get_engine, transaction
from llc_questionnaire.db.migrations_runner import apply_migrations
from llc_questionnaire.logic.events import get_buffered_events
from llc_questionnaire.logic.repository_orders import insert_order
from llc_questionnaire.models.order import OrderRecord

FIXED_NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
OWNER_ID = "user-owner-1"


@pytest.fixture
def db_url(tmp_path, monkeypatch) -> str:
    url = f"sqlite:///{tmp_path / 'questionnaire.db'}"
    monkeypatch.setenv("TEST_DATABASE_URL", url)
    monkeypatch.setenv("AUTO_APPLY_MIGRATIONS", "0")
    return url


@pytest.fixture
def engine(db_url):
    eng = get_engine(db_url)
    apply_migrations(eng)
    get_buffered_events(clear=True)
    yield eng
    get_buffered_events(clear=True)


@pytest.fixture
def app_config(db_url) -> AppConfig:
    return AppConfig(database=DatabaseConfig(dsn=db_url))


def _make_order(**overrides: Any) -> OrderRecord:
    data: Dict[str, Any] = {
        "id": "order-1",
        "order_number": "LLC-1001",
        "user_id": OWNER_ID,
        "company_name": "Acme Ventures LLC",
        "business_purpose": "To provide consulting services in technology",
        "business_address": "100 Main St",
        "business_city": "Austin",
        "business_state": "TX",
        "business_zip": "73301",
        "contact_first_name": "Jane",
        "contact_last_name": "Doe",
        "contact_email": "jane@example.com",
        "contact_phone": "555-0100",
        "formation_state": "TX",
    }
    data.update(overrides)
    return OrderRecord(**data)


@pytest.fixture
def seed_order(engine) -> Callable[..., OrderRecord]:
    def _seed(**overrides: Any) -> OrderRecord:
        order = _make_order(**overrides)
        with transaction(engine) as conn:
            insert_order(conn, order)
        return order

    return _seed


def _completing_answers(**overrides: Any) -> Dict[str, Any]:
    """Answers that, on top of pre-populated data, satisfy the base LLC gate."""
    answers: Dict[str, Any] = {
        "mailing_address_same": "yes",
        "member_count": "single",
        "management_type": "member_managed",
        "confirmation": True,
        "terms_agreement": True,
        "member_list": [
            {
                "member_type": "individual",
                "full_name": "Jane Doe",
                "email": "jane@example.com",
                "phone": "555-0100",
                "street_address": "100 Main St",
                "city": "Austin",
                "state": "TX",
                "zip_code": "73301",
                "ownership_percentage": 100,
                "ssn": "123-45-6789",
            }
        ],
    }
    answers.update(overrides)
    return answers


def _member_entry(name: str, pct: Any, **extra: Any) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "member_type": "individual",
        "full_name": name,
        "email": f"{name.split()[0].lower()}@example.com",
        "phone": "555-0199",
        "street_address": "1 Side St",
        "city": "Austin",
        "state": "TX",
        "zip_code": "73301",
        "ownership_percentage": pct,
        "ssn": "987-65-4321",
    }
    entry.update(extra)
    return entry


@pytest.fixture
def order_factory() -> Callable[..., OrderRecord]:
    return _make_order


@pytest.fixture
def answers_factory() -> Callable[..., Dict[str, Any]]:
    return _completing_answers


@pytest.fixture
def member_factory() -> Callable[..., Dict[str, Any]]:
    return _member_entry


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
