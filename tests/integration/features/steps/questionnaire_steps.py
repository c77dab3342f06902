"""Step definitions for the questionnaire lifecycle scenarios.

Orders are seeded straight into the database; everything else goes through
the HTTP API under `context.api_prefix`.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict

from behave import given, then, when
from jsonschema import Draft202012Validator
from sqlalchemy import text as sql_text

from llc_questionnaire.db.base import transaction
from llc_questionnaire.logic.repository_businesses import get_business_by_order, list_members
from llc_questionnaire.logic.repository_orders import insert_order
from llc_questionnaire.models.order import OrderRecord

logger = logging.getLogger(__name__)

_PROBLEM_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["title", "status", "code"],
    "properties": {
        "title": {"type": "string"},
        "status": {"type": "integer"},
        "code": {"type": "string"},
    },
}

_PRODUCT_FLAGS = {
    "ein": "need_ein",
    "operating_agreement": "need_operating_agreement",
    "bank_letter": "need_bank_letter",
    "registered_agent": "registered_agent",
    "compliance": "compliance",
}


def _completed_answers() -> Dict[str, Any]:
    return {
        "mailing_address_same": "yes",
        "member_count": "single",
        "management_type": "member_managed",
        "confirmation": True,
        "terms_agreement": True,
        "tax_classification": "default",
        "fiscal_year_end": "december_31",
        "responsible_party_ssn": "123-45-6789",
        "expect_employees": "no",
        "member_list": [
            {
                "member_type": "individual",
                "full_name": "Ada Lovelace",
                "email": "ada@example.com",
                "phone": "555-0142",
                "street_address": "12 Harbor Rd",
                "city": "Houston",
                "state": "TX",
                "zip_code": "77002",
                "ownership_percentage": 100,
                "ssn": "123-45-6789",
            }
        ],
    }


def _url(context, path: str) -> str:
    return f"{context.api_prefix}{path}"


def _headers(user: str) -> Dict[str, str]:
    return {"X-User-Id": user, "X-Request-Id": str(uuid.uuid4())}


def _token(context) -> str:
    token = context.tokens.get(context.order.id)
    assert token, "questionnaire has not been created in this scenario"
    return token


def _create(context, user: str) -> None:
    context.response = context.client.post(
        _url(context, f"/orders/{context.order.id}/questionnaire"), headers=_headers(user)
    )
    if context.response.status_code in (200, 201):
        context.tokens[context.order.id] = context.response.json()["access_token"]


def _submit(context, user: str, responses: Dict[str, Any]) -> None:
    context.response = context.client.post(
        _url(context, f"/questionnaires/{_token(context)}/submit"),
        json={"responses": responses},
        headers=_headers(user),
    )


def _questionnaire_row(context) -> Dict[str, Any]:
    with transaction(context.engine) as conn:
        row = conn.execute(
            sql_text("SELECT id, status FROM questionnaire_responses WHERE order_id = :oid"),
            {"oid": context.order.id},
        ).mappings().first()
    assert row is not None, "no questionnaire stored for the order"
    return dict(row)


# ------------------
# Given
# ------------------


@given('an order "{order_number}" for user "{user}" forming in "{state}" with products "{products}"')
def step_seed_order(context, order_number: str, user: str, state: str, products: str) -> None:
    flags = {}
    for name in (p.strip() for p in products.split(",") if p.strip()):
        assert name in _PRODUCT_FLAGS, f"unknown product {name}"
        flags[_PRODUCT_FLAGS[name]] = True
    order = OrderRecord(
        id=f"order-{uuid.uuid4().hex[:12]}",
        order_number=f"{order_number}-{uuid.uuid4().hex[:6]}",
        user_id=user,
        company_name="Harbor Lights LLC",
        business_purpose="Retail lighting",
        business_address="12 Harbor Rd",
        business_city="Houston",
        business_state=state,
        business_zip="77002",
        contact_first_name="Ada",
        contact_last_name="Lovelace",
        contact_email="ada@example.com",
        contact_phone="555-0142",
        formation_state=state,
        **flags,
    )
    with transaction(context.engine) as conn:
        insert_order(conn, order)
    context.order = order
    logger.info("seeded_order order_id=%s", order.id)


@given('user "{user}" has created the questionnaire for the order')
def step_has_created(context, user: str) -> None:
    _create(context, user)
    assert context.response.status_code == 201, context.response.text


@given('user "{user}" has submitted the completed questionnaire')
def step_has_submitted(context, user: str) -> None:
    _submit(context, user, _completed_answers())
    assert context.response.status_code == 200, context.response.text


# ------------------
# When
# ------------------


@when('user "{user}" creates the questionnaire for the order')
def step_create(context, user: str) -> None:
    _create(context, user)


@when('user "{user}" opens the questionnaire link')
def step_open(context, user: str) -> None:
    context.response = context.client.get(
        _url(context, f"/questionnaires/{_token(context)}"), headers=_headers(user)
    )


@when('user "{user}" saves progress with:')
def step_save(context, user: str) -> None:
    responses = {row["question_id"].strip(): row["value"].strip() for row in context.table}
    context.response = context.client.patch(
        _url(context, f"/questionnaires/{_token(context)}"),
        json={"responses": responses},
        headers=_headers(user),
    )


@when('user "{user}" submits the completed questionnaire')
def step_submit_complete(context, user: str) -> None:
    _submit(context, user, _completed_answers())


@when('user "{user}" submits the questionnaire with no answers')
def step_submit_empty(context, user: str) -> None:
    _submit(context, user, {})


# ------------------
# Then
# ------------------


@then("the response status is {status:d}")
def step_status(context, status: int) -> None:
    assert context.response.status_code == status, (
        f"expected {status}, got {context.response.status_code}: {context.response.text}"
    )


@then('the response field "{path}" equals "{expected}"')
def step_field_equals(context, path: str, expected: str) -> None:
    value: Any = context.response.json()
    for part in path.split("."):
        assert isinstance(value, dict) and part in value, f"missing {path}"
        value = value[part]
    assert str(value) == expected, f"{path}={value!r}"


@then('the visible sections are "{sections}"')
def step_sections(context, sections: str) -> None:
    expected = [s.strip() for s in sections.split(",")]
    assert [s["id"] for s in context.response.json()["sections"]] == expected


@then('the problem code is "{code}"')
def step_problem_code(context, code: str) -> None:
    assert context.response.headers["content-type"].startswith("application/problem+json")
    body = context.response.json()
    errors = list(Draft202012Validator(_PROBLEM_SCHEMA).iter_errors(body))
    assert not errors, errors
    assert body["code"] == code


@then('the blocking items include "{question_id}"')
def step_blocking_item(context, question_id: str) -> None:
    items = context.response.json().get("blocking_items") or []
    assert question_id in {i["question_id"] for i in items}, items


@then('the questionnaire status is "{status}"')
def step_questionnaire_status(context, status: str) -> None:
    assert _questionnaire_row(context)["status"] == status


@then('the companion task is "{status}"')
def step_task_status(context, status: str) -> None:
    qid = _questionnaire_row(context)["id"]
    with transaction(context.engine) as conn:
        rows = conn.execute(
            sql_text("SELECT status FROM pending_tasks WHERE reference_id = :rid"), {"rid": qid}
        ).scalars().all()
    assert list(rows) == [status]


@then('the business for the order is named "{legal_name}"')
def step_business_name(context, legal_name: str) -> None:
    with transaction(context.engine) as conn:
        business = get_business_by_order(conn, context.order.id)
    assert business is not None
    assert business["legal_name"] == legal_name


@then("the business for the order has {count:d} member owning {pct:d} percent")
def step_business_members(context, count: int, pct: int) -> None:
    with transaction(context.engine) as conn:
        business = get_business_by_order(conn, context.order.id)
        members = list_members(conn, business["id"])
    assert len(members) == count
    assert sum(float(m["ownership_percentage"]) for m in members) == float(pct)
