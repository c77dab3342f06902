"""Functional tests for submission and its fan-out into downstream records.

The pure mapping tables are exercised directly; the transactional fan-out is
exercised end to end through `submit_questionnaire` on SQLite.
"""

from __future__ import annotations

import pytest
from sqlalchemy import text

from llc_questionnaire.config import AppConfig, DatabaseConfig, SubmissionConfig
from llc_questionnaire.db.base import transaction
from llc_questionnaire.logic import events
from llc_questionnaire.logic.errors import TransactionFailed, ValidationFailed
from llc_questionnaire.logic.lifecycle import (
    create_questionnaire_for_order,
    save_questionnaire_progress,
    submit_questionnaire,
)
from llc_questionnaire.logic.repository_businesses import get_business_by_order, insert_member, list_members
from llc_questionnaire.logic.repository_operating_agreements import get_by_order as get_agreement
from llc_questionnaire.logic.repository_questionnaires import get_by_order_id
from llc_questionnaire.logic.submission_mapper import (
    build_member_rows,
    map_business_display_fields,
    map_distribution_frequency,
    map_responses_to_operating_agreement,
    map_tax_classification,
    resolve_is_single_member,
)

OWNER = "user-owner-1"

EIN_ANSWERS = {
    "tax_classification": "default",
    "fiscal_year_end": "december_31",
    "responsible_party_ssn": "123-45-6789",
    "expect_employees": "no",
}
OA_ANSWERS = {"distribution_schedule": "quarterly", "allow_new_members": "yes_majority"}


# -----------------------------
# Pure mapping tables
# -----------------------------


@pytest.mark.parametrize(
    "value,expected",
    [("as_determined", "AS_DECIDED"), ("quarterly", "QUARTERLY"), ("annually", "ANNUALLY"),
     ("monthly", "MONTHLY"), ("weekly", "AS_DECIDED"), (None, "AS_DECIDED")],
)
def test_distribution_frequency_table(value, expected) -> None:
    assert map_distribution_frequency(value) == expected


def test_tax_classification_table() -> None:
    assert map_tax_classification("s_corp", True) == "S_CORPORATION"
    assert map_tax_classification("c_corp", False) == "C_CORPORATION"
    assert map_tax_classification("default", True) == "DISREGARDED_ENTITY"
    assert map_tax_classification(None, False) == "PARTNERSHIP"


def test_single_member_derivation(member_factory) -> None:
    one = [member_factory("Jane Doe", 100)]
    two = [member_factory("Jane Doe", 50), member_factory("John Roe", 50)]
    assert resolve_is_single_member({"member_count": "multi", "member_list": one}) is True
    assert resolve_is_single_member({"member_count": "single", "member_list": []}) is True
    assert resolve_is_single_member({"member_count": "single", "member_list": two}) is False
    assert resolve_is_single_member({"member_count": "multi", "member_list": two}) is False


def test_operating_agreement_mapping(member_factory) -> None:
    fields = map_responses_to_operating_agreement(
        {
            "member_count": "multi",
            "member_list": [member_factory("A One", 50), member_factory("B Two", 50)],
            "management_type": "manager_managed",
            "profit_allocation": "equal",
            "distribution_schedule": "monthly",
            "tax_classification": "default",
            "fiscal_year_end": "other",
            "allow_transfer": "yes_rofr",
            "business_purpose": "Consulting",
        }
    )
    assert fields == {
        "member_count": 2,
        "is_single_member": False,
        "management_type": "MANAGER_MANAGED",
        "profit_dist_method": "EQUAL_SHARES",
        "dist_frequency": "MONTHLY",
        "tax_classification": "PARTNERSHIP",
        "fiscal_year_end": "CUSTOM",
        "allow_member_transfer": True,
        "right_of_first_refusal": True,
        "principal_activity": "Consulting",
    }


def test_operating_agreement_defaults_for_empty_answers() -> None:
    fields = map_responses_to_operating_agreement({})
    assert fields["member_count"] == 1
    assert fields["is_single_member"] is True
    assert fields["management_type"] == "MEMBER_MANAGED"
    assert fields["profit_dist_method"] == "PROPORTIONAL"
    assert fields["fiscal_year_end"] == "CUSTOM"
    assert fields["tax_classification"] == "DISREGARDED_ENTITY"
    assert fields["allow_member_transfer"] is True
    assert fields["right_of_first_refusal"] is False


@pytest.mark.parametrize(
    "answer,expected", [("december_31", "DECEMBER"), ("other", "CUSTOM"), ("", "CUSTOM"), (None, "CUSTOM")]
)
def test_fiscal_year_end_is_december_only_when_answered(answer, expected) -> None:
    responses = {} if answer is None else {"fiscal_year_end": answer}
    assert map_responses_to_operating_agreement(responses)["fiscal_year_end"] == expected


def test_display_fields_skip_empty_values() -> None:
    fields = map_business_display_fields(
        {"business_name": "Bright", "business_address": {"street": "", "city": "Reno", "state": "NV", "zipCode": None}}
    )
    assert fields == {"name": "Bright", "legal_name": "Bright LLC", "business_city": "Reno", "business_state": "NV"}


def test_member_rows_default_to_equal_split(member_factory) -> None:
    rows = build_member_rows(
        {"member_list": [member_factory("A One", None), member_factory("B Two", ""), member_factory("C Three", None)]}
    )
    assert [r["role"] for r in rows] == ["OWNER", "MEMBER", "MEMBER"]
    assert sum(r["ownership_percentage"] for r in rows) == pytest.approx(100.0)
    assert all(r["can_view_documents"] and not r["can_invite_members"] for r in rows)


# -----------------------------
# Submission end to end
# -----------------------------


def _create(engine, app_config, seed_order, fixed_now, **order_flags):
    order = seed_order(**order_flags)
    instance, _ = create_questionnaire_for_order(order, engine=engine, config=app_config, now=fixed_now)
    events.get_buffered_events(clear=True)
    return instance


def _members(engine, order_id="order-1"):
    with transaction(engine) as conn:
        business = get_business_by_order(conn, order_id)
        return business, list_members(conn, business["id"])


def test_single_member_submission(engine, app_config, seed_order, fixed_now, answers_factory) -> None:
    instance = _create(engine, app_config, seed_order, fixed_now, need_ein=True, need_operating_agreement=True)

    result = submit_questionnaire(
        instance.access_token,
        OWNER,
        answers_factory(business_name="Bright Path", **EIN_ANSWERS, **OA_ANSWERS),
        engine=engine,
        config=app_config,
        now=fixed_now,
    )

    assert result.success is True
    assert result.completed_at == fixed_now.isoformat()
    business, members = _members(engine)
    assert business["name"] == "Bright Path"
    assert business["legal_name"] == "Bright Path LLC"
    assert business["status"] == "PENDING"
    assert len(members) == 1
    owner = members[0]
    assert owner["name"] == "Jane Doe"
    assert owner["user_id"] is None
    assert owner["ownership_percentage"] == 100.0
    assert all(owner[k] for k in ("can_view_documents", "can_upload_documents", "can_manage_services", "can_invite_members"))

    with transaction(engine) as conn:
        agreement = get_agreement(conn, "order-1")
        stored = get_by_order_id(conn, "order-1")
        task_status = conn.execute(
            text("SELECT status FROM pending_tasks WHERE reference_id = :rid"), {"rid": instance.id}
        ).scalar_one()
    assert agreement["is_single_member"] is True
    assert agreement["member_count"] == 1
    assert agreement["tax_classification"] == "DISREGARDED_ENTITY"
    assert agreement["dist_frequency"] == "QUARTERLY"
    assert agreement["is_completed"] is True
    assert stored.status == "COMPLETED"
    assert stored.completed_at == fixed_now
    assert task_status == "COMPLETED"
    assert [e["type"] for e in events.get_buffered_events()] == [events.QUESTIONNAIRE_SUBMITTED]


def test_two_members_sixty_forty_without_operating_agreement(
    engine, app_config, seed_order, fixed_now, answers_factory, member_factory
) -> None:
    instance = _create(engine, app_config, seed_order, fixed_now, need_ein=True, registered_agent=True)

    submit_questionnaire(
        instance.access_token,
        OWNER,
        answers_factory(
            member_count="multi",
            member_list=[member_factory("Alice Smith", 60), member_factory("Bob Jones", 40)],
            **EIN_ANSWERS,
        ),
        engine=engine,
        config=app_config,
        now=fixed_now,
    )

    _business, members = _members(engine)
    # The unlinked placeholder owner is replaced by the listed members
    assert [(m["name"], m["role"], m["ownership_percentage"], m["user_id"]) for m in members] == [
        ("Alice Smith", "OWNER", 60.0, None),
        ("Bob Jones", "MEMBER", 40.0, None),
    ]
    assert sum(m["ownership_percentage"] for m in members) == pytest.approx(100.0)
    assert all(not m["can_upload_documents"] and m["can_view_documents"] for m in members)
    with transaction(engine) as conn:
        assert get_agreement(conn, "order-1") is None


def test_linked_member_preserved_and_matched_by_name(
    engine, app_config, seed_order, fixed_now, answers_factory, member_factory
) -> None:
    instance = _create(engine, app_config, seed_order, fixed_now)
    business, _ = _members(engine)
    with transaction(engine) as conn:
        insert_member(
            conn,
            business["id"],
            {"name": "Jane Doe", "user_id": OWNER, "role": "OWNER", "ownership_percentage": 100,
             "can_upload_documents": True, "can_manage_services": True, "can_invite_members": True},
            fixed_now,
        )
        insert_member(conn, business["id"], {"name": "Stale Entry", "role": "MEMBER", "ownership_percentage": 10}, fixed_now)

    submit_questionnaire(
        instance.access_token,
        OWNER,
        answers_factory(
            member_count="multi",
            member_list=[member_factory("jane  doe", 70), member_factory("Bob Jones", 30)],
        ),
        engine=engine,
        config=app_config,
        now=fixed_now,
    )

    _business, members = _members(engine)
    names = [m["name"] for m in members]
    assert "Stale Entry" not in names
    assert len(members) == 2
    linked = next(m for m in members if m["user_id"] == OWNER)
    assert linked["name"] == "Jane Doe"
    assert linked["ownership_percentage"] == 70.0
    assert linked["can_invite_members"] is True
    assert [(m["name"], m["position"]) for m in members] == [("Jane Doe", 0), ("Bob Jones", 1)]


def test_manager_managed_promotes_and_creates_managers(
    engine, app_config, seed_order, fixed_now, answers_factory, member_factory
) -> None:
    instance = _create(engine, app_config, seed_order, fixed_now)
    managers = [
        {"manager_name": " alice SMITH ", "manager_street": "1 A St", "manager_city": "Austin",
         "manager_state": "TX", "manager_zip": "73301"},
        {"manager_name": "Outside Manager", "manager_street": "2 B St", "manager_city": "Dallas",
         "manager_state": "TX", "manager_zip": "75001"},
    ]

    submit_questionnaire(
        instance.access_token,
        OWNER,
        answers_factory(
            member_count="multi",
            member_list=[member_factory("Alice Smith", 50), member_factory("Bob Jones", 50)],
            management_type="manager_managed",
            managers=managers,
        ),
        engine=engine,
        config=app_config,
        now=fixed_now,
    )

    _business, members = _members(engine)
    by_name = {m["name"]: m for m in members}
    assert by_name["Alice Smith"]["role"] == "MANAGER"
    assert by_name["Alice Smith"]["ownership_percentage"] == 50.0
    outside = by_name["Outside Manager"]
    assert outside["role"] == "MANAGER"
    assert outside["ownership_percentage"] == 0.0
    assert (outside["can_view_documents"], outside["can_upload_documents"], outside["can_manage_services"],
            outside["can_invite_members"]) == (True, True, True, False)
    assert by_name["Bob Jones"]["role"] == "MEMBER"
    assert [m["position"] for m in members] == [0, 1, 2]


def test_gate_blocks_incomplete_submission(engine, app_config, seed_order, fixed_now) -> None:
    instance = _create(engine, app_config, seed_order, fixed_now)

    with pytest.raises(ValidationFailed) as info:
        submit_questionnaire(instance.access_token, OWNER, {}, engine=engine, config=app_config, now=fixed_now)

    ids = {i["question_id"] for i in info.value.blocking_items}
    assert {"mailing_address_same", "member_count", "management_type", "confirmation", "terms_agreement"} <= ids
    assert "mailing_address" not in ids
    with transaction(engine) as conn:
        assert get_by_order_id(conn, "order-1").status == "NOT_STARTED"


def test_gate_can_be_disabled(engine, db_url, seed_order, fixed_now) -> None:
    cfg = AppConfig(database=DatabaseConfig(dsn=db_url), submission=SubmissionConfig(enforce_required=False))
    instance = _create(engine, cfg, seed_order, fixed_now)
    result = submit_questionnaire(instance.access_token, OWNER, {}, engine=engine, config=cfg, now=fixed_now)
    assert result.success is True


@pytest.mark.parametrize("saved_first,expected_status", [(False, "NOT_STARTED"), (True, "IN_PROGRESS")])
def test_fanout_failure_rolls_back_everything(
    engine, app_config, seed_order, fixed_now, answers_factory, mocker, saved_first, expected_status
) -> None:
    instance = _create(engine, app_config, seed_order, fixed_now, need_operating_agreement=True)
    if saved_first:
        save_questionnaire_progress(instance.access_token, OWNER, {"member_count": "single"}, engine=engine, now=fixed_now)
        events.get_buffered_events(clear=True)
    mocker.patch(
        "llc_questionnaire.logic.submission_mapper.agreements.upsert_for_order",
        side_effect=RuntimeError("disk full"),
    )

    with pytest.raises(TransactionFailed) as info:
        submit_questionnaire(
            instance.access_token,
            OWNER,
            answers_factory(business_name="Never Saved", **OA_ANSWERS),
            engine=engine,
            config=app_config,
            now=fixed_now,
        )

    assert isinstance(info.value.__cause__, RuntimeError)
    with transaction(engine) as conn:
        stored = get_by_order_id(conn, "order-1")
        business = get_business_by_order(conn, "order-1")
        task_status = conn.execute(
            text("SELECT status FROM pending_tasks WHERE reference_id = :rid"), {"rid": instance.id}
        ).scalar_one()
    assert stored.status == expected_status
    assert stored.completed_at is None
    assert business["name"] == "Acme Ventures"
    assert task_status == ("IN_PROGRESS" if saved_first else "PENDING")
    assert events.get_buffered_events() == []


def test_submit_creates_missing_business_profile(engine, app_config, seed_order, fixed_now, answers_factory) -> None:
    instance = _create(engine, app_config, seed_order, fixed_now)
    with transaction(engine) as conn:
        conn.execute(text("DELETE FROM business_members"))
        conn.execute(text("DELETE FROM businesses"))

    submit_questionnaire(instance.access_token, OWNER, answers_factory(), engine=engine, config=app_config, now=fixed_now)

    business, members = _members(engine)
    assert business["owner_id"] == OWNER
    assert business["legal_name"] == "Acme Ventures LLC"
    assert [(m["name"], m["role"]) for m in members] == [("Jane Doe", "OWNER")]


def test_address_state_does_not_overwrite_formation_state(
    engine, app_config, seed_order, fixed_now, answers_factory
) -> None:
    instance = _create(engine, app_config, seed_order, fixed_now, formation_state="DE")
    address = {"street": "5 Elm St", "city": "Dallas", "state": "TX", "zipCode": "75001"}

    submit_questionnaire(
        instance.access_token,
        OWNER,
        answers_factory(business_address=address),
        engine=engine,
        config=app_config,
        now=fixed_now,
    )

    business, _ = _members(engine)
    assert business["state"] == "DE"
    assert (business["business_address"], business["business_city"], business["business_state"],
            business["business_zip"]) == ("5 Elm St", "Dallas", "TX", "75001")


def test_member_positions_follow_preserved_rows(
    engine, app_config, seed_order, fixed_now, answers_factory, member_factory
) -> None:
    instance = _create(engine, app_config, seed_order, fixed_now)
    business, _ = _members(engine)
    with transaction(engine) as conn:
        insert_member(
            conn, business["id"], {"name": "Portal User", "user_id": "user-linked-9", "position": 3}, fixed_now
        )

    submit_questionnaire(
        instance.access_token,
        OWNER,
        answers_factory(
            member_count="multi",
            member_list=[member_factory("Alice Smith", 50), member_factory("Bob Jones", 50)],
            management_type="manager_managed",
            managers=[{"manager_name": "Outside Manager", "manager_street": "2 B St", "manager_city": "Dallas",
                       "manager_state": "TX", "manager_zip": "75001"}],
        ),
        engine=engine,
        config=app_config,
        now=fixed_now,
    )

    _business, members = _members(engine)
    assert [(m["name"], m["position"]) for m in members] == [
        ("Portal User", 3),
        ("Alice Smith", 4),
        ("Bob Jones", 5),
        ("Outside Manager", 6),
    ]
