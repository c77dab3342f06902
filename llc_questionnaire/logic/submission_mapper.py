"""Fan-out of a completed questionnaire into downstream domain records.

The mapping helpers are pure functions of the final response map. The
`apply_submission_fanout` entry point runs them against an open Connection
and must be called inside the submit transaction: business profile display
fields, the member list, manager roles and the operating-agreement
configuration are written together or not at all.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Collection, Dict, List, Mapping, Optional

from sqlalchemy.engine import Connection

from llc_questionnaire.logic import repository_businesses as businesses
from llc_questionnaire.logic import repository_operating_agreements as agreements
from llc_questionnaire.models.questionnaire import QuestionnaireInstance

logger = logging.getLogger(__name__)

OPERATING_AGREEMENT_PRODUCT = "operating_agreement"

ROLE_OWNER = "OWNER"
ROLE_MEMBER = "MEMBER"
ROLE_MANAGER = "MANAGER"

_DIST_FREQUENCY = {
    "as_determined": "AS_DECIDED",
    "quarterly": "QUARTERLY",
    "annually": "ANNUALLY",
    "monthly": "MONTHLY",
}

_SINGLE_MEMBER_PERMISSIONS = {
    "can_view_documents": True,
    "can_upload_documents": True,
    "can_manage_services": True,
    "can_invite_members": True,
}
_MULTI_MEMBER_PERMISSIONS = {
    "can_view_documents": True,
    "can_upload_documents": False,
    "can_manage_services": False,
    "can_invite_members": False,
}
_MANAGER_PERMISSIONS = {
    "can_view_documents": True,
    "can_upload_documents": True,
    "can_manage_services": True,
    "can_invite_members": False,
}


def _non_empty(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def _entries(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [dict(e) for e in value if isinstance(e, Mapping)]


def _name_key(name: Any) -> str:
    return " ".join(str(name or "").split()).lower()


def map_distribution_frequency(value: Any) -> str:
    return _DIST_FREQUENCY.get(value, "AS_DECIDED") if isinstance(value, str) else "AS_DECIDED"


def map_tax_classification(value: Any, is_single_member: bool) -> str:
    if value == "s_corp":
        return "S_CORPORATION"
    if value == "c_corp":
        return "C_CORPORATION"
    return "DISREGARDED_ENTITY" if is_single_member else "PARTNERSHIP"


def resolve_is_single_member(responses: Mapping[str, Any]) -> bool:
    """Single-member when the list has at most one entry or the radio says so.

    A list with two or more entries wins over a `single` radio answer.
    """
    members = _entries(responses.get("member_list"))
    if len(members) > 1:
        return False
    return responses.get("member_count") == "single" or len(members) <= 1


def map_responses_to_operating_agreement(responses: Mapping[str, Any]) -> Dict[str, Any]:
    members = _entries(responses.get("member_list"))
    is_single = resolve_is_single_member(responses)
    allow_transfer = responses.get("allow_transfer")
    return {
        "member_count": len(members) or 1,
        "is_single_member": is_single,
        "management_type": (
            "MANAGER_MANAGED" if responses.get("management_type") == "manager_managed" else "MEMBER_MANAGED"
        ),
        "profit_dist_method": "EQUAL_SHARES" if responses.get("profit_allocation") == "equal" else "PROPORTIONAL",
        "dist_frequency": map_distribution_frequency(responses.get("distribution_schedule")),
        "tax_classification": map_tax_classification(responses.get("tax_classification"), is_single),
        "fiscal_year_end": "DECEMBER" if responses.get("fiscal_year_end") == "december_31" else "CUSTOM",
        "allow_member_transfer": allow_transfer != "no",
        "right_of_first_refusal": allow_transfer == "yes_rofr",
        "principal_activity": responses.get("business_purpose"),
    }


def map_business_display_fields(responses: Mapping[str, Any]) -> Dict[str, Any]:
    """Display fields for the business profile; empty answers are left out.

    The address state goes to `business_state`; the formation state is not a
    display field.
    """
    fields: Dict[str, Any] = {}
    name = responses.get("business_name")
    if _non_empty(name):
        fields["name"] = str(name).strip()
        fields["legal_name"] = f"{str(name).strip()} LLC"
    address = responses.get("business_address")
    if isinstance(address, Mapping):
        for src, dest in (
            ("street", "business_address"),
            ("city", "business_city"),
            ("state", "business_state"),
            ("zipCode", "business_zip"),
        ):
            if _non_empty(address.get(src)):
                fields[dest] = address.get(src)
    return fields


def _parse_percentage(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def build_member_rows(responses: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Member records for the `member_list` answer.

    Missing ownership defaults to an equal split. A single member gets full
    permissions; with several members everyone starts view-only.
    """
    entries = [e for e in _entries(responses.get("member_list")) if _non_empty(e.get("full_name"))]
    count = len(entries)
    if count == 0:
        return []
    equal_share = 100.0 / count
    permissions = _SINGLE_MEMBER_PERMISSIONS if count == 1 else _MULTI_MEMBER_PERMISSIONS
    rows: List[Dict[str, Any]] = []
    for position, entry in enumerate(entries):
        pct = _parse_percentage(entry.get("ownership_percentage"))
        rows.append(
            {
                "name": str(entry.get("full_name")).strip(),
                "email": entry.get("email"),
                "phone": entry.get("phone"),
                "member_type": entry.get("member_type") or "individual",
                "role": ROLE_OWNER if position == 0 else ROLE_MEMBER,
                "ownership_percentage": equal_share if pct is None else pct,
                "street_address": entry.get("street_address"),
                "city": entry.get("city"),
                "state": entry.get("state"),
                "zip_code": entry.get("zip_code"),
                "position": position,
                **permissions,
            }
        )
    return rows


def build_manager_rows(responses: Mapping[str, Any]) -> List[Dict[str, Any]]:
    if responses.get("management_type") != "manager_managed":
        return []
    rows: List[Dict[str, Any]] = []
    for entry in _entries(responses.get("managers")):
        if not _non_empty(entry.get("manager_name")):
            continue
        rows.append(
            {
                "name": str(entry.get("manager_name")).strip(),
                "member_type": "individual",
                "role": ROLE_MANAGER,
                "ownership_percentage": 0.0,
                "street_address": entry.get("manager_street"),
                "city": entry.get("manager_city"),
                "state": entry.get("manager_state"),
                "zip_code": entry.get("manager_zip"),
                **_MANAGER_PERMISSIONS,
            }
        )
    return rows


def _ensure_business(conn: Connection, instance: QuestionnaireInstance, responses: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    business = businesses.get_business_by_order(conn, instance.order_id)
    if business is not None:
        return business
    name = str(responses.get("business_name") or "").strip()
    logger.warning("fanout_business_missing order_id=%s; creating", instance.order_id)
    return businesses.create_business(
        conn,
        {
            "owner_id": instance.user_id,
            "order_id": instance.order_id,
            "name": name,
            "legal_name": f"{name} LLC" if name else None,
            "state": instance.state_code,
            "status": "PENDING",
        },
        now,
    )


def _next_position(members: List[Dict[str, Any]]) -> int:
    return max((int(m["position"] or 0) for m in members), default=-1) + 1


def _replace_members(conn: Connection, business_id: str, member_rows: List[Dict[str, Any]], now: datetime) -> Dict[str, int]:
    """Recreate the member list, keeping rows linked to a portal account.

    New rows are positioned after the preserved ones.
    """
    businesses.delete_unlinked_members(conn, business_id)
    preserved = businesses.list_members(conn, business_id)
    linked = {_name_key(m["name"]): m for m in preserved}
    next_position = _next_position(preserved)
    created = 0
    for row in member_rows:
        keep = linked.get(_name_key(row["name"]))
        if keep is not None:
            businesses.update_member_ownership(conn, keep["id"], row["ownership_percentage"])
            continue
        businesses.insert_member(conn, business_id, {**row, "position": next_position}, now)
        next_position += 1
        created += 1
    return {"created": created, "preserved": len(linked)}


def _apply_managers(conn: Connection, business_id: str, manager_rows: List[Dict[str, Any]], now: datetime) -> Dict[str, int]:
    promoted = created = 0
    for row in manager_rows:
        members = businesses.list_members(conn, business_id)
        match = {_name_key(m["name"]): m for m in members}.get(_name_key(row["name"]))
        if match is not None:
            if match["role"] != ROLE_MANAGER:
                businesses.set_member_role(conn, match["id"], ROLE_MANAGER)
            promoted += 1
            continue
        businesses.insert_member(conn, business_id, {**row, "position": _next_position(members)}, now)
        created += 1
    return {"promoted": promoted, "created": created}


def apply_submission_fanout(
    conn: Connection,
    instance: QuestionnaireInstance,
    responses: Mapping[str, Any],
    active_products: Collection[str],
    now: datetime,
) -> Dict[str, Any]:
    """Write every downstream record derived from the final responses.

    Runs on the caller's transaction; any exception propagates so the caller
    rolls back. The business status is never changed here.
    """
    business = _ensure_business(conn, instance, responses, now)
    businesses.update_business_fields(
        conn, business["id"], map_business_display_fields(responses), now
    )

    member_summary = _replace_members(conn, business["id"], build_member_rows(responses), now)
    manager_summary = _apply_managers(conn, business["id"], build_manager_rows(responses), now)

    agreement_created: Optional[bool] = None
    if OPERATING_AGREEMENT_PRODUCT in active_products:
        agreement_created = agreements.upsert_for_order(
            conn, instance.order_id, map_responses_to_operating_agreement(responses), now
        )

    summary = {
        "business_id": business["id"],
        "members": member_summary,
        "managers": manager_summary,
        "operating_agreement_created": agreement_created,
    }
    logger.info(
        "fanout_applied order_id=%s business_id=%s members=%s managers=%s operating_agreement=%s",
        instance.order_id,
        business["id"],
        member_summary,
        manager_summary,
        agreement_created,
    )
    return summary


__all__ = [
    "OPERATING_AGREEMENT_PRODUCT",
    "map_distribution_frequency",
    "map_tax_classification",
    "resolve_is_single_member",
    "map_responses_to_operating_agreement",
    "map_business_display_fields",
    "build_member_rows",
    "build_manager_rows",
    "apply_submission_fanout",
]
