"""Business profile and membership data access helpers.

The business profile is unique per originating order. Members with a linked
`user_id` have portal access; the questionnaire never deletes them.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from llc_questionnaire.logic.serialization import to_iso

_BOOL_MEMBER_COLUMNS = (
    "can_view_documents",
    "can_upload_documents",
    "can_manage_services",
    "can_invite_members",
)

# Display fields the questionnaire may overwrite; the formation `state` is set once at creation
DISPLAY_FIELDS = ("name", "legal_name", "business_address", "business_city", "business_state", "business_zip")


def get_business_by_order(conn: Connection, order_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        sql_text(
            """
            SELECT id, owner_id, order_id, name, legal_name, entity_type, state, status,
                   business_address, business_city, business_state, business_zip, email, phone
            FROM businesses WHERE order_id = :oid
            """
        ),
        {"oid": order_id},
    ).mappings().fetchone()
    return dict(row) if row else None


def create_business(conn: Connection, data: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    """Insert a business profile unless one exists for the order.

    Returns `{**row, "created": bool}`. A concurrent insert for the same
    order surfaces as IntegrityError from the unique constraint; callers
    resolve it by re-reading after rollback.
    """
    existing = get_business_by_order(conn, str(data["order_id"]))
    if existing is not None:
        return {**existing, "created": False}
    business_id = str(uuid.uuid4())
    params = {
        "id": business_id,
        "owner_id": data["owner_id"],
        "order_id": data["order_id"],
        "name": data.get("name") or "",
        "legal_name": data.get("legal_name"),
        "entity_type": data.get("entity_type") or "LLC",
        "state": data.get("state") or "",
        "status": data.get("status") or "PENDING",
        "business_address": data.get("business_address"),
        "business_city": data.get("business_city"),
        "business_state": data.get("business_state"),
        "business_zip": data.get("business_zip"),
        "email": data.get("email"),
        "phone": data.get("phone"),
        "created_at": to_iso(now),
        "updated_at": to_iso(now),
    }
    conn.execute(
        sql_text(
            """
            INSERT INTO businesses (
                id, owner_id, order_id, name, legal_name, entity_type, state, status,
                business_address, business_city, business_state, business_zip, email, phone,
                created_at, updated_at
            ) VALUES (
                :id, :owner_id, :order_id, :name, :legal_name, :entity_type, :state, :status,
                :business_address, :business_city, :business_state, :business_zip, :email, :phone,
                :created_at, :updated_at
            )
            """
        ),
        params,
    )
    return {**get_business_by_order(conn, str(data["order_id"])), "created": True}


def update_business_fields(conn: Connection, business_id: str, fields: Mapping[str, Any], now: datetime) -> None:
    cols = [c for c in DISPLAY_FIELDS if c in fields]
    if not cols:
        return
    assignments = ", ".join(f"{c} = :{c}" for c in cols)
    params = {c: fields[c] for c in cols}
    params.update({"id": business_id, "updated_at": to_iso(now)})
    conn.execute(
        sql_text(f"UPDATE businesses SET {assignments}, updated_at = :updated_at WHERE id = :id"),
        params,
    )


def list_members(conn: Connection, business_id: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        sql_text(
            """
            SELECT id, business_id, user_id, name, email, phone, member_type, role,
                   ownership_percentage, street_address, city, state, zip_code,
                   can_view_documents, can_upload_documents, can_manage_services,
                   can_invite_members, position, created_at
            FROM business_members
            WHERE business_id = :bid
            ORDER BY position ASC, created_at ASC, id ASC
            """
        ),
        {"bid": business_id},
    ).mappings().all()
    out: List[Dict[str, Any]] = []
    for r in rows:
        member = dict(r)
        for col in _BOOL_MEMBER_COLUMNS:
            member[col] = bool(member.get(col))
        member["ownership_percentage"] = float(member.get("ownership_percentage") or 0)
        out.append(member)
    return out


def insert_member(conn: Connection, business_id: str, member: Mapping[str, Any], now: datetime) -> str:
    member_id = str(uuid.uuid4())
    conn.execute(
        sql_text(
            """
            INSERT INTO business_members (
                id, business_id, user_id, name, email, phone, member_type, role,
                ownership_percentage, street_address, city, state, zip_code,
                can_view_documents, can_upload_documents, can_manage_services,
                can_invite_members, position, created_at
            ) VALUES (
                :id, :business_id, :user_id, :name, :email, :phone, :member_type, :role,
                :ownership_percentage, :street_address, :city, :state, :zip_code,
                :can_view_documents, :can_upload_documents, :can_manage_services,
                :can_invite_members, :position, :created_at
            )
            """
        ),
        {
            "id": member_id,
            "business_id": business_id,
            "user_id": member.get("user_id"),
            "name": member.get("name") or "",
            "email": member.get("email"),
            "phone": member.get("phone"),
            "member_type": member.get("member_type") or "individual",
            "role": member.get("role") or "MEMBER",
            "ownership_percentage": float(member.get("ownership_percentage") or 0),
            "street_address": member.get("street_address"),
            "city": member.get("city"),
            "state": member.get("state"),
            "zip_code": member.get("zip_code"),
            "can_view_documents": bool(member.get("can_view_documents", True)),
            "can_upload_documents": bool(member.get("can_upload_documents", False)),
            "can_manage_services": bool(member.get("can_manage_services", False)),
            "can_invite_members": bool(member.get("can_invite_members", False)),
            "position": int(member.get("position") or 0),
            "created_at": to_iso(now),
        },
    )
    return member_id


def delete_unlinked_members(conn: Connection, business_id: str) -> int:
    result = conn.execute(
        sql_text("DELETE FROM business_members WHERE business_id = :bid AND user_id IS NULL"),
        {"bid": business_id},
    )
    return int(result.rowcount or 0)


def update_member_ownership(conn: Connection, member_id: str, ownership_percentage: float) -> None:
    conn.execute(
        sql_text("UPDATE business_members SET ownership_percentage = :pct WHERE id = :id"),
        {"id": member_id, "pct": float(ownership_percentage)},
    )


def set_member_role(conn: Connection, member_id: str, role: str) -> None:
    conn.execute(
        sql_text("UPDATE business_members SET role = :role WHERE id = :id"),
        {"id": member_id, "role": role},
    )


__all__ = [
    "DISPLAY_FIELDS",
    "get_business_by_order",
    "create_business",
    "update_business_fields",
    "list_members",
    "insert_member",
    "delete_unlinked_members",
    "update_member_ownership",
    "set_member_role",
]
