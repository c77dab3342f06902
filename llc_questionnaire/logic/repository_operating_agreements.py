"""Operating-agreement configuration data access, one row per order."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from llc_questionnaire.logic.serialization import to_iso

AGREEMENT_FIELDS = (
    "member_count",
    "is_single_member",
    "management_type",
    "profit_dist_method",
    "dist_frequency",
    "tax_classification",
    "fiscal_year_end",
    "allow_member_transfer",
    "right_of_first_refusal",
    "principal_activity",
)
_BOOL_COLUMNS = ("is_single_member", "allow_member_transfer", "right_of_first_refusal", "is_completed")


def get_by_order(conn: Connection, order_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        sql_text(
            f"SELECT id, order_id, {', '.join(AGREEMENT_FIELDS)}, is_completed, updated_at "
            "FROM operating_agreements WHERE order_id = :oid"
        ),
        {"oid": order_id},
    ).mappings().fetchone()
    if row is None:
        return None
    data = dict(row)
    for col in _BOOL_COLUMNS:
        data[col] = bool(data.get(col))
    data["member_count"] = int(data.get("member_count") or 0)
    return data


def upsert_for_order(conn: Connection, order_id: str, fields: Mapping[str, Any], now: datetime) -> bool:
    """Create the row for `order_id` or update it in place.

    Returns True when a row was created. New rows are marked completed;
    updates leave `is_completed` as it was.
    """
    params = {c: fields.get(c) for c in AGREEMENT_FIELDS}
    params.update({"order_id": order_id, "updated_at": to_iso(now)})
    if get_by_order(conn, order_id) is not None:
        assignments = ", ".join(f"{c} = :{c}" for c in AGREEMENT_FIELDS)
        conn.execute(
            sql_text(
                f"UPDATE operating_agreements SET {assignments}, updated_at = :updated_at WHERE order_id = :order_id"
            ),
            params,
        )
        return False
    params.update({"id": str(uuid.uuid4()), "is_completed": True})
    cols = ("id", "order_id") + AGREEMENT_FIELDS + ("is_completed", "updated_at")
    conn.execute(
        sql_text(
            f"INSERT INTO operating_agreements ({', '.join(cols)}) VALUES ({', '.join(':' + c for c in cols)})"
        ),
        params,
    )
    return True


__all__ = ["AGREEMENT_FIELDS", "get_by_order", "upsert_for_order"]
