"""Order data access helpers.

Orders are owned by checkout; the questionnaire only reads them. The insert
helper exists for seeding in development and tests.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from llc_questionnaire.models.order import OrderRecord

_ORDER_COLUMNS = tuple(OrderRecord.model_fields.keys())
_BOOL_COLUMNS = {
    "need_ein",
    "need_operating_agreement",
    "need_bank_letter",
    "registered_agent",
    "compliance",
}


def get_order(conn: Connection, order_id: str) -> Optional[OrderRecord]:
    row = conn.execute(
        sql_text(f"SELECT {', '.join(_ORDER_COLUMNS)} FROM orders WHERE id = :id"),
        {"id": order_id},
    ).mappings().fetchone()
    if row is None:
        return None
    data = dict(row)
    for col in _BOOL_COLUMNS:
        data[col] = bool(data.get(col))
    return OrderRecord.model_validate(data)


def insert_order(conn: Connection, order: OrderRecord) -> None:
    cols = ", ".join(_ORDER_COLUMNS)
    params = ", ".join(f":{c}" for c in _ORDER_COLUMNS)
    conn.execute(sql_text(f"INSERT INTO orders ({cols}) VALUES ({params})"), order.model_dump())


__all__ = ["get_order", "insert_order"]
