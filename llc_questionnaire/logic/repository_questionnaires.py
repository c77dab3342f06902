"""Questionnaire instance data access helpers.

Instances are unique on `order_id` and on `access_token`. All helpers take an
open Connection so callers control the transaction boundary.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from llc_questionnaire.logic.serialization import dumps_json, from_iso, loads_json, to_iso
from llc_questionnaire.models.questionnaire import QuestionnaireInstance

_SELECT = """
    SELECT id, order_id, user_id, state_code, products, pre_populated_data,
           responses, status, current_section, access_token, token_expires_at,
           last_saved_at, completed_at, created_at
    FROM questionnaire_responses
"""


def _row_to_instance(row: Any) -> QuestionnaireInstance:
    return QuestionnaireInstance(
        id=str(row["id"]),
        order_id=str(row["order_id"]),
        user_id=str(row["user_id"]),
        state_code=str(row["state_code"]),
        products=loads_json(row["products"], []),
        pre_populated_data=loads_json(row["pre_populated_data"], {}),
        responses=loads_json(row["responses"], {}),
        status=str(row["status"]),
        current_section=row["current_section"],
        access_token=str(row["access_token"]),
        token_expires_at=from_iso(row["token_expires_at"]),
        last_saved_at=from_iso(row["last_saved_at"]),
        completed_at=from_iso(row["completed_at"]),
        created_at=from_iso(row["created_at"]),
    )


def get_by_order_id(conn: Connection, order_id: str) -> Optional[QuestionnaireInstance]:
    row = conn.execute(sql_text(_SELECT + " WHERE order_id = :oid"), {"oid": order_id}).mappings().fetchone()
    return _row_to_instance(row) if row else None


def get_by_token(conn: Connection, access_token: str) -> Optional[QuestionnaireInstance]:
    row = conn.execute(sql_text(_SELECT + " WHERE access_token = :tok"), {"tok": access_token}).mappings().fetchone()
    return _row_to_instance(row) if row else None


def insert_instance(conn: Connection, instance: QuestionnaireInstance) -> None:
    conn.execute(
        sql_text(
            """
            INSERT INTO questionnaire_responses (
                id, order_id, user_id, state_code, products, pre_populated_data,
                responses, status, current_section, access_token, token_expires_at,
                last_saved_at, completed_at, created_at
            ) VALUES (
                :id, :order_id, :user_id, :state_code, :products, :pre_populated_data,
                :responses, :status, :current_section, :access_token, :token_expires_at,
                :last_saved_at, :completed_at, :created_at
            )
            """
        ),
        {
            "id": instance.id,
            "order_id": instance.order_id,
            "user_id": instance.user_id,
            "state_code": instance.state_code,
            "products": dumps_json(instance.products),
            "pre_populated_data": dumps_json(instance.pre_populated_data),
            "responses": dumps_json(instance.responses),
            "status": instance.status,
            "current_section": instance.current_section,
            "access_token": instance.access_token,
            "token_expires_at": to_iso(instance.token_expires_at),
            "last_saved_at": to_iso(instance.last_saved_at),
            "completed_at": to_iso(instance.completed_at),
            "created_at": to_iso(instance.created_at),
        },
    )


def update_progress(
    conn: Connection,
    instance_id: str,
    responses: Dict[str, Any],
    status: str,
    current_section: Optional[str],
    saved_at: datetime,
) -> int:
    """Write a progress save; returns the number of rows changed.

    A completed instance is never touched, so a save that raced a submit
    changes nothing.
    """
    result = conn.execute(
        sql_text(
            """
            UPDATE questionnaire_responses
            SET responses = :responses,
                status = :status,
                current_section = :current_section,
                last_saved_at = :saved_at
            WHERE id = :id AND status <> 'COMPLETED'
            """
        ),
        {
            "id": instance_id,
            "responses": dumps_json(responses),
            "status": status,
            "current_section": current_section,
            "saved_at": to_iso(saved_at),
        },
    )
    return int(result.rowcount or 0)


def mark_completed(conn: Connection, instance_id: str, responses: Dict[str, Any], completed_at: datetime) -> int:
    """Set the terminal state; returns the number of rows changed.

    The status guard makes a concurrent second completion change nothing.
    """
    result = conn.execute(
        sql_text(
            """
            UPDATE questionnaire_responses
            SET responses = :responses,
                status = 'COMPLETED',
                completed_at = :at,
                last_saved_at = :at
            WHERE id = :id AND status <> 'COMPLETED'
            """
        ),
        {"id": instance_id, "responses": dumps_json(responses), "at": to_iso(completed_at)},
    )
    return int(result.rowcount or 0)


def set_status(conn: Connection, instance_id: str, status: str) -> None:
    conn.execute(
        sql_text(
            "UPDATE questionnaire_responses SET status = :status "
            "WHERE id = :id AND status <> 'COMPLETED'"
        ),
        {"id": instance_id, "status": status},
    )


__all__ = [
    "get_by_order_id",
    "get_by_token",
    "insert_instance",
    "update_progress",
    "mark_completed",
    "set_status",
]
