"""Pending-task sink.

The questionnaire creates its companion task and moves it through
PENDING -> IN_PROGRESS -> COMPLETED. Tasks are never read back here.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from llc_questionnaire.logic.serialization import to_iso

REFERENCE_TYPE_QUESTIONNAIRE = "questionnaire"


def create_task(
    conn: Connection,
    *,
    user_id: str,
    task_type: str,
    title: str,
    description: str,
    reference_type: str,
    reference_id: str,
    priority: str,
    status: str,
    due_date: datetime,
    action_url: str,
    created_at: datetime,
) -> str:
    task_id = str(uuid.uuid4())
    conn.execute(
        sql_text(
            """
            INSERT INTO pending_tasks (
                id, user_id, task_type, task_title, task_description, reference_type,
                reference_id, priority, status, due_date, action_url, created_at
            ) VALUES (
                :id, :user_id, :task_type, :title, :description, :reference_type,
                :reference_id, :priority, :status, :due_date, :action_url, :created_at
            )
            """
        ),
        {
            "id": task_id,
            "user_id": user_id,
            "task_type": task_type,
            "title": title,
            "description": description,
            "reference_type": reference_type,
            "reference_id": reference_id,
            "priority": priority,
            "status": status,
            "due_date": to_iso(due_date),
            "action_url": action_url,
            "created_at": to_iso(created_at),
        },
    )
    return task_id


def transition_tasks(
    conn: Connection,
    *,
    reference_type: str,
    reference_id: str,
    to_status: str,
    from_status: Optional[str] = None,
    completed_at: Optional[datetime] = None,
) -> int:
    """Move tasks for a reference to `to_status`; returns rows changed.

    When `from_status` is given only tasks currently in that status move.
    """
    sql = (
        "UPDATE pending_tasks SET status = :to_status, completed_at = COALESCE(:completed_at, completed_at) "
        "WHERE reference_type = :rtype AND reference_id = :rid"
    )
    params = {
        "to_status": to_status,
        "completed_at": to_iso(completed_at),
        "rtype": reference_type,
        "rid": reference_id,
    }
    if from_status is not None:
        sql += " AND status = :from_status"
        params["from_status"] = from_status
    result = conn.execute(sql_text(sql), params)
    return int(result.rowcount or 0)


__all__ = ["REFERENCE_TYPE_QUESTIONNAIRE", "create_task", "transition_tasks"]
