"""State configuration rows for a formation state (plus the `ALL` scope)."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from llc_questionnaire.logic.serialization import dumps_json, loads_json
from llc_questionnaire.logic.state_config import ALL_STATES


def list_active_configs(conn: Connection, state_code: str) -> List[Dict[str, Any]]:
    """Active rows for the state and `ALL`, oldest first so later rows win on merge."""
    rows = conn.execute(
        sql_text(
            """
            SELECT state_code, config_type, config_data, is_active
            FROM questionnaire_configs
            WHERE state_code IN (:state, :all_states) AND is_active = :active
            ORDER BY revision ASC, id ASC
            """
        ),
        {"state": state_code, "all_states": ALL_STATES, "active": True},
    ).mappings().all()
    return [
        {
            "state_code": r["state_code"],
            "config_type": r["config_type"],
            "config_data": loads_json(r["config_data"], {}),
            "is_active": bool(r["is_active"]),
        }
        for r in rows
    ]


def insert_config(conn: Connection, state_code: str, config_type: str, config_data: Any, is_active: bool = True) -> str:
    config_id = str(uuid.uuid4())
    conn.execute(
        sql_text(
            "INSERT INTO questionnaire_configs (id, state_code, config_type, config_data, is_active, revision) "
            "SELECT :id, :state, :ctype, :data, :active, COALESCE(MAX(revision), 0) + 1 FROM questionnaire_configs"
        ),
        {"id": config_id, "state": state_code, "ctype": config_type, "data": dumps_json(config_data), "active": is_active},
    )
    return config_id


__all__ = ["list_active_configs", "insert_config"]
