"""State configuration merge.

Rows scoped to `ALL` apply first, then rows for the specific state; the last
writer wins per `config_type`.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

ALL_STATES = "ALL"


def merge_state_config(state_code: str, rows: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    rows = [r for r in rows if r.get("is_active", True)]
    result: Dict[str, Any] = {"state_code": state_code}
    for row in rows:
        if row.get("state_code") == ALL_STATES:
            result[str(row["config_type"])] = row.get("config_data")
    for row in rows:
        if row.get("state_code") == state_code and state_code != ALL_STATES:
            result[str(row["config_type"])] = row.get("config_data")
    return result


__all__ = ["ALL_STATES", "merge_state_config"]
