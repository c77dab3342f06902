"""Gating verdict computation for submission.

Computes a verdict with the shape `{ ok: bool, blocking_items: [] }`. A
question blocks when it is required, visible under the current products and
responses, and has no answer. Hidden questions never block. For
`member_list` questions every entry is also checked against its own visible
required member fields.
"""

from __future__ import annotations

import logging
from typing import Any, Collection, Dict, Iterable, List, Mapping

from llc_questionnaire.logic.questionnaire_schema import get_schema
from llc_questionnaire.logic.section_filter import (
    visible_member_fields,
    visible_questions,
    visible_sections,
)
from llc_questionnaire.models.question_kind import QuestionKind
from llc_questionnaire.models.questionnaire_schema import Question, Section

logger = logging.getLogger(__name__)


def is_answered(kind: str, value: Any) -> bool:
    """Return True when `value` counts as an answer for a field of `kind`."""
    if value is None:
        return False
    if kind == QuestionKind.CHECKBOX:
        return value is True
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def _member_list_items(question: Question, entries: Any) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []
    if not isinstance(entries, list):
        return items
    for index, entry in enumerate(entries):
        local = entry if isinstance(entry, Mapping) else {}
        for field in visible_member_fields(question, local):
            if field.required and not is_answered(field.type, local.get(field.id)):
                items.append(
                    {
                        "question_id": question.id,
                        "index": index,
                        "field_id": field.id,
                        "reason": "missing_required_member_field",
                    }
                )
    return items


def evaluate_gating(
    active_products: Collection[str],
    responses: Mapping[str, Any],
    sections: Iterable[Section] | None = None,
) -> Dict[str, Any]:
    """Compute the submission verdict for the given products and responses."""
    schema = tuple(sections) if sections is not None else get_schema()
    items: List[Dict[str, Any]] = []
    for section in visible_sections(schema, active_products, responses):
        for question in visible_questions(section, active_products, responses):
            value = responses.get(question.id)
            if question.required and not is_answered(question.type, value):
                items.append(
                    {
                        "question_id": question.id,
                        "section_id": section.id,
                        "reason": "missing_required_answer",
                    }
                )
                continue
            if question.type == QuestionKind.MEMBER_LIST:
                items.extend(_member_list_items(question, value))
    ok = len(items) == 0
    logger.info(
        "gating_verdict ok=%s missing=%s",
        ok,
        [i["question_id"] if "field_id" not in i else f"{i['question_id']}[{i['index']}].{i['field_id']}" for i in items],
    )
    return {"ok": ok, "blocking_items": items}


__all__ = ["is_answered", "evaluate_gating"]
