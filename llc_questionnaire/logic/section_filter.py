"""Visible subset of the questionnaire for the current products and answers.

Re-evaluated on every call; responses change between calls, so nothing is
cached. Declaration order is preserved and never re-sorted here.
"""

from __future__ import annotations

from typing import Any, Collection, Dict, Iterable, List, Mapping

from llc_questionnaire.logic.visibility_rules import evaluate_condition
from llc_questionnaire.models.questionnaire_schema import MemberField, Question, Section

_NO_PRODUCTS: frozenset[str] = frozenset()


def visible_sections(
    sections: Iterable[Section],
    active_products: Collection[str],
    responses: Mapping[str, Any],
) -> List[Section]:
    return [s for s in sections if evaluate_condition(s.visibility, active_products, responses)]


def visible_questions(
    section: Section,
    active_products: Collection[str],
    responses: Mapping[str, Any],
) -> List[Question]:
    return [q for q in section.questions if evaluate_condition(q.visibility, active_products, responses)]


def visible_member_fields(question: Question, entry: Mapping[str, Any] | None) -> List[MemberField]:
    """Member fields visible for one repeatable entry.

    Conditions are evaluated against the entry's own answers only.
    """
    local = entry if isinstance(entry, Mapping) else {}
    return [f for f in (question.member_fields or []) if evaluate_condition(f.visibility, _NO_PRODUCTS, local)]


def assemble_visible_sections(
    sections: Iterable[Section],
    active_products: Collection[str],
    responses: Mapping[str, Any],
) -> List[Dict[str, Any]]:
    """JSON-ready visible sections, each carrying only its visible questions."""
    out: List[Dict[str, Any]] = []
    for section in visible_sections(sections, active_products, responses):
        data = section.model_dump(mode="json", exclude_none=True, exclude={"questions"})
        data["questions"] = [
            q.model_dump(mode="json", exclude_none=True)
            for q in visible_questions(section, active_products, responses)
        ]
        out.append(data)
    return out


__all__ = [
    "visible_sections",
    "visible_questions",
    "visible_member_fields",
    "assemble_visible_sections",
]
