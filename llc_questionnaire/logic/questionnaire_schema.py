"""Loaded questionnaire schema and lookup helpers.

The plain-data definition is parsed into Section models once per process and
returned sorted by section `order`.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Tuple

from llc_questionnaire.logic.schema_definition import SCHEMA_DEFINITION
from llc_questionnaire.models.questionnaire_schema import Question, Section

logger = logging.getLogger(__name__)


class SchemaDefinitionError(ValueError):
    pass


def build_schema(definition: Iterable[Dict[str, Any]]) -> Tuple[Section, ...]:
    """Parse and check a schema definition.

    Raises SchemaDefinitionError when section orders or question ids repeat,
    since both are used as unique keys.
    """
    sections = [Section.model_validate(raw) for raw in definition]
    orders = [s.order for s in sections]
    if len(orders) != len(set(orders)):
        raise SchemaDefinitionError("section order values must be unique")
    seen: set[str] = set()
    for section in sections:
        for question in section.questions:
            if question.id in seen:
                raise SchemaDefinitionError(f"duplicate question id: {question.id}")
            seen.add(question.id)
    return tuple(sorted(sections, key=lambda s: s.order))


@lru_cache(maxsize=1)
def get_schema() -> Tuple[Section, ...]:
    schema = build_schema(SCHEMA_DEFINITION)
    logger.info(
        "questionnaire_schema_loaded sections=%d questions=%d",
        len(schema),
        sum(len(s.questions) for s in schema),
    )
    return schema


def iter_questions(sections: Iterable[Section] | None = None) -> Iterable[Tuple[Section, Question]]:
    for section in sections if sections is not None else get_schema():
        for question in section.questions:
            yield section, question


def get_section(section_id: str) -> Section | None:
    for section in get_schema():
        if section.id == section_id:
            return section
    return None


def get_question(question_id: str) -> Question | None:
    for _section, question in iter_questions():
        if question.id == question_id:
            return question
    return None


def schema_as_data(sections: Iterable[Section] | None = None) -> List[Dict[str, Any]]:
    """JSON-ready dump of the schema for clients."""
    return [s.model_dump(mode="json", exclude_none=True) for s in (sections if sections is not None else get_schema())]


__all__ = [
    "SchemaDefinitionError",
    "build_schema",
    "get_schema",
    "iter_questions",
    "get_section",
    "get_question",
    "schema_as_data",
]
