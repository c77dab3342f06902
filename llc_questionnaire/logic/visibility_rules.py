"""Visibility rule evaluation for questionnaire sections, questions and member fields.

A single recursive function decides whether a condition holds for a set of
purchased products and the current response map. Evaluation is pure and
permissive: malformed conditions and unknown operators evaluate to False and
never raise.
"""

from __future__ import annotations

import logging
from typing import Any, Collection, Mapping

from pydantic import TypeAdapter, ValidationError

from llc_questionnaire.models.visibility import (
    AlwaysCondition,
    AnswerCondition,
    CompoundCondition,
    Condition,
    ProductCondition,
)

logger = logging.getLogger(__name__)

_CONDITION_ADAPTER: TypeAdapter = TypeAdapter(Condition)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion.

    Booleans never equal numbers and strings never equal numbers; ints and
    floats compare numerically.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def _evaluate_answer(condition: AnswerCondition, responses: Mapping[str, Any]) -> bool:
    answer = responses.get(condition.question_id)
    expected = condition.answer_value
    op = condition.operator
    if op == "equals":
        return strict_equals(answer, expected)
    if op == "not_equals":
        return not strict_equals(answer, expected)
    if op == "contains":
        return isinstance(answer, (list, tuple)) and any(strict_equals(a, expected) for a in answer)
    if op == "in":
        return isinstance(expected, (list, tuple)) and any(strict_equals(answer, e) for e in expected)
    return False


def evaluate_condition(
    condition: Any,
    active_products: Collection[str],
    responses: Mapping[str, Any],
) -> bool:
    """Return True when `condition` holds.

    `condition` is normally a parsed Condition model; plain dicts are accepted
    and parsed first. A missing condition means always visible.
    """
    if condition is None:
        return True
    if isinstance(condition, Mapping):
        try:
            condition = _CONDITION_ADAPTER.validate_python(condition)
        except ValidationError:
            logger.warning("visibility_condition_malformed condition=%r", condition)
            return False

    if isinstance(condition, AlwaysCondition):
        return True
    if isinstance(condition, ProductCondition):
        return condition.product in active_products
    if isinstance(condition, AnswerCondition):
        return _evaluate_answer(condition, responses or {})
    if isinstance(condition, CompoundCondition):
        if condition.logic == "and":
            return all(evaluate_condition(c, active_products, responses) for c in condition.conditions)
        if condition.logic == "or":
            return any(evaluate_condition(c, active_products, responses) for c in condition.conditions)
        return False
    return False


__all__ = ["evaluate_condition", "strict_equals"]
