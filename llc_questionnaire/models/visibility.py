"""Visibility condition types.

A condition is a tagged union discriminated on `type`. Compound conditions
nest other conditions, so the union is recursive.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class AlwaysCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["always"] = "always"


class ProductCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["product"] = "product"
    product: str


class AnswerCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["answer"] = "answer"
    question_id: str
    answer_value: Any = None
    # Kept as a plain string: operators outside equals/not_equals/contains/in
    # evaluate to False instead of failing schema load.
    operator: str = "equals"


class CompoundCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["compound"] = "compound"
    logic: str = "and"
    conditions: List["Condition"] = Field(default_factory=list)


Condition = Annotated[
    Union[AlwaysCondition, ProductCondition, AnswerCondition, CompoundCondition],
    Field(discriminator="type"),
]

CompoundCondition.model_rebuild()

ALWAYS = AlwaysCondition()


__all__ = [
    "AlwaysCondition",
    "ProductCondition",
    "AnswerCondition",
    "CompoundCondition",
    "Condition",
    "ALWAYS",
]
