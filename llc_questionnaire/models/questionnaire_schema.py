"""Pydantic models for the declarative questionnaire schema.

Sections hold questions; `member_list` questions hold repeatable member
fields. Instances are built once from plain data and never mutated.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from llc_questionnaire.models.question_kind import QuestionKind
from llc_questionnaire.models.visibility import ALWAYS, Condition


class Option(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    description: Optional[str] = None


class ValidationRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str  # required, minLength, maxLength, pattern, min, max, custom
    value: Any = None
    message: str


def _check_kind(v: str) -> str:
    if v not in QuestionKind.ALL:
        raise ValueError(f"type must be one of {sorted(QuestionKind.ALL)}")
    return v


class MemberField(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    label: str
    options: Optional[List[Option]] = None
    visibility: Condition = ALWAYS
    required: bool = False
    help_text: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None

    @field_validator("type")
    @classmethod
    def type_must_be_known(cls, v: str) -> str:
        if v == QuestionKind.MEMBER_LIST:
            raise ValueError("member fields cannot nest member_list")
        return _check_kind(v)


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    label: str
    help_text: Optional[str] = None
    required: bool = False
    visibility: Condition = ALWAYS
    validation: List[ValidationRule] = Field(default_factory=list)
    options: Optional[List[Option]] = None
    default_value: Any = None
    pre_populate_from: Optional[str] = None
    member_fields: Optional[List[MemberField]] = None
    min: Optional[float] = None
    max: Optional[float] = None

    @field_validator("type")
    @classmethod
    def type_must_be_known(cls, v: str) -> str:
        return _check_kind(v)

    @model_validator(mode="after")
    def member_fields_only_on_member_list(self) -> "Question":
        if self.member_fields and self.type != QuestionKind.MEMBER_LIST:
            raise ValueError(f"question {self.id}: member_fields require type member_list")
        return self


class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: Optional[str] = None
    order: int
    visibility: Condition = ALWAYS
    questions: List[Question] = Field(default_factory=list)


__all__ = ["Option", "ValidationRule", "MemberField", "Question", "Section"]
