"""QuestionKind enumeration for the closed set of questionnaire field types.

Provides a simple constants container instead of an Enum to keep imports
lightweight in architectural tests.
"""

from __future__ import annotations


class QuestionKind:
    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    CHECKBOX_GROUP = "checkbox_group"
    NUMBER = "number"
    CURRENCY = "currency"
    DATE = "date"
    ADDRESS = "address"
    MEMBER_LIST = "member_list"
    PERCENTAGE_SPLIT = "percentage_split"

    ALL = frozenset(
        {
            TEXT,
            TEXTAREA,
            EMAIL,
            PHONE,
            SELECT,
            RADIO,
            CHECKBOX,
            CHECKBOX_GROUP,
            NUMBER,
            CURRENCY,
            DATE,
            ADDRESS,
            MEMBER_LIST,
            PERCENTAGE_SPLIT,
        }
    )


__all__ = ["QuestionKind"]
