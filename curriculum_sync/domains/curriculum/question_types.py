# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Question type mapping.

Authored content tags question types with a free-form string. Persisted
questions use the QuestionType enum. Tags missing from the lookup table
fall back to FULL_PROGRAM; the resolution records whether the fallback was
taken so callers can log it or reject it.
"""

from dataclasses import dataclass
from enum import Enum


class QuestionType(str, Enum):
    """Persisted question types."""

    FULL_PROGRAM = "FULL_PROGRAM"
    FUNCTION = "FUNCTION"
    FIX_BUG = "FIX_BUG"
    PREDICT_OUTPUT = "PREDICT_OUTPUT"


QUESTION_TYPE_MAP: dict[str, QuestionType] = {
    "CODE": QuestionType.FULL_PROGRAM,
    "FULL_PROGRAM": QuestionType.FULL_PROGRAM,
    "FUNCTION": QuestionType.FUNCTION,
    "FIX_BUG": QuestionType.FIX_BUG,
    "PREDICT_OUTPUT": QuestionType.PREDICT_OUTPUT,
}

DEFAULT_QUESTION_TYPE = QuestionType.FULL_PROGRAM


@dataclass(frozen=True)
class QuestionTypeResolution:
    """Outcome of mapping an authored tag.

    Attributes:
        question_type: Type to persist.
        unmapped_tag: The original tag when it was not in the table.
    """

    question_type: QuestionType
    unmapped_tag: str | None = None

    @property
    def is_mapped(self) -> bool:
        return self.unmapped_tag is None


def resolve_question_type(tag: str) -> QuestionTypeResolution:
    """Map an authored type tag to a QuestionType."""
    mapped = QUESTION_TYPE_MAP.get(tag)
    if mapped is None:
        return QuestionTypeResolution(DEFAULT_QUESTION_TYPE, unmapped_tag=tag)
    return QuestionTypeResolution(mapped)
