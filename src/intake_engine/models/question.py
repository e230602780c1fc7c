"""Question descriptor models for the intake questionnaire.

Each descriptor maps to one input widget in the host UI:

    - text, email, tel, date, number: single-line inputs
    - multiline: free-form textarea
    - yesno, select: pick exactly one of ``options``

Visibility is declarative.  ``show_if`` is a list of :class:`Predicate`
clauses that are AND-ed together and evaluated against a read-only
answer snapshot.  Keeping predicates as data (instead of closures) lets
the catalog check at assembly time that a question only depends on
questions with a smaller id, which keeps the visibility graph acyclic.
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

InputKind = Literal[
    "text", "email", "tel", "date", "number", "yesno", "select", "multiline",
]

# Kinds whose answers must be one of the descriptor's options.
CHOICE_KINDS: set[str] = {"yesno", "select"}


class Predicate(BaseModel):
    """A single visibility clause that references an earlier answer.

    Operators:
      - eq: answer equals ``value``
      - ne: answer differs from ``value`` (a missing answer counts as "")
      - in: answer is one of ``value`` (a list)
    """

    model_config = ConfigDict(frozen=True)

    key: str
    op: Literal["eq", "ne", "in"] = "eq"
    value: Any


class QuestionDescriptor(BaseModel):
    """One question of the intake catalog."""

    model_config = ConfigDict(frozen=True)

    id: int
    key: str
    prompt: str
    input_kind: InputKind = "text"
    required: bool = False
    options: List[str] = []
    show_if: Optional[List[Predicate]] = None

    @model_validator(mode="after")
    def _chk(self):
        if self.id < 1:
            raise ValueError(f"question id must be positive, got {self.id}")
        if self.input_kind in CHOICE_KINDS and not self.options:
            raise ValueError(f"{self.key}: {self.input_kind} question needs options")
        return self

    @property
    def depends_on(self) -> list[str]:
        """Answer keys referenced by the visibility clauses, in clause order."""
        return [p.key for p in self.show_if or []]
