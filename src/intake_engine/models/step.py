"""Step (page) model for the intake wizard.

Question-bearing steps own a contiguous id range of the catalog.  The two
trailing steps carry no questions: the document checklist and the
consent/signature page, each with its own structural validation.
"""

from __future__ import annotations

from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

StepKind = Literal["questions", "documents", "consent"]


class Step(BaseModel):
    """One page of the wizard, addressed by its 1-based ordinal."""

    model_config = ConfigDict(frozen=True)

    ordinal: int
    title: str
    subtitle: str
    kind: StepKind = "questions"
    id_range: Optional[Tuple[int, int]] = None

    @model_validator(mode="after")
    def _chk(self):
        if self.kind == "questions":
            if self.id_range is None:
                raise ValueError(f"step {self.ordinal}: question step needs an id_range")
            lo, hi = self.id_range
            if lo > hi:
                raise ValueError(f"step {self.ordinal}: id_range lo must be <= hi")
        elif self.id_range is not None:
            raise ValueError(f"step {self.ordinal}: {self.kind} step has no id_range")
        return self

    def owns(self, question_id: int) -> bool:
        """True if ``question_id`` falls inside this step's id range."""
        if self.id_range is None:
            return False
        lo, hi = self.id_range
        return lo <= question_id <= hi
