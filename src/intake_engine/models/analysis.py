"""Scoring models — rule tables and the engine's output.

  - ScoringRule: a penalty (negative delta, labeled) or bonus (positive
    delta, unlabeled) triggered by one exact answer
  - ProfileSignal: a positive-profile entry triggered by any of several
    answers
  - Analysis: the result of scoring one complete answer set

``Analysis`` serialises with camelCase aliases (``riskLevel``,
``eligibilityEstimate``, ``riskFlags``) because that is the shape stored
in submissions and read by the review dashboard.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

RiskLevel = Literal["low", "moderate", "high"]
EligibilityEstimate = Literal["excellent", "eligible", "moderate_risk", "high_risk"]


class ScoringRule(BaseModel):
    """Adjust the score when ``answers[trigger_key] == trigger_value``."""

    model_config = ConfigDict(frozen=True)

    trigger_key: str
    trigger_value: str
    delta: int
    flag_label: Optional[str] = None

    @model_validator(mode="after")
    def _chk(self):
        if self.flag_label is not None and self.delta >= 0:
            raise ValueError(f"penalty rule on {self.trigger_key} must have a negative delta")
        if self.flag_label is None and self.delta <= 0:
            raise ValueError(f"bonus rule on {self.trigger_key} must have a positive delta")
        return self

    @property
    def is_penalty(self) -> bool:
        return self.flag_label is not None

    def matches(self, answers) -> bool:
        return answers.get(self.trigger_key) == self.trigger_value


class ProfileSignal(BaseModel):
    """Emit ``label`` when any of ``trigger_keys`` equals ``trigger_value``."""

    model_config = ConfigDict(frozen=True)

    label: str
    trigger_keys: List[str]
    trigger_value: str

    def matches(self, answers) -> bool:
        return any(answers.get(k) == self.trigger_value for k in self.trigger_keys)


class Analysis(BaseModel):
    """Eligibility/risk assessment of one answer set."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    score: int
    risk_level: RiskLevel
    eligibility_estimate: EligibilityEstimate
    risk_flags: List[str] = []
    profile: List[str] = []
