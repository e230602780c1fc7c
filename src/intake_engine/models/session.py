"""Session models — the contract between the controller and its callers.

These models describe what the wizard exposes to a hosting UI (or the
HTTP layer) and what it hands to the submission sink.  They are
decoupled from the ORM models in ``intake_db`` so that API consumers
never see database internals.

  - WizardStatus: the controller's state machine label
  - StepError: a validation failure blocking forward navigation
  - ValidationContext: non-answer inputs the structural checks need
  - SubmissionPayload: everything sent to the sink on submission
  - QuestionPayload / StepView: flattened render data for the host
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from intake_engine.models.analysis import Analysis
from intake_engine.models.draft import DocumentMeta


class WizardStatus(str, enum.Enum):
    """Lifecycle states of a wizard session.

    Transitions:
        step -> step        (next/back within the page sequence)
        step -> submitting  (next on the last page, validation passed)
        submitting -> complete (sink accepted the case)
        submitting -> failed   (sink rejected; retry from the last page)
        failed -> submitting   (retry)
        failed -> step         (back)
    """

    STEP = "step"
    SUBMITTING = "submitting"
    COMPLETE = "complete"
    FAILED = "failed"


class StepError(BaseModel):
    """Why a step cannot be left forward.

    ``question_id`` names the lowest-id offending question when the
    failure comes from a question; structural failures leave it unset.
    """

    model_config = ConfigDict(frozen=True)

    question_id: Optional[int] = None
    message: str


class ValidationContext(BaseModel):
    """Inputs outside the answer map that the structural checks read."""

    document_meta: DocumentMeta = Field(default_factory=DocumentMeta)
    consent_granted: bool = False
    # Opaque encoded image from the signature pad; never decoded here.
    signature: Optional[str] = None


class SubmissionPayload(BaseModel):
    """The complete case handed to the submission sink.

    Serialise with ``model_dump(by_alias=True, mode="json")`` to get the
    camelCase wire shape.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    answers: Dict[str, str]
    analysis: Analysis
    document_meta: DocumentMeta
    consent_granted: bool
    timestamp: datetime
    contact_name: str
    contact_email: str
    contact_phone: str


class QuestionPayload(BaseModel):
    """Flattened question for rendering, with the current answer filled in."""

    id: int
    key: str
    prompt: str
    input_kind: str
    required: bool
    options: List[str] | None = None
    value: str = ""


class StepView(BaseModel):
    """Everything a host needs to render the wizard at its current state."""

    status: WizardStatus
    ordinal: int
    total_steps: int
    title: str
    subtitle: str
    kind: Literal["questions", "documents", "consent"]
    progress_percent: int
    questions: List[QuestionPayload] = []
    consent_granted: bool = False
    document_meta: DocumentMeta = Field(default_factory=DocumentMeta)
    validation_error: Optional[StepError] = None
    analysis: Optional[Analysis] = None
