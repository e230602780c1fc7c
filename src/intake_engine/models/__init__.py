"""Public model re-exports for intake_engine.

Consumers should import from ``intake_engine.models`` rather than
reaching into sub-modules directly.
"""

# --- Questions ---
from intake_engine.models.question import (
    CHOICE_KINDS,
    InputKind,
    Predicate,
    QuestionDescriptor,
)

# --- Steps ---
from intake_engine.models.step import Step, StepKind

# --- Scoring ---
from intake_engine.models.analysis import (
    Analysis,
    EligibilityEstimate,
    ProfileSignal,
    RiskLevel,
    ScoringRule,
)

# --- Drafts / documents ---
from intake_engine.models.draft import DocumentMeta, DraftRecord, FileMeta

# --- Session ---
from intake_engine.models.session import (
    QuestionPayload,
    StepError,
    StepView,
    SubmissionPayload,
    ValidationContext,
    WizardStatus,
)

__all__ = [
    # Questions
    "CHOICE_KINDS",
    "InputKind",
    "Predicate",
    "QuestionDescriptor",
    # Steps
    "Step",
    "StepKind",
    # Scoring
    "Analysis",
    "EligibilityEstimate",
    "ProfileSignal",
    "RiskLevel",
    "ScoringRule",
    # Drafts
    "DocumentMeta",
    "DraftRecord",
    "FileMeta",
    # Session
    "QuestionPayload",
    "StepError",
    "StepView",
    "SubmissionPayload",
    "ValidationContext",
    "WizardStatus",
]
