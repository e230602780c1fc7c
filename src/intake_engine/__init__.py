"""intake_engine — adaptive questionnaire and eligibility scoring SDK.

Public API:
    WizardController   — step-gated state machine for one intake session
    DraftPersistence   — load/save/clear of the in-progress draft
    StepValidator      — per-step completeness and structural checks
    VisibilityEvaluator — which questions a step currently shows
    score_case         — pure eligibility/risk scoring of an answer set
    CATALOG            — the fixed question catalog
    PARTITION          — the catalog's page sequence

Collaborator ports:
    KeyValueStore      — synchronous draft storage
    SubmissionSink     — receives the completed case
    MemoryKeyValueStore — dict-backed KeyValueStore

Models:
    Analysis, DraftRecord, DocumentMeta, FileMeta, StepError, StepView,
    SubmissionPayload, WizardStatus
"""

from intake_engine.answers import AnswerStore
from intake_engine.catalog import CATALOG, CatalogError, QuestionCatalog
from intake_engine.controller import WizardController, WizardStateError
from intake_engine.drafts import DraftPersistence
from intake_engine.interfaces import (
    KeyValueStore,
    MemoryKeyValueStore,
    SubmissionError,
    SubmissionSink,
)
from intake_engine.models import (
    Analysis,
    DocumentMeta,
    DraftRecord,
    FileMeta,
    QuestionDescriptor,
    Step,
    StepError,
    StepView,
    SubmissionPayload,
    ValidationContext,
    WizardStatus,
)
from intake_engine.scoring import score_case
from intake_engine.steps import PARTITION, StepPartitioner
from intake_engine.validator import StepValidator
from intake_engine.visibility import VisibilityEvaluator

__all__ = [
    # Controller & components
    "AnswerStore",
    "CATALOG",
    "CatalogError",
    "DraftPersistence",
    "PARTITION",
    "QuestionCatalog",
    "StepPartitioner",
    "StepValidator",
    "VisibilityEvaluator",
    "WizardController",
    "WizardStateError",
    "score_case",
    # Ports
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SubmissionError",
    "SubmissionSink",
    # Models
    "Analysis",
    "DocumentMeta",
    "DraftRecord",
    "FileMeta",
    "QuestionDescriptor",
    "Step",
    "StepError",
    "StepView",
    "SubmissionPayload",
    "ValidationContext",
    "WizardStatus",
]
