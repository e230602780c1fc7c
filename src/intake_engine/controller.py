"""WizardController — step-gated state machine for one intake session.

The controller owns the session's AnswerStore, current step, consent
flag, document metadata and captured signature.  Every mutation is
mirrored to the draft store; the draft is removed only after the sink
confirms a submission.

States (see :class:`WizardStatus`)::

    step(i) --next, valid, i < N--> step(i+1)
    step(N) --next, valid--------> submitting --ok----> complete
                                              --error-> failed
                                              --cancel-> failed  (re-raised)
    failed  --next---------------> submitting   (retry, same payload)
    step(i) --back, i > 1--------> step(i-1)    (never validated)

``submitting`` is the mutual exclusion for the single awaited call:
every operation except read-only queries raises
:class:`WizardStateError` while a submission is in flight, so neither a
second submission nor navigation can interleave with it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from intake_engine.answers import AnswerSnapshot, AnswerStore
from intake_engine.catalog import CATALOG, QuestionCatalog
from intake_engine.constants import (
    CONTACT_EMAIL_KEY,
    CONTACT_NAME_KEY,
    CONTACT_PHONE_KEY,
    MSG_SUBMISSION_FAILED,
    UNNAMED_CONTACT,
)
from intake_engine.drafts import DraftPersistence
from intake_engine.interfaces import SubmissionSink
from intake_engine.models.analysis import Analysis
from intake_engine.models.draft import DocumentMeta, DraftRecord, FileMeta
from intake_engine.models.question import QuestionDescriptor
from intake_engine.models.session import (
    QuestionPayload,
    StepError,
    StepView,
    SubmissionPayload,
    ValidationContext,
    WizardStatus,
)
from intake_engine.models.step import Step
from intake_engine.scoring import score_case
from intake_engine.steps import PARTITION, StepPartitioner
from intake_engine.validator import StepValidator
from intake_engine.visibility import VisibilityEvaluator

logger = logging.getLogger(__name__)


class WizardStateError(ValueError):
    """The requested operation is not valid in the wizard's current state."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WizardController:
    """Orchestrates navigation, validation, drafts and submission.

    Args:
        drafts: draft persistence bound to this client's key-value store
        sink: receives the completed case
        catalog, partition: question catalog and its step sequence
        clock: returns the submission timestamp (injectable for tests)
    """

    def __init__(
        self,
        drafts: DraftPersistence,
        sink: SubmissionSink,
        *,
        catalog: QuestionCatalog = CATALOG,
        partition: StepPartitioner = PARTITION,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._drafts = drafts
        self._sink = sink
        self._catalog = catalog
        self._partition = partition
        self._clock = clock
        self._visibility = VisibilityEvaluator(catalog)
        self._validator = StepValidator(partition, self._visibility, catalog)

        self._status = WizardStatus.STEP
        self._ordinal = 1
        self._answers = AnswerStore(catalog)
        self._consent = False
        self._documents = DocumentMeta()
        self._signature: Optional[str] = None
        self._error: Optional[StepError] = None
        self._analysis: Optional[Analysis] = None
        self._failure: Optional[str] = None
        # Payload of the last failed attempt, replayed verbatim on retry.
        self._pending: Optional[SubmissionPayload] = None

        self._restore()

    def _restore(self) -> None:
        record = self._drafts.load()
        if record is None:
            return
        self._ordinal = record.step_ordinal
        self._answers = AnswerStore(self._catalog, record.answers)
        self._consent = record.consent_granted
        self._documents = record.document_meta
        logger.info("Draft restored at step %d with %d answers", self._ordinal, len(self._answers))

    # ==================================================================
    # Read-only state
    # ==================================================================

    @property
    def status(self) -> WizardStatus:
        return self._status

    @property
    def current_step(self) -> Step:
        return self._partition.get(self._ordinal)

    @property
    def total_steps(self) -> int:
        return self._partition.total

    @property
    def progress_percent(self) -> int:
        return self._partition.progress_percent(self._ordinal)

    @property
    def answers(self) -> AnswerSnapshot:
        return self._answers.snapshot()

    @property
    def validation_error(self) -> Optional[StepError]:
        return self._error

    @property
    def analysis(self) -> Optional[Analysis]:
        """The finalized analysis; only set once the wizard is complete."""
        return self._analysis

    @property
    def failure_reason(self) -> Optional[str]:
        return self._failure

    @property
    def consent_granted(self) -> bool:
        return self._consent

    @property
    def document_meta(self) -> DocumentMeta:
        return self._documents

    @property
    def signature(self) -> Optional[str]:
        return self._signature

    def visible_questions(self, step: Step | int | None = None) -> list[QuestionDescriptor]:
        """Questions currently shown on ``step`` (default: the current one)."""
        if step is None:
            step = self.current_step
        elif isinstance(step, int):
            step = self._partition.get(step)
        return self._visibility.visible_questions(step, self._answers.snapshot())

    def view(self) -> StepView:
        """Render data for the current state."""
        step = self.current_step
        snapshot = self._answers.snapshot()
        questions = [
            QuestionPayload(
                id=q.id,
                key=q.key,
                prompt=q.prompt,
                input_kind=q.input_kind,
                required=q.required,
                options=q.options or None,
                value=snapshot.get(q.key, ""),
            )
            for q in self._visibility.visible_questions(step, snapshot)
        ]
        return StepView(
            status=self._status,
            ordinal=step.ordinal,
            total_steps=self.total_steps,
            title=step.title,
            subtitle=step.subtitle,
            kind=step.kind,
            progress_percent=self.progress_percent,
            questions=questions,
            consent_granted=self._consent,
            document_meta=self._documents,
            validation_error=self._error,
            analysis=self._analysis,
        )

    # ==================================================================
    # Mutations
    # ==================================================================

    def set_answer(self, key: str, value: str) -> None:
        """Record an answer.  Does not change the current step."""
        self._require_active("set_answer")
        self._answers.set(key, value)
        self._pending = None
        self._save()

    def attach_document(self, slot: str, meta: FileMeta | None) -> None:
        """Set (or clear, with ``None``) the file metadata of a document slot."""
        self._require_active("attach_document")
        self._documents = self._documents.with_slot(slot, meta)
        self._pending = None
        self._save()

    def set_consent(self, granted: bool) -> None:
        self._require_active("set_consent")
        self._consent = bool(granted)
        self._pending = None
        self._save()

    def set_signature(self, payload: str | None) -> None:
        """Store the opaque signature payload.  Signatures are not drafted."""
        self._require_active("set_signature")
        self._signature = payload or None

    def reset(self) -> None:
        """Discard the whole session, including its draft."""
        if self._status == WizardStatus.SUBMITTING:
            raise WizardStateError("Cannot reset: submission in progress")
        self._status = WizardStatus.STEP
        self._ordinal = 1
        self._answers.reset()
        self._consent = False
        self._documents = DocumentMeta()
        self._signature = None
        self._error = None
        self._analysis = None
        self._failure = None
        self._pending = None
        self._drafts.clear()
        logger.info("Wizard session reset")

    # ==================================================================
    # Navigation
    # ==================================================================

    async def next(self) -> WizardStatus:
        """Validate the current step and move forward.

        On the last step this scores the case and awaits the sink.
        Returns the resulting status; a validation failure leaves the
        step unchanged and sets :attr:`validation_error`.
        """
        self._require_active("next")
        step = self.current_step

        error = self._validator.validate(step, self._answers.snapshot(), self._context())
        if error is not None:
            self._error = error
            self._status = WizardStatus.STEP
            logger.info("Step %d blocked: %s", step.ordinal, error.message)
            return self._status
        self._error = None

        if step.ordinal < self.total_steps:
            self._ordinal += 1
            self._save()
            logger.info("Advanced to step %d", self._ordinal)
            return self._status

        await self._submit()
        return self._status

    async def submit(self) -> WizardStatus:
        """Submit the case.  Only valid on the last step (or after a failure)."""
        if self._status == WizardStatus.STEP and self._ordinal != self.total_steps:
            raise WizardStateError(
                f"Cannot submit: only valid during step {self.total_steps}, "
                f"currently at step {self._ordinal}"
            )
        return await self.next()

    def back(self) -> WizardStatus:
        """Move to the previous step without validating.  No-op on step 1."""
        self._require_active("back")
        self._error = None
        self._status = WizardStatus.STEP
        if self._ordinal > 1:
            self._ordinal -= 1
            self._save()
            logger.info("Went back to step %d", self._ordinal)
        return self._status

    # ==================================================================
    # Internals
    # ==================================================================

    async def _submit(self) -> None:
        payload = self._pending or self._build_payload()
        self._pending = payload
        self._failure = None
        self._status = WizardStatus.SUBMITTING

        try:
            await self._sink.submit(payload)
        except Exception:
            logger.exception("Submission failed for contact=%r", payload.contact_email)
            self._status = WizardStatus.FAILED
            self._failure = MSG_SUBMISSION_FAILED
            return
        except BaseException:
            # Cancelled or interrupted: leave a retryable state behind.
            logger.warning("Submission interrupted for contact=%r", payload.contact_email)
            self._status = WizardStatus.FAILED
            self._failure = MSG_SUBMISSION_FAILED
            raise

        self._status = WizardStatus.COMPLETE
        self._analysis = payload.analysis
        self._pending = None
        self._drafts.clear()
        logger.info(
            "Case submitted: score=%d risk=%s flags=%d",
            payload.analysis.score,
            payload.analysis.risk_level,
            len(payload.analysis.risk_flags),
        )

    def _build_payload(self) -> SubmissionPayload:
        answers = dict(self._answers.snapshot())
        return SubmissionPayload(
            answers=answers,
            analysis=score_case(answers),
            document_meta=self._documents,
            consent_granted=self._consent,
            timestamp=self._clock(),
            contact_name=answers.get(CONTACT_NAME_KEY) or UNNAMED_CONTACT,
            contact_email=answers.get(CONTACT_EMAIL_KEY, ""),
            contact_phone=answers.get(CONTACT_PHONE_KEY, ""),
        )

    def _context(self) -> ValidationContext:
        return ValidationContext(
            document_meta=self._documents,
            consent_granted=self._consent,
            signature=self._signature,
        )

    def _save(self) -> None:
        self._drafts.save(
            DraftRecord(
                step_ordinal=self._ordinal,
                answers=dict(self._answers.snapshot()),
                consent_granted=self._consent,
                document_meta=self._documents,
            )
        )

    def _require_active(self, op: str) -> None:
        if self._status in (WizardStatus.SUBMITTING, WizardStatus.COMPLETE):
            raise WizardStateError(
                f"Cannot {op}: wizard is {self._status.value}"
            )
