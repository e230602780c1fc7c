"""StepValidator — decides whether the client may leave a step forward.

Rules per step kind:

  questions  — every visible required question has a non-blank answer;
               the lowest-id missing question is reported.  The security
               page additionally requires both declarations to be "Sí".
  documents  — passport and selfie-with-passport are attached.
  consent    — both declarations are "Sí", consent is granted and a
               signature was captured.

Validation only gates forward navigation.  Going back never calls it.
"""

from __future__ import annotations

import logging
from typing import Optional

from intake_engine.answers import AnswerSnapshot
from intake_engine.catalog import CATALOG, QuestionCatalog
from intake_engine.constants import (
    AFFIRMATIVE,
    DECLARATION_KEYS,
    MSG_CONSENT_REQUIRED,
    MSG_DECLARATIONS,
    MSG_MISSING_QUESTION,
    MSG_PASSPORT_REQUIRED,
    MSG_SELFIE_REQUIRED,
    MSG_SIGNATURE_REQUIRED,
)
from intake_engine.models.session import StepError, ValidationContext
from intake_engine.models.step import Step
from intake_engine.steps import PARTITION, SECURITY_STEP, StepPartitioner
from intake_engine.visibility import VisibilityEvaluator

logger = logging.getLogger(__name__)


class StepValidator:
    """Per-step completeness and structural checks."""

    def __init__(
        self,
        partition: StepPartitioner = PARTITION,
        visibility: VisibilityEvaluator | None = None,
        catalog: QuestionCatalog = CATALOG,
    ) -> None:
        self._partition = partition
        self._catalog = catalog
        self._visibility = visibility or VisibilityEvaluator(catalog)

    def validate(
        self,
        step: Step,
        answers: AnswerSnapshot,
        context: ValidationContext | None = None,
    ) -> Optional[StepError]:
        """Return the first problem blocking ``step``, or ``None`` if it passes."""
        ctx = context or ValidationContext()
        if step.kind == "questions":
            error = self._check_questions(step, answers)
            if error is None and step.ordinal == SECURITY_STEP:
                error = self._check_declarations(answers)
            return error
        if step.kind == "documents":
            return self._check_documents(ctx)
        return self._check_consent(answers, ctx)

    def validate_all(
        self,
        answers: AnswerSnapshot,
        context: ValidationContext | None = None,
    ) -> Optional[tuple[Step, StepError]]:
        """Validate every step in order; return the first failing one.

        A host can use this after a downstream rejection to pick the page the client
        lands on.
        """
        for step in self._partition:
            error = self.validate(step, answers, context)
            if error is not None:
                return step, error
        return None

    # ------------------------------------------------------------------
    # Step-kind checks
    # ------------------------------------------------------------------

    def _check_questions(self, step: Step, answers: AnswerSnapshot) -> Optional[StepError]:
        # visible_questions is id-ordered, so the first hit is the lowest id.
        for q in self._visibility.visible_questions(step, answers):
            if q.required and not answers.get(q.key, "").strip():
                return StepError(
                    question_id=q.id,
                    message=MSG_MISSING_QUESTION.format(id=q.id),
                )
        return None

    def _check_declarations(self, answers: AnswerSnapshot) -> Optional[StepError]:
        for key in DECLARATION_KEYS:
            if answers.get(key) != AFFIRMATIVE:
                return StepError(question_id=self._catalog.get(key).id, message=MSG_DECLARATIONS)
        return None

    @staticmethod
    def _check_documents(ctx: ValidationContext) -> Optional[StepError]:
        if ctx.document_meta.passport is None:
            return StepError(message=MSG_PASSPORT_REQUIRED)
        if ctx.document_meta.selfieWithPassport is None:
            return StepError(message=MSG_SELFIE_REQUIRED)
        return None

    def _check_consent(
        self, answers: AnswerSnapshot, ctx: ValidationContext
    ) -> Optional[StepError]:
        error = self._check_declarations(answers)
        if error is not None:
            return error
        if not ctx.consent_granted:
            return StepError(message=MSG_CONSENT_REQUIRED)
        if not ctx.signature:
            return StepError(message=MSG_SIGNATURE_REQUIRED)
        return None
