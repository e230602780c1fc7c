"""VisibilityEvaluator — which questions a step shows for an answer set.

Visibility is recomputed from scratch on every call.  A clause may read
any earlier question, not only the one that changed last, so a cached
result is stale after any answer write.

The evaluator is total: clauses over unanswered keys evaluate to False
(``ne`` compares against the empty string), and non-question steps
simply have no visible questions.
"""

from __future__ import annotations

import logging
from typing import Any

from intake_engine.answers import AnswerSnapshot
from intake_engine.catalog import CATALOG, QuestionCatalog
from intake_engine.models.question import Predicate, QuestionDescriptor
from intake_engine.models.step import Step

logger = logging.getLogger(__name__)


class VisibilityEvaluator:
    """Evaluates ``show_if`` clauses against an answer snapshot."""

    def __init__(self, catalog: QuestionCatalog = CATALOG) -> None:
        self._catalog = catalog

    def visible_questions(
        self, step: Step, answers: AnswerSnapshot
    ) -> list[QuestionDescriptor]:
        """Questions of ``step`` that are currently shown, in id order.

        Args:
            step: the page to evaluate
            answers: read-only snapshot of the current answers

        Returns:
            Every descriptor in the step's id range whose ``show_if`` is
            absent or holds.  Empty for document/consent steps.
        """
        if step.id_range is None:
            return []
        return [
            q for q in self._catalog.in_range(*step.id_range)
            if self.is_visible(q, answers)
        ]

    def is_visible(self, question: QuestionDescriptor, answers: AnswerSnapshot) -> bool:
        """True if every clause of ``question.show_if`` holds."""
        if not question.show_if:
            return True
        return all(self._eval_predicate(pred, answers) for pred in question.show_if)

    # ------------------------------------------------------------------
    # Predicate evaluation
    # ------------------------------------------------------------------

    def _eval_predicate(self, pred: Predicate, answers: AnswerSnapshot) -> bool:
        answer = answers.get(pred.key)
        if pred.op == "ne":
            return (answer or "") != pred.value
        if answer is None:
            return False
        return self._compare(pred.op, answer, pred.value)

    @staticmethod
    def _compare(op: str, answer: str, value: Any) -> bool:
        if op == "eq":
            return answer == value
        if op == "in":
            return answer in value
        logger.warning("Unknown visibility operator: %s", op)
        return False
