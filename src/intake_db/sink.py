"""DatabaseSubmissionSink — stores submitted cases in ``intake_submissions``.

Adapts :class:`SubmissionRepository` to the engine's
:class:`SubmissionSink` port.  Any rejection (missing contact details,
database error) is re-raised as :class:`SubmissionError` so the wizard
moves to its retryable ``failed`` state.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from intake_engine.interfaces import SubmissionError, SubmissionSink
from intake_engine.models.session import SubmissionPayload

from intake_db.models.submission import IntakeSubmission
from intake_db.repository import SubmissionRepository

logger = logging.getLogger(__name__)


class DatabaseSubmissionSink(SubmissionSink):
    """Persist each accepted case within the caller's session."""

    def __init__(self, db: AsyncSession, repo: SubmissionRepository | None = None) -> None:
        self._db = db
        self._repo = repo or SubmissionRepository()
        self.last_submission: IntakeSubmission | None = None

    async def submit(self, payload: SubmissionPayload) -> None:
        try:
            self.last_submission = await self._repo.create_submission(self._db, payload)
        except ValueError as exc:
            raise SubmissionError(str(exc)) from exc
        except SQLAlchemyError as exc:
            raise SubmissionError("Failed to save intake submission") from exc
        logger.info("Stored intake submission id=%s", self.last_submission.id)
