"""intake_db — PostgreSQL persistence for intake submissions and drafts.

This package provides the ORM models, async engine factory, repositories,
and the database-backed submission sink consumed by the FastAPI server.
"""

from intake_db.engine import dispose_engine, get_engine, get_session_factory
from intake_db.models.draft import DraftEntry
from intake_db.models.enums import SubmissionStatus
from intake_db.models.submission import IntakeSubmission
from intake_db.repository import DraftRepository, SubmissionRepository
from intake_db.sink import DatabaseSubmissionSink

__all__ = [
    "DatabaseSubmissionSink",
    "DraftEntry",
    "DraftRepository",
    "IntakeSubmission",
    "SubmissionRepository",
    "SubmissionStatus",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
]
