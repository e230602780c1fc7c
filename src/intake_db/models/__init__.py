"""ORM models for intake_db."""

from intake_db.models.base import Base
from intake_db.models.draft import DraftEntry
from intake_db.models.enums import SubmissionStatus
from intake_db.models.submission import IntakeSubmission

__all__ = ["Base", "DraftEntry", "IntakeSubmission", "SubmissionStatus"]
