"""Database-level enumerations for intake submissions."""

import enum


class SubmissionStatus(str, enum.Enum):
    """Review lifecycle of a submitted case.

    Cases enter as ``new``; the review dashboard (outside this package)
    moves them on.
    """

    NEW = "new"
    REVIEWING = "reviewing"
    CONTACTED = "contacted"
    COMPLETED = "completed"
    ARCHIVED = "archived"
