"""IntakeSubmission ORM model — one row per submitted case.

The full case (answers, analysis, document metadata, consent, signing
timestamp) lives in a single JSONB ``data`` column so the review side can
render a case from one row.  Contact fields are copied into dedicated
columns for search and follow-up.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Index, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from intake_db.models.base import Base
from intake_db.models.enums import SubmissionStatus

_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in SubmissionStatus)


class IntakeSubmission(Base):
    """A submitted intake case awaiting attorney review."""

    __tablename__ = "intake_submissions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Shape: {"h2bIntake": {answers, analysis, documentMeta,
    #                       declarationAccepted, signedAt}}
    data: Mapped[dict] = mapped_column(JSONB, nullable=False)

    status: Mapped[SubmissionStatus] = mapped_column(
        String(20),
        nullable=False,
        default=SubmissionStatus.NEW,
        index=True,
    )

    contact_name: Mapped[str] = mapped_column(Text, nullable=False)
    # Stored lower-cased
    contact_email: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    contact_phone: Mapped[str] = mapped_column(Text, nullable=False)

    # Denormalised from data.analysis for dashboard sorting
    score: Mapped[int | None] = mapped_column(nullable=True)
    risk_level: Mapped[str | None] = mapped_column(String(20), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_submission_status"),
        CheckConstraint(
            "score IS NULL OR score BETWEEN 0 AND 100",
            name="ck_submission_score_range",
        ),
        Index("ix_submission_created_at", "created_at"),
        Index("ix_submission_data_gin", "data", postgresql_using="gin"),
        Index(
            "ix_submission_risk_level",
            "risk_level",
            postgresql_where=text("risk_level IS NOT NULL"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<IntakeSubmission(id={self.id!s}, email={self.contact_email!r}, "
            f"status={self.status!r}, score={self.score})>"
        )
