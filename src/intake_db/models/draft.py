"""DraftEntry ORM model — server-side key-value storage for drafts.

Each client (identified by the caller-supplied ``client_id``) gets its
own key space, the database equivalent of origin-scoped browser storage.
Values are opaque strings; the engine stores its draft as JSON text.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from intake_db.models.base import Base


class DraftEntry(Base):
    """One stored key for one client."""

    __tablename__ = "intake_drafts"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    client_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    key: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("client_id", "key", name="uq_draft_client_key"),
    )

    def __repr__(self) -> str:
        return f"<DraftEntry(client={self.client_id!r}, key={self.key!r})>"
