"""Draft and document models — what survives a page reload.

The draft is stored as a single JSON document under a fixed key.  Files
never enter the draft: only their display metadata does, because byte
storage belongs to the host.  The captured signature is not persisted
either; the client signs again after resuming.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from intake_engine.constants import DOCUMENT_SLOTS


class FileMeta(BaseModel):
    """Display metadata of one selected file."""

    model_config = ConfigDict(frozen=True)

    name: str
    size: int = Field(ge=0)
    type: str = ""


class DocumentMeta(BaseModel):
    """Metadata for the five document slots of the checklist step."""

    model_config = ConfigDict(populate_by_name=True)

    passport: Optional[FileMeta] = None
    selfieWithPassport: Optional[FileMeta] = None
    visaPhoto: Optional[FileMeta] = None
    cv: Optional[FileMeta] = None
    certifications: Optional[FileMeta] = None

    def get(self, slot: str) -> Optional[FileMeta]:
        if slot not in DOCUMENT_SLOTS:
            raise KeyError(f"Unknown document slot: {slot}")
        return getattr(self, slot)

    def with_slot(self, slot: str, meta: Optional[FileMeta]) -> "DocumentMeta":
        """Return a copy with ``slot`` replaced by ``meta``."""
        if slot not in DOCUMENT_SLOTS:
            raise KeyError(f"Unknown document slot: {slot}")
        return self.model_copy(update={slot: meta})


class DraftRecord(BaseModel):
    """Persisted snapshot of an in-progress wizard session.

    ``saved_at`` is informational; concurrent sessions still resolve
    last-writer-wins.
    """

    step_ordinal: int
    answers: Dict[str, str] = {}
    consent_granted: bool = False
    document_meta: DocumentMeta = Field(default_factory=DocumentMeta)
    saved_at: Optional[datetime] = None
