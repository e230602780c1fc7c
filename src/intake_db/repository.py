"""Async repositories for submissions and drafts.

All public methods accept an ``AsyncSession`` so the caller controls
transaction boundaries: methods ``flush()`` but never ``commit()``.

The repositories avoid business rules (those live in ``intake_engine``)
except for the structural requirement that a submission carries contact
details, which the review workflow cannot do without.
"""

import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from intake_engine.interfaces import MemoryKeyValueStore
from intake_engine.models.session import SubmissionPayload

from intake_db.models.draft import DraftEntry
from intake_db.models.enums import SubmissionStatus
from intake_db.models.submission import IntakeSubmission

logger = logging.getLogger(__name__)


class SubmissionRepository:
    """Writes to the ``intake_submissions`` table."""

    @staticmethod
    def build_data(payload: SubmissionPayload) -> dict:
        """Nest the case under ``h2bIntake`` the way the review side reads it."""
        wire = payload.model_dump(by_alias=True, mode="json")
        return {
            "h2bIntake": {
                "answers": wire["answers"],
                "analysis": wire["analysis"],
                "documentMeta": wire["documentMeta"],
                "declarationAccepted": wire["consentGranted"],
                "signedAt": wire["timestamp"],
            }
        }

    async def create_submission(
        self, db: AsyncSession, payload: SubmissionPayload
    ) -> IntakeSubmission:
        """Insert a submitted case and return the new row.

        Raises:
            ValueError: if contact name, e-mail or phone is blank.
        """
        name = payload.contact_name.strip()
        email = payload.contact_email.strip().lower()
        phone = payload.contact_phone.strip()
        missing = [
            field for field, value in
            (("contact_name", name), ("contact_email", email), ("contact_phone", phone))
            if not value
        ]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

        row = IntakeSubmission(
            data=self.build_data(payload),
            status=SubmissionStatus.NEW,
            contact_name=name,
            contact_email=email,
            contact_phone=phone,
            score=payload.analysis.score,
            risk_level=payload.analysis.risk_level,
        )
        db.add(row)
        await db.flush()
        return row


class DraftRepository:
    """Key-value access to the ``intake_drafts`` table, scoped per client."""

    async def get_all(self, db: AsyncSession, client_id: str) -> dict[str, str]:
        """Return every stored key for ``client_id``."""
        stmt = select(DraftEntry).where(DraftEntry.client_id == client_id)
        result = await db.execute(stmt)
        return {row.key: row.value for row in result.scalars().all()}

    async def put(self, db: AsyncSession, client_id: str, key: str, value: str) -> None:
        """Insert or overwrite one key (last write wins)."""
        now = datetime.now(timezone.utc)
        stmt = (
            pg_insert(DraftEntry)
            .values(client_id=client_id, key=key, value=value, updated_at=now)
            .on_conflict_do_update(
                index_elements=["client_id", "key"],
                set_={"value": value, "updated_at": now},
            )
        )
        await db.execute(stmt)
        await db.flush()

    async def remove(self, db: AsyncSession, client_id: str, key: str) -> None:
        stmt = delete(DraftEntry).where(
            DraftEntry.client_id == client_id,
            DraftEntry.key == key,
        )
        await db.execute(stmt)
        await db.flush()

    # ------------------------------------------------------------------
    # Unit of work for the synchronous engine port
    # ------------------------------------------------------------------

    async def lock_client(self, db: AsyncSession, client_id: str) -> None:
        """Serialise requests for one client until the transaction ends.

        Takes a transaction-scoped advisory lock, so a second request for
        the same client waits for the first to commit and then restores
        whatever the first left behind (e.g. no draft after a submit).
        """
        await db.execute(select(func.pg_advisory_xact_lock(func.hashtext(client_id))))

    async def load_store(self, db: AsyncSession, client_id: str) -> MemoryKeyValueStore:
        """Preload a client's keys into an in-memory store for the engine."""
        await self.lock_client(db, client_id)
        return MemoryKeyValueStore(await self.get_all(db, client_id))

    async def flush_store(
        self, db: AsyncSession, client_id: str, store: MemoryKeyValueStore
    ) -> int:
        """Write back the keys the engine changed.  Returns how many moved."""
        changes = store.dirty
        for key, value in changes.items():
            if value is None:
                await self.remove(db, client_id, key)
            else:
                await self.put(db, client_id, key, value)
        store.mark_clean()
        return len(changes)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def purge_older_than(self, db: AsyncSession, *, older_than_days: int) -> int:
        """Delete drafts untouched for ``older_than_days``; 0 deletes all."""
        stmt = delete(DraftEntry)
        if older_than_days > 0:
            cutoff = datetime.now(timezone.utc) - timedelta(days=older_than_days)
            stmt = stmt.where(DraftEntry.updated_at < cutoff)
        result = await db.execute(stmt)
        await db.flush()
        logger.info("Purged %d drafts (older_than_days=%d)", result.rowcount, older_than_days)
        return result.rowcount
