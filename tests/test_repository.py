"""Repository and sink tests with a mocked AsyncSession.

AsyncMock stands in for AsyncSession; ``add`` is replaced by a plain
MagicMock because the real method is synchronous.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from intake_db.models.draft import DraftEntry
from intake_db.models.enums import SubmissionStatus
from intake_db.models.submission import IntakeSubmission
from intake_db.repository import DraftRepository, SubmissionRepository
from intake_db.sink import DatabaseSubmissionSink
from intake_engine.interfaces import MemoryKeyValueStore, SubmissionError
from intake_engine.models.draft import DocumentMeta
from intake_engine.models.session import SubmissionPayload
from intake_engine.scoring import score_case

from support.wizard import PASSPORT, complete_answers


@pytest.fixture
def mock_db():
    db = AsyncMock()
    db.add = MagicMock()
    return db


def _payload(**overrides):
    answers = complete_answers(q46="Sí")
    fields = dict(
        answers=answers,
        analysis=score_case(answers),
        document_meta=DocumentMeta(passport=PASSPORT),
        consent_granted=True,
        timestamp=datetime(2026, 3, 2, 15, 30, tzinfo=timezone.utc),
        contact_name="Ana Pérez",
        contact_email="  Ana.Perez@Example.com ",
        contact_phone="+52 55 9876 5432",
    )
    fields.update(overrides)
    return SubmissionPayload(**fields)


# =====================================================================
# SubmissionRepository
# =====================================================================


class TestSubmissionRepository:

    @pytest.mark.asyncio
    async def test_create_submission_row(self, mock_db):
        row = await SubmissionRepository().create_submission(mock_db, _payload())

        mock_db.add.assert_called_once_with(row)
        mock_db.flush.assert_awaited_once()
        assert isinstance(row, IntakeSubmission)
        assert row.status == SubmissionStatus.NEW
        assert row.contact_email == "ana.perez@example.com"
        assert row.contact_name == "Ana Pérez"
        assert row.score == 70
        assert row.risk_level == "moderate"

    @pytest.mark.asyncio
    async def test_data_document_shape(self, mock_db):
        row = await SubmissionRepository().create_submission(mock_db, _payload())
        intake = row.data["h2bIntake"]
        assert set(intake) == {
            "answers", "analysis", "documentMeta", "declarationAccepted", "signedAt",
        }
        assert intake["declarationAccepted"] is True
        assert intake["analysis"]["riskFlags"] == ["Deportación/remoción"]
        assert intake["documentMeta"]["passport"]["name"] == PASSPORT.name
        assert intake["signedAt"].startswith("2026-03-02T15:30:00")

    def test_status_values_match_review_lifecycle(self):
        assert [s.value for s in SubmissionStatus] == [
            "new", "reviewing", "contacted", "completed", "archived",
        ]
        [check] = [
            c for c in IntakeSubmission.__table__.constraints
            if c.name == "ck_submission_status"
        ]
        for status in SubmissionStatus:
            assert f"'{status.value}'" in str(check.sqltext)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["contact_name", "contact_email", "contact_phone"])
    async def test_missing_contact_rejected(self, mock_db, field):
        with pytest.raises(ValueError, match=f"Missing required fields: {field}"):
            await SubmissionRepository().create_submission(mock_db, _payload(**{field: "  "}))
        mock_db.add.assert_not_called()


# =====================================================================
# DatabaseSubmissionSink
# =====================================================================


class TestDatabaseSubmissionSink:

    @pytest.mark.asyncio
    async def test_success_keeps_row(self, mock_db):
        row = MagicMock(id="abc")
        repo = MagicMock(create_submission=AsyncMock(return_value=row))
        sink = DatabaseSubmissionSink(mock_db, repo)
        await sink.submit(_payload())
        repo.create_submission.assert_awaited_once()
        assert sink.last_submission is row

    @pytest.mark.asyncio
    async def test_missing_contact_becomes_submission_error(self, mock_db):
        sink = DatabaseSubmissionSink(mock_db)
        with pytest.raises(SubmissionError, match="contact_email"):
            await sink.submit(_payload(contact_email=""))

    @pytest.mark.asyncio
    async def test_database_error_becomes_submission_error(self, mock_db):
        mock_db.flush.side_effect = OperationalError("INSERT", {}, Exception("down"))
        sink = DatabaseSubmissionSink(mock_db)
        with pytest.raises(SubmissionError):
            await sink.submit(_payload())


# =====================================================================
# DraftRepository
# =====================================================================


class TestDraftRepository:

    @pytest.mark.asyncio
    async def test_get_all(self, mock_db):
        result = MagicMock()
        result.scalars.return_value.all.return_value = [
            DraftEntry(client_id="c1", key="draft", value="{}"),
            DraftEntry(client_id="c1", key="other", value="x"),
        ]
        mock_db.execute.return_value = result
        assert await DraftRepository().get_all(mock_db, "c1") == {"draft": "{}", "other": "x"}

    @pytest.mark.asyncio
    async def test_put_is_single_upsert(self, mock_db):
        await DraftRepository().put(mock_db, "c1", "draft", "{}")

        mock_db.execute.assert_awaited_once()
        [stmt] = mock_db.execute.call_args.args
        compiled = stmt.compile(dialect=postgresql.dialect())
        assert str(compiled).startswith("INSERT INTO intake_drafts")
        assert "ON CONFLICT (client_id, key) DO UPDATE" in str(compiled)
        assert compiled.params["value"] == "{}"
        mock_db.add.assert_not_called()
        mock_db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_load_store_is_clean(self, mock_db):
        repo = DraftRepository()
        repo.get_all = AsyncMock(return_value={"draft": "{}"})
        store = await repo.load_store(mock_db, "c1")
        assert store.get("draft") == "{}"
        assert store.dirty == {}

    @pytest.mark.asyncio
    async def test_load_store_locks_client_first(self, mock_db):
        repo = DraftRepository()
        repo.get_all = AsyncMock(return_value={})
        await repo.load_store(mock_db, "c1")

        [stmt] = mock_db.execute.call_args.args
        compiled = stmt.compile(dialect=postgresql.dialect())
        assert "pg_advisory_xact_lock(hashtext(" in str(compiled)
        assert list(compiled.params.values()) == ["c1"]
        repo.get_all.assert_awaited_once_with(mock_db, "c1")

    @pytest.mark.asyncio
    async def test_flush_store_writes_only_changes(self, mock_db):
        repo = DraftRepository()
        repo.put = AsyncMock()
        repo.remove = AsyncMock()
        store = MemoryKeyValueStore({"stale": "1", "kept": "2"})
        store.set("draft", "{}")
        store.remove("stale")

        assert await repo.flush_store(mock_db, "c1", store) == 2

        repo.put.assert_awaited_once_with(mock_db, "c1", "draft", "{}")
        repo.remove.assert_awaited_once_with(mock_db, "c1", "stale")
        assert store.dirty == {}

    @pytest.mark.asyncio
    async def test_purge_returns_rowcount(self, mock_db):
        mock_db.execute.return_value = MagicMock(rowcount=4)
        assert await DraftRepository().purge_older_than(mock_db, older_than_days=30) == 4
        mock_db.flush.assert_awaited_once()
