"""HTTP surface tests — FastAPI TestClient with dependency overrides.

Mock strategy:
  - get_db yields an AsyncMock session (no database)
  - InMemoryDraftRepository keeps drafts in a dict keyed by client id
    while reusing the real load_store/flush_store unit of work
  - StubSubmissionRepository records payloads, or raises to simulate a
    rejected case
  - ClientLockedDraftRepository holds a per-client lock until the
    request's session closes, like the advisory lock does
"""

import asyncio
import uuid
from collections import defaultdict
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from intake_db.repository import DraftRepository
from intake_engine.constants import DRAFT_KEY, MSG_SIGNATURE_REQUIRED, MSG_SUBMISSION_FAILED
from intake_engine.models.draft import DocumentMeta, DraftRecord
from intake_server.app import create_app
from intake_server.config import ServerSettings
from intake_server.dependencies import (
    get_db,
    get_draft_repository,
    get_submission_repository,
)

from support.wizard import PASSPORT, SELFIE, SIGNATURE, complete_answers

API = "/api/v1"
CLIENT = {"X-User-ID": "client-1"}


# =====================================================================
# Fakes
# =====================================================================


class InMemoryDraftRepository(DraftRepository):
    def __init__(self):
        self.rows: dict[str, dict[str, str]] = {}

    async def get_all(self, db, client_id):
        return dict(self.rows.get(client_id, {}))

    async def put(self, db, client_id, key, value):
        self.rows.setdefault(client_id, {})[key] = value

    async def remove(self, db, client_id, key):
        self.rows.get(client_id, {}).pop(key, None)


class ClientLockedDraftRepository(InMemoryDraftRepository):
    def __init__(self):
        super().__init__()
        self.locks = defaultdict(asyncio.Lock)

    async def lock_client(self, db, client_id):
        lock = self.locks[client_id]
        await lock.acquire()
        db.held_locks.append(lock)


class StubSubmissionRepository:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.payloads = []

    async def create_submission(self, db, payload):
        if self.error is not None:
            raise self.error
        self.payloads.append(payload)
        return MagicMock(id=uuid.uuid4())


class SlowSubmissionRepository(StubSubmissionRepository):
    async def create_submission(self, db, payload):
        await asyncio.sleep(0.05)
        return await super().create_submission(db, payload)


# =====================================================================
# Fixtures
# =====================================================================


@pytest.fixture
def draft_repo():
    return InMemoryDraftRepository()


@pytest.fixture
def submission_repo():
    return StubSubmissionRepository()


def _build_app(draft_repo, submission_repo, settings=None):
    app = create_app(settings or ServerSettings())

    async def _db():
        db = AsyncMock()
        db.add = MagicMock()
        db.held_locks = []
        try:
            yield db
        finally:
            for lock in db.held_locks:
                lock.release()

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_draft_repository] = lambda: draft_repo
    app.dependency_overrides[get_submission_repository] = lambda: submission_repo
    return app


def _build_client(draft_repo, submission_repo, settings=None):
    return TestClient(_build_app(draft_repo, submission_repo, settings))


@pytest.fixture
def client(draft_repo, submission_repo):
    with _build_client(draft_repo, submission_repo) as c:
        yield c


def _seed_last_step(draft_repo, client_id="client-1"):
    record = DraftRecord(
        step_ordinal=11,
        answers=complete_answers(),
        consent_granted=True,
        document_meta=DocumentMeta(passport=PASSPORT, selfieWithPassport=SELFIE),
    )
    draft_repo.rows[client_id] = {DRAFT_KEY: record.model_dump_json()}


# =====================================================================
# Identity
# =====================================================================


class TestIdentity:

    def test_missing_user_header(self, client):
        assert client.get(f"{API}/wizard").status_code == 401

    def test_proxy_secret_enforced(self, draft_repo, submission_repo):
        settings = ServerSettings(trusted_proxy_secret="s3cret")
        with _build_client(draft_repo, submission_repo, settings) as c:
            assert c.get(f"{API}/wizard", headers=CLIENT).status_code == 403
            resp = c.get(f"{API}/wizard", headers={**CLIENT, "X-Proxy-Secret": "s3cret"})
            assert resp.status_code == 200


# =====================================================================
# Wizard flow
# =====================================================================


class TestWizard:

    def test_fresh_view(self, client):
        resp = client.get(f"{API}/wizard", headers=CLIENT)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "step"
        assert body["ordinal"] == 1
        assert body["total_steps"] == 11
        assert body["progress_percent"] == 8
        assert "q12" not in [q["key"] for q in body["questions"]]

    def test_answer_is_drafted_and_changes_visibility(self, client, draft_repo):
        resp = client.put(f"{API}/wizard/answers", json={"key": "q11", "value": "Sí"}, headers=CLIENT)
        assert resp.status_code == 200
        assert "q12" in [q["key"] for q in resp.json()["questions"]]
        assert DRAFT_KEY in draft_repo.rows["client-1"]

    def test_drafts_are_scoped_per_client(self, client):
        client.put(f"{API}/wizard/answers", json={"key": "q1", "value": "Ana"}, headers=CLIENT)
        other = client.get(f"{API}/wizard", headers={"X-User-ID": "client-2"}).json()
        assert other["questions"][0]["value"] == ""
        mine = client.get(f"{API}/wizard", headers=CLIENT).json()
        assert mine["questions"][0]["value"] == "Ana"

    def test_unknown_question_is_404(self, client):
        resp = client.put(f"{API}/wizard/answers", json={"key": "q999", "value": "x"}, headers=CLIENT)
        assert resp.status_code == 404

    def test_next_reports_validation_error_in_view(self, client):
        resp = client.post(f"{API}/wizard/next", headers=CLIENT)
        assert resp.status_code == 200
        body = resp.json()
        assert body["ordinal"] == 1
        assert body["validation_error"]["question_id"] == 1

    def test_next_and_back(self, client):
        for key, value in complete_answers().items():
            if key in {f"q{i}" for i in range(1, 16)}:
                client.put(f"{API}/wizard/answers", json={"key": key, "value": value}, headers=CLIENT)
        assert client.post(f"{API}/wizard/next", headers=CLIENT).json()["ordinal"] == 2
        assert client.post(f"{API}/wizard/back", headers=CLIENT).json()["ordinal"] == 1

    def test_documents_and_consent(self, client):
        resp = client.put(
            f"{API}/wizard/documents/passport",
            json={"name": "pasaporte.jpg", "size": 1024, "type": "image/jpeg"},
            headers=CLIENT,
        )
        assert resp.json()["document_meta"]["passport"]["name"] == "pasaporte.jpg"
        resp = client.put(f"{API}/wizard/consent", json={"granted": True}, headers=CLIENT)
        assert resp.json()["consent_granted"] is True

    def test_unknown_document_slot_is_404(self, client):
        resp = client.put(
            f"{API}/wizard/documents/licencia",
            json={"name": "x.jpg", "size": 1},
            headers=CLIENT,
        )
        assert resp.status_code == 404

    def test_reset(self, client, draft_repo):
        client.put(f"{API}/wizard/answers", json={"key": "q1", "value": "Ana"}, headers=CLIENT)
        resp = client.delete(f"{API}/wizard", headers=CLIENT)
        assert resp.status_code == 200
        assert resp.json()["questions"][0]["value"] == ""
        assert draft_repo.rows["client-1"] == {}


# =====================================================================
# Submission
# =====================================================================


class TestSubmit:

    def test_submit_before_last_step_is_400(self, client):
        resp = client.post(f"{API}/wizard/submit", json={"signature": SIGNATURE}, headers=CLIENT)
        assert resp.status_code == 400

    def test_successful_submit(self, client, draft_repo, submission_repo):
        _seed_last_step(draft_repo)
        resp = client.post(f"{API}/wizard/submit", json={"signature": SIGNATURE}, headers=CLIENT)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "complete"
        assert body["analysis"]["score"] == 100
        assert len(submission_repo.payloads) == 1
        assert DRAFT_KEY not in draft_repo.rows["client-1"]

    def test_missing_signature_is_422(self, client, draft_repo, submission_repo):
        _seed_last_step(draft_repo)
        resp = client.post(f"{API}/wizard/submit", json={}, headers=CLIENT)
        assert resp.status_code == 422
        assert resp.json()["detail"]["message"] == MSG_SIGNATURE_REQUIRED
        assert submission_repo.payloads == []

    def test_rejected_case_is_502_and_keeps_draft(self, draft_repo):
        _seed_last_step(draft_repo)
        failing = StubSubmissionRepository(error=ValueError("Missing required fields: contact_email"))
        with _build_client(draft_repo, failing) as c:
            resp = c.post(f"{API}/wizard/submit", json={"signature": SIGNATURE}, headers=CLIENT)
        assert resp.status_code == 502
        assert resp.json()["detail"] == MSG_SUBMISSION_FAILED
        assert DRAFT_KEY in draft_repo.rows["client-1"]

    def test_next_on_last_step_accepts_signature(self, client, draft_repo, submission_repo):
        _seed_last_step(draft_repo)
        resp = client.post(f"{API}/wizard/next", json={"signature": SIGNATURE}, headers=CLIENT)
        assert resp.status_code == 200
        assert resp.json()["status"] == "complete"
        assert len(submission_repo.payloads) == 1

    def test_next_on_last_step_without_signature(self, client, draft_repo, submission_repo):
        _seed_last_step(draft_repo)
        resp = client.post(f"{API}/wizard/next", headers=CLIENT)
        assert resp.status_code == 200
        assert resp.json()["validation_error"]["message"] == MSG_SIGNATURE_REQUIRED
        assert submission_repo.payloads == []


class TestConcurrentSubmit:

    @pytest.mark.asyncio
    async def test_double_submit_stores_one_case(self):
        draft_repo = ClientLockedDraftRepository()
        submission_repo = SlowSubmissionRepository()
        _seed_last_step(draft_repo)
        app = _build_app(draft_repo, submission_repo)

        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
                responses = await asyncio.gather(*(
                    c.post(f"{API}/wizard/submit", json={"signature": SIGNATURE}, headers=CLIENT)
                    for _ in range(2)
                ))

        assert sorted(r.status_code for r in responses) == [200, 400]
        assert len(submission_repo.payloads) == 1
        assert draft_repo.rows["client-1"] == {}


# =====================================================================
# Reference data
# =====================================================================


class TestReference:

    def test_steps(self, client):
        steps = client.get(f"{API}/reference/steps").json()
        assert len(steps) == 11
        assert steps[3]["id_range"] == [46, 65]
        assert steps[10]["kind"] == "consent"

    def test_questions(self, client):
        questions = client.get(f"{API}/reference/questions").json()
        assert len(questions) == 120
        assert questions[11]["show_if"] == [{"key": "q11", "op": "eq", "value": "Sí"}]
