"""DraftPersistence — round trip and the "never fails" load contract."""

import json

import pytest

from intake_engine.constants import DRAFT_KEY
from intake_engine.drafts import DraftPersistence
from intake_engine.models.draft import DocumentMeta, DraftRecord

from support.wizard import PASSPORT, BrokenStore


def _record(**kwargs):
    defaults = dict(
        step_ordinal=3,
        answers={"q1": "Ana Pérez", "q26": "Sí"},
        consent_granted=True,
        document_meta=DocumentMeta(passport=PASSPORT),
    )
    defaults.update(kwargs)
    return DraftRecord(**defaults)


class TestRoundTrip:

    def test_nothing_stored(self, drafts):
        assert drafts.load() is None

    def test_save_then_load(self, drafts):
        drafts.save(_record())
        loaded = drafts.load()
        assert loaded.step_ordinal == 3
        assert loaded.answers == {"q1": "Ana Pérez", "q26": "Sí"}
        assert loaded.consent_granted is True
        assert loaded.document_meta.passport == PASSPORT
        assert loaded.saved_at is not None

    def test_stored_under_fixed_key_as_json(self, kv, drafts):
        drafts.save(_record())
        stored = json.loads(kv.get(DRAFT_KEY))
        assert stored["step_ordinal"] == 3
        assert stored["document_meta"]["passport"]["name"] == PASSPORT.name

    def test_last_write_wins(self, drafts):
        drafts.save(_record(step_ordinal=2))
        drafts.save(_record(step_ordinal=5))
        assert drafts.load().step_ordinal == 5

    def test_custom_key(self, kv):
        persistence = DraftPersistence(kv, key="otro")
        persistence.save(_record())
        assert kv.get("otro") is not None
        assert kv.get(DRAFT_KEY) is None

    def test_clear(self, kv, drafts):
        drafts.save(_record())
        drafts.clear()
        assert kv.get(DRAFT_KEY) is None
        assert drafts.load() is None


class TestDiscardedDrafts:

    @pytest.mark.parametrize("raw", [
        "{not json",
        "[]",
        json.dumps({"answers": {}}),
        json.dumps({"step_ordinal": "tres"}),
    ])
    def test_malformed_is_discarded(self, kv, drafts, raw):
        kv.set(DRAFT_KEY, raw)
        assert drafts.load() is None
        assert kv.get(DRAFT_KEY) is None

    @pytest.mark.parametrize("ordinal", [0, 12, 99])
    def test_out_of_range_step_is_discarded(self, kv, drafts, ordinal):
        kv.set(DRAFT_KEY, json.dumps({"step_ordinal": ordinal}))
        assert drafts.load() is None
        assert kv.get(DRAFT_KEY) is None


class TestStorageFailures:

    def test_broken_store_never_raises(self):
        persistence = DraftPersistence(BrokenStore())
        assert persistence.load() is None
        persistence.save(_record())
        persistence.clear()

    def test_failures_are_logged(self, caplog):
        persistence = DraftPersistence(BrokenStore())
        with caplog.at_level("WARNING", logger="intake_engine.drafts"):
            persistence.save(_record())
        assert "Draft save failed" in caplog.text
