import pytest

from intake_engine.drafts import DraftPersistence
from intake_engine.interfaces import MemoryKeyValueStore

from support.wizard import RecordingSink, complete_answers


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def drafts(kv):
    return DraftPersistence(kv)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def answers():
    return complete_answers()
