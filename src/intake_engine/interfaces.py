"""Abstract ports for the collaborators the wizard depends on.

These ABCs define the contract that hosting code must fulfil.  The SDK
ships only an in-memory key-value store; database-backed adapters live
in ``intake_db``.

Typical integration flow::

    store: KeyValueStore = MyBrowserStorage(...)
    sink: SubmissionSink = MyHttpSink(...)

    wizard = WizardController(DraftPersistence(store), sink)
    wizard.set_answer("q1", "Ana Pérez")
    await wizard.next()    # validation-gated
    ...
    await wizard.submit()  # last page: scores and hands off the case
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from intake_engine.models.session import SubmissionPayload


class SubmissionError(Exception):
    """The submission sink could not accept the case."""


class KeyValueStore(ABC):
    """Synchronous, origin-scoped string storage (e.g. browser storage).

    Implementations may raise on I/O or quota problems; the draft layer
    treats every such failure as "nothing stored".
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or ``None`` if the key is absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``.  Removing an absent key is a no-op."""
        ...


class SubmissionSink(ABC):
    """Receives a completed case.

    The engine is agnostic to transport and downstream storage.  A
    rejection is signalled by raising (preferably :class:`SubmissionError`);
    returning normally means the case was accepted.
    """

    @abstractmethod
    async def submit(self, payload: SubmissionPayload) -> None:
        """Deliver ``payload``.

        Parameters
        ----------
        payload:
            Answers, analysis, document metadata, consent flag, timestamp
            and the contact fields derived from the answers.
        """
        ...


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store.

    Tracks which keys changed since construction (or the last
    :meth:`mark_clean`) so a caller can write back only what moved.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._dirty: set[str] = set()

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._dirty.add(key)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
        self._dirty.add(key)

    @property
    def dirty(self) -> dict[str, Optional[str]]:
        """Changed keys mapped to their new value (``None`` = removed)."""
        return {k: self._data.get(k) for k in sorted(self._dirty)}

    def mark_clean(self) -> None:
        self._dirty.clear()
