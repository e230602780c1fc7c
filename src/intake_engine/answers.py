"""AnswerStore — latest-write-wins map from question key to answer.

The store has a single logical writer (the controller acting for the
client).  Readers never see the live dict: :meth:`snapshot` returns a
read-only view of a copy, so visibility predicates and the scoring
engine cannot mutate state or observe a later write.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from intake_engine.catalog import CATALOG, QuestionCatalog

# Read-only answer view handed to predicates, validator and scorer.
AnswerSnapshot = Mapping[str, str]


class AnswerStore:
    """Mutable answer map owned by one wizard session.

    Args:
        catalog: used to reject keys that no question owns.
        initial: answers restored from a draft; unknown keys are dropped.
    """

    def __init__(
        self,
        catalog: QuestionCatalog = CATALOG,
        initial: Mapping[str, str] | None = None,
    ) -> None:
        self._catalog = catalog
        self._answers: dict[str, str] = {}
        for key, value in (initial or {}).items():
            if key in catalog and isinstance(value, str):
                self._answers[key] = value

    def set(self, key: str, value: str) -> None:
        """Overwrite the answer for ``key``.

        Raises:
            KeyError: if no question has this key.
            TypeError: if ``value`` is not a string.
        """
        if key not in self._catalog:
            raise KeyError(f"Question not found: key={key}")
        if not isinstance(value, str):
            raise TypeError(f"Answer for {key} must be a string, got {type(value).__name__}")
        self._answers[key] = value

    def get(self, key: str, default: str = "") -> str:
        return self._answers.get(key, default)

    def reset(self) -> None:
        """Drop every answer (full session reset only)."""
        self._answers.clear()

    def snapshot(self) -> AnswerSnapshot:
        return MappingProxyType(dict(self._answers))

    def __len__(self) -> int:
        return len(self._answers)

    def __contains__(self, key: object) -> bool:
        return key in self._answers
