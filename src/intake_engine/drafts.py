"""DraftPersistence — resume-after-interruption for a wizard session.

The draft is one JSON document stored under a fixed key in an injected
:class:`KeyValueStore`.  Loading never fails: a missing, unparsable,
schema-invalid or out-of-range record means "no draft", and a bad record
is removed so it is not re-read on every load.  Storage errors on save
and clear are logged and dropped; losing a draft must never break the
wizard.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from intake_engine.constants import DRAFT_KEY
from intake_engine.interfaces import KeyValueStore
from intake_engine.models.draft import DraftRecord
from intake_engine.steps import PARTITION, StepPartitioner

logger = logging.getLogger(__name__)


class DraftPersistence:
    """Load/save/clear the draft for one client origin.

    Args:
        store: the key-value port; one store per client origin
        partition: used to reject drafts pointing at a non-existent step
        key: storage key (defaults to ``DRAFT_KEY``)
    """

    def __init__(
        self,
        store: KeyValueStore,
        partition: StepPartitioner = PARTITION,
        key: str = DRAFT_KEY,
    ) -> None:
        self._store = store
        self._partition = partition
        self._key = key

    def load(self) -> Optional[DraftRecord]:
        """Return the stored draft, or ``None`` if there is no usable one."""
        try:
            raw = self._store.get(self._key)
        except Exception as exc:
            logger.warning("Draft read failed for key=%s: %s", self._key, exc)
            return None
        if not raw:
            return None

        try:
            record = DraftRecord.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding malformed draft: %s", exc.errors()[:1])
            self.clear()
            return None

        if not self._partition.is_valid_ordinal(record.step_ordinal):
            logger.warning("Discarding draft with out-of-range step=%s", record.step_ordinal)
            self.clear()
            return None
        return record

    def save(self, record: DraftRecord) -> None:
        """Overwrite the stored draft with ``record`` (last write wins)."""
        stamped = record.model_copy(update={"saved_at": datetime.now(timezone.utc)})
        try:
            self._store.set(self._key, stamped.model_dump_json())
        except Exception as exc:
            logger.warning("Draft save failed for key=%s: %s", self._key, exc)

    def clear(self) -> None:
        """Remove the stored draft."""
        try:
            self._store.remove(self._key)
        except Exception as exc:
            logger.warning("Draft clear failed for key=%s: %s", self._key, exc)
