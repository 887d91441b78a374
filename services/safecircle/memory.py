"""
Process-wide diagnostic memory.

Loaded once when the recorder is built, mutated in memory and flushed after
every change. A failed flush is logged by the store and the in-memory state is
kept, so the snapshot can briefly run ahead of the file.
"""

import logging
from datetime import datetime, timezone
from typing import Union

from pydantic import ValidationError

from common.constants import MESSAGE_PREVIEW_LENGTH
from common.storage import JsonFileStore
from services.safecircle.models import GeneratedMessagePreview, MemoryState

logger = logging.getLogger(__name__)


class MemoryRecorder:
    def __init__(self, store: JsonFileStore):
        self._store = store
        self._state = self._load()

    def _load(self) -> MemoryState:
        raw = self._store.load()
        try:
            return MemoryState.model_validate(raw)
        except ValidationError as e:
            logger.warning("Memory snapshot is malformed, starting empty: %s", e)
            return MemoryState()

    def _flush(self) -> None:
        self._store.save(self._state.model_dump(mode="json"))

    def snapshot(self) -> MemoryState:
        with self._store.lock:
            return self._state.model_copy(deep=True)

    def record_low_risk(self, scenario_id: str, safer_action: str) -> None:
        with self._store.lock:
            self._state.has_memory = True
            self._state.last_low_scenario_id = scenario_id or None
            self._state.last_safer_action = safer_action or None
            self._flush()

    def record_generated_message(self, risk_level: str, contact_type: str, text: str) -> None:
        with self._store.lock:
            self._state.has_memory = True
            self._state.last_generated_message = GeneratedMessagePreview(
                ts=datetime.now(timezone.utc),
                risk_level=str(risk_level).upper(),
                contact_type=str(contact_type).lower(),
                preview=text[:MESSAGE_PREVIEW_LENGTH],
            )
            self._flush()

    def record_location(self, ts: Union[int, float]) -> None:
        with self._store.lock:
            self._state.has_memory = True
            self._state.last_location_ts = ts
            self._flush()
