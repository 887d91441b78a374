"""
Owned stores for the SafeCircle service.

Routes receive a ``SafeCircleState`` through ``Depends(get_state)`` so tests
can point the whole service at a temporary directory via
``app.dependency_overrides``.
"""

import logging
import os
from typing import Optional

from common.constants import GUARDIANS_FILE, LOCATION_FILE, MEMORY_FILE
from common.storage import JsonFileStore
from libs.config import config
from services.safecircle.guardian_registry import GuardianRegistry
from services.safecircle.location_tracker import LocationTracker
from services.safecircle.manager import EmergencyManager
from services.safecircle.memory import MemoryRecorder
from services.safecircle.models import MemoryState

logger = logging.getLogger(__name__)


def _empty_location() -> dict:
    return {"lat": None, "lng": None, "accuracy": None, "ts": None}


class SafeCircleState:
    """Guardian, location and memory stores rooted in one data directory."""

    def __init__(self, data_dir: str):
        self.guardian_store = JsonFileStore(
            os.path.join(data_dir, GUARDIANS_FILE),
            default_factory=list,
            validator=lambda v: isinstance(v, list),
        )
        self.location_store = JsonFileStore(
            os.path.join(data_dir, LOCATION_FILE),
            default_factory=_empty_location,
            validator=lambda v: isinstance(v, dict),
        )
        self.memory_store = JsonFileStore(
            os.path.join(data_dir, MEMORY_FILE),
            default_factory=lambda: MemoryState().model_dump(mode="json"),
            validator=lambda v: isinstance(v, dict),
        )

        self.guardians = GuardianRegistry(self.guardian_store)
        self.location = LocationTracker(self.location_store)
        self.memory = MemoryRecorder(self.memory_store)
        self.emergency = EmergencyManager(self.guardians, self.location)


# Global state instance
_state: Optional[SafeCircleState] = None


def get_state() -> SafeCircleState:
    """
    Get or create the process-wide state.

    Memory is read from disk only on the first call.
    """
    global _state
    if _state is None:
        _state = SafeCircleState(config.DATA_DIR)
        logger.info("SafeCircle state initialized from %s", config.DATA_DIR)
    return _state
