"""
File-backed JSON storage shared by the guardian, location and memory stores.

Each store is a single JSON snapshot on disk. Reads never fail: a missing,
unreadable or malformed file yields the store's default value. Writes go
through a temporary file and ``os.replace`` so a crash mid-write leaves the
previous snapshot intact.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    Load-or-default wrapper around one JSON file.

    Every read-modify-write cycle should go through ``update`` so concurrent
    requests touching the same store are serialized by the store's lock.
    """

    def __init__(
        self,
        path: str,
        default_factory: Callable[[], Any],
        validator: Optional[Callable[[Any], bool]] = None,
    ):
        """
        Args:
            path: Location of the JSON file
            default_factory: Builds the value returned when the file is unusable
            validator: Optional predicate the decoded value must satisfy
        """
        self.path = path
        self._default_factory = default_factory
        self._validator = validator
        self.lock = threading.RLock()

    def load(self) -> Any:
        """Return the stored value, or a fresh default if it cannot be used."""
        if not os.path.exists(self.path):
            return self._default_factory()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not read store %s, using default: %s", self.path, e)
            return self._default_factory()

        if self._validator is not None and not self._validator(data):
            logger.warning("Store %s has unexpected shape, using default", self.path)
            return self._default_factory()

        return data

    def save(self, value: Any) -> bool:
        """
        Persist a value.

        Returns:
            True on success, False if the write failed (already logged)
        """
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("Could not write store %s: %s", self.path, e)
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.warning("Could not remove temp file %s", tmp_path)
            return False

    def update(self, mutate: Callable[[Any], Any]) -> Any:
        """
        Load, apply ``mutate`` and save while holding the store lock.

        Args:
            mutate: Receives the current value and returns the new one

        Returns:
            The new value (returned even if the write failed)
        """
        with self.lock:
            current = self.load()
            updated = mutate(current)
            self.save(updated)
            return updated
