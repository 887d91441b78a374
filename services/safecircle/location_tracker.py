"""Single-slot store for the most recently reported coordinate."""

import logging
import math
import time
from typing import Any, Optional

from common.storage import JsonFileStore
from services.safecircle.errors import InvalidCoordinatesError
from services.safecircle.models import LastLocation

logger = logging.getLogger(__name__)


def _finite(value: Any) -> Optional[float]:
    """Return value as a float if it is a finite number, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _stored_number(value: Any):
    # Stored snapshots keep only real numbers; anything else reads back as null
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def now_ms() -> int:
    return int(time.time() * 1000)


class LocationTracker:
    """Last known location, overwritten wholesale on every update."""

    def __init__(self, store: JsonFileStore):
        self._store = store

    def get(self) -> LastLocation:
        raw = self._store.load()
        return LastLocation(
            lat=_stored_number(raw.get("lat")),
            lng=_stored_number(raw.get("lng")),
            accuracy=_stored_number(raw.get("accuracy")),
            ts=_stored_number(raw.get("ts")),
        )

    def set(
        self,
        lat: Any,
        lng: Any,
        accuracy: Any = None,
        ts: Any = None,
    ) -> LastLocation:
        """
        Replace the stored location.

        Args:
            lat: Latitude, must be a finite number
            lng: Longitude, must be a finite number
            accuracy: Optional accuracy in metres; dropped when not finite
            ts: Optional epoch milliseconds; defaults to now when not finite

        Raises:
            InvalidCoordinatesError: if lat or lng is not a finite number
        """
        lat_n = _finite(lat)
        lng_n = _finite(lng)
        if lat_n is None or lng_n is None:
            raise InvalidCoordinatesError(f"invalid coordinates: lat={lat!r} lng={lng!r}")

        ts_n = _finite(ts)
        location = LastLocation(
            lat=lat_n,
            lng=lng_n,
            accuracy=_finite(accuracy),
            ts=ts_n if ts_n is not None else now_ms(),
        )
        with self._store.lock:
            self._store.save(location.model_dump())
        logger.debug("Saved last location at ts=%s", location.ts)
        return location
