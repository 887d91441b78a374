# pytest services/safecircle/tests/test_location_tracker.py -q

import json
import math
import os

import pytest

from services.safecircle.errors import InvalidCoordinatesError
from services.safecircle.location_tracker import now_ms

pytestmark = pytest.mark.unit


def test_empty_location_is_all_null(state):
    location = state.location.get()
    assert (location.lat, location.lng, location.accuracy, location.ts) == (None, None, None, None)


def test_set_then_get_round_trips(state):
    state.location.set(lat=53.3438, lng=-6.2546, accuracy=12.5, ts=1700000000000)

    location = state.location.get()
    assert location.lat == 53.3438
    assert location.lng == -6.2546
    assert location.accuracy == 12.5
    assert location.ts == 1700000000000


def test_missing_timestamp_defaults_to_now(state):
    before = now_ms()
    saved = state.location.set(lat=1.0, lng=2.0)
    after = now_ms()

    assert before <= saved.ts <= after


def test_non_finite_accuracy_is_dropped(state):
    saved = state.location.set(lat=1.0, lng=2.0, accuracy=math.inf)
    assert saved.accuracy is None


@pytest.mark.parametrize(
    "lat,lng",
    [
        (None, 2.0),
        (1.0, None),
        ("north", 2.0),
        (math.nan, 2.0),
        (1.0, math.inf),
        (True, 2.0),
    ],
)
def test_invalid_coordinates_rejected(state, lat, lng):
    with pytest.raises(InvalidCoordinatesError):
        state.location.set(lat=lat, lng=lng)

    assert state.location.get().lat is None


def test_set_overwrites_previous(state):
    state.location.set(lat=1.0, lng=2.0, accuracy=5.0)
    state.location.set(lat=3.0, lng=4.0)

    location = state.location.get()
    assert (location.lat, location.lng, location.accuracy) == (3.0, 4.0, None)


def test_non_numeric_stored_fields_read_as_null(state, data_dir):
    os.makedirs(data_dir, exist_ok=True)
    with open(os.path.join(data_dir, "last_location.json"), "w", encoding="utf-8") as f:
        json.dump({"lat": "53.3", "lng": -6.2, "accuracy": True, "ts": 1}, f)

    location = state.location.get()
    assert location.lat is None
    assert location.lng == -6.2
    assert location.accuracy is None
    assert location.ts == 1


def test_repeated_get_returns_same_location(state):
    assert state.location.get() == state.location.get()

    state.location.set(lat=53.3438, lng=-6.2546, accuracy=4.0)
    assert state.location.get() == state.location.get()


@pytest.mark.parametrize("lat", ["abc", [1.0], {"lat": 1.0}])
def test_non_numeric_values_rejected(state, lat):
    with pytest.raises(InvalidCoordinatesError):
        state.location.set(lat=lat, lng=2.0)
