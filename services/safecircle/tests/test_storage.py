# pytest services/safecircle/tests/test_storage.py -q

import json
import os
import threading

import pytest

from common.storage import JsonFileStore

pytestmark = pytest.mark.unit


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(
        str(tmp_path / "nested" / "items.json"),
        default_factory=list,
        validator=lambda v: isinstance(v, list),
    )


def test_missing_file_returns_default(store):
    assert store.load() == []


def test_save_creates_directory_and_round_trips(store):
    assert store.save([{"a": 1}]) is True
    assert store.load() == [{"a": 1}]


def test_save_leaves_no_temp_files(store):
    store.save([1, 2, 3])
    assert os.listdir(os.path.dirname(store.path)) == ["items.json"]


def test_unparseable_file_returns_default(store):
    os.makedirs(os.path.dirname(store.path))
    with open(store.path, "w", encoding="utf-8") as f:
        f.write("[1, 2")

    assert store.load() == []


def test_wrong_shape_returns_default(store):
    os.makedirs(os.path.dirname(store.path))
    with open(store.path, "w", encoding="utf-8") as f:
        json.dump({"not": "a list"}, f)

    assert store.load() == []


def test_default_is_fresh_each_time(store):
    first = store.load()
    first.append("x")
    assert store.load() == []


def test_unserializable_value_is_not_written(store):
    store.save(["kept"])

    assert store.save([object()]) is False
    assert store.load() == ["kept"]
    assert os.listdir(os.path.dirname(store.path)) == ["items.json"]


def test_update_returns_new_value(store):
    assert store.update(lambda items: items + ["a"]) == ["a"]
    assert store.update(lambda items: items + ["b"]) == ["a", "b"]


def test_concurrent_updates_are_serialized(store):
    def _append(n):
        store.update(lambda items: items + [n])

    threads = [threading.Thread(target=_append, args=(i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(store.load()) == list(range(20))
