import pytest

from otakutrack.exceptions import StorageError
from otakutrack.storage.kv_store import JSONFileStorage


def test_round_trip_and_missing(storage):
    assert storage.get_item("otakutrack_progress") is None
    storage.set_item("otakutrack_progress", '{"a": 1}')
    assert storage.get_item("otakutrack_progress") == '{"a": 1}'


def test_keys_do_not_collide(storage):
    storage.set_item("otakutrack_progress", "progress")
    storage.set_item("otakutrack_cache", "cache")
    storage.set_item("otakutrack_settings", "settings")
    assert storage.get_item("otakutrack_progress") == "progress"
    assert storage.get_item("otakutrack_cache") == "cache"


def test_unsafe_keys_are_hashed(storage):
    storage.set_item("../escape", "x")
    assert storage.get_item("../escape") == "x"
    assert not (storage.data_dir.parent / "escape.json").exists()


def test_no_temp_files_left_behind(storage):
    storage.set_item("k", "v")
    assert [p.name for p in storage.data_dir.iterdir()] == ["k.json"]


def test_remove_item(storage):
    storage.set_item("k", "v")
    assert storage.remove_item("k") is True
    assert storage.remove_item("k") is False
    assert storage.get_item("k") is None


def test_write_failure_raises_storage_error(tmp_path):
    storage = JSONFileStorage(tmp_path / "data")
    (storage.data_dir / "k.json").mkdir()
    with pytest.raises(StorageError):
        storage.set_item("k", "v")
    assert [p.name for p in storage.data_dir.iterdir()] == ["k.json"]
