"""Tests for the persisted hash cache."""

from datetime import datetime, timezone

from devassist.sync.state import SyncState, list_states, state_path


def test_save_and_load(tmp_path):
    path = state_path(tmp_path, "demo")
    state = SyncState(project="demo", hashes={"a.py": "123"}, last_sync=datetime.now(timezone.utc))
    state.save(path)

    loaded = SyncState.load(path, "demo")
    assert loaded.hashes == {"a.py": "123"}
    assert loaded.last_sync == state.last_sync


def test_missing_file_starts_fresh(tmp_path):
    state = SyncState.load(state_path(tmp_path, "demo"), "demo")
    assert state.hashes == {}
    assert state.last_sync is None


def test_corrupt_file_starts_fresh(tmp_path):
    path = state_path(tmp_path, "demo")
    path.parent.mkdir(parents=True)
    path.write_text("invalid json")
    assert SyncState.load(path, "demo").hashes == {}


def test_other_project_starts_fresh(tmp_path):
    path = state_path(tmp_path, "demo")
    SyncState(project="other", hashes={"a.py": "1"}).save(path)
    assert SyncState.load(path, "demo").hashes == {}


def test_list_states(tmp_path):
    SyncState(project="one").save(state_path(tmp_path, "one"))
    SyncState(project="two", hashes={"x": "1"}).save(state_path(tmp_path, "two"))
    assert [s.project for s in list_states(tmp_path)] == ["one", "two"]
    assert list_states(tmp_path / "missing") == []
