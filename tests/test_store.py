"""Test the JSON snapshot store."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from grantwatch.store import SnapshotStore, StoreError

SNAPSHOT = frozenset({
    "TABLE:monitorado:SELECT:public:users",
    "SCHEMA:monitorado:USAGE:public",
    "DATABASE:monitorado:CONNECT:testdb",
    "TABLE:monitorado:SELECT:odd\\:schema:t",
})


def test_missing_file_returns_none(tmp_path):
    store = SnapshotStore(tmp_path / "state.json")
    assert store.load() is None


@pytest.mark.parametrize("snapshot", [SNAPSHOT, frozenset()])
def test_round_trip(tmp_path, snapshot):
    store = SnapshotStore(tmp_path / "state.json")
    store.save(snapshot)
    assert store.load() == snapshot


def test_file_format_maps_keys_to_true(tmp_path):
    path = tmp_path / "state.json"
    SnapshotStore(path).save(SNAPSHOT)
    data = json.loads(path.read_text())
    assert set(data) == set(SNAPSHOT)
    assert all(v is True for v in data.values())


def test_save_overwrites_fully(tmp_path):
    store = SnapshotStore(tmp_path / "state.json")
    store.save(SNAPSHOT)
    store.save(frozenset({"SCHEMA:monitorado:USAGE:public"}))
    assert store.load() == {"SCHEMA:monitorado:USAGE:public"}


def test_save_leaves_no_temp_file(tmp_path):
    SnapshotStore(tmp_path / "state.json").save(SNAPSHOT)
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


def test_save_creates_parent_directory(tmp_path):
    store = SnapshotStore(tmp_path / "nested" / "dir" / "state.json")
    store.save(SNAPSHOT)
    assert store.load() == SNAPSHOT


def test_false_entries_are_absent(tmp_path):
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"SCHEMA:monitorado:USAGE:public": True, "TABLE:x:SELECT:a:b": False}))
    assert SnapshotStore(path).load() == {"SCHEMA:monitorado:USAGE:public"}


def test_reads_plain_indented_state(tmp_path):
    path = tmp_path / "permissions_state.json"
    path.write_text('{\n  "DATABASE:monitorado:CONNECT:testdb": true\n}')
    assert SnapshotStore(path).load() == {"DATABASE:monitorado:CONNECT:testdb"}


@pytest.mark.parametrize(
    ("content", "match"),
    [
        ("{not json", "cannot parse"),
        ('["TABLE:a:b:c:d"]', "expected a JSON object"),
        ('{"TABLE:a:b:c:d": "yes"}', "not a boolean"),
    ],
)
def test_corrupt_file_raises(tmp_path, content, match):
    path = tmp_path / "state.json"
    path.write_text(content)
    with pytest.raises(StoreError, match=match):
        SnapshotStore(path).load()


def test_unreadable_path_raises(tmp_path):
    # A directory where the file should be cannot be read as text.
    path = tmp_path / "state.json"
    path.mkdir()
    with pytest.raises(StoreError, match="cannot read"):
        SnapshotStore(path).load()


def test_unwritable_path_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    store = SnapshotStore(blocker / "state.json")
    with pytest.raises(StoreError, match="cannot write"):
        store.save(SNAPSHOT)


@pytest.mark.parametrize(
    "raw",
    [
        b'{"TABLE:a:b:c:\xff": true}',
        b"\xff\xfe garbage",
        b"[" * 100_000 + b"]" * 100_000,
    ],
    ids=["invalid-utf8-key", "invalid-utf8", "deep-nesting"],
)
def test_undecodable_file_raises(tmp_path, raw):
    path = tmp_path / "state.json"
    path.write_bytes(raw)
    with pytest.raises(StoreError, match="cannot parse"):
        SnapshotStore(path).load()


def test_permission_error_raises(tmp_path):
    path = tmp_path / "state.json"
    with patch.object(Path, "read_bytes", side_effect=PermissionError(13, "Permission denied")):
        with pytest.raises(StoreError, match="cannot read"):
            SnapshotStore(path).load()


def test_failed_rename_removes_temp_file(tmp_path, monkeypatch):
    path = tmp_path / "state.json"

    def broken_replace(src, dst):
        raise OSError(18, "Invalid cross-device link")

    monkeypatch.setattr("grantwatch.store.os.replace", broken_replace)
    with pytest.raises(StoreError, match="cannot write"):
        SnapshotStore(path).save(SNAPSHOT)
    assert list(tmp_path.iterdir()) == []
