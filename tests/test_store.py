import datetime as dt
import json
import os

import pytest

from captacion.data.backends import FileBackend, MemoryBackend
from captacion.data.schemas import MISSING, CanonicalRecord, Role, SyncAction
from captacion.data.store import SnapshotStore, snapshot_filename
from captacion.errors import FormatError


def _records():
    return [
        CanonicalRecord(date="2024-03-10", category="SALUD", client_id="1234567", agent="ANA"),
        CanonicalRecord(date="2024-03-11", category="EDUCACION", client_id="7654321", phone="0981 123456"),
    ]


def _store(text=None) -> SnapshotStore:
    return SnapshotStore(MemoryBackend(text))


def test_empty_store_loads_empty_list():
    assert _store().load() == []
    assert _store('{"not": "a list"}').load() == []


def test_missing_fields_are_stored_as_null():
    store = _store()
    store.replace_all(_records())
    first = store.load()[0]
    assert first["client_id"] == "1234567"
    assert first["phone"] is None
    assert store.records()[0].phone is MISSING


def test_append_keeps_existing_records():
    store = _store()
    store.replace_all(_records()[:1])
    store.append(_records()[1:])
    assert [r.client_id for r in store.records()] == ["1234567", "7654321"]


def test_snapshot_filename():
    assert snapshot_filename(dt.date(2024, 3, 10)) == "BASE_MAESTRA_2024-03-10.json"


def test_export_import_round_trip():
    source = _store()
    source.replace_all(_records())
    snap = source.export_snapshot(today=dt.date(2024, 3, 10))
    assert snap.filename == "BASE_MAESTRA_2024-03-10.json"

    target = _store()
    target.import_snapshot(snap.content)
    assert target.load() == source.load()
    assert target.records() == _records()


def test_import_replaces_instead_of_merging():
    store = _store()
    store.replace_all(_records())
    store.import_snapshot(json.dumps([{"client_id": "999"}]))
    assert [r.client_id for r in store.records()] == ["999"]


@pytest.mark.parametrize("contents", ["{}", "not json", b"\xff\xfe\x00"])
def test_invalid_snapshot_leaves_store_untouched(contents):
    store = _store()
    store.replace_all(_records())
    before = store.load()
    with pytest.raises(FormatError):
        store.import_snapshot(contents)
    assert store.load() == before


def test_sync_admin_refreshes_without_prompt():
    def prompt():
        raise AssertionError("admin devices are never prompted")

    result = _store().sync(Role.ADMIN, choose_file=prompt)
    assert result.action is SyncAction.REFRESHED
    assert result.records == []


def test_sync_agent_with_data_refreshes():
    store = _store()
    store.replace_all(_records())
    result = store.sync("agent", choose_file=lambda: None)
    assert result.action is SyncAction.REFRESHED
    assert len(result.records) == 2


def test_sync_agent_empty_store_cancelled():
    store = _store()
    result = store.sync(Role.AGENT, choose_file=lambda: None)
    assert result.action is SyncAction.CANCELLED
    assert store.load() == []


def test_sync_agent_empty_store_imports_snapshot():
    source = _store()
    source.replace_all(_records())
    content = source.export_snapshot().content

    store = _store()
    result = store.sync(Role.AGENT, choose_file=lambda: content)
    assert result.action is SyncAction.IMPORTED
    assert store.load() == source.load()


def test_file_backend_round_trip(tmp_path):
    path = tmp_path / "sub" / "base_maestra.json"
    store = SnapshotStore(FileBackend(path))
    assert store.load() == []
    store.replace_all(_records())
    assert json.loads(path.read_text(encoding="utf-8"))[0]["client_id"] == "1234567"
    assert not (tmp_path / "sub" / "base_maestra.json.tmp").exists()


def test_file_backend_failed_write_keeps_previous_file(tmp_path, monkeypatch):
    path = tmp_path / "base_maestra.json"
    backend = FileBackend(path)
    backend.write('[{"client_id": "1"}]')

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", boom)
    with pytest.raises(OSError):
        backend.write("[]")
    assert path.read_text(encoding="utf-8") == '[{"client_id": "1"}]'
    assert not (tmp_path / "base_maestra.json.tmp").exists()


def test_default_backend_uses_store_file(_isolate_data_dir):
    store = SnapshotStore()
    store.replace_all(_records())
    assert (_isolate_data_dir / "base_maestra.json").exists()


def test_corrupt_store_is_a_format_error():
    store = _store("[{bad")
    with pytest.raises(FormatError):
        store.load()
    with pytest.raises(FormatError):
        store.count()


def test_import_recovers_a_corrupt_store():
    store = _store("[{bad")
    store.import_snapshot(json.dumps([{"client_id": "1"}]))
    assert store.count() == 1
