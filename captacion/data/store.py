"""
SnapshotStore — the device-local dataset and its snapshot replication.

One device (the admin) exports full snapshots; every other device only
advances by importing them. An import replaces the whole dataset: there is
no merge and the last import wins.
"""
from __future__ import annotations

import datetime as dt
import json
from typing import Any, Callable, Iterable, Mapping

from captacion.config import SNAPSHOT_PREFIX, STORE_FILE
from captacion.data.backends import FileBackend, PersistenceBackend
from captacion.data.schemas import (
    CanonicalRecord,
    Role,
    SnapshotFile,
    SyncAction,
    SyncResult,
)
from captacion.errors import FormatError
from captacion.logging_setup import get_logger

logger = get_logger(__name__)

Snapshot = list


def _as_json_row(record: CanonicalRecord | Mapping[str, Any]) -> Any:
    if isinstance(record, CanonicalRecord):
        return record.to_dict()
    return record


def snapshot_filename(today: dt.date | None = None) -> str:
    return f"{SNAPSHOT_PREFIX}{(today or dt.date.today()).isoformat()}.json"


class SnapshotStore:
    """Owned, backend-injected store holding the current snapshot."""

    def __init__(self, backend: PersistenceBackend | None = None) -> None:
        self.backend = backend if backend is not None else FileBackend(STORE_FILE)

    # ------------------------------------------------------------------
    # Local persistence
    # ------------------------------------------------------------------

    def load(self) -> Snapshot:
        """Persisted dataset, or an empty list when none exists yet.

        Raises FormatError when the persisted document is not valid JSON.
        """
        text = self.backend.read()
        if not text:
            return []
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FormatError(f"Stored dataset is corrupt ({self.backend!r}): {exc}") from exc
        return data if isinstance(data, list) else []

    def replace_all(self, records: Iterable[CanonicalRecord | Mapping[str, Any]]) -> None:
        """Overwrite the whole dataset in a single backend write."""
        rows = [_as_json_row(r) for r in records]
        self.backend.write(json.dumps(rows, ensure_ascii=False))
        logger.info("Store replaced: %d records", len(rows))

    def append(self, records: Iterable[CanonicalRecord | Mapping[str, Any]]) -> Snapshot:
        """Add records to the end of the dataset (still one whole-dataset write)."""
        rows = self.load() + [_as_json_row(r) for r in records]
        self.replace_all(rows)
        return rows

    def records(self) -> list[CanonicalRecord]:
        """Current dataset as CanonicalRecords (non-object entries are skipped)."""
        return [CanonicalRecord.from_dict(r) for r in self.load() if isinstance(r, Mapping)]

    def count(self) -> int:
        return len(self.load())

    # ------------------------------------------------------------------
    # Snapshot export / import
    # ------------------------------------------------------------------

    def export_snapshot(
        self,
        records: Iterable[CanonicalRecord | Mapping[str, Any]] | None = None,
        today: dt.date | None = None,
    ) -> SnapshotFile:
        """Serialize ``records`` (default: the stored dataset) verbatim as a JSON array."""
        rows = self.load() if records is None else [_as_json_row(r) for r in records]
        content = json.dumps(rows, ensure_ascii=False, indent=2).encode("utf-8")
        return SnapshotFile(filename=snapshot_filename(today), content=content)

    def import_snapshot(self, file_contents: str | bytes) -> Snapshot:
        """Replace the dataset with a snapshot file's array.

        Raises FormatError (store untouched) when the contents are not a JSON array.
        """
        if isinstance(file_contents, (bytes, bytearray)):
            try:
                file_contents = bytes(file_contents).decode("utf-8-sig")
            except UnicodeDecodeError as exc:
                raise FormatError(f"Snapshot is not UTF-8 text: {exc}") from exc
        try:
            data = json.loads(file_contents)
        except json.JSONDecodeError as exc:
            raise FormatError(f"Snapshot is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise FormatError(f"Snapshot must be a JSON array, got {type(data).__name__}")

        self.replace_all(data)
        return data

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync(
        self,
        role: Role | str,
        choose_file: Callable[[], str | bytes | None] | None = None,
    ) -> SyncResult:
        """Refresh the active view from the local store.

        An agent device with an empty store is prompted (``choose_file``) for
        a snapshot to import instead; ``None`` from the prompt cancels.
        """
        role = Role(role)
        records = self.load()
        if role is Role.ADMIN or records:
            return SyncResult(SyncAction.REFRESHED, records)

        contents = choose_file() if choose_file is not None else None
        if contents is None:
            logger.info("Sync cancelled: empty store and no snapshot selected")
            return SyncResult(SyncAction.CANCELLED, records)
        return SyncResult(SyncAction.IMPORTED, self.import_snapshot(contents))
