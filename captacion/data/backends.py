"""
Persistence backends for SnapshotStore.

A backend holds one opaque text document (the serialized dataset). Writes
replace the whole document at once.
"""
from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import Protocol


class PersistenceBackend(Protocol):
    def read(self) -> str | None:
        """Current document, or None when nothing has been written yet."""
        ...

    def write(self, text: str) -> None:
        """Replace the document atomically."""
        ...


class FileBackend:
    """Single JSON file on local disk; writes go to ``.tmp`` and then ``os.replace``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, self.path)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise

    def __repr__(self) -> str:
        return f"FileBackend({str(self.path)!r})"


class MemoryBackend:
    """In-process backend (tests, previews)."""

    def __init__(self, text: str | None = None) -> None:
        self._text = text

    def read(self) -> str | None:
        return self._text

    def write(self, text: str) -> None:
        self._text = text
