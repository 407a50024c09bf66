"""Pytest configuration for test isolation.

Paths in ``captacion.config`` are resolved at import time from
``CAPTACION_DATA_DIR``. Every test gets its own data directory by patching
the module-level paths the store, CLI and report endpoints read, and starts
without any remote collaborator configured.
"""

from __future__ import annotations

from pathlib import Path

import pytest

import captacion.api.router_records as router_records
import captacion.cli as cli
import captacion.data.store as store_module

_REMOTE_ENV = (
    "CAPTACION_SHEETS_URL",
    "CAPTACION_RELATIONAL_URL",
    "CAPTACION_RELATIONAL_KEY",
    "CAPTACION_RELATIONAL_TABLE",
    "CAPTACION_DELIVERY_POLICY",
    "CAPTACION_REMOTE_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("CAPTACION_DATA_DIR", str(data_dir))
    monkeypatch.setattr(store_module, "STORE_FILE", data_dir / "base_maestra.json")
    monkeypatch.setattr(cli, "EXPORTS_FOLDER", data_dir / "exports")
    monkeypatch.setattr(cli, "REPORTS_FOLDER", data_dir / "reports")
    monkeypatch.setattr(router_records, "REPORTS_FOLDER", data_dir / "reports")
    for name in _REMOTE_ENV:
        monkeypatch.delenv(name, raising=False)
    return data_dir
