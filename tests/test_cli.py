import pytest

from captacion import cli
from captacion.data.store import SnapshotStore


def test_add_and_list(capsys):
    cli.main(["add", "--ci", "1234567", "--contacto", "Ana", "--rubro", "salud", "--agente", "ana",
              "--fecha", "2024-03-10"])
    assert SnapshotStore().records()[0].category == "SALUD"

    cli.main(["list"])
    assert "1234567" in capsys.readouterr().out


def test_add_blank_field_exits(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["add", "--ci", " ", "--contacto", "Ana", "--rubro", "salud", "--agente", "ana"])
    assert exc_info.value.code == 2
    assert SnapshotStore().count() == 0


def test_ingest_export_import(tmp_path):
    sheet = tmp_path / "clientes.csv"
    sheet.write_text("CI,Rubro,Fecha\n1234567,salud,2024-03-10\n", encoding="utf-8")
    cli.main(["ingest", str(sheet)])
    assert SnapshotStore().count() == 1

    out = tmp_path / "out"
    cli.main(["export", "--output", str(out)])
    snapshot = next(out.glob("BASE_MAESTRA_*.json"))

    SnapshotStore().replace_all([])
    cli.main(["import", str(snapshot)])
    assert SnapshotStore().records()[0].client_id == "1234567"


def test_import_invalid_snapshot_exits(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{}", encoding="utf-8")
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["import", str(bad)])
    assert exc_info.value.code == 1


def test_sync_cancelled_on_blank_prompt(monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": "")
    cli.main(["sync", "--role", "agent"])
    assert "cancelled" in capsys.readouterr().out


def test_plan_and_collection_date(capsys):
    cli.main(["plan", "3"])
    assert "Gs. 1.085.000" in capsys.readouterr().out
    cli.main(["collection-date", "2024-03-10"])
    assert "2024-04-30" in capsys.readouterr().out


def test_push_without_configuration_exits():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["push", "sheets"])
    assert exc_info.value.code == 1


def test_import_missing_file_exits(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["import", str(tmp_path / "no_existe.json")])
    assert exc_info.value.code == 1
    assert "ERROR" in capsys.readouterr().out


def test_sync_prompt_with_missing_file_exits(tmp_path, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt="": str(tmp_path / "no_existe.json"))
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["sync", "--role", "agent"])
    assert exc_info.value.code == 1
    assert SnapshotStore().count() == 0


def test_add_with_push_unconfigured_stores_nothing():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["add", "--ci", "1234567", "--contacto", "Ana", "--rubro", "salud",
                  "--agente", "ana", "--push"])
    assert exc_info.value.code == 1
    assert SnapshotStore().count() == 0
