import datetime as dt

import openpyxl
import pytest

from captacion.data.loader import build_entry_record, ingest_file, load_raw_rows, to_canonical_record
from captacion.data.schemas import MISSING
from captacion.errors import FormatError


def _write_xlsx(path, rows):
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


def test_ingest_xlsx(tmp_path):
    path = _write_xlsx(tmp_path / "clientes.xlsx", [
        ["Fecha", "Rubro ", "Cédula", "Nombre", "Fecha Diligencia", "Cuotas", "Monto"],
        [45361, "salud", 1234567, "Ana Benitez", dt.datetime(2024, 3, 10), 3, "Gs. 1.500.000"],
    ])
    records = ingest_file(path)
    assert len(records) == 1
    r = records[0]
    assert r.date == "2024-03-10"
    assert r.category == "SALUD"
    assert r.client_id == "1234567"
    assert r.client_name == "Ana Benitez"
    assert r.diligence_date == "2024-03-10"
    assert r.collection_date == "2024-04-30"
    assert r.quotas == "3"
    assert r.monthly_amount == "Gs. 1.085.000"
    assert r.total_amount == "Gs. 3.255.000"
    assert r.amount == "Gs. 1.500.000"
    assert r.agent is MISSING
    assert r.phone is MISSING


def test_ingest_csv_bytes():
    content = (
        "Fecha_de_Carga,Rubro,CI,Contacto,Agente\n"
        "2024-03-10,salud,1234567,Ana Benitez,ana\n"
        "2024-03-11,educacion,7654321,Luis Rojas,carlos\n"
    ).encode("utf-8")
    records = ingest_file(content, filename="clientes.csv")
    assert [r.client_id for r in records] == ["1234567", "7654321"]
    assert [r.agent for r in records] == ["ANA", "CARLOS"]
    assert records[1].category == "EDUCACION"


def test_empty_spreadsheet_is_a_format_error(tmp_path):
    path = _write_xlsx(tmp_path / "vacio.xlsx", [["Fecha", "Rubro", "CI"]])
    with pytest.raises(FormatError):
        load_raw_rows(path)


def test_unsupported_extension(tmp_path):
    path = tmp_path / "clientes.txt"
    path.write_text("Fecha,Rubro\n2024-03-10,salud\n")
    with pytest.raises(FormatError):
        ingest_file(path)


def test_soft_failures_keep_original_text():
    r = to_canonical_record({"Fecha": "mañana", "Monto": "a convenir", "Cuotas": "12"})
    assert r.date == "mañana"
    assert r.amount == "a convenir"
    assert r.quotas == "12"
    assert r.monthly_amount is MISSING
    assert r.collection_date is MISSING


def test_entry_record_upper_cases_categoricals():
    r = build_entry_record(" 1234567 ", "Ana", "salud", "ana", today=dt.date(2024, 3, 10))
    assert r.client_id == "1234567"
    assert r.category == "SALUD"
    assert r.agent == "ANA"
    assert r.date == "2024-03-10"


def test_entry_record_requires_every_field():
    with pytest.raises(ValueError, match="contacto"):
        build_entry_record("1234567", "  ", "salud", "ana")


def test_single_column_csv_keeps_its_header():
    records = ingest_file(b"CI\n1234567\n7654321\n", filename="clientes.csv")
    assert [r.client_id for r in records] == ["1234567", "7654321"]


def test_semicolon_csv():
    content = "CI;Rubro;Agente\n1234567;salud;ana\n".encode("latin-1")
    records = ingest_file(content, filename="clientes.csv")
    assert records[0].client_id == "1234567"
    assert records[0].category == "SALUD"
