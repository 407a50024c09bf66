import openpyxl

from captacion.data.backends import MemoryBackend
from captacion.data.schemas import CanonicalRecord
from captacion.data.store import SnapshotStore
from captacion.excel.styles import UNTRACEABLE_FILL
from captacion.reports import capture_report


def _store():
    store = SnapshotStore(MemoryBackend())
    store.replace_all([
        CanonicalRecord(date="2024-03-10", category="SALUD", client_id="1234567", agent="ANA"),
        CanonicalRecord(date="2024-03-11", category="SALUD", agent="LUIS"),
        CanonicalRecord(date="sin fecha", category="EDUCACION", client_id="7654321", agent="ANA"),
    ])
    return store


def test_date_range_skips_unparsed_dates():
    assert capture_report.date_range(_store()) == "2024-03-10 to 2024-03-11"
    assert capture_report.date_range(SnapshotStore(MemoryBackend())) == "N/A"


def test_generate_json():
    data = capture_report.generate_json(_store())
    assert data["total_clients"] == 3
    assert data["by_agent"][0] == {"name": "ANA", "count": 2, "share": 66.7}


def test_generate_excel(tmp_path):
    path = capture_report.generate_excel(_store(), tmp_path / "reports" / "captacion.xlsx")
    wb = openpyxl.load_workbook(path)
    assert wb.sheetnames == ["Resumen", "Por Fecha", "Registros"]

    records = wb["Registros"]
    assert records.cell(row=1, column=2).value == "CI"
    assert records.cell(row=3, column=2).value == "N/A"
    assert records.cell(row=3, column=1).fill.start_color.rgb.endswith(UNTRACEABLE_FILL.start_color.rgb[-6:])

    by_date = wb["Por Fecha"]
    assert by_date.cell(row=5, column=1).value == "TOTAL"
    assert by_date.cell(row=5, column=2).value == 3
