"""
Capture Report — headline KPIs, clients by category, agent and date, full record list.
"""
from __future__ import annotations

from pathlib import Path

from captacion.analytics.summary import records_frame, summarize
from captacion.config import MISSING_PLACEHOLDER
from captacion.data.store import SnapshotStore
from captacion.excel.writer import CaptureWorkbook

RECORD_COLUMNS = [
    ("date", "text", "Fecha de carga"),
    ("client_id", "text", "CI"),
    ("client_name", "text", "Contacto"),
    ("category", "text", "Rubro"),
    ("agent", "text", "Agente"),
    ("phone", "text", "Teléfono"),
    ("diligence", "text", "Diligencia"),
    ("diligence_date", "text", "Fecha diligencia"),
    ("collection_date", "text", "Fecha de cobro"),
    ("quotas", "text", "Cuotas"),
    ("monthly_amount", "text", "Cuota mensual"),
    ("total_amount", "text", "Total"),
    ("amount", "text", "Monto"),
    ("notes", "text", "Observaciones"),
]


def _count_columns(label: str) -> list:
    return [("name", "text", label), ("count", "count", "Clientes"), ("share", "share", "%")]


def date_range(store: SnapshotStore) -> str:
    # ISO dates sort chronologically; unparsed load dates are left out
    dates = sorted(r.date for r in store.records() if isinstance(r.date, str) and r.date[:1].isdigit())
    if not dates:
        return MISSING_PLACEHOLDER
    return f"{dates[0]} to {dates[-1]}"


def generate_json(store: SnapshotStore) -> dict:
    data = summarize(store.records())
    data["date_range"] = date_range(store)
    return data


def generate_excel(store: SnapshotStore, output_path: str | Path) -> Path:
    data = generate_json(store)
    book = CaptureWorkbook()

    ws = book.sheet("Resumen")
    row = book.title(ws, "CLC CAPTACIÓN", f"Informe de captación  |  {data['date_range']}")
    row = book.kpis(ws, row, [
        (data["total_clients"], "Clientes", "count"),
        (data["unique_dates"], "Días de carga", "count"),
        (data["daily_average"], "Promedio diario", "average"),
    ])
    row = book.section(ws, row, "CLIENTES POR RUBRO")
    row = book.table(ws, row, _count_columns("Rubro"), data["by_category"], total=True)
    row = book.section(ws, row + 1, "CLIENTES POR AGENTE")
    book.table(ws, row, _count_columns("Agente"), data["by_agent"], total=True)

    ws = book.sheet("Por Fecha")
    book.table(ws, 1, [("date", "text", "Fecha"), ("count", "count", "Clientes")],
               data["by_date"], total=True, freeze=True)

    ws = book.sheet("Registros")
    book.table(ws, 1, RECORD_COLUMNS, records_frame(store.records()), freeze=True,
               flag=lambda r: r.get("client_id") == MISSING_PLACEHOLDER)

    return book.save(output_path)
