"""
Spreadsheet ingestion: first worksheet / CSV → raw rows → canonical records.
"""
from __future__ import annotations

import csv
import datetime as dt
import io
import zipfile
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd

from captacion.config import CATEGORICAL_FIELDS, SPREADSHEET_EXTENSIONS, TEXT_TABLE_EXTENSIONS
from captacion.data.coerce import coerce_currency, coerce_date, date_text, format_currency
from captacion.data.normalize import as_text, resolve_field, resolve_raw
from captacion.data.schemas import MISSING, CanonicalRecord, FieldValue
from captacion.errors import FormatError
from captacion.logging_setup import get_logger
from captacion.rules.installments import compute_collection_date, lookup_plan

logger = get_logger(__name__)

RawRow = Mapping[str, Any]

_CSV_ENCODINGS = ("utf-8-sig", "latin-1")
# Spreadsheet exports in es-PY use ";"
_CSV_DELIMITERS = ",;\t|"


# ---------------------------------------------------------------------------
# File reading
# ---------------------------------------------------------------------------

def _sniff_delimiter(text: str) -> str:
    """Delimiter among ``_CSV_DELIMITERS``; a single-column file falls back to ","."""
    try:
        return csv.Sniffer().sniff(text[:8192], delimiters=_CSV_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _read_csv(data: bytes) -> pd.DataFrame:
    last_exc: Exception | None = None
    for encoding in _CSV_ENCODINGS:
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError as exc:
            last_exc = exc
            continue
        return pd.read_csv(
            io.StringIO(text), sep=_sniff_delimiter(text), dtype=str, keep_default_na=False,
        )
    raise FormatError(f"Could not decode CSV file: {last_exc}")


def read_table(source: str | Path | bytes, filename: str | None = None) -> pd.DataFrame:
    """Read the first worksheet of an .xlsx/.xlsm file, or a .csv file.

    ``source`` is a path or the raw file bytes; with bytes, ``filename``
    supplies the extension.
    """
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        name = filename or ""
    else:
        path = Path(source)
        data = path.read_bytes()
        name = filename or path.name

    suffix = Path(name).suffix.lower()
    try:
        if suffix in SPREADSHEET_EXTENSIONS:
            return pd.read_excel(io.BytesIO(data), sheet_name=0, dtype=object)
        if suffix in TEXT_TABLE_EXTENSIONS:
            return _read_csv(data)
    except (ValueError, KeyError, zipfile.BadZipFile, pd.errors.ParserError) as exc:
        raise FormatError(f"Could not read {name or 'file'}: {exc}") from exc
    raise FormatError(f"Unsupported file type '{suffix or name}' (expected .xlsx or .csv)")


def rows_from_frame(df: pd.DataFrame) -> list[dict[str, Any]]:
    """DataFrame → list of raw rows with string headers and None for empty cells."""
    df = df.dropna(how="all")
    df = df.astype(object).where(pd.notna(df), None)
    df.columns = [str(c) for c in df.columns]
    return df.to_dict(orient="records")


def load_raw_rows(source: str | Path | bytes, filename: str | None = None) -> list[dict[str, Any]]:
    rows = rows_from_frame(read_table(source, filename))
    rows = [r for r in rows if any(v is not None and str(v).strip() for v in r.values())]
    if not rows:
        raise FormatError("The spreadsheet has no data rows.")
    return rows


# ---------------------------------------------------------------------------
# Row → CanonicalRecord
# ---------------------------------------------------------------------------

def _text_field(row: RawRow, field: str) -> FieldValue:
    value = resolve_field(row, field)
    if value is not MISSING and field in CATEGORICAL_FIELDS:
        return value.upper()
    return value


def _date_field(row: RawRow, field: str) -> FieldValue:
    raw = resolve_raw(row, field)
    return MISSING if raw is MISSING else date_text(raw)


def _amount_field(row: RawRow) -> FieldValue:
    raw = resolve_raw(row, "amount")
    if raw is MISSING:
        return MISSING
    value = coerce_currency(raw)
    return value if value is not raw else as_text(raw)


def to_canonical_record(row: RawRow) -> CanonicalRecord:
    """Normalize one raw row. Unresolved fields are MISSING; bad values keep their text."""
    diligence_raw = resolve_raw(row, "diligence_date")
    diligence_date: FieldValue = MISSING
    collection_date: FieldValue = MISSING
    if diligence_raw is not MISSING:
        coerced = coerce_date(diligence_raw)
        if isinstance(coerced, dt.date):
            diligence_date = coerced.isoformat()
            collection_date = compute_collection_date(coerced).isoformat()
        else:
            diligence_date = date_text(diligence_raw)

    quotas = _text_field(row, "quotas")
    plan = lookup_plan(quotas) if quotas is not MISSING else None

    return CanonicalRecord(
        date=_date_field(row, "date"),
        category=_text_field(row, "category"),
        client_id=_text_field(row, "client_id"),
        client_name=_text_field(row, "client_name"),
        agent=_text_field(row, "agent"),
        phone=_text_field(row, "phone"),
        notes=_text_field(row, "notes"),
        diligence=_text_field(row, "diligence"),
        diligence_date=diligence_date,
        collection_date=collection_date,
        quotas=quotas,
        monthly_amount=format_currency(plan.monthly_amount) if plan else MISSING,
        total_amount=format_currency(plan.total_amount) if plan else MISSING,
        amount=_amount_field(row),
    )


def ingest_rows(rows: Iterable[RawRow]) -> list[CanonicalRecord]:
    records = [to_canonical_record(r) for r in rows]
    if records:
        missing = {
            name: sum(1 for rec in records if getattr(rec, name) is MISSING)
            for name in ("date", "category", "client_id")
        }
        logger.info("Ingested %d rows (missing: %s)", len(records), missing)
    return records


def ingest_file(source: str | Path | bytes, filename: str | None = None) -> list[CanonicalRecord]:
    """Read a spreadsheet and run every data row through the pipeline."""
    return ingest_rows(load_raw_rows(source, filename))


# ---------------------------------------------------------------------------
# Manual entry form
# ---------------------------------------------------------------------------

def build_entry_record(
    ci: str,
    contacto: str,
    rubro: str,
    agente: str,
    fecha: str | dt.date | None = None,
    today: dt.date | None = None,
) -> CanonicalRecord:
    """Canonical record from the manual entry form.

    All fields are required; ``fecha`` defaults to today. Raises ValueError
    naming the blank fields.
    """
    if fecha is None or (isinstance(fecha, str) and not fecha.strip()):
        fecha = today or dt.date.today()
    values = {"ci": ci, "contacto": contacto, "rubro": rubro, "agente": agente}
    blank = [name for name, v in values.items() if v is None or not str(v).strip()]
    if blank:
        raise ValueError(f"Todos los campos son obligatorios (faltan: {', '.join(blank)})")

    return CanonicalRecord(
        date=date_text(fecha),
        category=rubro.strip().upper(),
        client_id=ci.strip(),
        client_name=contacto.strip(),
        agent=agente.strip().upper(),
    )
