"""
Record endpoints: list, manual entry, summary statistics, Excel report.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from captacion.api.dependencies import get_store, http_error
from captacion.api.response_models import EntryRequest, RecordsResponse
from captacion.config import REPORTS_FOLDER
from captacion.data.loader import build_entry_record
from captacion.data.store import SnapshotStore
from captacion.errors import CaptacionError, NetworkFailure
from captacion.remote.sheets import push_to_sheets, require_settings
from captacion.reports import capture_report

router = APIRouter(prefix="/api", tags=["records"])


@router.get("/records", response_model=RecordsResponse)
def list_records(store: SnapshotStore = Depends(get_store)):
    """Stored records in display form (unresolved fields shown as N/A)."""
    records = [r.to_display() for r in store.records()]
    return RecordsResponse(records=records, count=len(records))


@router.post("/records", status_code=201)
def add_record(req: EntryRequest, store: SnapshotStore = Depends(get_store)):
    """Append one manually entered client, optionally pushing it to the sheets backend."""
    try:
        record = build_entry_record(req.ci, req.contacto, req.rubro, req.agente, fecha=req.fecha)
    except ValueError as exc:
        raise HTTPException(422, str(exc))

    settings = None
    if req.push:
        # configuration is checked before the record is stored
        try:
            settings = require_settings()
        except CaptacionError as exc:
            raise http_error(exc)

    store.append([record])
    result = {"status": "added", "record": record.to_display(), "total": store.count()}
    if settings is not None:
        try:
            receipt = push_to_sheets([record], settings)
        except NetworkFailure as exc:
            # record stays stored; the failed delivery is reported in the body
            result["delivery"] = {"target": "sheets", "status": "failed", "confirmed": False,
                                  "detail": exc.detail or str(exc)}
        else:
            result["delivery"] = {
                "target": receipt.target,
                "status": receipt.status.value,
                "confirmed": receipt.confirmed,
            }
    return result


@router.get("/summary")
def summary(store: SnapshotStore = Depends(get_store)):
    return capture_report.generate_json(store)


@router.get("/summary/excel")
def summary_excel(store: SnapshotStore = Depends(get_store)):
    out_path = REPORTS_FOLDER / "Captacion_Report.xlsx"
    capture_report.generate_excel(store, out_path)
    return FileResponse(
        path=str(out_path),
        filename=out_path.name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
