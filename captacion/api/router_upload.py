"""
Spreadsheet upload: ingest a .xlsx/.csv into the store.

mode=append adds to the current dataset, mode=replace overwrites it, and
mode=preview only returns the normalized records.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from captacion.api.dependencies import get_store, http_error
from captacion.api.response_models import IngestResponse
from captacion.data.loader import ingest_file
from captacion.data.store import SnapshotStore
from captacion.errors import CaptacionError

router = APIRouter(prefix="/api", tags=["upload"])

_MODES = ("append", "replace", "preview")


@router.post("/upload", response_model=IngestResponse)
async def upload_spreadsheet(
    file: UploadFile = File(...),
    mode: str = Query("append", description="append|replace|preview"),
    store: SnapshotStore = Depends(get_store),
):
    if mode not in _MODES:
        raise HTTPException(400, f"Unknown mode: {mode}. Valid: {list(_MODES)}")
    if not file.filename:
        raise HTTPException(400, "Missing filename")

    content = await file.read()
    try:
        records = ingest_file(content, filename=file.filename)
    except CaptacionError as exc:
        raise http_error(exc)

    if mode == "append":
        store.append(records)
    elif mode == "replace":
        store.replace_all(records)

    return IngestResponse(
        status="previewed" if mode == "preview" else "ingested",
        mode=mode,
        ingested=len(records),
        total=store.count(),
        records=[r.to_display() for r in records],
    )
