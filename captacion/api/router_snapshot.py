"""
Snapshot endpoints: export the dataset, import a snapshot file, role-aware sync.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from captacion.api.dependencies import get_store, http_error, parse_role
from captacion.api.response_models import ImportResponse, SyncResponse
from captacion.data.schemas import Role
from captacion.data.store import SnapshotStore
from captacion.errors import CaptacionError

router = APIRouter(prefix="/api", tags=["snapshot"])


@router.get("/snapshot/export")
def export_snapshot(store: SnapshotStore = Depends(get_store)):
    snap = store.export_snapshot()
    return Response(
        content=snap.content,
        media_type=snap.media_type,
        headers={"Content-Disposition": f'attachment; filename="{snap.filename}"'},
    )


@router.post("/snapshot/import", response_model=ImportResponse)
async def import_snapshot(
    file: UploadFile = File(...),
    store: SnapshotStore = Depends(get_store),
):
    """Replace the whole dataset with the uploaded snapshot (last import wins)."""
    content = await file.read()
    try:
        data = store.import_snapshot(content)
    except CaptacionError as exc:
        raise http_error(exc)
    return ImportResponse(status="imported", count=len(data))


@router.post("/sync", response_model=SyncResponse)
async def sync(
    role: Role = Depends(parse_role),
    file: Optional[UploadFile] = File(None),
    store: SnapshotStore = Depends(get_store),
):
    """Refresh from the local store; an agent with an empty store imports ``file`` if given."""
    contents = await file.read() if file is not None else None
    try:
        result = store.sync(role, choose_file=lambda: contents)
    except CaptacionError as exc:
        raise http_error(exc)
    return SyncResponse(
        role=role.value,
        action=result.action.value,
        count=len(result.records),
        records=result.records,
    )
