"""
Push endpoints: send stored records to the relational store or the sheets backend.

A failed push never touches the local store.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from captacion.api.dependencies import get_store, http_error
from captacion.api.response_models import DeliveryResponse, PushRequest
from captacion.data.store import SnapshotStore
from captacion.errors import CaptacionError
from captacion.remote.delivery import DeliveryReceipt
from captacion.remote.relational import push_to_relational
from captacion.remote.sheets import push_to_sheets

router = APIRouter(prefix="/api/push", tags=["push"])


def _selected(store: SnapshotStore, req: Optional[PushRequest]) -> list:
    records = store.records()
    if req is None or req.indices is None:
        return records
    bad = [i for i in req.indices if not 0 <= i < len(records)]
    if bad:
        raise HTTPException(400, f"Record index out of range: {bad}")
    return [records[i] for i in req.indices]


def _response(receipt: DeliveryReceipt) -> DeliveryResponse:
    return DeliveryResponse(
        target=receipt.target,
        status=receipt.status.value,
        confirmed=receipt.confirmed,
        records=receipt.records,
        detail=receipt.detail,
    )


@router.post("/relational", response_model=DeliveryResponse)
def push_relational(req: Optional[PushRequest] = None, store: SnapshotStore = Depends(get_store)):
    try:
        return _response(push_to_relational(_selected(store, req)))
    except CaptacionError as exc:
        raise http_error(exc)


@router.post("/sheets", response_model=DeliveryResponse)
def push_sheets(req: Optional[PushRequest] = None, store: SnapshotStore = Depends(get_store)):
    try:
        return _response(push_to_sheets(_selected(store, req)))
    except CaptacionError as exc:
        raise http_error(exc)
