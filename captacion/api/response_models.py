"""
Pydantic request/response schemas for the API.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, field_validator


class HealthResponse(BaseModel):
    status: str
    records: int
    store: str


class PlanResponse(BaseModel):
    quotas: str
    monthly_amount: int
    total_amount: int
    monthly_display: str
    total_display: str


class CollectionDateResponse(BaseModel):
    diligence_date: str
    collection_date: str


class RecordsResponse(BaseModel):
    records: list[dict[str, Any]]
    count: int


class EntryRequest(BaseModel):
    """Manual entry form. Every field is required; ``fecha`` defaults to today."""
    ci: str
    contacto: str
    rubro: str
    agente: str
    fecha: Optional[str] = None
    push: bool = False

    @field_validator("ci", "contacto", "rubro", "agente")
    @classmethod
    def _required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Todos los campos son obligatorios.")
        return v.strip()


class IngestResponse(BaseModel):
    status: str
    mode: str
    ingested: int
    total: int
    records: list[dict[str, Any]]


class ImportResponse(BaseModel):
    status: str
    count: int


class SyncResponse(BaseModel):
    role: str
    action: str
    count: int
    records: list[Any]


class PushRequest(BaseModel):
    indices: Optional[list[int]] = None


class DeliveryResponse(BaseModel):
    target: str
    status: str
    confirmed: bool
    records: int
    detail: Optional[str] = None
