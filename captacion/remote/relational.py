"""
Remote relational store: batch insert through its REST interface.

Rows are shaped ``{ci, contacto, rubro, fecha, agente}``. Any error the
store answers with is surfaced to the caller verbatim in
``NetworkFailure.detail``.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from captacion.config import RemoteSettings, get_remote_settings
from captacion.data.schemas import CanonicalRecord
from captacion.errors import ConfigurationError
from captacion.remote.delivery import (
    DeliveryReceipt,
    DeliveryStatus,
    as_batch,
    confirm,
    post,
    raise_for_error,
    read_json,
)

TARGET = "relational"

ROW_FIELDS = {
    "ci": "client_id",
    "contacto": "client_name",
    "rubro": "category",
    "fecha": "date",
    "agente": "agent",
}


def to_store_row(values: Mapping[str, Any]) -> dict[str, Any]:
    return {column: values.get(field) for column, field in ROW_FIELDS.items()}


def push_to_relational(
    records: Iterable[CanonicalRecord | Mapping[str, Any]],
    settings: RemoteSettings | None = None,
) -> DeliveryReceipt:
    settings = settings or get_remote_settings()
    if not settings.relational_url or not settings.relational_key:
        raise ConfigurationError(
            "Relational store not configured (set CAPTACION_RELATIONAL_URL and CAPTACION_RELATIONAL_KEY)"
        )

    rows = [to_store_row(v) for v in as_batch(records)]
    if not rows:
        return DeliveryReceipt(TARGET, DeliveryStatus.SKIPPED, 0, "no records to push")

    url = f"{settings.relational_url.rstrip('/')}/rest/v1/{settings.relational_table}"
    headers = {
        "apikey": settings.relational_key,
        "Authorization": f"Bearer {settings.relational_key}",
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    }
    response = post(TARGET, url, settings.timeout, json=rows, headers=headers)
    raise_for_error(TARGET, response)
    return confirm(TARGET, read_json(response), len(rows), settings.delivery_policy)
