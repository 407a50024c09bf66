"""
Remote spreadsheet backend (a script web app in front of the central sheet).

The batch goes out as one form-encoded request; each record contributes one
group of fields named after the CanonicalRecord fields, in record order.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from captacion.config import RemoteSettings, get_remote_settings
from captacion.data.schemas import CanonicalRecord
from captacion.errors import ConfigurationError, NetworkFailure
from captacion.remote.delivery import (
    DeliveryReceipt,
    DeliveryStatus,
    as_batch,
    confirm,
    post,
    raise_for_error,
    read_json,
)

TARGET = "sheets"


def encode_form(batch: list[dict[str, Any]]) -> list[tuple[str, str]]:
    fields = CanonicalRecord.field_names()
    form: list[tuple[str, str]] = []
    for row in batch:
        for name in fields:
            value = row.get(name)
            form.append((name, "" if value is None else str(value)))
    return form


def require_settings(settings: RemoteSettings | None = None) -> RemoteSettings:
    """Remote settings with a sheets URL, or ConfigurationError before any I/O."""
    settings = settings or get_remote_settings()
    if not settings.sheets_url:
        raise ConfigurationError("Sheets backend not configured (set CAPTACION_SHEETS_URL)")
    return settings


def push_to_sheets(
    records: Iterable[CanonicalRecord | Mapping[str, Any]],
    settings: RemoteSettings | None = None,
) -> DeliveryReceipt:
    settings = require_settings(settings)

    batch = as_batch(records)
    if not batch:
        return DeliveryReceipt(TARGET, DeliveryStatus.SKIPPED, 0, "no records to push")

    response = post(TARGET, settings.sheets_url, settings.timeout, data=encode_form(batch))
    raise_for_error(TARGET, response)

    body = read_json(response)
    if isinstance(body, dict) and (body.get("error") or body.get("result") == "error"):
        raise NetworkFailure(
            f"{TARGET} reported an error", detail=response.text, status_code=response.status_code
        )
    return confirm(TARGET, body, len(batch), settings.delivery_policy)
