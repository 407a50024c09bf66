"""
Best-effort delivery contract shared by the remote collaborators.

A push is one request for the whole batch: no retry, no per-record
acknowledgment. A push that raised nothing is not automatically a success;
the receipt says whether the collaborator confirmed it. Whether an
unreadable 2xx answer counts as delivered is a configured policy:

- ``strict``: UNCONFIRMED
- ``optimistic``: DELIVERED
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

import requests

from captacion.data.schemas import MISSING, CanonicalRecord
from captacion.errors import NetworkFailure
from captacion.logging_setup import get_logger

logger = get_logger(__name__)


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    UNCONFIRMED = "unconfirmed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DeliveryReceipt:
    target: str
    status: DeliveryStatus
    records: int
    detail: str | None = None

    @property
    def confirmed(self) -> bool:
        return self.status is DeliveryStatus.DELIVERED


def record_values(record: CanonicalRecord | Mapping[str, Any]) -> dict[str, Any]:
    """Field → value with MISSING as None, for CanonicalRecords or snapshot rows."""
    if isinstance(record, CanonicalRecord):
        return record.to_dict()
    return {k: (None if v is MISSING else v) for k, v in record.items()}


def as_batch(records: Iterable[CanonicalRecord | Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [record_values(r) for r in records]


def post(target: str, url: str, timeout: float, **kwargs: Any) -> requests.Response:
    """Single POST; transport errors become NetworkFailure."""
    try:
        return requests.post(url, timeout=timeout, **kwargs)
    except requests.RequestException as exc:
        logger.warning("%s push failed: %s", target, exc)
        raise NetworkFailure(f"{target} push failed: {exc}", detail=str(exc)) from exc


def read_json(response: requests.Response) -> Any:
    """Decoded body, or None when the body is empty or not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def confirm(target: str, body: Any, count: int, policy: str) -> DeliveryReceipt:
    """Receipt for a 2xx answer whose decoded body is ``body`` (None = unreadable)."""
    if body is None:
        status = DeliveryStatus.DELIVERED if policy == "optimistic" else DeliveryStatus.UNCONFIRMED
        logger.info("%s push: response unreadable, recorded as %s (%s policy)", target, status.value, policy)
        return DeliveryReceipt(target, status, count, "response could not be read")
    logger.info("%s push confirmed: %d records", target, count)
    return DeliveryReceipt(target, DeliveryStatus.DELIVERED, count)


def raise_for_error(target: str, response: requests.Response) -> None:
    """Non-2xx answers surface the collaborator's error body verbatim."""
    if response.ok:
        return
    logger.warning("%s push rejected: HTTP %s", target, response.status_code)
    raise NetworkFailure(
        f"{target} rejected the push (HTTP {response.status_code})",
        detail=response.text,
        status_code=response.status_code,
    )
