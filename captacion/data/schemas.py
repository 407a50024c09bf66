"""
Canonical record, MISSING sentinel, roles and snapshot envelopes.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping, Union

from captacion.config import MISSING_PLACEHOLDER


class _Missing:
    """Marker for a logical field that no raw column supplied."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __copy__(self) -> "_Missing":
        return self

    def __deepcopy__(self, memo) -> "_Missing":
        return self

    def __reduce__(self):
        return (_Missing, ())


MISSING = _Missing()

FieldValue = Union[str, _Missing]


def is_missing(value: Any) -> bool:
    return value is MISSING


def display(value: Any, placeholder: str = MISSING_PLACEHOLDER) -> Any:
    """Render MISSING with the user-facing placeholder (presentation boundary only)."""
    return placeholder if value is MISSING else value


@dataclass(frozen=True)
class CanonicalRecord:
    """One normalized client/prospect entry. Every field is always present."""
    date: FieldValue = MISSING
    category: FieldValue = MISSING
    client_id: FieldValue = MISSING
    client_name: FieldValue = MISSING
    agent: FieldValue = MISSING
    phone: FieldValue = MISSING
    notes: FieldValue = MISSING
    diligence: FieldValue = MISSING
    diligence_date: FieldValue = MISSING
    collection_date: FieldValue = MISSING
    quotas: FieldValue = MISSING
    monthly_amount: FieldValue = MISSING
    total_amount: FieldValue = MISSING
    amount: FieldValue = MISSING

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> dict[str, str | None]:
        """JSON form: MISSING becomes null."""
        return {
            name: (None if getattr(self, name) is MISSING else getattr(self, name))
            for name in self.field_names()
        }

    def to_display(self, placeholder: str = MISSING_PLACEHOLDER) -> dict[str, str]:
        return {name: display(getattr(self, name), placeholder) for name in self.field_names()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CanonicalRecord":
        """Inverse of ``to_dict``; absent keys and nulls become MISSING."""
        values = {}
        for name in cls.field_names():
            raw = data.get(name)
            values[name] = MISSING if raw is None else str(raw)
        return cls(**values)


class Role(str, Enum):
    ADMIN = "admin"      # the device that exports the master snapshot
    AGENT = "agent"      # devices that only advance by importing


class SyncAction(str, Enum):
    REFRESHED = "refreshed"
    IMPORTED = "imported"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SnapshotFile:
    """A downloadable snapshot artifact."""
    filename: str
    content: bytes

    media_type = "application/json"


@dataclass(frozen=True)
class SyncResult:
    action: SyncAction
    records: list
