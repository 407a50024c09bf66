"""
Structural error kinds. Soft failures (missing fields, unparseable values)
never raise; they surface as MISSING or as the original raw text.
"""
from __future__ import annotations


class CaptacionError(Exception):
    """Base class for errors that abort a whole operation."""


class FormatError(CaptacionError):
    """An imported snapshot is not a JSON array, or a spreadsheet has no data rows."""


class ConfigurationError(CaptacionError):
    """A remote collaborator is not configured; raised before any network I/O."""


class NetworkFailure(CaptacionError):
    """A push to a remote collaborator failed. Local state is left intact."""

    def __init__(self, message: str, detail: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code
