"""
Date and currency coercion for locale-ambiguous spreadsheet values.

Both coercers are total: when no interpretation fits they hand back the
original value unchanged instead of raising.
"""
from __future__ import annotations

import datetime as dt
import math
import numbers
import re
import warnings
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import numpy as np
import pandas as pd

from captacion.config import (
    CURRENCY_PREFIX,
    SERIAL_EPOCH_OFFSET,
    SERIAL_MAX_DAY,
    THOUSANDS_SEPARATOR,
)
from captacion.logging_setup import get_logger

logger = get_logger(__name__)

_UNIX_EPOCH = dt.date(1970, 1, 1)
_SERIAL_TEXT_RE = re.compile(r"^\d+(\.\d+)?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_NON_AMOUNT_RE = re.compile(r"[^0-9.]")
_DOT_GROUPED_RE = re.compile(r"^\d{1,3}(\.\d{3})+$")


def _is_number(raw: Any) -> bool:
    return isinstance(raw, numbers.Real) and not isinstance(raw, (bool, np.bool_))


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def serial_to_date(serial: float) -> dt.date | None:
    """Day count where ``SERIAL_EPOCH_OFFSET`` is 1970-01-01; fractions are dropped."""
    if not math.isfinite(serial) or not (1 <= serial <= SERIAL_MAX_DAY):
        return None
    return _UNIX_EPOCH + dt.timedelta(days=math.floor(serial) - SERIAL_EPOCH_OFFSET)


def _parse_date_text(text: str) -> dt.date | None:
    if _SERIAL_TEXT_RE.match(text):
        return serial_to_date(float(text))
    if _ISO_DATE_RE.match(text):
        try:
            return dt.date.fromisoformat(text[:10])
        except ValueError:
            pass
    if not any(ch.isdigit() for ch in text):
        # pandas reads words like "now" or "today" as the current date
        return None
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            parsed = pd.to_datetime(text, dayfirst=True, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def coerce_date(raw: Any) -> Any:
    """Canonical ``datetime.date`` for ``raw``, or ``raw`` itself when nothing fits.

    Order: serial day count → calendar value → calendar text.
    """
    if raw is None:
        return raw
    if _is_number(raw):
        result = serial_to_date(float(raw))
    elif isinstance(raw, dt.datetime):
        result = None if pd.isna(raw) else raw.date()
    elif isinstance(raw, dt.date):
        result = raw
    elif isinstance(raw, np.datetime64):
        result = None if pd.isna(raw) else pd.Timestamp(raw).date()
    else:
        text = str(raw).strip()
        result = _parse_date_text(text) if text else None

    if result is None:
        logger.debug("coerce_date: keeping unparseable value %r", raw)
        return raw
    return result


def date_text(raw: Any) -> str:
    """ISO text of the coerced date, or the trimmed original text."""
    value = coerce_date(raw)
    if isinstance(value, dt.date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------

def parse_currency(raw: Any) -> float | None:
    """Numeric amount of a currency-like value, or None.

    Everything but digits and dots is stripped. A dot-grouped remainder
    (``1.500.000``) uses dots as thousands separators; otherwise the dot is
    the decimal point.
    """
    if raw is None:
        return None
    if _is_number(raw):
        value = float(raw)
        return value if math.isfinite(value) else None

    cleaned = _NON_AMOUNT_RE.sub("", str(raw)).strip(".")
    if _DOT_GROUPED_RE.match(cleaned):
        cleaned = cleaned.replace(".", "")
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def format_currency(amount: float | int) -> str:
    """Zero decimals (half-up), dot thousands grouping, ``Gs.`` prefix."""
    whole = int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    grouped = f"{whole:,}".replace(",", THOUSANDS_SEPARATOR)
    return f"{CURRENCY_PREFIX}{grouped}"


def coerce_currency(raw: Any) -> Any:
    """Formatted currency text, or ``raw`` unchanged when it does not parse."""
    value = parse_currency(raw)
    if value is None:
        logger.debug("coerce_currency: keeping unparseable value %r", raw)
        return raw
    return format_currency(value)
