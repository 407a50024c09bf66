"""
Capture statistics: totals, daily average, clients per load date and per category.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from captacion.config import MISSING_PLACEHOLDER
from captacion.data.schemas import CanonicalRecord


def records_frame(records: Iterable[CanonicalRecord | Mapping[str, Any]]) -> pd.DataFrame:
    """One row per record, every CanonicalRecord column, MISSING shown as the placeholder."""
    rows = []
    for r in records:
        if not isinstance(r, CanonicalRecord):
            r = CanonicalRecord.from_dict(r)
        rows.append(r.to_display())
    return pd.DataFrame(rows, columns=CanonicalRecord.field_names())


def _native(rows: list[dict]) -> list[dict]:
    """numpy scalars from DataFrame.to_dict → plain ints/floats for JSON."""
    return [{k: (v.item() if isinstance(v, np.generic) else v) for k, v in r.items()} for r in rows]


def _counts(series: pd.Series, label: str) -> pd.DataFrame:
    return series.groupby(series).size().rename("count").rename_axis(label).reset_index()


def clients_by_date(df: pd.DataFrame) -> pd.DataFrame:
    """Count per load date, ascending by date text."""
    if df.empty:
        return pd.DataFrame(columns=["date", "count"])
    return _counts(df["date"].astype(str), "date").sort_values("date").reset_index(drop=True)


def clients_by_category(df: pd.DataFrame, column: str = "category") -> pd.DataFrame:
    """Count per upper-cased value of ``column``, most frequent first, with ``share`` in %."""
    if df.empty:
        return pd.DataFrame(columns=["name", "count", "share"])
    names = df[column].astype(str).str.strip().str.upper()
    counts = _counts(names, "name").sort_values(["count", "name"], ascending=[False, True])
    counts["share"] = (counts["count"] * 100 / len(df)).round(1)
    return counts.reset_index(drop=True)


def summarize(records: Iterable[CanonicalRecord | Mapping[str, Any]]) -> dict:
    """Headline statistics for a dataset.

    ``daily_average`` is clients per distinct load date (0 for an empty dataset).
    """
    df = records_frame(records)
    by_date = clients_by_date(df)
    total = len(df)
    unique_dates = len(by_date)
    return {
        "total_clients": total,
        "unique_dates": unique_dates,
        "daily_average": round(total / max(unique_dates, 1), 2),
        "missing_dates": int((df["date"] == MISSING_PLACEHOLDER).sum()),
        "by_date": _native(by_date.to_dict("records")),
        "by_category": _native(clients_by_category(df).to_dict("records")),
        "by_agent": _native(clients_by_category(df, "agent").to_dict("records")),
    }
