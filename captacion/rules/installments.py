"""
Quota plans and the collection-date rule.
"""
from __future__ import annotations

import calendar
import datetime as dt
from typing import Any, NamedTuple

from captacion.config import COLLECTION_CUTOFF_DAY, COLLECTION_MAX_DAY, INSTALLMENT_PLANS


class InstallmentPlan(NamedTuple):
    monthly_amount: int
    total_amount: int


PLANS: dict[str, InstallmentPlan] = {
    quotas: InstallmentPlan(monthly, total)
    for quotas, (monthly, total) in INSTALLMENT_PLANS.items()
}


def lookup_plan(quota_count: Any) -> InstallmentPlan | None:
    """Plan for quota counts "1".."6"; anything else means no plan selected."""
    if quota_count is None:
        return None
    return PLANS.get(str(quota_count).strip())


def compute_collection_date(diligence_date: dt.date) -> dt.date:
    """Collection date for a diligence date.

    From the cutoff day onwards the collection moves to the next month. The
    day is the last day of the target month, capped at the 30th.
    """
    year, month = diligence_date.year, diligence_date.month
    if diligence_date.day >= COLLECTION_CUTOFF_DAY:
        month += 1
        if month > 12:
            month = 1
            year += 1
    last_day = calendar.monthrange(year, month)[1]
    return dt.date(year, month, min(COLLECTION_MAX_DAY, last_day))
