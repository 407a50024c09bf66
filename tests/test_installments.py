import datetime as dt

import pytest

from captacion.rules.installments import compute_collection_date, lookup_plan


def test_plan_lookup():
    assert lookup_plan("3") == (1085000, 3255000)
    assert lookup_plan(" 3 ") == (1085000, 3255000)
    assert lookup_plan(3) == (1085000, 3255000)


@pytest.mark.parametrize("quotas", ["7", "0", "", "tres", None])
def test_no_plan(quotas):
    assert lookup_plan(quotas) is None


@pytest.mark.parametrize(
    "diligence, expected",
    [
        (dt.date(2024, 3, 10), dt.date(2024, 4, 30)),
        (dt.date(2024, 3, 3), dt.date(2024, 3, 30)),
        (dt.date(2024, 3, 5), dt.date(2024, 3, 30)),
        (dt.date(2024, 3, 6), dt.date(2024, 4, 30)),
        (dt.date(2024, 12, 15), dt.date(2025, 1, 30)),
        (dt.date(2024, 1, 20), dt.date(2024, 2, 29)),
        (dt.date(2023, 1, 20), dt.date(2023, 2, 28)),
        (dt.date(2024, 2, 2), dt.date(2024, 2, 29)),
    ],
)
def test_collection_date(diligence, expected):
    assert compute_collection_date(diligence) == expected
