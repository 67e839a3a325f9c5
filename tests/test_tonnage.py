"""Tests for per-order tonnage and the category tables behind it."""

from datetime import time

import pytest

from packtrack.core.catalog import category_config, shift_for_time, units_per_load
from packtrack.core.models import OrderCategory, ShiftPeriod
from packtrack.core.tonnage import compute_tonnage, format_tonnage, round2, sum_tonnage


def test_export_tonnage():
    """3 export big bags at 1.1 T: 3 x 20 x 1.1."""
    assert compute_tonnage(OrderCategory.EXPORT, 3, 1.1) == 66.00


def test_local_tonnage():
    assert compute_tonnage(OrderCategory.LOCAL, 5, 1.2) == 132.00


def test_debardage_tonnage():
    assert compute_tonnage(OrderCategory.DEBARDAGE, 10, 1.2) == 12.00


def test_category_accepts_plain_string():
    assert compute_tonnage("EXPORT", 1, 1.2) == 24.00


def test_zero_count_gives_zero_tonnage():
    assert compute_tonnage(OrderCategory.EXPORT, 0, 1.1) == 0.0


def test_units_per_load_table():
    assert units_per_load(OrderCategory.EXPORT) == 20
    assert units_per_load(OrderCategory.LOCAL) == 22
    assert units_per_load(OrderCategory.DEBARDAGE) == 1


def test_unknown_category_rejected():
    with pytest.raises(ValueError):
        category_config("VRAC")


def test_round2_is_half_up():
    # Binary float would round 2.675 down to 2.67.
    assert round2(2.675) == 2.68
    assert round2(0.125) == 0.13
    assert round2(1.004) == 1.0


def test_sum_tonnage_is_exact():
    assert sum_tonnage([0.1, 0.2]) == 0.3
    assert sum_tonnage([]) == 0.0
    assert sum_tonnage([0.1] * 10) == 1.0


def test_format_tonnage():
    assert format_tonnage(1234.5) == "1,234.50 T"
    assert format_tonnage(None) == "0.00 T"


@pytest.mark.parametrize(
    "t, expected",
    [
        (time(6, 0), ShiftPeriod.MORNING),
        (time(13, 59), ShiftPeriod.MORNING),
        (time(14, 0), ShiftPeriod.AFTERNOON),
        (time(22, 0), ShiftPeriod.NIGHT),
        (time(0, 30), ShiftPeriod.NIGHT),
        (time(5, 59), ShiftPeriod.NIGHT),
    ],
)
def test_shift_for_time(t, expected):
    assert shift_for_time(t) == expected
