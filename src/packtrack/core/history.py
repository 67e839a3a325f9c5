from __future__ import annotations

from typing import Iterable

from packtrack.core.catalog import SHIFT_ORDER
from packtrack.core.models import Platform, ShiftEntry, ShiftPeriod

SORT_FIELDS = ("date", "shift", "platform", "operator", "tonnage")


def filter_entries(
    entries: Iterable[ShiftEntry],
    *,
    search: str | None = None,
    shift: ShiftPeriod | str | None = None,
    platform: Platform | str | None = None,
) -> list[ShiftEntry]:
    """Filter by free text (operator name / notes), shift and platform.

    ``None`` or ``"All"`` disables the shift/platform filters.
    """
    term = (search or "").strip().lower()
    shift_f = None if shift in (None, "", "All") else ShiftPeriod(shift)
    platform_f = None if platform in (None, "", "All") else Platform(platform)

    out: list[ShiftEntry] = []
    for e in entries:
        if term and term not in e.operator_name.lower() and term not in (e.notes or "").lower():
            continue
        if shift_f is not None and ShiftPeriod(e.shift) != shift_f:
            continue
        if platform_f is not None and Platform(e.platform) != platform_f:
            continue
        out.append(e)
    return out


def sort_entries(entries: Iterable[ShiftEntry], field: str = "date", *, descending: bool = True) -> list[ShiftEntry]:
    if field not in SORT_FIELDS:
        raise ValueError(f"unsupported sort field: {field!r}")

    keys = {
        "date": lambda e: e.entry_date,
        "shift": lambda e: SHIFT_ORDER[ShiftPeriod(e.shift)],
        "platform": lambda e: Platform(e.platform).value,
        "operator": lambda e: e.operator_name.lower(),
        "tonnage": lambda e: float(e.total_tonnage),
    }
    return sorted(entries, key=keys[field], reverse=descending)
