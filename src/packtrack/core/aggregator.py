from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from packtrack.core.catalog import chronological_key
from packtrack.core.models import OrderCategory, Platform, ShiftEntry, ShiftPeriod, SummaryStats
from packtrack.core.reconciler import normalize_reference
from packtrack.core.tonnage import sum_tonnage

logger = logging.getLogger(__name__)


def aggregate(entries: Iterable[ShiftEntry]) -> SummaryStats:
    """Reduce shift entries into global statistics.

    The total trusts each entry's stored ``total_tonnage``; the per-category
    subtotals are taken from the individual orders.
    """
    entries = list(entries)
    if not entries:
        return SummaryStats()

    by_category: dict[OrderCategory, list[float]] = {c: [] for c in OrderCategory}
    dossiers: set[str] = set()
    for entry in entries:
        for order in entry.orders or ():
            by_category[OrderCategory(order.category)].append(order.tonnage)
            ref = normalize_reference(order.dossier_reference)
            if ref:
                dossiers.add(ref)

    total = sum_tonnage(e.total_tonnage for e in entries)
    stats = SummaryStats(
        total_tonnage=total,
        entry_count=len(entries),
        average_tonnage=total / len(entries),
        export_tonnage=sum_tonnage(by_category[OrderCategory.EXPORT]),
        local_tonnage=sum_tonnage(by_category[OrderCategory.LOCAL]),
        debardage_tonnage=sum_tonnage(by_category[OrderCategory.DEBARDAGE]),
        unique_dossiers=len(dossiers),
    )
    logger.debug("aggregated %d entries: %.2f T", stats.entry_count, stats.total_tonnage)
    return stats


@dataclass(frozen=True)
class TrendPoint:
    entry_date: date
    shift: ShiftPeriod
    tonnage: float


def trend(entries: Iterable[ShiftEntry], limit: int = 10) -> list[TrendPoint]:
    """Last ``limit`` entries in chronological order, for the production trend chart."""
    ordered = sorted(entries, key=chronological_key)
    if limit > 0:
        ordered = ordered[-limit:]
    return [TrendPoint(e.entry_date, ShiftPeriod(e.shift), float(e.total_tonnage)) for e in ordered]


def platform_breakdown(entries: Iterable[ShiftEntry]) -> dict[Platform, float]:
    per_platform: dict[Platform, list[float]] = {p: [] for p in Platform}
    for e in entries:
        per_platform[Platform(e.platform)].append(e.total_tonnage)
    return {p: sum_tonnage(v) for p, v in per_platform.items()}


def category_distribution(stats: SummaryStats) -> list[tuple[OrderCategory, float, float]]:
    """(category, tonnage, share %) for categories with production, for the distribution chart."""
    rows = []
    for c in OrderCategory:
        tons = stats.category_tonnage(c)
        if tons > 0:
            rows.append((c, tons, stats.category_share(c)))
    return rows
