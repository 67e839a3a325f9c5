"""Tests for summary statistics over shift entries."""

import random
from datetime import date

from packtrack.core.aggregator import aggregate, category_distribution, platform_breakdown, trend
from packtrack.core.models import OrderCategory, Platform, ShiftEntry, ShiftPeriod, SummaryStats

from fixtures_sample_data import make_entry, make_order


def test_two_entries_total_and_average():
    entries = [
        make_entry([make_order(OrderCategory.EXPORT, 3)]),
        make_entry([make_order(OrderCategory.LOCAL, 5)]),
    ]
    stats = aggregate(entries)

    assert stats.total_tonnage == 198.00
    assert stats.average_tonnage == 99.00
    assert stats.entry_count == 2
    assert stats.export_tonnage == 66.00
    assert stats.local_tonnage == 132.00
    assert stats.debardage_tonnage == 0.0


def test_empty_input_gives_zero_stats():
    assert aggregate([]) == SummaryStats()
    assert aggregate([]).category_share(OrderCategory.EXPORT) == 0.0


def test_totals_do_not_depend_on_entry_order():
    entries = [
        make_entry([make_order(OrderCategory.EXPORT, n, 1.1), make_order(OrderCategory.DEBARDAGE, n + 1)])
        for n in range(1, 25)
    ]
    expected = aggregate(entries)

    shuffled = list(entries)
    random.Random(4).shuffle(shuffled)
    assert aggregate(shuffled) == expected


def test_unique_dossiers_are_normalized_and_skip_blanks():
    entries = [
        make_entry([make_order(dossier_reference="D-2041"), make_order(dossier_reference=" d-2041 ")]),
        make_entry([make_order(dossier_reference="D-2050"), make_order(dossier_reference="   ")]),
        make_entry([make_order(OrderCategory.LOCAL, 1)]),
    ]
    assert aggregate(entries).unique_dossiers == 2


def test_category_share_and_distribution():
    stats = aggregate(
        [
            make_entry([make_order(OrderCategory.EXPORT, 1, 1.2)]),  # 24 T
            make_entry([make_order(OrderCategory.DEBARDAGE, 96)]),  # 115.2 T
        ]
    )
    dist = category_distribution(stats)
    assert [c for c, _, _ in dist] == [OrderCategory.EXPORT, OrderCategory.DEBARDAGE]
    assert round(sum(share for _, _, share in dist), 6) == 100.0
    assert stats.category_share(OrderCategory.LOCAL) == 0.0


def test_trend_is_chronological_and_limited():
    d1, d2 = date(2026, 2, 4), date(2026, 2, 5)
    entries = [
        make_entry([make_order(OrderCategory.EXPORT, 1)], entry_date=d2, shift="MORNING"),
        make_entry([make_order(OrderCategory.EXPORT, 2)], entry_date=d1, shift="NIGHT"),
        make_entry([make_order(OrderCategory.EXPORT, 3)], entry_date=d1, shift="MORNING"),
        make_entry([make_order(OrderCategory.EXPORT, 4)], entry_date=d1, shift="AFTERNOON"),
    ]

    points = trend(entries, limit=10)
    assert [(p.entry_date, p.shift) for p in points] == [
        (d1, ShiftPeriod.MORNING),
        (d1, ShiftPeriod.AFTERNOON),
        (d1, ShiftPeriod.NIGHT),
        (d2, ShiftPeriod.MORNING),
    ]

    last_two = trend(entries, limit=2)
    assert [p.tonnage for p in last_two] == [44.0, 22.0]


def test_platform_breakdown():
    entries = [
        make_entry([make_order(OrderCategory.EXPORT, 3)], platform="BIG_BAG"),
        make_entry([make_order(OrderCategory.LOCAL, 5)], platform="50KG"),
        make_entry([make_order(OrderCategory.DEBARDAGE, 10)], platform="50KG"),
    ]
    assert platform_breakdown(entries) == {Platform.BIG_BAG: 66.0, Platform.FIFTY_KG: 144.0}


def test_total_uses_stored_entry_totals():
    orders = (make_order(OrderCategory.EXPORT, 3), make_order(OrderCategory.LOCAL, 5))  # 66 + 132
    entry = ShiftEntry(
        entry_date=date(2026, 2, 4),
        shift=ShiftPeriod.MORNING,
        platform=Platform.BIG_BAG,
        operator_name="Yassine",
        orders=orders,
        total_tonnage=150.0,
        total_orders=2,
    )
    stats = aggregate([entry, make_entry([make_order(OrderCategory.DEBARDAGE, 10)])])

    assert stats.total_tonnage == 162.00
    assert stats.average_tonnage == 81.00
    assert stats.export_tonnage == 66.00
    assert stats.local_tonnage == 132.00
    assert stats.debardage_tonnage == 12.00
