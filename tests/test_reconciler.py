"""Tests for dossier reconciliation against the master program."""

from dataclasses import replace
from datetime import date

from packtrack.core.models import MasterProgramEntry, OrderCategory
from packtrack.core.reconciler import (
    apply_dossier,
    completion_percent,
    filter_progress,
    lookup_dossier,
    normalize_reference,
    reconcile_dossier,
    reconcile_program,
)
from packtrack.core.validation import OrderDraft

from fixtures_sample_data import PROGRAM_D2041, PROGRAM_D2050, make_entry, make_order


def test_dossier_progress_by_tonnage_and_units():
    # One order matches by dossier, the other by SAP code only.
    entries = [
        make_entry([make_order(OrderCategory.EXPORT, 3, dossier_reference="D-2041")]),
        make_entry([make_order(OrderCategory.LOCAL, 5, sap_code="5100239")]),
    ]
    p = reconcile_dossier(PROGRAM_D2041, entries)

    assert p.produced_tonnage == 198.00
    assert p.percent == 99
    assert p.produced_units == 8
    assert p.remaining_units == 2
    assert not p.is_complete


def test_overproduction_clamps_percent_and_remaining():
    entries = [make_entry([make_order(OrderCategory.EXPORT, 12, 1.1, dossier_reference="D-2041")])]
    p = reconcile_dossier(PROGRAM_D2041, entries)

    assert p.produced_tonnage == 264.00
    assert p.percent == 100
    assert p.remaining_units == 0
    assert p.is_complete


def test_nothing_planned_gives_zero_percent():
    target = replace(PROGRAM_D2041, planned_tonnage=0.0)
    entries = [make_entry([make_order(dossier_reference="D-2041")])]
    assert reconcile_dossier(target, entries).percent == 0
    assert completion_percent(10.0, 0) == 0


def test_completion_percent_rounds_half_up():
    assert completion_percent(1.0, 200.0) == 1  # 0.5 %
    assert completion_percent(0.9, 200.0) == 0


def test_matching_ignores_case_and_spaces():
    entries = [make_entry([make_order(OrderCategory.EXPORT, 1, dossier_reference=" d-2041")])]
    assert reconcile_dossier(PROGRAM_D2041, entries).produced_units == 1


def test_blank_references_never_match():
    # D-2050 has no SAP code; orders without SAP code must not count.
    entries = [make_entry([make_order(OrderCategory.LOCAL, 2)])]
    p = reconcile_dossier(PROGRAM_D2050, entries)
    assert p.produced_tonnage == 0.0
    assert p.history == ()
    assert p.remaining_units == 4


def test_order_counted_once_when_both_references_match():
    entries = [make_entry([make_order(dossier_reference="D-2041", sap_code="5100239")])]
    assert reconcile_dossier(PROGRAM_D2041, entries).produced_units == 3


def test_reconcile_program_keeps_master_order():
    entries = [make_entry([make_order(dossier_reference="D-2050")])]
    results = reconcile_program([PROGRAM_D2041, PROGRAM_D2050], entries)
    assert [r.target.dossier_reference for r in results] == ["D-2041", "D-2050"]
    assert results[1].produced_units == 3


def test_recent_history_newest_first():
    entries = [
        make_entry([make_order(unit_count=n, dossier_reference="D-2041")], entry_date=date(2026, 2, n))
        for n in range(1, 6)
    ]
    p = reconcile_dossier(PROGRAM_D2041, entries)
    assert [c.entry_date.day for c in p.recent(3)] == [5, 4, 3]
    assert p.recent(0) == []


def test_lookup_by_dossier_or_sap():
    program = [PROGRAM_D2050, PROGRAM_D2041]
    assert lookup_dossier(program, "d-2041 ") is PROGRAM_D2041
    assert lookup_dossier(program, "5100239") is PROGRAM_D2041
    assert lookup_dossier(program, "") is None
    assert lookup_dossier(program, "D-9999") is None


def test_apply_dossier_fills_draft():
    draft = OrderDraft.for_category(OrderCategory.EXPORT)
    apply_dossier(draft, PROGRAM_D2041)
    assert draft.dossier_reference == "D-2041"
    assert draft.sap_code == "5100239"
    assert draft.maritime_agent == "CMA CGM"
    assert draft.ops_name == "Abidjan"


def test_apply_dossier_keeps_existing_ops_name():
    draft = OrderDraft.for_category(OrderCategory.EXPORT)
    draft.ops_name = "OPS-12"
    draft.sap_code = "7000001"
    apply_dossier(draft, PROGRAM_D2050)
    assert draft.ops_name == "OPS-12"
    assert draft.sap_code == "7000001"


def test_filter_progress():
    progress = reconcile_program([PROGRAM_D2041, PROGRAM_D2050], [])
    assert [p.target.dossier_reference for p in filter_progress(progress, "dakar")] == ["D-2050"]
    assert [p.target.dossier_reference for p in filter_progress(progress, "cma")] == ["D-2041"]
    assert len(filter_progress(progress, "  ")) == 2


def test_normalize_reference():
    assert normalize_reference("  ab  ") == "AB"
    assert normalize_reference("   ") is None
    assert normalize_reference(None) is None


def test_program_entry_defaults():
    e = MasterProgramEntry(dossier_reference="X", sap_code="")
    assert reconcile_dossier(e, []).percent == 0


def test_history_is_chronological_for_newest_first_input():
    entries = [
        make_entry([make_order(unit_count=n, dossier_reference="D-2041")], entry_date=date(2026, 2, n))
        for n in range(5, 0, -1)
    ]
    p = reconcile_program([PROGRAM_D2041], entries)[0]
    assert [c.entry_date.day for c in p.history] == [1, 2, 3, 4, 5]
    assert [c.entry_date.day for c in p.recent(3)] == [5, 4, 3]


def test_history_orders_shifts_within_a_day():
    day = date(2026, 2, 4)
    entries = [
        make_entry([make_order(unit_count=3, dossier_reference="D-2041")], entry_date=day, shift="NIGHT"),
        make_entry([make_order(unit_count=1, dossier_reference="D-2041")], entry_date=day, shift="MORNING"),
        make_entry([make_order(unit_count=2, dossier_reference="D-2041")], entry_date=day, shift="AFTERNOON"),
    ]
    p = reconcile_dossier(PROGRAM_D2041, entries)
    assert [c.unit_count for c in p.recent(3)] == [3, 2, 1]
