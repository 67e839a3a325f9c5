"""Reconcile recorded production against the export master program.

An order counts towards a planned dossier when its dossier reference **or**
its SAP code equals the dossier's. References are compared after
``normalize_reference`` (trimmed, upper-case) on both sides, both here and in
the entry-time lookup; blank references never match.

Two independent progress measures are kept per dossier:
- ``percent``: produced tonnage against planned tonnage (clamped 0..100).
- ``remaining_units``: planned unit count minus produced unit count (>= 0).

Contributions are recorded in production order (date, then shift) whatever
the order of the input entries.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from packtrack.core.catalog import chronological_key
from packtrack.core.models import (
    Contribution,
    DossierProgress,
    MasterProgramEntry,
    Order,
    ShiftEntry,
)
from packtrack.core.tonnage import sum_tonnage

logger = logging.getLogger(__name__)


def normalize_reference(value: str | None) -> str | None:
    if value is None:
        return None
    s = str(value).replace("\u00a0", " ").strip().upper()
    return s or None


def order_matches(order: Order, target: MasterProgramEntry) -> bool:
    dossier = normalize_reference(target.dossier_reference)
    sap = normalize_reference(target.sap_code)
    if dossier is not None and normalize_reference(order.dossier_reference) == dossier:
        return True
    if sap is not None and normalize_reference(order.sap_code) == sap:
        return True
    return False


def completion_percent(produced_tonnage: float, planned_tonnage: float) -> int:
    """Rounded completion percentage, clamped to [0, 100]; 0 when nothing is planned."""
    if not planned_tonnage or planned_tonnage <= 0:
        return 0
    ratio = Decimal(str(produced_tonnage)) / Decimal(str(planned_tonnage)) * 100
    pct = int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return max(0, min(100, pct))


def remaining_units(planned_units: int, produced_units: int) -> int:
    return max(0, int(planned_units or 0) - int(produced_units))


def reconcile_dossier(target: MasterProgramEntry, entries: Sequence[ShiftEntry]) -> DossierProgress:
    tons: list[float] = []
    units = 0
    history: list[Contribution] = []
    for entry in sorted(entries, key=chronological_key):
        for order in entry.orders or ():
            if not order_matches(order, target):
                continue
            tons.append(order.tonnage)
            units += order.unit_count
            history.append(
                Contribution(
                    entry_date=entry.entry_date,
                    operator_name=entry.operator_name,
                    unit_count=order.unit_count,
                    tonnage=order.tonnage,
                )
            )

    produced = sum_tonnage(tons)
    return DossierProgress(
        target=target,
        produced_tonnage=produced,
        produced_units=units,
        percent=completion_percent(produced, target.planned_tonnage),
        remaining_units=remaining_units(target.planned_units, units),
        history=tuple(history),
    )


def reconcile_program(
    master_program: Iterable[MasterProgramEntry],
    entries: Iterable[ShiftEntry],
) -> list[DossierProgress]:
    """One :class:`DossierProgress` per master program entry, in input order."""
    entries = list(entries)
    results = [reconcile_dossier(target, entries) for target in master_program]
    logger.debug(
        "reconciled %d dossiers against %d entries (%d complete)",
        len(results),
        len(entries),
        sum(1 for r in results if r.is_complete),
    )
    return results


def lookup_dossier(master_program: Iterable[MasterProgramEntry], reference: str | None) -> MasterProgramEntry | None:
    """Find the planned dossier whose dossier reference or SAP code equals ``reference``."""
    ref = normalize_reference(reference)
    if ref is None:
        return None
    for target in master_program:
        if ref in (normalize_reference(target.dossier_reference), normalize_reference(target.sap_code)):
            return target
    return None


def apply_dossier(draft, target: MasterProgramEntry):
    """Copy the dossier identifiers of ``target`` onto an order draft (in place)."""
    draft.dossier_reference = target.dossier_reference or draft.dossier_reference
    draft.sap_code = target.sap_code or draft.sap_code
    if target.maritime_agent:
        draft.maritime_agent = target.maritime_agent
    if target.destination and not draft.ops_name:
        draft.ops_name = target.destination
    return draft


def filter_progress(progress: Iterable[DossierProgress], term: str | None) -> list[DossierProgress]:
    """Case-insensitive search over dossier, SAP code, destination and maritime agent."""
    s = (term or "").strip().lower()
    if not s:
        return list(progress)

    def _hit(p: DossierProgress) -> bool:
        t = p.target
        fields = (t.dossier_reference, t.sap_code, t.destination, t.maritime_agent)
        return any(s in str(f or "").lower() for f in fields)

    return [p for p in progress if _hit(p)]
