from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from packtrack.core.catalog import units_per_load
from packtrack.core.models import OrderCategory

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def _dec(value: float | int | str | Decimal) -> Decimal:
    # str() keeps the decimal representation the operator typed (1.1 -> "1.1").
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: float | int | str | Decimal) -> float:
    """Round to 2 decimals, half away from zero."""
    return float(_dec(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def compute_tonnage(category: OrderCategory | str, unit_count: int, unit_weight: float) -> float:
    """Tonnage of one order line: ``unit_count * units_per_load(category) * unit_weight``.

    The returned value is rounded to 2 decimals and is the value stored on the
    order; totals are sums of these rounded values.
    """
    per_load = units_per_load(category)
    raw = Decimal(int(unit_count)) * Decimal(per_load) * _dec(unit_weight)
    tons = float(raw.quantize(_CENT, rounding=ROUND_HALF_UP))
    logger.debug("tonnage %s: %s x %s x %s = %s", category, unit_count, per_load, unit_weight, tons)
    return tons


def sum_tonnage(values: Iterable[float]) -> float:
    """Exact sum of already-rounded tonnage values (order independent)."""
    total = sum((_dec(v) for v in values), Decimal(0))
    return float(total.quantize(_CENT, rounding=ROUND_HALF_UP))


def format_tonnage(value: float | None) -> str:
    return f"{float(value or 0.0):,.2f} T"
