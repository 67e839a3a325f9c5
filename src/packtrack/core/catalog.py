"""Fixed reference tables for order categories, shifts and platforms.

Category rules:
- EXPORT:    20 units per load, weight 1.1 or 1.2 T, with/without pallet.
- LOCAL:     22 units per load, weight fixed at 1.2 T, no pallet concept.
- DEBARDAGE: 1 unit per load, weight fixed at 1.2 T, plastic pallet only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from types import MappingProxyType

from packtrack.core.models import OrderCategory, PalletConfiguration, Platform, ShiftEntry, ShiftPeriod


@dataclass(frozen=True)
class CategoryConfig:
    category: OrderCategory
    label: str
    units_per_load: int
    default_weight: float
    weight_options: tuple[float, ...]
    fixed_weight: bool
    articles: tuple[str, ...]
    default_pallet: PalletConfiguration | None
    allowed_pallets: tuple[PalletConfiguration, ...]

    @property
    def has_pallet(self) -> bool:
        return bool(self.allowed_pallets)


ORDER_CONFIGS = MappingProxyType(
    {
        OrderCategory.EXPORT: CategoryConfig(
            category=OrderCategory.EXPORT,
            label="Export",
            units_per_load=20,
            default_weight=1.1,
            weight_options=(1.1, 1.2),
            fixed_weight=False,
            articles=("4301", "4302"),
            default_pallet=PalletConfiguration.WITH_PALLET,
            allowed_pallets=(PalletConfiguration.WITH_PALLET, PalletConfiguration.WITHOUT_PALLET),
        ),
        OrderCategory.LOCAL: CategoryConfig(
            category=OrderCategory.LOCAL,
            label="Local",
            units_per_load=22,
            default_weight=1.2,
            weight_options=(1.2,),
            fixed_weight=True,
            articles=("4300", "4318", "4312", "4303"),
            default_pallet=None,
            allowed_pallets=(),
        ),
        OrderCategory.DEBARDAGE: CategoryConfig(
            category=OrderCategory.DEBARDAGE,
            label="Débardage",
            units_per_load=1,
            default_weight=1.2,
            weight_options=(1.2,),
            fixed_weight=True,
            articles=("4303",),
            default_pallet=PalletConfiguration.PLASTIC,
            allowed_pallets=(PalletConfiguration.PLASTIC,),
        ),
    }
)


def category_config(category: OrderCategory | str) -> CategoryConfig:
    return ORDER_CONFIGS[OrderCategory(category)]


def units_per_load(category: OrderCategory | str) -> int:
    return category_config(category).units_per_load


@dataclass(frozen=True)
class ShiftWindow:
    period: ShiftPeriod
    label: str
    start: time
    end: time

    @property
    def crosses_midnight(self) -> bool:
        return self.end <= self.start

    def contains(self, t: time) -> bool:
        if self.crosses_midnight:
            return t >= self.start or t < self.end
        return self.start <= t < self.end

    def display(self) -> str:
        return f"{self.label} {self.start:%Hh%M} - {self.end:%Hh%M}"


SHIFTS: tuple[ShiftWindow, ...] = (
    ShiftWindow(ShiftPeriod.MORNING, "Morning", time(6, 0), time(14, 0)),
    ShiftWindow(ShiftPeriod.AFTERNOON, "Afternoon", time(14, 0), time(22, 0)),
    ShiftWindow(ShiftPeriod.NIGHT, "Night", time(22, 0), time(6, 0)),
)

SHIFT_ORDER = {w.period: i for i, w in enumerate(SHIFTS)}

PLATFORM_LABELS = MappingProxyType(
    {
        Platform.BIG_BAG: "Big Bag",
        Platform.FIFTY_KG: "50 kg",
    }
)


def shift_window(period: ShiftPeriod | str) -> ShiftWindow:
    period = ShiftPeriod(period)
    for w in SHIFTS:
        if w.period == period:
            return w
    raise KeyError(period)


def shift_for_time(t: time) -> ShiftPeriod:
    """Map a wall-clock time to the shift period that covers it."""
    for w in SHIFTS:
        if w.contains(t):
            return w.period
    # The three windows cover the whole day.
    raise AssertionError(f"no shift covers {t!r}")


def chronological_key(entry: ShiftEntry) -> tuple:
    """Sort key placing shift entries in production order.

    Date, then shift; entries of the same shift by submission time and id.
    """
    return (
        entry.entry_date,
        SHIFT_ORDER.get(ShiftPeriod(entry.shift), 0),
        entry.submitted_at or datetime.min,
        entry.entry_id or 0,
    )
