from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class OrderCategory(str, Enum):
    EXPORT = "EXPORT"
    LOCAL = "LOCAL"
    DEBARDAGE = "DEBARDAGE"


class PalletConfiguration(str, Enum):
    WITH_PALLET = "AVEC_PALET"
    WITHOUT_PALLET = "SANS_PALET"
    PLASTIC = "PLASTIQUE"


class ShiftPeriod(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    NIGHT = "NIGHT"


class Platform(str, Enum):
    BIG_BAG = "BIG_BAG"
    FIFTY_KG = "50KG"


@dataclass(frozen=True)
class Order:
    category: OrderCategory
    article_code: str
    unit_count: int
    unit_weight: float
    units_per_load: int
    tonnage: float
    pallet: PalletConfiguration | None = None

    # Identification (all optional)
    ops_name: str | None = None
    dossier_reference: str | None = None
    sap_code: str | None = None
    maritime_agent: str | None = None

    # EXPORT only
    bl_number: str | None = None
    container_number: str | None = None
    seal_number: str | None = None

    # LOCAL only
    truck_id: str | None = None

    order_id: int | None = None


@dataclass(frozen=True)
class ShiftEntry:
    entry_date: date
    shift: ShiftPeriod
    platform: Platform
    operator_name: str
    orders: tuple[Order, ...]
    total_tonnage: float
    total_orders: int
    notes: str | None = None
    submitted_at: datetime | None = None
    entry_id: int | None = None


@dataclass(frozen=True)
class MasterProgramEntry:
    """Planned dossier from the export master program (read-only reference data)."""

    dossier_reference: str
    sap_code: str
    destination: str = ""
    planned_units: int = 0
    planned_tonnage: float = 0.0
    maritime_agent: str = ""
    manager: str = ""
    start_date: date | None = None
    deadline: date | None = None
    comments: str = ""
    program_id: int | None = None


@dataclass(frozen=True)
class SummaryStats:
    total_tonnage: float = 0.0
    entry_count: int = 0
    average_tonnage: float = 0.0
    export_tonnage: float = 0.0
    local_tonnage: float = 0.0
    debardage_tonnage: float = 0.0
    unique_dossiers: int = 0

    def category_tonnage(self, category: OrderCategory) -> float:
        return {
            OrderCategory.EXPORT: self.export_tonnage,
            OrderCategory.LOCAL: self.local_tonnage,
            OrderCategory.DEBARDAGE: self.debardage_tonnage,
        }[category]

    def category_share(self, category: OrderCategory) -> float:
        """Percentage of total tonnage produced under ``category`` (0 when nothing produced)."""
        if self.total_tonnage <= 0:
            return 0.0
        return self.category_tonnage(category) / self.total_tonnage * 100.0


@dataclass(frozen=True)
class Contribution:
    entry_date: date
    operator_name: str
    unit_count: int
    tonnage: float


@dataclass(frozen=True)
class DossierProgress:
    target: MasterProgramEntry
    produced_tonnage: float = 0.0
    produced_units: int = 0
    percent: int = 0
    remaining_units: int = 0
    history: tuple[Contribution, ...] = field(default_factory=tuple)

    @property
    def is_complete(self) -> bool:
        return self.percent == 100

    def recent(self, limit: int = 3) -> list[Contribution]:
        """Last ``limit`` contributions, most recent first."""
        if limit <= 0:
            return []
        return list(reversed(self.history[-limit:]))
