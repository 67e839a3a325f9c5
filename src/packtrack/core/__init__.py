"""Production accounting core.

Pure functions over in-memory snapshots: tonnage per order, order validation,
summary statistics over shift entries and dossier reconciliation against the
master program. Nothing in here performs I/O.
"""

from packtrack.core.aggregator import aggregate
from packtrack.core.models import (
    DossierProgress,
    MasterProgramEntry,
    Order,
    OrderCategory,
    PalletConfiguration,
    Platform,
    ShiftEntry,
    ShiftPeriod,
    SummaryStats,
)
from packtrack.core.reconciler import reconcile_program
from packtrack.core.tonnage import compute_tonnage
from packtrack.core.validation import (
    EmptyEntry,
    EmptyQuantity,
    MissingRequiredField,
    OrderDraft,
    ValidationError,
    build_entry,
    validate_order,
)

__all__ = [
    "DossierProgress",
    "EmptyEntry",
    "EmptyQuantity",
    "MasterProgramEntry",
    "MissingRequiredField",
    "Order",
    "OrderCategory",
    "OrderDraft",
    "PalletConfiguration",
    "Platform",
    "ShiftEntry",
    "ShiftPeriod",
    "SummaryStats",
    "ValidationError",
    "aggregate",
    "build_entry",
    "compute_tonnage",
    "reconcile_program",
    "validate_order",
]
