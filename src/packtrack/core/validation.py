"""Order validation and shift-entry finalisation.

``validate_order`` turns an editable :class:`OrderDraft` into a frozen
:class:`Order` (units-per-load frozen from the category table, tonnage
computed) or raises a :class:`ValidationError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable

from packtrack.core.catalog import category_config
from packtrack.core.models import (
    Order,
    OrderCategory,
    PalletConfiguration,
    Platform,
    ShiftEntry,
    ShiftPeriod,
)
from packtrack.core.tonnage import compute_tonnage, sum_tonnage


class ValidationError(ValueError):
    """Base class for rejected orders/entries."""


class EmptyQuantity(ValidationError):
    def __init__(self, unit_count: int):
        super().__init__(f"unit count must be a positive whole number, got {unit_count!r}")
        self.unit_count = unit_count


class MissingRequiredField(ValidationError):
    def __init__(self, field: str):
        super().__init__(f"missing required field: {field}")
        self.field = field


class InvalidArticleCode(ValidationError):
    pass


class InvalidUnitWeight(ValidationError):
    pass


class InvalidPalletConfiguration(ValidationError):
    pass


class EmptyEntry(ValidationError):
    def __init__(self):
        super().__init__("a shift entry needs at least one order")


# Fields that only make sense for one category.
EXPORT_SHIPPING_FIELDS = ("bl_number", "container_number", "seal_number")
LOCAL_TRUCK_FIELDS = ("truck_id",)


@dataclass
class OrderDraft:
    """Order being edited in the shift builder, before validation."""

    category: OrderCategory
    article_code: str
    unit_count: int = 0
    unit_weight: float = 0.0
    pallet: PalletConfiguration | None = None
    ops_name: str | None = None
    dossier_reference: str | None = None
    sap_code: str | None = None
    maritime_agent: str | None = None
    bl_number: str | None = None
    container_number: str | None = None
    seal_number: str | None = None
    truck_id: str | None = None

    @classmethod
    def for_category(cls, category: OrderCategory | str) -> OrderDraft:
        cfg = category_config(category)
        return cls(
            category=cfg.category,
            article_code=cfg.articles[0],
            unit_weight=cfg.default_weight,
            pallet=cfg.default_pallet,
        )

    def switch_category(self, category: OrderCategory | str) -> OrderDraft:
        """Reset category defaults and clear category-specific identifiers.

        Dossier/SAP references survive the switch.
        """
        fresh = OrderDraft.for_category(category)
        fresh.unit_count = self.unit_count
        fresh.dossier_reference = self.dossier_reference
        fresh.sap_code = self.sap_code
        fresh.maritime_agent = self.maritime_agent
        return fresh

    def preview_tonnage(self) -> float:
        try:
            count = parse_unit_count(self.unit_count)
        except EmptyQuantity:
            return 0.0
        return compute_tonnage(self.category, max(0, count), self.unit_weight or 0)


_COUNT_RE = re.compile(r"^-?\d+$")


def parse_unit_count(value) -> int:
    """Parse a unit count typed by the operator.

    Accepts ints, floats like 3.0 and digit-only strings; blank is 0.
    Raises EmptyQuantity for anything fractional or non-numeric.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0
    if isinstance(value, bool):
        raise EmptyQuantity(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise EmptyQuantity(value)
    s = str(value).strip()
    if _COUNT_RE.match(s):
        return int(s)
    raise EmptyQuantity(value)


def order_to_draft(order: Order) -> OrderDraft:
    """Editable copy of a finalized order (edit-of-the-whole-entry flow, draft restore)."""
    return OrderDraft(
        category=order.category,
        article_code=order.article_code,
        unit_count=order.unit_count,
        unit_weight=order.unit_weight,
        pallet=order.pallet,
        ops_name=order.ops_name,
        dossier_reference=order.dossier_reference,
        sap_code=order.sap_code,
        maritime_agent=order.maritime_agent,
        bl_number=order.bl_number,
        container_number=order.container_number,
        seal_number=order.seal_number,
        truck_id=order.truck_id,
    )


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _resolve_pallet(category: OrderCategory, pallet: PalletConfiguration | str | None) -> PalletConfiguration | None:
    cfg = category_config(category)
    if not cfg.has_pallet:
        return None
    if pallet is None or pallet == "":
        return cfg.default_pallet
    try:
        value = PalletConfiguration(pallet)
    except ValueError:
        raise InvalidPalletConfiguration(f"unknown pallet configuration: {pallet!r}") from None
    if value not in cfg.allowed_pallets:
        raise InvalidPalletConfiguration(f"{value.value} not allowed for {category.value}")
    return value


def validate_order(draft: OrderDraft, *, strict: bool = False) -> Order:
    """Validate a draft and return the finalized order.

    With ``strict=True`` the shipping identifiers (BL, container, seal) are
    required for EXPORT and the truck id for LOCAL.
    """
    category = OrderCategory(draft.category)
    cfg = category_config(category)

    unit_count = parse_unit_count(draft.unit_count)
    if unit_count <= 0:
        raise EmptyQuantity(unit_count)

    article = _clean(draft.article_code)
    if article is None:
        raise MissingRequiredField("article_code")
    if article not in cfg.articles:
        raise InvalidArticleCode(f"article {article!r} not allowed for {category.value}")

    try:
        weight = float(draft.unit_weight)
    except (TypeError, ValueError):
        raise InvalidUnitWeight(f"invalid unit weight: {draft.unit_weight!r}") from None
    if weight <= 0:
        raise InvalidUnitWeight(f"unit weight must be positive, got {weight}")
    if weight not in cfg.weight_options:
        raise InvalidUnitWeight(f"unit weight {weight} not allowed for {category.value}")

    pallet = _resolve_pallet(category, draft.pallet)

    shipping = {f: _clean(getattr(draft, f)) for f in EXPORT_SHIPPING_FIELDS}
    truck = {f: _clean(getattr(draft, f)) for f in LOCAL_TRUCK_FIELDS}
    if category != OrderCategory.EXPORT:
        shipping = {f: None for f in shipping}
    if category != OrderCategory.LOCAL:
        truck = {f: None for f in truck}

    if strict:
        required = {
            OrderCategory.EXPORT: EXPORT_SHIPPING_FIELDS,
            OrderCategory.LOCAL: LOCAL_TRUCK_FIELDS,
        }.get(category, ())
        values = {**shipping, **truck}
        for f in required:
            if not values.get(f):
                raise MissingRequiredField(f)

    return Order(
        category=category,
        article_code=article,
        unit_count=unit_count,
        unit_weight=weight,
        units_per_load=cfg.units_per_load,
        tonnage=compute_tonnage(category, unit_count, weight),
        pallet=pallet,
        ops_name=_clean(draft.ops_name),
        dossier_reference=_clean(draft.dossier_reference),
        sap_code=_clean(draft.sap_code),
        maritime_agent=_clean(draft.maritime_agent),
        **shipping,
        **truck,
    )


def build_entry(
    *,
    entry_date: date,
    shift: ShiftPeriod | str,
    platform: Platform | str,
    operator_name: str | None,
    orders: Iterable[Order],
    notes: str | None = None,
    submitted_at: datetime | None = None,
    entry_id: int | None = None,
) -> ShiftEntry:
    """Finalize a shift: checks operator/orders and recomputes the totals."""
    operator = _clean(operator_name)
    if operator is None:
        raise MissingRequiredField("operator_name")
    orders = tuple(orders)
    if not orders:
        raise EmptyEntry()

    return ShiftEntry(
        entry_date=entry_date,
        shift=ShiftPeriod(shift),
        platform=Platform(platform),
        operator_name=operator,
        orders=orders,
        total_tonnage=sum_tonnage(o.tonnage for o in orders),
        total_orders=len(orders),
        notes=_clean(notes),
        submitted_at=submitted_at or datetime.now(),
        entry_id=entry_id,
    )


def with_orders(entry: ShiftEntry, orders: Iterable[Order], **changes) -> ShiftEntry:
    """Full replacement of an entry's orders (and optionally metadata) for the edit flow."""
    updated = replace(entry, **changes) if changes else entry
    return build_entry(
        entry_date=updated.entry_date,
        shift=updated.shift,
        platform=updated.platform,
        operator_name=updated.operator_name,
        orders=orders,
        notes=updated.notes,
        submitted_at=updated.submitted_at,
        entry_id=updated.entry_id,
    )
