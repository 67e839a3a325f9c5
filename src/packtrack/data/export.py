from __future__ import annotations

import io
from typing import Iterable

import pandas as pd

from packtrack.core.catalog import category_config, shift_window
from packtrack.core.models import ShiftEntry

REPORT_COLUMNS = [
    "Date",
    "Shift",
    "Platform",
    "Operator",
    "Category",
    "Article Code",
    "Ops/Destination",
    "Dossier",
    "SAP",
    "N BL",
    "N TC",
    "N Plombe",
    "Truck",
    "Qty (Units)",
    "Weight/Unit (T)",
    "Units/Load",
    "Pallet Config",
    "Line Tonnage",
    "Shift Notes",
]


def _na(value: str | None) -> str:
    return value if value else "N/A"


def build_order_report(entries: Iterable[ShiftEntry]) -> pd.DataFrame:
    """Detailed report: one row per order, shift metadata repeated on each row."""
    rows: list[dict] = []
    for entry in entries:
        notes = " ".join((entry.notes or "").split())
        for order in entry.orders:
            rows.append(
                {
                    "Date": entry.entry_date.isoformat(),
                    "Shift": shift_window(entry.shift).label,
                    "Platform": entry.platform.value,
                    "Operator": entry.operator_name,
                    "Category": category_config(order.category).label,
                    "Article Code": order.article_code,
                    "Ops/Destination": _na(order.ops_name),
                    "Dossier": _na(order.dossier_reference),
                    "SAP": _na(order.sap_code),
                    "N BL": _na(order.bl_number),
                    "N TC": _na(order.container_number),
                    "N Plombe": _na(order.seal_number),
                    "Truck": _na(order.truck_id),
                    "Qty (Units)": order.unit_count,
                    "Weight/Unit (T)": order.unit_weight,
                    "Units/Load": order.units_per_load,
                    "Pallet Config": order.pallet.value if order.pallet else "N/A",
                    "Line Tonnage": f"{order.tonnage:.2f}",
                    "Shift Notes": notes,
                }
            )
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def export_orders_csv(entries: Iterable[ShiftEntry]) -> bytes:
    return build_order_report(entries).to_csv(index=False).encode("utf-8")


def export_orders_xlsx(entries: Iterable[ShiftEntry]) -> bytes:
    bio = io.BytesIO()
    build_order_report(entries).to_excel(bio, index=False, sheet_name="Orders")
    return bio.getvalue()
