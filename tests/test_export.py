"""Tests for the detailed order report export."""

import io

import pandas as pd

from packtrack.core.models import OrderCategory
from packtrack.data.export import REPORT_COLUMNS, build_order_report, export_orders_csv, export_orders_xlsx

from fixtures_sample_data import make_entry, make_order


def _entries():
    return [
        make_entry(
            [
                make_order(OrderCategory.EXPORT, 3, dossier_reference="D-2041", bl_number="BL-1"),
                make_order(OrderCategory.LOCAL, 5, truck_id="12345-A-6"),
            ],
            notes="Panne\nligne 2",
        ),
        make_entry([make_order(OrderCategory.DEBARDAGE, 10)], shift="NIGHT", platform="50KG"),
    ]


def test_report_has_one_row_per_order():
    df = build_order_report(_entries())
    assert list(df.columns) == REPORT_COLUMNS
    assert len(df) == 3

    first = df.iloc[0]
    assert first["Dossier"] == "D-2041"
    assert first["Truck"] == "N/A"
    assert first["Line Tonnage"] == "66.00"
    assert first["Shift Notes"] == "Panne ligne 2"
    assert first["Pallet Config"] == "AVEC_PALET"

    local = df.iloc[1]
    assert local["Pallet Config"] == "N/A"
    assert local["Units/Load"] == 22

    night = df.iloc[2]
    assert night["Shift"] == "Night"
    assert night["Platform"] == "50KG"


def test_empty_report_keeps_header():
    csv = export_orders_csv([]).decode("utf-8")
    assert csv.strip() == ",".join(REPORT_COLUMNS)


def test_csv_and_xlsx_exports_read_back():
    csv_df = pd.read_csv(io.BytesIO(export_orders_csv(_entries())))
    assert csv_df["Qty (Units)"].tolist() == [3, 5, 10]

    xlsx_df = pd.read_excel(io.BytesIO(export_orders_xlsx(_entries())))
    assert xlsx_df["Article Code"].astype(str).tolist() == ["4301", "4300", "4303"]
