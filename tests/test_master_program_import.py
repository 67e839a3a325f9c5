"""Tests for the master program Excel import."""

import io
from datetime import date

import pandas as pd
import pytest

from packtrack.data.excel_io import coerce_float, coerce_text, normalize_col_name, parse_int_strict
from packtrack.data.master_program_io import import_master_program_bytes


def make_excel_bytes(data: dict) -> bytes:
    """Create a minimal Excel file from a column->values dict."""
    bio = io.BytesIO()
    pd.DataFrame(data).to_excel(bio, index=False)
    bio.seek(0)
    return bio.read()


def test_import_with_planning_headers():
    content = make_excel_bytes(
        {
            "N° Dossier": ["D-2041", "D-2050", None],
            "Commande SAP": [5100239, None, None],
            "Destination": ["Abidjan", "Dakar", None],
            "Nbre": [10, 4, None],
            "Qté": [200, "88,5", None],
            "Maritime": ["CMA CGM", "MSC", None],
            "PIC": ["K. Benali", None, None],
            "Date limite": ["20/02/2026", None, None],
        }
    )
    rows = import_master_program_bytes(content)

    assert len(rows) == 2
    first, second = rows
    assert first.dossier_reference == "D-2041"
    assert first.sap_code == "5100239"
    assert first.planned_units == 10
    assert first.planned_tonnage == 200.0
    assert first.deadline == date(2026, 2, 20)
    assert first.manager == "K. Benali"
    assert second.sap_code == ""
    assert second.planned_tonnage == 88.5
    assert second.start_date is None


def test_import_accepts_sap_only_rows():
    content = make_excel_bytes({"SAP": ["7000001"], "planned_units": [2], "planned_tonnage": [44.0]})
    (row,) = import_master_program_bytes(content)
    assert row.dossier_reference == ""
    assert row.sap_code == "7000001"


def test_import_rejects_missing_columns():
    content = make_excel_bytes({"Destination": ["Abidjan"], "Nbre": [1]})
    with pytest.raises(ValueError) as exc:
        import_master_program_bytes(content)
    assert "dossier_reference/sap_code" in str(exc.value)
    assert "planned_tonnage" in str(exc.value)


def test_import_rejects_fractional_unit_count():
    content = make_excel_bytes({"Dossier": ["D-1"], "Nbre": [2.5], "Qté": [10]})
    with pytest.raises(ValueError):
        import_master_program_bytes(content)


def test_excel_helpers():
    assert normalize_col_name("N° Dossier") == "n_dossier"
    assert normalize_col_name(" Date début ") == "date_debut"
    assert coerce_text(123.0) == "123"
    assert coerce_text(float("nan")) == ""
    assert coerce_float("1.234,56") == 1234.56
    assert coerce_float("abc") is None
    assert parse_int_strict("12", field="x") == 12
    with pytest.raises(ValueError):
        parse_int_strict("12a", field="x")


def test_import_rejects_unreadable_tonnage_with_row_number():
    content = make_excel_bytes({"Dossier": ["D-1", "D-2"], "Nbre": [1, 2], "Qté": [22, "vingt"]})
    with pytest.raises(ValueError) as exc:
        import_master_program_bytes(content)
    assert "planned_tonnage (row 3)" in str(exc.value)


def test_import_blank_tonnage_is_zero():
    content = make_excel_bytes({"Dossier": ["D-1", "D-2"], "Nbre": [1, 2], "Qté": [22, None]})
    rows = import_master_program_bytes(content)
    assert [r.planned_tonnage for r in rows] == [22.0, 0.0]
