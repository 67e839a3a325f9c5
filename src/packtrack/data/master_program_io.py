"""Import the export master program from an Excel workbook.

Expected columns (any accent/case, first sheet):
- Dossier reference: "N° Dossier", "Dossier", "dossier_number"
- SAP code:          "SAP", "Code SAP", "Commande SAP", "sap_code"
- Planned units:     "Nbre", "Nombre", "planned_units"
- Planned tonnage:   "Qté", "Quantite", "Tonnage", "planned_tonnage"
- Optional: Destination, Maritime, PIC, Date début, Date limite, Commentaires
"""

from __future__ import annotations

import logging

from packtrack.core.models import MasterProgramEntry
from packtrack.data.excel_io import (
    coerce_date,
    coerce_float,
    coerce_text,
    is_blank,
    normalize_columns,
    parse_int_strict,
    read_excel_bytes,
)

logger = logging.getLogger(__name__)

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "dossier_reference": ("dossier_reference", "dossier_number", "n_dossier", "no_dossier", "dossier"),
    "sap_code": ("sap_code", "code_sap", "commande_sap", "sap"),
    "destination": ("destination", "dest"),
    "planned_units": ("planned_units", "nbre", "nombre", "nb"),
    "planned_tonnage": ("planned_tonnage", "qte", "quantite", "tonnage"),
    "maritime_agent": ("maritime_agent", "maritime", "transitaire"),
    "manager": ("manager", "pic", "responsable"),
    "start_date": ("start_date", "date_debut", "debut"),
    "deadline": ("deadline", "date_limite", "limite"),
    "comments": ("comments", "commentaires", "commentaire", "instructions"),
}

REQUIRED = ("planned_units", "planned_tonnage")


def resolve_columns(columns: list[str]) -> dict[str, str]:
    """Map canonical field -> normalized column present in the sheet."""
    present = set(columns)
    mapping: dict[str, str] = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        for a in aliases:
            if a in present:
                mapping[canonical] = a
                break
    return mapping


def _optional_date(value, field: str):
    if is_blank(value):
        return None
    return coerce_date(value, field=field)


def import_master_program_bytes(content: bytes) -> list[MasterProgramEntry]:
    df = normalize_columns(read_excel_bytes(content))
    cols = resolve_columns(list(df.columns))

    missing = [f for f in REQUIRED if f not in cols]
    if "dossier_reference" not in cols and "sap_code" not in cols:
        missing.insert(0, "dossier_reference/sap_code")
    if missing:
        raise ValueError(f"master program is missing columns: {', '.join(missing)}")

    def cell(row, field: str):
        col = cols.get(field)
        return row[col] if col is not None else None

    out: list[MasterProgramEntry] = []
    skipped = 0
    for idx, row in df.iterrows():
        dossier = coerce_text(cell(row, "dossier_reference"))
        sap = coerce_text(cell(row, "sap_code"))
        if not dossier and not sap:
            skipped += 1
            continue

        units_raw = cell(row, "planned_units")
        units = 0 if is_blank(units_raw) else parse_int_strict(units_raw, field=f"planned_units (row {idx + 2})")
        tons_raw = cell(row, "planned_tonnage")
        tons = 0.0 if is_blank(tons_raw) else coerce_float(tons_raw)
        if tons is None:
            raise ValueError(f"planned_tonnage (row {idx + 2}) invalid: {tons_raw!r}")

        out.append(
            MasterProgramEntry(
                dossier_reference=dossier,
                sap_code=sap,
                destination=coerce_text(cell(row, "destination")),
                planned_units=units,
                planned_tonnage=tons,
                maritime_agent=coerce_text(cell(row, "maritime_agent")),
                manager=coerce_text(cell(row, "manager")),
                start_date=_optional_date(cell(row, "start_date"), "start_date"),
                deadline=_optional_date(cell(row, "deadline"), "deadline"),
                comments=coerce_text(cell(row, "comments")),
            )
        )

    logger.info("Parsed master program: %d dossiers (%d blank rows skipped)", len(out), skipped)
    return out
