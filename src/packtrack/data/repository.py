from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable

from packtrack.core.models import (
    MasterProgramEntry,
    Order,
    OrderCategory,
    PalletConfiguration,
    Platform,
    ShiftEntry,
    ShiftPeriod,
)
from packtrack.data.db import Db

logger = logging.getLogger(__name__)

_ORDER_COLUMNS = (
    "category",
    "article_code",
    "ops_name",
    "dossier_reference",
    "sap_code",
    "maritime_agent",
    "bl_number",
    "container_number",
    "seal_number",
    "truck_id",
    "unit_count",
    "unit_weight",
    "units_per_load",
    "pallet",
    "tonnage",
)


@dataclass
class AuditEntry:
    id: int
    timestamp: str
    category: str
    message: str
    details: str | None = None


def _order_values(order: Order) -> tuple:
    return (
        order.category.value,
        order.article_code,
        order.ops_name,
        order.dossier_reference,
        order.sap_code,
        order.maritime_agent,
        order.bl_number,
        order.container_number,
        order.seal_number,
        order.truck_id,
        int(order.unit_count),
        float(order.unit_weight),
        int(order.units_per_load),
        order.pallet.value if order.pallet else None,
        float(order.tonnage),
    )


def _row_to_order(row) -> Order:
    return Order(
        order_id=int(row["order_id"]),
        category=OrderCategory(row["category"]),
        article_code=str(row["article_code"]),
        unit_count=int(row["unit_count"]),
        unit_weight=float(row["unit_weight"]),
        units_per_load=int(row["units_per_load"]),
        tonnage=float(row["tonnage"]),
        pallet=PalletConfiguration(row["pallet"]) if row["pallet"] else None,
        ops_name=row["ops_name"],
        dossier_reference=row["dossier_reference"],
        sap_code=row["sap_code"],
        maritime_agent=row["maritime_agent"],
        bl_number=row["bl_number"],
        container_number=row["container_number"],
        seal_number=row["seal_number"],
        truck_id=row["truck_id"],
    )


def _row_to_entry(row, orders: Iterable[Order]) -> ShiftEntry:
    submitted = row["submitted_at"]
    return ShiftEntry(
        entry_id=int(row["entry_id"]),
        entry_date=date.fromisoformat(str(row["entry_date"])),
        shift=ShiftPeriod(row["shift"]),
        platform=Platform(row["platform"]),
        operator_name=str(row["operator_name"]),
        notes=row["notes"],
        orders=tuple(orders),
        total_tonnage=float(row["total_tonnage"] or 0.0),
        total_orders=int(row["total_orders"] or 0),
        submitted_at=datetime.fromisoformat(str(submitted)) if submitted else None,
    )


def _row_to_program(row) -> MasterProgramEntry:
    return MasterProgramEntry(
        program_id=int(row["program_id"]),
        dossier_reference=str(row["dossier_reference"] or ""),
        sap_code=str(row["sap_code"] or ""),
        destination=str(row["destination"] or ""),
        planned_units=int(row["planned_units"] or 0),
        planned_tonnage=float(row["planned_tonnage"] or 0.0),
        maritime_agent=str(row["maritime_agent"] or ""),
        manager=str(row["manager"] or ""),
        start_date=date.fromisoformat(row["start_date"]) if row["start_date"] else None,
        deadline=date.fromisoformat(row["deadline"]) if row["deadline"] else None,
        comments=str(row["comments"] or ""),
    )


class Repository:
    """Local store for shift entries, their orders and the master program.

    Totals are computed by the core before saving; the store keeps what it is given.
    """

    def __init__(self, db: Db):
        self.db = db

    # ---------- Audit & Logging ----------
    def log_audit(self, category: str, message: str, details: str | None = None) -> None:
        """Record a business event in the audit log."""
        try:
            with self.db.connect() as con:
                con.execute(
                    "INSERT INTO audit_log (category, message, details) VALUES (?, ?, ?)",
                    (category, message, details),
                )
        except Exception:
            # Don't fail the business operation because of the audit trail.
            logger.exception("Failed to write audit log")

    def get_recent_audit_entries(self, limit: int = 100) -> list[AuditEntry]:
        with self.db.connect() as con:
            rows = con.execute("SELECT * FROM audit_log ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
        return [
            AuditEntry(
                id=row["id"],
                timestamp=row["timestamp"],
                category=row["category"],
                message=row["message"],
                details=row["details"],
            )
            for row in rows
        ]

    # ---------- Config ----------
    def get_config(self, *, key: str, default: str | None = None) -> str | None:
        key = str(key).strip()
        if not key:
            raise ValueError("empty config key")
        with self.db.connect() as con:
            row = con.execute("SELECT config_value FROM app_config WHERE config_key = ?", (key,)).fetchone()
        if row is None:
            return default
        return str(row[0])

    def get_config_bool(self, *, key: str, default: bool = False) -> bool:
        raw = self.get_config(key=key, default=None)
        if raw is None:
            return default
        return raw.strip().lower() in {"1", "true", "yes", "on"}

    def get_config_int(self, *, key: str, default: int) -> int:
        raw = self.get_config(key=key, default=None)
        try:
            return int(str(raw).strip()) if raw is not None else default
        except ValueError:
            logger.warning("Config %s=%r is not an integer, using %d", key, raw, default)
            return default

    def set_config(self, *, key: str, value: str) -> None:
        key = str(key).strip()
        if not key:
            raise ValueError("empty config key")

        old_val = self.get_config(key=key, default="(none)")
        with self.db.connect() as con:
            con.execute(
                """
                INSERT INTO app_config(config_key, config_value, updated_at)
                VALUES(?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(config_key) DO UPDATE SET
                    config_value = excluded.config_value,
                    updated_at = excluded.updated_at
                """,
                (key, str(value)),
            )
        self.log_audit("CONFIG", f"Updated '{key}'", f"From '{old_val}' to '{value}'")

    # ---------- Shift entries ----------
    def _insert_orders(self, con, entry_id: int, orders: Iterable[Order]) -> None:
        placeholders = ", ".join("?" for _ in _ORDER_COLUMNS)
        con.executemany(
            f"INSERT INTO production_order (entry_id, position, {', '.join(_ORDER_COLUMNS)}) "
            f"VALUES (?, ?, {placeholders})",
            [(entry_id, pos, *_order_values(o)) for pos, o in enumerate(orders)],
        )

    def add_entry(self, entry: ShiftEntry) -> int:
        submitted = entry.submitted_at or datetime.now()
        with self.db.connect() as con:
            cur = con.execute(
                """
                INSERT INTO shift_entry (
                    entry_date, shift, platform, operator_name, notes,
                    total_tonnage, total_orders, submitted_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.entry_date.isoformat(),
                    entry.shift.value,
                    entry.platform.value,
                    entry.operator_name,
                    entry.notes,
                    float(entry.total_tonnage),
                    int(entry.total_orders),
                    submitted.isoformat(timespec="seconds"),
                ),
            )
            entry_id = int(cur.lastrowid)
            self._insert_orders(con, entry_id, entry.orders)

        logger.info("Saved shift entry %d (%d orders, %.2f T)", entry_id, entry.total_orders, entry.total_tonnage)
        self.log_audit(
            "ENTRY",
            f"Added shift entry {entry_id}",
            f"{entry.entry_date.isoformat()} {entry.shift.value} {entry.platform.value} by {entry.operator_name}",
        )
        return entry_id

    def update_entry(self, entry_id: int, entry: ShiftEntry) -> None:
        """Replace metadata and all orders of an entry (delete then re-insert)."""
        with self.db.connect() as con:
            cur = con.execute(
                """
                UPDATE shift_entry SET
                    entry_date = ?, shift = ?, platform = ?, operator_name = ?, notes = ?,
                    total_tonnage = ?, total_orders = ?
                WHERE entry_id = ?
                """,
                (
                    entry.entry_date.isoformat(),
                    entry.shift.value,
                    entry.platform.value,
                    entry.operator_name,
                    entry.notes,
                    float(entry.total_tonnage),
                    int(entry.total_orders),
                    int(entry_id),
                ),
            )
            if cur.rowcount == 0:
                raise KeyError(f"shift entry {entry_id} not found")
            con.execute("DELETE FROM production_order WHERE entry_id = ?", (int(entry_id),))
            self._insert_orders(con, int(entry_id), entry.orders)

        logger.info("Updated shift entry %d (%d orders, %.2f T)", entry_id, entry.total_orders, entry.total_tonnage)
        self.log_audit("ENTRY", f"Updated shift entry {entry_id}")

    def delete_entry(self, entry_id: int) -> bool:
        with self.db.connect() as con:
            cur = con.execute("DELETE FROM shift_entry WHERE entry_id = ?", (int(entry_id),))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info("Deleted shift entry %d", entry_id)
            self.log_audit("ENTRY", f"Deleted shift entry {entry_id}")
        return deleted

    def _orders_by_entry(self, con, entry_ids: list[int]) -> dict[int, list[Order]]:
        by_entry: dict[int, list[Order]] = {i: [] for i in entry_ids}
        if not entry_ids:
            return by_entry
        placeholders = ", ".join("?" for _ in entry_ids)
        rows = con.execute(
            f"SELECT * FROM production_order WHERE entry_id IN ({placeholders}) ORDER BY entry_id, position",
            entry_ids,
        ).fetchall()
        for r in rows:
            by_entry[int(r["entry_id"])].append(_row_to_order(r))
        return by_entry

    def get_entry(self, entry_id: int) -> ShiftEntry:
        with self.db.connect() as con:
            row = con.execute("SELECT * FROM shift_entry WHERE entry_id = ?", (int(entry_id),)).fetchone()
            if row is None:
                raise KeyError(f"shift entry {entry_id} not found")
            orders = self._orders_by_entry(con, [int(entry_id)])[int(entry_id)]
        return _row_to_entry(row, orders)

    def list_entries(self) -> list[ShiftEntry]:
        """All entries joined with their orders, newest first."""
        with self.db.connect() as con:
            rows = con.execute(
                "SELECT * FROM shift_entry ORDER BY entry_date DESC, submitted_at DESC, entry_id DESC"
            ).fetchall()
            orders = self._orders_by_entry(con, [int(r["entry_id"]) for r in rows])
        return [_row_to_entry(r, orders[int(r["entry_id"])]) for r in rows]

    def count_entries(self) -> int:
        with self.db.connect() as con:
            return int(con.execute("SELECT COUNT(*) FROM shift_entry").fetchone()[0])

    # ---------- Master program ----------
    def list_master_program(self) -> list[MasterProgramEntry]:
        with self.db.connect() as con:
            rows = con.execute("SELECT * FROM master_program ORDER BY program_id").fetchall()
        return [_row_to_program(r) for r in rows]

    def replace_master_program(self, entries: Iterable[MasterProgramEntry]) -> int:
        entries = list(entries)
        with self.db.connect() as con:
            con.execute("DELETE FROM master_program")
            con.executemany(
                """
                INSERT INTO master_program (
                    dossier_reference, sap_code, destination, planned_units, planned_tonnage,
                    maritime_agent, manager, start_date, deadline, comments
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        e.dossier_reference,
                        e.sap_code,
                        e.destination,
                        int(e.planned_units),
                        float(e.planned_tonnage),
                        e.maritime_agent,
                        e.manager,
                        e.start_date.isoformat() if e.start_date else None,
                        e.deadline.isoformat() if e.deadline else None,
                        e.comments,
                    )
                    for e in entries
                ],
            )
        logger.info("Master program replaced: %d dossiers", len(entries))
        self.log_audit("PROGRAM", "Master program replaced", f"{len(entries)} dossiers")
        return len(entries)

    # ---------- Draft autosave ----------
    def save_draft(self, draft: dict[str, Any]) -> None:
        payload = json.dumps(draft, default=str)
        with self.db.connect() as con:
            con.execute(
                """
                INSERT INTO shift_draft(id, saved_at, draft_json) VALUES(1, ?, ?)
                ON CONFLICT(id) DO UPDATE SET saved_at = excluded.saved_at, draft_json = excluded.draft_json
                """,
                (datetime.now().isoformat(timespec="seconds"), payload),
            )

    def load_draft(self) -> dict[str, Any] | None:
        with self.db.connect() as con:
            row = con.execute("SELECT draft_json FROM shift_draft WHERE id = 1").fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["draft_json"])
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable shift draft")
            return None

    def clear_draft(self) -> None:
        with self.db.connect() as con:
            con.execute("DELETE FROM shift_draft WHERE id = 1")
