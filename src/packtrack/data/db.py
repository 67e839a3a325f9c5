from __future__ import annotations

from contextlib import contextmanager
import sqlite3
from pathlib import Path


class Db:
    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def connect(self):
        con = sqlite3.connect(self.path, timeout=20.0)
        con.row_factory = sqlite3.Row
        # Per-connection in sqlite; needed for ON DELETE CASCADE on production_order.
        con.execute("PRAGMA foreign_keys=ON;")
        try:
            yield con
            con.commit()
        except Exception:
            con.rollback()
            raise
        finally:
            con.close()

    def ensure_schema(self) -> None:
        con = sqlite3.connect(self.path, timeout=10.0)
        try:
            con.execute("PRAGMA journal_mode=WAL;")
            con.execute("PRAGMA foreign_keys=ON;")

            con.execute(
                """
                CREATE TABLE IF NOT EXISTS audit_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT NOT NULL DEFAULT(datetime('now', 'localtime')),
                    category TEXT NOT NULL,
                    message TEXT NOT NULL,
                    details TEXT
                );
                """
            )

            con.executescript(
                """
                CREATE TABLE IF NOT EXISTS app_config (
                    config_key TEXT PRIMARY KEY,
                    config_value TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                );

                CREATE TABLE IF NOT EXISTS shift_entry (
                    entry_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entry_date TEXT NOT NULL,
                    shift TEXT NOT NULL CHECK (shift IN ('MORNING', 'AFTERNOON', 'NIGHT')),
                    platform TEXT NOT NULL CHECK (platform IN ('BIG_BAG', '50KG')),
                    operator_name TEXT NOT NULL,
                    notes TEXT,
                    total_tonnage REAL NOT NULL DEFAULT 0,
                    total_orders INTEGER NOT NULL DEFAULT 0,
                    submitted_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS production_order (
                    order_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entry_id INTEGER NOT NULL REFERENCES shift_entry(entry_id) ON DELETE CASCADE,
                    position INTEGER NOT NULL,
                    category TEXT NOT NULL CHECK (category IN ('EXPORT', 'LOCAL', 'DEBARDAGE')),
                    article_code TEXT NOT NULL,
                    ops_name TEXT,
                    dossier_reference TEXT,
                    sap_code TEXT,
                    maritime_agent TEXT,
                    bl_number TEXT,
                    container_number TEXT,
                    seal_number TEXT,
                    truck_id TEXT,
                    unit_count INTEGER NOT NULL CHECK (unit_count > 0),
                    unit_weight REAL NOT NULL,
                    units_per_load INTEGER NOT NULL,
                    pallet TEXT,
                    tonnage REAL NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_production_order_entry
                    ON production_order(entry_id, position);

                CREATE TABLE IF NOT EXISTS master_program (
                    program_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    dossier_reference TEXT NOT NULL,
                    sap_code TEXT NOT NULL DEFAULT '',
                    destination TEXT NOT NULL DEFAULT '',
                    planned_units INTEGER NOT NULL DEFAULT 0,
                    planned_tonnage REAL NOT NULL DEFAULT 0,
                    maritime_agent TEXT NOT NULL DEFAULT '',
                    manager TEXT NOT NULL DEFAULT '',
                    start_date TEXT,
                    deadline TEXT,
                    comments TEXT NOT NULL DEFAULT ''
                );

                CREATE TABLE IF NOT EXISTS shift_draft (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    saved_at TEXT NOT NULL,
                    draft_json TEXT NOT NULL
                );
                """
            )

            # Seed default config values if missing.
            con.execute(
                "INSERT OR IGNORE INTO app_config(config_key, config_value) VALUES('strict_shipping_fields', '0')"
            )
            con.execute(
                "INSERT OR IGNORE INTO app_config(config_key, config_value) VALUES('trend_limit', '10')"
            )
            con.commit()
        finally:
            con.close()
