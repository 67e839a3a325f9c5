"""Tests for database schema creation."""

import sqlite3
from datetime import datetime
from pathlib import Path

import pytest

from packtrack.data.db import Db


@pytest.fixture
def temp_db(tmp_path):
    db_path = Path(tmp_path) / "test.db"
    db = Db(db_path)
    yield db, db_path


def test_ensure_schema_creates_all_tables(temp_db):
    db, _ = temp_db
    db.ensure_schema()

    with db.connect() as con:
        tables = {row[0] for row in con.execute("SELECT name FROM sqlite_master WHERE type='table'")}

    for name in ("audit_log", "app_config", "shift_entry", "production_order", "master_program", "shift_draft"):
        assert name in tables


def test_ensure_schema_is_idempotent_and_seeds_config(temp_db):
    db, _ = temp_db
    db.ensure_schema()
    with db.connect() as con:
        con.execute("UPDATE app_config SET config_value = '25' WHERE config_key = 'trend_limit'")
    db.ensure_schema()

    with db.connect() as con:
        cfg = dict(con.execute("SELECT config_key, config_value FROM app_config").fetchall())
    assert cfg["strict_shipping_fields"] == "0"
    assert cfg["trend_limit"] == "25"


def test_db_creates_parent_directory(tmp_path):
    db = Db(tmp_path / "nested" / "dir" / "x.db")
    db.ensure_schema()
    assert (tmp_path / "nested" / "dir" / "x.db").exists()


def test_order_quantity_must_be_positive(temp_db):
    db, _ = temp_db
    db.ensure_schema()
    with pytest.raises(sqlite3.IntegrityError):
        with db.connect() as con:
            cur = con.execute(
                "INSERT INTO shift_entry(entry_date, shift, platform, operator_name, submitted_at) "
                "VALUES('2026-02-04', 'MORNING', 'BIG_BAG', 'x', ?)",
                (datetime.now().isoformat(),),
            )
            con.execute(
                "INSERT INTO production_order(entry_id, position, category, article_code, unit_count, "
                "unit_weight, units_per_load, tonnage) VALUES(?, 0, 'EXPORT', '4301', 0, 1.1, 20, 0)",
                (cur.lastrowid,),
            )


def test_failed_transaction_rolls_back(temp_db):
    db, _ = temp_db
    db.ensure_schema()
    with pytest.raises(sqlite3.IntegrityError):
        with db.connect() as con:
            con.execute("INSERT INTO app_config(config_key, config_value) VALUES('a', '1')")
            con.execute("INSERT INTO shift_entry(entry_date, shift, platform, operator_name, submitted_at) "
                        "VALUES('2026-02-04', 'EVENING', 'BIG_BAG', 'x', 'now')")

    with db.connect() as con:
        assert con.execute("SELECT COUNT(*) FROM app_config WHERE config_key = 'a'").fetchone()[0] == 0
