from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from presence_attendance.database.bootstrap import _DB_DIRECTIVES, split_sql
from presence_attendance.database.connection import DBConfig
from presence_attendance.database.mysql_base import day_bounds

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_split_sql_respects_quotes_and_comments():
    sql = """
    -- leading comment
    INSERT INTO t VALUES ('a;b', "c -- d");
    INSERT INTO t VALUES ('it\\'s');  -- trailing
    """
    assert list(split_sql(sql)) == [
        "INSERT INTO t VALUES ('a;b', \"c -- d\")",
        "INSERT INTO t VALUES ('it\\'s')",
    ]


def test_schema_defines_the_four_tables_without_db_directives():
    sql = _DB_DIRECTIVES.sub("", SCHEMA.read_text(encoding="utf-8"))
    statements = list(split_sql(sql))

    assert not any(s.upper().startswith(("CREATE DATABASE", "USE ")) for s in statements)
    created = [s.split()[5] for s in statements if s.upper().startswith("CREATE TABLE")]
    assert created == ["users", "campus", "students", "attendance"]


def test_attendance_table_has_no_unique_natural_key():
    attendance = next(s for s in split_sql(SCHEMA.read_text(encoding="utf-8")) if "TABLE IF NOT EXISTS attendance" in s)
    assert "UNIQUE" not in attendance.upper()


def test_db_config_defaults():
    cfg = DBConfig.from_dict({"port": "3307", "password": None})
    assert cfg == DBConfig(host="localhost", port=3307, user="root", password="", database="presence_attendance")


def test_day_bounds():
    assert day_bounds(date(2026, 10, 19)) == (datetime(2026, 10, 19), datetime(2026, 10, 20))
