from __future__ import annotations

from pathlib import Path

from src.checkin_system.checkin_system.database.bootstrap import (
    _iter_sql_statements,
    _strip_comments,
    _strip_create_db_and_use,
)
from src.checkin_system.checkin_system.database.errors import (
    UQ_ATTENDEE_BADGE,
    UQ_ATTENDEE_EVENT_EMAIL,
    UQ_CHECKIN_ATTENDEE_TYPE,
    UQ_EVENT_CODE,
)

ROOT = Path(__file__).resolve().parents[2]


def _statements(name: str) -> list[str]:
    sql = (ROOT / "database" / name).read_text(encoding="utf-8")
    return list(_iter_sql_statements(_strip_comments(_strip_create_db_and_use(sql))))


def test_splitter_keeps_semicolons_inside_quotes():
    sql = "INSERT INTO events (event_name) VALUES ('a;b');\n  -- note\nSELECT \"x;y\";"

    assert list(_iter_sql_statements(_strip_comments(sql))) == [
        "INSERT INTO events (event_name) VALUES ('a;b')",
        'SELECT "x;y"',
    ]


def test_schema_declares_unique_keys_used_by_the_store():
    schema = "\n".join(_statements("schema.sql"))

    for name in (UQ_EVENT_CODE, UQ_ATTENDEE_BADGE, UQ_ATTENDEE_EVENT_EMAIL, UQ_CHECKIN_ATTENDEE_TYPE):
        assert name in schema
    assert "ON DELETE CASCADE" in schema
    assert not any(s.upper().startswith(("CREATE DATABASE", "USE ")) for s in _statements("schema.sql"))


def test_seed_inserts_demo_events():
    seed = _statements("seed.sql")

    assert any("CONF2025" in s for s in seed)
    assert any("WORKSHOP25" in s for s in seed)
