from __future__ import annotations

import pytest

from src.checkin_system.checkin_system.container import build_container
from src.checkin_system.checkin_system.database.connection import DBConfig


def _db_config(name: str) -> dict:
    return {"host": "db.internal", "user": "app", "password": "secret", "database": name}


def test_db_config_from_mapping_defaults():
    config = DBConfig.from_mapping(_db_config("checkin_db"))

    assert config.port == 3306
    assert config.connection_timeout == 10
    assert config.describe() == "app@db.internal:3306/checkin_db"


def test_each_container_gets_its_own_connection_factory():
    first = build_container(db_config=_db_config("checkin_a"), backend="mysql")
    second = build_container(db_config=_db_config("checkin_b"), backend="mysql")

    assert first.conn is not second.conn
    assert first.conn.config.database == "checkin_a"
    assert second.conn.config.database == "checkin_b"


def test_mysql_backend_requires_db_config():
    with pytest.raises(ValueError):
        build_container(backend="mysql")
