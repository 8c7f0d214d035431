"""
Pytest configuration for sqlroute.

Provides fixtures for:
- In-memory sqlite3 connections wrapped in ``Connection`` (unit tests)
- A locator with default/read/write factories over those connections
- Postgres settings and availability checks (integration tests)
"""

from __future__ import annotations

import os
import sqlite3
from typing import Callable, Dict, Generator

import psycopg
import pytest

from sqlroute.config import Settings
from sqlroute.connection import Connection
from sqlroute.locator import ConnectionLocator

NAMES: Dict[int, str] = {
    1: "Anna",
    2: "Betty",
    3: "Clara",
    4: "Donna",
    5: "Fiona",
    6: "Gertrude",
    7: "Hanna",
    8: "Ione",
    9: "Julia",
    10: "Kara",
}

CONNECTION_NAMES = ["default", "read1", "read2", "read3", "write1", "write2", "write3"]


def new_sqlite_connection() -> Connection:
    """An in-memory sqlite3 connection in autocommit mode, wrapped."""
    driver = sqlite3.connect(":memory:", isolation_level=None, check_same_thread=False)
    return Connection(driver)


@pytest.fixture()
def connection() -> Generator[Connection, None, None]:
    """
    A Connection over sqlite3 with a seeded `pdotest` table.

    Query logging is off; tests turn it on when they need it.
    """
    conn = new_sqlite_connection()
    conn.exec(
        "CREATE TABLE pdotest ("
        " id INTEGER PRIMARY KEY AUTOINCREMENT,"
        " name VARCHAR(10) NOT NULL)"
    )
    for name in NAMES.values():
        conn.perform("INSERT INTO pdotest (name) VALUES (:name)", {"name": name})
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def conns() -> Dict[str, Connection]:
    """One distinct Connection per locator slot used in the locator tests."""
    return {name: new_sqlite_connection() for name in CONNECTION_NAMES}


@pytest.fixture()
def read_factories(conns: Dict[str, Connection]) -> Dict[str, Callable[[], Connection]]:
    return {name: (lambda name=name: conns[name]) for name in ("read1", "read2", "read3")}


@pytest.fixture()
def write_factories(conns: Dict[str, Connection]) -> Dict[str, Callable[[], Connection]]:
    return {name: (lambda name=name: conns[name]) for name in ("write1", "write2", "write3")}


@pytest.fixture()
def new_locator(conns: Dict[str, Connection]) -> Callable[..., ConnectionLocator]:
    """Build a locator whose default factory returns ``conns["default"]``."""

    def make(read=None, write=None) -> ConnectionLocator:
        return ConnectionLocator(lambda: conns["default"], read or {}, write or {})

    return make


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "sqlroute"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for integration tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False
