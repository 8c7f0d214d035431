from __future__ import annotations

from typing import Any, List

import psycopg
import pytest
from tenacity import wait_none

from sqlroute import config
from sqlroute.config import Settings
from sqlroute.exceptions import ConnectionNotFound, SqlRouteError
from sqlroute.infrastructure import db_factory

CONNECT_ATTEMPTS = 3


def test_get_settings_defaults():
    settings = config.get_settings()
    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_user == "postgres"
    assert settings.db_name == "sqlroute"
    assert settings.db_read_dsns == {}
    assert settings.db_write_dsns == {}
    assert settings.log_queries is False


def test_settings_read_replica_maps_from_env(monkeypatch):
    monkeypatch.setenv("DB_READ_DSNS", '{"replica1": "postgresql://r1/app"}')
    monkeypatch.setenv("LOG_QUERIES", "true")
    settings = Settings()
    assert settings.db_read_dsns == {"replica1": "postgresql://r1/app"}
    assert settings.log_queries is True


def test_build_dsn_composes_fields():
    settings = Settings(db_host="db", db_port=6543, db_user="u", db_password="p", db_name="n")
    assert db_factory.build_dsn(settings) == "postgresql://u:p@db:6543/n"


def test_build_dsn_prefers_explicit_dsn():
    settings = Settings(db_dsn="postgresql://explicit/app")
    assert db_factory.build_dsn(settings) == "postgresql://explicit/app"


def test_connect_defaults_to_autocommit(monkeypatch):
    calls: List[dict] = []

    def fake_connect(dsn: str, **kwargs: Any) -> object:
        calls.append({"dsn": dsn, **kwargs})
        return object()

    monkeypatch.setattr(db_factory.psycopg, "connect", fake_connect)

    db_factory.connect("postgresql://test")
    assert calls[0]["dsn"] == "postgresql://test"
    assert calls[0]["autocommit"] is True
    assert calls[0]["connect_timeout"] == config.get_settings().db_connect_timeout


def test_connect_retries_transient_errors(monkeypatch):
    attempts: List[int] = []

    def flaky_connect(dsn: str, **kwargs: Any) -> object:
        attempts.append(1)
        raise psycopg.OperationalError("server closed the connection")

    monkeypatch.setattr(db_factory.psycopg, "connect", flaky_connect)

    with pytest.raises(psycopg.OperationalError):
        db_factory.connect.retry_with(wait=wait_none())("postgresql://test")
    assert len(attempts) == CONNECT_ATTEMPTS


def test_connection_not_found_carries_role_and_name():
    exc = ConnectionNotFound("READ", "replica9")
    assert isinstance(exc, SqlRouteError)
    assert isinstance(exc, LookupError)
    assert exc.role == "READ"
    assert exc.name == "replica9"
    assert str(exc) == "READ:replica9"


def test_sql_route_error_renders_context():
    exc = SqlRouteError("boom", context={"role": "WRITE"})
    assert str(exc) == "boom (context: role=WRITE)"
