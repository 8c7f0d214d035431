"""
Driver connection factory for sqlroute.

Composes DSNs from settings and opens psycopg connections, with retry logic
for transient connection failures using tenacity. This is the only place the
package talks to the driver's connect API; everything above it works with any
DB-API 2.0 connection.
"""

from __future__ import annotations

from typing import Any, Optional

import psycopg
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from sqlroute.config import Settings, get_settings
from sqlroute.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """
    Compose the default DSN from settings.

    ``DB_DSN`` wins over the individual host/port/user/password/name fields.
    """
    settings = settings or get_settings()
    if settings.db_dsn:
        return settings.db_dsn
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def connect(dsn: str, **kwargs: Any) -> psycopg.Connection:
    """
    Open a dedicated psycopg connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection
    errors. Connections open in autocommit mode unless ``autocommit`` is
    passed, so that transactions are started explicitly through
    ``Connection.begin_transaction()``.

    Parameters
    ----------
    dsn : str
        libpq connection string or URL.
    **kwargs
        Extra keyword arguments for ``psycopg.connect``.

    Returns
    -------
    psycopg.Connection
        A new psycopg connection instance.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    kwargs.setdefault("autocommit", True)
    kwargs.setdefault("connect_timeout", get_settings().db_connect_timeout)
    log.debug("Opening driver connection", extra={"autocommit": kwargs["autocommit"]})
    return psycopg.connect(dsn, **kwargs)


__all__ = ["build_dsn", "connect"]
