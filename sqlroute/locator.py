"""
Read/write connection locator for sqlroute.

A ``ConnectionLocator`` holds connection factories for three roles:

- ``DEFAULT``: a single factory, used whenever a role has nothing registered.
- ``READ``: named factories for read replicas.
- ``WRITE``: named factories for write primaries.

Factories are invoked lazily, at most once per (role, name), and the resulting
``Connection`` is cached for the lifetime of the locator. ``get_read()`` and
``get_write()`` pick one connection per role and stick with it: an already
cached connection wins, otherwise a registered name is chosen at random.

Usage:
    from sqlroute.connection import Connection
    from sqlroute.locator import ConnectionLocator

    locator = ConnectionLocator(
        Connection.factory("postgresql://primary/app"),
        read_factories={
            "replica1": Connection.factory("postgresql://replica1/app"),
            "replica2": Connection.factory("postgresql://replica2/app"),
        },
    )
    rows = locator.get_read().fetch_all("SELECT * FROM users")

    # read-after-write: send reads to the write connection too
    locator.lock_to_write()
"""

from __future__ import annotations

import random
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from sqlroute.config import Settings, get_settings
from sqlroute.connection import Connection, QueryLogger
from sqlroute.domain.models import QueryLogEntry, Role
from sqlroute.exceptions import ConnectionNotFound
from sqlroute.infrastructure.db_factory import build_dsn
from sqlroute.utils.logging import get_logger

log = get_logger(__name__)

ConnectionFactory = Callable[[], Connection]


class ConnectionLocator:
    """
    Lazily builds, caches and selects connections by role.

    All state is guarded by one re-entrant lock; resolving a connection holds
    it for the duration of the factory call, so a factory never runs twice for
    the same (role, name).
    """

    DEFAULT = Role.DEFAULT
    READ = Role.READ
    WRITE = Role.WRITE

    def __init__(
        self,
        default_factory: Optional[ConnectionFactory] = None,
        read_factories: Optional[Mapping[str, ConnectionFactory]] = None,
        write_factories: Optional[Mapping[str, ConnectionFactory]] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._default_factory: Optional[ConnectionFactory] = None
        self._factories: Dict[Role, Dict[str, ConnectionFactory]] = {
            Role.READ: {},
            Role.WRITE: {},
        }
        self._default: Optional[Connection] = None
        self._instances: Dict[Role, Dict[str, Connection]] = {
            Role.READ: {},
            Role.WRITE: {},
        }
        self._read: Optional[Connection] = None
        self._write: Optional[Connection] = None
        self._lock_to_write = False
        self._log_queries = False
        self._queries: List[QueryLogEntry] = []
        self._query_logger: Optional[QueryLogger] = None

        if default_factory is not None:
            self.set_default_factory(default_factory)
        for name, factory in (read_factories or {}).items():
            self.set_read_factory(name, factory)
        for name, factory in (write_factories or {}).items():
            self.set_write_factory(name, factory)

    @classmethod
    def new(cls, connection_or_dsn: Any, **connect_kwargs: Any) -> "ConnectionLocator":
        """
        Build a locator around a single default connection.

        Accepts an existing ``Connection`` (returned as is by the default
        factory) or anything ``Connection.new()`` accepts.
        """
        if isinstance(connection_or_dsn, Connection):
            connection = connection_or_dsn
            return cls(lambda: connection)
        return cls(Connection.factory(connection_or_dsn, **connect_kwargs))

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ConnectionLocator":
        """
        Build a locator from configuration.

        The default factory uses the composed DSN (or ``DB_DSN``); read and
        write factories come from ``DB_READ_DSNS`` / ``DB_WRITE_DSNS``.
        """
        settings = settings or get_settings()
        timeout = settings.db_connect_timeout
        locator = cls(
            Connection.factory(build_dsn(settings), connect_timeout=timeout),
            read_factories={
                name: Connection.factory(dsn, connect_timeout=timeout)
                for name, dsn in settings.db_read_dsns.items()
            },
            write_factories={
                name: Connection.factory(dsn, connect_timeout=timeout)
                for name, dsn in settings.db_write_dsns.items()
            },
        )
        locator.log_queries(settings.log_queries)
        return locator

    # Registration

    def set_default_factory(self, factory: ConnectionFactory) -> None:
        with self._lock:
            self._default_factory = factory

    def set_read_factory(self, name: str, factory: ConnectionFactory) -> None:
        with self._lock:
            self._factories[Role.READ][name] = factory

    def set_write_factory(self, name: str, factory: ConnectionFactory) -> None:
        with self._lock:
            self._factories[Role.WRITE][name] = factory

    # Resolution

    def get_default(self) -> Connection:
        """Resolve the DEFAULT connection once and return it forever after."""
        with self._lock:
            if self._default is None:
                if self._default_factory is None:
                    raise ConnectionNotFound(Role.DEFAULT)
                self._default = self._new_connection(self._default_factory, Role.DEFAULT.value)
            return self._default

    def get_read(self) -> Connection:
        """
        Return the sticky READ connection.

        When locked to write, reads go to ``get_write()`` and no READ
        selection is made.
        """
        with self._lock:
            if self._lock_to_write:
                return self.get_write()
            if self._read is None:
                self._read = self._select(Role.READ)
            return self._read

    def get_write(self) -> Connection:
        """Return the sticky WRITE connection."""
        with self._lock:
            if self._write is None:
                self._write = self._select(Role.WRITE)
            return self._write

    def _select(self, role: Role) -> Connection:
        if not self._factories[role]:
            return self.get_default()

        instances = self._instances[role]
        if instances:
            return next(iter(instances.values()))

        name = random.choice(list(self._factories[role]))
        return self.get(role, name)

    def get(self, role: Union[Role, str], name: str) -> Connection:
        """
        Resolve a named connection, bypassing the selection policy.

        Raises
        ------
        ConnectionNotFound
            If ``name`` is not registered under ``role``.
        """
        try:
            role = Role(role)
        except ValueError:
            raise ConnectionNotFound(role, name) from None

        with self._lock:
            factories = self._factories.get(role, {})
            if name not in factories:
                raise ConnectionNotFound(role, name)

            instances = self._instances[role]
            if name not in instances:
                instances[name] = self._new_connection(factories[name], f"{role.value}:{name}")
            return instances[name]

    def _new_connection(self, factory: ConnectionFactory, label: str) -> Connection:
        try:
            connection = factory()
        except Exception as exc:
            log.warning(
                f"[LOCATOR] Connection factory failed for {label}",
                extra={"connection": label, "error": str(exc)},
            )
            raise

        def query_logger(entry: QueryLogEntry) -> None:
            self._add_log_entry(entry.model_copy(update={"connection": label}))

        connection.set_query_logger(query_logger)
        connection.log_queries(self._log_queries)
        log.debug(f"[LOCATOR] Resolved {label}", extra={"connection": label})
        return connection

    def has_read(self) -> bool:
        return self._read is not None

    def has_write(self) -> bool:
        return self._write is not None

    # Routing mode

    def lock_to_write(self, lock_to_write: bool = True) -> None:
        """
        Send reads to the write connection while locked.

        Unlocking does not discard a READ selection made before locking.
        """
        with self._lock:
            self._lock_to_write = lock_to_write

    def is_locked_to_write(self) -> bool:
        return self._lock_to_write

    # Logging

    def log_queries(self, log_queries: bool = True) -> None:
        """Toggle query logging here and on every connection resolved so far."""
        with self._lock:
            if self._default is not None:
                self._default.log_queries(log_queries)
            for role in (Role.READ, Role.WRITE):
                for connection in self._instances[role].values():
                    connection.log_queries(log_queries)
            self._log_queries = log_queries

    def is_logging_queries(self) -> bool:
        return self._log_queries

    def get_queries(self) -> List[QueryLogEntry]:
        with self._lock:
            return list(self._queries)

    def clear_queries(self) -> None:
        with self._lock:
            self._queries.clear()

    def set_query_logger(self, query_logger: Optional[QueryLogger]) -> None:
        with self._lock:
            self._query_logger = query_logger

    def _add_log_entry(self, entry: QueryLogEntry) -> None:
        query_logger = self._query_logger
        if query_logger is not None:
            query_logger(entry)
            return
        with self._lock:
            self._queries.append(entry)


__all__ = ["ConnectionFactory", "ConnectionLocator"]
