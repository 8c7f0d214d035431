"""
Infrastructure package for sqlroute.

Centralizes driver-facing concerns: opening connections and wrapping driver
cursors in logged statements. Keep this layer focused on I/O, decoupled from
the locator's routing policy.
"""

from sqlroute.infrastructure.db_factory import build_dsn, connect
from sqlroute.infrastructure.statement import LoggedStatement, coerce_bound_value

__all__ = [
    "LoggedStatement",
    "build_dsn",
    "coerce_bound_value",
    "connect",
]
