"""
sqlroute - a thin decorator layer over DB-API database drivers.

This package provides:

- A ``Connection`` facade with fetch/yield conveniences and query logging
- A ``ConnectionLocator`` that routes reads and writes across named
  connection factories, with sticky random selection and a write lock
- ``QueryLogEntry`` records describing every logged operation

Query logging is off by default and is toggled per connection or, for every
connection it manages, on the locator.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from sqlroute.config import Settings, get_settings
from sqlroute.connection import Connection
from sqlroute.domain.models import ParamType, QueryLogEntry, Role
from sqlroute.exceptions import ConnectionNotFound, SqlRouteError
from sqlroute.infrastructure.statement import LoggedStatement
from sqlroute.locator import ConnectionLocator
from sqlroute.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Connections
    "Connection",
    "ConnectionLocator",
    "LoggedStatement",
    # Domain
    "ParamType",
    "QueryLogEntry",
    "Role",
    # Errors
    "ConnectionNotFound",
    "SqlRouteError",
    # Logging
    "configure_logging",
    "get_logger",
]
