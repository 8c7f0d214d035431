"""
Domain package for sqlroute.

Exports the routing roles, binding type hints and the query log entry model.
Keep this package focused on data definitions.
"""

from sqlroute.domain.models import ParamType, QueryLogEntry, Role

__all__ = [
    "ParamType",
    "QueryLogEntry",
    "Role",
]
