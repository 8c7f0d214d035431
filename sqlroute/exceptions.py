"""
Exceptions raised by sqlroute.

Driver errors are never wrapped; these types cover lookups the locator itself
can reject.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SqlRouteError(RuntimeError):
    """
    Base exception for sqlroute errors.

    Attributes
    ----------
    message : str
        Error message.
    context : dict
        Additional diagnostic fields (role, name, ...).
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ConnectionNotFound(SqlRouteError, LookupError):
    """
    Raised when no factory is registered for a role/name pair.

    The message is the connection label, ``"{role}:{name}"``, or just the role
    when no name applies (a missing DEFAULT factory).
    """

    def __init__(self, role: Any, name: Optional[str] = None) -> None:
        role_label = getattr(role, "value", role)
        message = str(role_label) if name is None else f"{role_label}:{name}"
        super().__init__(message)
        self.role = role_label
        self.name = name


__all__ = ["SqlRouteError", "ConnectionNotFound"]
