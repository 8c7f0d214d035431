"""
Domain models for sqlroute.

Defines the routing roles, the bound-value type hints, and the query log entry
record shared by connections, statements and the locator.
"""
from __future__ import annotations

import enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


class Role(str, enum.Enum):
    """Routing category for a connection."""

    DEFAULT = "DEFAULT"
    READ = "READ"
    WRITE = "WRITE"

    def __str__(self) -> str:
        return self.value


class ParamType(enum.IntEnum):
    """
    Type hint for a bound value, given as the second item of a
    ``(value, ParamType)`` tuple.
    """

    NULL = 0
    INT = 1
    STR = 2
    LOB = 3
    BOOL = 5


class QueryLogEntry(BaseModel):
    """
    Record of one executed operation.

    Created right before the operation starts; ``finish``, ``duration`` and
    ``trace`` are filled in when the entry is finalized. ``performed`` is only
    used by transaction entries, and ``connection`` is only set by a locator.
    """

    start: float = Field(..., description="Wall-clock start (epoch seconds).")
    finish: Optional[float] = Field(None, description="Wall-clock finish (epoch seconds).")
    duration: Optional[float] = Field(None, description="finish - start, in seconds.")
    performed: Optional[bool] = Field(None, description="Whether a transaction call succeeded.")
    statement: str = Field(..., description="SQL text or transaction label.")
    values: Dict[Union[int, str], Any] = Field(
        default_factory=dict, description="Bound values; positional keys are 1-based."
    )
    trace: Optional[str] = Field(None, description="Call stack at finalization.")
    connection: Optional[str] = Field(None, description="Locator label of the connection.")

    # entries are finalized in place
    model_config = {"validate_assignment": False}


__all__ = ["ParamType", "QueryLogEntry", "Role"]
