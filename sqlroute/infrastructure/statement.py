"""
Logged statements: a cursor wrapper that records what it executes.

A ``LoggedStatement`` owns one DB-API cursor and one SQL string. It intercepts
``bind_value`` and ``execute`` to build a ``QueryLogEntry`` for each
execution, and forwards the remaining cursor operations by name. Nothing is
forwarded implicitly.

Example
-------
    sth = connection.prepare("SELECT * FROM users WHERE id = :id")
    sth.bind_value("id", 1)
    sth.execute()
    row = sth.fetchone()
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from sqlroute.domain.models import ParamType, QueryLogEntry

ParamKey = Union[int, str]
EntryFactory = Callable[[str], QueryLogEntry]
EntryLogger = Callable[[QueryLogEntry], None]


def coerce_bound_value(value: Any, param_type: Optional[ParamType]) -> Any:
    """
    Apply a ``ParamType`` hint to a value before it reaches the driver.

    Booleans hinted as ``BOOL`` or ``STR`` become ``"1"`` / ``"0"``; binary
    values hinted as ``STR`` are passed as-is, and values without a hint pass
    through untouched.
    """
    if param_type is None or value is None:
        return value
    param_type = ParamType(param_type)
    if param_type is ParamType.NULL:
        return None
    if isinstance(value, bool) and param_type in (ParamType.BOOL, ParamType.STR):
        return "1" if value else "0"
    if param_type is ParamType.BOOL:
        return value
    if param_type is ParamType.INT:
        return int(value)
    if param_type is ParamType.LOB:
        return value.encode("utf-8") if isinstance(value, str) else bytes(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return value
    return str(value)


def normalize_params(params: Union[Sequence[Any], Mapping[ParamKey, Any], None]) -> Dict[ParamKey, Any]:
    """
    Key execution parameters the way they are logged.

    Sequences become 1-based positional keys; mappings are kept as given.
    """
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return dict(params)
    if isinstance(params, (str, bytes)):
        raise TypeError("params must be a sequence or a mapping, not a string")
    return {position: value for position, value in enumerate(params, start=1)}


def driver_params(bound: Mapping[ParamKey, Any]) -> Union[Tuple[Any, ...], Dict[str, Any], None]:
    """
    Convert logged bindings into DB-API parameters.

    Positional bindings become a tuple ordered by position; named bindings
    become a dict.
    """
    if not bound:
        return None
    positional = [key for key in bound if isinstance(key, int)]
    if positional and len(positional) != len(bound):
        raise ValueError("Cannot mix positional and named parameters in one statement")
    if positional:
        return tuple(bound[key] for key in sorted(positional))
    return {str(key): value for key, value in bound.items()}


class LoggedStatement:
    """
    Cursor-backed statement that logs each successful ``execute``.

    Parameters
    ----------
    cursor : Any
        An open DB-API cursor, owned by this statement.
    statement : str
        SQL text sent to the cursor on every execute.
    new_entry : callable, optional
        Builds a fresh ``QueryLogEntry`` for the statement text.
    logger : callable, optional
        Receives the finalized entry; it decides whether logging is enabled.
    """

    def __init__(
        self,
        cursor: Any,
        statement: str,
        new_entry: Optional[EntryFactory] = None,
        logger: Optional[EntryLogger] = None,
    ) -> None:
        self._cursor = cursor
        self.statement = statement
        self._new_entry = new_entry
        self._logger = logger
        self._bound: Dict[ParamKey, Any] = {}

    def get_cursor(self) -> Any:
        return self._cursor

    # Binding

    def bind_value(
        self,
        parameter: ParamKey,
        value: Any,
        param_type: Optional[ParamType] = None,
    ) -> bool:
        """
        Bind a value for the next execute.

        Integer parameters are positions and must be 1-based.
        """
        if isinstance(parameter, int) and parameter < 1:
            raise ValueError(f"Positional parameters are 1-based, got {parameter}")
        self._bound[parameter] = coerce_bound_value(value, param_type)
        return True

    def get_bound_values(self) -> Dict[ParamKey, Any]:
        return dict(self._bound)

    # Execution

    def execute(
        self, params: Union[Sequence[Any], Mapping[ParamKey, Any], None] = None
    ) -> "LoggedStatement":
        """
        Execute with the bound values, overlaid by ``params``.

        Driver errors propagate and no entry is logged for the failed call.
        """
        values = dict(self._bound)
        values.update(normalize_params(params))
        args = driver_params(values)

        entry = self._new_entry(self.statement) if self._new_entry else None
        if args is None:
            self._cursor.execute(self.statement)
        else:
            self._cursor.execute(self.statement, args)

        if entry is not None and self._logger is not None:
            entry.values = values
            self._logger(entry)
        return self

    # Fetching

    def fetchone(self) -> Optional[Sequence[Any]]:
        return self._cursor.fetchone()

    def fetchmany(self, size: Optional[int] = None) -> List[Sequence[Any]]:
        if size is None:
            return self._cursor.fetchmany()
        return self._cursor.fetchmany(size)

    def fetchall(self) -> List[Sequence[Any]]:
        return self._cursor.fetchall()

    def __iter__(self) -> Iterator[Sequence[Any]]:
        while True:
            row = self._cursor.fetchone()
            if row is None:
                return
            yield row

    # Metadata

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount

    @property
    def description(self) -> Optional[Sequence[Sequence[Any]]]:
        return self._cursor.description

    @property
    def lastrowid(self) -> Any:
        return getattr(self._cursor, "lastrowid", None)

    def column_count(self) -> int:
        description = self._cursor.description
        return len(description) if description else 0

    def column_names(self) -> List[str]:
        description = self._cursor.description or ()
        return [column[0] for column in description]

    # Other

    def close(self) -> None:
        self._cursor.close()

    def __enter__(self) -> "LoggedStatement":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "LoggedStatement",
    "coerce_bound_value",
    "driver_params",
    "normalize_params",
]
