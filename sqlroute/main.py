from __future__ import annotations

import json
import sys
from typing import Dict, List, Optional

import typer

from sqlroute.config import get_settings
from sqlroute.connection import Connection
from sqlroute.domain.models import Role
from sqlroute.exceptions import ConnectionNotFound
from sqlroute.locator import ConnectionLocator
from sqlroute.reporter import print_query_log
from sqlroute.utils.logging import configure_logging

app = typer.Typer(help="sqlroute CLI: run statements through the read/write connection locator.")


def _parse_params(params: List[str]) -> Dict[str, str]:
    parsed: Dict[str, str] = {}
    for item in params:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected NAME=VALUE, got '{item}'", param_hint="--param")
        parsed[key] = value
    return parsed


def _resolve(locator: ConnectionLocator, role: str, name: Optional[str]) -> Connection:
    selected = Role(role.upper())
    if name is not None:
        return locator.get(selected, name)
    if selected is Role.READ:
        return locator.get_read()
    if selected is Role.WRITE:
        return locator.get_write()
    return locator.get_default()


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    if settings.db_dsn:
        default = "DB_DSN"
    else:
        default = f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    typer.echo(
        f"DEFAULT={default} | "
        f"READ={', '.join(settings.db_read_dsns) or '-'} | "
        f"WRITE={', '.join(settings.db_write_dsns) or '-'} | "
        f"log_queries={settings.log_queries}"
    )


@app.command()
def query(
    statement: str = typer.Argument(..., help="SQL statement to run."),
    role: str = typer.Option(
        "read",
        "--role",
        "-r",
        help="Connection role: default, read or write.",
    ),
    name: Optional[str] = typer.Option(
        None,
        "--name",
        "-n",
        help="Named connection within the role (skips random selection).",
    ),
    param: Optional[List[str]] = typer.Option(
        None,
        "--param",
        "-p",
        help="Named bound value as NAME=VALUE; repeatable.",
    ),
    show_log: bool = typer.Option(False, "--show-log", help="Print the query log after the rows."),
) -> None:
    """
    Run one statement and print the resulting rows as JSON.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    if role.upper() not in Role.__members__:
        raise typer.BadParameter(f"Unknown role '{role}'", param_hint="--role")

    locator = ConnectionLocator.from_settings(settings)
    if show_log:
        locator.log_queries(True)

    try:
        connection = _resolve(locator, role, name)
    except ConnectionNotFound as exc:
        typer.echo(f"Connection not found: {exc}", err=True)
        raise typer.Exit(code=2)

    sth = connection.perform(statement, _parse_params(param or []) or None)
    if sth.description:
        columns = sth.column_names()
        rows = [dict(zip(columns, row)) for row in sth.fetchall()]
        typer.echo(json.dumps(rows, indent=2, default=str))
    else:
        typer.echo(json.dumps({"rowcount": sth.rowcount}))

    if show_log:
        print_query_log(locator.get_queries())


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
