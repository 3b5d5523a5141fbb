from __future__ import annotations

import asyncio
import sys
from typing import Any, Dict, List, Optional

import typer

from sqlite3po.config import get_settings
from sqlite3po.database import Database
from sqlite3po.exceptions import SchemaError
from sqlite3po.orm import sql as sql_builder
from sqlite3po.reporter import print_rows
from sqlite3po.utils.logging import configure_logging

app = typer.Typer(help="sqlite3po developer CLI.")


def _parse_attributes(specs: List[str]) -> Dict[str, str]:
    attributes: Dict[str, str] = {}
    for spec in specs:
        name, sep, column_type = spec.partition(":")
        if not sep or not name or not column_type:
            raise typer.BadParameter(f"Expected NAME:TYPE, got '{spec}'")
        attributes[name] = column_type
    return attributes


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"database={settings.database_path} | timeout={settings.connect_timeout}s "
        f"attempts={settings.connect_attempts} "
        f"optimistic_eviction={settings.optimistic_eviction} | log_level={settings.log_level}"
    )


@app.command()
def sql(
    table: str = typer.Argument(..., help="Table name."),
    columns: Optional[List[str]] = typer.Argument(
        None, help="Column declarations as NAME:TYPE, e.g. text:varchar(255)."
    ),
) -> None:
    """
    Print the statements a binding of TABLE with COLUMNS would run.
    """
    attributes = _parse_attributes(columns or [])
    try:
        attributes = dict(sql_builder.validate_attributes(attributes))
    except SchemaError as exc:
        raise typer.BadParameter(str(exc)) from exc

    statements = [sql_builder.create_table_sql(table)]
    statements += sql_builder.add_columns_sql(table, attributes)
    statements += [
        sql_builder.insert_sql(table, attributes),
        sql_builder.update_sql(table, attributes),
        sql_builder.delete_sql(table),
        sql_builder.select_by_id_sql(table),
    ]
    for statement in statements:
        typer.echo(f"{statement};")


async def _fetch_rows(database: Optional[str], table: str, limit: int) -> List[Dict[str, Any]]:
    async with Database.connect(database) as db:
        return await db.fetch_all(f"{sql_builder.select_all_sql(table)} LIMIT ?", limit)


@app.command()
def inspect(
    table: str = typer.Argument(..., help="Table to display."),
    database: Optional[str] = typer.Option(
        None,
        "--database",
        "-d",
        help="Database file (default from SQLITE3PO_DATABASE).",
    ),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum number of rows to show."),
) -> None:
    """
    Show the rows of a bound table.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)
    rows = asyncio.run(_fetch_rows(database, table, limit))
    print_rows(table, rows)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
