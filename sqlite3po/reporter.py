from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table


def _format_value(value: Any) -> str:
    if value is None:
        return "[dim]NULL[/dim]"
    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"
    return str(value)


def print_rows(
    table_name: str,
    rows: List[Dict[str, Any]],
    console: Optional[Console] = None,
) -> None:
    """
    Render table rows as a rich table.

    Columns follow the key order of the first row; rows missing a column
    (possible after an additive migration) show NULL.
    """
    console = console or Console()

    if not rows:
        console.print(f"[yellow]Table {table_name} has no rows.[/yellow]")
        return

    table = Table(
        title=f"{table_name}",
        box=box.ROUNDED,
        caption=f"{len(rows)} row(s), ordered by id",
    )

    columns = list(rows[0].keys())
    for column in columns:
        if column == "id":
            table.add_column(column, justify="right", style="cyan", no_wrap=True)
        else:
            table.add_column(column, style="green")

    for row in rows:
        table.add_row(*(_format_value(row.get(column)) for column in columns))

    console.print(table)
