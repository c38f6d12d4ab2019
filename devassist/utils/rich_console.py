from typing import Any

from rich.console import Console
from rich.table import Table


# Singleton Console instance
def get_console() -> Console:
    if not hasattr(get_console, "_console"):
        get_console._console = Console()
    return get_console._console


def print_table(headers: list[str], rows: list[list[Any]], title: str | None = None):
    """Print a formatted table using Rich library.

    Args:
        headers (list[str]): Column headers for the table.
        rows (list[list[Any]]): Data rows to display in the table.
        title (str | None, optional): Title of the table. Defaults to None.
    """
    table = Table(title=title)
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    get_console().print(table)


def print_error(message: str) -> None:
    get_console().print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    get_console().print(f"[green]✔[/green] {message}")
