import sys
from typing import List, Optional

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

_console = Console()

RISK_STYLES = {
    "low": "green",
    "medium": "yellow",
    "high": "bold dark_orange",
    "critical": "bold red",
}


def is_interactive() -> bool:
    """Check if we are in an interactive TTY session."""
    return sys.stdin.isatty() and sys.stdout.isatty()


def risk_markup(level: str) -> str:
    style = RISK_STYLES.get(level, "white")
    return f"[{style}]{level.upper()}[/]"


def print_step(title: str) -> None:
    """Print a step header."""
    _console.rule(f"[bold blue]{title}[/]")


def print_success(message: str) -> None:
    _console.print(f"[bold green]SUCCESS:[/] {message}")


def print_warning(message: str) -> None:
    _console.print(f"[bold yellow]WARNING:[/] {message}")


def print_error(message: str, exit_code: Optional[int] = None) -> None:
    """Print an error message and optionally exit."""
    _console.print(f"[bold red]ERROR:[/] {message}")
    if exit_code is not None:
        sys.exit(exit_code)


def print_table(title: str, columns: List[str], rows: List[List[str]]) -> None:
    if not rows:
        _console.print(f"\n{title}\n(No data)")
        return

    table = Table(title=title)
    for col in columns:
        table.add_column(col)
    for row in rows:
        table.add_row(*row)
    _console.print(table)


def ask_input(prompt_text: str, default: Optional[str] = None) -> str:
    """
    Prompt for user input (interactive only).
    If not interactive, returns default if present, else raises.
    """
    if not is_interactive():
        if default is not None:
            return default
        raise RuntimeError("Interactive input required but not in TTY mode.")

    if default is not None:
        return str(Prompt.ask(prompt_text, default=default))
    return str(Prompt.ask(prompt_text))
