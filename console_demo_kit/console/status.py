"""Styled one-line status output.

Usage:
    from console_demo_kit.console.status import print_warning, print_success, print_error

    print_success(console, "Scenario 'Hello' completed")
    print_error(console, "Scenario 'Error' failed: boom")
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text


def print_status(console: Console, icon: str, style: str, message: str) -> None:
    """Print a styled status line. `message` is never parsed as markup."""
    console.print(Text(f"{icon} {message}", style=style))


def print_warning(console: Console, message: str) -> None:
    """Print a yellow warning line (⚠)."""
    print_status(console, "⚠", "yellow", message)


def print_success(console: Console, message: str) -> None:
    """Print a green success line (✓)."""
    print_status(console, "✓", "green", message)


def print_error(console: Console, message: str) -> None:
    """Print a red error line (✗)."""
    print_status(console, "✗", "red", message)


def print_hint(console: Console, message: str) -> None:
    print_status(console, " ", "dim", message)
