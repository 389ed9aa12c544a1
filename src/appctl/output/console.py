"""Rich Console factory and theme for appctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

APP_THEME = Theme(
    {
        "app.ok": "bold green",
        "app.error": "bold red",
        "app.warning": "bold yellow",
        "app.op": "bold cyan",
        "app.key": "dim",
        "app.state": "bold blue",
        "app.guard.pass": "green",
        "app.guard.overridden": "yellow",
        "app.guard.block": "red",
    }
)

_GUARD_STYLES: dict[str, str] = {
    "pass": "app.guard.pass",
    "overridden": "app.guard.overridden",
    "block": "app.guard.block",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=APP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_guard(outcome: str) -> str:
    """Return the Rich style name for a guard outcome."""
    return _GUARD_STYLES.get(outcome, "")
