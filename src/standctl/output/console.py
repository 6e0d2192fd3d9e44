"""Rich Console factory and theme for standctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

STAND_THEME = Theme(
    {
        "stand.ok": "bold green",
        "stand.error": "bold red",
        "stand.warning": "bold yellow",
        "stand.op": "bold cyan",
        "stand.key": "dim",
        "stand.id": "bold blue",
        "stand.name": "bold",
        "stand.status.available": "green",
        "stand.status.sold": "red",
        "stand.released": "dim strike",
        "stand.money": "magenta",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "available": "stand.status.available",
    "sold": "stand.status.sold",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=STAND_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str | None) -> str:
    """Return the Rich style name for a stand status."""
    return _STATUS_STYLES.get((status or "").lower(), "")
