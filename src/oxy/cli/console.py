"""Stderr console with optional Rich rendering.

Rich is imported lazily so that argument resolution, ``--help`` and
``--version`` keep working when it is not installed.  Without Rich,
console markup such as ``[bold]`` is stripped and the text goes to
stderr unstyled.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from oxy.exceptions import MissingDependencyError

_MARKUP_TAG = re.compile(r"\[/?[a-z][a-z0-9 _#.-]*\]")


def load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` or raise ``MissingDependencyError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise MissingDependencyError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def strip_markup(text: str) -> str:
    """Remove Rich style tags from *text*."""
    return _MARKUP_TAG.sub("", text)


class _StderrConsole:
    """``print``-compatible proxy that renders with Rich when it can."""

    def print(self, *objects: object) -> None:
        try:
            rich_console = load_rich_console_class()(stderr=True)
        except MissingDependencyError:
            plain = [strip_markup(o) if isinstance(o, str) else o for o in objects]
            print(*plain, file=sys.stderr)
            return
        rich_console.print(*objects)

    def error(self, message: str, hint: str | None = None) -> None:
        self.print(f"[bold red]Error:[/bold red] {message}")
        if hint:
            self.print(f"[yellow]Hint:[/yellow] {hint}")


console = _StderrConsole()
