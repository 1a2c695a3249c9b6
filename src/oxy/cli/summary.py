"""Render a resolved invocation as a table.

This is the default mode handler: it shows what the argument layer
resolved without acting on it.  Rendering uses a Rich table when Rich is
installed and a fixed-width plain table on stderr otherwise.
"""

from __future__ import annotations

import sys

from oxy.cli import exit_codes
from oxy.cli.console import console
from oxy.core.models import ArgumentValue, ResolvedInvocation


def _format_value(value: ArgumentValue) -> str:
    if isinstance(value, tuple):
        return ", ".join(value)
    if isinstance(value, int):
        return f"x{value}"
    return value


def summary_rows(invocation: ResolvedInvocation) -> list[tuple[str, str]]:
    """Return ``(label, value)`` rows describing *invocation*."""
    rows = [
        ("mode", invocation.mode.value),
        ("perspective", invocation.perspective().value),
    ]
    if invocation.implicit_client:
        rows.append(("implicit client", "yes"))
    for name in sorted(invocation.arguments):
        rows.append((name, _format_value(invocation.arguments[name])))
    return rows


def _print_plain_table(rows: list[tuple[str, str]]) -> None:
    print("\noxy invocation", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Argument':<22} {'Value':<33}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value in rows:
        print(f"{label:<22} {value:<33}", file=sys.stderr)
    print(file=sys.stderr)


def render_summary(invocation: ResolvedInvocation) -> int:
    rows = summary_rows(invocation)
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_table(rows)
        return exit_codes.SUCCESS

    table = Table(
        title="oxy invocation",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Argument", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    for label, value in rows:
        table.add_row(label, value)

    console.print()
    console.print(table)
    console.print()
    return exit_codes.SUCCESS
