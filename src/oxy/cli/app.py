"""CLI application entry point and mode dispatch for oxy.

This module is the **sole error boundary** for the application.  It
catches :class:`~oxy.exceptions.OxyError`, ``KeyboardInterrupt``, and
any unexpected ``Exception``, rendering user-friendly messages and
returning well-defined exit codes.

Architecture notes
------------------
* Resolution of the command line and logging bootstrap happen here,
  before any mode handler runs.
* Mode handlers are supplied by the subsystems that implement the
  modes.  Without one, the resolved invocation is rendered as a table.
* ``SystemExit`` raised by argument resolution (help, usage errors) is
  left alone so its status code reaches the OS unchanged.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping

from oxy.cli import exit_codes
from oxy.cli.console import console
from oxy.cli.invocation import InvocationCache, default_cache, install_default_cache
from oxy.cli.logging_setup import initialize_logging
from oxy.cli.summary import render_summary
from oxy.core.models import ResolvedInvocation
from oxy.core.modes import Mode
from oxy.core.schema import PROGRAM
from oxy.exceptions import OxyError

ModeHandler = Callable[[ResolvedInvocation], int]


def main(
    argv: list[str] | None = None,
    handlers: Mapping[Mode, ModeHandler] | None = None,
) -> int:
    """Run the oxy CLI.

    Parameters
    ----------
    argv:
        Explicit argument list without the program name.  When ``None``
        (default), the process-wide cache resolves ``sys.argv``.  An
        explicit list replaces the process-wide cache so accessors see
        the same invocation.
    handlers:
        Mode → callable returning an exit code.

    Returns
    -------
    int
        OS process exit code.
    """
    if argv is None:
        cache = default_cache()
    else:
        cache = InvocationCache.for_argv([PROGRAM, *argv])
        install_default_cache(cache)

    invocation = cache.get()
    initialize_logging(invocation)

    handler = (handlers or {}).get(invocation.mode, render_summary)
    return handler(invocation)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point."""
    try:
        code = main()
        sys.exit(code)
    except OxyError as exc:
        console.error(str(exc), exc.hint)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
