"""Allow ``python -m oxy`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m oxy`` behaves identically to the ``oxy`` console
script.
"""

from __future__ import annotations

from oxy.cli.app import cli

if __name__ == "__main__":
    cli()
