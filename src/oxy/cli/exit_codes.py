"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit, including a successful ``--help`` or ``--version``."""

GENERAL_ERROR: int = 1
"""A known OxyError was caught. User-facing message was displayed."""

USAGE_ERROR: int = 2
"""The final parse rejected the command line (argparse convention)."""

UNEXPECTED_ERROR: int = 70
"""An internal error escaped all known boundaries (``EX_SOFTWARE``)."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
