"""Custom exception hierarchy for oxy.

Every user-facing failure inherits from :class:`OxyError` so that the
CLI error boundary can render a clean message without leaking internal
stack traces.

Hierarchy
---------
OxyError
├── ArgumentParseError
│   ├── SchemaViolationError
│   └── MissingRequiredValueError
├── TerminalParseFailure
└── MissingDependencyError

:class:`ModeMismatchError` deliberately sits outside this tree: it
signals an inconsistency between the schema and the accessors, never a
mistake by the user, and is reported by the boundary as unexpected.
"""

from __future__ import annotations


class OxyError(Exception):
    """Base exception for all user-facing oxy errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Argument parsing -------------------------------------------------------

class ArgumentParseError(OxyError):
    """Raised by a quiet parse attempt that did not produce a result."""


class SchemaViolationError(ArgumentParseError):
    """Raised for an unknown flag, subcommand, or stray token."""


class MissingRequiredValueError(ArgumentParseError):
    """Raised when a required positional, flag, or flag value is absent."""


class TerminalParseFailure(OxyError):
    """Raised when both the direct parse and the implicit-client retry fail."""

    def __init__(
        self,
        message: str,
        *,
        direct: ArgumentParseError | None = None,
        retry: ArgumentParseError | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.direct: ArgumentParseError | None = direct
        """Failure of the parse against the original argument vector."""
        self.retry: ArgumentParseError | None = retry
        """Failure of the parse with ``client`` inserted."""


# --- Environment / tooling ----------------------------------------------------

class MissingDependencyError(OxyError):
    """Raised when an optional runtime dependency is not installed."""


# --- Internal -------------------------------------------------------------------

class ModeMismatchError(RuntimeError):
    """An accessor was asked for a field the active mode does not define."""
