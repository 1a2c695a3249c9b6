"""Core layer: grammar, matching, and pure projections.

Rules
-----
* No ``print()`` calls.
* No reads of ``sys.argv``; argument vectors are passed in.
* No imports from ``cli``.
"""

from oxy.core.models import (
    ArgumentSpec,
    ModeSpec,
    ParsedInvocation,
    ResolvedInvocation,
    Schema,
)
from oxy.core.modes import Mode, Perspective, perspective_for
from oxy.core.schema import build

__all__: list[str] = [
    "ArgumentSpec",
    "Mode",
    "ModeSpec",
    "ParsedInvocation",
    "Perspective",
    "ResolvedInvocation",
    "Schema",
    "build",
    "perspective_for",
]
