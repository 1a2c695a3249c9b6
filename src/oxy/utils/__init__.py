"""Shared utilities: constants, typing helpers, and cross-cutting concerns.

Rules
-----
* No business logic.
* No I/O.
* Importable by any layer.
"""

from __future__ import annotations

import logging

TRACE: int = 5
"""Log level below ``DEBUG`` for step-by-step parser tracing."""

logging.addLevelName(TRACE, "TRACE")

__all__: list[str] = ["TRACE"]
