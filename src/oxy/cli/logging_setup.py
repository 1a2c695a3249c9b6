"""Logging bootstrap.

The verbosity count picks a default level for the ``oxy`` logger
namespace.  An ``OXY_LOG`` variable already present in the environment
wins over that default.  Its syntax is a comma-separated list of
``target=level`` directives; a bare ``level`` applies to every logger.
For example ``OXY_LOG=oxy=debug,oxy.core.matcher=trace``.

Records are rendered by :class:`rich.logging.RichHandler` on stderr, or
by a plain stream handler when Rich is not installed.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from collections.abc import MutableMapping

from oxy.cli.console import console
from oxy.cli.invocation import resolve
from oxy.core.models import ResolvedInvocation
from oxy.utils import TRACE

LOG_ENV: str = "OXY_LOG"
LOGGER_NAMESPACE: str = "oxy"

LEVELS: dict[str, int] = {
    "off": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE,
}

_ROOT = ""
_PLAIN_FORMAT = "%(asctime)s %(levelname)-5s %(name)s: %(message)s"

_lock = threading.Lock()
_handler: logging.Handler | None = None
_configured: list[str] = []


def log_level_for(verbosity: int) -> str:
    """Map a ``-v`` count onto a level name."""
    if verbosity <= 0:
        return "info"
    if verbosity == 1:
        return "debug"
    return "trace"


def parse_directives(spec: str) -> tuple[dict[str, int], list[str]]:
    """Parse ``target=level`` directives into logger-name → level.

    The root logger is keyed by the empty string.  Entries naming an
    unknown level are returned separately, in the order they appear.
    """
    directives: dict[str, int] = {}
    rejected: list[str] = []
    for raw in spec.split(","):
        entry = raw.strip()
        if not entry:
            continue
        target, sep, level_name = entry.rpartition("=")
        if not sep:
            target, level_name = _ROOT, entry
        level = LEVELS.get(level_name.strip().lower())
        if level is None:
            rejected.append(entry)
            continue
        directives[target.strip()] = level
    return directives, rejected


def _make_handler() -> logging.Handler:
    try:
        from rich.console import Console
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
        return handler
    return RichHandler(console=Console(stderr=True), show_path=False)


def is_initialized() -> bool:
    return _handler is not None


def initialize_logging(
    invocation: ResolvedInvocation | None = None,
    environ: MutableMapping[str, str] | None = None,
) -> bool:
    """Configure logging once for the process.

    Returns ``True`` when this call did the configuration, ``False`` if
    logging was already initialised.  *invocation* defaults to the
    process-wide resolved invocation.  Directives with an unknown level
    are reported on stderr and skipped; the rest still apply.
    """
    global _handler
    with _lock:
        if _handler is not None:
            return False
        if invocation is None:
            invocation = resolve()
        env = os.environ if environ is None else environ
        if LOG_ENV not in env:
            env[LOG_ENV] = f"{LOGGER_NAMESPACE}={log_level_for(invocation.verbosity())}"
        directives, rejected = parse_directives(env[LOG_ENV])
        for entry in rejected:
            console.print(
                f"[yellow]Warning:[/yellow] ignoring invalid {LOG_ENV} directive {entry!r}",
            )

        root = logging.getLogger()
        root.setLevel(directives.pop(_ROOT, logging.ERROR))
        for name, level in directives.items():
            logging.getLogger(name).setLevel(level)
            _configured.append(name)

        handler = _make_handler()
        root.addHandler(handler)
        _handler = handler
    logging.getLogger(__name__).log(
        TRACE, "Logging initialised from %s=%s", LOG_ENV, env[LOG_ENV],
    )
    return True


def reset_logging() -> None:
    """Undo :func:`initialize_logging`; used between tests."""
    global _handler
    with _lock:
        if _handler is None:
            return
        root = logging.getLogger()
        root.removeHandler(_handler)
        root.setLevel(logging.WARNING)
        for name in _configured:
            logging.getLogger(name).setLevel(logging.NOTSET)
        _configured.clear()
        _handler = None
