"""Process-wide invocation cache.

:class:`InvocationCache` is a lazy cell: the first :meth:`~InvocationCache.get`
parses the argument vector, later calls return the same object.  The
first computation is serialised with a lock so concurrent callers parse
exactly once and all observe one value.

Resolution is the only place where a parse failure becomes visible.  A
help request prints to stdout and exits ``0``; a terminal failure
re-parses the original vector loudly, which prints usage to stderr and
exits non-zero.
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import NoReturn

from oxy.cli import exit_codes
from oxy.core import matcher
from oxy.core.models import ResolvedInvocation, Schema
from oxy.core.schema import build
from oxy.exceptions import TerminalParseFailure

logger = logging.getLogger(__name__)


def fail_loudly(
    argv: Sequence[str],
    schema: Schema,
    environ: Mapping[str, str] | None = None,
) -> NoReturn:
    """Parse the original *argv* one last time and let it fail visibly."""
    parser = matcher.build_parser(schema, environ, quiet=False)
    if len(argv) <= 1:
        parser.print_help(sys.stderr)
        parser.exit(exit_codes.USAGE_ERROR)
    parser.parse_args(list(argv[1:]))
    # Only reachable if the loud parse accepts what the quiet ones refused.
    raise TerminalParseFailure(f"Could not resolve invocation {list(argv)!r}")


def resolve_argv(
    argv: Sequence[str],
    schema: Schema,
    environ: Mapping[str, str] | None = None,
) -> ResolvedInvocation:
    """Resolve *argv* or terminate the process."""
    outcome = matcher.parse(argv, schema, environ)
    if isinstance(outcome, matcher.Resolved):
        logger.debug(
            "Resolved mode %s (implicit client: %s)",
            outcome.invocation.mode.value,
            outcome.invocation.implicit_client,
        )
        return outcome.invocation
    if isinstance(outcome, matcher.HelpRequested):
        sys.stdout.write(outcome.text)
        sys.stdout.flush()
        sys.exit(exit_codes.SUCCESS)
    logger.debug("Argument resolution failed: %s", outcome)
    fail_loudly(argv, schema, environ)


class InvocationCache:
    """Lazily resolved, never-invalidated invocation.

    Parameters
    ----------
    argv_source:
        Returns the argument vector including the program name.
        Defaults to reading :data:`sys.argv` at first access.
    schema_factory:
        Builds the grammar.  Defaults to :func:`oxy.core.schema.build`.
    environ:
        Environment used for argument fallbacks.  Defaults to
        :data:`os.environ` at first access.
    """

    def __init__(
        self,
        argv_source: Callable[[], Sequence[str]] | None = None,
        schema_factory: Callable[[], Schema] = build,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._argv_source = argv_source or (lambda: list(sys.argv))
        self._schema_factory = schema_factory
        self._environ = environ
        self._lock = threading.Lock()
        self._value: ResolvedInvocation | None = None

    @classmethod
    def for_argv(
        cls,
        argv: Sequence[str],
        environ: Mapping[str, str] | None = None,
    ) -> InvocationCache:
        frozen = tuple(argv)
        return cls(argv_source=lambda: frozen, environ=environ)

    @property
    def resolved(self) -> bool:
        return self._value is not None

    def get(self) -> ResolvedInvocation:
        value = self._value
        if value is not None:
            return value
        with self._lock:
            if self._value is None:
                environ = os.environ if self._environ is None else self._environ
                self._value = resolve_argv(
                    self._argv_source(),
                    self._schema_factory(),
                    dict(environ),
                )
            return self._value


_default_cache = InvocationCache()


def default_cache() -> InvocationCache:
    return _default_cache


def install_default_cache(cache: InvocationCache) -> InvocationCache:
    """Replace the process-wide cache; returns the previous one.

    Intended for tests and for embedding programs that resolve an
    explicit argument vector before any accessor runs.
    """
    global _default_cache
    previous = _default_cache
    _default_cache = cache
    return previous


def reset_default_cache() -> None:
    install_default_cache(InvocationCache())


def resolve() -> ResolvedInvocation:
    """Return the process invocation, resolving it on first use."""
    return _default_cache.get()
