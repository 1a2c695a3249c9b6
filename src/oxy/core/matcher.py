"""Match an argument vector against the oxy grammar.

The schema is rendered into an :mod:`argparse` parser tree, one
sub-parser per mode.  Parse attempts made here are *quiet*: nothing is
printed and nothing exits.  Every attempt returns a tagged outcome so
the retry policy reads top to bottom in :func:`parse`:

1. :func:`direct_attempt` parses ``argv`` as given.  Success yields
   :class:`Resolved`, ``--help`` yields :class:`HelpRequested`.  Any
   other failure yields :class:`ImplicitClientRetry` carrying the
   vector with ``client`` inserted after the program name, unless the
   first positional token already names a mode.
2. The retry either resolves (flagged ``implicit_client``) or the whole
   parse is :class:`Failed`.

Rendering the final user-visible failure is the caller's job; see
:func:`oxy.cli.invocation.fail_loudly`.
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from oxy.core.models import (
    ArgumentSpec,
    ModeSpec,
    ParsedInvocation,
    ResolvedInvocation,
    Schema,
)
from oxy.core.modes import Mode
from oxy.exceptions import (
    ArgumentParseError,
    MissingRequiredValueError,
    OxyError,
    SchemaViolationError,
    TerminalParseFailure,
)
from oxy.utils import TRACE

logger = logging.getLogger(__name__)

MODE_DEST: str = "mode"
"""Namespace attribute holding the selected sub-command name."""

IMPLICIT_MODE: Mode = Mode.CLIENT


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Resolved:
    invocation: ResolvedInvocation


@dataclass(frozen=True, slots=True)
class HelpRequested:
    text: str
    """Rendered help of the parser that saw ``-h/--help``."""


@dataclass(frozen=True, slots=True)
class ImplicitClientRetry:
    argv: tuple[str, ...]
    """Original vector with ``client`` inserted at position 1."""

    error: ArgumentParseError
    """Why the direct parse failed."""


@dataclass(frozen=True, slots=True)
class Failed:
    error: OxyError


ParseOutcome = Resolved | HelpRequested | ImplicitClientRetry | Failed


# ---------------------------------------------------------------------------
# Parser construction
# ---------------------------------------------------------------------------

class _HelpSignal(Exception):
    def __init__(self, text: str) -> None:
        super().__init__("help requested")
        self.text = text


class UnifiedHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Help layout shared by the top-level parser and every mode."""

    def __init__(self, prog: str, **kwargs: Any) -> None:
        kwargs.setdefault("max_help_position", 34)
        super().__init__(prog, **kwargs)


class SchemaParser(argparse.ArgumentParser):
    """``ArgumentParser`` that can fail silently with typed exceptions.

    With ``quiet=True`` errors raise :class:`ArgumentParseError`
    subclasses, help raises an internal signal carrying the rendered
    text, and nothing is written to the standard streams.  With
    ``quiet=False`` it behaves like a stock parser: usage to stderr and
    ``SystemExit``.
    """

    def __init__(self, *args: Any, quiet: bool = False, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.quiet = quiet

    def print_help(self, file: Any = None) -> None:
        if self.quiet:
            raise _HelpSignal(self.format_help())
        super().print_help(file)

    def _print_message(self, message: str, file: Any = None) -> None:
        if self.quiet:
            return
        super()._print_message(message, file)

    def exit(self, status: int = 0, message: str | None = None) -> None:  # type: ignore[override]
        if self.quiet:
            raise SchemaViolationError(message or f"parser requested exit ({status})")
        super().exit(status, message)

    def error(self, message: str) -> None:  # type: ignore[override]
        if self.quiet:
            raise classify_error(message)
        super().error(message)


_MISSING_VALUE_PREFIXES = ("the following arguments are required:",)
_MISSING_VALUE_MARKERS = (": expected one argument", ": expected at least one argument")


def classify_error(message: str) -> ArgumentParseError:
    """Map an argparse error message onto the oxy error kinds."""
    if message.startswith(_MISSING_VALUE_PREFIXES):
        return MissingRequiredValueError(message)
    if message.startswith("argument ") and message.endswith(_MISSING_VALUE_MARKERS):
        return MissingRequiredValueError(message)
    return SchemaViolationError(message)


def _annotated_help(spec: ArgumentSpec) -> str:
    parts = [spec.help] if spec.help else []
    if spec.default is not None:
        parts.append(f"[default: {spec.default}]")
    if spec.env is not None:
        parts.append(f"[env: {spec.env}]")
    return " ".join(parts)


def _add_argument(
    parser: argparse.ArgumentParser,
    spec: ArgumentSpec,
    environ: Mapping[str, str],
) -> None:
    env_value = environ.get(spec.env) if spec.env else None
    default = env_value if env_value is not None else spec.default
    help_text = _annotated_help(spec)

    if spec.is_positional:
        if spec.multiple:
            nargs = "+" if spec.required else "*"
        else:
            nargs = None if spec.required else "?"
        parser.add_argument(spec.name, nargs=nargs, default=default, help=help_text)
        return

    flags: list[str] = []
    if spec.short:
        flags.append(f"-{spec.short}")
    if spec.long:
        flags.append(f"--{spec.long}")

    if spec.is_counted:
        parser.add_argument(*flags, dest=spec.name, action="count", help=help_text)
        return

    parser.add_argument(
        *flags,
        dest=spec.name,
        action="append" if spec.multiple else "store",
        default=default,
        required=spec.required and default is None,
        metavar=spec.name.upper().replace("-", "_"),
        help=help_text,
    )


def _add_mode(
    subparsers: Any,
    mode_spec: ModeSpec,
    environ: Mapping[str, str],
    quiet: bool,
) -> None:
    kwargs: dict[str, Any] = {
        "description": mode_spec.description,
        "formatter_class": UnifiedHelpFormatter,
        "allow_abbrev": False,
        "quiet": quiet,
    }
    # Only modes given a ``help`` entry are listed by argparse.
    if not mode_spec.hidden:
        kwargs["help"] = mode_spec.description
    sub = subparsers.add_parser(mode_spec.name, **kwargs)

    positionals = sorted(
        (arg for arg in mode_spec.arguments if arg.is_positional),
        key=lambda arg: arg.index or 0,
    )
    optionals = sorted(
        (arg for arg in mode_spec.arguments if not arg.is_positional),
        key=lambda arg: arg.sort_key,
    )
    for arg in (*positionals, *optionals):
        _add_argument(sub, arg, environ)


def build_parser(
    schema: Schema,
    environ: Mapping[str, str] | None = None,
    *,
    quiet: bool = False,
) -> SchemaParser:
    """Render *schema* into a parser tree.

    Environment fallbacks are resolved against *environ* (default
    :data:`os.environ`) at construction time.
    """
    env = os.environ if environ is None else environ
    parser = SchemaParser(
        prog=schema.program,
        description=schema.about,
        epilog=f"{schema.program} {schema.version} by {schema.author}",
        formatter_class=UnifiedHelpFormatter,
        allow_abbrev=False,
        quiet=quiet,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {schema.version}",
    )
    subparsers = parser.add_subparsers(
        dest=MODE_DEST,
        metavar="MODE",
        title="modes",
        required=True,
    )
    for mode_spec in schema.modes:
        _add_mode(subparsers, mode_spec, env, quiet)
    return parser


def _collect(namespace: argparse.Namespace, mode_spec: ModeSpec) -> ParsedInvocation:
    raw = vars(namespace)
    values: dict[str, str | tuple[str, ...] | int] = {}
    for arg in mode_spec.arguments:
        value = raw.get(arg.name)
        if value is None:
            continue
        if isinstance(value, list):
            if not value:
                continue
            values[arg.name] = tuple(value)
        elif isinstance(value, int):
            if value:
                values[arg.name] = value
        else:
            values[arg.name] = value
    return ParsedInvocation(values)


# ---------------------------------------------------------------------------
# Attempts
# ---------------------------------------------------------------------------

def implicit_client_argv(argv: Sequence[str]) -> tuple[str, ...]:
    """Insert the implicit mode name right after the program name."""
    return (*argv[:1], IMPLICIT_MODE.value, *argv[1:])


def _value_flags(arguments: Sequence[ArgumentSpec]) -> tuple[set[str], set[str]]:
    shorts = {arg.short for arg in arguments if arg.takes_value and arg.short}
    longs = {arg.long for arg in arguments if arg.takes_value and arg.long}
    return shorts, longs


def _short_cluster_consumes_next(cluster: str, shorts: set[str]) -> bool:
    # ``-vm ls``: the value flag ends the cluster; ``-mls`` carries it inline.
    for position, letter in enumerate(cluster):
        if letter in shorts:
            return position == len(cluster) - 1
    return False


def first_positional(
    argv: Sequence[str],
    arguments: Sequence[ArgumentSpec] = (),
) -> str | None:
    """Return the first positional token after the program name.

    Tokens consumed as the value of a flag in *arguments* are skipped,
    so in ``oxy -m copy host`` the first positional is ``host``.
    """
    shorts, longs = _value_flags(arguments)
    tokens = iter(argv[1:])
    for token in tokens:
        if token == "--":
            return next(tokens, None)
        if not token.startswith("-") or token == "-":
            return token
        if token.startswith("--"):
            consumes = "=" not in token and token[2:] in longs
        else:
            consumes = _short_cluster_consumes_next(token[1:], shorts)
        if consumes:
            next(tokens, None)
    return None


def names_mode(token: str | None, schema: Schema) -> bool:
    return token is not None and any(spec.name == token for spec in schema.modes)


def attempt(
    argv: Sequence[str],
    schema: Schema,
    environ: Mapping[str, str] | None = None,
) -> Resolved | HelpRequested | Failed:
    """Parse *argv* once, quietly.  ``argv[0]`` is the program name."""
    parser = build_parser(schema, environ, quiet=True)
    try:
        namespace = parser.parse_args(list(argv[1:]))
    except _HelpSignal as signal:
        return HelpRequested(signal.text)
    except ArgumentParseError as exc:
        logger.debug("Parse of %r rejected: %s", list(argv), exc)
        return Failed(exc)

    mode = Mode(getattr(namespace, MODE_DEST))
    arguments = _collect(namespace, schema.mode_spec(mode))
    return Resolved(ResolvedInvocation(mode=mode, arguments=arguments))


def direct_attempt(
    argv: Sequence[str],
    schema: Schema,
    environ: Mapping[str, str] | None = None,
) -> Resolved | HelpRequested | ImplicitClientRetry | Failed:
    """Parse *argv* as given and decide whether a retry is warranted.

    A failure becomes :class:`ImplicitClientRetry` only when the first
    positional token is not already a mode name: an explicit mode that
    fails to parse stays failed rather than turning into a client
    connecting to a host called ``server`` or ``reexec``.  Values of
    client flags (``oxy -m copy host``) are not mistaken for mode names.
    """
    outcome = attempt(argv, schema, environ)
    if not isinstance(outcome, Failed) or not isinstance(outcome.error, ArgumentParseError):
        return outcome
    client_arguments = schema.mode_spec(IMPLICIT_MODE).arguments
    if names_mode(first_positional(argv, client_arguments), schema):
        logger.log(TRACE, "Explicit mode given; not trying implicit 'client'")
        return outcome
    return ImplicitClientRetry(argv=implicit_client_argv(argv), error=outcome.error)


def _terminal(
    schema: Schema,
    direct: OxyError,
    retry: OxyError | None = None,
) -> Failed:
    return Failed(
        TerminalParseFailure(
            str(direct),
            direct=direct if isinstance(direct, ArgumentParseError) else None,
            retry=retry if isinstance(retry, ArgumentParseError) else None,
            hint=f"Run '{schema.program} --help' for usage.",
        )
    )


def parse(
    argv: Sequence[str],
    schema: Schema,
    environ: Mapping[str, str] | None = None,
) -> ParseOutcome:
    """Resolve *argv*, falling back to an implicit ``client`` mode once.

    Never returns :class:`ImplicitClientRetry`; that plan is consumed
    here.  A help request made only on the retried vector counts as a
    failure.
    """
    logger.log(TRACE, "Parsing arguments")
    first = direct_attempt(argv, schema, environ)
    if isinstance(first, Failed):
        return _terminal(schema, first.error)
    if not isinstance(first, ImplicitClientRetry):
        return first

    logger.log(TRACE, "Trying implicit 'client'")
    retried = attempt(first.argv, schema, environ)
    if isinstance(retried, Resolved):
        return Resolved(replace(retried.invocation, implicit_client=True))
    if isinstance(retried, Failed):
        return _terminal(schema, first.error, retried.error)
    return _terminal(schema, first.error)
