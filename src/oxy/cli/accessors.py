"""Typed getters over the process-wide invocation.

Each getter triggers resolution on first use and is a pure projection
of the cached :class:`~oxy.core.models.ResolvedInvocation` afterwards.
These are what the transport, forwarding and multiplexer subsystems
import.
"""

from __future__ import annotations

from oxy.cli.invocation import resolve
from oxy.core.models import ParsedInvocation
from oxy.core.modes import Mode, Perspective


def mode() -> Mode:
    return resolve().mode


def active_arguments() -> ParsedInvocation:
    """Matched values of the active mode only."""
    return resolve().arguments


def destination() -> str:
    """Host given to ``client`` or ``reverse-server``.

    Raises :class:`~oxy.exceptions.ModeMismatchError` for any other
    mode; callers must only ask for it in modes that define it.
    """
    return resolve().destination()


def bind_address() -> str:
    """Listen address for ``serve-one``/``reverse-client``.

    ``::0`` when the positional is omitted, ``0.0.0.0`` when the active
    mode has no bind address at all.
    """
    return resolve().bind_address()


def batched_metacommands() -> list[str]:
    return resolve().batched_metacommands()


def perspective() -> Perspective:
    return resolve().perspective()


def verbosity() -> int:
    """Number of ``-v/--verbose`` occurrences."""
    return resolve().verbosity()
