"""Mode and perspective enumerations.

Exactly one :class:`Mode` is active per process.  The handshake role a
process plays is a pure function of that mode.
"""

from __future__ import annotations

import enum

from oxy.exceptions import ModeMismatchError


class Mode(enum.Enum):
    """Top-level operating role.  Values are the command-line names."""

    CLIENT = "client"
    SERVER = "server"
    REEXEC = "reexec"
    SERVE_ONE = "serve-one"
    REVERSE_SERVER = "reverse-server"
    REVERSE_CLIENT = "reverse-client"
    COPY = "copy"
    GUIDE = "guide"
    KEYGEN = "keygen"


class Perspective(enum.Enum):
    """Role in the cryptographic handshake owned by the transport core."""

    INITIATOR = "initiator"
    RESPONDER = "responder"


def perspective_for(mode: Mode) -> Perspective:
    """Return the handshake role for *mode*.

    Processes that accept (or were handed) a connection respond; all
    others initiate.
    """
    match mode:
        case Mode.REEXEC | Mode.SERVER | Mode.SERVE_ONE | Mode.REVERSE_SERVER:
            return Perspective.RESPONDER
        case (
            Mode.CLIENT
            | Mode.REVERSE_CLIENT
            | Mode.COPY
            | Mode.GUIDE
            | Mode.KEYGEN
        ):
            return Perspective.INITIATOR
        case _:
            raise ModeMismatchError(f"No perspective defined for mode {mode!r}")
