"""The oxy command grammar.

:func:`build` is pure and deterministic: it returns the same immutable
:class:`~oxy.core.models.Schema` on every call and touches neither the
environment nor the filesystem.  Environment fallbacks are recorded by
name only; the matcher reads them when it builds a parser.

The client-family and server-family argument tuples are shared by
reference between modes so the families cannot drift apart.
"""

from __future__ import annotations

from oxy.core.models import ArgumentSpec, ModeSpec, Schema
from oxy.core.modes import Mode
from oxy.version import __version__

PROGRAM: str = "oxy"
AUTHOR: str = "oxy contributors"
ABOUT: str = "Encrypted remote shell, port forwarding, and file copy."

DEFAULT_PORT: str = "2600"
DEFAULT_BIND_ADDRESS: str = "::0"
DEFAULT_SERVER_CONFIG: str = "~/.config/oxy/server.conf"
DEFAULT_CLIENT_CONFIG: str = "~/.config/oxy/client.conf"
DEFAULT_MULTIPLEXER: str = "/usr/bin/tmux new-session -A -s oxy"

IDENTITY_ENV: str = "OXY_IDENTITY"


# ---------------------------------------------------------------------------
# Individual arguments
# ---------------------------------------------------------------------------

METACOMMAND = ArgumentSpec(
    name="metacommand",
    short="m",
    long="metacommand",
    takes_value=True,
    multiple=True,
    help=(
        "A command to run after the connection is established. "
        "The same commands from the F10 prompt."
    ),
)
IDENTITY = ArgumentSpec(
    name="identity",
    short="i",
    long="identity",
    takes_value=True,
    env=IDENTITY_ENV,
    help=(
        "Use [identity] as authentication information for connecting "
        "to the remote server."
    ),
)
COMMAND = ArgumentSpec(name="command", index=2, help="Command to run remotely.")
LOCAL_FORWARD = ArgumentSpec(
    name="local-forward",
    short="L",
    takes_value=True,
    multiple=True,
    display_order=102,
    help="Create a local portforward",
)
REMOTE_FORWARD = ArgumentSpec(
    name="remote-forward",
    short="R",
    takes_value=True,
    multiple=True,
    display_order=103,
    help="Create a remote portforward",
)
SOCKS = ArgumentSpec(
    name="socks",
    short="D",
    long="socks",
    takes_value=True,
    multiple=True,
    display_order=104,
    help="Bind a local port as a SOCKS5 proxy",
)
PORT = ArgumentSpec(
    name="port",
    short="p",
    long="port",
    takes_value=True,
    default=DEFAULT_PORT,
    help="The port used for TCP",
)
USER = ArgumentSpec(
    name="user",
    long="user",
    takes_value=True,
    help=(
        "The remote username to log in with. "
        "Only applicable for servers using --su-mode"
    ),
)
VIA = ArgumentSpec(
    name="via",
    long="via",
    takes_value=True,
    multiple=True,
    help=(
        "Connect to a different oxy server first, then proxy traffic "
        "through the intermediary server."
    ),
)
VERBOSE = ArgumentSpec(
    name="verbose",
    short="v",
    long="verbose",
    multiple=True,
    help="Increase debugging output",
)
X_FORWARDING = ArgumentSpec(
    name="x-forwarding",
    short="X",
    long="x-forwarding",
    help="Enable X forwarding",
)
TRUSTED_X_FORWARDING = ArgumentSpec(
    name="trusted-x-forwarding",
    short="Y",
    long="trusted-x-forwarding",
    help="Enable trusted X forwarding",
)
SERVER_CONFIG = ArgumentSpec(
    name="server-config",
    long="server-config",
    takes_value=True,
    default=DEFAULT_SERVER_CONFIG,
    help="Path to server.conf",
)
CLIENT_CONFIG = ArgumentSpec(
    name="client-config",
    long="client-config",
    takes_value=True,
    default=DEFAULT_CLIENT_CONFIG,
    help="Path to client.conf",
)
FORCED_COMMAND = ArgumentSpec(
    name="forced-command",
    long="forced-command",
    takes_value=True,
    help="Restrict command execution to the specified command",
)
UNSAFE_REEXEC = ArgumentSpec(
    name="unsafe-reexec",
    long="unsafe-reexec",
    help="Bypass safety restrictions intended to avoid privilege elevation",
)
COMPRESSION = ArgumentSpec(
    name="compression",
    short="C",
    long="compress",
    help="Enable ZLIB format compression of all transmitted data",
)
NO_TMUX = ArgumentSpec(
    name="no-tmux",
    long="no-tmux",
    help="Do not use a terminal multiplexer as the default pty command",
)
MULTIPLEXER = ArgumentSpec(
    name="multiplexer",
    long="multiplexer",
    takes_value=True,
    default=DEFAULT_MULTIPLEXER,
    help=(
        "The command to attach to a terminal multiplexer. Ignored if the "
        "first component is not an existent file, or if --no-tmux is supplied."
    ),
)
FD = ArgumentSpec(
    name="fd",
    long="fd",
    takes_value=True,
    required=True,
    help="Inherited file descriptor of the accepted connection",
)
DESTINATION = ArgumentSpec(
    name="destination",
    index=1,
    required=True,
    help="Host to connect to",
)
BIND_ADDRESS = ArgumentSpec(
    name="bind-address",
    index=1,
    default=DEFAULT_BIND_ADDRESS,
    help="Address to listen on",
)
LOCATION = ArgumentSpec(
    name="location",
    index=1,
    multiple=True,
    help="Source locations followed by the destination, as [host:]path",
)


# ---------------------------------------------------------------------------
# Shared families
# ---------------------------------------------------------------------------

CLIENT_ARGS: tuple[ArgumentSpec, ...] = (
    METACOMMAND,
    IDENTITY,
    LOCAL_FORWARD,
    REMOTE_FORWARD,
    SOCKS,
    PORT,
    X_FORWARDING,
    TRUSTED_X_FORWARDING,
    SERVER_CONFIG,
    CLIENT_CONFIG,
    USER,
    VIA,
    COMPRESSION,
    VERBOSE,
    COMMAND,
)

SERVER_ARGS: tuple[ArgumentSpec, ...] = (
    SERVER_CONFIG,
    CLIENT_CONFIG,
    FORCED_COMMAND,
    IDENTITY,
    PORT,
    VERBOSE,
    NO_TMUX,
    MULTIPLEXER,
)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def build() -> Schema:
    """Return the complete oxy grammar."""
    modes = (
        ModeSpec(
            mode=Mode.CLIENT,
            description="Connect to an Oxy server.",
            arguments=(*CLIENT_ARGS, DESTINATION),
        ),
        ModeSpec(
            mode=Mode.REEXEC,
            description=(
                "Service a single oxy connection. "
                "Not intended to be run directly, run by oxy server"
            ),
            arguments=(FD, *SERVER_ARGS),
            hidden=True,
        ),
        ModeSpec(
            mode=Mode.SERVER,
            description=(
                "Listen for port knocks, accept TCP connections, "
                "then reexec for each one."
            ),
            arguments=(*SERVER_ARGS, UNSAFE_REEXEC),
        ),
        ModeSpec(
            mode=Mode.SERVE_ONE,
            description=(
                "Accept a single TCP connection, then service it "
                "in the same process."
            ),
            arguments=(*SERVER_ARGS, BIND_ADDRESS),
        ),
        ModeSpec(
            mode=Mode.REVERSE_SERVER,
            description="Connect out to a listening client. Then, be a server.",
            arguments=(*SERVER_ARGS, DESTINATION),
        ),
        ModeSpec(
            mode=Mode.REVERSE_CLIENT,
            description=(
                "Bind a port and wait for a server to connect. "
                "Then, be a client."
            ),
            arguments=(*CLIENT_ARGS, BIND_ADDRESS),
        ),
        ModeSpec(
            mode=Mode.COPY,
            description="Copy files from any number of sources to one destination.",
            arguments=(
                CLIENT_CONFIG,
                SERVER_CONFIG,
                COMPRESSION,
                LOCATION,
                IDENTITY,
                VERBOSE,
            ),
        ),
        ModeSpec(
            mode=Mode.GUIDE,
            description="Print information to help a new user get the most out of Oxy.",
        ),
        ModeSpec(mode=Mode.KEYGEN, description="Generate keys"),
    )
    return Schema(
        program=PROGRAM,
        version=__version__,
        author=AUTHOR,
        about=ABOUT,
        modes=modes,
    )
