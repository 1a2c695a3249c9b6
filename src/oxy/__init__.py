"""oxy: command-line grammar and mode resolution.

Parses the process argument vector into a single resolved mode plus its
typed arguments, consumed by the transport, forwarding and multiplexer
subsystems.
"""

from oxy.version import __version__

__all__: list[str] = ["__version__"]
