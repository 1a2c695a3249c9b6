"""Domain models for oxy.

Grammar descriptors (:class:`ArgumentSpec`, :class:`ModeSpec`,
:class:`Schema`) and parse results (:class:`ParsedInvocation`,
:class:`ResolvedInvocation`) are **frozen** dataclasses.  They carry no
I/O and stay immutable from construction onwards.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from oxy.core.modes import Mode, Perspective, perspective_for
from oxy.exceptions import ModeMismatchError

ArgumentValue = str | tuple[str, ...] | int
"""A matched value: single string, ordered repeated values, or a count."""

DEFAULT_DISPLAY_ORDER: int = 999
"""Display order of arguments that do not declare one."""

FALLBACK_BIND_ADDRESS: str = "0.0.0.0"
"""Bind address used when the active mode declares no bind-address field."""


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ArgumentSpec:
    """A single argument accepted by one or more modes."""

    name: str
    """Key under which the matched value is stored."""

    short: str | None = None
    """Single-letter flag without the dash (``"m"`` for ``-m``)."""

    long: str | None = None
    """Long flag without the dashes (``"metacommand"``)."""

    takes_value: bool = False
    """Whether the flag consumes the following token."""

    multiple: bool = False
    """Collect repeated occurrences in order (or count them, for flags)."""

    index: int | None = None
    """1-based positional index, or ``None`` for flags."""

    default: str | None = None

    env: str | None = None
    """Environment variable consulted when the argument is not supplied."""

    required: bool = False

    display_order: int | None = None

    help: str = ""

    @property
    def is_positional(self) -> bool:
        return self.index is not None

    @property
    def is_counted(self) -> bool:
        """True for flags whose value is an occurrence count."""
        return not self.is_positional and not self.takes_value

    @property
    def sort_key(self) -> int:
        if self.display_order is None:
            return DEFAULT_DISPLAY_ORDER
        return self.display_order


@dataclass(frozen=True, slots=True)
class ModeSpec:
    """Grammar of one subcommand."""

    mode: Mode
    description: str
    arguments: tuple[ArgumentSpec, ...] = ()
    hidden: bool = False
    """Excluded from the help listing but still accepted."""

    @property
    def name(self) -> str:
        return self.mode.value

    @property
    def leading_positional(self) -> ArgumentSpec | None:
        """The required first positional, if the mode has one."""
        for arg in self.arguments:
            if arg.index == 1 and arg.required:
                return arg
        return None

    def argument(self, name: str) -> ArgumentSpec | None:
        for arg in self.arguments:
            if arg.name == name:
                return arg
        return None


@dataclass(frozen=True, slots=True)
class Schema:
    """The complete command grammar.  Built once, never mutated."""

    program: str
    version: str
    author: str
    about: str
    modes: tuple[ModeSpec, ...]

    def mode_spec(self, mode: Mode) -> ModeSpec:
        for spec in self.modes:
            if spec.mode is mode:
                return spec
        raise ModeMismatchError(f"Schema defines no mode {mode.value!r}")


# ---------------------------------------------------------------------------
# Parse results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ParsedInvocation:
    """Read-only mapping of argument name to matched value.

    Absent arguments are simply missing from the mapping.  Defaults and
    environment fallbacks are already applied.
    """

    values: Mapping[str, ArgumentValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __getitem__(self, name: str) -> ArgumentValue:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParsedInvocation):
            return NotImplemented
        return dict(self.values) == dict(other.values)

    def is_present(self, name: str) -> bool:
        return name in self.values

    def value_of(self, name: str) -> str | None:
        """Return the single value of *name*, or the first of several."""
        value = self.values.get(name)
        if isinstance(value, tuple):
            return value[0] if value else None
        if isinstance(value, str):
            return value
        return None

    def values_of(self, name: str) -> tuple[str, ...]:
        """Return every value of *name* in command-line order."""
        value = self.values.get(name)
        if isinstance(value, tuple):
            return value
        if isinstance(value, str):
            return (value,)
        return ()

    def occurrences_of(self, name: str) -> int:
        value = self.values.get(name)
        if value is None:
            return 0
        if isinstance(value, int):
            return value
        if isinstance(value, tuple):
            return len(value)
        return 1


@dataclass(frozen=True, slots=True)
class ResolvedInvocation:
    """The active mode together with its matched arguments.

    Every accessor here is a pure projection; nothing is recomputed
    after construction.
    """

    mode: Mode
    arguments: ParsedInvocation
    implicit_client: bool = False
    """True when the mode was inferred by inserting ``client``."""

    def destination(self) -> str:
        """Return the required ``destination`` positional.

        Raises
        ------
        ModeMismatchError
            When the active mode declares no destination.  This is an
            internal inconsistency, not a user error.
        """
        value = self.arguments.value_of("destination")
        if value is None:
            raise ModeMismatchError(
                f"Mode {self.mode.value!r} does not define a destination"
            )
        return value

    def bind_address(self) -> str:
        value = self.arguments.value_of("bind-address")
        if value is None:
            return FALLBACK_BIND_ADDRESS
        return value

    def batched_metacommands(self) -> list[str]:
        return list(self.arguments.values_of("metacommand"))

    def perspective(self) -> Perspective:
        return perspective_for(self.mode)

    def verbosity(self) -> int:
        return self.arguments.occurrences_of("verbose")
