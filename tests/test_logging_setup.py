"""Tests for the logging bootstrap (cli/logging_setup.py)."""

from __future__ import annotations

import logging
import sys

import pytest

from oxy.cli import logging_setup
from oxy.core.models import ParsedInvocation, ResolvedInvocation
from oxy.core.modes import Mode
from oxy.utils import TRACE


def _with_verbosity(count: int) -> ResolvedInvocation:
    values = {"verbose": count} if count else {}
    return ResolvedInvocation(mode=Mode.SERVER, arguments=ParsedInvocation(values))


# ---------------------------------------------------------------------------
# Level mapping
# ---------------------------------------------------------------------------

class TestLogLevelFor:
    @pytest.mark.parametrize(
        ("count", "level"),
        [(0, "info"), (1, "debug"), (2, "trace"), (3, "trace"), (7, "trace")],
    )
    def test_mapping(self, count: int, level: str) -> None:
        assert logging_setup.log_level_for(count) == level


class TestParseDirectives:
    def test_scoped(self) -> None:
        assert logging_setup.parse_directives("oxy=debug") == ({"oxy": logging.DEBUG}, [])

    def test_bare_level_is_root(self) -> None:
        assert logging_setup.parse_directives("warn") == ({"": logging.WARNING}, [])

    def test_multiple_and_whitespace(self) -> None:
        parsed, rejected = logging_setup.parse_directives(
            " oxy=info , oxy.core.matcher=TRACE ,",
        )
        assert parsed == {"oxy": logging.INFO, "oxy.core.matcher": TRACE}
        assert rejected == []

    def test_unknown_level_is_set_aside(self) -> None:
        parsed, rejected = logging_setup.parse_directives("oxy=loud,oxy.cli=debug,shout")
        assert parsed == {"oxy.cli": logging.DEBUG}
        assert rejected == ["oxy=loud", "shout"]


# ---------------------------------------------------------------------------
# initialize_logging()
# ---------------------------------------------------------------------------

class TestInitializeLogging:
    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, "oxy=info"), (1, "oxy=debug"), (2, "oxy=trace"), (3, "oxy=trace")],
    )
    def test_sets_directive_from_verbosity(self, count: int, expected: str) -> None:
        environ: dict[str, str] = {}
        assert logging_setup.initialize_logging(_with_verbosity(count), environ)
        assert environ["OXY_LOG"] == expected

    def test_applies_levels(self) -> None:
        logging_setup.initialize_logging(_with_verbosity(1), {})
        assert logging.getLogger("oxy").level == logging.DEBUG
        assert logging.getLogger("oxy.core.matcher").isEnabledFor(logging.DEBUG)
        assert not logging.getLogger("oxy.core.matcher").isEnabledFor(TRACE)

    def test_existing_override_wins(self) -> None:
        environ = {"OXY_LOG": "oxy=error"}
        logging_setup.initialize_logging(_with_verbosity(3), environ)
        assert environ["OXY_LOG"] == "oxy=error"
        assert logging.getLogger("oxy").level == logging.ERROR

    def test_idempotent(self) -> None:
        first_env: dict[str, str] = {}
        assert logging_setup.initialize_logging(_with_verbosity(0), first_env) is True
        handlers_before = list(logging.getLogger().handlers)

        second_env: dict[str, str] = {}
        assert logging_setup.initialize_logging(_with_verbosity(2), second_env) is False
        assert second_env == {}
        assert logging.getLogger().handlers == handlers_before
        assert logging.getLogger("oxy").level == logging.INFO

    def test_malformed_override_is_skipped(
        self, capsys: pytest.CaptureFixture[str],
    ) -> None:
        environ = {"OXY_LOG": "oxy=verbose,oxy.core=debug"}
        assert logging_setup.initialize_logging(_with_verbosity(0), environ) is True
        assert logging_setup.is_initialized()
        assert logging.getLogger("oxy.core").level == logging.DEBUG
        assert logging.getLogger("oxy").level == logging.NOTSET
        assert "oxy=verbose" in capsys.readouterr().err

        assert logging_setup.initialize_logging(_with_verbosity(0), environ) is False
        assert capsys.readouterr().err == ""

    def test_reads_process_environment_by_default(
        self, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("OXY_LOG", "oxy=warn")
        logging_setup.initialize_logging(_with_verbosity(0))
        assert logging.getLogger("oxy").level == logging.WARNING

    def test_uses_rich_handler(self) -> None:
        from rich.logging import RichHandler

        logging_setup.initialize_logging(_with_verbosity(0), {})
        assert any(isinstance(h, RichHandler) for h in logging.getLogger().handlers)

    def test_plain_handler_without_rich(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "rich", None)
        monkeypatch.setitem(sys.modules, "rich.console", None)
        monkeypatch.setitem(sys.modules, "rich.logging", None)

        logging_setup.initialize_logging(_with_verbosity(0), {})
        added = [
            h for h in logging.getLogger().handlers
            if type(h) is logging.StreamHandler and h.stream is sys.stderr
        ]
        assert added

    def test_reset_removes_handler(self) -> None:
        logging_setup.initialize_logging(_with_verbosity(0), {})
        logging_setup.reset_logging()
        assert not logging_setup.is_initialized()
        assert logging.getLogger("oxy").level == logging.NOTSET
