"""Tests for the process-wide invocation cache (cli/invocation.py).

Coverage:
* Resolution happens once and is stable afterwards.
* Concurrent first access parses exactly once.
* Help exits 0 with text on stdout.
* Terminal failures exit non-zero with usage on stderr.
"""

from __future__ import annotations

import threading
import time

import pytest

from oxy.cli import exit_codes
from oxy.cli import invocation as invocation_module
from oxy.cli.invocation import InvocationCache, fail_loudly, resolve_argv
from oxy.core.models import Schema
from oxy.core.modes import Mode


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------

class TestInvocationCache:
    def test_resolves_lazily(self) -> None:
        calls: list[int] = []

        def source() -> list[str]:
            calls.append(1)
            return ["oxy", "server"]

        cache = InvocationCache(argv_source=source, environ={})
        assert not cache.resolved
        assert calls == []
        assert cache.get().mode is Mode.SERVER
        assert cache.resolved

    def test_parses_once(self) -> None:
        calls: list[int] = []

        def source() -> list[str]:
            calls.append(1)
            return ["oxy", "client", "somehost"]

        cache = InvocationCache(argv_source=source, environ={})
        first = cache.get()
        second = cache.get()
        assert first is second
        assert len(calls) == 1

    def test_stable_after_environment_changes(self) -> None:
        environ = {"OXY_IDENTITY": "/keys/first"}
        cache = InvocationCache.for_argv(["oxy", "client", "somehost"], environ=environ)
        first = cache.get()
        environ["OXY_IDENTITY"] = "/keys/second"
        assert cache.get().arguments.value_of("identity") == "/keys/first"
        assert cache.get() is first

    def test_concurrent_first_access_parses_once(self) -> None:
        calls: list[int] = []
        gate = threading.Event()

        def slow_source() -> list[str]:
            calls.append(1)
            time.sleep(0.05)
            return ["oxy", "keygen"]

        cache = InvocationCache(argv_source=slow_source, environ={})
        results: list[object] = []
        results_lock = threading.Lock()

        def worker() -> None:
            gate.wait()
            value = cache.get()
            with results_lock:
                results.append(value)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        gate.set()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert len(results) == 8
        assert all(result is results[0] for result in results)

    def test_reads_sys_argv_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["oxy", "guide"])
        assert InvocationCache(environ={}).get().mode is Mode.GUIDE

    def test_default_cache_can_be_replaced(self) -> None:
        replacement = InvocationCache.for_argv(["oxy", "copy", "a", "b"], environ={})
        previous = invocation_module.install_default_cache(replacement)
        assert previous is not replacement
        assert invocation_module.resolve().mode is Mode.COPY


# ---------------------------------------------------------------------------
# User-visible exits
# ---------------------------------------------------------------------------

class TestResolveArgv:
    def test_help_exits_zero_on_stdout(
        self, schema: Schema, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            resolve_argv(["oxy", "--help"], schema, {})
        assert exc_info.value.code == exit_codes.SUCCESS
        captured = capsys.readouterr()
        assert "usage: oxy" in captured.out
        assert captured.err == ""

    def test_missing_destination_exits_with_usage(
        self, schema: Schema, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            resolve_argv(["oxy", "client"], schema, {})
        assert exc_info.value.code == exit_codes.USAGE_ERROR
        captured = capsys.readouterr()
        assert "destination" in captured.err
        assert captured.out == ""

    def test_reexec_without_fd_exits(
        self, schema: Schema, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            resolve_argv(["oxy", "reexec"], schema, {})
        assert exc_info.value.code != exit_codes.SUCCESS
        assert "--fd" in capsys.readouterr().err

    def test_error_reports_original_vector(
        self, schema: Schema, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit):
            resolve_argv(["oxy", "nohost", "--bogus"], schema, {})
        err = capsys.readouterr().err
        assert "invalid choice" in err
        assert "oxy client" not in err

    def test_version_prints_and_exits_zero(
        self, schema: Schema, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            resolve_argv(["oxy", "--version"], schema, {})
        assert exc_info.value.code == exit_codes.SUCCESS
        assert schema.version in capsys.readouterr().out

    def test_resolved_is_returned(self, schema: Schema) -> None:
        invocation = resolve_argv(["oxy", "somehost"], schema, {})
        assert invocation.mode is Mode.CLIENT
        assert invocation.implicit_client


class TestFailLoudly:
    def test_empty_invocation_prints_full_help(
        self, schema: Schema, capsys: pytest.CaptureFixture[str],
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            fail_loudly(["oxy"], schema, {})
        assert exc_info.value.code == exit_codes.USAGE_ERROR
        captured = capsys.readouterr()
        assert "Connect to an Oxy server." in captured.err
        assert captured.out == ""
