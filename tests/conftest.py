"""Shared pytest fixtures and configuration for the oxy test suite.

Guidelines
----------
* Tests never read the real ``sys.argv``; vectors are passed explicitly.
* Process-wide state (invocation cache, logging) is reset around every
  test.
* ``OXY_IDENTITY`` and ``OXY_LOG`` from the developer's shell must not
  leak into results.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from oxy.cli.invocation import reset_default_cache
from oxy.cli.logging_setup import reset_logging
from oxy.core.models import Schema
from oxy.core.schema import build


@pytest.fixture(autouse=True)
def _isolated_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("OXY_IDENTITY", raising=False)
    monkeypatch.delenv("OXY_LOG", raising=False)
    reset_default_cache()
    reset_logging()
    yield
    reset_default_cache()
    reset_logging()


@pytest.fixture
def schema() -> Schema:
    return build()

