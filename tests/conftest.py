"""Shared fixtures for stdiocapture tests."""

from __future__ import annotations

import pytest

from stdiocapture.options import ECHO_ENV_VAR, NO_COLOR_ENV_VAR


@pytest.fixture(autouse=True)
def _clean_capture_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep STDIOCAPTURE_* settings from the outer environment out of tests."""
    monkeypatch.delenv(ECHO_ENV_VAR, raising=False)
    monkeypatch.delenv(NO_COLOR_ENV_VAR, raising=False)


@pytest.fixture
def color_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """An environment where rich would emit color if allowed to."""
    monkeypatch.setenv("FORCE_COLOR", "1")
    monkeypatch.setenv("TERM", "xterm-256color")
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CLICOLOR", raising=False)
    monkeypatch.delenv("TTY_COMPATIBLE", raising=False)
