"""
Shared pytest fixtures:
- Isolated CSER_* environment per test (config cache reset before and after)
- `cser_env(**vars)` helper to set config env vars and reload
- Deterministic hypothesis profile selection lives in tests/property
"""
from __future__ import annotations

import logging
import os
import typing as t

import pytest

from cser.config import CserConfig, reload_config


@pytest.fixture(autouse=True)
def _isolated_cser_env(monkeypatch: pytest.MonkeyPatch) -> t.Iterator[None]:
    for k in list(os.environ):
        if k.startswith("CSER_"):
            monkeypatch.delenv(k, raising=False)
    reload_config()
    yield
    monkeypatch.undo()
    reload_config()


@pytest.fixture
def cser_env(monkeypatch: pytest.MonkeyPatch) -> t.Callable[..., CserConfig]:
    """Set CSER_* variables for the current test and return the reloaded config."""

    def _set(**env: str) -> CserConfig:
        for k, v in env.items():
            monkeypatch.setenv(k, v)
        return reload_config()

    return _set


@pytest.fixture
def cser_logger() -> t.Iterator[logging.Logger]:
    """The package root logger, with handlers and level restored afterwards."""
    lg = logging.getLogger("cser")
    handlers, level = list(lg.handlers), lg.level
    yield lg
    lg.handlers[:] = handlers
    lg.setLevel(level)
