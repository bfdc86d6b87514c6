from __future__ import annotations

import logging

import pytest

from common import settings
from common.env import env_bool, env_str
from common.logging import setup_default_logging

# What this tests
# - GEOU_* 環境変数のパース（不正値は既定値へ戻る）。
# - 設定の再読込と既定値。


def test_env_bool(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEOU_X", raising=False)
    assert env_bool("GEOU_X", True) is True
    for raw, expected in [("0", False), ("2", True), ("on", True), ("No", False), ("??", True)]:
        monkeypatch.setenv("GEOU_X", raw)
        assert env_bool("GEOU_X", True) is expected


def test_env_str(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEOU_S", raising=False)
    assert env_str("GEOU_S", "INFO") == "INFO"
    monkeypatch.setenv("GEOU_S", "  ")
    assert env_str("GEOU_S", "INFO") == "INFO"
    monkeypatch.setenv("GEOU_S", "debug")
    assert env_str("GEOU_S", "INFO", choices={"DEBUG", "INFO"}) == "debug"
    monkeypatch.setenv("GEOU_S", "loud")
    assert env_str("GEOU_S", "INFO", choices={"DEBUG", "INFO"}) == "INFO"


def test_settings_reload(monkeypatch: pytest.MonkeyPatch, reload_settings) -> None:
    for var in ("GEOU_NOTICES", "GEOU_DEBUG_ALLOC", "GEOU_USE_NUMBA", "GEOU_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    reload_settings()
    s = settings.get()
    assert (s.NOTICES, s.DEBUG_ALLOC, s.USE_NUMBA, s.LOG_LEVEL) == (True, False, True, "INFO")

    monkeypatch.setenv("GEOU_NOTICES", "0")
    monkeypatch.setenv("GEOU_LOG_LEVEL", "debug")
    reload_settings()
    assert settings.get().NOTICES is False
    assert settings.get().LOG_LEVEL == "DEBUG"


def test_setup_default_logging_is_noop_with_handlers() -> None:
    root = logging.getLogger()
    handler = logging.NullHandler()
    root.addHandler(handler)
    try:
        level = root.level
        setup_default_logging("DEBUG")
        assert root.level == level
    finally:
        root.removeHandler(handler)
