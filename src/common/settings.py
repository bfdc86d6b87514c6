"""
どこで: `common.settings`
何を: エンジン束縛とディスパッチ層の設定を型付きで一元管理し、起動時に環境変数から読み込む。
なぜ: 通知の扱い/割当トレース/JIT 利用の切替をテストから差し替えやすくするため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_str

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass
class _Settings:
    # Error/Notice bridge
    NOTICES: bool = True

    # Engine allocation tracing
    DEBUG_ALLOC: bool = False

    # Coordinate sequence builder
    USE_NUMBA: bool = True

    # Misc
    LOG_LEVEL: str = "INFO"


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。"""
    _settings.NOTICES = env_bool("GEOU_NOTICES", True)
    _settings.DEBUG_ALLOC = env_bool("GEOU_DEBUG_ALLOC", False)
    _settings.USE_NUMBA = env_bool("GEOU_USE_NUMBA", True)
    _settings.LOG_LEVEL = env_str("GEOU_LOG_LEVEL", "INFO", choices=_LOG_LEVELS).upper()


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
