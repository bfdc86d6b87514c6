"""
どこで: `common.env`
何を: `GEOU_*` 環境変数の軽量パースヘルパ。
なぜ: 設定値の読み出しを `common.settings` に集約し、`os.getenv` の散在を避けるため。
"""

from __future__ import annotations

import os


def env_bool(name: str, default: bool = False) -> bool:
    """真偽環境変数を取得（0/1, true/false, on/off を許容）。"""
    raw = os.getenv(name)
    if raw is None:
        return bool(default)
    try:
        return int(raw) != 0
    except ValueError:
        s = raw.strip().lower()
        if s in {"true", "t", "yes", "y", "on"}:
            return True
        if s in {"false", "f", "no", "n", "off"}:
            return False
        return bool(default)


def env_str(name: str, default: str, *, choices: set[str] | None = None) -> str:
    """文字列環境変数を取得。`choices` 指定時は範囲外を既定値へ戻す（大文字化して比較）。"""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    val = raw.strip()
    if choices is not None and val.upper() not in choices:
        return default
    return val
