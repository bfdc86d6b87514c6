"""
どこで: `ufuncs` のレジストリ層。
何を: 演算名 → `GeoUfunc` の対応表。`define()` で生成と登録を同時に行い、取得/一覧/検査を提供（キーは正規化）。
なぜ: 演算族ごとのモジュールに定義を分散させつつ、公開 API からは名前で一様に解決するため。

公開 API 概要:
- `define(name, template, func, doc)`: 演算を生成して登録
- `get_operation(name)` / `list_operations()` / `is_operation_registered(name)`
- `get_registry()`: 読み取り専用ビュー（テスト/診断用）
"""

from __future__ import annotations

import logging
from typing import Mapping

from common.base_registry import BaseRegistry

from .base import GeoUfunc
from .templates import EngineFunc, LoopTemplate

logger = logging.getLogger(__name__)

_operation_registry = BaseRegistry()


def define(name: str, template: LoopTemplate, func: EngineFunc, doc: str = "") -> GeoUfunc:
    """演算を生成して登録し、返す。

    例外:
    - ValueError: 同名で別の演算が登録済みの場合、またはシグネチャが不正な場合。
    """
    op = GeoUfunc(name, template, func, doc)
    _operation_registry.add(name, op)
    logger.debug("defined %s (%s)", name, op.types[0])
    return op


def get_operation(name: str) -> GeoUfunc:
    """登録された演算を取得。

    例外:
    - KeyError: 未登録名の場合。
    """
    return _operation_registry.get(name)


def list_operations() -> list[str]:
    """登録済み演算名をソートして返す。"""
    return sorted(_operation_registry.list_all())


def is_operation_registered(name: str) -> bool:
    return _operation_registry.is_registered(name)


def get_registry() -> Mapping[str, GeoUfunc]:
    """読み取り専用ビューとしてレジストリ辞書を返す。"""
    return _operation_registry.registry


__all__ = [
    "define",
    "get_operation",
    "list_operations",
    "is_operation_registered",
    "get_registry",
]
