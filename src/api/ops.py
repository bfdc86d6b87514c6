"""
どこで: `api.ops`（演算の名前空間）。
何を: 登録済み演算を属性アクセスで引ける `U` シングルトン。
なぜ: `from api import U` だけで全演算へ到達でき、利用者が追加登録した演算も同じ経路で使えるようにするため。

使用例:
    from api import U
    mask = U.intersects(geoms, other)
"""

from __future__ import annotations

import ufuncs  # noqa: F401  # 演算の登録
from ufuncs.base import GeoUfunc
from ufuncs.registry import get_operation, list_operations


class _OpsAPI:
    """登録済み演算への属性アクセス。未登録名は AttributeError。"""

    def __getattr__(self, name: str) -> GeoUfunc:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return get_operation(name)
        except KeyError as exc:
            raise AttributeError(f"unknown operation: {name}") from exc

    def __dir__(self) -> list[str]:
        return list_operations()

    def __repr__(self) -> str:
        return f"<U: {len(list_operations())} operations>"


U = _OpsAPI()

__all__ = ["U"]
