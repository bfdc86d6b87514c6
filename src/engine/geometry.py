"""
ジオメトリハンドル（エンジン所有ポインタの単一所有ラッパ）

本モジュールは、配列の 1 要素として格納されるジオメトリ値 `GeometryHandle` を提供する。

不変条件:
- `ptr` はエンジン所有ジオメトリへの整数ポインタ。`release()` 後は `None`（空ハンドル）。
- `geom_type_id`（0–255）と `has_z`（bool）は生成時に 1 度だけエンジンへ問い合わせて固定する。
  どちらかの問い合わせが失敗/範囲外なら生成自体が失敗し、ポインタは解放される。
- ハンドルはポインタを排他的に所有する。破棄は高々 1 回（`release()` は冪等）。

生成経路:
- `GeometryHandle(ptr)`: 呼び出し側の生ポインタを複製してから包む（出所不明のポインタを
  直接所有しない）。
- `GeometryHandle.from_shapely(geom)`: Shapely ジオメトリをエンジンへ取り込む。
- `GeometryHandle._from_ptr(ctx, ptr)`: ディスパッチ層が新規確保したポインタの所有権を引き取る。

使用例:
    from engine.geometry import GeometryHandle
    import shapely

    h = GeometryHandle.from_shapely(shapely.Point(1, 2))
    h.geom_type_id   # 0
    h2 = GeometryHandle(h.ptr)   # 別所有の複製
    h.release()      # h2 には影響しない
"""

from __future__ import annotations

import logging

import numpy as np
from shapely.geometry.base import BaseGeometry

from . import backend as _engine
from .context import EngineContext, get_context
from .errors import EmptyGeometryError, InitializationFailed, InvalidArgument

logger = logging.getLogger(__name__)

_MAX_TYPE_ID = 255


class GeometryHandle:
    """エンジン所有ジオメトリへの単一所有ハンドル。"""

    __slots__ = ("_ptr", "_ctx", "_geom_type_id", "_has_z", "__weakref__")

    _ptr: int | None
    _ctx: EngineContext
    _geom_type_id: int
    _has_z: bool

    def __init__(self, ptr: int | np.integer, *, context: EngineContext | None = None) -> None:
        # clone_from_raw: 生ポインタは複製してから所有する（np.integer も可）
        self._ptr = None
        ctx = context if context is not None else get_context()
        if not isinstance(ptr, (int, np.integer)) or isinstance(ptr, bool):
            raise InvalidArgument("Please provide a pointer to an engine geometry")
        cloned = _engine.clone(ctx.handle, ptr)
        if cloned is None:
            cause = ctx.failure("clone failed")
            raise InvalidArgument("Please provide a pointer to an engine geometry") from cause
        self._init_owned(ctx, cloned)

    # ── ファクトリ ───────────────────
    @classmethod
    def _from_ptr(cls, ctx: EngineContext, ptr: int) -> "GeometryHandle":
        """新規確保ポインタの所有権を引き取ってハンドル化する（失敗時は ptr を解放）。"""
        self = cls.__new__(cls)
        self._ptr = None
        self._init_owned(ctx, ptr)
        return self

    @classmethod
    def from_shapely(
        cls, geom: BaseGeometry, *, context: EngineContext | None = None
    ) -> "GeometryHandle":
        """Shapely ジオメトリをエンジン所有にしてハンドル化する。

        Raises
        ------
        InvalidArgument
            `geom` が Shapely ジオメトリでない場合。
        """
        ctx = context if context is not None else get_context()
        ptr = _engine.adopt(ctx.handle, geom)
        if ptr is None:
            cause = ctx.failure("adopt failed")
            raise InvalidArgument(f"Cannot wrap {type(geom).__name__} as a geometry") from cause
        return cls._from_ptr(ctx, ptr)

    def _init_owned(self, ctx: EngineContext, ptr: int) -> None:
        self._ctx = ctx
        type_id = _engine.geom_type_id(ctx.handle, ptr)
        has_z = _engine.has_z(ctx.handle, ptr) if 0 <= type_id <= _MAX_TYPE_ID else 2
        if not (0 <= type_id <= _MAX_TYPE_ID) or has_z not in (0, 1):
            # 部分的に初期化されたハンドルは外へ出さない
            _engine.destroy(ctx.handle, ptr)
            cause = ctx.failure("metadata query failed")
            raise InitializationFailed("Geometry initialization failed") from cause
        self._geom_type_id = int(type_id)
        self._has_z = bool(has_z)
        self._ptr = ptr

    # ── 属性 ─────────────────────────
    @property
    def ptr(self) -> int | None:
        """エンジンポインタ（解放後は None）。"""
        return self._ptr

    @property
    def geom_type_id(self) -> int:
        return self._geom_type_id

    @property
    def has_z(self) -> bool:
        return self._has_z

    @property
    def context(self) -> EngineContext:
        return self._ctx

    def is_usable(self) -> bool:
        return self._ptr is not None

    # ── 所有権 ───────────────────────
    def release(self) -> None:
        """ポインタを破棄して空ハンドルにする（冪等）。"""
        ptr = self._ptr
        if ptr is None:
            return
        self._ptr = None
        _engine.destroy(self._ctx.handle, ptr)

    def to_shapely(self) -> BaseGeometry:
        """エンジン内のジオメトリ（不変な Shapely オブジェクト）を返す。"""
        if self._ptr is None:
            raise EmptyGeometryError("A geometry object is empty")
        geom = _engine.deref_geometry(self._ctx.handle, self._ptr)
        if geom is None:
            raise self._ctx.failure("deref failed")
        return geom

    def __del__(self) -> None:
        try:
            self.release()
        except Exception:  # pragma: no cover - 終了処理中はモジュールが欠けていることがある
            pass

    def __repr__(self) -> str:
        if self._ptr is None:
            return "<GeometryHandle (released)>"
        z = " Z" if self._has_z else ""
        return f"<GeometryHandle type_id={self._geom_type_id}{z} ptr={self._ptr:#x}>"


__all__ = ["GeometryHandle"]
