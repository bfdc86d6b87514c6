"""
どこで: `engine.coordseq`（座標列ビルダ）。
何を: 生の座標配列からエンジン側の座標列を段階的に組み立て、ジオメトリ生成関数へ引き渡す。
なぜ: 座標列は「確保 → 1 成分ずつ設定 → 生成関数へ所有権移譲」の順でしか使えず、
途中失敗時の解放漏れ/二重解放がここに集中するため、手順を 1 箇所に閉じ込める。

リング閉合の方針:
- 先頭行と末尾行がいずれかの次元で異なれば、1 点多く確保して先頭点の複製を末尾に追加する。
- 既に一致していれば点数は変えない。入力を切り詰めることはない。
- 比較は厳密な `!=`（NaN を含む行は常に「異なる」扱い）。
"""

from __future__ import annotations

import logging
from typing import Callable

import numpy as np
from numba import njit  # type: ignore[attr-defined]

from common import settings as _settings

from . import backend as _engine
from .context import EngineContext
from .errors import AllocationFailed, EngineOperationFailed

logger = logging.getLogger(__name__)


@njit(cache=True)
def _ring_needs_closure_njit(coords: np.ndarray) -> bool:
    n = coords.shape[0]
    if n == 0:
        return False
    for j in range(coords.shape[1]):
        if coords[0, j] != coords[n - 1, j]:
            return True
    return False


def ring_needs_closure(coords: np.ndarray) -> bool:
    """先頭行と末尾行が一致しないとき True。`coords` は形状 (N, D)。"""
    arr = np.ascontiguousarray(coords, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"coords は形状 (N, D) である必要があります: {arr.shape}")
    if _settings.get().USE_NUMBA:
        return bool(_ring_needs_closure_njit(arr))
    return bool(_ring_needs_closure_njit.py_func(arr))


class CoordinateSequence:
    """エンジン側座標列の所有ラッパ（書き込み 1 回・消費 1 回）。

    `with` で使うと、`finish()` されずにブロックを抜けた場合に解放される。
    """

    __slots__ = ("_ctx", "_ptr", "size", "dims")

    def __init__(self, ctx: EngineContext, size: int, dims: int) -> None:
        self._ctx = ctx
        self.size = int(size)
        self.dims = int(dims)
        ptr = _engine.coordseq_create(ctx.handle, self.size, self.dims)
        if ptr is None:
            cause = ctx.failure("coordseq_create failed")
            raise AllocationFailed(
                f"Could not allocate a coordinate sequence of {size}x{dims}"
            ) from cause
        self._ptr: int | None = ptr

    @property
    def owned(self) -> bool:
        return self._ptr is not None

    def set_ordinate(self, index: int, dim: int, value: float) -> None:
        """1 成分を設定する。失敗時は座標列を解放してから送出する。"""
        if self._ptr is None:
            raise EngineOperationFailed("coordinate sequence was already consumed")
        if not _engine.coordseq_set_ordinate(self._ctx.handle, self._ptr, index, dim, float(value)):
            self.release()
            raise self._ctx.failure(f"coordseq_set_ordinate({index}, {dim}) failed")

    def fill(self, coords: np.ndarray, start: int = 0) -> None:
        """`coords (K, dims)` を行 `start` から順に書き込む。"""
        for i in range(coords.shape[0]):
            row = coords[i]
            for j in range(self.dims):
                self.set_ordinate(start + i, j, row[j])

    def release(self) -> None:
        ptr = self._ptr
        if ptr is None:
            return
        self._ptr = None
        _engine.coordseq_destroy(self._ctx.handle, ptr)

    def finish(self) -> int:
        """所有権を手放してポインタを返す。以後この座標列には触れない。"""
        if self._ptr is None:
            raise EngineOperationFailed("coordinate sequence was already consumed")
        ptr, self._ptr = self._ptr, None
        return ptr

    def __enter__(self) -> "CoordinateSequence":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def build_sequence(
    ctx: EngineContext, coords: np.ndarray, *, close_ring: bool = False
) -> CoordinateSequence:
    """座標配列 (N, D) から座標列を作る。`close_ring` でリング閉合の方針を適用する。"""
    arr = np.asarray(coords, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"coords は形状 (N, D) である必要があります: {arr.shape}")
    n, dims = arr.shape
    closure = close_ring and ring_needs_closure(arr)
    seq = CoordinateSequence(ctx, n + 1 if closure else n, dims)
    seq.fill(arr)
    if closure:
        seq.fill(arr[:1], start=n)
    return seq


def build_geometry(
    ctx: EngineContext,
    coords: np.ndarray,
    create: Callable[[_engine.EngineHandle, int], int | None],
    *,
    close_ring: bool = False,
) -> int:
    """座標列を組み立てて `create` に渡し、新しいジオメトリポインタを返す。

    `create` は成否にかかわらず座標列の所有権を引き取る。失敗（None）は例外にする。
    """
    with build_sequence(ctx, coords, close_ring=close_ring) as seq:
        ptr = create(ctx.handle, seq.finish())
    if ptr is None:
        raise ctx.failure(f"{getattr(create, '__name__', 'create')} failed")
    return ptr


__all__ = ["CoordinateSequence", "build_sequence", "build_geometry", "ring_needs_closure"]
