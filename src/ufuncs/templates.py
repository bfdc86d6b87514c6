"""
どこで: `ufuncs.templates`（要素ごとのループテンプレート）。
何を: 「入力の種類 × 出力の種類」ごとに 1 要素分の処理（検証 → エンジン呼び出し → 戻り値検証 →
型付き書き込み）を定義し、`LoopTemplate` として閉じた集合にまとめる。
なぜ: 具体的なエンジン関数はデータとして差し込み、検証と番兵の解釈をテンプレート側へ一元化するため。

テンプレート ID の読み方（`入力_出力`）:
- `Y` ジオメトリ、`b` 真偽、`d` 倍精度、`i` 整数、`B` 0–255 の整数。
- 例: `YY_b` は (geom, geom) -> bool、`Yd_Y` は (geom, double) -> geom。

カーネルの規約:
- `kernel(func, ctx, ins, op)`。`ins` は 1 要素分の入力（コア次元を持つ入力は部分配列ビュー）、
  `op` は出力配列の 0 次元ビュー（C の出力ポインタに相当）。
- 検証失敗/エンジン失敗は例外として送出し、バッチ全体を中断する（書き込み済み要素は戻さない）。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

import numpy as np

from engine import backend as _engine
from engine.context import EngineContext
from engine.coordseq import build_geometry
from engine.errors import EmptyGeometryError, NotAGeometryError
from engine.geometry import GeometryHandle

EngineFunc = Callable[..., Any]
Kernel = Callable[[EngineFunc, EngineContext, Sequence[Any], np.ndarray], None]

OBJECT = np.dtype(object)
DOUBLE = np.dtype(np.float64)
INT = np.dtype(np.intc)
UBYTE = np.dtype(np.uint8)
BOOL = np.dtype(np.bool_)

MAX_UBYTE = int(np.iinfo(np.uint8).max)
MAX_INT = int(np.iinfo(np.intc).max)


@dataclass(frozen=True)
class LoopTemplate:
    """ループテンプレート（入出力の要素型・コア次元シグネチャ・1 要素カーネル）。"""

    id: str
    in_dtypes: tuple[np.dtype, ...]
    out_dtype: np.dtype
    kernel: Kernel
    signature: str | None = None

    @property
    def nin(self) -> int:
        return len(self.in_dtypes)


# ── 入力検証と出力書き込み ───────────────────────────────


def geometry_ptr(obj: Any) -> int:
    """配列要素からエンジンポインタを取り出す（ハンドルでない/空なら送出）。"""
    if not isinstance(obj, GeometryHandle):
        raise NotAGeometryError(
            "One of the arguments is of incorrect type. Please provide only Geometry objects."
        )
    ptr = obj.ptr
    if ptr is None:
        raise EmptyGeometryError("A geometry object is empty")
    return ptr


def _failed(ctx: EngineContext, func: EngineFunc) -> BaseException:
    return ctx.failure(f"{getattr(func, '__name__', 'engine call')} failed")


def _emit_bool(ctx: EngineContext, func: EngineFunc, ret: int, op: np.ndarray) -> None:
    # 三値（0/1/異常値）を真偽へ絞る
    if ret != 0 and ret != 1:
        raise _failed(ctx, func)
    op[()] = bool(ret)


def _emit_geometry(ctx: EngineContext, func: EngineFunc, ptr: int | None, op: np.ndarray) -> None:
    if ptr is None:
        raise _failed(ctx, func)
    # 旧要素への参照はここで外れる（他に参照が無ければ解放される）
    op[()] = GeometryHandle._from_ptr(ctx, ptr)


def _emit_code(
    ctx: EngineContext, func: EngineFunc, ret: int, op: np.ndarray, max_value: int
) -> None:
    if ret < 0 or ret > max_value:
        raise _failed(ctx, func)
    op[()] = ret


# ── geom(s) -> bool ──────────────────────────────────────


def _loop_Y_b(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    ret = func(ctx.handle, geometry_ptr(ins[0]))
    _emit_bool(ctx, func, ret, op)


def _loop_YY_b(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    a = geometry_ptr(ins[0])
    b = geometry_ptr(ins[1])
    _emit_bool(ctx, func, func(ctx.handle, a, b), op)


def _loop_YYd_b(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    a = geometry_ptr(ins[0])
    b = geometry_ptr(ins[1])
    _emit_bool(ctx, func, func(ctx.handle, a, b, float(ins[2])), op)


# ── geom(s) -> geom ──────────────────────────────────────


def _loop_Y_Y(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    _emit_geometry(ctx, func, func(ctx.handle, geometry_ptr(ins[0])), op)


def _loop_Yi_Y(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    ptr = geometry_ptr(ins[0])
    _emit_geometry(ctx, func, func(ctx.handle, ptr, int(ins[1])), op)


def _loop_Yd_Y(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    ptr = geometry_ptr(ins[0])
    _emit_geometry(ctx, func, func(ctx.handle, ptr, float(ins[1])), op)


def _loop_YY_Y(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    a = geometry_ptr(ins[0])
    b = geometry_ptr(ins[1])
    _emit_geometry(ctx, func, func(ctx.handle, a, b), op)


def _loop_Ydi_Y(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    ptr = geometry_ptr(ins[0])
    _emit_geometry(ctx, func, func(ctx.handle, ptr, float(ins[1]), int(ins[2])), op)


def _loop_YYd_Y(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    a = geometry_ptr(ins[0])
    b = geometry_ptr(ins[1])
    _emit_geometry(ctx, func, func(ctx.handle, a, b, float(ins[2])), op)


# ── geom(s) -> 数値 ──────────────────────────────────────


def _loop_Y_d(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    if func(ctx.handle, geometry_ptr(ins[0]), op) == 0:
        raise _failed(ctx, func)


def _loop_YY_d(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    a = geometry_ptr(ins[0])
    b = geometry_ptr(ins[1])
    if func(ctx.handle, a, b, op) == 0:
        raise _failed(ctx, func)


def _loop_YY_d_2(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    a = geometry_ptr(ins[0])
    b = geometry_ptr(ins[1])
    ret = func(ctx.handle, a, b)
    # -1.0 は失敗の番兵（正当な結果 -1.0 とは区別できない）
    if ret == -1.0:
        raise _failed(ctx, func)
    op[()] = ret


def _loop_Y_B(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    _emit_code(ctx, func, func(ctx.handle, geometry_ptr(ins[0])), op, MAX_UBYTE)


def _loop_Y_i(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    _emit_code(ctx, func, func(ctx.handle, geometry_ptr(ins[0])), op, MAX_INT)


# ── 座標配列 -> geom（コア次元あり） ─────────────────────


def _loop_points(func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray) -> None:
    coords = np.asarray(ins[0])[np.newaxis, :]
    _emit_geometry(ctx, func, build_geometry(ctx, coords, func), op)


def _loop_linestrings(
    func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray
) -> None:
    _emit_geometry(ctx, func, build_geometry(ctx, ins[0], func), op)


def _loop_linearrings(
    func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray
) -> None:
    _emit_geometry(ctx, func, build_geometry(ctx, ins[0], func, close_ring=True), op)


def _loop_polygons_with_holes(
    func: EngineFunc, ctx: EngineContext, ins: Sequence[Any], op: np.ndarray
) -> None:
    """殻と穴をすべて複製してからポリゴン生成へ渡す（呼び出し側の所有物は触らない）。"""
    handle = ctx.handle
    shell = _engine.clone(handle, geometry_ptr(ins[0]))
    if shell is None:
        raise _failed(ctx, _engine.clone)
    owned = [shell]
    try:
        for hole in ins[1]:
            ptr = _engine.clone(handle, geometry_ptr(hole))
            if ptr is None:
                raise _failed(ctx, _engine.clone)
            owned.append(ptr)
    except BaseException:
        for ptr in owned:
            _engine.destroy(handle, ptr)
        raise
    # 以降の所有権は生成関数へ移る
    _emit_geometry(ctx, func, func(handle, owned[0], owned[1:]), op)


# ── テンプレート集合 ──────────────────────────────────────

Y_b = LoopTemplate("Y_b", (OBJECT,), BOOL, _loop_Y_b)
YY_b = LoopTemplate("YY_b", (OBJECT, OBJECT), BOOL, _loop_YY_b)
YYd_b = LoopTemplate("YYd_b", (OBJECT, OBJECT, DOUBLE), BOOL, _loop_YYd_b)
Y_Y = LoopTemplate("Y_Y", (OBJECT,), OBJECT, _loop_Y_Y)
Yi_Y = LoopTemplate("Yi_Y", (OBJECT, INT), OBJECT, _loop_Yi_Y)
Yd_Y = LoopTemplate("Yd_Y", (OBJECT, DOUBLE), OBJECT, _loop_Yd_Y)
YY_Y = LoopTemplate("YY_Y", (OBJECT, OBJECT), OBJECT, _loop_YY_Y)
Ydi_Y = LoopTemplate("Ydi_Y", (OBJECT, DOUBLE, INT), OBJECT, _loop_Ydi_Y)
YYd_Y = LoopTemplate("YYd_Y", (OBJECT, OBJECT, DOUBLE), OBJECT, _loop_YYd_Y)
Y_d = LoopTemplate("Y_d", (OBJECT,), DOUBLE, _loop_Y_d)
Y_B = LoopTemplate("Y_B", (OBJECT,), UBYTE, _loop_Y_B)
Y_i = LoopTemplate("Y_i", (OBJECT,), INT, _loop_Y_i)
YY_d = LoopTemplate("YY_d", (OBJECT, OBJECT), DOUBLE, _loop_YY_d)
YY_d_2 = LoopTemplate("YY_d_2", (OBJECT, OBJECT), DOUBLE, _loop_YY_d_2)
d_Y_points = LoopTemplate("d_Y", (DOUBLE,), OBJECT, _loop_points, "(d)->()")
d_Y_linestrings = LoopTemplate("d_Y", (DOUBLE,), OBJECT, _loop_linestrings, "(i,d)->()")
d_Y_linearrings = LoopTemplate("d_Y", (DOUBLE,), OBJECT, _loop_linearrings, "(i,d)->()")
YY_Y_polygons = LoopTemplate(
    "YY_Y", (OBJECT, OBJECT), OBJECT, _loop_polygons_with_holes, "(),(i)->()"
)

TEMPLATES: tuple[LoopTemplate, ...] = (
    Y_b,
    YY_b,
    YYd_b,
    Y_Y,
    Yi_Y,
    Yd_Y,
    YY_Y,
    Ydi_Y,
    YYd_Y,
    Y_d,
    Y_B,
    Y_i,
    YY_d,
    YY_d_2,
    d_Y_points,
    d_Y_linestrings,
    d_Y_linearrings,
    YY_Y_polygons,
)

__all__ = ["LoopTemplate", "TEMPLATES", "geometry_ptr"]
