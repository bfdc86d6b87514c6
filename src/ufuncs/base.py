"""
どこで: `ufuncs.base`（ディスパッチ本体）。
何を: `GeoUfunc`。NumPy ufunc と同じ形（`nin`/`nout`/`types`/`signature`/`out=`）で呼べる
演算オブジェクト。入力の型変換・ブロードキャスト・コア次元の解決・出力確保を行い、
要素ごとに `LoopTemplate` のカーネルを呼ぶ。
なぜ: NumPy の ufunc 機構はオブジェクト要素に対する手動所有の検証を差し込めないため、
ブロードキャスト規則だけ NumPy に委ね、ループは本層で回す。

振る舞い:
- ループ形状は各入力の「コア次元を除いた形状」を `np.broadcast_shapes` で合成したもの。
- コア次元（例: `(i,d)->()` の `i`/`d`）はブロードキャストせず、同名次元の長さ一致のみ検査する。
- 0 次元の結果は（`out` 未指定なら）要素そのものを返す。
- いずれかの要素で失敗すると即座に送出する。既に書いた要素は巻き戻さない。
"""

from __future__ import annotations

import logging
import re
from typing import Any

import numpy as np

from engine.context import EngineContext, get_context

from .templates import EngineFunc, LoopTemplate

logger = logging.getLogger(__name__)

_TYPECODES = {
    np.dtype(object): "O",
    np.dtype(np.float64): "d",
    np.dtype(np.intc): "i",
    np.dtype(np.uint8): "B",
    np.dtype(np.bool_): "?",
}

CoreDims = tuple[str, ...]


def parse_signature(signature: str) -> tuple[list[CoreDims], list[CoreDims]]:
    """`"(i,d)->()"` 形式のシグネチャを入力/出力ごとのコア次元名へ分解する。"""
    try:
        lhs, rhs = signature.replace(" ", "").split("->")
    except ValueError as exc:
        raise ValueError(f"不正なシグネチャです: {signature!r}") from exc

    def _side(part: str) -> list[CoreDims]:
        groups = re.findall(r"\(([^)]*)\)", part)
        if not groups:
            raise ValueError(f"不正なシグネチャです: {signature!r}")
        return [tuple(d for d in g.split(",") if d) for g in groups]

    return _side(lhs), _side(rhs)


class GeoUfunc:
    """名前付きの要素ごとジオメトリ演算。

    Parameters
    ----------
    name : str
        登録名（`__name__` にもなる）。
    template : LoopTemplate
        入出力型とカーネル。
    func : callable
        テンプレートへ差し込むエンジン関数。
    doc : str, optional
        利用者向け説明。
    """

    nout = 1

    def __init__(self, name: str, template: LoopTemplate, func: EngineFunc, doc: str = "") -> None:
        self.__name__ = name
        self.template = template
        self.func = func
        self.__doc__ = doc or f"{name} ({template.id})"
        self.signature = template.signature
        if template.signature is None:
            self._core_in: list[CoreDims] = [() for _ in template.in_dtypes]
        else:
            core_in, core_out = parse_signature(template.signature)
            if len(core_in) != template.nin or len(core_out) != 1 or core_out[0]:
                raise ValueError(f"{name}: シグネチャ {template.signature!r} が入出力数と一致しません")
            self._core_in = core_in

    # ── ufunc 互換の属性 ─────────────
    @property
    def name(self) -> str:
        return self.__name__

    @property
    def nin(self) -> int:
        return self.template.nin

    @property
    def nargs(self) -> int:
        return self.nin + self.nout

    @property
    def types(self) -> list[str]:
        t = self.template
        ins = "".join(_TYPECODES[d] for d in t.in_dtypes)
        return [f"{ins}->{_TYPECODES[t.out_dtype]}"]

    def __repr__(self) -> str:
        return f"<geoufunc '{self.__name__}'>"

    # ── 呼び出し ─────────────────────
    def __call__(
        self, *args: Any, out: np.ndarray | tuple[np.ndarray] | None = None,
        context: EngineContext | None = None,
    ) -> Any:
        if len(args) != self.nin:
            raise TypeError(
                f"{self.__name__}() takes {self.nin} positional arguments but {len(args)} were given"
            )
        ctx = context if context is not None else get_context()
        arrays = [_coerce(a, dt, self.__name__) for a, dt in zip(args, self.template.in_dtypes)]
        loop_shape, views = self._broadcast(arrays)
        result = self._prepare_out(out, loop_shape)

        kernel = self.template.kernel
        func = self.func
        ctx.clear_error()
        for idx in np.ndindex(*loop_shape):
            kernel(func, ctx, [v[idx] for v in views], result[idx + (Ellipsis,)])

        if out is None and result.ndim == 0:
            return result[()]
        return result

    def _broadcast(self, arrays: list[np.ndarray]) -> tuple[tuple[int, ...], list[np.ndarray]]:
        loop_shapes: list[tuple[int, ...]] = []
        core_shapes: list[tuple[int, ...]] = []
        sizes: dict[str, int] = {}
        for pos, (arr, core) in enumerate(zip(arrays, self._core_in)):
            nc = len(core)
            if arr.ndim < nc:
                raise ValueError(
                    f"{self.__name__}: Input operand {pos} does not have enough dimensions "
                    f"(has {arr.ndim}, gufunc core with signature {self.signature} requires {nc})"
                )
            split = arr.ndim - nc
            for dim_name, size in zip(core, arr.shape[split:]):
                if sizes.setdefault(dim_name, size) != size:
                    raise ValueError(
                        f"{self.__name__}: Input operand {pos} has a mismatch in its core "
                        f"dimension {dim_name!r} ({size} != {sizes[dim_name]})"
                    )
            loop_shapes.append(arr.shape[:split])
            core_shapes.append(arr.shape[split:])
        loop_shape = np.broadcast_shapes(*loop_shapes)
        views = [
            np.broadcast_to(arr, loop_shape + core) for arr, core in zip(arrays, core_shapes)
        ]
        return loop_shape, views

    def _prepare_out(self, out: Any, loop_shape: tuple[int, ...]) -> np.ndarray:
        dtype = self.template.out_dtype
        if out is None:
            return np.empty(loop_shape, dtype=dtype)
        if isinstance(out, tuple):
            if len(out) != 1:
                raise ValueError(f"{self.__name__}: out must have exactly one array")
            out = out[0]
        if not isinstance(out, np.ndarray):
            raise TypeError("return arrays must be of ArrayType")
        if out.shape != loop_shape:
            raise ValueError(
                f"non-broadcastable output operand with shape {out.shape} "
                f"doesn't match the broadcast shape {loop_shape}"
            )
        if out.dtype != dtype:
            raise TypeError(f"{self.__name__}: out の dtype は {dtype} である必要があります（{out.dtype}）")
        if not out.flags.writeable:
            raise ValueError(f"{self.__name__}: output array is read-only")
        return out


def _coerce(value: Any, dtype: np.dtype, name: str) -> np.ndarray:
    """入力をテンプレートの要素型の配列へ変換する（数値は same_kind キャストのみ許可）。"""
    if dtype == np.dtype(object):
        if isinstance(value, np.ndarray):
            return value if value.dtype == dtype else value.astype(object)
        return np.asarray(value, dtype=object)
    arr = np.asarray(value)
    if arr.dtype == np.dtype(object):
        raise TypeError(f"{name}: 数値配列が必要です（object 配列が渡されました）")
    try:
        return arr.astype(dtype, casting="same_kind", copy=False)
    except TypeError as exc:
        raise TypeError(f"{name}: {arr.dtype} を {dtype} へキャストできません") from exc


__all__ = ["GeoUfunc", "parse_signature"]
