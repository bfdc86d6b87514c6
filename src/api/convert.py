"""
どこで: `api.convert`
何を: Shapely ジオメトリ（単体/配列）とハンドル配列の相互変換。
なぜ: 外部で作られたジオメトリをエンジン所有のハンドルとして取り込み、結果を Shapely 側へ戻すため。

- `None` 要素はそのまま `None` として通す（欠損値）。
- 取り込みは常に新しいエンジン確保になる（呼び出し側の Shapely オブジェクトとは独立）。
"""

from __future__ import annotations

from typing import Any

import numpy as np

from engine.geometry import GeometryHandle


def from_shapely(geoms: Any) -> Any:
    """Shapely ジオメトリ（または配列）を `GeometryHandle`（の object 配列）へ変換する。"""
    arr = np.asarray(geoms, dtype=object)
    out = np.empty(arr.shape, dtype=object)
    for idx in np.ndindex(*arr.shape):
        g = arr[idx]
        out[idx] = None if g is None else GeometryHandle.from_shapely(g)
    return out[()] if out.ndim == 0 else out


def to_shapely(handles: Any) -> Any:
    """`GeometryHandle`（の配列）を Shapely ジオメトリ（の object 配列）へ変換する。"""
    arr = np.asarray(handles, dtype=object)
    out = np.empty(arr.shape, dtype=object)
    for idx in np.ndindex(*arr.shape):
        h = arr[idx]
        out[idx] = None if h is None else h.to_shapely()
    return out[()] if out.ndim == 0 else out


__all__ = ["from_shapely", "to_shapely"]
