"""共通フィクスチャ。

- 乱数シード固定
- 小さなジオメトリハンドル試料（点/線/正方形/リング）
- エンジン所有オブジェクト数の計測（リーク検査用）
"""

from __future__ import annotations

import gc
from typing import Callable, Iterator

import numpy as np
import pytest
import shapely

from common import settings
from engine import backend
from engine.geometry import GeometryHandle


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """NumPy の乱数を固定。"""
    np.random.seed(12345)


@pytest.fixture()
def point() -> GeometryHandle:
    return GeometryHandle.from_shapely(shapely.Point(1.0, 2.0))


@pytest.fixture()
def line() -> GeometryHandle:
    return GeometryHandle.from_shapely(shapely.LineString([(0, 0), (1, 1), (2, 2)]))


@pytest.fixture()
def square() -> GeometryHandle:
    return GeometryHandle.from_shapely(shapely.box(0.0, 0.0, 1.0, 1.0))


@pytest.fixture()
def ring() -> GeometryHandle:
    return GeometryHandle.from_shapely(shapely.LinearRing([(0, 0), (10, 0), (10, 10), (0, 10)]))


@pytest.fixture()
def live_pointers() -> Callable[[], int]:
    """GC 後のエンジン所有オブジェクト数を返す関数。"""

    def _count() -> int:
        gc.collect()
        return backend.live_pointers()

    return _count


@pytest.fixture()
def reload_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[Callable[[], None]]:
    """環境変数を変えたあと設定を再読込し、終了時に元へ戻す。"""
    yield settings.reload_from_env
    monkeypatch.undo()
    settings.reload_from_env()
