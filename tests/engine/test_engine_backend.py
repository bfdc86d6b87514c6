from __future__ import annotations

import numpy as np
import pytest
import shapely

from engine import backend

# What this tests
# - エンジン内部の失敗（_Fault/GEOSException）だけがハンドラ通知＋番兵になる。
#   束縛自身の不具合（素の ValueError/TypeError）はそのまま送出される。
# - リング生成は 4 点未満を補完せずに拒否し、座標列は引き取られる。
# - ポインタは np.integer でも扱える。


@pytest.fixture()
def session():
    messages: list[str] = []
    handle = backend.init_r()
    handle.set_error_message_handler(lambda msg, _data: messages.append(msg))
    yield handle, messages
    backend.finish_r(handle)


def _seq(handle, rows) -> int:
    arr = np.asarray(rows, dtype=np.float64)
    seq = backend.coordseq_create(handle, arr.shape[0], arr.shape[1])
    for i, row in enumerate(arr):
        for j, value in enumerate(row):
            assert backend.coordseq_set_ordinate(handle, seq, i, j, float(value)) == 1
    return seq


def test_fault_becomes_sentinel_and_message(session) -> None:
    handle, messages = session

    @backend._engine_call(None)
    def failing(h):
        raise backend._Fault("IllegalArgumentException: boom")

    assert failing(handle) is None
    assert messages == ["IllegalArgumentException: boom"]


@pytest.mark.parametrize("exc_type", [ValueError, TypeError, KeyError])
def test_binding_bugs_propagate(session, exc_type) -> None:
    handle, messages = session

    @backend._engine_call(None)
    def buggy(h):
        raise exc_type("bug")

    with pytest.raises(exc_type):
        buggy(handle)
    assert messages == []


def test_shapely_value_error_is_reported_as_fault() -> None:
    def rejects(*_args):
        raise ValueError("bad coordinates")

    with pytest.raises(backend._Fault, match="bad coordinates"):
        backend._construct("create_linestring", rejects, np.zeros((2, 2)))


@pytest.mark.parametrize(
    "rows",
    [
        [[0, 0], [1, 0], [0, 0]],
        [[0, 0], [1, 1], [2, 0]],
        [[0, 0], [0, 0]],
    ],
)
def test_create_linearring_rejects_short_rings(session, rows) -> None:
    handle, messages = session
    before = backend.live_pointers()
    seq = _seq(handle, rows)
    assert backend.create_linearring(handle, seq) is None
    assert "must be 0 or >= 4" in messages[0]
    # 失敗しても座標列は引き取られている
    assert backend.live_pointers() == before
    assert backend.coordseq_get_size(handle, seq) == -1


def test_create_linearring_keeps_exact_point_count(session) -> None:
    handle, messages = session
    seq = _seq(handle, [[0, 0], [1, 0], [1, 1], [0, 0]])
    ptr = backend.create_linearring(handle, seq)
    assert ptr is not None
    assert shapely.get_num_points(backend.deref_geometry(handle, ptr)) == 4
    assert backend.destroy(handle, ptr)
    assert messages == []


def test_create_linestring_rejects_single_point(session) -> None:
    handle, messages = session
    seq = _seq(handle, [[1, 2]])
    assert backend.create_linestring(handle, seq) is None
    assert "0 or >1" in messages[0]


def test_numpy_integer_pointers(session) -> None:
    handle, messages = session
    ptr = backend.adopt(handle, shapely.Point(1, 2))
    wide = np.int64(ptr)
    assert backend.geom_type_id(handle, wide) == 0
    copy = backend.clone(handle, wide)
    assert backend.destroy(handle, wide)
    assert not backend.destroy(handle, np.int64(ptr))
    assert backend.destroy(handle, copy)
    assert backend.deref_geometry(handle, np.True_) is None
    assert messages == ["IllegalArgumentException: Argument is not a pointer"]
