from __future__ import annotations

import numpy as np
import pytest

hypothesis = pytest.importorskip("hypothesis", reason="hypothesis is a dev optional dependency")
from hypothesis import given, settings, strategies as st  # type: ignore

from engine import backend
from engine.context import get_context
from engine.coordseq import build_sequence, ring_needs_closure
from ufuncs import construction as K
from ufuncs import measurement as M

pytestmark = pytest.mark.optional

# What this tests
# - 座標列の点数は入力点数（閉合が必要なら +1）。入力を切り詰めない。
# - 生成と解放を繰り返してもエンジン所有オブジェクトが残らない。

_rows = st.integers(1, 8).flatmap(
    lambda n: st.lists(
        st.lists(st.floats(-1e6, 1e6, allow_nan=False), min_size=2, max_size=2),
        min_size=n,
        max_size=n,
    )
)


@settings(deadline=None, max_examples=50)
@given(rows=_rows, close=st.booleans())
def test_sequence_size_follows_closure_rule(rows, close) -> None:
    arr = np.array(rows, dtype=np.float64)
    ctx = get_context()
    before = backend.live_pointers()
    with build_sequence(ctx, arr, close_ring=close) as seq:
        extra = 1 if close and ring_needs_closure(arr) else 0
        assert seq.size == len(rows) + extra
        assert seq.owned
    assert backend.live_pointers() == before


@settings(deadline=None, max_examples=30)
@given(
    pts=st.lists(
        st.tuples(st.integers(-100, 100), st.integers(-100, 100)), min_size=2, max_size=10
    )
)
def test_linestring_point_count_matches_input(pts) -> None:
    coords = np.array(pts, dtype=np.float64)
    line = K.linestrings(coords)
    assert int(M.get_num_points(line)) == len(pts)
