"""
どこで: `ufuncs.predicates`
何を: 真偽を返す要素ごと演算（単項の性質判定、二項の位相述語、許容差つき完全一致）。
"""

from __future__ import annotations

from engine import backend as _engine

from . import templates as T
from .registry import define

# geom -> bool
is_empty = define("is_empty", T.Y_b, _engine.is_empty, "要素が空ジオメトリかを返す。")
is_simple = define("is_simple", T.Y_b, _engine.is_simple, "自己交差を持たないかを返す。")
is_ring = define("is_ring", T.Y_b, _engine.is_ring, "閉じた単純な線かを返す。")
has_z = define("has_z", T.Y_b, _engine.has_z, "Z 座標を持つかを返す。")
is_closed = define("is_closed", T.Y_b, _engine.is_closed, "線の始点と終点が一致するかを返す。")
is_valid = define(
    "is_valid",
    T.Y_b,
    _engine.is_valid,
    "妥当なジオメトリかを返す。不正な場合は理由を `EngineNotice` 警告として出す。",
)

# geom, geom -> bool
disjoint = define("disjoint", T.YY_b, _engine.disjoint)
touches = define("touches", T.YY_b, _engine.touches)
intersects = define("intersects", T.YY_b, _engine.intersects)
crosses = define("crosses", T.YY_b, _engine.crosses)
within = define("within", T.YY_b, _engine.within)
contains = define("contains", T.YY_b, _engine.contains)
overlaps = define("overlaps", T.YY_b, _engine.overlaps)
equals = define("equals", T.YY_b, _engine.equals, "位相的に等しいかを返す。")
covers = define("covers", T.YY_b, _engine.covers)
covered_by = define("covered_by", T.YY_b, _engine.covered_by)

# geom, geom, double -> bool
equals_exact = define(
    "equals_exact",
    T.YYd_b,
    _engine.equals_exact,
    "頂点の並びまで含めて、許容差 `tolerance` 以内で一致するかを返す。",
)
