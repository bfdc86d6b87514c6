"""
どこで: `ufuncs.constructive`
何を: 新しいジオメトリを返す要素ごと演算（単項変換、添字/パラメータ付き変換、二項の集合演算、
バッファ/スナップ）。
なぜ: 結果は常にエンジンが新規確保したポインタで、出力スロットの新しいハンドルが所有する。
"""

from __future__ import annotations

from engine import backend as _engine

from . import templates as T
from .registry import define

# geom -> geom
clone = define("clone", T.Y_Y, _engine.clone, "別所有の複製を返す。")
envelope = define("envelope", T.Y_Y, _engine.envelope, "外接矩形を返す。")
convex_hull = define("convex_hull", T.Y_Y, _engine.convex_hull)
boundary = define("boundary", T.Y_Y, _engine.boundary)
unary_union = define("unary_union", T.Y_Y, _engine.unary_union)
point_on_surface = define("point_on_surface", T.Y_Y, _engine.point_on_surface)
get_centroid = define("get_centroid", T.Y_Y, _engine.get_centroid)
line_merge = define("line_merge", T.Y_Y, _engine.line_merge)
extract_unique_points = define("extract_unique_points", T.Y_Y, _engine.extract_unique_points)
get_start_point = define("get_start_point", T.Y_Y, _engine.get_start_point)
get_end_point = define("get_end_point", T.Y_Y, _engine.get_end_point)
get_exterior_ring = define("get_exterior_ring", T.Y_Y, _engine.get_exterior_ring)
normalize = define(
    "normalize", T.Y_Y, _engine.normalize, "正規形の複製を返す（入力は変更しない）。"
)

# geom, int -> geom
get_interior_ring_n = define("get_interior_ring_n", T.Yi_Y, _engine.get_interior_ring_n)
get_point_n = define("get_point_n", T.Yi_Y, _engine.get_point_n)
get_geometry_n = define("get_geometry_n", T.Yi_Y, _engine.get_geometry_n)

# geom, double -> geom
interpolate = define("interpolate", T.Yd_Y, _engine.interpolate, "線上で距離 d の点を返す。")
interpolate_normalized = define(
    "interpolate_normalized", T.Yd_Y, _engine.interpolate_normalized, "線長に対する割合で補間する。"
)
simplify = define("simplify", T.Yd_Y, _engine.simplify)
topology_preserve_simplify = define(
    "topology_preserve_simplify", T.Yd_Y, _engine.topology_preserve_simplify
)

# geom, geom -> geom
intersection = define("intersection", T.YY_Y, _engine.intersection)
difference = define("difference", T.YY_Y, _engine.difference)
symmetric_difference = define("symmetric_difference", T.YY_Y, _engine.symmetric_difference)
union = define("union", T.YY_Y, _engine.union)
shared_paths = define("shared_paths", T.YY_Y, _engine.shared_paths)

# 固定形の三項
buffer = define(
    "buffer",
    T.Ydi_Y,
    _engine.buffer,
    "幅 `width` のバッファを返す。第 3 引数は四分円あたりの分割数。",
)
snap = define("snap", T.YYd_Y, _engine.snap, "許容差以内で参照ジオメトリの頂点へ吸着させる。")
