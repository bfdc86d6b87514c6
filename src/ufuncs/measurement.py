"""
どこで: `ufuncs.measurement`
何を: スカラーを返す要素ごと演算（面積/長さ/座標、型コード、個数、距離、線形参照）。

注意:
- `project` / `project_normalized` はエンジンの戻り値 -1.0 を失敗として扱う。
  幾何的に正当な -1.0 とは区別できない（既知の制約）。
"""

from __future__ import annotations

from engine import backend as _engine

from . import templates as T
from .registry import define

# geom -> double
get_x = define("get_x", T.Y_d, _engine.get_x, "点の X 座標。点以外は失敗。")
get_y = define("get_y", T.Y_d, _engine.get_y, "点の Y 座標。点以外は失敗。")
area = define("area", T.Y_d, _engine.area)
length = define("length", T.Y_d, _engine.length)
get_length = define("get_length", T.Y_d, _engine.get_length, "線の長さ。線以外は失敗。")

# geom -> uint8
geom_type_id = define("geom_type_id", T.Y_B, _engine.geom_type_id)
get_dimensions = define("get_dimensions", T.Y_B, _engine.get_dimensions)
get_coordinate_dimensions = define(
    "get_coordinate_dimensions", T.Y_B, _engine.get_coordinate_dimensions
)

# geom -> int
get_srid = define("get_srid", T.Y_i, _engine.get_srid)
get_num_geometries = define("get_num_geometries", T.Y_i, _engine.get_num_geometries)
get_num_interior_rings = define("get_num_interior_rings", T.Y_i, _engine.get_num_interior_rings)
get_num_points = define("get_num_points", T.Y_i, _engine.get_num_points, "線の頂点数。")
get_num_coordinates = define("get_num_coordinates", T.Y_i, _engine.get_num_coordinates)

# geom, geom -> double
distance = define("distance", T.YY_d, _engine.distance)
hausdorff_distance = define("hausdorff_distance", T.YY_d, _engine.hausdorff_distance)

# geom, geom -> double（番兵 -1.0）
project = define("project", T.YY_d_2, _engine.project, "線上で点に最も近い位置までの距離。")
project_normalized = define("project_normalized", T.YY_d_2, _engine.project_normalized)
