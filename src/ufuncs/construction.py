"""
どこで: `ufuncs.construction`
何を: 生の座標配列（コア次元つき）やリングのハンドルから新しいジオメトリを組み立てる演算。

シグネチャ:
- `points`: `(d)->()`: 末尾軸が 1 点の座標。
- `linestrings` / `linearrings`: `(i,d)->()`: 末尾 2 軸が (点数, 次元)。
  `linearrings` は先頭点と末尾点が異なれば閉合点を 1 つ追加する。
- `polygons_with_holes`: `(),(i)->()`: 殻 1 つと穴 i 個（すべて複製してから使う）。
- `polygons_without_holes`: 要素ごとにリングを穴なしポリゴンへ。
"""

from __future__ import annotations

from engine import backend as _engine

from . import templates as T
from .registry import define

points = define("points", T.d_Y_points, _engine.create_point)
linestrings = define("linestrings", T.d_Y_linestrings, _engine.create_linestring)
linearrings = define("linearrings", T.d_Y_linearrings, _engine.create_linearring)
polygons_without_holes = define("polygons_without_holes", T.Y_Y, _engine.linearring_to_polygon)
polygons_with_holes = define("polygons_with_holes", T.YY_Y_polygons, _engine.create_polygon)
