"""
どこで: `api` 入口（高レベル公開 API）。
何を: 要素ごとジオメトリ演算・`GeometryHandle`・例外・Shapely 変換・ロギング設定を再輸出。
なぜ: 利用者が単一名前空間からハンドル生成 → 配列演算 → 結果取り出しまで完結できるようにするため。

Usage:
    import numpy as np
    from api import U, linestrings, get_num_points, equals

    lines = linestrings(np.array([[[0, 0], [1, 1]], [[0, 0], [1, 0]]], dtype=float))
    get_num_points(lines)          # array([2, 2], dtype=int32)
    equals(lines[0], lines[1])     # False
"""

from common.logging import setup_default_logging
from engine.errors import (
    AllocationFailed,
    EmptyGeometryError,
    EngineError,
    EngineNotice,
    EngineOperationFailed,
    GeometryError,
    InitializationFailed,
    InvalidArgument,
    NotAGeometryError,
)
from engine.geometry import GeometryHandle
from ufuncs import GeoUfunc, get_operation, is_operation_registered, list_operations

# 座標配列からの生成
from ufuncs.construction import (
    linearrings,
    linestrings,
    points,
    polygons_with_holes,
    polygons_without_holes,
)

# ジオメトリを返す演算
from ufuncs.constructive import (
    boundary,
    buffer,
    clone,
    convex_hull,
    difference,
    envelope,
    extract_unique_points,
    get_centroid,
    get_end_point,
    get_exterior_ring,
    get_geometry_n,
    get_interior_ring_n,
    get_point_n,
    get_start_point,
    interpolate,
    interpolate_normalized,
    intersection,
    line_merge,
    normalize,
    point_on_surface,
    shared_paths,
    simplify,
    snap,
    symmetric_difference,
    topology_preserve_simplify,
    unary_union,
    union,
)

# 計測・コード
from ufuncs.measurement import (
    area,
    distance,
    geom_type_id,
    get_coordinate_dimensions,
    get_dimensions,
    get_length,
    get_num_coordinates,
    get_num_geometries,
    get_num_interior_rings,
    get_num_points,
    get_srid,
    get_x,
    get_y,
    hausdorff_distance,
    length,
    project,
    project_normalized,
)

# 述語
from ufuncs.predicates import (
    contains,
    covered_by,
    covers,
    crosses,
    disjoint,
    equals,
    equals_exact,
    has_z,
    intersects,
    is_closed,
    is_empty,
    is_ring,
    is_simple,
    is_valid,
    overlaps,
    touches,
    within,
)

from .convert import from_shapely, to_shapely
from .ops import U

__all__ = [
    # メインAPI
    "U",  # 演算の名前空間
    "GeometryHandle",
    "GeoUfunc",
    "from_shapely",
    "to_shapely",
    "get_operation",
    "list_operations",
    "is_operation_registered",
    "setup_default_logging",
    # 例外
    "GeometryError",
    "InitializationFailed",
    "InvalidArgument",
    "NotAGeometryError",
    "EmptyGeometryError",
    "EngineOperationFailed",
    "EngineError",
    "AllocationFailed",
    "EngineNotice",
    # 生成
    "points",
    "linestrings",
    "linearrings",
    "polygons_without_holes",
    "polygons_with_holes",
    # ジオメトリを返す演算
    "clone",
    "envelope",
    "convex_hull",
    "boundary",
    "unary_union",
    "point_on_surface",
    "get_centroid",
    "line_merge",
    "extract_unique_points",
    "get_start_point",
    "get_end_point",
    "get_exterior_ring",
    "normalize",
    "get_interior_ring_n",
    "get_point_n",
    "get_geometry_n",
    "interpolate",
    "interpolate_normalized",
    "simplify",
    "topology_preserve_simplify",
    "intersection",
    "difference",
    "symmetric_difference",
    "union",
    "shared_paths",
    "buffer",
    "snap",
    # 計測・コード
    "get_x",
    "get_y",
    "area",
    "length",
    "get_length",
    "geom_type_id",
    "get_dimensions",
    "get_coordinate_dimensions",
    "get_srid",
    "get_num_geometries",
    "get_num_interior_rings",
    "get_num_points",
    "get_num_coordinates",
    "distance",
    "hausdorff_distance",
    "project",
    "project_normalized",
    # 述語
    "is_empty",
    "is_simple",
    "is_ring",
    "has_z",
    "is_closed",
    "is_valid",
    "disjoint",
    "touches",
    "intersects",
    "crosses",
    "within",
    "contains",
    "overlaps",
    "equals",
    "covers",
    "covered_by",
    "equals_exact",
]

# バージョン情報
__version__ = "0.1.0"
