"""
どこで: `engine.backend`（ジオメトリエンジン束縛。ディスパッチ層から見た外部協力者）。
何を: Shapely 2.x（GEOS）を、ポインタ＋明示解放の C API 形状で公開する。
なぜ: ハンドル層/座標列ビルダ/ディスパッチテンプレートが「エンジン所有の資源を
手動で確保・解放する」前提で書けるようにし、リークや二重解放を観測可能にするため。

データモデル:
- エンジン所有オブジェクトは整数ポインタ（>=1）で参照する。`None` が null ポインタ。
- 表 `_objects` の 1 エントリ = 1 つの確保。`destroy` でエントリが消える。
- Shapely のジオメトリは不変なので、`clone` は同じ実体を別ポインタで保持する（別所有）。

失敗の報告（GEOS の `_r` API と同じ流儀）:
- 失敗はコンテキストに登録されたエラーハンドラへメッセージで通知し、戻り値は番兵にする。
    - ポインタを返す関数: `None`
    - 真偽（三値）: `2`
    - 整数コード: `-1`
    - 出力引数に書く関数: 状態 `0`
    - 射影（`project*`）: `-1.0`
- 情報通知（例: 不正ジオメトリの理由）はノーティスハンドラへ送る。処理は継続する。

所有権:
- `create_point/linestring/linearring` は座標列の所有権を、`create_polygon` は殻と穴の
  所有権を、成否にかかわらず引き取る。呼び出し側は渡したポインタに再度触れてはならない。
"""

from __future__ import annotations

import functools
import itertools
import logging
from typing import Any, Callable, Sequence

import numpy as np
import shapely
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from common import settings as _settings

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, Any], None]

# GEOS の型 ID
POINT = 0
LINESTRING = 1
LINEARRING = 2
POLYGON = 3
MULTILINESTRING = 5


class EngineHandle:
    """エンジンのセッション（GEOS の context handle 相当）。

    エラー/ノーティスの各ハンドラを 1 つずつ保持し、登録時の user data を添えて呼び出す。
    """

    __slots__ = (
        "_error_handler",
        "_error_userdata",
        "_notice_handler",
        "_notice_userdata",
        "closed",
    )

    def __init__(self) -> None:
        self._error_handler: MessageHandler | None = None
        self._error_userdata: Any = None
        self._notice_handler: MessageHandler | None = None
        self._notice_userdata: Any = None
        self.closed = False

    def set_error_message_handler(self, handler: MessageHandler | None, userdata: Any = None) -> None:
        self._error_handler = handler
        self._error_userdata = userdata

    def set_notice_message_handler(
        self, handler: MessageHandler | None, userdata: Any = None
    ) -> None:
        self._notice_handler = handler
        self._notice_userdata = userdata

    def report_error(self, message: str) -> None:
        if self._error_handler is None:
            logger.error("engine error (no handler): %s", message)
            return
        self._error_handler(message, self._error_userdata)

    def report_notice(self, message: str) -> None:
        if self._notice_handler is None:
            logger.debug("engine notice (no handler): %s", message)
            return
        self._notice_handler(message, self._notice_userdata)


def init_r() -> EngineHandle:
    """新しいエンジンセッションを返す（ハンドラ未登録）。"""
    return EngineHandle()


def finish_r(handle: EngineHandle) -> None:
    """セッションを閉じる。以後のハンドラ呼び出しは行わない。"""
    handle.set_error_message_handler(None)
    handle.set_notice_message_handler(None)
    handle.closed = True


# ── エンジン所有オブジェクト表 ───────────────────────────


class _CoordSeq:
    """エンジン側の座標列バッファ（点数 × 次元、float64）。"""

    __slots__ = ("data",)

    def __init__(self, size: int, dims: int) -> None:
        self.data = np.zeros((size, dims), dtype=np.float64)


class _Fault(Exception):
    """エンジン内部の失敗。`_engine_call` がハンドラ通知＋番兵へ変換する。"""


_objects: dict[int, Any] = {}
_next_ptr = itertools.count(1)


def _alloc(obj: Any) -> int:
    ptr = next(_next_ptr)
    _objects[ptr] = obj
    if _settings.get().DEBUG_ALLOC:
        logger.debug("alloc %#x (%s)", ptr, type(obj).__name__)
    return ptr


def _is_pointer(ptr: Any) -> bool:
    # bool は int のサブクラスだがポインタではない
    return isinstance(ptr, (int, np.integer)) and not isinstance(ptr, bool)


def _deref(ptr: Any, kind: type = BaseGeometry) -> Any:
    if not _is_pointer(ptr):
        raise _Fault("IllegalArgumentException: Argument is not a pointer")
    obj = _objects.get(int(ptr))
    if obj is None:
        raise _Fault(f"IllegalArgumentException: Unknown pointer {ptr!r}")
    if not isinstance(obj, kind):
        raise _Fault(f"IllegalArgumentException: Pointer {ptr!r} is not a {kind.__name__}")
    return obj


def _take(ptr: Any, kind: type = BaseGeometry) -> Any:
    """所有権を引き取る（表から外して実体を返す）。"""
    obj = _deref(ptr, kind)
    del _objects[int(ptr)]
    if _settings.get().DEBUG_ALLOC:
        logger.debug("take %#x (%s)", int(ptr), type(obj).__name__)
    return obj


def _new_geometry(result: Any, what: str, source: BaseGeometry | None = None) -> int:
    if result is None or not isinstance(result, BaseGeometry):
        on = f" for {source.geom_type}" if source is not None else ""
        raise _Fault(f"IllegalArgumentException: {what} is not defined{on}")
    return _alloc(result)


def live_pointers() -> int:
    """生存中のエンジン所有オブジェクト数（ジオメトリ＋座標列）。"""
    return len(_objects)


def _engine_call(sentinel: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """エンジン関数の失敗をエラーハンドラ通知＋番兵の返却へ変換するデコレータ。"""

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def wrapper(handle: EngineHandle, *args: Any) -> Any:
            try:
                return fn(handle, *args)
            except (_Fault, GEOSException) as exc:
                handle.report_error(str(exc))
                return sentinel

        return wrapper

    return decorator


# ── 生成/複製/破棄/入出力 ────────────────────────────────


@_engine_call(None)
def clone(handle: EngineHandle, ptr: int) -> int | None:
    return _alloc(_deref(ptr))


def destroy(handle: EngineHandle, ptr: int) -> bool:
    """ジオメトリを破棄する。未知のポインタは False（二重解放の検出用）。"""
    obj = _objects.pop(int(ptr), None) if _is_pointer(ptr) else None
    if obj is None:
        logger.warning("destroy: unknown pointer %r (double free?)", ptr)
        return False
    if _settings.get().DEBUG_ALLOC:
        logger.debug("destroy %#x (%s)", ptr, type(obj).__name__)
    return True


@_engine_call(None)
def adopt(handle: EngineHandle, geom: BaseGeometry) -> int | None:
    """外部で作られた Shapely ジオメトリをエンジン所有にする。"""
    if not isinstance(geom, BaseGeometry):
        raise _Fault(f"IllegalArgumentException: Cannot adopt {type(geom).__name__}")
    return _alloc(geom)


@_engine_call(None)
def deref_geometry(handle: EngineHandle, ptr: int) -> BaseGeometry | None:
    return _deref(ptr)


# ── geom -> bool（三値: 0/1/2） ─────────────────────────


def _unary_predicate(name: str, fn: Callable[[BaseGeometry], Any]) -> Callable[..., int]:
    def call(handle: EngineHandle, ptr: int) -> int:
        return int(bool(fn(_deref(ptr))))

    call.__name__ = call.__qualname__ = name
    return _engine_call(2)(call)


is_empty = _unary_predicate("is_empty", shapely.is_empty)
is_simple = _unary_predicate("is_simple", shapely.is_simple)
is_ring = _unary_predicate("is_ring", shapely.is_ring)
has_z = _unary_predicate("has_z", shapely.has_z)
is_closed = _unary_predicate("is_closed", shapely.is_closed)


@_engine_call(2)
def is_valid(handle: EngineHandle, ptr: int) -> int:
    g = _deref(ptr)
    if shapely.is_valid(g):
        return 1
    # GEOS は不正の理由をノーティスとして流す
    handle.report_notice(str(shapely.is_valid_reason(g)))
    return 0


def _binary_predicate(name: str, fn: Callable[[BaseGeometry, BaseGeometry], Any]) -> Callable:
    def call(handle: EngineHandle, a: int, b: int) -> int:
        return int(bool(fn(_deref(a), _deref(b))))

    call.__name__ = call.__qualname__ = name
    return _engine_call(2)(call)


disjoint = _binary_predicate("disjoint", shapely.disjoint)
touches = _binary_predicate("touches", shapely.touches)
intersects = _binary_predicate("intersects", shapely.intersects)
crosses = _binary_predicate("crosses", shapely.crosses)
within = _binary_predicate("within", shapely.within)
contains = _binary_predicate("contains", shapely.contains)
overlaps = _binary_predicate("overlaps", shapely.overlaps)
equals = _binary_predicate("equals", shapely.equals)
covers = _binary_predicate("covers", shapely.covers)
covered_by = _binary_predicate("covered_by", shapely.covered_by)


@_engine_call(2)
def equals_exact(handle: EngineHandle, a: int, b: int, tolerance: float) -> int:
    return int(bool(shapely.equals_exact(_deref(a), _deref(b), tolerance=float(tolerance))))


# ── geom -> geom ─────────────────────────────────────────


def _unary_constructive(name: str, fn: Callable[[BaseGeometry], Any]) -> Callable:
    def call(handle: EngineHandle, ptr: int) -> int:
        g = _deref(ptr)
        return _new_geometry(fn(g), name, g)

    call.__name__ = call.__qualname__ = name
    return _engine_call(None)(call)


envelope = _unary_constructive("envelope", shapely.envelope)
convex_hull = _unary_constructive("convex_hull", shapely.convex_hull)
boundary = _unary_constructive("boundary", shapely.boundary)
unary_union = _unary_constructive("unary_union", shapely.union_all)
point_on_surface = _unary_constructive("point_on_surface", shapely.point_on_surface)
get_centroid = _unary_constructive("get_centroid", shapely.centroid)
line_merge = _unary_constructive("line_merge", shapely.line_merge)
extract_unique_points = _unary_constructive("extract_unique_points", shapely.extract_unique_points)
get_exterior_ring = _unary_constructive("get_exterior_ring", shapely.get_exterior_ring)
# shapely.normalize は新しいジオメトリを返す（入力は変更しない）
normalize = _unary_constructive("normalize", shapely.normalize)


def _linear_only(g: BaseGeometry, what: str) -> BaseGeometry:
    if shapely.get_type_id(g) not in (LINESTRING, LINEARRING):
        raise _Fault(f"IllegalArgumentException: {what}: Argument is not a LineString")
    return g


@_engine_call(None)
def get_start_point(handle: EngineHandle, ptr: int) -> int:
    g = _linear_only(_deref(ptr), "get_start_point")
    return _new_geometry(shapely.get_point(g, 0), "get_start_point", g)


@_engine_call(None)
def get_end_point(handle: EngineHandle, ptr: int) -> int:
    g = _linear_only(_deref(ptr), "get_end_point")
    return _new_geometry(shapely.get_point(g, -1), "get_end_point", g)


@_engine_call(None)
def linearring_to_polygon(handle: EngineHandle, ptr: int) -> int | None:
    """リングを穴なしポリゴンへ。リングは複製してから殻として渡す。"""
    shell = clone(handle, ptr)
    if shell is None:
        return None
    return create_polygon(handle, shell, ())


# ── geom, int -> geom ────────────────────────────────────


def _indexed(name: str, fn: Callable[[BaseGeometry, int], Any]) -> Callable:
    def call(handle: EngineHandle, ptr: int, index: int) -> int:
        g = _deref(ptr)
        if index < 0:
            raise _Fault(f"IllegalArgumentException: {name}: Index must be non-negative")
        return _new_geometry(fn(g, int(index)), name, g)

    call.__name__ = call.__qualname__ = name
    return _engine_call(None)(call)


get_interior_ring_n = _indexed("get_interior_ring_n", shapely.get_interior_ring)
get_geometry_n = _indexed("get_geometry_n", shapely.get_geometry)


@_engine_call(None)
def get_point_n(handle: EngineHandle, ptr: int, index: int) -> int:
    g = _linear_only(_deref(ptr), "get_point_n")
    if index < 0:
        raise _Fault("IllegalArgumentException: get_point_n: Index must be non-negative")
    return _new_geometry(shapely.get_point(g, int(index)), "get_point_n", g)


# ── geom, double -> geom ─────────────────────────────────


@_engine_call(None)
def interpolate(handle: EngineHandle, ptr: int, distance: float) -> int:
    g = _deref(ptr)
    return _new_geometry(shapely.line_interpolate_point(g, float(distance)), "interpolate", g)


@_engine_call(None)
def interpolate_normalized(handle: EngineHandle, ptr: int, fraction: float) -> int:
    g = _deref(ptr)
    res = shapely.line_interpolate_point(g, float(fraction), normalized=True)
    return _new_geometry(res, "interpolate_normalized", g)


@_engine_call(None)
def simplify(handle: EngineHandle, ptr: int, tolerance: float) -> int:
    g = _deref(ptr)
    res = shapely.simplify(g, float(tolerance), preserve_topology=False)
    return _new_geometry(res, "simplify", g)


@_engine_call(None)
def topology_preserve_simplify(handle: EngineHandle, ptr: int, tolerance: float) -> int:
    g = _deref(ptr)
    res = shapely.simplify(g, float(tolerance), preserve_topology=True)
    return _new_geometry(res, "topology_preserve_simplify", g)


# ── geom, geom -> geom ───────────────────────────────────


def _binary_constructive(name: str, fn: Callable[[BaseGeometry, BaseGeometry], Any]) -> Callable:
    def call(handle: EngineHandle, a: int, b: int) -> int:
        ga = _deref(a)
        return _new_geometry(fn(ga, _deref(b)), name, ga)

    call.__name__ = call.__qualname__ = name
    return _engine_call(None)(call)


intersection = _binary_constructive("intersection", shapely.intersection)
difference = _binary_constructive("difference", shapely.difference)
symmetric_difference = _binary_constructive("symmetric_difference", shapely.symmetric_difference)
union = _binary_constructive("union", shapely.union)
shared_paths = _binary_constructive("shared_paths", shapely.shared_paths)


@_engine_call(None)
def buffer(handle: EngineHandle, ptr: int, width: float, quadsegs: int) -> int:
    g = _deref(ptr)
    return _new_geometry(shapely.buffer(g, float(width), quad_segs=int(quadsegs)), "buffer", g)


@_engine_call(None)
def snap(handle: EngineHandle, a: int, b: int, tolerance: float) -> int:
    ga = _deref(a)
    return _new_geometry(shapely.snap(ga, _deref(b), float(tolerance)), "snap", ga)


# ── geom -> double（出力引数へ書き込み、状態 1/0） ─────────


def _measure(name: str, fn: Callable[[BaseGeometry], Any]) -> Callable:
    def call(handle: EngineHandle, ptr: int, out: np.ndarray) -> int:
        out[()] = float(fn(_deref(ptr)))
        return 1

    call.__name__ = call.__qualname__ = name
    return _engine_call(0)(call)


area = _measure("area", shapely.area)
length = _measure("length", shapely.length)


def _point_only(g: BaseGeometry, what: str) -> BaseGeometry:
    if shapely.get_type_id(g) != POINT:
        raise _Fault(f"IllegalArgumentException: {what}: Argument is not a Point")
    if g.is_empty:
        raise _Fault(f"IllegalArgumentException: {what} called on empty Point")
    return g


@_engine_call(0)
def get_x(handle: EngineHandle, ptr: int, out: np.ndarray) -> int:
    out[()] = float(shapely.get_x(_point_only(_deref(ptr), "get_x")))
    return 1


@_engine_call(0)
def get_y(handle: EngineHandle, ptr: int, out: np.ndarray) -> int:
    out[()] = float(shapely.get_y(_point_only(_deref(ptr), "get_y")))
    return 1


@_engine_call(0)
def get_length(handle: EngineHandle, ptr: int, out: np.ndarray) -> int:
    out[()] = float(shapely.length(_linear_only(_deref(ptr), "get_length")))
    return 1


def _binary_measure(name: str, fn: Callable[[BaseGeometry, BaseGeometry], Any]) -> Callable:
    def call(handle: EngineHandle, a: int, b: int, out: np.ndarray) -> int:
        value = float(fn(_deref(a), _deref(b)))
        if np.isnan(value):
            raise _Fault(f"IllegalArgumentException: {name} is undefined for empty geometries")
        out[()] = value
        return 1

    call.__name__ = call.__qualname__ = name
    return _engine_call(0)(call)


distance = _binary_measure("distance", shapely.distance)
hausdorff_distance = _binary_measure("hausdorff_distance", shapely.hausdorff_distance)


# ── geom, geom -> double（直接返却、番兵 -1.0） ───────────


def _projection(name: str, normalized: bool) -> Callable:
    def call(handle: EngineHandle, line: int, point: int) -> float:
        pt = _deref(point)
        if shapely.get_type_id(pt) != POINT:
            raise _Fault(f"IllegalArgumentException: {name}: second argument must be a Point")
        return float(shapely.line_locate_point(_deref(line), pt, normalized=normalized))

    call.__name__ = call.__qualname__ = name
    return _engine_call(-1.0)(call)


project = _projection("project", False)
project_normalized = _projection("project_normalized", True)


# ── geom -> 整数コード（番兵 -1） ─────────────────────────


def _code(name: str, fn: Callable[[BaseGeometry], Any]) -> Callable:
    def call(handle: EngineHandle, ptr: int) -> int:
        return int(fn(_deref(ptr)))

    call.__name__ = call.__qualname__ = name
    return _engine_call(-1)(call)


geom_type_id = _code("geom_type_id", shapely.get_type_id)
get_dimensions = _code("get_dimensions", shapely.get_dimensions)
get_coordinate_dimensions = _code("get_coordinate_dimensions", shapely.get_coordinate_dimension)
get_srid = _code("get_srid", shapely.get_srid)
get_num_geometries = _code("get_num_geometries", shapely.get_num_geometries)
get_num_coordinates = _code("get_num_coordinates", shapely.get_num_coordinates)


@_engine_call(-1)
def get_num_interior_rings(handle: EngineHandle, ptr: int) -> int:
    g = _deref(ptr)
    if shapely.get_type_id(g) != POLYGON:
        raise _Fault("IllegalArgumentException: Argument is not a Polygon")
    return int(shapely.get_num_interior_rings(g))


@_engine_call(-1)
def get_num_points(handle: EngineHandle, ptr: int) -> int:
    return int(shapely.get_num_points(_linear_only(_deref(ptr), "get_num_points")))


# ── 座標列 ───────────────────────────────────────────────


@_engine_call(None)
def coordseq_create(handle: EngineHandle, size: int, dims: int) -> int:
    if dims not in (2, 3):
        raise _Fault(f"IllegalArgumentException: Unsupported coordinate dimension {dims}")
    if size < 0:
        raise _Fault(f"IllegalArgumentException: Negative sequence size {size}")
    return _alloc(_CoordSeq(int(size), int(dims)))


@_engine_call(0)
def coordseq_set_ordinate(
    handle: EngineHandle, seq: int, index: int, dim: int, value: float
) -> int:
    data = _deref(seq, _CoordSeq).data
    if not (0 <= index < data.shape[0]) or not (0 <= dim < data.shape[1]):
        raise _Fault(f"IllegalArgumentException: Index ({index}, {dim}) out of bounds")
    data[index, dim] = value
    return 1


@_engine_call(-1)
def coordseq_get_size(handle: EngineHandle, seq: int) -> int:
    return int(_deref(seq, _CoordSeq).data.shape[0])


def coordseq_destroy(handle: EngineHandle, seq: int) -> bool:
    return destroy(handle, seq)


def _construct(what: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> int:
    # Shapely は座標配列の形の不備を ValueError で返す
    try:
        result = fn(*args, **kwargs)
    except ValueError as exc:
        raise _Fault(f"IllegalArgumentException: {exc}") from exc
    return _new_geometry(result, what)


@_engine_call(None)
def create_point(handle: EngineHandle, seq: int) -> int:
    data = _take(seq, _CoordSeq).data
    if data.shape[0] != 1:
        raise _Fault(f"IllegalArgumentException: Point requires 1 coordinate, got {data.shape[0]}")
    return _construct("create_point", shapely.points, data[0])


@_engine_call(None)
def create_linestring(handle: EngineHandle, seq: int) -> int:
    data = _take(seq, _CoordSeq).data
    if data.shape[0] == 1:
        raise _Fault("IllegalArgumentException: point array must contain 0 or >1 elements")
    return _construct("create_linestring", shapely.linestrings, data)


@_engine_call(None)
def create_linearring(handle: EngineHandle, seq: int) -> int:
    data = _take(seq, _CoordSeq).data
    n = data.shape[0]
    # 4 点未満のリングは補完せずに拒否する
    if 0 < n < 4:
        raise _Fault(
            f"IllegalArgumentException: Invalid number of points in LinearRing found {n} "
            "- must be 0 or >= 4"
        )
    if n > 0 and not np.array_equal(data[0], data[-1]):
        raise _Fault("IllegalArgumentException: Points of LinearRing do not form a closed linestring")
    return _construct("create_linearring", shapely.linearrings, data)


@_engine_call(None)
def create_polygon(handle: EngineHandle, shell: int, holes: Sequence[int]) -> int:
    # 成否にかかわらず全ポインタの所有権を引き取る
    ptrs = [shell, *holes]
    parts: list[BaseGeometry] = []
    faults: list[str] = []
    for p in ptrs:
        try:
            parts.append(_take(p))
        except _Fault as exc:
            faults.append(str(exc))
    if faults:
        raise _Fault(faults[0])
    for part in parts:
        if shapely.get_type_id(part) != LINEARRING:
            raise _Fault("IllegalArgumentException: Polygon rings must be LinearRings")
    rings = parts[1:]
    return _construct("create_polygon", shapely.polygons, parts[0], holes=rings if rings else None)
