from __future__ import annotations

import numpy as np
import pytest
import shapely

from api import to_shapely
from engine.errors import (
    AllocationFailed,
    EmptyGeometryError,
    EngineError,
    EngineOperationFailed,
    NotAGeometryError,
)
from ufuncs import construction as K
from ufuncs import constructive as C
from ufuncs import measurement as M
from ufuncs import predicates as P


def test_points_from_rows() -> None:
    pts = K.points(np.array([[0.0, 1.0], [2.0, 3.0]]))
    assert pts.shape == (2,)
    assert M.get_x(pts).tolist() == [0.0, 2.0]
    assert M.get_y(pts).tolist() == [1.0, 3.0]


def test_points_3d_and_integer_input() -> None:
    p = K.points([1, 2, 3])
    assert p.has_z
    assert M.geom_type_id(p) == 0
    assert to_shapely(p).equals(shapely.Point(1, 2, 3))


def test_linestring_end_to_end() -> None:
    line = K.linestrings(np.array([[0, 0], [1, 1], [2, 2]], dtype=float))
    assert M.get_num_points(line) == 3


def test_linestrings_equality_over_pair() -> None:
    a = K.linestrings([[0, 0], [1, 1]])
    b = K.linestrings([[0, 0], [1, 0]])
    assert P.equals(a, b) == False  # noqa: E712


def test_linestrings_batch_shape() -> None:
    coords = np.arange(2 * 3 * 4 * 2, dtype=float).reshape(2, 3, 4, 2)
    lines = K.linestrings(coords)
    assert lines.shape == (2, 3)
    assert (M.get_num_points(lines) == 4).all()


def test_linearring_already_closed_keeps_count() -> None:
    ring = K.linearrings([[0, 0], [1, 0], [1, 1], [0, 0]])
    assert M.get_num_points(ring) == 4


def test_linearring_is_closed_when_open() -> None:
    ring = K.linearrings([[0, 0], [1, 0], [1, 1]])
    assert M.get_num_points(ring) == 4
    last = C.get_point_n(ring, 3)
    assert (M.get_x(last), M.get_y(last)) == (0.0, 0.0)
    assert P.is_ring(ring)


def test_linearring_closure_checks_every_dimension() -> None:
    ring = K.linearrings([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 0, 5]])
    assert M.get_num_points(ring) == 5


@pytest.mark.parametrize(
    "coords",
    [
        [[0, 0], [1, 0]],
        [[0, 0], [1, 0], [0, 0]],
        [[0, 0, 0], [1, 0, 0], [0, 0, 0]],
    ],
)
def test_linearring_too_short_fails_without_leak(coords, live_pointers) -> None:
    # 閉合後も 4 点未満のリングは補完されずに失敗する
    before = live_pointers()
    with pytest.raises(EngineError, match="must be 0 or >= 4"):
        K.linearrings(coords)
    assert live_pointers() == before


def test_polygons_without_holes(ring) -> None:
    poly = K.polygons_without_holes(ring)
    assert poly.geom_type_id == 3
    assert M.area(poly) == pytest.approx(100.0)
    assert ring.is_usable()


def test_polygons_without_holes_rejects_non_ring(line) -> None:
    with pytest.raises(EngineOperationFailed):
        K.polygons_without_holes(line)


def test_polygons_with_holes_clones_inputs(ring, live_pointers) -> None:
    hole = K.linearrings([[2, 2], [4, 2], [4, 4], [2, 4]])
    holes = np.array([hole], dtype=object)
    before = live_pointers()
    poly = K.polygons_with_holes(ring, holes)
    assert live_pointers() == before + 1
    assert M.area(poly) == pytest.approx(96.0)
    assert M.get_num_interior_rings(poly) == 1
    # 呼び出し側のハンドルはそのまま使える
    assert ring.is_usable() and hole.is_usable()
    assert M.get_num_points(hole) == 5


def test_polygons_with_holes_broadcasts_shells(ring) -> None:
    shells = np.array([ring, ring, ring], dtype=object)
    holes = np.empty((3, 0), dtype=object)
    polys = K.polygons_with_holes(shells, holes)
    assert polys.shape == (3,)
    assert M.area(polys).tolist() == pytest.approx([100.0] * 3)


def test_polygons_with_holes_empty_hole_releases_clones(ring, live_pointers) -> None:
    good = K.linearrings([[2, 2], [4, 2], [4, 4], [2, 4]])
    bad = K.linearrings([[5, 5], [6, 5], [6, 6]])
    bad.release()
    holes = np.array([good, bad], dtype=object)
    before = live_pointers()
    with pytest.raises(EmptyGeometryError):
        K.polygons_with_holes(ring, holes)
    assert live_pointers() == before


def test_polygons_with_holes_rejects_non_handle(ring) -> None:
    with pytest.raises(NotAGeometryError):
        K.polygons_with_holes(ring, np.array([1.0], dtype=object))


def test_construction_signatures() -> None:
    assert K.points.signature == "(d)->()"
    assert K.linestrings.signature == "(i,d)->()"
    assert K.linearrings.signature == "(i,d)->()"
    assert K.polygons_with_holes.signature == "(),(i)->()"
    assert K.polygons_without_holes.signature is None


def test_core_dimension_requirements() -> None:
    with pytest.raises(ValueError):
        K.linestrings(np.zeros(3))
    with pytest.raises(AllocationFailed):
        K.points(np.zeros((2, 1)))
