from __future__ import annotations

import numpy as np
import pytest
import shapely

from api import from_shapely
from ufuncs import predicates as P


def test_unary_predicates_elementwise() -> None:
    geoms = from_shapely(
        [
            shapely.Point(0, 0),
            shapely.LineString([(0, 0), (1, 1), (1, 0), (0, 1)]),
            shapely.LinearRing([(0, 0), (1, 0), (1, 1)]),
            shapely.GeometryCollection(),
        ]
    )
    assert P.is_empty(geoms).tolist() == [False, False, False, True]
    assert P.is_simple(geoms)[:3].tolist() == [True, False, True]
    assert P.is_ring(geoms)[:3].tolist() == [False, False, True]
    assert P.is_empty(geoms).dtype == np.bool_


def test_has_z_and_is_closed() -> None:
    geoms = from_shapely(
        [shapely.Point(0, 0, 1), shapely.LineString([(0, 0), (1, 1), (0, 0)])]
    )
    assert P.has_z(geoms).tolist() == [True, False]
    assert bool(P.is_closed(geoms[1])) is True


def test_binary_predicates(square) -> None:
    inner = from_shapely(shapely.Point(0.5, 0.5))
    far = from_shapely(shapely.Point(5, 5))
    others = np.array([inner, far], dtype=object)
    assert P.intersects(square, others).tolist() == [True, False]
    assert P.disjoint(square, others).tolist() == [False, True]
    assert P.contains(square, others).tolist() == [True, False]
    assert P.within(others, square).tolist() == [True, False]
    assert P.covers(square, others).tolist() == [True, False]
    assert P.covered_by(others, square).tolist() == [True, False]


def test_touches_crosses_overlaps() -> None:
    a = from_shapely(shapely.box(0, 0, 1, 1))
    b = from_shapely(shapely.box(1, 0, 2, 1))
    c = from_shapely(shapely.box(0.5, 0.5, 1.5, 1.5))
    diag = from_shapely(shapely.LineString([(-1, -1), (2, 2)]))
    assert P.touches(a, b)
    assert not P.touches(a, c)
    assert P.overlaps(a, c)
    assert P.crosses(diag, a)


def test_equals_topological_and_exact() -> None:
    a = from_shapely(shapely.LineString([(0, 0), (2, 0)]))
    b = from_shapely(shapely.LineString([(0, 0), (1, 0), (2, 0)]))
    assert P.equals(a, b)
    assert not P.equals_exact(a, b, 0.0)
    shifted = from_shapely(shapely.LineString([(0, 0.05), (2, 0)]))
    assert P.equals_exact(a, shifted, np.array([0.1, 0.01])).tolist() == [True, False]


def test_is_valid_returns_bool_array(square) -> None:
    out = P.is_valid(np.array([square, square], dtype=object))
    assert out.tolist() == [True, True]
