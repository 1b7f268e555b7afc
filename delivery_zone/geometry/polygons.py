"""
Polygon Queries Module
======================

Containment and overlap over service-area rings.

Design:
- Pure functions (no state, no I/O)
- Accept ServicePolygon or any sequence of Coordinates
- Degenerate rings (< 3 vertices) contain nothing and overlap nothing

Known limitation:
    polygons_overlap() samples only vertex 0 of each ring for the nested
    case. A concave ring nested inside another without vertex 0 inside can
    be missed. This is the behaviour merchant zone validation relies on; a
    polygon clipping algorithm would be needed for a full decision.
"""

import numpy as np
from typing import Iterable, Sequence, Union

from delivery_zone.geometry.predicates import EPSILON, segments_intersect
from delivery_zone.geometry.shapes import Coordinate, ServicePolygon, as_coordinates

PolygonLike = Union[ServicePolygon, Sequence[Coordinate]]


def is_point_inside_polygon(point: Coordinate, polygon: PolygonLike) -> bool:
    """
    Even-odd ray casting with a rightward horizontal ray.

    Args:
        point: Coordinate to test
        polygon: Ring with implicit closing edge

    Returns:
        True if inside. Boundary points are not guaranteed either way.
    """
    ring = as_coordinates(polygon)
    n = len(ring)
    if n < 3:
        return False

    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = ring[i].longitude, ring[i].latitude
        xj, yj = ring[j].longitude, ring[j].latitude

        crosses = (yi > point.latitude) != (yj > point.latitude)
        if crosses and point.longitude < (xj - xi) * (point.latitude - yi) / (yj - yi + EPSILON) + xi:
            inside = not inside

        j = i

    return inside


def _bounds(ring: Sequence[Coordinate]) -> np.ndarray:
    """[min_lon, min_lat, max_lon, max_lat] of a non-empty ring."""
    xy = np.array([(c.longitude, c.latitude) for c in ring], dtype=float)
    return np.concatenate([xy.min(axis=0), xy.max(axis=0)])


def bounds_disjoint(a: Sequence[Coordinate], b: Sequence[Coordinate]) -> bool:
    """True if the epsilon-inflated bounding boxes of a and b do not touch."""
    ba, bb = _bounds(a), _bounds(b)
    return bool(
        ba[2] + EPSILON < bb[0]
        or bb[2] + EPSILON < ba[0]
        or ba[3] + EPSILON < bb[1]
        or bb[3] + EPSILON < ba[1]
    )


def polygons_overlap(a: PolygonLike, b: PolygonLike) -> bool:
    """
    Approximate overlap test between two rings.

    True iff any edge of a intersects any edge of b, or a's first vertex is
    inside b, or b's first vertex is inside a. Shared edges count.
    """
    ring_a = as_coordinates(a)
    ring_b = as_coordinates(b)
    if len(ring_a) < 3 or len(ring_b) < 3:
        return False

    # Disjoint boxes rule out every branch below
    if bounds_disjoint(ring_a, ring_b):
        return False

    n_a, n_b = len(ring_a), len(ring_b)
    for i in range(n_a):
        a_start, a_end = ring_a[i], ring_a[(i + 1) % n_a]
        for j in range(n_b):
            if segments_intersect(a_start, a_end, ring_b[j], ring_b[(j + 1) % n_b]):
                return True

    if is_point_inside_polygon(ring_a[0], ring_b):
        return True

    if is_point_inside_polygon(ring_b[0], ring_a):
        return True

    return False


def overlaps_existing(polygon: PolygonLike, existing: Iterable[PolygonLike]) -> bool:
    """True if polygon overlaps any ring in existing."""
    return any(polygons_overlap(polygon, other) for other in existing)
