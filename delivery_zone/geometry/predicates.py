"""
Geometric Predicates Module
===========================

Exact-ish planar predicates over (longitude, latitude).

Design:
- Pure functions (no state, no I/O)
- Machine-epsilon tolerance band on every comparison
- Shared boundaries between zones count as intersecting

The epsilon is sys.float_info.epsilon. A coarser tolerance would let
adjacent merchants' shared edges report as non-overlapping.
"""

import sys
from enum import IntEnum

from delivery_zone.geometry.shapes import Coordinate

EPSILON = sys.float_info.epsilon


class Orientation(IntEnum):
    """Turn direction of an ordered point triple."""

    COLLINEAR = 0
    CLOCKWISE = 1
    COUNTER_CLOCKWISE = 2

    def __neg__(self) -> "Orientation":
        """Reverse the turn (collinear stays collinear)."""
        if self is Orientation.CLOCKWISE:
            return Orientation.COUNTER_CLOCKWISE
        if self is Orientation.COUNTER_CLOCKWISE:
            return Orientation.CLOCKWISE
        return Orientation.COLLINEAR


def cross(p: Coordinate, q: Coordinate, r: Coordinate) -> float:
    """2-D cross product (q - p) x (r - p) in (longitude, latitude) space."""
    return (
        (q.longitude - p.longitude) * (r.latitude - p.latitude)
        - (q.latitude - p.latitude) * (r.longitude - p.longitude)
    )


def orientation(p: Coordinate, q: Coordinate, r: Coordinate) -> Orientation:
    """
    Classify the triple (p, q, r).

    Returns:
        COLLINEAR when |cross| < epsilon, CLOCKWISE for a positive cross
        product, COUNTER_CLOCKWISE for a negative one
    """
    value = cross(p, q, r)
    if abs(value) < EPSILON:
        return Orientation.COLLINEAR
    return Orientation.CLOCKWISE if value > 0 else Orientation.COUNTER_CLOCKWISE


def on_segment(p: Coordinate, q: Coordinate, r: Coordinate) -> bool:
    """True if q lies in the bounding box of segment p-r, inflated by epsilon."""
    return (
        q.longitude <= max(p.longitude, r.longitude) + EPSILON
        and q.longitude + EPSILON >= min(p.longitude, r.longitude)
        and q.latitude <= max(p.latitude, r.latitude) + EPSILON
        and q.latitude + EPSILON >= min(p.latitude, r.latitude)
    )


def segments_intersect(p1: Coordinate, q1: Coordinate, p2: Coordinate, q2: Coordinate) -> bool:
    """
    Test whether segment p1-q1 intersects segment p2-q2.

    General case: each segment's endpoints fall on different sides of the
    other. Four collinear cases cover touching and overlapping segments.
    """
    o1 = orientation(p1, q1, p2)
    o2 = orientation(p1, q1, q2)
    o3 = orientation(p2, q2, p1)
    o4 = orientation(p2, q2, q1)

    if o1 != o2 and o3 != o4:
        return True

    # p2 on p1-q1
    if o1 == Orientation.COLLINEAR and on_segment(p1, p2, q1):
        return True
    # q2 on p1-q1
    if o2 == Orientation.COLLINEAR and on_segment(p1, q2, q1):
        return True
    # p1 on p2-q2
    if o3 == Orientation.COLLINEAR and on_segment(p2, p1, q2):
        return True
    # q1 on p2-q2
    if o4 == Orientation.COLLINEAR and on_segment(p2, q1, q2):
        return True

    return False
