"""
Geometry Layer
==============

Bounded Context: Pure geographic shapes and spatial predicates.

Responsibilities:
- Shape representation (immutable)
- Orientation and segment intersection
- Point-in-polygon tests
- Polygon overlap checks for zone validation
- NO state, NO logging, NO pricing

Design Philosophy:
- Pure functions where possible
- Immutable data structures
- Degenerate input answers False instead of raising
"""

from delivery_zone.geometry.shapes import Coordinate, ServicePolygon
from delivery_zone.geometry.predicates import (
    EPSILON,
    Orientation,
    orientation,
    on_segment,
    segments_intersect,
)
from delivery_zone.geometry.polygons import (
    is_point_inside_polygon,
    polygons_overlap,
    overlaps_existing,
)

__all__ = [
    "Coordinate",
    "ServicePolygon",
    "EPSILON",
    "Orientation",
    "orientation",
    "on_segment",
    "segments_intersect",
    "is_point_inside_polygon",
    "polygons_overlap",
    "overlaps_existing",
]
