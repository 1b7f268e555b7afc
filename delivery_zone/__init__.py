"""
Delivery Zone
=============

Bounded Context: Where a shop can deliver.

Architecture:

    delivery_zone/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # Coordinate, ServicePolygon
    │   ├── predicates.py  # orientation, on_segment, segments_intersect
    │   └── polygons.py    # point-in-polygon, polygon overlap
    │
    ├── distance.py        # Haversine distance in metres
    ├── resolver.py        # resolve_zone (consumer vs shop polygons)
    └── registry.py        # ServiceAreaRegistry (merchant zones, thread-safe)

Usage:

    from delivery_zone import Coordinate, ServicePolygon, resolve_zone

    square = ServicePolygon.from_coordinates([
        Coordinate(0, 0), Coordinate(10, 0), Coordinate(10, 10), Coordinate(0, 10),
    ])
    resolve_zone(Coordinate(5, 5), [square]).in_zone   # True
"""

from delivery_zone.geometry import (
    Coordinate,
    ServicePolygon,
    Orientation,
    orientation,
    on_segment,
    segments_intersect,
    is_point_inside_polygon,
    polygons_overlap,
    overlaps_existing,
)
from delivery_zone.distance import calculate_distance, distance_between
from delivery_zone.resolver import ZoneResolution, resolve_zone
from delivery_zone.registry import ManagedArea, ServiceAreaRegistry, ZoneOverlapError

__all__ = [
    # Geometry
    "Coordinate",
    "ServicePolygon",
    "Orientation",
    "orientation",
    "on_segment",
    "segments_intersect",
    "is_point_inside_polygon",
    "polygons_overlap",
    "overlaps_existing",
    # Distance
    "calculate_distance",
    "distance_between",
    # Resolution
    "ZoneResolution",
    "resolve_zone",
    # Merchant areas
    "ManagedArea",
    "ServiceAreaRegistry",
    "ZoneOverlapError",
]

__version__ = "1.0.0"
