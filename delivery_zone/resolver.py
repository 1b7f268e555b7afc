"""
Zone Resolver Module
====================

Decides whether a consumer coordinate falls inside a shop's service area.

Rules:
- No usable polygons: unconstrained, distance rules alone govern reach
- Degenerate polygons (< 3 vertices) are treated as absent
- Otherwise in zone iff some polygon contains the point
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from delivery_zone.geometry.polygons import PolygonLike, is_point_inside_polygon
from delivery_zone.geometry.shapes import Coordinate, as_coordinates


@dataclass(frozen=True)
class ZoneResolution:
    """
    Outcome of zone resolution.

    Attributes:
        in_zone: Consumer is deliverable as far as geometry is concerned
        matched_index: Index of the first containing polygon, None when
                       unconstrained or out of zone
        constrained: False when the shop has no usable polygons
    """

    in_zone: bool
    matched_index: Optional[int] = None
    constrained: bool = True


def resolve_zone(consumer: Coordinate, shop_polygons: Sequence[PolygonLike]) -> ZoneResolution:
    """
    Resolve consumer containment against a shop's service areas.

    Args:
        consumer: Consumer coordinate
        shop_polygons: The shop's service-area rings (may be empty)

    Returns:
        ZoneResolution
    """
    usable = [
        (index, ring)
        for index, ring in enumerate(as_coordinates(p) for p in shop_polygons)
        if len(ring) >= 3
    ]
    if not usable:
        return ZoneResolution(in_zone=True, constrained=False)

    for index, ring in usable:
        if is_point_inside_polygon(consumer, ring):
            return ZoneResolution(in_zone=True, matched_index=index)

    return ZoneResolution(in_zone=False)
