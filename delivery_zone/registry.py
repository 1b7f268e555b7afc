"""
Service Area Registry - Thread-safe merchant zone management.

This module provides the ServiceAreaRegistry class which holds each shop's
service-area polygons and enforces the merchant-side rule that one shop's
areas never overlap each other. Pricing reads polygons from here through
polygons_for(); it never enforces non-overlap itself.

Thread Safety:
- Uses threading.Lock for protecting the area dict
- Snapshot pattern for read queries to minimize lock holding time
- ServicePolygon objects are immutable (frozen dataclass)
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from delivery_zone.geometry import Coordinate, ServicePolygon
from delivery_zone.geometry.polygons import is_point_inside_polygon, overlaps_existing

logger = logging.getLogger(__name__)


class ZoneOverlapError(ValueError):
    """Raised when a new service area overlaps one of the shop's existing areas."""
    pass


@dataclass(frozen=True)
class ManagedArea:
    """
    A service area owned by one shop.

    Attributes:
        area_id: Unique identifier within the shop
        shop_id: Owning shop
        polygon: Ring geometry
        label: Merchant-facing name
    """

    area_id: str
    shop_id: str
    polygon: ServicePolygon
    label: str = "Delivery area"


class ServiceAreaRegistry:
    """
    Thread-safe registry of service areas, keyed by shop then area id.

    Overlap is checked per shop only: neighbouring merchants may share
    boundaries.

    Usage:
        registry = ServiceAreaRegistry()
        registry.add_area("shop-1", "north", ServicePolygon.from_coordinates(ring))

        polygons = registry.polygons_for("shop-1")
        shop_ids = registry.shops_covering(Coordinate(latitude=24.86, longitude=67.01))
    """

    def __init__(self):
        """Initialize empty registry."""
        self._areas: Dict[str, Dict[str, ManagedArea]] = {}
        self._lock = threading.Lock()

    def add_area(
        self,
        shop_id: str,
        area_id: str,
        polygon: ServicePolygon,
        label: Optional[str] = None,
    ) -> ManagedArea:
        """
        Add a service area to a shop.

        Raises:
            ValueError: If polygon has fewer than 3 vertices or area_id exists
            ZoneOverlapError: If polygon overlaps another area of the shop
        """
        if polygon.is_degenerate:
            raise ValueError(
                f"Area '{area_id}' must have at least 3 points, got {len(polygon)}"
            )

        area = ManagedArea(
            area_id=area_id,
            shop_id=shop_id,
            polygon=polygon,
            label=label or "Delivery area",
        )

        with self._lock:
            shop_areas = self._areas.setdefault(shop_id, {})
            if area_id in shop_areas:
                raise ValueError(f"Area '{area_id}' already exists for shop '{shop_id}'")
            self._check_overlap(shop_id, area_id, polygon, shop_areas.values())
            shop_areas[area_id] = area

        logger.info(f"Added area '{area_id}' to shop '{shop_id}' ({len(polygon)} vertices)")
        return area

    def update_area(self, shop_id: str, area_id: str, polygon: ServicePolygon) -> ManagedArea:
        """
        Replace an area's geometry, keeping its label.

        The overlap check ignores the area being replaced.

        Raises:
            KeyError: If the area does not exist
            ValueError: If polygon has fewer than 3 vertices
            ZoneOverlapError: If polygon overlaps another area of the shop
        """
        if polygon.is_degenerate:
            raise ValueError(
                f"Area '{area_id}' must have at least 3 points, got {len(polygon)}"
            )

        with self._lock:
            shop_areas = self._areas.get(shop_id, {})
            if area_id not in shop_areas:
                raise KeyError(f"Area '{area_id}' not found for shop '{shop_id}'")
            others = [a for a in shop_areas.values() if a.area_id != area_id]
            self._check_overlap(shop_id, area_id, polygon, others)
            area = ManagedArea(
                area_id=area_id,
                shop_id=shop_id,
                polygon=polygon,
                label=shop_areas[area_id].label,
            )
            shop_areas[area_id] = area

        logger.info(f"Updated area '{area_id}' of shop '{shop_id}'")
        return area

    def remove_area(self, shop_id: str, area_id: str) -> None:
        """
        Remove a service area.

        Raises:
            KeyError: If the area does not exist
        """
        with self._lock:
            shop_areas = self._areas.get(shop_id, {})
            if area_id not in shop_areas:
                raise KeyError(f"Area '{area_id}' not found for shop '{shop_id}'")
            del shop_areas[area_id]
            if not shop_areas:
                del self._areas[shop_id]

        logger.info(f"Removed area '{area_id}' from shop '{shop_id}'")

    def list_areas(self, shop_id: str) -> List[ManagedArea]:
        """Snapshot of a shop's areas in insertion order."""
        with self._lock:
            return list(self._areas.get(shop_id, {}).values())

    def polygons_for(self, shop_id: str) -> List[ServicePolygon]:
        """Snapshot of a shop's polygons, ready for zone resolution."""
        return [area.polygon for area in self.list_areas(shop_id)]

    def shops_covering(self, point: Coordinate) -> List[str]:
        """
        Shop ids with at least one area containing point.

        Bounding boxes are checked before the ray cast.
        """
        with self._lock:
            snapshot = {
                shop_id: list(areas.values())
                for shop_id, areas in self._areas.items()
            }

        covering: List[str] = []
        for shop_id, areas in snapshot.items():
            for area in areas:
                min_x, min_y, max_x, max_y = area.polygon.bounds
                if not (min_x <= point.longitude <= max_x and min_y <= point.latitude <= max_y):
                    continue
                if is_point_inside_polygon(point, area.polygon):
                    covering.append(shop_id)
                    break

        return covering

    def _check_overlap(self, shop_id, area_id, polygon, existing) -> None:
        """Raise ZoneOverlapError if polygon overlaps any of existing. Caller holds lock."""
        if overlaps_existing(polygon, [a.polygon for a in existing]):
            logger.warning(f"Rejected area '{area_id}' for shop '{shop_id}': overlaps an existing area")
            raise ZoneOverlapError(
                f"Area '{area_id}' overlaps an existing area of shop '{shop_id}'. "
                f"Adjust the boundary so that zones do not overlap."
            )

    def __len__(self) -> int:
        """Return total number of areas across shops."""
        with self._lock:
            return sum(len(areas) for areas in self._areas.values())

    def __repr__(self) -> str:
        return f"ServiceAreaRegistry(shops={len(self._areas)}, areas={len(self)})"
