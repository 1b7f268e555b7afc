"""
Geographic Shapes Module
========================

Pure geographic representations - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Vertices kept as a read-only Nx2 array of (longitude, latitude)
- Planar XY treatment of (longitude, latitude) for all predicates
- Closing vertex is implicit, never stored
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple


@dataclass(frozen=True)
class Coordinate:
    """
    Immutable WGS84 coordinate in decimal degrees.

    No range validation: out-of-range values still flow through the
    geometry predicates, the results are simply meaningless.

    Attributes:
        latitude: Degrees north, expected in [-90, 90]
        longitude: Degrees east, expected in [-180, 180]
    """

    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, float]:
        """Serialize to JSON-compatible dict."""
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coordinate":
        """
        Deserialize from dict.

        Accepts ``latitude``/``longitude`` or the short ``lat``/``lng`` keys.

        Raises:
            ValueError: If keys are missing or values are not numeric
        """
        try:
            lat = data["latitude"] if "latitude" in data else data["lat"]
            lng = data["longitude"] if "longitude" in data else data["lng"]
            return cls(latitude=float(lat), longitude=float(lng))
        except KeyError as e:
            raise ValueError(f"Missing required Coordinate field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid Coordinate data: {e}")

    @property
    def xy(self) -> Tuple[float, float]:
        """Planar (x, y) = (longitude, latitude)."""
        return self.longitude, self.latitude


@dataclass(frozen=True, eq=False)
class ServicePolygon:
    """
    Immutable service-area ring.

    Construction accepts degenerate rings (fewer than 3 vertices) so that
    stored zones can always be loaded; the predicates treat them as empty.

    Attributes:
        vertices: Nx2 array of (longitude, latitude), closing vertex implicit
    """

    vertices: np.ndarray

    def __post_init__(self):
        """Validate shape and freeze the vertex array."""
        if not isinstance(self.vertices, np.ndarray):
            raise TypeError(f"vertices must be np.ndarray, got {type(self.vertices)}")
        if self.vertices.size == 0:
            object.__setattr__(self, "vertices", np.empty((0, 2), dtype=float))
        elif self.vertices.ndim != 2 or self.vertices.shape[1] != 2:
            raise ValueError(f"vertices must be Nx2 array, got shape {self.vertices.shape}")

        self.vertices.flags.writeable = False

    @classmethod
    def from_coordinates(cls, coordinates: Iterable[Coordinate]) -> "ServicePolygon":
        """Build from an ordered sequence of Coordinates."""
        points = [c.xy for c in coordinates]
        return cls(vertices=np.array(points, dtype=float).reshape(-1, 2))

    @classmethod
    def from_geojson(cls, geometry: Dict[str, Any]) -> "ServicePolygon":
        """
        Build from a GeoJSON Polygon geometry (outer ring only).

        The duplicated closing vertex is dropped, as are non-finite points.

        Raises:
            ValueError: If the geometry is not a Polygon
        """
        if geometry.get("type") != "Polygon":
            raise ValueError(f"Expected GeoJSON Polygon, got {geometry.get('type')!r}")

        rings = geometry.get("coordinates") or []
        ring = rings[0] if rings else []

        points: List[Tuple[float, float]] = [
            (float(pair[0]), float(pair[1])) for pair in ring if pair is not None and len(pair) >= 2
        ]
        if len(points) > 1 and points[0] == points[-1]:
            points.pop()

        finite = [p for p in points if math.isfinite(p[0]) and math.isfinite(p[1])]
        return cls(vertices=np.array(finite, dtype=float).reshape(-1, 2))

    @property
    def coordinates(self) -> List[Coordinate]:
        """Vertices as Coordinates, in ring order."""
        return [Coordinate(latitude=float(y), longitude=float(x)) for x, y in self.vertices]

    @property
    def is_degenerate(self) -> bool:
        """True when the ring cannot enclose an area (< 3 vertices)."""
        return len(self.vertices) < 3

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """
        Axis-aligned bounds.

        Returns:
            (min_lon, min_lat, max_lon, max_lat)

        Raises:
            ValueError: If the polygon has no vertices
        """
        if len(self.vertices) == 0:
            raise ValueError("Empty polygon has no bounds")
        min_x, min_y = self.vertices.min(axis=0)
        max_x, max_y = self.vertices.max(axis=0)
        return float(min_x), float(min_y), float(max_x), float(max_y)

    def to_wkt(self) -> str:
        """
        Export as EWKT with the ring closed.

        Raises:
            ValueError: If fewer than 3 vertices
        """
        if self.is_degenerate:
            raise ValueError("Delivery areas need at least three valid points.")
        closed = np.vstack([self.vertices, self.vertices[:1]])
        points = ", ".join(f"{float(x)} {float(y)}" for x, y in closed)
        return f"SRID=4326;POLYGON(({points}))"

    def __len__(self) -> int:
        return len(self.vertices)


def as_coordinates(polygon: "ServicePolygon | Sequence[Coordinate]") -> Sequence[Coordinate]:
    """Normalize a polygon argument to a sequence of Coordinates."""
    if isinstance(polygon, ServicePolygon):
        return polygon.coordinates
    return polygon
