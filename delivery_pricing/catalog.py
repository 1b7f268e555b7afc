"""Shop catalog collaborators: where shop coordinates, policies and zones come from."""

import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import requests
import yaml
from dotenv import load_dotenv

from delivery_zone import Coordinate, ServicePolygon
from delivery_pricing.policy import PricingPolicy

load_dotenv()


class CatalogFetchError(Exception):
    """Raised when a shop record cannot be fetched."""
    pass


@dataclass(frozen=True)
class ShopRecord:
    """Everything the engine needs to price one shop."""

    shop_id: str
    coordinate: Optional[Coordinate] = None
    policy: Optional[PricingPolicy] = None
    polygons: Tuple[ServicePolygon, ...] = field(default=())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShopRecord":
        """
        Build from a catalog payload.

        Expected keys: ``id`` (or ``shop_id``), optional ``latitude`` and
        ``longitude``, optional ``pricing_policy`` (or ``delivery_logic``)
        and optional ``delivery_areas``. Each area is either a GeoJSON
        Polygon under ``geometry``/``geom_geojson`` or a ``coordinates``
        list of lat/lng dicts.

        Raises:
            ValueError: If the payload is malformed
        """
        shop_id = data.get("shop_id", data.get("id"))
        if shop_id is None:
            raise ValueError("Shop record is missing 'id'")

        coordinate = None
        if data.get("latitude") is not None and data.get("longitude") is not None:
            coordinate = Coordinate.from_dict(data)

        policy_data = data.get("pricing_policy", data.get("delivery_logic"))
        policy = PricingPolicy.from_dict(policy_data) if policy_data else None

        polygons = tuple(_parse_area(area) for area in data.get("delivery_areas") or [])

        return cls(shop_id=str(shop_id), coordinate=coordinate, policy=policy, polygons=polygons)


def _parse_area(area: Dict[str, Any]) -> ServicePolygon:
    geometry = area.get("geometry") or area.get("geom_geojson")
    if geometry:
        return ServicePolygon.from_geojson(geometry)
    return ServicePolygon.from_coordinates(
        Coordinate.from_dict(point) for point in area.get("coordinates", [])
    )


class CatalogClient(ABC):
    """Base class that all shop catalog collaborators must implement."""

    @abstractmethod
    def fetch_shop(self, shop_id: str) -> Optional[ShopRecord]:
        """Fetch one shop.

        Args:
            shop_id: Shop identifier.

        Returns:
            The ShopRecord, or None if the catalog has no such shop.

        Raises:
            CatalogFetchError: If the catalog could not be reached.
        """


class InMemoryCatalog(CatalogClient):
    """Dict-backed catalog for embedding callers and tests."""

    def __init__(self, records: Iterable[ShopRecord] = ()):
        self._records: Dict[str, ShopRecord] = {r.shop_id: r for r in records}
        self._lock = threading.Lock()

    def put(self, record: ShopRecord) -> None:
        with self._lock:
            self._records[record.shop_id] = record

    def fetch_shop(self, shop_id: str) -> Optional[ShopRecord]:
        with self._lock:
            return self._records.get(shop_id)

    def __len__(self) -> int:
        return len(self._records)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "InMemoryCatalog":
        """
        Load shops from a YAML file.

        Example YAML:
            shops:
              - id: "shop-1"
                latitude: 24.8607
                longitude: 67.0011
                pricing_policy:
                  mode: "custom"
                  max_delivery_fee: 130
                  distance_tiers:
                    - {max_distance: 200, fee: 20}
                delivery_areas:
                  - coordinates:
                      - {lat: 24.85, lng: 66.99}
                      - {lat: 24.85, lng: 67.01}
                      - {lat: 24.87, lng: 67.01}

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If YAML or a record is invalid
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Catalog file not found: {yaml_path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}")

        return cls(ShopRecord.from_dict(shop) for shop in data.get("shops", []))


class HttpCatalogClient(CatalogClient):
    """Client for a REST shop catalog (GET {base_url}/shops/{shop_id})."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 5.0,
    ):
        self.base_url = (base_url or os.getenv("DELIVERY_CATALOG_URL", "")).rstrip("/")
        self.token = token or os.getenv("DELIVERY_CATALOG_TOKEN", "")
        if not self.base_url:
            raise ValueError(
                "DELIVERY_CATALOG_URL must be set either as an argument or in a .env file."
            )
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if self.token:
            self.session.headers.update({"Authorization": f"Bearer {self.token}"})

    def fetch_shop(self, shop_id: str) -> Optional[ShopRecord]:
        url = f"{self.base_url}/shops/{shop_id}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise CatalogFetchError(f"Request for shop {shop_id} failed: {e}") from e

        if resp.status_code == 404:
            return None

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise CatalogFetchError(f"Catalog returned {resp.status_code} for shop {shop_id}") from e

        try:
            payload = resp.json()
        except ValueError as e:
            raise CatalogFetchError(f"Catalog returned invalid JSON for shop {shop_id}") from e

        if not payload:
            return None
        return ShopRecord.from_dict(payload)
