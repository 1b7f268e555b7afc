"""
Pricing Policy Schema
=====================

Bounded Context: Shop delivery pricing configuration

One PricingPolicy per shop, owned by merchant configuration and read-only
to the engine.

Layers:
- Order value: minimum_order_value, small_order_surcharge, least_order_value
- Distance: auto (base_rate + per_km_rate, capped) or custom tiers
- Free delivery: free_delivery_threshold, optional free_delivery_radius_meters

Amounts are in the shop's currency unit; callers may pass integer minor
units as long as every amount in one policy uses the same unit.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class PricingMode(str, Enum):
    """Distance pricing mode."""
    AUTO = "auto"
    CUSTOM = "custom"


@dataclass(frozen=True)
class DistanceTier:
    """
    One distance band in custom mode.

    Attributes:
        max_distance_meters: Inclusive upper bound of the band
        fee: Base delivery fee inside the band

    Invariants:
        - max_distance_meters > 0
        - fee >= 0
    """
    max_distance_meters: float
    fee: float

    def __post_init__(self):
        """Validate invariants."""
        if self.max_distance_meters <= 0:
            raise ValueError(
                f"Tier max_distance_meters must be > 0, got {self.max_distance_meters}"
            )
        if self.fee < 0:
            raise ValueError(f"Tier fee must be >= 0, got {self.fee}")

    def to_dict(self) -> Dict[str, float]:
        """Serialize to JSON-compatible dict."""
        return {"max_distance_meters": self.max_distance_meters, "fee": self.fee}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DistanceTier":
        """
        Deserialize from dict.

        Accepts ``max_distance_meters`` or the catalog's ``max_distance`` key.

        Raises:
            ValueError: If required keys missing or invalid values
        """
        try:
            distance = data["max_distance_meters"] if "max_distance_meters" in data else data["max_distance"]
            return cls(max_distance_meters=float(distance), fee=float(data["fee"]))
        except KeyError as e:
            raise ValueError(f"Missing required DistanceTier field: {e}")
        except TypeError as e:
            raise ValueError(f"Invalid DistanceTier data: {e}")


DEFAULT_DISTANCE_TIERS: Tuple[DistanceTier, ...] = (
    DistanceTier(max_distance_meters=200, fee=20),
    DistanceTier(max_distance_meters=400, fee=30),
    DistanceTier(max_distance_meters=600, fee=40),
    DistanceTier(max_distance_meters=800, fee=50),
    DistanceTier(max_distance_meters=1000, fee=60),
)

# Values seeded for every new shop; used when a catalog row omits a column.
CATALOG_DEFAULTS: Dict[str, float] = {
    "minimum_order_value": 200.0,
    "small_order_surcharge": 40.0,
    "least_order_value": 100.0,
    "free_delivery_threshold": 800.0,
    "max_delivery_fee": 130.0,
    "base_rate": 0.0,
    "per_km_rate": 0.0,
    "free_delivery_radius_meters": 1000.0,
}


@dataclass(frozen=True)
class PricingPolicy:
    """
    Immutable per-shop pricing policy.

    Attributes:
        mode: AUTO (distance-rate function) or CUSTOM (tiers)
        minimum_order_value: Below this subtotal the small-order surcharge applies
        small_order_surcharge: Fixed surcharge amount
        least_order_value: Hard floor for order placement (display/validation only)
        free_delivery_threshold: Subtotal at which the base fee is waived (0 disables)
        max_delivery_fee: Cap for every distance fee and the out-of-zone display value
        base_rate: Auto mode fixed component
        per_km_rate: Auto mode per-kilometre component
        distance_tiers: Custom mode bands, stored ascending by distance
        free_delivery_radius_meters: Optional distance limit for the waiver

    Invariants:
        - All amounts >= 0
        - least_order_value <= minimum_order_value
        - CUSTOM mode has at least one tier
    """
    mode: PricingMode = PricingMode.AUTO
    minimum_order_value: float = 0.0
    small_order_surcharge: float = 0.0
    least_order_value: float = 0.0
    free_delivery_threshold: float = 0.0
    max_delivery_fee: float = 130.0
    base_rate: float = 0.0
    per_km_rate: float = 0.0
    distance_tiers: Tuple[DistanceTier, ...] = field(default=())
    free_delivery_radius_meters: Optional[float] = None

    def __post_init__(self):
        """Normalize tiers and validate invariants."""
        object.__setattr__(self, "mode", PricingMode(self.mode))
        object.__setattr__(
            self,
            "distance_tiers",
            tuple(sorted(self.distance_tiers, key=lambda t: t.max_distance_meters)),
        )

        amounts = {
            "minimum_order_value": self.minimum_order_value,
            "small_order_surcharge": self.small_order_surcharge,
            "least_order_value": self.least_order_value,
            "free_delivery_threshold": self.free_delivery_threshold,
            "max_delivery_fee": self.max_delivery_fee,
            "base_rate": self.base_rate,
            "per_km_rate": self.per_km_rate,
        }
        for name, value in amounts.items():
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")

        if self.least_order_value > self.minimum_order_value:
            raise ValueError(
                f"least_order_value ({self.least_order_value}) cannot exceed "
                f"minimum_order_value ({self.minimum_order_value})"
            )

        if self.mode == PricingMode.CUSTOM and not self.distance_tiers:
            raise ValueError("Custom pricing mode requires at least one distance tier")

        if self.free_delivery_radius_meters is not None and self.free_delivery_radius_meters < 0:
            raise ValueError(
                f"free_delivery_radius_meters must be >= 0, got {self.free_delivery_radius_meters}"
            )

    @property
    def max_tier_distance(self) -> Optional[float]:
        """Furthest tier bound, None without tiers."""
        if not self.distance_tiers:
            return None
        return self.distance_tiers[-1].max_distance_meters

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "mode": self.mode.value,
            "minimum_order_value": self.minimum_order_value,
            "small_order_surcharge": self.small_order_surcharge,
            "least_order_value": self.least_order_value,
            "free_delivery_threshold": self.free_delivery_threshold,
            "max_delivery_fee": self.max_delivery_fee,
            "base_rate": self.base_rate,
            "per_km_rate": self.per_km_rate,
            "distance_tiers": [t.to_dict() for t in self.distance_tiers],
            "free_delivery_radius_meters": self.free_delivery_radius_meters,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PricingPolicy":
        """
        Deserialize from a catalog row.

        Missing keys fall back to CATALOG_DEFAULTS and DEFAULT_DISTANCE_TIERS.
        ``distance_mode`` is accepted as an alias of ``mode`` and
        ``free_delivery_radius`` as an alias of ``free_delivery_radius_meters``.
        An absent radius takes the seeded 1000 m; an explicit null keeps the
        waiver unlimited, so to_dict() output reads back unchanged.

        Raises:
            ValueError: If values are invalid
        """
        def amount(key: str) -> float:
            value = data.get(key)
            try:
                return CATALOG_DEFAULTS[key] if value is None else float(value)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid PricingPolicy field {key}: {e}")

        tiers_data: Optional[List[Dict[str, Any]]] = data.get("distance_tiers")
        tiers = (
            tuple(DistanceTier.from_dict(t) for t in tiers_data)
            if tiers_data is not None
            else DEFAULT_DISTANCE_TIERS
        )

        if "free_delivery_radius_meters" in data:
            radius = data["free_delivery_radius_meters"]
        elif "free_delivery_radius" in data:
            radius = data["free_delivery_radius"]
        else:
            radius = CATALOG_DEFAULTS["free_delivery_radius_meters"]

        try:
            mode = PricingMode(data.get("mode") or data.get("distance_mode") or PricingMode.AUTO)
        except ValueError as e:
            raise ValueError(f"Invalid pricing mode: {e}")

        return cls(
            mode=mode,
            minimum_order_value=amount("minimum_order_value"),
            small_order_surcharge=amount("small_order_surcharge"),
            least_order_value=amount("least_order_value"),
            free_delivery_threshold=amount("free_delivery_threshold"),
            max_delivery_fee=amount("max_delivery_fee"),
            base_rate=amount("base_rate"),
            per_km_rate=amount("per_km_rate"),
            distance_tiers=tiers,
            free_delivery_radius_meters=None if radius is None else float(radius),
        )
