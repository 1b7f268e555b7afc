"""
Pricing Policy Evaluator
========================

Bounded Context: Per-shop delivery fee computation

Pure functions: no I/O, no shared state. Missing inputs resolve to a
zero-fee result instead of raising, so browsing never breaks on a badly
configured shop. Out-of-zone is a business outcome carried in the result;
callers block checkout on it.

Pipeline (evaluate):
    zone/tier resolution -> base fee -> surcharge -> free delivery -> final fee
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence

from delivery_zone import Coordinate, distance_between, resolve_zone
from delivery_zone.geometry.polygons import PolygonLike
from delivery_pricing.policy import PricingMode, PricingPolicy


class FeeStatus(str, Enum):
    """Why a FeeResult has the values it has."""
    PRICED = "priced"
    OUT_OF_ZONE = "out_of_zone"
    UNCONFIGURED = "unconfigured"
    MISSING_COORDINATES = "missing_coordinates"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class FeeResult:
    """
    Immutable fee breakdown for one shop.

    Attributes:
        base_fee: Distance fee before the free-delivery waiver
        surcharge: Small-order surcharge (never waived)
        final_fee: (0 if free_delivery_applied else base_fee) + surcharge
        free_delivery_applied: Base fee waived
        out_of_zone: Consumer cannot be served; base_fee is a display cap
        distance_meters: Straight-line distance used, 0 when not computed
        status: Outcome classification
    """
    base_fee: float = 0.0
    surcharge: float = 0.0
    final_fee: float = 0.0
    free_delivery_applied: bool = False
    out_of_zone: bool = False
    distance_meters: float = 0.0
    status: FeeStatus = FeeStatus.PRICED

    @property
    def chargeable(self) -> bool:
        """True only for a fully priced, in-zone result."""
        return self.status == FeeStatus.PRICED

    @classmethod
    def zero(cls, status: FeeStatus) -> "FeeResult":
        """Zero-fee fallback for missing inputs."""
        return cls(status=status)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "base_fee": self.base_fee,
            "surcharge": self.surcharge,
            "final_fee": self.final_fee,
            "free_delivery_applied": self.free_delivery_applied,
            "out_of_zone": self.out_of_zone,
            "distance_meters": self.distance_meters,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class OrderValueCheck:
    """Result of the least-order-value floor check."""
    valid: bool
    message: Optional[str] = None


def calculate_order_surcharge(subtotal: float, policy: PricingPolicy) -> float:
    """Small-order surcharge for subtotal, 0 at or above the minimum."""
    if subtotal < policy.minimum_order_value:
        return policy.small_order_surcharge
    return 0.0


def validate_order_value(subtotal: float, policy: PricingPolicy) -> OrderValueCheck:
    """Reject subtotals below the shop's least order value."""
    if subtotal < policy.least_order_value:
        return OrderValueCheck(
            valid=False,
            message=f"Minimum item value is {policy.least_order_value:.0f}",
        )
    return OrderValueCheck(valid=True)


def _tier_fee(policy: PricingPolicy, distance_meters: float) -> Optional[float]:
    """Fee of the first tier covering distance (capped at max_delivery_fee), None beyond the last tier."""
    for tier in policy.distance_tiers:
        if distance_meters <= tier.max_distance_meters:
            return min(tier.fee, policy.max_delivery_fee)
    return None


def _auto_fee(policy: PricingPolicy, distance_meters: float) -> float:
    return min(policy.max_delivery_fee, policy.base_rate + policy.per_km_rate * distance_meters / 1000)


def evaluate(
    policy: PricingPolicy,
    subtotal: float,
    distance_meters: float,
    in_zone: bool,
) -> FeeResult:
    """
    Apply a pricing policy.

    Args:
        policy: Shop pricing policy
        subtotal: Order subtotal for this shop
        distance_meters: Straight-line consumer-to-shop distance
        in_zone: Result of zone resolution

    Returns:
        FeeResult with status PRICED or OUT_OF_ZONE
    """
    out_of_zone = False

    if not in_zone:
        out_of_zone = True
        base_fee = policy.max_delivery_fee
    elif policy.mode == PricingMode.CUSTOM:
        fee = _tier_fee(policy, distance_meters)
        if fee is None:
            out_of_zone = True
            base_fee = policy.max_delivery_fee
        else:
            base_fee = fee
    else:
        base_fee = _auto_fee(policy, distance_meters)

    surcharge = calculate_order_surcharge(subtotal, policy)

    free_delivery_applied = (
        not out_of_zone
        and policy.free_delivery_threshold > 0
        and subtotal >= policy.free_delivery_threshold
        and (
            policy.free_delivery_radius_meters is None
            or distance_meters <= policy.free_delivery_radius_meters
        )
    )

    final_fee = (0.0 if free_delivery_applied else base_fee) + surcharge

    return FeeResult(
        base_fee=base_fee,
        surcharge=surcharge,
        final_fee=final_fee,
        free_delivery_applied=free_delivery_applied,
        out_of_zone=out_of_zone,
        distance_meters=distance_meters,
        status=FeeStatus.OUT_OF_ZONE if out_of_zone else FeeStatus.PRICED,
    )


def evaluate_shop(
    policy: Optional[PricingPolicy],
    subtotal: float,
    consumer: Coordinate,
    shop_coordinate: Optional[Coordinate],
    polygons: Sequence[PolygonLike] = (),
) -> FeeResult:
    """
    Price one shop from raw collaborator inputs.

    Missing policy resolves to UNCONFIGURED and missing shop coordinates to
    MISSING_COORDINATES, both with zero fees and out_of_zone False.
    Distance is not computed in either case. Checkout must re-run this with
    real inputs before taking payment.
    """
    if policy is None:
        return FeeResult.zero(FeeStatus.UNCONFIGURED)

    if shop_coordinate is None:
        return FeeResult.zero(FeeStatus.MISSING_COORDINATES)

    distance = distance_between(consumer, shop_coordinate)
    resolution = resolve_zone(consumer, polygons)
    return evaluate(policy, subtotal, distance, resolution.in_zone)
