"""
delivery_pricing - Delivery fee engine

This package prices delivery for a consumer location against each shop's
pricing policy and service areas (from delivery_zone).

Architecture:
- PricingPolicy: Per-shop policy (auto rate or custom tiers)
- evaluate / evaluate_shop: Pure fee computation
- BatchFeeOrchestrator: Concurrent per-shop pricing for a cart
- CatalogClient: Where shop records come from (in-memory, YAML, HTTP)
- EngineConfig: Configuration management

Threading Model:
- Fee evaluation is pure and lock-free
- Catalog fetches fan out on a per-batch ThreadPoolExecutor
"""

from delivery_pricing.policy import DistanceTier, PricingMode, PricingPolicy
from delivery_pricing.evaluator import (
    FeeResult,
    FeeStatus,
    OrderValueCheck,
    calculate_order_surcharge,
    evaluate,
    evaluate_shop,
    validate_order_value,
)
from delivery_pricing.catalog import (
    CatalogClient,
    CatalogFetchError,
    HttpCatalogClient,
    InMemoryCatalog,
    ShopRecord,
)
from delivery_pricing.orchestrator import BatchFeeOrchestrator, ShopFeeMap
from delivery_pricing.config import ConfigError, EngineConfig, build_orchestrator

__all__ = [
    "DistanceTier",
    "PricingMode",
    "PricingPolicy",
    "FeeResult",
    "FeeStatus",
    "OrderValueCheck",
    "calculate_order_surcharge",
    "evaluate",
    "evaluate_shop",
    "validate_order_value",
    "CatalogClient",
    "CatalogFetchError",
    "HttpCatalogClient",
    "InMemoryCatalog",
    "ShopRecord",
    "BatchFeeOrchestrator",
    "ShopFeeMap",
    "ConfigError",
    "EngineConfig",
    "build_orchestrator",
]
