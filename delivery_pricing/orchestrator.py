"""
Batch Fee Orchestrator - Cart-level fee map.

This module provides the BatchFeeOrchestrator class which prices every shop
in a multi-shop cart: one catalog fetch per shop runs concurrently, each
record goes through evaluate_shop(), and the per-shop results are joined
into a ShopFeeMap keyed by shop id.

Failure Model:
- A fetch that raises degrades only its shop (FETCH_FAILED, zero fees)
- A fetch still pending at the deadline is abandoned (FETCH_FAILED); a
  hung fetch never delays a sibling, since every shop has its own thread
- Abandoned threads keep running until the catalog call returns, and
  concurrent.futures joins them at interpreter exit: catalog clients must
  carry their own transport timeout (HttpCatalogClient does) or a fetch
  that never resolves will hold up process shutdown
- A missing catalog record resolves to UNCONFIGURED
- evaluate_cart() never raises for per-shop problems and never retries;
  it raises ValueError only for a cart with more shops than max_workers

Threading Model:
- Fetches run on a ThreadPoolExecutor created per batch with one worker per
  distinct shop, joined with concurrent.futures.wait(timeout=...)
- Each result lands in its own key; no shared mutable state between fetches
- The memoised last result is protected by _cache_lock
"""

import time
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from delivery_zone import Coordinate
from delivery_pricing.catalog import CatalogClient, ShopRecord
from delivery_pricing.evaluator import FeeResult, FeeStatus, evaluate_shop
from delivery_pricing.logging import LogEvent, StructuredLogger, create_logger

ShopFeeMap = Dict[str, FeeResult]

_CacheKey = Tuple[Coordinate, Tuple[Tuple[str, float], ...]]


@dataclass
class _CachedBatch:
    key: _CacheKey
    fees: ShopFeeMap


class BatchFeeOrchestrator:
    """
    Prices every shop of a cart concurrently.

    Recomputation happens only when the consumer coordinate or the per-shop
    subtotals (and so the shop set) change, or after invalidate().

    Usage:
        orchestrator = BatchFeeOrchestrator(catalog=InMemoryCatalog(records))
        fees = orchestrator.evaluate_cart(
            shop_ids=["shop-1", "shop-2"],
            per_shop_subtotal={"shop-1": 1000, "shop-2": 150},
            consumer=Coordinate(latitude=24.86, longitude=67.00),
        )
        if any(not fee.chargeable for fee in fees.values()):
            ...  # block checkout
    """

    def __init__(
        self,
        catalog: CatalogClient,
        max_workers: int = 64,
        fetch_timeout: float = 5.0,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            catalog: Shop catalog collaborator
            max_workers: Ceiling on distinct shops per cart (one fetch
                         thread each)
            fetch_timeout: Seconds to wait for the whole fan-out to join
            logger: Structured logger (default: "orchestrator" component)
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be > 0, got {fetch_timeout}")

        self.catalog = catalog
        self.max_workers = max_workers
        self.fetch_timeout = fetch_timeout
        self.logger = logger or create_logger("orchestrator")

        self._cache: Optional[_CachedBatch] = None
        self._cache_lock = threading.Lock()

    def evaluate_cart(
        self,
        shop_ids: Iterable[str],
        per_shop_subtotal: Mapping[str, float],
        consumer: Coordinate,
    ) -> ShopFeeMap:
        """
        Build the fee map for a cart.

        Args:
            shop_ids: Shops present in the cart (duplicates collapse)
            per_shop_subtotal: Subtotal per shop; missing shops price at 0
            consumer: Current consumer coordinate

        Returns:
            One FeeResult per distinct shop id

        Raises:
            ValueError: If the cart has more distinct shops than max_workers
        """
        unique_ids = list(dict.fromkeys(shop_ids))
        if len(unique_ids) > self.max_workers:
            raise ValueError(
                f"Cart has {len(unique_ids)} shops, above max_workers={self.max_workers}"
            )

        subtotals = {shop_id: per_shop_subtotal.get(shop_id, 0) for shop_id in unique_ids}
        key = self._cache_key(consumer, subtotals)

        with self._cache_lock:
            cached = self._cache
        if cached is not None and cached.key == key:
            self.logger.debug(
                event=LogEvent.BATCH_CACHE_HIT,
                message="Cart inputs unchanged, reusing fee map",
                metadata={'shop_count': len(unique_ids)}
            )
            return dict(cached.fees)

        started = time.monotonic()
        records = self._fetch_all(unique_ids)

        fees: ShopFeeMap = {}
        for shop_id in unique_ids:
            fees[shop_id] = self._price(shop_id, records[shop_id], subtotals[shop_id], consumer)

        with self._cache_lock:
            self._cache = _CachedBatch(key=key, fees=dict(fees))

        self.logger.info(
            event=LogEvent.BATCH_COMPLETED,
            message="Built fee map",
            metadata={
                'shop_count': len(fees),
                'degraded': sorted(
                    shop_id for shop_id, fee in fees.items()
                    if fee.status == FeeStatus.FETCH_FAILED
                ),
                'elapsed_ms': round((time.monotonic() - started) * 1000, 1),
            }
        )
        return fees

    def invalidate(self) -> None:
        """Drop the memoised fee map so the next call recomputes."""
        with self._cache_lock:
            self._cache = None
        self.logger.info(
            event=LogEvent.BATCH_INVALIDATED,
            message="Fee map cache invalidated"
        )

    def _fetch_all(self, shop_ids) -> Dict[str, object]:
        """
        Fan out one fetch per shop and join with a deadline.

        Returns:
            {shop_id: ShopRecord | None | BaseException}; pending fetches
            map to a TimeoutError instance
        """
        if not shop_ids:
            return {}

        # One worker per shop: no fetch may queue behind a hung sibling
        executor = ThreadPoolExecutor(
            max_workers=len(shop_ids),
            thread_name_prefix="catalog-fetch",
        )
        try:
            futures: Dict[str, Future] = {
                shop_id: executor.submit(self.catalog.fetch_shop, shop_id)
                for shop_id in shop_ids
            }
            wait(futures.values(), timeout=self.fetch_timeout)
        finally:
            # Pending fetches are abandoned, not awaited
            executor.shutdown(wait=False, cancel_futures=True)

        results: Dict[str, object] = {}
        for shop_id, future in futures.items():
            if not future.done() or future.cancelled():
                self.logger.warning(
                    event=LogEvent.CATALOG_FETCH_TIMEOUT,
                    message="Shop fetch did not finish before the deadline",
                    metadata={'shop_id': shop_id, 'timeout_s': self.fetch_timeout}
                )
                results[shop_id] = TimeoutError(f"fetch for shop {shop_id} timed out")
                continue

            error = future.exception()
            if error is not None:
                self.logger.error(
                    event=LogEvent.CATALOG_FETCH_FAILED,
                    message="Shop fetch failed",
                    metadata={'shop_id': shop_id},
                    exc_info=error
                )
                results[shop_id] = error
            else:
                results[shop_id] = future.result()

        return results

    def _price(
        self,
        shop_id: str,
        record: "ShopRecord | BaseException | None",
        subtotal: float,
        consumer: Coordinate,
    ) -> FeeResult:
        """Turn one fetch outcome into a FeeResult."""
        if isinstance(record, BaseException):
            return FeeResult.zero(FeeStatus.FETCH_FAILED)

        if record is None:
            self.logger.warning(
                event=LogEvent.CATALOG_RECORD_MISSING,
                message="No catalog record for shop",
                metadata={'shop_id': shop_id}
            )
            return FeeResult.zero(FeeStatus.UNCONFIGURED)

        fee = evaluate_shop(
            policy=record.policy,
            subtotal=subtotal,
            consumer=consumer,
            shop_coordinate=record.coordinate,
            polygons=record.polygons,
        )

        if fee.status in (FeeStatus.UNCONFIGURED, FeeStatus.MISSING_COORDINATES):
            self.logger.warning(
                event=LogEvent.FEE_UNCONFIGURED,
                message="Shop priced at zero",
                metadata={'shop_id': shop_id, 'status': fee.status.value}
            )
        elif fee.out_of_zone:
            self.logger.info(
                event=LogEvent.FEE_OUT_OF_ZONE,
                message="Consumer outside shop delivery area",
                metadata={'shop_id': shop_id, 'distance_m': round(fee.distance_meters)}
            )
        else:
            self.logger.debug(
                event=LogEvent.FEE_EVALUATED,
                message="Shop priced",
                metadata={
                    'shop_id': shop_id,
                    'distance_m': round(fee.distance_meters),
                    'final_fee': fee.final_fee,
                }
            )

        return fee

    @staticmethod
    def _cache_key(consumer: Coordinate, subtotals: Mapping[str, float]) -> _CacheKey:
        return consumer, tuple(sorted(subtotals.items()))
