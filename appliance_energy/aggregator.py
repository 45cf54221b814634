"""
Record Aggregator - Concurrent multi-partition retrieval.

Provides:
- One concurrent fetch per partition, joined before anything else runs
- Explicit per-partition results
- Best-effort or strict handling of failed partitions
- Deduplication of models exposed through overlapping partitions
"""

import asyncio
import logging
from typing import Iterable, Optional

from appliance_energy.exceptions import PartitionAggregationError, PartitionFetchError
from appliance_energy.fetcher import PartitionFetcher, normalize_filter_value
from appliance_energy.models import (
    AggregationPolicy,
    NormalizedApplianceData,
    PartitionResult,
)


logger = logging.getLogger(__name__)


def distinct_appliances(
    records: Iterable[NormalizedApplianceData],
) -> list[NormalizedApplianceData]:
    """
    Drop records whose (brand, model, energy) key was already seen.

    Brand and model compare trimmed and upper-cased; a missing value only
    matches another missing value. First occurrence wins.
    """
    seen = set()
    unique = []

    for record in records:
        key = record.dedup_key()
        if key not in seen:
            seen.add(key)
            unique.append(record)

    return unique


class RecordAggregator:
    """
    Fans out partition queries and merges their records.

    Usage:
        async with PartitionFetcher() as fetcher:
            aggregator = RecordAggregator(fetcher)
            records = await aggregator.fetch_appliances(
                ("p5st-her9", "hgxv-ux9b"),
                brand_name="whirlpool",
            )
    """

    def __init__(
        self,
        fetcher: Optional[PartitionFetcher] = None,
        policy: AggregationPolicy = AggregationPolicy.BEST_EFFORT,
    ) -> None:
        self._fetcher = fetcher or PartitionFetcher()
        self._policy = policy

    @property
    def fetcher(self) -> PartitionFetcher:
        return self._fetcher

    @property
    def policy(self) -> AggregationPolicy:
        return self._policy

    async def fetch_partition_results(
        self,
        partition_ids: Iterable[str],
        brand_name: Optional[str] = None,
        model_number: Optional[str] = None,
    ) -> list[PartitionResult]:
        """
        Query every partition concurrently and wait for all of them.

        Returns:
            One PartitionResult per distinct partition id, in dispatch order
        """
        partition_ids = list(dict.fromkeys(partition_ids))
        if not partition_ids:
            return []

        brand = normalize_filter_value(brand_name)
        model = normalize_filter_value(model_number)

        tasks = [
            asyncio.create_task(
                self._fetcher.fetch(partition_id, brand, model),
                name=f"partition:{partition_id}",
            )
            for partition_id in partition_ids
        ]

        # return_exceptions keeps one failure from cancelling siblings
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results = []
        for partition_id, outcome in zip(partition_ids, outcomes):
            if isinstance(outcome, PartitionResult):
                results.append(outcome)
                continue

            error = PartitionFetchError(
                message=f"Unhandled fetch error: {outcome}",
                partition_id=partition_id,
                original_error=outcome,
            )
            logger.error(f"[{partition_id}] {error}")
            results.append(PartitionResult.failure(partition_id, error))

        return results

    def merge(self, results: list[PartitionResult]) -> list[NormalizedApplianceData]:
        """
        Apply the failure policy, concatenate and deduplicate.

        Raises:
            PartitionAggregationError: Under the strict policy, if any
                partition failed
        """
        failed = {r.partition_id: r.error for r in results if not r.ok}

        if failed and self._policy == AggregationPolicy.STRICT:
            raise PartitionAggregationError(
                message=f"{len(failed)} of {len(results)} partitions failed",
                failed_partitions=failed,
            )

        for partition_id in failed:
            logger.warning(f"[{partition_id}] Excluded from merged results")

        merged = [record for r in results if r.ok for record in r.records]
        unique = distinct_appliances(merged)

        logger.info(
            f"Merged {len(unique)} unique records "
            f"({len(merged) - len(unique)} duplicates) from "
            f"{len(results) - len(failed)}/{len(results)} partitions"
        )
        return unique

    async def fetch_appliances(
        self,
        partition_ids: Iterable[str],
        brand_name: Optional[str] = None,
        model_number: Optional[str] = None,
    ) -> list[NormalizedApplianceData]:
        """
        Fetch, merge and deduplicate records from all partitions.

        Returns:
            Deduplicated normalized records; empty when nothing matched
            or every partition failed (best-effort policy)
        """
        results = await self.fetch_partition_results(
            partition_ids, brand_name, model_number
        )
        return self.merge(results)

    async def close(self) -> None:
        """Close the underlying fetcher."""
        await self._fetcher.close()

    async def __aenter__(self) -> "RecordAggregator":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
