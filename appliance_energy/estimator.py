"""
Estimator - Annual energy use estimate for an appliance category.

Public entry point of the pipeline: normalizes filters, fetches and
deduplicates records across the category's partitions, then reduces
their energy values with the requested strategy.
"""

import logging
from typing import Optional, Union

from appliance_energy.aggregator import RecordAggregator
from appliance_energy.config import EstimatorConfig
from appliance_energy.fetcher import PartitionFetcher, normalize_filter_value
from appliance_energy.models import (
    ApplianceCategory,
    EstimateSummary,
    NormalizedApplianceData,
    Strategy,
)
from appliance_energy.statistics import reduce_values
from appliance_energy.taxonomy import get_category


logger = logging.getLogger(__name__)


NO_DATA_ESTIMATE = 0.0


class Estimator:
    """
    Estimates annual energy use in kWh/year.

    With the default best-effort aggregator, estimate() never raises on
    upstream failures; the worst case is the 0.0 no-data sentinel.
    """

    def __init__(
        self,
        aggregator: Optional[RecordAggregator] = None,
        skip_missing_energy: bool = False,
    ) -> None:
        self._aggregator = aggregator or RecordAggregator()
        self._skip_missing_energy = skip_missing_energy

    @classmethod
    def from_config(
        cls,
        config: EstimatorConfig,
        skip_missing_energy: bool = False,
    ) -> "Estimator":
        """Create an estimator with its own fetcher from configuration."""
        aggregator = RecordAggregator(
            PartitionFetcher.from_config(config),
            policy=config.failure_policy,
        )
        return cls(aggregator, skip_missing_energy=skip_missing_energy)

    async def estimate(
        self,
        category: Union[ApplianceCategory, str],
        brand_name: Optional[str] = None,
        model_number: Optional[str] = None,
        strategy: Strategy = Strategy.MEDIAN,
    ) -> float:
        """
        Estimate annual energy usage for an appliance category.

        Args:
            category: Category, or its id in the taxonomy
            brand_name: Optional brand filter (case-insensitive)
            model_number: Optional model filter (case-insensitive)
            strategy: Median (default) or mean

        Returns:
            Estimated kWh/year, or 0.0 if no records matched
        """
        summary = await self.estimate_summary(
            category, brand_name, model_number, strategy
        )
        return summary.value

    async def estimate_summary(
        self,
        category: Union[ApplianceCategory, str],
        brand_name: Optional[str] = None,
        model_number: Optional[str] = None,
        strategy: Strategy = Strategy.MEDIAN,
    ) -> EstimateSummary:
        """Estimate plus the partition outcomes behind it."""
        if isinstance(category, str):
            category = get_category(category)

        brand = normalize_filter_value(brand_name)
        model = normalize_filter_value(model_number)

        results = await self._aggregator.fetch_partition_results(
            category.partition_ids, brand, model
        )
        records = self._select(self._aggregator.merge(results))

        summary = EstimateSummary(
            value=NO_DATA_ESTIMATE,
            strategy=strategy,
            record_count=len(records),
            partitions_succeeded=[r.partition_id for r in results if r.ok],
            partitions_failed=[r.partition_id for r in results if not r.ok],
        )

        if not records:
            logger.info(f"No records for {category.id} (brand={brand}, model={model})")
            return summary

        values = [r.annual_energy_use_kwh_per_year for r in records]
        summary.value = reduce_values(values, strategy)

        logger.info(
            f"Estimated {summary.value:.1f} kWh/yr for {category.id} "
            f"from {len(values)} records ({strategy.value})"
        )
        return summary

    def _select(
        self,
        records: list[NormalizedApplianceData],
    ) -> list[NormalizedApplianceData]:
        if not self._skip_missing_energy:
            return records
        return [r for r in records if r.has_energy_data]

    async def fetch_appliances(
        self,
        category: Union[ApplianceCategory, str],
        brand_name: Optional[str] = None,
        model_number: Optional[str] = None,
    ) -> list[NormalizedApplianceData]:
        """Deduplicated records for a category."""
        if isinstance(category, str):
            category = get_category(category)
        return await self._aggregator.fetch_appliances(
            category.partition_ids, brand_name, model_number
        )

    async def close(self) -> None:
        """Close resources."""
        await self._aggregator.close()

    async def __aenter__(self) -> "Estimator":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
