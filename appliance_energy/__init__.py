"""
Appliance Energy Package - Energy use estimates from certification records.

Turns loosely structured ENERGY STAR open-data records into one
normalized annual energy estimate in kWh/year.

Features:
- Field-name reconciliation across independently maintained partitions
- Concurrent per-partition retrieval, isolated failures
- Deduplication of models certified in overlapping partitions
- Median or mean aggregation

Quick Start:
    from appliance_energy import Estimator, Strategy, get_category

    async def run():
        async with Estimator() as estimator:
            kwh = await estimator.estimate(
                get_category("refrigerator"),
                brand_name="Whirlpool",
                strategy=Strategy.MEDIAN,
            )
            print(f"{kwh:.1f} kWh/year")
"""

from appliance_energy.aggregator import RecordAggregator, distinct_appliances
from appliance_energy.config import EstimatorConfig
from appliance_energy.estimator import Estimator
from appliance_energy.exceptions import (
    ApplianceDataError,
    ConfigurationError,
    PartitionAggregationError,
    PartitionDecodeError,
    PartitionFetchError,
    RateLimitError,
    UnknownCategoryError,
)
from appliance_energy.fetcher import (
    PartitionFetcher,
    build_query_params,
    build_where_clause,
)
from appliance_energy.models import (
    AggregationPolicy,
    ApplianceCategory,
    EstimateSummary,
    NormalizedApplianceData,
    PartitionResult,
    Strategy,
)
from appliance_energy.normalizer import normalize_record, normalize_records
from appliance_energy.statistics import mean, median, reduce_values
from appliance_energy.taxonomy import (
    CATEGORIES,
    category_for_partition,
    get_category,
    list_categories,
)


__version__ = "1.0.0"

__all__ = [
    # Models
    "ApplianceCategory",
    "NormalizedApplianceData",
    "PartitionResult",
    "EstimateSummary",
    "Strategy",
    "AggregationPolicy",

    # Exceptions
    "ApplianceDataError",
    "PartitionFetchError",
    "PartitionDecodeError",
    "RateLimitError",
    "PartitionAggregationError",
    "ConfigurationError",
    "UnknownCategoryError",

    # Taxonomy
    "CATEGORIES",
    "list_categories",
    "get_category",
    "category_for_partition",

    # Pipeline
    "normalize_record",
    "normalize_records",
    "PartitionFetcher",
    "build_where_clause",
    "build_query_params",
    "RecordAggregator",
    "distinct_appliances",
    "mean",
    "median",
    "reduce_values",
    "Estimator",
    "EstimatorConfig",
]
