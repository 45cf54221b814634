"""
Estimator Tests.

============================================================
PURPOSE
============================================================
End-to-end tests for the estimate pipeline with stubbed partitions.

TEST CATEGORIES:
- Strategies (median, mean)
- No-data sentinel and failure degradation
- Summaries and category resolution

============================================================
"""

from unittest.mock import patch

import pytest

from appliance_energy.aggregator import RecordAggregator
from appliance_energy.config import EstimatorConfig
from appliance_energy.estimator import Estimator
from appliance_energy.exceptions import PartitionFetchError, UnknownCategoryError
from appliance_energy.models import AggregationPolicy, ApplianceCategory, PartitionResult, Strategy
from appliance_energy.normalizer import normalize_records


# ============================================================
# HELPERS
# ============================================================

class StubFetcher:
    """Serves canned rows per partition; errors become failures."""

    def __init__(self, partitions):
        self.partitions = partitions
        self.calls = []

    async def fetch(self, partition_id, brand_name=None, model_number=None):
        self.calls.append((partition_id, brand_name, model_number))
        outcome = self.partitions.get(partition_id, [])
        if isinstance(outcome, PartitionFetchError):
            return PartitionResult.failure(partition_id, outcome)
        return PartitionResult.success(
            partition_id, normalize_records(outcome, partition_id)
        )

    async def close(self):
        pass


def make_estimator(partitions, **kwargs):
    fetcher = StubFetcher(partitions)
    return Estimator(RecordAggregator(fetcher), **kwargs), fetcher


@pytest.fixture
def fridge():
    return ApplianceCategory(
        id="fridge",
        display_name="Fridge",
        partition_ids=("vintage-a", "vintage-b"),
    )


def rows(*energies):
    return [
        {"brand_name": f"B{i}", "model_number": f"M{i}", "annual_energy_use_kwh_yr": e}
        for i, e in enumerate(energies)
    ]


# ============================================================
# STRATEGY TESTS
# ============================================================

class TestStrategies:
    """Tests for median and mean estimates."""

    @pytest.mark.asyncio
    async def test_median_default(self, fridge):
        """Test median over records from both partitions."""
        estimator, _ = make_estimator({
            "vintage-a": rows(10, 20),
            "vintage-b": [
                {"brand_name": "X", "model_number": "Y", "annual_energy_use_kwh_yr": "30"},
            ],
        })

        assert await estimator.estimate(fridge) == 20.0

    @pytest.mark.asyncio
    async def test_median_even(self, fridge):
        """Test even-sized median averages the central values."""
        estimator, _ = make_estimator({"vintage-a": rows(10, 20, 30, 40)})

        assert await estimator.estimate(fridge, strategy=Strategy.MEDIAN) == 25.0

    @pytest.mark.asyncio
    async def test_mean(self, fridge):
        """Test mean strategy."""
        estimator, _ = make_estimator({"vintage-a": rows(10, 20, 30)})

        assert await estimator.estimate(fridge, strategy=Strategy.MEAN) == 20.0

    @pytest.mark.asyncio
    async def test_duplicates_not_double_counted(self, fridge):
        """Test a model listed in both partitions counts once."""
        listing = {"brand_name": "LG", "model_number": "A", "annual_energy_use_kwh_yr": 900}
        estimator, _ = make_estimator({
            "vintage-a": [listing, {"brand_name": "GE", "model_number": "B", "annual_energy_use_kwh_yr": 100}],
            "vintage-b": [dict(listing)],
        })

        assert await estimator.estimate(fridge, strategy=Strategy.MEAN) == 500.0

    @pytest.mark.asyncio
    async def test_missing_energy_counted_as_zero(self, fridge):
        """Test records without energy contribute 0.0 by default."""
        estimator, _ = make_estimator({
            "vintage-a": rows(300) + [{"brand_name": "Z", "model_number": "Q"}],
        })

        assert await estimator.estimate(fridge, strategy=Strategy.MEAN) == 150.0

    @pytest.mark.asyncio
    async def test_skip_missing_energy(self, fridge):
        """Test opting out of the 0.0 default for missing energy."""
        estimator, _ = make_estimator(
            {"vintage-a": rows(300) + [{"brand_name": "Z", "model_number": "Q"}]},
            skip_missing_energy=True,
        )

        assert await estimator.estimate(fridge, strategy=Strategy.MEAN) == 300.0


# ============================================================
# SENTINEL TESTS
# ============================================================

class TestNoData:
    """Tests for the 0.0 no-data sentinel."""

    @pytest.mark.asyncio
    async def test_no_matches_returns_zero(self, fridge):
        """Test filters matching nothing give 0.0 without reducing."""
        estimator, _ = make_estimator({})

        with patch("appliance_energy.estimator.reduce_values") as reducer:
            value = await estimator.estimate(fridge, brand_name="nobody")

        assert value == 0.0
        reducer.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_partitions_failed_returns_zero(self, fridge):
        """Test total upstream failure degrades to 0.0."""
        estimator, _ = make_estimator({
            "vintage-a": PartitionFetchError("HTTP 500", status_code=500),
            "vintage-b": PartitionFetchError("Connection error"),
        })

        assert await estimator.estimate(fridge) == 0.0

    @pytest.mark.asyncio
    async def test_partial_failure_uses_survivors(self, fridge):
        """Test a failing partition only removes its own records."""
        estimator, _ = make_estimator({
            "vintage-a": PartitionFetchError("HTTP 500", status_code=500),
            "vintage-b": rows(120, 140),
        })

        assert await estimator.estimate(fridge, strategy=Strategy.MEAN) == 130.0


# ============================================================
# SUMMARY AND RESOLUTION TESTS
# ============================================================

class TestSummary:
    """Tests for estimate_summary() and category handling."""

    @pytest.mark.asyncio
    async def test_summary_reports_partitions(self, fridge):
        """Test summary splits succeeded and failed partitions."""
        estimator, _ = make_estimator({
            "vintage-a": PartitionFetchError("HTTP 500", status_code=500),
            "vintage-b": rows(50),
        })

        summary = await estimator.estimate_summary(fridge)

        assert summary.value == 50.0
        assert summary.record_count == 1
        assert summary.partitions_succeeded == ["vintage-b"]
        assert summary.partitions_failed == ["vintage-a"]
        assert summary.is_partial

    @pytest.mark.asyncio
    async def test_filters_normalized_once(self, fridge):
        """Test brand/model reach partitions trimmed and upper-cased."""
        estimator, fetcher = make_estimator({})

        await estimator.estimate(fridge, brand_name="  whirlpool ", model_number="wrf555")

        assert sorted(fetcher.calls) == [
            ("vintage-a", "WHIRLPOOL", "WRF555"),
            ("vintage-b", "WHIRLPOOL", "WRF555"),
        ]

    @pytest.mark.asyncio
    async def test_category_id_resolved(self):
        """Test a taxonomy id is accepted in place of a category."""
        estimator, fetcher = make_estimator({"t9u7-4d2j": rows(608)})

        assert await estimator.estimate("clothes_dryer") == 608.0
        assert [c[0] for c in fetcher.calls] == ["t9u7-4d2j"]

    @pytest.mark.asyncio
    async def test_unknown_category_id_raises(self):
        """Test an unknown id is rejected before any fetch."""
        estimator, fetcher = make_estimator({})

        with pytest.raises(UnknownCategoryError):
            await estimator.estimate("toaster")

        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_fetch_appliances(self, fridge):
        """Test records are exposed for a category."""
        estimator, _ = make_estimator({"vintage-a": rows(1, 2)})

        records = await estimator.fetch_appliances(fridge)

        assert [r.annual_energy_use_kwh_per_year for r in records] == [1.0, 2.0]

    def test_from_config_applies_policy(self):
        """Test configured failure policy reaches the aggregator."""
        config = EstimatorConfig(failure_policy=AggregationPolicy.STRICT)

        estimator = Estimator.from_config(config)

        assert estimator._aggregator.policy == AggregationPolicy.STRICT
