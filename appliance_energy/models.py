"""
Appliance Energy Models - Normalized appliance data structures.

Provides strict typing for certification records normalized across
independently maintained upstream partitions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from appliance_energy.exceptions import ConfigurationError, PartitionFetchError


class Strategy(Enum):
    """Reduction applied to the energy values of surviving records."""
    MEDIAN = "median"
    MEAN = "mean"


class AggregationPolicy(Enum):
    """How partition failures affect a multi-partition fetch."""
    BEST_EFFORT = "best_effort"
    STRICT = "strict"


@dataclass(frozen=True)
class ApplianceCategory:
    """
    One logical appliance type and the upstream partitions that carry it.

    expected_field_names is documentation only and never enforced.
    """
    id: str
    display_name: str
    partition_ids: tuple[str, ...]
    expected_field_names: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        # Keep declaration order, drop repeats
        ordered = tuple(dict.fromkeys(self.partition_ids))
        if not ordered:
            raise ConfigurationError(
                message=f"Category '{self.id}' must define at least one partition",
                config_key="partition_ids",
            )
        object.__setattr__(self, "partition_ids", ordered)
        object.__setattr__(
            self, "expected_field_names", frozenset(self.expected_field_names)
        )

    def __str__(self) -> str:
        return self.display_name

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "partition_ids": list(self.partition_ids),
            "expected_field_names": sorted(self.expected_field_names),
        }


@dataclass(frozen=True)
class NormalizedApplianceData:
    """
    Normalized certification record - STRICT schema.

    annual_energy_use_kwh_per_year is always finite and non-negative.
    A value of 0.0 means either a reported zero or no usable energy
    field; energy_field is None in the latter case.
    """
    annual_energy_use_kwh_per_year: float
    partition_id: str
    raw_fields: dict[str, Any] = field(default_factory=dict, hash=False)
    brand_name: Optional[str] = None
    model_number: Optional[str] = None
    appliance_category: Optional[str] = None
    energy_field: Optional[str] = None

    @property
    def has_energy_data(self) -> bool:
        """True when the energy value came from a record field."""
        return self.energy_field is not None

    def dedup_key(self) -> tuple[Optional[str], Optional[str], float]:
        """Identity of the physical model across overlapping partitions."""
        return (
            self.brand_name.strip().upper() if self.brand_name is not None else None,
            self.model_number.strip().upper() if self.model_number is not None else None,
            self.annual_energy_use_kwh_per_year,
        )

    def to_document(self) -> dict[str, Any]:
        """
        Flatten raw and normalized fields into one mapping.

        Normalized keys are written last and win on collision.
        """
        document = dict(self.raw_fields)
        document.update({
            "brand_name": self.brand_name,
            "model_number": self.model_number,
            "annual_energy_use_kwh_year": self.annual_energy_use_kwh_per_year,
            "partition_id": self.partition_id,
            "appliance_category": self.appliance_category,
        })
        return document


@dataclass
class PartitionResult:
    """Outcome of querying a single partition."""
    partition_id: str
    records: list[NormalizedApplianceData] = field(default_factory=list)
    error: Optional[PartitionFetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        partition_id: str,
        records: list[NormalizedApplianceData],
    ) -> "PartitionResult":
        return cls(partition_id=partition_id, records=list(records))

    @classmethod
    def failure(
        cls,
        partition_id: str,
        error: PartitionFetchError,
    ) -> "PartitionResult":
        return cls(partition_id=partition_id, records=[], error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "partition_id": self.partition_id,
            "ok": self.ok,
            "record_count": len(self.records),
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class EstimateSummary:
    """Estimate together with the partition outcomes that produced it."""
    value: float
    strategy: Strategy
    record_count: int
    partitions_succeeded: list[str] = field(default_factory=list)
    partitions_failed: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        """Some, but not all, partitions contributed."""
        return bool(self.partitions_failed) and bool(self.partitions_succeeded)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "value": self.value,
            "strategy": self.strategy.value,
            "record_count": self.record_count,
            "partitions_succeeded": self.partitions_succeeded,
            "partitions_failed": self.partitions_failed,
        }
