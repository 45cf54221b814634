"""
Field Normalizer - Reconciles partition-specific field names.

Upstream partitions are maintained independently and name the same
attribute differently. Each target field is resolved from an ordered
candidate list; the first key present with a usable value wins.
"""

import logging
import math
from typing import Any, Callable, Iterable, Optional, Sequence

from appliance_energy.models import ApplianceCategory, NormalizedApplianceData
from appliance_energy.taxonomy import CATEGORIES, category_for_partition


logger = logging.getLogger(__name__)


BRAND_NAME_FIELDS: tuple[str, ...] = (
    "brand_name",
    "outdoor_unit_brand_name",
    "manufacturer",
    "brand",
)

MODEL_NUMBER_FIELDS: tuple[str, ...] = (
    "model_number",
    "indoor_unit_model_number",
    "model",
    "model_name",
)

ENERGY_FIELDS: tuple[str, ...] = (
    "annual_energy_use_kwh_yr",
    "annual_energy_consumption_kwh_yr",
    "annual_energy_use_kwh_year",
    "energy_use_kwh_year",
    "annual_energy_consumption",
    "energy_consumption",
)

DEFAULT_ENERGY_KWH = 0.0


def first_match(
    raw: dict[str, Any],
    candidates: Sequence[str],
    coerce: Callable[[Any], Optional[Any]],
) -> tuple[Optional[str], Optional[Any]]:
    """
    Return (key, coerced value) for the first usable candidate.

    A candidate is usable when present, non-null, and coerce() does not
    return None for it.
    """
    for key in candidates:
        value = raw.get(key)
        if value is None:
            continue
        coerced = coerce(value)
        if coerced is not None:
            return key, coerced
    return None, None


def _as_text(value: Any) -> Optional[str]:
    try:
        return str(value)
    except ValueError:
        # int exceeding the interpreter's digit limit
        return None


def _as_energy(value: Any) -> Optional[float]:
    """Coerce to kWh/year, or None when the value is not usable."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None

    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None

    if not math.isfinite(number) or number < 0:
        return None
    return number


def extract_text_field(
    raw: dict[str, Any],
    candidates: Sequence[str],
) -> Optional[str]:
    """First non-null candidate rendered as a string."""
    _, value = first_match(raw, candidates, _as_text)
    return value


def extract_energy_field(raw: dict[str, Any]) -> tuple[float, Optional[str]]:
    """Energy use in kWh/year and the key it came from (0.0, None if absent)."""
    key, value = first_match(raw, ENERGY_FIELDS, _as_energy)
    if key is None:
        return DEFAULT_ENERGY_KWH, None
    return value, key


def normalize_record(
    raw: dict[str, Any],
    partition_id: str,
    categories: Iterable[ApplianceCategory] = CATEGORIES,
) -> NormalizedApplianceData:
    """
    Normalize one raw partition row.

    Never raises; unrecognized or unparsable fields fall through to the
    next candidate or to the field's default.
    """
    energy, energy_field = extract_energy_field(raw)
    if energy_field is None:
        logger.debug(f"[{partition_id}] No usable energy field, defaulting to 0.0")

    return NormalizedApplianceData(
        brand_name=extract_text_field(raw, BRAND_NAME_FIELDS),
        model_number=extract_text_field(raw, MODEL_NUMBER_FIELDS),
        annual_energy_use_kwh_per_year=energy,
        partition_id=partition_id or "",
        appliance_category=category_for_partition(partition_id, categories),
        raw_fields=raw,
        energy_field=energy_field,
    )


def normalize_records(
    rows: Iterable[dict[str, Any]],
    partition_id: str,
    categories: Iterable[ApplianceCategory] = CATEGORIES,
) -> list[NormalizedApplianceData]:
    """Normalize a batch of rows from one partition."""
    categories = tuple(categories)
    return [normalize_record(row, partition_id, categories) for row in rows]
