"""
Appliance Taxonomy - Static, ordered table of supported categories.

Each entry maps a logical appliance type to the ENERGY STAR open-data
partitions that certify it. Declaration order is significant: reverse
lookup by partition id resolves to the first matching category.
"""

from typing import Iterable, Optional

from appliance_energy.exceptions import UnknownCategoryError
from appliance_energy.models import ApplianceCategory


CATEGORIES: tuple[ApplianceCategory, ...] = (
    ApplianceCategory(
        id="refrigerator",
        display_name="Refrigerator",
        partition_ids=("p5st-her9", "hgxv-ux9b"),
        expected_field_names=frozenset({
            "brand_name", "model_number", "annual_energy_use_kwh_yr",
            "height_in", "width_in",
        }),
    ),
    ApplianceCategory(
        id="freezer",
        display_name="Freezer",
        partition_ids=("8t9c-g3tn", "teze-bgsr"),
        expected_field_names=frozenset({
            "brand_name", "model_number", "annual_energy_use_kwh_yr",
        }),
    ),
    ApplianceCategory(
        id="dishwasher",
        display_name="Dishwasher",
        partition_ids=("q8py-6w3f", "butk-3ni4"),
        expected_field_names=frozenset({
            "brand_name", "model_number", "annual_energy_use_kwh_yr",
            "width_inches", "depth_inches",
        }),
    ),
    ApplianceCategory(
        id="clothes_washer",
        display_name="Clothes Washer",
        partition_ids=("bghd-e2wd", "d36s-eh9f"),
        expected_field_names=frozenset({
            "brand_name", "model_number", "annual_energy_use_kwh_yr",
            "height_inches", "width_inches", "depth_inches",
        }),
    ),
    ApplianceCategory(
        id="clothes_dryer",
        display_name="Clothes Dryer",
        partition_ids=("t9u7-4d2j",),
        expected_field_names=frozenset({
            "brand_name", "model_number", "estimated_annual_energy_use_kwh_yr",
        }),
    ),
    ApplianceCategory(
        id="water_heater",
        display_name="Water Heater",
        partition_ids=("xmq6-bm79",),
        expected_field_names=frozenset({
            "brand_name", "model_number", "annual_energy_use_kwh_yr",
            "storage_volume_gallons", "tank_height_inches",
            "height_to_vent_inches", "vent_size_inches", "standby_loss",
            "input_rate_thousand_btu_per_hour",
        }),
    ),
    ApplianceCategory(
        id="central_ac",
        display_name="Central AC",
        partition_ids=("s4ew-vcih",),
        expected_field_names=frozenset({
            "outdoor_unit_brand_name", "model_number", "cooling_capacity_btu_h",
        }),
    ),
    ApplianceCategory(
        id="room_ac",
        display_name="Room AC",
        partition_ids=("5xn2-dv4h", "irdz-jn2s"),
        expected_field_names=frozenset({
            "brand_name", "model_number", "annual_energy_use_kwh_yr",
            "height_in", "width_in", "depth_in",
        }),
    ),
    ApplianceCategory(
        id="dehumidifier",
        display_name="Dehumidifier",
        partition_ids=("mgiu-hu4z", "b88x-mifp"),
        expected_field_names=frozenset({
            "brand_name", "model_number", "annual_energy_use_kwh_yr",
        }),
    ),
    ApplianceCategory(
        id="ceiling_fan",
        display_name="Ceiling Fan",
        partition_ids=("2te3-nmxp", "ufj6-xsix"),
        expected_field_names=frozenset({
            "brand_name", "model_number", "ceiling_fan_size_diameters_in_inches",
            "fan_power_consumption_high_speed_w", "fan_power_consumption_standby_w",
        }),
    ),
    ApplianceCategory(
        id="computer_monitor",
        display_name="Computer Monitor",
        partition_ids=("a437-vvgv",),
        expected_field_names=frozenset({
            "brand_name", "model_number", "screen_size_inches",
            "on_mode_power_watts", "off_mode_power_watts",
        }),
    ),
    ApplianceCategory(
        id="display",
        display_name="Display",
        partition_ids=("qbg3-d468",),
        expected_field_names=frozenset({
            "brand_name", "model_number", "screen_size_inches",
            "on_mode_power_watts", "off_mode_power_watts",
        }),
    ),
    ApplianceCategory(
        id="electric_cooking_product",
        display_name="Electric Cooking Product",
        partition_ids=("m6gi-ng33",),
        expected_field_names=frozenset({
            "brand_name", "model_number", "annual_energy_consumption_kwh_yr",
            "height_inches", "width_inches", "depth_inches",
        }),
    ),
)


def list_categories() -> list[ApplianceCategory]:
    """All categories in declaration order."""
    return list(CATEGORIES)


def get_category(
    category_id: str,
    categories: Iterable[ApplianceCategory] = CATEGORIES,
) -> ApplianceCategory:
    """
    Look up a category by id.

    Raises:
        UnknownCategoryError: If no category has this id
    """
    categories = tuple(categories)
    for category in categories:
        if category.id == category_id:
            return category
    raise UnknownCategoryError(
        category_id,
        known_categories=[c.id for c in categories],
    )


def category_for_partition(
    partition_id: Optional[str],
    categories: Iterable[ApplianceCategory] = CATEGORIES,
) -> Optional[str]:
    """Id of the first category whose partitions include partition_id."""
    for category in categories:
        if partition_id in category.partition_ids:
            return category.id
    return None
