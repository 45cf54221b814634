"""
Estimate appliance energy use from ENERGY STAR records.

Demonstrates:
- Loading configuration from the environment / .env
- Concurrent multi-partition retrieval
- Median and mean estimates with partition outcomes

Usage:
    python -m scripts.estimate_energy refrigerator --brand Whirlpool
    python -m scripts.estimate_energy --list
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from appliance_energy import (
    ConfigurationError,
    Estimator,
    EstimatorConfig,
    Strategy,
    UnknownCategoryError,
    get_category,
    list_categories,
)


logger = logging.getLogger(__name__)


def print_banner(text: str) -> None:
    """Print a banner."""
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


def print_categories() -> None:
    print_banner("Appliance Categories")
    for category in list_categories():
        partitions = ", ".join(category.partition_ids)
        print(f"  {category.id:<26} {category.display_name:<26} [{partitions}]")


async def run_estimate(
    config: EstimatorConfig,
    category_id: str,
    brand: str = None,
    model: str = None,
) -> int:
    category = get_category(category_id)
    print_banner(f"Estimate: {category.display_name}")

    async with Estimator.from_config(config) as estimator:
        for strategy in (Strategy.MEDIAN, Strategy.MEAN):
            summary = await estimator.estimate_summary(category, brand, model, strategy)
            print(
                f"  {strategy.value:<7} {summary.value:>10.1f} kWh/yr | "
                f"records: {summary.record_count} | "
                f"partitions ok: {len(summary.partitions_succeeded)} "
                f"failed: {len(summary.partitions_failed)}"
            )
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Estimate annual appliance energy use")
    parser.add_argument("category", nargs="?", help="Category id, e.g. refrigerator")
    parser.add_argument("--brand", help="Brand name filter")
    parser.add_argument("--model", help="Model number filter")
    parser.add_argument("--list", action="store_true", help="List categories and exit")
    args = parser.parse_args()

    try:
        config = EstimatorConfig.from_env()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"Configuration error: {error}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.list or not args.category:
        print_categories()
        return 0

    try:
        return asyncio.run(run_estimate(config, args.category, args.brand, args.model))
    except UnknownCategoryError as e:
        print(f"{e}. Use --list to see categories.", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
