"""
run_optimizer.py
──────────────────────────────────────────────────────────────────────────────
Quick-run script for the delivery dispatch optimizer.

Usage:
    python scripts/run_optimizer.py                                # sample inputs
    python scripts/run_optimizer.py --inputs my_batch.json --use-cache
    python scripts/run_optimizer.py --speed 45 --json              # raw JSON output
    python scripts/run_optimizer.py --config config/default_dispatch.yaml -v
"""

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from src.dispatch.config import DispatchConfig, load_config  # noqa: E402
from src.dispatch.engine import DispatchEngine  # noqa: E402
from src.dispatch.loader import InputValidationError  # noqa: E402


def main() -> int:
    """Main"""

    parser = argparse.ArgumentParser(description="Assign drivers to delivery orders")
    parser.add_argument(
        "--inputs",
        type=str,
        default="data/sample_inputs.json",
        help="JSON file with drivers, orders and graph",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/default_dispatch.yaml",
        help="Path to dispatch config YAML",
    )
    parser.add_argument(
        "--use-cache",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable the run-scoped path cache (overrides config)",
    )
    parser.add_argument("--speed", type=float, default=None, help="Average speed in km/h")
    parser.add_argument("--json", action="store_true", help="Print the full plan as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Load config
    config_path = Path(args.config)
    if config_path.exists():
        config = load_config(config_path)
        print(f"Loaded config from {config_path}")
    else:
        print(f"Config {config_path} not found, using defaults")
        config = DispatchConfig()
    config = config.with_overrides(use_cache=args.use_cache, speed_kmh=args.speed)

    with open(args.inputs, encoding="utf-8") as f:
        inputs = json.load(f)

    try:
        plan = DispatchEngine(config).run(inputs)
    except InputValidationError as exc:
        print("Input validation failed:")
        for error in exc.errors:
            print(f"  - {error}")
        return 1

    if args.json:
        print(json.dumps(plan.to_dict(), indent=2))
        return 0

    print(f"\n{'=' * 72}")
    print("Assignments:")
    print(f"{'=' * 72}")
    print(f"{'Driver':<10} {'Order':<10} {'Score':>8} {'Dist':>8} {'ETA(min)':>9}  Route")
    print(f"{'-' * 10} {'-' * 10} {'-' * 8} {'-' * 8} {'-' * 9}  {'-' * 20}")
    for delivery in plan.deliveries:
        a, s = delivery.assignment, delivery.summary
        print(
            f"{a.driver.id:<10} {a.order.id:<10} {a.score:>8.2f} {s.distance:>8.1f} "
            f"{s.eta_minutes:>9}  {' -> '.join(s.route)}"
        )

    summary = plan.summary
    print(f"\nAssigned {summary.assigned_orders}/{summary.total_orders} orders "
          f"with {summary.total_drivers} drivers")
    print(f"Average ETA: {summary.average_eta_minutes:.1f} min")
    if plan.unassigned_order_ids:
        print(f"Unassigned: {', '.join(plan.unassigned_order_ids)}")
    if config.routing.use_cache:
        print(f"Cached routes: {summary.cached_routes} ({summary.cache_hits} hits)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
