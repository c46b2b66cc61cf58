"""
Dispatch engine: the top-level orchestrator.

Wires together validation, loading, the greedy planner and the route
summarizer into a single call over raw JSON-shaped inputs.

Usage:
    config = load_config("config/default_dispatch.yaml")
    plan = DispatchEngine(config).run(inputs)
    print(f"Assigned {plan.summary.assigned_orders}/{plan.summary.total_orders}")

Each run gets its own path cache (when enabled) and its own deep copy of
the inputs; nothing is shared between runs.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

import numpy as np

from src.dispatch.config import DispatchConfig
from src.dispatch.loader import load_drivers, load_orders, load_road_graph, validate_inputs
from src.dispatch.models import Assignment
from src.dispatch.planner import GreedyPlanner
from src.dispatch.summarizer import RouteSummary, summarize_route
from src.roadnet.graph import RoadGraph
from src.roadnet.shortest_path import PathCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlannedDelivery:
    """An assignment together with its route summary."""

    assignment: Assignment
    summary: RouteSummary

    def to_dict(self) -> dict:
        a, s = self.assignment, self.summary
        return {
            "driver_id": a.driver.id,
            "driver_name": a.driver.name,
            "order_id": a.order.id,
            "destination": a.order.destination,
            "priority": a.order.priority,
            "size": a.order.size,
            "score": a.score,
            "distance": s.distance,
            "route": list(s.route),
            "eta_minutes": s.eta_minutes,
            "estimated_arrival": s.estimated_arrival.isoformat(),
            "unreachable": s.unreachable,
        }


@dataclass
class RunSummary:
    """Run-level counts and averages.

    ``cached_routes`` is the number of distinct (source, target) pairs
    resolved through the cache, 0 when caching is disabled.
    """

    total_drivers: int = 0
    total_orders: int = 0
    assigned_orders: int = 0
    unassigned_orders: int = 0
    average_eta_minutes: float = 0.0
    total_distance: float = 0.0
    cached_routes: int = 0
    cache_hits: int = 0
    path_queries: int = 0
    solve_time_ms: float = 0.0


@dataclass
class DeliveryPlan:
    """Final result of one optimization run."""

    deliveries: list[PlannedDelivery] = field(default_factory=list)
    unassigned_order_ids: list[str] = field(default_factory=list)
    summary: RunSummary = field(default_factory=RunSummary)

    @property
    def assignments(self) -> list[Assignment]:
        return [d.assignment for d in self.deliveries]

    def to_dict(self) -> dict:
        return {
            "assignments": [d.to_dict() for d in self.deliveries],
            "unassigned_orders": list(self.unassigned_order_ids),
            "summary": asdict(self.summary),
        }


class DispatchEngine:
    """Top-level dispatch orchestrator.

    Args:
        config: Full dispatch configuration.
    """

    def __init__(self, config: DispatchConfig | None = None) -> None:
        self.config = config or DispatchConfig()
        self.planner = GreedyPlanner(self.config.planner, self.config.routing)

    def run(self, inputs: Mapping[str, Any], now: datetime | None = None) -> DeliveryPlan:
        """Validate, plan and summarize one batch of drivers and orders.

        Raises:
            InputValidationError: If the inputs are structurally invalid.
        """
        inputs = copy.deepcopy(inputs)
        validate_inputs(inputs)

        routing = self.config.routing
        drivers = load_drivers(inputs["drivers"], self.config.loader)
        orders = load_orders(inputs["orders"], self.config.loader)
        graph = load_road_graph(inputs["graph"], routing.default_location)

        for issue in RoadGraph.from_adjacency(graph).validate(routing.default_location):
            logger.warning("road graph: %s", issue)

        cache = PathCache() if routing.use_cache else None
        result = self.planner.assign_with_diagnostics(drivers, orders, graph, cache)

        now = now or datetime.now(timezone.utc)
        deliveries = [
            PlannedDelivery(
                assignment=a,
                summary=summarize_route(
                    a,
                    graph,
                    cache,
                    speed_kmh=routing.speed_kmh,
                    default_location=routing.default_location,
                    now=now,
                ),
            )
            for a in result.assignments
        ]

        etas = [d.summary.eta_minutes for d in deliveries]
        summary = RunSummary(
            total_drivers=len(drivers),
            total_orders=len(orders),
            assigned_orders=len(deliveries),
            unassigned_orders=len(result.unassigned_orders),
            average_eta_minutes=float(np.mean(etas)) if etas else 0.0,
            total_distance=float(np.sum([d.summary.distance for d in deliveries])),
            cached_routes=len(cache) if cache is not None else 0,
            cache_hits=cache.hits if cache is not None else 0,
            path_queries=result.path_queries,
            solve_time_ms=result.solve_time_ms,
        )
        logger.info(
            "assigned %d/%d orders to %d drivers (avg ETA %.1f min, %d cached routes)",
            summary.assigned_orders,
            summary.total_orders,
            summary.total_drivers,
            summary.average_eta_minutes,
            summary.cached_routes,
        )
        return DeliveryPlan(
            deliveries=deliveries,
            unassigned_order_ids=[o.id for o in result.unassigned_orders],
            summary=summary,
        )


def optimize_delivery(
    inputs: Mapping[str, Any],
    config: DispatchConfig | None = None,
    *,
    use_cache: bool | None = None,
) -> DeliveryPlan:
    """One-shot convenience wrapper around `DispatchEngine.run`."""
    config = (config or DispatchConfig()).with_overrides(use_cache=use_cache)
    return DispatchEngine(config).run(inputs)
