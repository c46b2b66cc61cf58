"""
Greedy capacity-aware driver assignment.

For each order, in input order, pick the feasible driver with the shortest
road distance to the order's destination. Feasible means available and
with remaining capacity >= order size. Ties go to the driver listed first.

    score = distance + priority_weight / max(priority, 1)     (lower is better)

Assignment policy
─────────────────
  single_leg (default)  once assigned, the working state is marked
                        unavailable AND its capacity is reduced by the order
                        size. Residual capacity is never reused in the run.
  multi_leg             only capacity is reduced; the driver stays eligible
                        until an order no longer fits. The driver's start
                        node does not move between legs.

Orders with no feasible or reachable driver are skipped, not raised.

The caller's Driver records are never mutated; all per-run state lives in
a list of `DriverState` owned by one `assign_with_diagnostics` call.

Cost: O(drivers × orders) shortest-path queries, amortized by the optional
run-scoped path cache.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import MutableMapping, Sequence
from dataclasses import dataclass, field, replace

from src.dispatch.config import PlannerConfig, RoutingConfig
from src.dispatch.models import Assignment, Driver, DriverState, Order
from src.roadnet.shortest_path import Graph, PathKey, PathResult, shortest_path

logger = logging.getLogger(__name__)


@dataclass
class PlanResult:
    """Planner output with diagnostics.

    Attributes:
        assignments: One Assignment per matched order, in order of processing.
        unassigned_orders: Orders skipped for lack of a feasible reachable driver.
        driver_states: Snapshot of the working state after the run, one per driver.
        path_queries: Shortest-path queries issued during selection.
        solve_time_ms: Wall-clock time of the run.
    """

    assignments: list[Assignment]
    unassigned_orders: list[Order] = field(default_factory=list)
    driver_states: list[DriverState] = field(default_factory=list)
    path_queries: int = 0
    solve_time_ms: float = 0.0

    @property
    def assignment_rate(self) -> float:
        total = len(self.assignments) + len(self.unassigned_orders)
        return len(self.assignments) / total if total else 0.0


def assignment_score(distance: float, priority: int, priority_weight: float = 10.0) -> float:
    """Composite score; rewards proximity and penalizes low priority."""
    return distance + priority_weight / max(priority, 1)


class GreedyPlanner:
    """Nearest-feasible-driver greedy planner.

    Args:
        config: Score weighting and assignment policy.
        routing: Default start location for drivers without one.
    """

    def __init__(
        self,
        config: PlannerConfig | None = None,
        routing: RoutingConfig | None = None,
    ) -> None:
        self.config = config or PlannerConfig()
        self.routing = routing or RoutingConfig()
        self.total_runs: int = 0
        self.total_queries: int = 0
        self.total_solve_time_ms: float = 0.0

    def assign(
        self,
        drivers: Sequence[Driver],
        orders: Sequence[Order],
        graph: Graph,
        cache: MutableMapping[PathKey, PathResult] | None = None,
    ) -> list[Assignment]:
        """Assign drivers to orders; returns only the matched pairs."""
        return self.assign_with_diagnostics(drivers, orders, graph, cache).assignments

    def assign_with_diagnostics(
        self,
        drivers: Sequence[Driver],
        orders: Sequence[Order],
        graph: Graph,
        cache: MutableMapping[PathKey, PathResult] | None = None,
    ) -> PlanResult:
        """Assign drivers to orders and report skipped orders and working state."""

        t0 = time.perf_counter()
        states = [DriverState.initial(d) for d in drivers]
        assignments: list[Assignment] = []
        unassigned: list[Order] = []
        n_queries = 0

        for order in orders:
            best: DriverState | None = None
            best_path: PathResult | None = None

            for state in states:
                if not state.can_carry(order):
                    continue
                start = state.driver.start_node(self.routing.default_location)
                result = shortest_path(graph, start, order.destination, cache)
                n_queries += 1
                if best_path is None or result.distance < best_path.distance:
                    best, best_path = state, result

            if best is None or best_path is None or best_path.distance == math.inf:
                logger.debug(
                    "order %s skipped: %s",
                    order.id,
                    "no feasible driver" if best is None else "destination unreachable",
                )
                unassigned.append(order)
                continue

            assignments.append(
                Assignment(
                    driver=best.driver,
                    order=order,
                    score=assignment_score(
                        best_path.distance, order.priority, self.config.priority_weight
                    ),
                    distance=best_path.distance,
                    route=best_path.path,
                )
            )
            best.take(order, keep_available=self.config.policy == "multi_leg")

        ms = (time.perf_counter() - t0) * 1e3
        self.total_runs += 1
        self.total_queries += n_queries
        self.total_solve_time_ms += ms
        logger.debug(
            "planned %d/%d orders with %d path queries in %.2f ms",
            len(assignments),
            len(orders),
            n_queries,
            ms,
        )
        return PlanResult(
            assignments=assignments,
            unassigned_orders=unassigned,
            driver_states=[replace(s) for s in states],
            path_queries=n_queries,
            solve_time_ms=ms,
        )


def assign_drivers_to_orders(
    drivers: Sequence[Driver],
    orders: Sequence[Order],
    graph: Graph,
    cache: MutableMapping[PathKey, PathResult] | None = None,
    config: PlannerConfig | None = None,
) -> list[Assignment]:
    """Functional entry point: one greedy run with a throwaway planner."""
    return GreedyPlanner(config).assign(drivers, orders, graph, cache)
