"""Route and ETA summary for a finalized assignment."""

from __future__ import annotations

import math
from collections.abc import MutableMapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from src.dispatch.models import DEFAULT_LOCATION, Assignment
from src.roadnet.shortest_path import Graph, PathKey, PathResult, shortest_path

AVERAGE_SPEED_KMH = 30.0


@dataclass(frozen=True)
class RouteSummary:
    """Route details for one assignment.

    ``unreachable`` is explicit so a zero distance always means the driver
    is already at the destination.
    """

    route: tuple[str, ...]
    distance: float
    eta_minutes: int
    estimated_arrival: datetime
    unreachable: bool = False


def eta_minutes(distance: float, speed_kmh: float = AVERAGE_SPEED_KMH) -> int:
    """Travel time in whole minutes at a constant average speed.

    Exact halves round up (12.25 km at 30 km/h is 25 minutes).
    """
    return int(math.floor(distance * 60 / speed_kmh + 0.5))


def summarize_route(
    assignment: Assignment,
    graph: Graph,
    cache: MutableMapping[PathKey, PathResult] | None = None,
    *,
    speed_kmh: float = AVERAGE_SPEED_KMH,
    default_location: str = DEFAULT_LOCATION,
    now: datetime | None = None,
) -> RouteSummary:
    """Re-derive the route for `assignment` and convert distance to an ETA.

    Args:
        assignment: A planner result.
        graph: The same adjacency mapping the planner used.
        cache: The run's path cache; the planner's query is normally a hit.
        speed_kmh: Average speed in distance units per hour.
        default_location: Start node for drivers without a location.
        now: Reference time for ``estimated_arrival`` (defaults to UTC now).
    """
    start = assignment.driver.start_node(default_location)
    result = shortest_path(graph, start, assignment.order.destination, cache)
    now = now or datetime.now(timezone.utc)

    if not result.reachable:
        return RouteSummary(
            route=(),
            distance=0.0,
            eta_minutes=0,
            estimated_arrival=now,
            unreachable=True,
        )

    minutes = eta_minutes(result.distance, speed_kmh)
    return RouteSummary(
        route=result.path,
        distance=result.distance,
        eta_minutes=minutes,
        estimated_arrival=now + timedelta(minutes=minutes),
    )
