"""
Input validation and loading for raw dispatch requests.

Raw inputs are JSON-shaped: ``{"drivers": [...], "orders": [...],
"graph": {node: {neighbor: distance}}}``. Record keys are accepted in
either snake_case or the camelCase used by JSON clients
(``current_location`` / ``currentLocation``).

Validation is purely structural and runs before anything else touches the
data. Loaders then fill defaults for optional fields and return fresh
objects, so nothing downstream holds a reference to caller-owned data.

Usage:
    validate_inputs(raw)                      # raises InputValidationError
    drivers = load_drivers(raw["drivers"])
    orders = load_orders(raw["orders"])
    graph = load_road_graph(raw["graph"])
"""

from __future__ import annotations

from collections.abc import Mapping
from numbers import Real
from typing import Any

from src.dispatch.config import LoaderConfig
from src.dispatch.models import DEFAULT_LOCATION, Driver, Order


class InputValidationError(ValueError):
    """Raised when raw inputs fail structural validation.

    Attributes:
        errors: Every problem found, in discovery order.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid inputs: " + "; ".join(self.errors))


_ALIASES = {
    "current_location": "currentLocation",
    "shift_end_time": "shiftEndTime",
}


def _get(record: Mapping, key: str, default: Any = None) -> Any:
    if key in record:
        return record[key]
    alias = _ALIASES.get(key)
    if alias is not None and alias in record:
        return record[alias]
    return default


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_record(value: Any) -> bool:
    return isinstance(value, Mapping)


# ── Validation ──────────────────────────────────────────────────────


def collect_input_issues(inputs: Any) -> list[str]:
    """Check raw inputs for structural problems.

    Returns:
        List of error messages (empty = valid).
    """
    if not _is_record(inputs):
        return ["Inputs must be a mapping with drivers, orders and graph"]

    issues: list[str] = []
    issues.extend(_driver_issues(inputs.get("drivers")))
    issues.extend(_order_issues(inputs.get("orders")))
    issues.extend(_graph_issues(inputs.get("graph")))
    return issues


def validate_inputs(inputs: Any) -> None:
    """Raise InputValidationError if `inputs` is structurally invalid."""
    issues = collect_input_issues(inputs)
    if issues:
        raise InputValidationError(issues)


def _driver_issues(drivers: Any) -> list[str]:
    if not isinstance(drivers, list) or not drivers:
        return ["Drivers must be a non-empty list"]

    issues = []
    for i, driver in enumerate(drivers):
        if not _is_record(driver):
            issues.append(f"Driver at index {i} must be a mapping")
            continue
        if not driver.get("id") and not driver.get("name"):
            issues.append(f"Driver at index {i} must have an id or name")
        capacity = driver.get("capacity")
        if not _is_number(capacity) or capacity <= 0:
            issues.append(f"Driver at index {i} must have a positive numeric capacity")
        location = _get(driver, "current_location")
        if location is not None and not isinstance(location, str):
            issues.append(f"Driver at index {i} has a non-string current location")
    return issues


def _order_issues(orders: Any) -> list[str]:
    if not isinstance(orders, list) or not orders:
        return ["Orders must be a non-empty list"]

    issues = []
    for i, order in enumerate(orders):
        if not _is_record(order):
            issues.append(f"Order at index {i} must be a mapping")
            continue
        destination = order.get("destination")
        if not order.get("id") and not destination:
            issues.append(f"Order at index {i} must have an id or destination")
        if not isinstance(destination, str) or not destination:
            issues.append(f"Order at index {i} must have a non-empty string destination")
        priority = order.get("priority")
        if priority is not None and (
            not isinstance(priority, int) or isinstance(priority, bool) or priority < 1
        ):
            issues.append(f"Order at index {i} priority must be a positive integer")
        size = order.get("size")
        if size is not None and (not _is_number(size) or size < 0):
            issues.append(f"Order at index {i} size must be a non-negative number")
    return issues


def _graph_issues(graph: Any) -> list[str]:
    if not _is_record(graph) or not graph:
        return ["Graph must be a non-empty mapping of node -> {neighbor: distance}"]

    issues = []
    n_connections = 0
    for node, connections in graph.items():
        if not _is_record(connections):
            issues.append(f"Graph node {node!r} must have a connections mapping")
            continue
        for neighbor, distance in connections.items():
            if not _is_number(distance) or distance < 0:
                issues.append(
                    f"Invalid distance {distance!r} for {node!r} -> {neighbor!r}: "
                    "must be a non-negative number"
                )
            n_connections += 1

    if not issues and n_connections == 0:
        issues.append("Graph must contain at least one connection")
    return issues


# ── Loading ─────────────────────────────────────────────────────────


def load_drivers(drivers: list[Mapping], config: LoaderConfig | None = None) -> list[Driver]:
    """Build Driver records, filling defaults for omitted fields.

    A missing location stays None; the planner substitutes the configured
    default start node.
    """
    cfg = config or LoaderConfig()
    loaded = []
    for i, raw in enumerate(drivers):
        capacity = raw.get("capacity")
        availability = raw.get("availability")
        loaded.append(
            Driver(
                id=str(raw.get("id") or f"driver-{i + 1}"),
                name=str(raw.get("name") or f"Driver {i + 1}"),
                capacity=float(capacity) if capacity else cfg.default_capacity,
                current_location=_get(raw, "current_location") or None,
                availability=True if availability is None else bool(availability),
                shift_end_time=_get(raw, "shift_end_time"),
            )
        )
    return loaded


def load_orders(orders: list[Mapping], config: LoaderConfig | None = None) -> list[Order]:
    """Build Order records, filling defaults for omitted fields."""
    cfg = config or LoaderConfig()
    loaded = []
    for i, raw in enumerate(orders):
        size = raw.get("size")
        loaded.append(
            Order(
                id=str(raw.get("id") or f"order-{i + 1}"),
                destination=raw["destination"],
                priority=int(raw.get("priority") or cfg.default_priority),
                size=float(size) if size is not None else cfg.default_order_size,
                deadline=raw.get("deadline") or raw.get("deadlineTime"),
            )
        )
    return loaded


def load_road_graph(
    graph: Mapping[str, Mapping[str, float]],
    depot: str = DEFAULT_LOCATION,
) -> dict[str, dict[str, float]]:
    """Copy the adjacency mapping; add an empty `depot` node if none exists."""
    loaded = {str(node): dict(connections) for node, connections in graph.items()}
    loaded.setdefault(depot, {})
    return loaded
