"""
Driver, Order and Assignment models.

Design decisions:
- Drivers and orders are frozen once loaded. The planner never mutates
  them; per-run capacity and availability live in `DriverState`.
- Orders are processed in the order the caller supplies them. There is no
  re-sorting by priority; priority only enters through the score.
- Time-window fields (shift end, deadline) are carried through for
  reporting but not enforced by the greedy planner.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_LOCATION = "depot"


@dataclass(frozen=True)
class Driver:
    """A delivery driver (mobile agent).

    Attributes:
        id: Unique driver identifier.
        name: Display name.
        capacity: Load the driver can carry, in the same unit as order size.
        current_location: Node id of the driver's position, or None to start from
            the configured default location.
        availability: Whether the driver can take work at the start of a run.
        shift_end_time: ISO timestamp of shift end (informational).
    """

    id: str
    name: str
    capacity: float
    current_location: str | None = DEFAULT_LOCATION
    availability: bool = True
    shift_end_time: str | None = None

    def start_node(self, default: str = DEFAULT_LOCATION) -> str:
        """Node the driver departs from."""
        return self.current_location or default


@dataclass(frozen=True)
class Order:
    """A destination-bound delivery order.

    Attributes:
        id: Unique order identifier.
        destination: Node id of the drop-off location.
        priority: Positive integer; higher means more urgent.
        size: Demand against driver capacity.
        deadline: ISO timestamp of the delivery deadline (informational).
    """

    id: str
    destination: str
    priority: int = 1
    size: float = 0.0
    deadline: str | None = None


@dataclass
class DriverState:
    """Per-run working state for one driver. Owned by a single planner call."""

    driver: Driver
    remaining_capacity: float
    available: bool

    @classmethod
    def initial(cls, driver: Driver) -> DriverState:
        return cls(driver=driver, remaining_capacity=driver.capacity, available=driver.availability)

    def can_carry(self, order: Order) -> bool:
        return self.available and self.remaining_capacity >= order.size

    def take(self, order: Order, keep_available: bool = False) -> None:
        """Commit an order. Unless `keep_available`, the driver is done for the run."""
        self.remaining_capacity -= order.size
        if not keep_available:
            self.available = False


@dataclass(frozen=True)
class Assignment:
    """A matched (driver, order) pair.

    Attributes:
        driver: The caller's driver record (never mutated).
        order: The matched order.
        score: distance + priority_weight / priority; lower is better.
        distance: Shortest-path distance from the driver's start node.
        route: Node ids from the driver's start node to the destination.
    """

    driver: Driver
    order: Order
    score: float
    distance: float
    route: tuple[str, ...]
