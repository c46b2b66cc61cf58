"""
Dispatch configuration dataclasses and YAML loader.

All tunable planning parameters live here as typed, frozen dataclasses.
Load from YAML with `load_config()` or construct directly for tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal

import yaml


@dataclass(frozen=True)
class RoutingConfig:
    """Shortest-path and ETA parameters."""

    speed_kmh: float = 30.0  # Average travel speed, distance units per hour
    default_location: str = "depot"  # Start node for drivers without a location
    use_cache: bool = False  # Memoize (source, target) paths within one run


@dataclass(frozen=True)
class PlannerConfig:
    """Greedy assignment parameters."""

    priority_weight: float = 10.0  # score = distance + priority_weight / priority
    # single_leg: a driver takes at most one order per run.
    # multi_leg: a driver keeps taking orders until capacity runs out.
    policy: Literal["single_leg", "multi_leg"] = "single_leg"


@dataclass(frozen=True)
class LoaderConfig:
    """Defaults filled in by the input loader for omitted optional fields."""

    default_capacity: float = 100.0
    default_order_size: float = 10.0
    default_priority: int = 1


@dataclass(frozen=True)
class DispatchConfig:
    """Top-level configuration aggregating all sub-configs."""

    routing: RoutingConfig = field(default_factory=RoutingConfig)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    loader: LoaderConfig = field(default_factory=LoaderConfig)

    def with_overrides(
        self,
        use_cache: bool | None = None,
        speed_kmh: float | None = None,
    ) -> DispatchConfig:
        """Return a copy with the given routing fields replaced (None = keep)."""
        routing = self.routing
        if use_cache is not None:
            routing = replace(routing, use_cache=use_cache)
        if speed_kmh is not None:
            routing = replace(routing, speed_kmh=speed_kmh)
        return replace(self, routing=routing)


def load_config(path: str | Path) -> DispatchConfig:
    """Load a DispatchConfig from a YAML file.

    Args:
        path: Path to a YAML config file. Missing sections use defaults.

    Returns:
        Fully constructed DispatchConfig with all sub-configs.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return DispatchConfig(
        routing=RoutingConfig(**raw.get("routing", {})),
        planner=PlannerConfig(**raw.get("planner", {})),
        loader=LoaderConfig(**raw.get("loader", {})),
    )
