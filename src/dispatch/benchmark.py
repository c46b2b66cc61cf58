"""
src/dispatch/benchmark.py
──────────────────────────────────────────────────────────────────────────────
Benchmark: greedy planning with and without the run-scoped path cache.

Draws random road networks and random driver/order batches, plans each
batch twice (cache off, cache on) and checks that both runs produce the
same assignments. The cache may only change cost, never results.

Metrics per scenario:
  • Solve time            (wall-clock, ms)
  • Path queries          (shortest-path calls issued by the planner)
  • Cache hit rate        (cached runs only)
  • Assignment rate       (orders assigned / orders available)

Usage:
    python -m src.dispatch.benchmark                      # 50 scenarios, defaults
    python -m src.dispatch.benchmark --scenarios 200
    python -m src.dispatch.benchmark --nodes 80 --drivers 20 --orders 20
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass

import networkx as nx
import numpy as np

from src.dispatch.models import Driver, Order
from src.dispatch.planner import GreedyPlanner, PlanResult
from src.roadnet.graph import DEPOT, RoadGraph
from src.roadnet.shortest_path import PathCache


@dataclass
class BenchmarkScenario:
    """A single random dispatch scenario."""

    graph: dict[str, dict[str, float]]
    drivers: list[Driver]
    orders: list[Order]


def random_road_graph(
    n_nodes: int,
    rng: np.random.Generator,
    edge_probability: float = 0.08,
    max_distance: int = 50,
) -> RoadGraph:
    """Random directed road network with a depot and integer-valued distances.

    A directed ring through all nodes guarantees strong connectivity; random
    extra edges give Dijkstra real choices to make.
    """
    seed = int(rng.integers(2**31 - 1))
    base = nx.gnp_random_graph(n_nodes, edge_probability, seed=seed, directed=True)
    names = [DEPOT] + [f"N{i:03d}" for i in range(1, n_nodes)]

    g = RoadGraph()
    for name in names:
        g.add_node(name)
    for u, v in base.edges:
        g.add_edge(names[u], names[v], float(rng.integers(1, max_distance + 1)))
    for i in range(n_nodes):
        u, v = names[i], names[(i + 1) % n_nodes]
        if not g.graph.has_edge(u, v):
            g.add_edge(u, v, float(rng.integers(1, max_distance + 1)))
    return g


def generate_scenario(
    n_nodes: int,
    n_drivers: int,
    n_orders: int,
    rng: np.random.Generator,
    depot_fraction: float = 0.3,
) -> BenchmarkScenario:
    """Generate a random dispatch scenario.

    About `depot_fraction` of drivers start at the depot, so several drivers
    share a source node and the cache has something to reuse.
    """
    road = random_road_graph(n_nodes, rng)
    nodes = list(road.adjacency())

    drivers = []
    for i in range(n_drivers):
        location = DEPOT if rng.random() < depot_fraction else nodes[rng.integers(len(nodes))]
        drivers.append(
            Driver(
                id=f"DRV_{i:03d}",
                name=f"Driver {i}",
                capacity=float(rng.integers(20, 101)),
                current_location=location,
            )
        )

    orders = []
    for j in range(n_orders):
        orders.append(
            Order(
                id=f"ORD_{j:03d}",
                destination=nodes[rng.integers(1, len(nodes))],
                priority=int(rng.integers(1, 4)),
                size=float(rng.integers(5, 61)),
            )
        )

    return BenchmarkScenario(graph=road.adjacency(), drivers=drivers, orders=orders)


def same_assignments(a: PlanResult, b: PlanResult) -> bool:
    """True if both runs matched the same pairs at the same distances."""
    key_a = [(x.driver.id, x.order.id, x.distance, x.route) for x in a.assignments]
    key_b = [(x.driver.id, x.order.id, x.distance, x.route) for x in b.assignments]
    return key_a == key_b


# ── Main benchmark loop ───────────────────────────────────────────────────────


def run_benchmark(
    n_scenarios: int = 50,
    n_nodes: int = 60,
    n_drivers: int = 20,
    n_orders: int = 20,
    seed: int = 42,
) -> dict[str, dict[str, list]]:
    """Run scenarios, print a comparison table and return the raw samples."""

    print("=" * 72)
    print("  Dispatch Planner Benchmark (path cache off vs on)")
    print("=" * 72)
    print(
        f"  Scenarios: {n_scenarios}  |  Nodes: {n_nodes}  |  Drivers: {n_drivers}"
        f"  |  Orders: {n_orders}  |  Seed: {seed}"
    )
    print()

    rng = np.random.default_rng(seed)
    planner = GreedyPlanner()
    results: dict[str, dict[str, list]] = {
        name: {"time_ms": [], "queries": [], "rate": [], "hit_rate": []}
        for name in ("uncached", "cached")
    }
    mismatches = 0

    for _ in range(n_scenarios):
        scenario = generate_scenario(n_nodes, n_drivers, n_orders, rng)

        plain = planner.assign_with_diagnostics(scenario.drivers, scenario.orders, scenario.graph)
        cache = PathCache()
        cached = planner.assign_with_diagnostics(
            scenario.drivers, scenario.orders, scenario.graph, cache
        )
        if not same_assignments(plain, cached):
            mismatches += 1

        for name, r in (("uncached", plain), ("cached", cached)):
            results[name]["time_ms"].append(r.solve_time_ms)
            results[name]["queries"].append(r.path_queries)
            results[name]["rate"].append(r.assignment_rate * 100)
        results["uncached"]["hit_rate"].append(0.0)
        results["cached"]["hit_rate"].append(cache.hit_rate * 100)

    # ── Print results ─────────────────────────────────────────────────────────
    col_w = 14
    names = ["uncached", "cached"]
    print(f"  {'Metric':<28}" + "".join(f"{n:>{col_w}}" for n in names))
    print("  " + "─" * (28 + col_w * len(names)))

    rows = [
        ("Avg solve time (ms)", lambda d: np.mean(d["time_ms"]), ".2f"),
        ("P95 solve time (ms)", lambda d: np.percentile(d["time_ms"], 95), ".2f"),
        ("Avg path queries", lambda d: np.mean(d["queries"]), ".1f"),
        ("Avg assignment rate (%)", lambda d: np.mean(d["rate"]), ".1f"),
        ("Avg cache hit rate (%)", lambda d: np.mean(d["hit_rate"]), ".1f"),
    ]
    for label, fn, fmt in rows:
        print(f"  {label:<28}" + "".join(f"{fn(results[n]):{col_w}{fmt}}" for n in names))

    print()
    print(f"  Result mismatches (cache on vs off): {mismatches}")
    print("\n" + "=" * 72)
    return results


# ── CLI entry point ───────────────────────────────────────────────────────────

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Benchmark greedy dispatch with path caching")
    parser.add_argument("--scenarios", type=int, default=50)
    parser.add_argument("--nodes", type=int, default=60)
    parser.add_argument("--drivers", type=int, default=20)
    parser.add_argument("--orders", type=int, default=20)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()
    run_benchmark(args.scenarios, args.nodes, args.drivers, args.orders, args.seed)
