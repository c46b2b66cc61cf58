"""
Single-source shortest paths over a weighted adjacency mapping.

The graph is a plain ``{node: {neighbor: weight}}`` mapping with
non-negative weights. Nodes are the mapping's keys; an edge pointing at a
node that is not a key can be relaxed but never finalized as a target.

Unreachability is a normal result (``PathResult.distance == inf`` and an
empty path), never an exception. An optional cache, keyed by
``(source, target)``, memoizes results for the lifetime of one planning run.

Usage:
    cache = PathCache()
    result = shortest_path(graph, "depot", "C", cache)
    result.distance   # 40.0
    result.path       # ("depot", "C")
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass

from src.roadnet.heap import PriorityQueue

logger = logging.getLogger(__name__)

Graph = Mapping[str, Mapping[str, float]]
PathKey = tuple[str, str]


@dataclass(frozen=True)
class PathResult:
    """Distance and node sequence from source to target.

    Attributes:
        distance: Sum of edge weights, or ``math.inf`` when unreachable.
        path: Node ids from source to target inclusive; empty when unreachable.
    """

    distance: float
    path: tuple[str, ...] = ()

    @property
    def reachable(self) -> bool:
        return self.distance != math.inf

    @property
    def n_hops(self) -> int:
        return max(len(self.path) - 1, 0)


UNREACHABLE = PathResult(math.inf, ())


class PathCache(MutableMapping):
    """Run-scoped memo of shortest-path results keyed by (source, target).

    A thin dict wrapper that counts probes, so callers can report how
    effective the cache was. Not safe for concurrent writers.
    """

    def __init__(self) -> None:
        self._store: dict[PathKey, PathResult] = {}
        self.hits: int = 0
        self.misses: int = 0

    def __getitem__(self, key: PathKey) -> PathResult:
        return self._store[key]

    def __setitem__(self, key: PathKey, value: PathResult) -> None:
        self._store[key] = value

    def __delitem__(self, key: PathKey) -> None:
        del self._store[key]

    def __iter__(self) -> Iterator[PathKey]:
        return iter(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def lookup(self, key: PathKey) -> PathResult | None:
        """Probe the cache and record a hit or miss."""
        result = self._store.get(key)
        if result is None:
            self.misses += 1
        else:
            self.hits += 1
        return result

    @property
    def hit_rate(self) -> float:
        probes = self.hits + self.misses
        return self.hits / probes if probes else 0.0


def dijkstra(graph: Graph, source: str) -> tuple[dict[str, float], dict[str, str | None]]:
    """Run Dijkstra from `source` to every reachable node.

    Returns:
        Tuple of (distances, predecessors). Every graph key appears in both;
        unreached nodes have distance ``inf`` and predecessor ``None``.
    """
    dist: dict[str, float] = {node: math.inf for node in graph}
    prev: dict[str, str | None] = {node: None for node in graph}
    dist[source] = 0.0

    visited: set[str] = set()
    pq = PriorityQueue()
    pq.insert(source, 0.0)

    while not pq.is_empty():
        node, d = pq.extract_min()

        # Duplicate heap entries: only the one matching the best distance counts
        if node in visited or d > dist.get(node, math.inf):
            continue
        visited.add(node)

        for neighbor, weight in graph.get(node, {}).items():
            if neighbor in visited:
                continue
            candidate = d + weight
            if candidate < dist.get(neighbor, math.inf):
                dist[neighbor] = candidate
                prev[neighbor] = node
                pq.decrease_or_insert(neighbor, candidate)

    return dist, prev


def reconstruct_path(
    prev: Mapping[str, str | None],
    source: str,
    target: str,
) -> tuple[str, ...]:
    """Walk predecessor pointers back from `target`.

    Returns an empty tuple when the chain does not start at `source`.
    """
    path: list[str] = []
    node: str | None = target
    seen: set[str] = set()
    while node is not None and node not in seen:
        seen.add(node)
        path.append(node)
        node = prev.get(node)
    path.reverse()

    if not path or path[0] != source:
        return ()
    return tuple(path)


def shortest_path(
    graph: Graph,
    source: str,
    target: str,
    cache: MutableMapping[PathKey, PathResult] | None = None,
) -> PathResult:
    """Shortest path from `source` to `target`, memoized through `cache`.

    Args:
        graph: Adjacency mapping with non-negative weights. Not mutated.
        source: Start node id.
        target: End node id.
        cache: Optional run-scoped store. Both reachable and unreachable
            results are written back.

    Returns:
        PathResult; ``UNREACHABLE`` when no path exists or either endpoint
        is missing from the graph.
    """
    key = (source, target)
    if cache is not None:
        cached = cache.lookup(key) if isinstance(cache, PathCache) else cache.get(key)
        if cached is not None:
            logger.debug("path cache hit %s -> %s", source, target)
            return cached

    result = _compute(graph, source, target)
    if cache is not None:
        cache[key] = result
    return result


def _compute(graph: Graph, source: str, target: str) -> PathResult:
    if source == target:
        return PathResult(0.0, (source,))
    if source not in graph or target not in graph:
        return UNREACHABLE

    dist, prev = dijkstra(graph, source)
    distance = dist.get(target, math.inf)
    if distance == math.inf:
        return UNREACHABLE

    path = reconstruct_path(prev, source, target)
    if not path:
        logger.debug("inconsistent predecessor chain %s -> %s", source, target)
        return UNREACHABLE
    return PathResult(float(distance), path)
