"""Road network graph representation.

The road network is modeled as a directed graph where:
- Nodes represent addressable locations (depot, customer stops, junctions)
- Edges represent one-way road segments with a non-negative travel distance
- Symmetric roads are two edges, one per direction

The dispatch core consumes a plain adjacency mapping exported from this
graph; the NetworkX object stays available for validation and analysis.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from numbers import Real

import networkx as nx

from src.roadnet.shortest_path import PathKey, PathResult, shortest_path

DEPOT = "depot"


class RoadGraph:
    """Directed, weighted road network.

    Wraps a NetworkX DiGraph whose edges carry a ``distance`` attribute,
    and exposes the ``{node: {neighbor: distance}}`` view the shortest-path
    engine works on.

    Attributes:
        graph: The underlying NetworkX DiGraph.
    """

    def __init__(self) -> None:
        self.graph = nx.DiGraph()
        self._adjacency: dict[str, dict[str, float]] | None = None

    @classmethod
    def from_adjacency(cls, adjacency: Mapping[str, Mapping[str, float]]) -> RoadGraph:
        """Build a graph from ``{node: {neighbor: distance}}``.

        Neighbors that are not keys themselves are added as nodes without
        outgoing edges. The input mapping is copied, never referenced.
        """
        g = cls()
        for node in adjacency:
            g.add_node(node)
        for node, connections in adjacency.items():
            for neighbor, distance in connections.items():
                g.add_edge(node, neighbor, distance)
        return g

    # ── Node / edge management ───────────────────────────────────────

    def add_node(self, node_id: str, **attrs) -> None:
        """Add a location. Extra attributes (e.g. coordinates) are kept on the node."""
        self.graph.add_node(node_id, **attrs)
        self._adjacency = None

    def add_edge(self, from_node: str, to_node: str, distance: float, **attrs) -> None:
        """Add a one-way road segment."""
        self.graph.add_edge(from_node, to_node, distance=distance, **attrs)
        self._adjacency = None

    def add_bidirectional_edge(self, node_a: str, node_b: str, distance: float, **attrs) -> None:
        """Add segments in both directions with the same distance."""
        self.add_edge(node_a, node_b, distance, **attrs)
        self.add_edge(node_b, node_a, distance, **attrs)

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def n_nodes(self) -> int:
        return self.graph.number_of_nodes()

    @property
    def n_edges(self) -> int:
        return self.graph.number_of_edges()

    def has_node(self, node_id: str) -> bool:
        return self.graph.has_node(node_id)

    def neighbors(self, node_id: str) -> list[str]:
        """Return successor nodes (nodes reachable in one hop)."""
        return list(self.graph.successors(node_id))

    def edge_distance(self, from_node: str, to_node: str) -> float:
        """Get distance of a specific edge. Raises KeyError if edge doesn't exist."""
        return self.graph.edges[from_node, to_node]["distance"]

    def adjacency(self) -> dict[str, dict[str, float]]:
        """Plain adjacency mapping for the shortest-path engine.

        Every node is a key, including nodes with no outgoing edges. The
        mapping is rebuilt after any mutation and must be treated as read-only.
        """
        if self._adjacency is None:
            self._adjacency = {
                node: {nbr: data["distance"] for nbr, data in self.graph.adj[node].items()}
                for node in self.graph.nodes
            }
        return self._adjacency

    def shortest_path(
        self,
        source: str,
        target: str,
        cache: MutableMapping[PathKey, PathResult] | None = None,
    ) -> PathResult:
        """Shortest path between two locations; see `src.roadnet.shortest_path`."""
        return shortest_path(self.adjacency(), source, target, cache)

    def validate(self, depot: str = DEPOT) -> list[str]:
        """Run basic sanity checks on the network.

        Args:
            depot: Node that must exist (default start location).

        Returns:
            List of warning/error messages (empty = all good).
        """
        issues = []

        if self.n_nodes == 0:
            return ["Road graph has no nodes"]
        if self.n_edges == 0:
            issues.append("Road graph has no edges")

        for u, v, distance in self.graph.edges(data="distance"):
            if not isinstance(distance, Real) or isinstance(distance, bool) or distance < 0:
                issues.append(f"Edge {u} -> {v} has invalid distance {distance!r}")

        if not nx.is_weakly_connected(self.graph):
            components = list(nx.weakly_connected_components(self.graph))
            issues.append(
                f"Road graph is not connected: {len(components)} components "
                f"(sizes: {[len(c) for c in components]})"
            )

        if not self.has_node(depot):
            issues.append(f"No '{depot}' node in road graph")

        return issues
