from src.roadnet.graph import DEPOT, RoadGraph
from src.roadnet.heap import HeapItem, PriorityQueue
from src.roadnet.shortest_path import (
    UNREACHABLE,
    PathCache,
    PathResult,
    dijkstra,
    reconstruct_path,
    shortest_path,
)

__all__ = [
    "DEPOT",
    "RoadGraph",
    "HeapItem",
    "PriorityQueue",
    "UNREACHABLE",
    "PathCache",
    "PathResult",
    "dijkstra",
    "reconstruct_path",
    "shortest_path",
]
