"""
Binary min-heap priority queue keyed by node id.

Used by the shortest-path engine as its frontier. Decrease-key is modeled
as "lower the tracked entry if possible, otherwise push a new one", so a
node can have several logical entries in the heap at once. Only the most
recent entry per node is tracked in the position index; older ones are
stale and must be discarded by the consumer on extraction.

Usage:
    pq = PriorityQueue()
    pq.insert("depot", 0.0)
    pq.decrease_or_insert("A", 10.0)
    item = pq.extract_min()   # HeapItem(node="depot", priority=0.0)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple


class HeapItem(NamedTuple):
    """An extracted (node, priority) pair."""

    node: str
    priority: float


@dataclass
class _Entry:
    priority: float
    node: str
    tracked: bool = True  # False once a newer entry for the same node exists


class PriorityQueue:
    """Array-backed binary min-heap with a node -> position index.

    Attributes:
        n_inserts: Total entries ever pushed (duplicates included).
    """

    def __init__(self) -> None:
        self._heap: list[_Entry] = []
        self._index: dict[str, int] = {}
        self.n_inserts: int = 0

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def is_empty(self) -> bool:
        return not self._heap

    # ── Public operations ────────────────────────────────────────────

    def insert(self, node: str, priority: float) -> None:
        """Push a new entry. An existing entry for `node` becomes stale."""
        pos = self._index.get(node)
        if pos is not None:
            self._heap[pos].tracked = False

        self._heap.append(_Entry(priority, node))
        self._index[node] = len(self._heap) - 1
        self.n_inserts += 1
        self._sift_up(len(self._heap) - 1)

    def decrease_or_insert(self, node: str, priority: float) -> None:
        """Lower the tracked entry of `node` in place, or push a new entry."""
        pos = self._index.get(node)
        if pos is not None and priority < self._heap[pos].priority:
            self._heap[pos].priority = priority
            self._sift_up(pos)
        else:
            self.insert(node, priority)

    def extract_min(self) -> HeapItem | None:
        """Remove and return the smallest entry, or None if the heap is empty."""
        if not self._heap:
            return None

        root = self._heap[0]
        last = self._heap.pop()
        if self._heap:
            self._place(0, last)
            self._sift_down(0)
        if root.tracked:
            del self._index[root.node]
        return HeapItem(root.node, root.priority)

    def peek(self) -> HeapItem | None:
        if not self._heap:
            return None
        return HeapItem(self._heap[0].node, self._heap[0].priority)

    def tracked_priority(self, node: str) -> float | None:
        """Priority of the tracked entry for `node`, or None if not queued."""
        pos = self._index.get(node)
        return None if pos is None else self._heap[pos].priority

    # ── Heap maintenance ─────────────────────────────────────────────

    def _place(self, pos: int, entry: _Entry) -> None:
        self._heap[pos] = entry
        if entry.tracked:
            self._index[entry.node] = pos

    def _swap(self, i: int, j: int) -> None:
        a, b = self._heap[i], self._heap[j]
        self._place(i, b)
        self._place(j, a)

    def _sift_up(self, pos: int) -> None:
        while pos > 0:
            parent = (pos - 1) // 2
            if self._heap[pos].priority < self._heap[parent].priority:
                self._swap(pos, parent)
                pos = parent
            else:
                break

    def _sift_down(self, pos: int) -> None:
        n = len(self._heap)
        while True:
            left = 2 * pos + 1
            right = left + 1
            smallest = pos

            if left < n and self._heap[left].priority < self._heap[smallest].priority:
                smallest = left
            if right < n and self._heap[right].priority < self._heap[smallest].priority:
                smallest = right
            if smallest == pos:
                return
            self._swap(pos, smallest)
            pos = smallest
