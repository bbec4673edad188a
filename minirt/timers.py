"""Deadline Queue: min-heap of (wake instant, task) entries."""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from minirt.task import Task


@dataclass(order=True)
class DeadlineEntry:
    when: float
    seq: int = field(compare=True)
    task: Task = field(compare=False)


class DeadlineQueue:
    """Yields the entry with the smallest wake instant first.

    Uses a sequence counter for deterministic FIFO tie-breaking among
    entries with equal deadlines.
    """

    def __init__(self) -> None:
        self._heap: list[DeadlineEntry] = []
        self._seq: int = 0

    def push(self, when: float, task: Task) -> DeadlineEntry:
        entry = DeadlineEntry(when, self._seq, task)
        heapq.heappush(self._heap, entry)
        self._seq += 1
        return entry

    def peek_min(self) -> DeadlineEntry:
        if not self._heap:
            raise IndexError("peek_min on an empty DeadlineQueue")
        return self._heap[0]

    def pop_min(self) -> DeadlineEntry:
        if not self._heap:
            raise IndexError("pop_min on an empty DeadlineQueue")
        return heapq.heappop(self._heap)

    def clear(self) -> list[DeadlineEntry]:
        """Remove and return every entry in deadline order."""
        entries = sorted(self._heap)
        self._heap.clear()
        return entries

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __repr__(self) -> str:
        head = self._heap[0].when if self._heap else None
        return f"DeadlineQueue(size={len(self._heap)}, next={head})"


__all__ = ["DeadlineEntry", "DeadlineQueue"]
