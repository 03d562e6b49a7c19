"""
colony_sim/engine/event_queue.py
────────────────────────────────
Timestamped events and the priority queue that orders them.

Event variants
──────────────
Events are plain data. Behaviour lives in the Simulator, which dispatches
on the variant with a match statement.

  MoveEvent         → one ant, plus the run's SimulationConfig.
                      Recurring: re-inserted until it passes the horizon.
  EvaporationEvent  → one edge (u, v), rho and eta.
                      Recurring: re-inserted while the edge keeps pheromone.
  NotificationEvent → a sequence number. Never re-inserts itself; the
                      simulator schedules the next one.

Timestamps are mutable so a recurring event can be pushed back into the
queue with a later timestamp instead of being re-created. Only mutate an
event AFTER it has been popped: the heap keys on the timestamp captured
at insert time.

Ordering
────────
pop_min() returns the smallest timestamp. Equal timestamps pop in insertion
order (FIFO): each entry carries a monotonically increasing insertion
counter as tie-breaker, so the heap never compares two events directly.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

from colony_sim.shared.models import SimulationConfig

if TYPE_CHECKING:
    from ant_core.ant import Ant


@dataclass(eq=False)
class MoveEvent:
    """The ant makes its next move at `timestamp`."""
    timestamp: float
    ant: "Ant"
    config: SimulationConfig


@dataclass(eq=False)
class EvaporationEvent:
    """Edge (u, v) loses rho pheromone at `timestamp`."""
    timestamp: float
    u: int
    v: int
    rho: float
    eta: float


@dataclass(eq=False)
class NotificationEvent:
    """Observation number `sequence` is reported at `timestamp`."""
    timestamp: float
    sequence: int


Event = Union[MoveEvent, EvaporationEvent, NotificationEvent]


class EventQueue:
    """
    Pending events in ascending timestamp order (FIFO among equals).

    Backed by heapq: O(log n) insert and pop_min.
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[float, int, Event]] = []
        self._counter = itertools.count()

    def insert(self, event: Event) -> None:
        heapq.heappush(self._heap, (event.timestamp, next(self._counter), event))

    def pop_min(self) -> Event:
        """
        Remove and return the event with the smallest timestamp.

        Raises:
            IndexError: if the queue is empty.
        """
        if not self._heap:
            raise IndexError("pop_min() from an empty EventQueue")
        return heapq.heappop(self._heap)[2]

    def peek(self) -> Optional[Event]:
        return self._heap[0][2] if self._heap else None

    def is_empty(self) -> bool:
        return not self._heap

    def clear(self) -> None:
        self._heap.clear()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __repr__(self) -> str:
        head = f"{self._heap[0][0]:.4f}" if self._heap else "-"
        return f"EventQueue(pending={len(self._heap)}, next={head})"
