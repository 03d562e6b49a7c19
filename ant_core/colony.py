"""
ant_core/colony.py
──────────────────
The Colony: the state every ant shares.

What the colony owns
─────────────────────
  • The PheromoneMatrix. It is the only writer.
  • The ants. They persist for the whole simulation, cycling through
    search episodes.
  • The deduplicated, weight-ranked set of Hamiltonian cycles found so far.
  • A list of evaporation subscribers.

Subscribers
───────────
A subscriber is any callable taking (u, v). The colony calls every
subscriber, synchronously and in subscription order, when an edge goes
from exactly zero pheromone to a positive level. The simulator subscribes
so it can arm an Evaporation event for the edge that just became active.

The colony does not own its subscribers: it only keeps references for
one-way notification.

The update_level() return contract
───────────────────────────────────
  zero → positive transition : returns the PRE-update level (0.0)
  anything else             : returns the POST-update level

The evaporation handler relies on the second case: it subtracts rho and
keeps re-arming itself only while the returned level is still positive.

Cycle ranking
─────────────
_ranked is kept sorted by weight with bisect.insort. insort_right places
a new record after existing records of equal weight, so ties are ranked
by discovery order. _seen holds the node sequences for O(1) dedup.
"""

from __future__ import annotations

import bisect
import logging
from typing import Callable, List, Optional, Sequence, Set, Tuple

from colony_sim.shared.graph import WeightedGraph
from colony_sim.shared.models import CycleRecord
from ant_core.ant import Ant
from ant_core.movement import HamiltonianCycleSearch, MovementAlgorithm
from ant_core.pheromone import PheromoneMatrix

logger = logging.getLogger(__name__)

EdgeSubscriber = Callable[[int, int], None]
"""Called with (u, v) when edge (u, v) goes from zero to positive pheromone."""


class Colony:
    """
    Shared aggregate: pheromone matrix, ants, discovered cycles, subscribers.

    Usage:
        colony = Colony(graph, nest_node=1, n_ants=10)
        colony.subscribe(simulator.on_edge_activated)

    Attributes:
        _nest_node   : int                  — start/end node of every episode.
        _matrix      : PheromoneMatrix      — τ, zero-initialised.
        _ants        : List[Ant]            — stable order, one per colony slot.
        _ranked      : List[CycleRecord]    — ascending weight.
        _seen        : Set[Tuple[int, ...]] — node sequences already recorded.
        _subscribers : List[EdgeSubscriber]
    """

    def __init__(
        self,
        graph: WeightedGraph,
        nest_node: int,
        n_ants: int,
        algorithm: Optional[MovementAlgorithm] = None,
    ) -> None:
        """
        Raises:
            ValueError: if the nest node is not a node of the graph or
                        n_ants is less than 1.
        """
        if not 1 <= nest_node <= graph.num_nodes:
            raise ValueError(
                f"Nest node {nest_node} is outside 1..{graph.num_nodes}"
            )
        if n_ants < 1:
            raise ValueError(f"Colony requires at least one ant, got {n_ants}")

        self._nest_node = nest_node
        self._matrix = PheromoneMatrix(graph.num_nodes)
        self._subscribers: List[EdgeSubscriber] = []
        self._ranked: List[CycleRecord] = []
        self._seen: Set[Tuple[int, ...]] = set()

        algorithm = algorithm if algorithm is not None else HamiltonianCycleSearch()
        self._ants: List[Ant] = [
            Ant(nest_node, graph, self, algorithm) for _ in range(n_ants)
        ]

    # ── Subscriptions ─────────────────────────────────────────────────────────

    def subscribe(self, subscriber: EdgeSubscriber) -> None:
        self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: EdgeSubscriber) -> None:
        self._subscribers.remove(subscriber)

    def _notify(self, u: int, v: int) -> None:
        for subscriber in self._subscribers:
            subscriber(u, v)

    # ── Pheromone ─────────────────────────────────────────────────────────────

    def level(self, u: int, v: int) -> float:
        return self._matrix.level(u, v)

    def update_level(self, u: int, v: int, delta: float) -> float:
        """
        Change the pheromone on edge (u, v) by delta, clamped at zero.

        If delta > 0 and the edge held exactly zero pheromone, every
        subscriber is notified with (u, v) and the pre-update level is
        returned. Otherwise the post-update level is returned.
        See the module docstring for why the contract is asymmetric.
        """
        old = self._matrix.level(u, v)
        new = self._matrix.add(u, v, delta)
        if delta > 0 and old == 0.0:
            self._notify(u, v)
            return old
        return new

    # ── Cycles ────────────────────────────────────────────────────────────────

    def add_cycle(self, cycle: Sequence[int], weight: int) -> bool:
        """
        Record a Hamiltonian cycle unless an equal node sequence is known.

        Returns:
            True if the cycle was new and has been stored.
        """
        key = tuple(cycle)
        if key in self._seen:
            return False
        record = CycleRecord(nodes=key, weight=weight)
        self._seen.add(key)
        bisect.insort(self._ranked, record)
        if self._ranked[0] is record:
            logger.debug("New best cycle %s", record.render())
        return True

    def ranked_cycles(self, n: int) -> List[CycleRecord]:
        """The n lightest cycles after the best one (the report's candidates)."""
        return self._ranked[1:n + 1]

    def best(self) -> Optional[CycleRecord]:
        """The lightest cycle found so far, or None if none has closed yet."""
        return self._ranked[0] if self._ranked else None

    @property
    def cycles(self) -> List[CycleRecord]:
        """Every recorded cycle, ascending by weight (copy)."""
        return list(self._ranked)

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def nest_node(self) -> int:
        return self._nest_node

    @property
    def ants(self) -> List[Ant]:
        return self._ants

    @property
    def pheromones(self) -> PheromoneMatrix:
        return self._matrix

    def __repr__(self) -> str:
        return (
            f"Colony(nest={self._nest_node}, ants={len(self._ants)}, "
            f"cycles={len(self._ranked)}, subscribers={len(self._subscribers)})"
        )
