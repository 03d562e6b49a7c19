"""
ant_core/movement.py
────────────────────
The movement algorithm: where does an ant go next?

The decision, in priority order
────────────────────────────────
Let adj = graph.adjacent(current) and candidates = adj ∩ unvisited.

  1. candidates non-empty        → FORWARD move.
                                   One candidate: take it.
                                   Several: roulette-wheel (below).
  2. no candidates, unvisited    → BACKTRACK.
     non-empty
  3. no candidates, unvisited    → CLOSE the cycle: go back to the nest,
     empty, nest ∈ adj             deposit pheromone, record the cycle,
                                   start a new episode.
  4. no candidates, unvisited    → BACKTRACK.
     empty, nest ∉ adj

The selection formula
──────────────────────
For a candidate node j seen from current node i:

    pref(j) = (alpha + τ[i][j]) / (beta + w[i][j])
    P(j)    = pref(j) / Σ_k pref(k)

The same formula is used for forward moves AND backtracking. A single
uniform draw u ∈ [0, 1) selects the first candidate whose cumulative
probability is ≥ u (np.searchsorted, side="left"). If every preference is
zero (alpha = 0 on an unreinforced neighbourhood) the choice is uniform.

Backtracking
────────────
In branches 2 and 4 every neighbour of the current node is already on the
path. The ant picks a target t among ALL neighbours with the formula above,
walks to it, and pops every trailing path node after t back into the
unvisited set. The path always shrinks by at least one node (the current
node is popped), so backtracking cannot loop.

Traversal time
──────────────
Every move returns delta × w(path[-2], path[-1]), read after the move for
forward and closing moves. A backtrack reads it before the path is
unwound, so the time is that of the edge the ant arrived on at the node it
backtracks from. The path holds at least two nodes there: an ant at the
nest with path [nest] and nowhere to go has no neighbours at all, which
is a DeadEndError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence

import numpy as np

from colony_sim.shared.graph import WeightedGraph

if TYPE_CHECKING:
    from ant_core.ant import Ant
    from ant_core.colony import Colony

logger = logging.getLogger(__name__)


class DeadEndError(RuntimeError):
    """
    Raised when an ant stands on a node with no adjacent nodes at all.

    The input graph is assumed to admit a Hamiltonian cycle, so this is an
    invariant failure, not a recoverable condition. The simulator logs it
    and lets it propagate.

    Attributes:
        node: The node the ant is stuck on.
        path: A copy of the ant's path at the time of failure.
    """

    def __init__(self, node: int, path: Sequence[int]) -> None:
        self.node = node
        self.path = list(path)
        super().__init__(
            f"Ant is stuck on node {node}: no adjacent nodes "
            f"(path so far: {self.path})"
        )


class MovementAlgorithm(Protocol):
    """Strategy interface: move the ant once, return the mean traversal time."""

    def optimize(
        self,
        ant: "Ant",
        graph: WeightedGraph,
        gamma: float,
        alpha: float,
        beta: float,
        delta: float,
    ) -> float: ...


class HamiltonianCycleSearch:
    """
    Stateless (apart from its random source) cycle-search strategy.

    Args:
        rng: Anything with a random() → float in [0, 1). Defaults to a fresh
             numpy Generator. The simulator passes its shared, seeded one.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()

    def optimize(
        self,
        ant: "Ant",
        graph: WeightedGraph,
        gamma: float,
        alpha: float,
        beta: float,
        delta: float,
    ) -> float:
        colony = ant.colony
        current = ant.current_node
        adjacent = list(graph.adjacent(current))
        if not adjacent:
            raise DeadEndError(current, ant.path)

        candidates = [n for n in adjacent if n in ant.unvisited]

        # 1. Forward
        if candidates:
            if len(candidates) == 1:
                target = candidates[0]
            else:
                target = self._select(current, candidates, colony, graph, alpha, beta)
            ant.current_node = target
            ant.unvisited.discard(target)
            ant.path.append(target)
            return self._move_time(ant, graph, delta)

        # 3. Close the cycle
        if not ant.unvisited and colony.nest_node in adjacent:
            return self._close_cycle(ant, graph, colony, gamma, delta)

        # 2 and 4. Backtrack
        return self._backtrack(ant, graph, colony, adjacent, alpha, beta, delta)

    # ── Branches ──────────────────────────────────────────────────────────────

    def _close_cycle(
        self,
        ant: "Ant",
        graph: WeightedGraph,
        colony: "Colony",
        gamma: float,
        delta: float,
    ) -> float:
        nest = colony.nest_node
        ant.path.append(nest)
        weight = ant.update_pheromones(colony, gamma)
        colony.add_cycle(ant.path[:-1], weight)
        time = self._move_time(ant, graph, delta)

        ant.current_node = nest
        ant.reset_episode()
        return time

    def _backtrack(
        self,
        ant: "Ant",
        graph: WeightedGraph,
        colony: "Colony",
        adjacent: List[int],
        alpha: float,
        beta: float,
        delta: float,
    ) -> float:
        current = ant.current_node
        if len(adjacent) == 1:
            target = adjacent[0]
        else:
            target = self._select(current, adjacent, colony, graph, alpha, beta)

        time = delta * graph.weight(ant.path[-2], ant.path[-1])

        # Every neighbour is on the path here, so this stops at target.
        while ant.path[-1] != target:
            ant.unvisited.add(ant.path.pop())
        ant.current_node = target
        return time

    # ── Selection ─────────────────────────────────────────────────────────────

    def _select(
        self,
        current: int,
        candidates: List[int],
        colony: "Colony",
        graph: WeightedGraph,
        alpha: float,
        beta: float,
    ) -> int:
        """Roulette-wheel selection over candidates (see module docstring)."""
        tau = np.array([colony.level(current, n) for n in candidates], dtype=np.float64)
        weights = np.array([graph.weight(current, n) for n in candidates], dtype=np.float64)
        preferences = (alpha + tau) / (beta + weights)

        total = float(preferences.sum())
        if total <= 0.0 or not np.isfinite(total):
            probabilities = np.full(len(candidates), 1.0 / len(candidates))
        else:
            probabilities = preferences / total

        cumsum = np.cumsum(probabilities)
        chosen = int(np.searchsorted(cumsum, self._rng.random(), side="left"))
        # Rounding can leave cumsum[-1] a hair under 1.0.
        chosen = min(chosen, len(candidates) - 1)
        return candidates[chosen]

    @staticmethod
    def _move_time(ant: "Ant", graph: WeightedGraph, delta: float) -> float:
        return delta * graph.weight(ant.path[-2], ant.path[-1])
