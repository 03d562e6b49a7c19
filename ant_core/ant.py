"""
ant_core/ant.py
───────────────
One ant: a walker searching for Hamiltonian cycles from the nest node.

What does an ant hold?
──────────────────────
  current_node : where the ant is now.
  unvisited    : nodes not on the current path (never contains current_node).
  path         : nodes visited in this episode, path[0] is the nest node.

Invariant during an episode:
  len(path) + len(unvisited) == n_nodes, and the two never share a node.

The ant does not decide where to go. move() hands itself to the colony's
MovementAlgorithm, which mutates current_node / unvisited / path and
returns the mean time of the edge just traversed. When a cycle closes the
algorithm calls update_pheromones() and reset_episode().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Set

from colony_sim.shared.graph import WeightedGraph

if TYPE_CHECKING:
    from ant_core.colony import Colony
    from ant_core.movement import MovementAlgorithm


class Ant:
    """
    A persistent search agent. Lives for the whole simulation.

    Attributes:
        current_node : int
        unvisited    : Set[int]
        path         : List[int]
    """

    def __init__(
        self,
        nest_node: int,
        graph: WeightedGraph,
        colony: "Colony",
        algorithm: "MovementAlgorithm",
    ) -> None:
        self._graph = graph
        self._colony = colony
        self._algorithm = algorithm
        self.current_node: int = nest_node
        self.unvisited: Set[int] = set()
        self.path: List[int] = []
        self.reset_episode()

    def move(self, gamma: float, alpha: float, beta: float, delta: float) -> float:
        """
        Make one move (forward, backtrack or cycle-closing).

        Returns:
            Mean traversal time of the move, delta × edge weight. The Move
            event uses it as the mean of the next random delay.
        """
        return self._algorithm.optimize(self, self._graph, gamma, alpha, beta, delta)

    def update_pheromones(self, colony: "Colony", gamma: float) -> int:
        """
        Reinforce every edge of the current path and return the path weight.

        Formula, per consecutive pair (a, b) on the path:
            τ[a][b] += gamma × W / path_weight

        where W is the total weight of the graph. Lighter cycles therefore
        deposit more. Each update may trigger the colony's zero → positive
        notification for that edge.
        """
        path_weight = sum(
            self._graph.weight(a, b) for a, b in zip(self.path, self.path[1:])
        )
        if path_weight <= 0:
            return path_weight

        deposit = gamma * self._graph.total_weight / path_weight
        for a, b in zip(self.path, self.path[1:]):
            colony.update_level(a, b, deposit)
        return path_weight

    def reset_episode(self) -> None:
        """Restart the search from the current node (the nest after a cycle)."""
        self.unvisited = {
            n for n in range(1, self._graph.num_nodes + 1) if n != self.current_node
        }
        self.path = [self.current_node]

    @property
    def colony(self) -> "Colony":
        return self._colony

    def __repr__(self) -> str:
        return (
            f"Ant(at={self.current_node}, path_len={len(self.path)}, "
            f"unvisited={len(self.unvisited)})"
        )
