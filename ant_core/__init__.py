"""
ant_core — pheromone-guided Hamiltonian cycle search.

Public API:
    Colony                 — shared pheromone matrix, ants, ranked cycles
    Ant                    — one persistent search agent
    HamiltonianCycleSearch — the movement strategy (forward / backtrack / close)
    PheromoneMatrix        — symmetric, non-negative τ matrix
    DeadEndError           — raised when an ant has nowhere to go

Usage:
    from ant_core import Colony

    colony = Colony(graph, nest_node=1, n_ants=10)
    colony.subscribe(lambda u, v: print("edge", u, v, "is active"))
    for ant in colony.ants:
        ant.move(gamma=1.0, alpha=1.0, beta=1.0, delta=0.2)
    print(colony.best())
"""

from ant_core.ant import Ant
from ant_core.colony import Colony, EdgeSubscriber
from ant_core.movement import DeadEndError, HamiltonianCycleSearch, MovementAlgorithm
from ant_core.pheromone import PheromoneMatrix

__all__ = [
    "Ant",
    "Colony",
    "DeadEndError",
    "EdgeSubscriber",
    "HamiltonianCycleSearch",
    "MovementAlgorithm",
    "PheromoneMatrix",
]
