"""
ant_core/pheromone.py
─────────────────────
The pheromone matrix: the colony's shared, persistent memory.

What is pheromone?
──────────────────
Every time an ant closes a Hamiltonian cycle it reinforces each edge of that
cycle. Lighter cycles reinforce more: the deposit per edge is
gamma × W / W_cycle, where W is the total weight of the graph. Evaporation
events then remove a fixed amount rho from an edge at random intervals,
so edges that stop being reinforced fade back to zero.

  τ[u][v] = pheromone on the undirected edge (u, v).

Matrix layout
─────────────
  Shape : (n_nodes, n_nodes), float64, zero-initialised.
  Node ids are 1-based at the API; the matrix is 0-based internally.
  Symmetric at all times: every write touches τ[u][v] AND τ[v][u].
  Never negative: a write that would go below zero clamps to exactly 0.0.

The matrix knows nothing about subscribers or evaporation scheduling;
that is the Colony's job (see colony.py).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

# ── Pheromone constants ────────────────────────────────────────────────────────

TAU_INITIAL: float = 0.0
"""Starting pheromone on every edge.
Zero means "never reinforced". The first deposit on an edge is a
zero → positive transition, which is what arms its evaporation.
"""


class PheromoneMatrix:
    """
    A symmetric 2D numpy array τ[n_nodes][n_nodes] of pheromone levels.

    Used by:
        Colony.update_level() → the only writer.
        HamiltonianCycleSearch → reads level() to weight candidate moves.
        Tests                 → snapshot() to inspect internal state.

    Thread safety:
        Not thread-safe. The simulator executes one event at a time, so all
        writes are serialised by construction.
    """

    def __init__(self, n_nodes: int) -> None:
        """
        Initialise an all-zero pheromone matrix.

        Raises:
            ValueError: if n_nodes is less than 1.
        """
        if n_nodes < 1:
            raise ValueError(f"PheromoneMatrix requires n_nodes≥1, got n_nodes={n_nodes}")
        self._n_nodes = n_nodes
        self._matrix: NDArray[np.float64] = np.full(
            (n_nodes, n_nodes), TAU_INITIAL, dtype=np.float64
        )

    # ── Core operations ────────────────────────────────────────────────────────

    def level(self, u: int, v: int) -> float:
        """Current pheromone on edge (u, v)."""
        return float(self._matrix[u - 1, v - 1])

    def add(self, u: int, v: int, amount: float) -> float:
        """
        Add `amount` (possibly negative) to edge (u, v) symmetrically.

        Formula:
            τ_new = τ_old + amount    if τ_old + amount ≥ 0
            τ_new = 0.0               otherwise (clamped, never negative)

        Returns:
            The post-update level.
        """
        i, j = u - 1, v - 1
        new_level = self._matrix[i, j] + amount
        if new_level < 0.0:
            new_level = 0.0
        self._matrix[i, j] = new_level
        self._matrix[j, i] = new_level
        return float(new_level)

    # ── Inspection & testing ───────────────────────────────────────────────────

    def snapshot(self) -> NDArray[np.float64]:
        """
        Return a deep copy of the current matrix state.

        Mutations to the returned array do NOT affect the live matrix.
        """
        return self._matrix.copy()

    @property
    def shape(self) -> tuple[int, int]:
        return (self._n_nodes, self._n_nodes)

    @property
    def n_nodes(self) -> int:
        return self._n_nodes

    def __repr__(self) -> str:
        return (
            f"PheromoneMatrix(n_nodes={self._n_nodes}, "
            f"min={self._matrix.min():.4f}, max={self._matrix.max():.4f}, "
            f"active_edges={int(np.count_nonzero(np.triu(self._matrix, k=1)))})"
        )
