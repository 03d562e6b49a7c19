"""
colony_sim/shared/graph.py
──────────────────────────
The weighted undirected graph the ants search.

The core only needs the read-only query interface below (WeightedGraph).
UndirectedWeightedGraph is the concrete implementation used by the CLI and
the tests: a dense numpy integer matrix, fixed at construction.

Matrix layout
─────────────
  Shape : (n, n), dtype int64, symmetric, zero diagonal.
  w[i][j] = weight of edge (i+1, j+1); 0 means "no edge".
  Node ids exposed to callers are 1-based; the -1 shift stays in here.

Adjacency lists are pre-computed once as tuples in ascending node order.
The movement algorithm walks them on every move, so a stable order makes
roulette-wheel selection reproducible under a seeded generator.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)


class GraphError(ValueError):
    """Raised when a weight matrix does not describe a valid undirected graph."""


@runtime_checkable
class WeightedGraph(Protocol):
    """Read-only query interface consumed by the colony, ants and movement."""

    @property
    def num_nodes(self) -> int: ...

    @property
    def total_weight(self) -> int: ...

    def weight(self, u: int, v: int) -> int: ...

    def adjacent(self, u: int) -> Sequence[int]: ...


class UndirectedWeightedGraph:
    """
    Dense undirected graph with non-negative integer edge weights.

    Attributes:
        _matrix    : NDArray[np.int64]      — (n, n) weight matrix.
        _adjacency : List[Tuple[int, ...]]  — neighbours of node i+1, ascending.
        _total     : int                    — sum of all edge weights (each edge once).
    """

    def __init__(self, matrix: NDArray[np.int64]) -> None:
        """
        Validate and freeze a weight matrix.

        Raises:
            GraphError: if the matrix is not square, has fewer than 2 nodes,
                        contains a negative weight, or is not symmetric.
        """
        matrix = np.asarray(matrix, dtype=np.int64)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise GraphError(f"Weight matrix must be square, got shape {matrix.shape}")
        n = matrix.shape[0]
        if n < 2:
            raise GraphError(f"A graph needs at least 2 nodes, got {n}")

        negatives = np.argwhere(matrix < 0)
        if negatives.size:
            i, j = negatives[0]
            raise GraphError(
                f"The graph must not have negative weights. "
                f"Please correct edge ({i + 1},{j + 1})"
            )

        asymmetric = np.argwhere(matrix != matrix.T)
        if asymmetric.size:
            i, j = asymmetric[0]
            raise GraphError(
                f"Weight matrix must be symmetric: w({i + 1},{j + 1})={matrix[i, j]} "
                f"but w({j + 1},{i + 1})={matrix[j, i]}"
            )

        self._matrix = matrix.copy()
        np.fill_diagonal(self._matrix, 0)
        self._matrix.setflags(write=False)

        self._adjacency: List[Tuple[int, ...]] = [
            tuple(int(j) + 1 for j in np.flatnonzero(self._matrix[i]))
            for i in range(n)
        ]
        self._total = int(np.triu(self._matrix, k=1).sum())

    # ── Constructors ──────────────────────────────────────────────────────────

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "UndirectedWeightedGraph":
        """Build from a nested list of weights (row i = node i+1)."""
        n = len(rows)
        if any(len(row) != n for row in rows):
            raise GraphError("The number of nodes must be concordant with the graph structure")
        return cls(np.array(rows, dtype=np.int64).reshape(n, n))

    @classmethod
    def random(
        cls,
        num_nodes: int,
        max_weight: int,
        rng: Optional[np.random.Generator] = None,
    ) -> "UndirectedWeightedGraph":
        """
        Generate a random graph that is guaranteed to hold a Hamiltonian cycle.

        Algorithm:
            1. Shuffle 1..n and connect consecutive nodes into a ring
               (including last → first). This ring IS a Hamiltonian cycle.
            2. Pick how many extra edges to add, uniformly in
               [0, n(n-1)/2 − n], and sample that many distinct pairs from
               the ones the ring does not use.
            3. Every edge weight is uniform in [1, max_weight].

        Raises:
            GraphError: if num_nodes < 3 (a simple ring needs 3 nodes)
                        or max_weight < 1.
        """
        if num_nodes < 3:
            raise GraphError(f"A random Hamiltonian graph needs at least 3 nodes, got {num_nodes}")
        if max_weight < 1:
            raise GraphError(f"max_weight must be at least 1, got {max_weight}")
        rng = rng if rng is not None else np.random.default_rng()

        matrix = np.zeros((num_nodes, num_nodes), dtype=np.int64)

        ring = rng.permutation(num_nodes)
        for a, b in zip(ring, np.roll(ring, -1)):
            w = int(rng.integers(1, max_weight + 1))
            matrix[a, b] = matrix[b, a] = w

        free_pairs = [
            (i, j)
            for i in range(num_nodes)
            for j in range(i + 1, num_nodes)
            if matrix[i, j] == 0
        ]
        n_extra = int(rng.integers(0, len(free_pairs) + 1))
        if n_extra:
            for k in rng.choice(len(free_pairs), size=n_extra, replace=False):
                i, j = free_pairs[int(k)]
                w = int(rng.integers(1, max_weight + 1))
                matrix[i, j] = matrix[j, i] = w

        graph = cls(matrix)
        logger.info(
            "Generated random graph: %d nodes, %d edges, total weight %d",
            num_nodes, graph.num_edges, graph.total_weight,
        )
        return graph

    # ── Query interface ───────────────────────────────────────────────────────

    @property
    def num_nodes(self) -> int:
        return self._matrix.shape[0]

    @property
    def total_weight(self) -> int:
        return self._total

    @property
    def num_edges(self) -> int:
        return int(np.count_nonzero(np.triu(self._matrix, k=1)))

    def weight(self, u: int, v: int) -> int:
        """Weight of edge (u, v), or 0 if the nodes are not adjacent."""
        self._check_node(u)
        self._check_node(v)
        return int(self._matrix[u - 1, v - 1])

    def adjacent(self, u: int) -> Tuple[int, ...]:
        """Neighbours of u in ascending order."""
        self._check_node(u)
        return self._adjacency[u - 1]

    def isolated_nodes(self) -> List[int]:
        """Nodes with no edges at all. An ant reaching one is stuck."""
        return [i + 1 for i, adj in enumerate(self._adjacency) if not adj]

    def rows(self) -> List[List[int]]:
        return self._matrix.tolist()

    def _check_node(self, u: int) -> None:
        if not 1 <= u <= self._matrix.shape[0]:
            raise GraphError(f"Node {u} is outside 1..{self._matrix.shape[0]}")

    def __repr__(self) -> str:
        return (
            f"UndirectedWeightedGraph(nodes={self.num_nodes}, "
            f"edges={self.num_edges}, total_weight={self._total})"
        )
