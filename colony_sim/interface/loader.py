"""
colony_sim/interface/loader.py
──────────────────────────────
Turn command-line values or an input file into a validated configuration
and graph, before any simulation step runs.

Two input modes
────────────────
Random mode (11 values, in order):
    num_nodes max_weight nest_node alpha beta delta eta rho gamma colony_size horizon
  The graph is generated with UndirectedWeightedGraph.random(), which always
  contains a Hamiltonian cycle.

File mode:
    line 1      : num_nodes nest_node alpha beta delta eta rho gamma colony_size horizon
    next n lines: n non-negative integers each, a symmetric weight matrix
                  (0 = no edge). Blank lines are ignored.

Error handling contract
────────────────────────
Every problem (unparseable number, wrong row length, negative weight,
missing file, out-of-range parameter) is raised as ONE InputError with a
descriptive message. pydantic ValidationErrors and GraphErrors are
re-wrapped, so callers only ever catch InputError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import ValidationError

from colony_sim.shared.graph import GraphError, UndirectedWeightedGraph
from colony_sim.shared.models import SimulationConfig

logger = logging.getLogger(__name__)

RANDOM_MODE_FIELDS: Tuple[str, ...] = (
    "num_nodes", "max_weight", "nest_node", "alpha", "beta", "delta",
    "eta", "rho", "gamma", "colony_size", "horizon",
)

FILE_MODE_FIELDS: Tuple[str, ...] = (
    "num_nodes", "nest_node", "alpha", "beta", "delta",
    "eta", "rho", "gamma", "colony_size", "horizon",
)

_INTEGER_FIELDS: FrozenSet[str] = frozenset(
    {"num_nodes", "max_weight", "nest_node", "colony_size"}
)


class InputError(ValueError):
    """
    Raised when command-line values or an input file cannot start a simulation.

    Caller contract (cli.main):
        Print the message and exit without running anything.
    """


@dataclass(frozen=True)
class LoadedInput:
    """
    A validated configuration and the graph it runs on.

    rng is the generator that built a random graph. The simulation keeps
    drawing from it, so one seed fixes both the graph and the run. None in
    file mode: the simulator seeds its own from config.seed.
    """
    config: SimulationConfig
    graph: UndirectedWeightedGraph
    rng: Optional[np.random.Generator] = None


# ── Random mode ────────────────────────────────────────────────────────────────

def parse_random_args(args: Sequence[str], seed: Optional[int] = None) -> LoadedInput:
    """
    Build a configuration and a random graph from the 11 random-mode values.

    Raises:
        InputError: wrong number of values, unparseable value, out-of-range
                    parameter, or a graph that cannot be generated.
    """
    if len(args) != len(RANDOM_MODE_FIELDS):
        raise InputError(
            f"Invalid command structure for -r: expected {len(RANDOM_MODE_FIELDS)} "
            f"parameters ({' '.join(RANDOM_MODE_FIELDS)}), got {len(args)}"
        )
    values = _parse_values(args, RANDOM_MODE_FIELDS, "-r command")
    max_weight = int(values.pop("max_weight"))
    config = _build_config(values, seed)

    rng = np.random.default_rng(seed)
    try:
        graph = UndirectedWeightedGraph.random(config.num_nodes, max_weight, rng)
    except GraphError as exc:
        raise InputError(f"Invalid graph structure. {exc}") from exc
    return LoadedInput(config=config, graph=graph, rng=rng)


# ── File mode ──────────────────────────────────────────────────────────────────

def load_file(path: Union[str, Path], seed: Optional[int] = None) -> LoadedInput:
    """
    Read a parameter line and a weight matrix from `path`.

    Raises:
        InputError: missing or unreadable file, or any content problem
                    (see parse_file_text).
    """
    path = Path(path)
    try:
        text = path.read_text()
    except FileNotFoundError as exc:
        raise InputError(f"Input file not found: {path}") from exc
    except OSError as exc:
        raise InputError(f"Cannot read input file {path}: {exc}") from exc

    loaded = parse_file_text(text, seed=seed, source=str(path))
    logger.info("Loaded %r from %s", loaded.graph, path)
    return loaded


def parse_file_text(
    text: str,
    seed: Optional[int] = None,
    source: str = "<input>",
) -> LoadedInput:
    """Parse the contents of an input file (see module docstring)."""
    lines = [line.split() for line in text.splitlines() if line.strip()]
    if not lines:
        raise InputError(f"Insufficient parameters in {source}: the file is empty")

    header = lines[0]
    if len(header) != len(FILE_MODE_FIELDS):
        raise InputError(
            f"Invalid parameter line in {source}: expected {len(FILE_MODE_FIELDS)} "
            f"values ({' '.join(FILE_MODE_FIELDS)}), got {len(header)}"
        )
    config = _build_config(_parse_values(header, FILE_MODE_FIELDS, source), seed)

    n = config.num_nodes
    matrix_lines = lines[1:]
    if len(matrix_lines) < n:
        raise InputError(
            f"Invalid graph structure in {source}: expected {n} matrix rows, "
            f"found {len(matrix_lines)}"
        )
    if len(matrix_lines) > n:
        logger.warning(
            "Ignoring %d trailing line(s) after the weight matrix in %s",
            len(matrix_lines) - n, source,
        )

    rows: List[List[int]] = []
    for i, tokens in enumerate(matrix_lines[:n], start=1):
        if len(tokens) != n:
            raise InputError(
                f"Invalid graph structure. The number of nodes must be concordant "
                f"with the graph structure: row {i} has {len(tokens)} entries, expected {n}"
            )
        try:
            rows.append([int(t) for t in tokens])
        except ValueError as exc:
            raise InputError(
                f"Invalid graph structure in {source}: row {i} contains a non-integer weight"
            ) from exc

    try:
        graph = UndirectedWeightedGraph.from_rows(rows)
    except GraphError as exc:
        raise InputError(f"Invalid graph structure. {exc}") from exc

    isolated = graph.isolated_nodes()
    if isolated:
        logger.warning("Nodes without any edge in %s: %s", source, isolated)
    return LoadedInput(config=config, graph=graph)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _parse_values(
    tokens: Sequence[str],
    fields: Sequence[str],
    source: str,
) -> Dict[str, Union[int, float]]:
    values: Dict[str, Union[int, float]] = {}
    for name, token in zip(fields, tokens):
        try:
            values[name] = int(token) if name in _INTEGER_FIELDS else float(token)
        except ValueError as exc:
            kind = "an integer" if name in _INTEGER_FIELDS else "a number"
            raise InputError(
                f"Invalid parameters for {source}: {name} must be {kind}, got {token!r}"
            ) from exc
    return values


def _build_config(values: Dict[str, Union[int, float]], seed: Optional[int]) -> SimulationConfig:
    try:
        return SimulationConfig(**values, seed=seed)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'parameters'}: {err['msg']}"
            for err in exc.errors()
        )
        raise InputError(f"Invalid parameters: {problems}") from exc
