"""
colony_sim/shared/models.py
───────────────────────────
The single source of truth for every data structure shared between the
search core (ant_core) and the simulation engine (colony_sim.engine).

Reading guide
-------------
Read top-to-bottom. Each model builds on the ones above it.

  SimulationConfig → the explicit parameter struct handed to the event loop
                     and to every event it creates. Nothing is global.
  CycleRecord      → one discovered Hamiltonian cycle and its weight.
  Observation      → one periodic report, emitted by a Notification event.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 1: CONFIGURATION
# ─────────────────────────────────────────────────────────────────────────────

class SimulationConfig(BaseModel):
    """
    Every numeric parameter of one simulation run.

    Fields:
        num_nodes   → Number of graph nodes. Nodes are numbered 1..num_nodes.
        nest_node   → Start and end node of every ant's search episode.
        alpha       → Additive pheromone bias in the move preference
                      (alpha + τ) / (beta + w). Larger alpha flattens the
                      influence of pheromone.
        beta        → Additive weight bias in the same formula.
        delta       → Time per unit of edge weight. Mean traversal time of an
                      edge of weight w is delta × w.
        eta         → Mean time between two evaporations of the same edge.
        rho         → Amount of pheromone removed by one evaporation.
        gamma       → Pheromone deposit scale: each edge of a closed cycle
                      of weight W_c receives gamma × W / W_c, where W is the
                      total weight of the graph.
        colony_size → Number of ants.
        horizon     → Final instant of the simulation (logical time).
        seed        → Optional seed for the shared random generator.
                      None = non-reproducible run.

    The model is frozen: the simulator and every event hold a reference to
    the same instance for the whole run.
    """
    model_config = ConfigDict(frozen=True)

    num_nodes: int = Field(..., ge=2, description="Number of nodes in the graph")
    nest_node: int = Field(..., ge=1, description="The nest node (1-based)")
    alpha: float = Field(..., ge=0.0, description="alpha, ant move event")
    beta: float = Field(..., ge=0.0, description="beta, ant move event")
    delta: float = Field(..., gt=0.0, description="delta, ant move event")
    eta: float = Field(..., gt=0.0, description="eta, pheromone evaporation event")
    rho: float = Field(..., gt=0.0, description="rho, pheromone evaporation event")
    gamma: float = Field(..., gt=0.0, description="pheromone level")
    colony_size: int = Field(..., ge=1, description="Ant colony size")
    horizon: float = Field(..., gt=0.0, description="Final instant")
    seed: Optional[int] = Field(None, description="Random seed. None = unseeded.")

    @model_validator(mode="after")
    def _nest_inside_graph(self) -> "SimulationConfig":
        if self.nest_node > self.num_nodes:
            raise ValueError(
                f"nest_node={self.nest_node} is outside the graph "
                f"(nodes are numbered 1..{self.num_nodes})"
            )
        return self


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 2: DISCOVERED CYCLES
# ─────────────────────────────────────────────────────────────────────────────

class CycleRecord(BaseModel):
    """
    A Hamiltonian cycle found by an ant, nest node first, without the
    closing repeat of the nest node.

    Identity vs ordering:
        Two records are equal when their node sequences are equal. The
        weight is NOT part of identity, so the colony keeps one record per
        sequence no matter how many ants rediscover it.
        Ordering (<) compares weights only, ascending, for ranking.

    Example:
        CycleRecord(nodes=(1, 2, 3, 4), weight=10).render() → "{1,2,3,4}:10"
    """
    model_config = ConfigDict(frozen=True)

    nodes: Tuple[int, ...] = Field(..., min_length=1)
    weight: int = Field(..., ge=0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CycleRecord):
            return NotImplemented
        return self.nodes == other.nodes

    def __hash__(self) -> int:
        return hash(self.nodes)

    def __lt__(self, other: "CycleRecord") -> bool:
        return self.weight < other.weight

    def render(self) -> str:
        return "{" + ",".join(str(n) for n in self.nodes) + "}:" + str(self.weight)


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 3: PERIODIC REPORTS
# ─────────────────────────────────────────────────────────────────────────────

class Observation(BaseModel):
    """
    One periodic snapshot of the simulation, produced by a Notification event.

    Fields:
        sequence           → Observation number, 1-based, strictly increasing.
        instant            → Logical time of the snapshot.
        move_events        → Cumulative number of executed Move events.
        evaporation_events → Cumulative number of executed Evaporation events.
        candidates         → Up to TOP_CANDIDATES best cycles, excluding the
                             best one, ascending by weight.
        best               → The lowest-weight cycle so far. None = no cycle
                             has been closed yet.
    """
    sequence: int = Field(..., ge=1)
    instant: float = Field(..., ge=0.0)
    move_events: int = Field(0, ge=0)
    evaporation_events: int = Field(0, ge=0)
    candidates: List[CycleRecord] = Field(default_factory=list)
    best: Optional[CycleRecord] = None
