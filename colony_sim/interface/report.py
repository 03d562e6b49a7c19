"""
colony_sim/interface/report.py
──────────────────────────────
Plain-text rendering of the input echo and of each Observation.

Observation block format:

    Observation 3:
            Present instant:                15.0
            Number of move events:          412
            Number of evaporation events:   97
            Top candidate cycles: {1,4,2,5,3}:31
                                            {1,3,5,2,4}:33
            Best Hamiltonian cycle: {1,2,3,4,5}:27

A cycle is "{n1,n2,...}:weight"; "{}" marks a missing best cycle.
"""

from __future__ import annotations

from typing import List

from colony_sim.shared.graph import UndirectedWeightedGraph
from colony_sim.shared.models import Observation, SimulationConfig

EMPTY_CYCLE = "{}"


def render_observation(observation: Observation) -> str:
    lines: List[str] = [
        f"Observation {observation.sequence}:",
        f"\t\tPresent instant: \t\t{observation.instant}",
        f"\t\tNumber of move events: \t\t{observation.move_events}",
        f"\t\tNumber of evaporation events:   {observation.evaporation_events}",
    ]

    candidates = [c.render() for c in observation.candidates]
    if candidates:
        lines.append(f"\t\tTop candidate cycles: \t\t{candidates[0]}")
        lines.extend("\t\t\t\t\t\t" + c for c in candidates[1:])
    else:
        lines.append("\t\tTop candidate cycles: ")

    best = observation.best.render() if observation.best is not None else EMPTY_CYCLE
    lines.append(f"\t\tBest Hamiltonian cycle: \t{best}")
    return "\n".join(lines) + "\n"


def render_parameters(config: SimulationConfig, graph: UndirectedWeightedGraph) -> str:
    """The parameter echo printed once before the simulation starts."""
    entries = [
        (config.num_nodes, "number of nodes in the graph"),
        (config.nest_node, "the nest node"),
        (config.alpha, "alpha, ant move event"),
        (config.beta, "beta, ant move event"),
        (config.delta, "delta, ant move event"),
        (config.eta, "eta, pheromone evaporation event"),
        (config.rho, "rho, pheromone evaporation event"),
        (config.gamma, "pheromone level"),
        (config.colony_size, "ant colony size"),
        (config.horizon, "final instant"),
    ]
    lines = ["Input parameters:"]
    lines.extend(f"\t\t  {value}\t: {label}" for value, label in entries)
    lines.append("")
    lines.append("\t with graph:")
    lines.extend(
        "\t\t     " + " ".join(str(w) for w in row) for row in graph.rows()
    )
    return "\n".join(lines) + "\n"
