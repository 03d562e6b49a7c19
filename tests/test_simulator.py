"""
tests/test_simulator.py
───────────────────────
The Simulator: seeding, event behaviour and complete runs.

Reading guide
─────────────
Group 1 — Seeding and wiring
    Initial Move and Notification events; from_config validation.

Group 2 — Event behaviour (one step at a time)
    Move re-insertion vs horizon, evaporation re-arming, notifications and
    the edge-activation subscription.

Group 3 — Complete runs
    20 observations ending exactly at the horizon, reproducibility under a
    seed, dead ends logged and propagated.

Fixed intervals
───────────────
FixedInterval.draw() returns its mean, so a step-level test knows every
timestamp in advance. Complete runs use the real exponential policy
through Simulator.from_config().
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np
import pytest

from ant_core import Colony, DeadEndError, HamiltonianCycleSearch
from colony_sim.engine import (
    NOTIFICATION_DIVISIONS,
    TOP_CANDIDATES,
    EvaporationEvent,
    MoveEvent,
    NotificationEvent,
    Simulator,
)
from colony_sim.shared.graph import UndirectedWeightedGraph
from colony_sim.shared.models import Observation, SimulationConfig


# ─────────────────────────────────────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────────────────────────────────────

class FixedInterval:
    def __init__(self, mean: float) -> None:
        self.mean = mean

    def draw(self) -> float:
        return self.mean


def _square_graph() -> UndirectedWeightedGraph:
    """4-cycle 1-2:3, 2-3:2, 3-4:4, 4-1:1. Every Hamiltonian cycle weighs 10."""
    return UndirectedWeightedGraph.from_rows([
        [0, 3, 0, 1],
        [3, 0, 2, 0],
        [0, 2, 0, 4],
        [1, 0, 4, 0],
    ])


def _complete_graph(n: int = 5) -> UndirectedWeightedGraph:
    rows = [[0 if i == j else 1 + (i + j) % 4 for j in range(n)] for i in range(n)]
    return UndirectedWeightedGraph.from_rows(rows)


def _config(**overrides) -> SimulationConfig:
    params = dict(
        num_nodes=4, nest_node=1, alpha=1.0, beta=1.0, delta=0.5,
        eta=2.0, rho=10.0, gamma=1.0, colony_size=1, horizon=100.0, seed=None,
    )
    params.update(overrides)
    return SimulationConfig(**params)


def _fixed_simulator(
    rng,
    config: SimulationConfig,
    graph: UndirectedWeightedGraph = None,
    report_sink=None,
) -> Simulator:
    """Simulator with deterministic movement draws and delays equal to the mean."""
    colony = Colony(
        graph or _square_graph(),
        config.nest_node,
        config.colony_size,
        HamiltonianCycleSearch(rng),
    )
    return Simulator(config, colony, interval_factory=FixedInterval, report_sink=report_sink)


# ─────────────────────────────────────────────────────────────────────────────
# GROUP 1 — Seeding and wiring
# ─────────────────────────────────────────────────────────────────────────────

class TestSeeding:

    def test_seed_inserts_one_move_per_ant_and_first_notification(self, scripted_random):
        config = _config(colony_size=3, horizon=100.0, delta=0.5)
        sim = _fixed_simulator(scripted_random(0.0), config)

        sim.seed()

        events = [sim.queue.pop_min() for _ in range(len(sim.queue))]
        moves = [e for e in events if isinstance(e, MoveEvent)]
        notes = [e for e in events if isinstance(e, NotificationEvent)]
        assert [m.ant for m in moves] == sim.colony.ants
        assert all(m.timestamp == 0.5 for m in moves)
        assert all(m.config is config for m in moves)
        assert len(notes) == 1
        assert notes[0].sequence == 1
        assert notes[0].timestamp == pytest.approx(100.0 / NOTIFICATION_DIVISIONS)

    def test_seed_is_idempotent(self, scripted_random):
        sim = _fixed_simulator(scripted_random(0.0), _config(colony_size=2))
        sim.seed()
        sim.seed()
        assert len(sim.queue) == 3

    def test_from_config_rejects_mismatched_graph(self):
        with pytest.raises(ValueError):
            Simulator.from_config(_config(num_nodes=5), _square_graph())

    def test_from_config_builds_colony_from_parameters(self):
        sim = Simulator.from_config(_config(colony_size=4, nest_node=3, seed=1), _square_graph())
        assert len(sim.colony.ants) == 4
        assert sim.colony.nest_node == 3
        assert all(ant.current_node == 3 for ant in sim.colony.ants)

    def test_from_config_draws_from_a_supplied_generator(self, scripted_random):
        """A passed-in generator replaces seeding from config.seed."""
        rng = scripted_random(0.0)
        sim = Simulator.from_config(_config(colony_size=3, seed=1), _square_graph(), rng=rng)
        sim.seed()
        assert rng.calls == 3, "one first-move delay per ant"


# ─────────────────────────────────────────────────────────────────────────────
# GROUP 2 — Event behaviour
# ─────────────────────────────────────────────────────────────────────────────

class TestMoveEvent:

    def test_move_is_reinserted_after_mean_traversal_time(self, scripted_random):
        """1 → 2 costs delta × 3 = 1.5; the event comes back at 0.5 + 1.5."""
        config = _config(horizon=100.0)
        sim = _fixed_simulator(scripted_random(0.0), config)
        ant = sim.colony.ants[0]
        sim.queue.insert(MoveEvent(0.5, ant, config))

        sim.step()

        assert sim.clock == 0.5
        assert sim.move_events == 1
        assert ant.current_node == 2
        again = sim.queue.pop_min()
        assert isinstance(again, MoveEvent) and again.timestamp == pytest.approx(2.0)

    def test_move_past_horizon_is_dropped(self, scripted_random):
        config = _config(horizon=1.0)
        sim = _fixed_simulator(scripted_random(0.0), config)
        sim.queue.insert(MoveEvent(0.9, sim.colony.ants[0], config))

        sim.step()

        assert sim.move_events == 1
        assert sim.queue.is_empty(), "a move scheduled at/after the horizon must be dropped"


class TestEvaporationEvent:

    def test_deposit_on_empty_edge_arms_evaporation(self, scripted_random):
        config = _config(eta=2.0, rho=10.0)
        sim = _fixed_simulator(scripted_random(0.0), config)

        sim.colony.update_level(1, 2, 15.0)

        assert len(sim.queue) == 1
        event = sim.queue.peek()
        assert isinstance(event, EvaporationEvent)
        assert (event.u, event.v, event.rho, event.eta) == (1, 2, 10.0, 2.0)
        assert event.timestamp == pytest.approx(2.0)

    def test_further_deposits_do_not_arm_again(self, scripted_random):
        sim = _fixed_simulator(scripted_random(0.0), _config())
        sim.colony.update_level(1, 2, 1.0)
        sim.colony.update_level(1, 2, 1.0)
        assert len(sim.queue) == 1

    def test_evaporation_rearms_while_pheromone_remains(self, scripted_random):
        """τ = 15, rho = 10 → 5 remains, re-armed; next step → 0, dropped."""
        sim = _fixed_simulator(scripted_random(0.0), _config(eta=2.0, rho=10.0))
        sim.colony.update_level(1, 2, 15.0)

        sim.step()
        assert sim.colony.level(1, 2) == pytest.approx(5.0)
        assert sim.evaporation_events == 1
        assert len(sim.queue) == 1
        assert sim.queue.peek().timestamp == pytest.approx(4.0)

        sim.step()
        assert sim.colony.level(1, 2) == 0.0
        assert sim.colony.level(2, 1) == 0.0
        assert sim.evaporation_events == 2
        assert sim.queue.is_empty()

    def test_evaporation_reaching_exactly_zero_is_dropped(self, scripted_random):
        sim = _fixed_simulator(scripted_random(0.0), _config(rho=10.0))
        sim.colony.update_level(3, 4, 10.0)

        sim.step()

        assert sim.colony.level(3, 4) == 0.0
        assert sim.queue.is_empty()

    def test_edge_is_rearmed_after_falling_to_zero(self, scripted_random):
        sim = _fixed_simulator(scripted_random(0.0), _config(rho=10.0))
        sim.colony.update_level(3, 4, 10.0)
        sim.step()
        sim.colony.update_level(3, 4, 1.0)
        assert len(sim.queue) == 1
        assert isinstance(sim.queue.peek(), EvaporationEvent)


class TestNotificationEvent:

    def _with_cycles(self, scripted_random, n_cycles: int, report_sink=None) -> Simulator:
        sim = _fixed_simulator(
            scripted_random(0.0),
            _config(num_nodes=5, horizon=100.0),
            graph=_complete_graph(5),
            report_sink=report_sink,
        )
        tails = [(2, 3, 4, 5), (2, 3, 5, 4), (2, 4, 3, 5), (2, 4, 5, 3),
                 (2, 5, 3, 4), (2, 5, 4, 3), (3, 2, 4, 5), (3, 2, 5, 4)]
        for weight, tail in enumerate(tails[:n_cycles], start=10):
            sim.colony.add_cycle((1,) + tail, weight)
        return sim

    def test_observation_snapshot_and_next_notification(self, scripted_random):
        sim = self._with_cycles(scripted_random, 8)
        sim.move_events, sim.evaporation_events = 12, 3
        sim.queue.insert(NotificationEvent(5.0, 1))

        sim.step()

        (obs,) = sim.observations
        assert obs.sequence == 1 and obs.instant == 5.0
        assert (obs.move_events, obs.evaporation_events) == (12, 3)
        assert obs.best.weight == 10
        assert [c.weight for c in obs.candidates] == [11, 12, 13, 14, 15]
        assert len(obs.candidates) == TOP_CANDIDATES

        following = sim.queue.pop_min()
        assert isinstance(following, NotificationEvent)
        assert following.sequence == 2
        assert following.timestamp == pytest.approx(10.0)

    def test_observation_without_cycles(self, scripted_random):
        sim = self._with_cycles(scripted_random, 0)
        sim.queue.insert(NotificationEvent(5.0, 1))
        sim.step()
        assert sim.observations[0].best is None
        assert sim.observations[0].candidates == []

    def test_last_notification_schedules_nothing(self, scripted_random):
        sim = self._with_cycles(scripted_random, 1)
        sim.queue.insert(NotificationEvent(100.0, NOTIFICATION_DIVISIONS))
        sim.step()
        assert sim.queue.is_empty()

    def test_report_sink_receives_each_observation(self, scripted_random):
        received: List[Observation] = []
        sim = self._with_cycles(scripted_random, 2, report_sink=received.append)
        sim.queue.insert(NotificationEvent(5.0, 1))
        sim.step()
        assert received == sim.observations


# ─────────────────────────────────────────────────────────────────────────────
# GROUP 3 — Complete runs
# ─────────────────────────────────────────────────────────────────────────────

class TestRun:

    def _run(self, seed: int = 42, **overrides) -> Simulator:
        params = dict(delta=0.2, eta=2.0, rho=0.5, colony_size=5, horizon=50.0, seed=seed)
        params.update(overrides)
        sim = Simulator.from_config(_config(**params), _square_graph())
        sim.run()
        return sim

    def test_run_emits_twenty_observations_up_to_horizon(self):
        sim = self._run()
        observations = sim.observations

        assert len(observations) == NOTIFICATION_DIVISIONS
        assert [o.sequence for o in observations] == list(range(1, 21))
        expected = [50.0 * k / NOTIFICATION_DIVISIONS for k in range(1, 21)]
        assert [o.instant for o in observations] == pytest.approx(expected)
        assert observations[-1].instant == 50.0
        assert sim.clock == 50.0

    def test_run_counters_and_best_cycle(self):
        sim = self._run()
        moves = [o.move_events for o in sim.observations]
        assert moves == sorted(moves), "move counter must never decrease"
        assert sim.move_events > 0
        assert sim.evaporation_events > 0
        assert sim.observations[-1].best is not None
        assert sim.observations[-1].best.weight == 10
        snap = sim.colony.pheromones.snapshot()
        assert np.array_equal(snap, snap.T) and np.all(snap >= 0.0)

    def test_run_returns_observations(self):
        sim = Simulator.from_config(_config(seed=5, horizon=20.0), _square_graph())
        result = sim.run()
        assert result == sim.observations
        assert result is not sim.observations

    def test_same_seed_reproduces_the_run(self):
        first = self._run(seed=123)
        second = self._run(seed=123)
        assert [o.model_dump() for o in first.observations] == [
            o.model_dump() for o in second.observations
        ]
        assert first.move_events == second.move_events

    def test_dead_end_is_logged_and_raised(self, caplog):
        graph = UndirectedWeightedGraph.from_rows([
            [0, 0, 0],
            [0, 0, 1],
            [0, 1, 0],
        ])
        sim = Simulator.from_config(_config(num_nodes=3, seed=0), graph)

        with caplog.at_level(logging.ERROR, logger="colony_sim.engine.simulator"):
            with pytest.raises(DeadEndError):
                sim.run()

        assert any("dead end" in r.getMessage() for r in caplog.records)
