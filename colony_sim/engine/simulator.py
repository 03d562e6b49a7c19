"""
colony_sim/engine/simulator.py
──────────────────────────────
Simulator: the discrete-event loop that drives the colony in logical time.

How a run works
────────────────
  1. seed(): one MoveEvent per ant at a random delay (mean delta), and the
     first NotificationEvent at horizon / NOTIFICATION_DIVISIONS.
  2. Loop while clock < horizon:
       pop the earliest event, set clock to its timestamp, execute it.
  3. Executing an event may re-insert it (Move, Evaporation) or insert new
     ones (the next Notification; Evaporations armed by the colony).

Nothing blocks. "Waiting" is re-insertion with a later timestamp, and
exactly one event executes at a time, so the colony's shared state needs
no locking.

Event behaviour
────────────────
  Move         → ant.move() returns mean time m. timestamp += Exp(mean=m).
                 Re-insert if timestamp < horizon, else drop.
  Evaporation  → level = colony.update_level(u, v, −rho).
                 timestamp += Exp(mean=eta).
                 Re-insert only if level > 0. For a negative delta,
                 update_level returns the post-update level, so an edge that
                 has just reached exactly 0 is dropped. The next deposit on
                 it is a fresh zero → positive transition and re-arms it.
                 At most one Evaporation event is live per edge.
  Notification → builds an Observation, hands it to the report sink, then
                 the simulator inserts the next one at the following
                 boundary k × horizon / NOTIFICATION_DIVISIONS (k ≤ divisions).

Evaporation subscription
─────────────────────────
The simulator subscribes on_edge_activated() to the colony. When a deposit
turns an edge's pheromone from zero to positive, a new EvaporationEvent is
inserted at clock + Exp(mean=eta).
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import numpy as np

from ant_core import Colony, DeadEndError, HamiltonianCycleSearch
from colony_sim.engine.distribution import IntervalFactory, exponential_factory
from colony_sim.engine.event_queue import (
    Event,
    EvaporationEvent,
    EventQueue,
    MoveEvent,
    NotificationEvent,
)
from colony_sim.shared.graph import WeightedGraph
from colony_sim.shared.models import Observation, SimulationConfig

logger = logging.getLogger(__name__)

# ── Simulation constants ───────────────────────────────────────────────────────

NOTIFICATION_DIVISIONS: int = 20
"""The horizon is split into this many equal intervals, one observation each."""

TOP_CANDIDATES: int = 5
"""Maximum number of non-best cycles listed in an observation."""

ReportSink = Callable[[Observation], None]


class Simulator:
    """
    Discrete-event driver for one colony.

    Usage:
        sim = Simulator.from_config(config, graph, report_sink=print)
        observations = sim.run()

    Attributes:
        clock              : float — current logical time.
        move_events        : int   — Move events executed so far.
        evaporation_events : int   — Evaporation events executed so far.
        observations       : List[Observation] — every report emitted.
    """

    def __init__(
        self,
        config: SimulationConfig,
        colony: Colony,
        queue: Optional[EventQueue] = None,
        interval_factory: Optional[IntervalFactory] = None,
        report_sink: Optional[ReportSink] = None,
    ) -> None:
        self._config = config
        self._colony = colony
        self._queue = queue if queue is not None else EventQueue()
        self._interval = (
            interval_factory if interval_factory is not None else exponential_factory()
        )
        self._sink = report_sink

        self.clock: float = 0.0
        self.move_events: int = 0
        self.evaporation_events: int = 0
        self.observations: List[Observation] = []
        self._seeded = False

        colony.subscribe(self.on_edge_activated)

    @classmethod
    def from_config(
        cls,
        config: SimulationConfig,
        graph: WeightedGraph,
        report_sink: Optional[ReportSink] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> "Simulator":
        """
        Wire a complete simulation around one shared random generator.

        The generator feeds both the movement algorithm and the interval
        policies, so a seeded run is reproducible. Pass the one that built
        a random graph to keep drawing from the same stream; otherwise a
        new one is seeded from config.seed.

        Raises:
            ValueError: if the graph size disagrees with config.num_nodes.
        """
        if graph.num_nodes != config.num_nodes:
            raise ValueError(
                f"Graph has {graph.num_nodes} nodes but the configuration "
                f"expects {config.num_nodes}"
            )
        if rng is None:
            rng = np.random.default_rng(config.seed)
        colony = Colony(
            graph,
            config.nest_node,
            config.colony_size,
            HamiltonianCycleSearch(rng),
        )
        return cls(
            config,
            colony,
            interval_factory=exponential_factory(rng),
            report_sink=report_sink,
        )

    # ── Main loop ─────────────────────────────────────────────────────────────

    def seed(self) -> None:
        """Insert the initial Move events and the first Notification."""
        if self._seeded:
            return
        for ant in self._colony.ants:
            delay = self._interval(self._config.delta).draw()
            self._queue.insert(MoveEvent(self.clock + delay, ant, self._config))
        self._queue.insert(NotificationEvent(self._notification_time(1), 1))
        self._seeded = True

    def run(self) -> List[Observation]:
        """
        Run until the logical clock reaches the horizon.

        Returns:
            Every Observation emitted, in order.

        Raises:
            DeadEndError: if an ant gets stuck (logged before propagating).
        """
        self.seed()
        logger.info(
            "Simulation started: %d ants, nest %d, horizon %s",
            len(self._colony.ants), self._colony.nest_node, self._config.horizon,
        )
        while self.clock < self._config.horizon and self._queue:
            self.step()

        best = self._colony.best()
        logger.info(
            "Simulation finished at t=%s: %d move events, %d evaporation events, best %s",
            self.clock, self.move_events, self.evaporation_events,
            best.render() if best is not None else "none",
        )
        return list(self.observations)

    def step(self) -> Event:
        """Pop the earliest event, advance the clock to it and execute it."""
        event = self._queue.pop_min()
        self.clock = event.timestamp
        try:
            self._dispatch(event)
        except DeadEndError:
            logger.exception("Invariant failure at t=%s: ant reached a dead end", self.clock)
            raise
        return event

    def _dispatch(self, event: Event) -> None:
        match event:
            case MoveEvent():
                self._on_move(event)
            case EvaporationEvent():
                self._on_evaporation(event)
            case NotificationEvent():
                self._on_notification(event)
            case _:
                raise TypeError(f"Unknown event type: {type(event).__name__}")

    # ── Event behaviour ───────────────────────────────────────────────────────

    def _on_move(self, event: MoveEvent) -> None:
        cfg = event.config
        mean_time = event.ant.move(cfg.gamma, cfg.alpha, cfg.beta, cfg.delta)
        self.move_events += 1

        event.timestamp += self._interval(mean_time).draw()
        if event.timestamp < cfg.horizon:
            self._queue.insert(event)

    def _on_evaporation(self, event: EvaporationEvent) -> None:
        level = self._colony.update_level(event.u, event.v, -event.rho)
        self.evaporation_events += 1

        event.timestamp += self._interval(event.eta).draw()
        if level > 0.0:
            self._queue.insert(event)

    def _on_notification(self, event: NotificationEvent) -> None:
        observation = Observation(
            sequence=event.sequence,
            instant=event.timestamp,
            move_events=self.move_events,
            evaporation_events=self.evaporation_events,
            candidates=self._colony.ranked_cycles(TOP_CANDIDATES),
            best=self._colony.best(),
        )
        self.observations.append(observation)
        logger.debug(
            "Observation %d at t=%s: %d cycles known",
            observation.sequence, observation.instant, len(self._colony.cycles),
        )
        if self._sink is not None:
            self._sink(observation)

        following = event.sequence + 1
        if following <= NOTIFICATION_DIVISIONS:
            self._queue.insert(
                NotificationEvent(self._notification_time(following), following)
            )

    # ── Colony subscription ───────────────────────────────────────────────────

    def on_edge_activated(self, u: int, v: int) -> None:
        """Arm an Evaporation event for an edge that just gained pheromone."""
        delay = self._interval(self._config.eta).draw()
        self._queue.insert(
            EvaporationEvent(self.clock + delay, u, v, self._config.rho, self._config.eta)
        )
        logger.debug("Evaporation armed on edge (%d,%d) at t=%s", u, v, self.clock + delay)

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _notification_time(self, k: int) -> float:
        if k >= NOTIFICATION_DIVISIONS:
            return self._config.horizon
        return self._config.horizon * k / NOTIFICATION_DIVISIONS

    @property
    def colony(self) -> Colony:
        return self._colony

    @property
    def queue(self) -> EventQueue:
        return self._queue

    @property
    def config(self) -> SimulationConfig:
        return self._config

    def __repr__(self) -> str:
        return (
            f"Simulator(clock={self.clock:.4f}, moves={self.move_events}, "
            f"evaporations={self.evaporation_events}, pending={len(self._queue)})"
        )
