"""
colony_sim/engine — the logical-time event loop.

Public API:
    Simulator            — seeds and runs the event loop
    EventQueue           — timestamp-ordered queue, FIFO among equal timestamps
    MoveEvent, EvaporationEvent, NotificationEvent — event variants
    ExponentialInterval  — exponential delay policy (mean-parameterised)
"""

from colony_sim.engine.distribution import (
    ExponentialInterval,
    IntervalFactory,
    RandomIntervalPolicy,
    exponential_factory,
)
from colony_sim.engine.event_queue import (
    Event,
    EvaporationEvent,
    EventQueue,
    MoveEvent,
    NotificationEvent,
)
from colony_sim.engine.simulator import (
    NOTIFICATION_DIVISIONS,
    TOP_CANDIDATES,
    ReportSink,
    Simulator,
)

__all__ = [
    "ExponentialInterval",
    "IntervalFactory",
    "RandomIntervalPolicy",
    "exponential_factory",
    "Event",
    "EvaporationEvent",
    "EventQueue",
    "MoveEvent",
    "NotificationEvent",
    "NOTIFICATION_DIVISIONS",
    "TOP_CANDIDATES",
    "ReportSink",
    "Simulator",
]
