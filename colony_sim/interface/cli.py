"""
colony_sim/interface/cli.py
───────────────────────────
Command-line entry point.

    python -m colony_sim -r n a n1 alpha beta delta eta rho gamma nu tau
    python -m colony_sim -f INPUT_FILE

Exit status:
    0 → simulation ran to the horizon
    1 → an ant reached a dead end (invariant failure, see DeadEndError)
    2 → invalid arguments or input; nothing was simulated
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from ant_core import DeadEndError
from colony_sim.engine.simulator import Simulator
from colony_sim.interface.loader import (
    RANDOM_MODE_FIELDS,
    InputError,
    load_file,
    parse_random_args,
)
from colony_sim.interface.report import render_observation, render_parameters

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="colony_sim",
        description="Ant colony search for low-weight Hamiltonian cycles "
                    "(discrete stochastic simulation)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Random graph: 8 nodes, weights 1..10, nest 1
  python -m colony_sim -r 8 10 1 1.0 1.0 0.2 2.0 10.0 1.0 50 300

  # Graph and parameters from a file, reproducible
  python -m colony_sim -f data/pentagon.txt --seed 7
        """,
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "-r",
        dest="random",
        nargs=len(RANDOM_MODE_FIELDS),
        metavar=tuple(RANDOM_MODE_FIELDS),
        help="Generate a random graph and run with these parameters",
    )
    mode.add_argument(
        "-f",
        dest="file",
        metavar="INPUT_FILE",
        help="Read parameters and weight matrix from a file",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging verbosity (logs go to stderr)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.random is not None:
            loaded = parse_random_args(args.random, seed=args.seed)
        else:
            loaded = load_file(args.file, seed=args.seed)
    except InputError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(render_parameters(loaded.config, loaded.graph))

    simulator = Simulator.from_config(
        loaded.config,
        loaded.graph,
        report_sink=lambda observation: print(render_observation(observation)),
        rng=loaded.rng,
    )
    try:
        simulator.run()
    except DeadEndError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0
