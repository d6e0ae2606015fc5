"""Entry point: ``python -m seqactions``.

Supports two modes:
  - ``python -m seqactions``          → Launch the FastAPI inspection server
  - ``python -m seqactions cli``      → Headless demo run with a summary
"""

from __future__ import annotations

import argparse
import logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Per-agent sequential action queues")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--seed", type=int, default=42)
    srv.add_argument("--agents", type=int, default=8)
    srv.add_argument("--lenient", action="store_true", help="Log and ignore immediate edits from callbacks")
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Run the demo scenario headless")
    cli.add_argument("--seed", type=int, default=42)
    cli.add_argument("--ticks", type=int, default=200)
    cli.add_argument("--agents", type=int, default=8)
    cli.add_argument("--lenient", action="store_true", help="Log and ignore immediate edits from callbacks")
    cli.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])
    cli.add_argument(
        "--trace", action="store_true",
        help="Log every lifecycle callback (on_add / on_start / on_stop / on_remove / on_drop)",
    )

    return parser


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from seqactions.api.app import create_app
    from seqactions.config import SimulationConfig

    config = SimulationConfig(
        world_seed=args.seed,
        initial_agent_count=args.agents,
        strict_reentrancy=not args.lenient,
        log_level=args.log_level,
    )
    app = create_app(config)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_cli(args: argparse.Namespace) -> None:
    from seqactions.actions.countdown import countdown_system
    from seqactions.config import SimulationConfig
    from seqactions.core.world_state import WorldState
    from seqactions.engine.world_loop import WorldLoop
    from seqactions.systems.demo import DemoScenario
    from seqactions.systems.rng import DeterministicRNG
    from seqactions.utils.logging import setup_logging

    config = SimulationConfig(
        world_seed=args.seed,
        max_ticks=args.ticks,
        initial_agent_count=args.agents,
        strict_reentrancy=not args.lenient,
        log_level=args.log_level,
    )
    setup_logging(config.log_level, lifecycle_level="DEBUG" if args.trace else None)

    world = WorldState(config)
    scenario = DemoScenario(config, DeterministicRNG(config.world_seed))
    scenario.populate(world)

    counts: dict[str, int] = {}

    def _count(events) -> None:
        for ev in events:
            counts[ev.category] = counts.get(ev.category, 0) + 1

    _count(world.tick_events)
    loop = WorldLoop(config, world, systems=(countdown_system, scenario))
    while loop.tick_once():
        _count(loop.tick_events)
        if world.tick % 50 == 0:
            snap = loop.create_snapshot()
            logger.info("Tick %d: %d agents, %d running", snap.tick, len(snap.agents), snap.running_count)

    logger.info("=== Finished at tick %d ===", world.tick)
    logger.info("Spawned %d, despawned %d, shouts %d",
                scenario.total_spawned, scenario.total_despawned, world.resources.get("shouts", 0))
    for category in sorted(counts):
        logger.info("  %-8s %d", category, counts[category])


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None:
        args = parser.parse_args(["serve"])
    if args.command == "serve":
        _run_server(args)
    elif args.command == "cli":
        _run_cli(args)


if __name__ == "__main__":
    main()
