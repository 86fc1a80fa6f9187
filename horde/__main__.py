"""Entry point: ``python -m horde``.

Supports two modes:
  - ``python -m horde``          → Launch the FastAPI diagnostics server
  - ``python -m horde cli``      → Headless scripted session with replay output
"""

from __future__ import annotations

import argparse
import logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Horde AI: hostile agents with adaptive difficulty")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI diagnostics server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--seed", type=int, default=42)
    srv.add_argument("--max-agents", type=int, default=50)
    srv.add_argument("--difficulty", type=float, default=1.0, help="Initial difficulty level")
    srv.add_argument("--paused", action="store_true", help="Build the session but do not start ticking")
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Run a headless scripted session")
    cli.add_argument("--seed", type=int, default=42)
    cli.add_argument("--ticks", type=int, default=1200)
    cli.add_argument("--max-agents", type=int, default=50)
    cli.add_argument("--difficulty", type=float, default=1.0, help="Initial difficulty level")
    cli.add_argument("--replay", type=str, default="replay.json")
    cli.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    return parser


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from horde.api.app import create_app
    from horde.config import AIConfig

    config = AIConfig(
        seed=args.seed,
        max_agents=args.max_agents,
        initial_difficulty=args.difficulty,
        log_level=args.log_level,
    )
    app = create_app(config, autostart=not args.paused)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _run_cli(args: argparse.Namespace) -> None:
    from horde.config import AIConfig
    from horde.engine.driver import SimulationDriver
    from horde.utils.logging import setup_logging
    from horde.utils.replay import ReplayRecorder

    config = AIConfig(
        seed=args.seed,
        max_agents=args.max_agents,
        initial_difficulty=args.difficulty,
        replay_file=args.replay,
        log_level=args.log_level,
    )

    setup_logging(config.log_level)

    recorder = ReplayRecorder(config.replay_file, config.seed)
    driver = SimulationDriver(config, recorder=recorder)
    try:
        driver.run(args.ticks)
    finally:
        driver.system.teardown()
        recorder.flush()

    stats = driver.system.spawner.statistics()
    logger.info(
        "Spawns: %d requested, %d fulfilled, %d failed (efficiency %.2f)",
        stats["total_requested"], stats["fulfilled"], stats["failed"], stats["spawn_efficiency"],
    )
    logger.info("Done. Replay written to %s", config.replay_file)


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None or args.command == "serve":
        if args.command is None:
            args = parser.parse_args(["serve"])
        _run_server(args)
    elif args.command == "cli":
        _run_cli(args)


if __name__ == "__main__":
    main()
