"""
Hostplay CLI - Command-line interface for the engines.

Usage:
    hostplay race [--seats N] [--seed S]      Run a headless bot race
    hostplay sowing [--seed S]                Run a headless sowing match
    hostplay serve [--host H] [--port P]      Serve the HTTP/WebSocket API

Headless matches use zero pacing and an immediate scheduler, so a whole
match runs inside a single call.
"""

import argparse
import logging
import random
import sys

from .config import PacingConfig, configure_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Hostplay - Host-authoritative board game engines",
        prog="hostplay",
    )
    parser.add_argument("--log-level", help="Logging level (default from HOSTPLAY_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Race command
    race_parser = subparsers.add_parser("race", help="Run a headless token race between bots")
    race_parser.add_argument("--seats", type=int, default=4, choices=[2, 3, 4], help="Number of bots")
    race_parser.add_argument("--seed", type=int, default=None, help="Random seed")

    # Sowing command
    sowing_parser = subparsers.add_parser("sowing", help="Run a headless sowing match between bots")
    sowing_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    sowing_parser.add_argument("--max-moves", type=int, default=500, help="Stop after this many moves")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Serve the HTTP/WebSocket API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "race":
        cmd_race(args)
    elif args.command == "sowing":
        cmd_sowing(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _track_moves(engine) -> list:
    """Collect each distinct last move the engine publishes."""
    moves = []

    def on_state(state):
        if state.last_move is not None and (not moves or moves[-1] != state.last_move):
            moves.append(state.last_move)

    engine.subscribe(on_state)
    return moves


def cmd_race(args):
    """Run a bot-only token race to completion."""
    from .engine_core import AddBot, ImmediateScheduler, StartGame
    from .games.race import RaceEngine

    engine = RaceEngine(
        rng=random.Random(args.seed),
        scheduler=ImmediateScheduler(),
        pacing=PacingConfig.headless(),
    )
    engine.initialize()
    for seat in range(args.seats):
        engine.apply(AddBot(seat=seat))

    moves = _track_moves(engine)

    print(f"Starting race with {args.seats} bots (seed={args.seed})")
    engine.apply(StartGame())

    state = engine.snapshot()
    winner = state.get_player(state.winner) if state.winner else None
    print(f"Winner: {winner.name if winner else 'none'} ({state.winner})")
    print(f"Token moves: {len(moves)}")


def cmd_sowing(args):
    """Run a sowing match between the built-in bot and a random player."""
    from .bots import SowingBot
    from .engine_core import AddBot, ImmediateScheduler, MatchPhase, Participant, StartGame
    from .games.sowing import SowingEngine

    rng = random.Random(args.seed)
    engine = SowingEngine(
        rng=rng,
        scheduler=ImmediateScheduler(),
        pacing=PacingConfig.headless(),
    )
    # Seat 0 is driven from here; seat 1 is the engine's own bot
    cpu = Participant("cpu", "CPU")
    engine.initialize([cpu])
    engine.apply(AddBot())

    player = SowingBot(rng=rng)
    moves = _track_moves(engine)
    print(f"Starting sowing match (seed={args.seed})")
    engine.apply(StartGame())

    while engine.phase == MatchPhase.PLAYING and len(moves) < args.max_moves:
        state = engine.snapshot()
        if state.current_turn != cpu.participant_id:
            break
        decision = player.select_action(state, cpu.participant_id)
        if decision is None or not engine.apply(decision.action):
            break

    state = engine.snapshot()
    if state.phase != MatchPhase.ENDED:
        print(f"Stopped after {len(moves)} moves without a result")
    elif state.is_draw:
        print("Result: draw")
    else:
        print(f"Winner: {state.winner}")
    print(f"Scores: {state.scores}")
    print(f"Moves: {len(moves)}")


def cmd_serve(args):
    """Serve the API with uvicorn."""
    import uvicorn
    from .api.app import create_app

    logger.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
