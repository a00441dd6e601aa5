"""
Waste Sort CLI - Command-line interface for the engine.

Usage:
    wastesort simulate [--mode pool] [--sorter accurate]   Play a session with a bot
    wastesort bins                                         Show the sorting rules
    wastesort serve [--host HOST] [--port PORT]            Run the HTTP API
"""

import argparse
import logging
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Waste Sort - Timed waste-sorting game engine",
        prog="wastesort",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a session with a bot")
    simulate_parser.add_argument(
        "--mode", choices=["single_slot", "pool"], default="single_slot", help="Spawn mode"
    )
    simulate_parser.add_argument("--duration", type=int, help="Session length in seconds")
    simulate_parser.add_argument("--seed", type=int, help="Random seed")
    simulate_parser.add_argument(
        "--sorter", choices=["random", "accurate"], default="accurate", help="Bot policy"
    )
    simulate_parser.add_argument(
        "--accuracy", type=float, default=0.8, help="Hit rate of the accurate sorter"
    )
    simulate_parser.add_argument(
        "--think-time", type=float, default=1.5, help="Seconds the bot takes per item"
    )

    # Bins command
    subparsers.add_parser("bins", help="Show bins and the categories they accept")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "bins":
        cmd_bins(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_simulate(args):
    """Play one session in virtual time and print the summary."""
    from .bots import AccurateSorter, RandomSorter
    from .engine_core.errors import ConfigurationError
    from .games.recycling import create_default_config
    from .session import GameLoop, ManualScheduler, SessionController

    try:
        config = create_default_config(
            mode=args.mode,
            random_seed=args.seed,
            session_duration_seconds=args.duration,
        )
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.sorter == "random":
        sorter = RandomSorter(seed=args.seed)
    else:
        try:
            sorter = AccurateSorter(config.validate(), accuracy=args.accuracy, seed=args.seed)
        except ValueError as e:
            print(f"Error: {e}")
            sys.exit(1)

    scheduler = ManualScheduler()
    controller = SessionController(config, scheduler=scheduler)
    try:
        loop = GameLoop(controller, scheduler, sorter, think_time_seconds=args.think_time)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Simulating {config.mode.value} session ({config.session_duration_seconds}s)")
    print(f"Sorter: {sorter.get_name()}")
    summary = loop.run()

    for result in summary.rounds:
        mark = "+" if result.correct else "-"
        print(f"  {mark} {result.item_name:<16} -> {result.bin_type.value:<10} {result.message}")

    print(f"\nFinal score: {summary.final_score}")
    print(f"Correct: {summary.correct_count}  Incorrect: {summary.incorrect_count}")
    print(f"Accuracy: {summary.accuracy}%")
    print(f"Items spawned: {summary.items_spawned_total}")
    return summary


def cmd_bins(args):
    """Print the default bins."""
    from .games.recycling import DEFAULT_BINS

    for bin_ in DEFAULT_BINS:
        accepted = ", ".join(sorted(c.value for c in bin_.accepted_categories)) or "-"
        print(f"{bin_.label:<10} {bin_.description:<30} accepts: {accepted}")


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("wastesort.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
