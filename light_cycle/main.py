#!/usr/bin/env python3
"""
Light Cycle headless runner

Draws the paths listed in a run file's solution, plays the simulation with a
fixed tick and prints a report with the star rating.

Usage:
    python -m light_cycle.main --config configs/first_light.yaml [options]

Examples:
    python -m light_cycle.main --config configs/first_light.yaml
    python -m light_cycle.main --config configs/color_blend.yaml --csv --out-dir results/
    python -m light_cycle.main --config configs/the_maze.yaml --speed 4 --quiet
    python -m light_cycle.main --config configs/first_light.yaml --max-ms 500 --verbose
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import RunConfig, load_config
from .model.authoring import policy_named
from .model.engine import FailureReason
from .model.session import PuzzleSession
from .export.csv_writer import RunLogWriter
from .export.reporter import Reporter


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Light Cycle headless runner',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    light-cycle --config configs/first_light.yaml
    light-cycle --config configs/color_blend.yaml --csv --out-dir results/
    light-cycle --config configs/the_maze.yaml --speed 4 --quiet
        """
    )

    # Required arguments
    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML run file (level + solution)')

    # Optional overrides
    parser.add_argument('--speed', type=float, default=None,
                        help='Override speed multiplier')
    parser.add_argument('--tick-ms', type=float, default=None,
                        help='Override fixed tick length in ms')
    parser.add_argument('--max-ms', type=float, default=None,
                        help='Override simulated time limit in ms')
    parser.add_argument('--policy', choices=['assisted', 'manual'], default=None,
                        help='Override path extension policy')
    parser.add_argument('--out-dir', type=Path, default=None,
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV run log')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV run log (default)')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--verbose', action='store_true', default=False,
                        help='Log engine activity to stderr')

    return parser.parse_args(argv)


def apply_overrides(config: RunConfig, args: argparse.Namespace) -> None:
    """Apply CLI overrides to a loaded run configuration."""
    for flag, value in (('--speed', args.speed), ('--tick-ms', args.tick_ms),
                        ('--max-ms', args.max_ms)):
        if value is not None and value <= 0:
            raise ValueError(f"{flag} must be positive, got {value}")
    if args.speed is not None:
        config.simulation.speed_multiplier = args.speed
    if args.tick_ms is not None:
        config.simulation.tick_ms = args.tick_ms
    if args.max_ms is not None:
        config.simulation.max_duration_ms = args.max_ms
    if args.policy is not None and config.solution is not None:
        config.solution.policy = args.policy
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.out_dir is not None:
        config.out_dir = args.out_dir
    config.quiet = args.quiet


def draw_solution(session: PuzzleSession, config: RunConfig) -> Optional[str]:
    """Replay the solution clicks; returns an error message on rejection."""
    if config.solution is None:
        return "Run file has no solution to draw"
    policy = policy_named(config.solution.policy)
    for outlet_id, waypoints in config.solution.paths.items():
        result = session.trace(outlet_id, waypoints, policy)
        if not result.ok:
            return f"Path for {outlet_id} rejected: {result.message}"
    # Undos spent while solving elsewhere still count against the score
    session.undo_count += config.undo_count
    return None


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )

    # Load configuration
    try:
        config = load_config(args.config)
        apply_overrides(config, args)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except (ValueError, KeyError, TypeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    sim = config.simulation

    session = PuzzleSession(config.level, sim)
    error = draw_solution(session, config)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    if not config.quiet:
        print(f"Initializing run...")
        print(f"  Level: {config.level.name or args.config} "
              f"({config.level.size}x{config.level.size})")
        print(f"  Outlets: {len(config.level.outlets)}, "
              f"Stations: {len(config.level.stations)}")
        print(f"  Total path length: {session.total_path_length}")
        print(f"  Junctions: {len(session.junctions)}")

    started = session.start_simulation()
    if not started.ok:
        print(f"Error: {started.message}", file=sys.stderr)
        return 1

    run_log = RunLogWriter(config.out_dir / 'run_log.csv') if config.csv_enabled else None

    reporter = Reporter(str(args.config), config.level)

    if not config.quiet:
        print(f"\nRunning simulation...")

    engine = session.engine
    final_state = session.snapshot()
    try:
        while engine.is_running:
            state = session.tick(sim.tick_ms)
            final_state = state

            if run_log is not None:
                run_log.write(state)
            reporter.update(state)

            if engine.is_running and engine.clock_ms >= sim.max_duration_ms:
                engine.abandon(FailureReason.TIMED_OUT)
                final_state = engine.snapshot()

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nRun interrupted by user.")
        engine.abandon(FailureReason.TIMED_OUT)

    if run_log is not None:
        run_log.close()
        if not config.quiet:
            print(f"\nCSV saved: {run_log.output_path} ({run_log.rows_written} rows)")

    completion = session.last_completion
    score = session.score() if completion is not None and completion.success else None

    # Print summary report
    if not config.quiet:
        report = reporter.generate_summary(
            final_state,
            completion,
            score,
            config.out_dir,
            config.csv_enabled
        )
        print(report)

    return 0 if score is not None else 2


if __name__ == '__main__':
    sys.exit(main())
