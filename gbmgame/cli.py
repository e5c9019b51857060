"""
Command-line interface for the GBM stop-loss game.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional
from gbmgame.config import GameConfig, configure_logging
from gbmgame.live.clock import StepClock
from gbmgame.simulation.ledger import AccountLedger
from gbmgame.simulation.path_generator import PathGenerator
from gbmgame.simulation.round_engine import RoundEngine
from gbmgame.visualization import plot_round


def parse_args(
    argv: Optional[List[str]] = None,
    config: Optional[GameConfig] = None,
) -> argparse.Namespace:
    """Parse command-line arguments.

    Parameters
    ----------
    argv : list of str, optional
        Arguments to parse (default: ``sys.argv[1:]``)
    config : GameConfig, optional
        Source of defaults (default: ``GameConfig.from_env()``)

    Returns
    -------
    argparse.Namespace
        Parsed command-line arguments
    """
    if config is None:
        config = GameConfig.from_env()

    parser = argparse.ArgumentParser(
        description="Stop-loss trading game on Geometric Brownian Motion paths",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s --rounds 5 --stop-loss 15 --volatility 0.4
  %(prog)s --seed 7 --output output/round.png --no-plot
        """,
    )

    parser.add_argument(
        "--rounds",
        type=int,
        default=1,
        help="Number of rounds to play (default: 1)",
    )

    parser.add_argument(
        "--stop-loss",
        type=float,
        default=config.stop_loss_percent,
        help=f"Stop-loss as percent below entry price (default: {config.stop_loss_percent})",
    )

    parser.add_argument(
        "--volatility",
        type=float,
        default=config.volatility,
        help=f"Annualized volatility in [0, 1] (default: {config.volatility})",
    )

    parser.add_argument(
        "--a-parameter",
        type=float,
        default=config.a_parameter,
        help=f"Drift magnitude in [0, 1]; drift is ln(1 +/- A) (default: {config.a_parameter})",
    )

    parser.add_argument(
        "--initial-balance",
        type=float,
        default=config.initial_balance,
        help=f"Starting account balance (default: {config.initial_balance})",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed,
        help="Random seed for reproducible rounds (default: none)",
    )

    parser.add_argument(
        "--interval",
        type=float,
        default=config.tick_interval,
        help=f"Seconds between steps (default: {config.tick_interval})",
    )

    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save the chart of the last round (optional)",
    )

    parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Do not display the chart (useful for headless execution)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log round events",
    )

    return parser.parse_args(argv)


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command-line arguments

    Raises
    ------
    ValueError
        If arguments are invalid
    """
    if args.rounds <= 0:
        raise ValueError("rounds must be positive")
    if args.interval < 0:
        raise ValueError("interval must be non-negative")
    if not 0.0 <= args.stop_loss <= 100.0:
        raise ValueError("stop-loss must be between 0 and 100")
    if not 0.0 <= args.volatility <= 1.0:
        raise ValueError("volatility must be between 0 and 1")
    if not 0.0 <= args.a_parameter <= 1.0:
        raise ValueError("a-parameter must be between 0 and 1")

    if args.output:
        output_path = Path(args.output)
        if not output_path.parent.exists():
            raise ValueError(
                f"Output directory does not exist: {output_path.parent}"
            )


def play(args: argparse.Namespace) -> RoundEngine:
    """Play the requested number of rounds.

    Parameters
    ----------
    args : argparse.Namespace
        Validated command-line arguments

    Returns
    -------
    RoundEngine
        Engine holding the settlements and ledger of the session
    """
    engine = RoundEngine(
        generator=PathGenerator(seed=args.seed),
        ledger=AccountLedger(args.initial_balance),
        volatility=args.volatility,
        a_parameter=args.a_parameter,
    )
    clock = StepClock(engine, interval_seconds=args.interval)

    for _ in range(args.rounds):
        engine.start_round(args.stop_loss)
        state = clock.run()
        if not state.is_settled:
            break

        settlement = engine.settlements[-1]
        print(
            f"Round {settlement.round_number}: sold at step {settlement.step} "
            f"for ${settlement.proceeds:.2f} ({settlement.reason.value}) "
            f"-> {settlement.outcome.value.upper()} | balance ${settlement.balance:.2f}"
        )

    return engine


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Returns
    -------
    int
        Exit code (0 for success, 1 for error)
    """
    try:
        args = parse_args(argv)
        validate_args(args)
        configure_logging(logging.INFO if args.verbose else logging.WARNING)

        print("=" * 70)
        print("GBM Stop-Loss Game")
        print("=" * 70)
        print(f"Volatility (σ): {args.volatility:.2f} | A: {args.a_parameter:.2f} "
              f"| Stop-Loss: {args.stop_loss:.1f}%")
        print(f"Starting balance: ${args.initial_balance:.2f}")
        print("=" * 70)

        engine = play(args)

        frame = engine.settlements_frame()
        if not frame.empty:
            wins = int((frame["outcome"] == "profit").sum())
            print(f"\nRounds settled: {len(frame)} | Profitable: {wins}")
            print(frame.to_string(float_format=lambda x: f"{x:.2f}"))
        print(f"\nFinal balance: ${engine.ledger.balance:.2f}")

        if args.output or not args.no_plot:
            plot_round(
                engine.snapshot(),
                ledger=engine.ledger,
                output_path=args.output,
                show_plot=not args.no_plot,
            )
            if args.output:
                print(f"Chart saved to: {args.output}")

        return 0

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
