"""Plot a round's revealed price path and the account balance history."""

import matplotlib
# Use non-interactive backend for headless environments
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np
from typing import Optional
from pathlib import Path
from gbmgame.simulation.ledger import AccountLedger
from gbmgame.simulation.round_engine import Outcome, RoundState


def plot_round(
    state: RoundState,
    ledger: Optional[AccountLedger] = None,
    output_path: Optional[str] = None,
    show_plot: bool = True,
) -> None:
    """Plot the revealed part of a round's path with its stop-loss level.

    Parameters
    ----------
    state : RoundState
        Snapshot of the round to draw
    ledger : AccountLedger, optional
        If given, a second panel shows the balance history
    output_path : str, optional
        Path to save the plot
    show_plot : bool, default=True
        Whether to display the plot

    Raises
    ------
    ValueError
        If the round has no path yet
    """
    if state.path is None:
        raise ValueError("Round has no path. Call start_round() first.")

    prices = state.revealed_prices
    steps = np.arange(len(prices))

    if ledger is not None:
        fig, (ax, ax_balance) = plt.subplots(
            2, 1, figsize=(12, 10), dpi=150, gridspec_kw={'height_ratios': [3, 1]}
        )
    else:
        fig, ax = plt.subplots(figsize=(12, 8), dpi=150)
        ax_balance = None

    ax.plot(steps, prices, color='steelblue', linewidth=1.5, label='Price')
    ax.axhline(
        y=state.stop_loss_price,
        color='red',
        linestyle='--',
        linewidth=1.5,
        label=f'Stop-Loss: ${state.stop_loss_price:.2f}',
    )
    ax.axhline(
        y=float(state.path[0]),
        color='gray',
        linestyle=':',
        linewidth=1,
        label=f'Entry: ${float(state.path[0]):.2f}',
    )

    if state.is_settled:
        color = 'green' if state.last_outcome is Outcome.PROFIT else 'red'
        ax.scatter([state.current_step], [state.current_price], color=color, zorder=3)
        ax.annotate(
            f"{state.last_outcome.value.title()}: ${state.current_price:.2f}",
            xy=(state.current_step, state.current_price),
            xytext=(10, 10),
            textcoords='offset points',
            bbox=dict(boxstyle='round,pad=0.3', facecolor=color, alpha=0.3),
            fontsize=9,
        )

    ax.set_xlim(0, state.num_steps)
    ax.set_title(
        f"Step {state.current_step}/{state.num_steps} | {state.status.value.title()}",
        fontsize=14,
        fontweight='bold',
    )
    ax.set_xlabel('Time Step', fontsize=12)
    ax.set_ylabel('Stock Price ($)', fontsize=12)
    ax.legend(loc='best', fontsize=9)
    ax.grid(True, alpha=0.3)

    if ax_balance is not None:
        history = ledger.balance_history
        ax_balance.plot(range(len(history)), history, color='darkblue', marker='o')
        ax_balance.set_xlabel('Balance Change', fontsize=12)
        ax_balance.set_ylabel('Balance ($)', fontsize=12)
        ax_balance.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        output_path_abs = Path(output_path).resolve()
        output_path_abs.parent.mkdir(parents=True, exist_ok=True)
        plt.savefig(str(output_path_abs), dpi=300, bbox_inches='tight')

    if show_plot:
        plt.show()
    plt.close(fig)
