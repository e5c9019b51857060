"""GBM Stop-Loss Game.

Watch a simulated Geometric Brownian Motion price path unfold step by step
and let a stop-loss decide when the position is sold, tracking an account
balance across rounds.
"""

from gbmgame.config import GameConfig
from gbmgame.simulation import (
    AccountLedger,
    PathGenerator,
    RoundEngine,
    RoundState,
    RoundStateError,
    SimulationParameters,
    generate_path,
)
from gbmgame.live import StepClock

__version__ = "1.0.0"
__all__ = [
    "GameConfig",
    "AccountLedger",
    "PathGenerator",
    "RoundEngine",
    "RoundState",
    "RoundStateError",
    "SimulationParameters",
    "generate_path",
    "StepClock",
]
