"""Path generation, round state machine and account ledger."""

from gbmgame.simulation.path_generator import PathGenerator, SimulationParameters, generate_path
from gbmgame.simulation.ledger import AccountLedger
from gbmgame.simulation.round_engine import (
    ExitReason,
    Outcome,
    RoundEngine,
    RoundState,
    RoundStateError,
    RoundStatus,
    Settlement,
)

__all__ = [
    "PathGenerator",
    "SimulationParameters",
    "generate_path",
    "AccountLedger",
    "ExitReason",
    "Outcome",
    "RoundEngine",
    "RoundState",
    "RoundStateError",
    "RoundStatus",
    "Settlement",
]
