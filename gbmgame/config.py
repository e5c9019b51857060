"""Game configuration loaded from environment variables or a .env file."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from dotenv import load_dotenv


ENV_PREFIX = "GBM_GAME_"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure a simple root logger that writes to stderr.

    Safe to call more than once.
    """
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
    else:
        root.setLevel(level)


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(ENV_PREFIX + name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got '{raw}'")


def _read_seed() -> Optional[int]:
    raw = os.getenv(ENV_PREFIX + "SEED", "")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}SEED must be an integer, got '{raw}'")


@dataclass
class GameConfig:
    """Default controls for a game session.

    Parameters
    ----------
    volatility : float, default=0.2
        Annualized volatility of generated paths, in [0, 1]
    a_parameter : float, default=0.3
        Drift magnitude; each round drifts by ln(1 + a) or ln(1 - a)
    stop_loss_percent : float, default=10.0
        Stop-loss as percent below the entry price, in [0, 100]
    initial_balance : float, default=100.0
        Starting account balance
    tick_interval : float, default=0.005
        Seconds between clock ticks
    seed : int, optional
        Random seed for reproducible sessions
    """

    volatility: float = 0.2
    a_parameter: float = 0.3
    stop_loss_percent: float = 10.0
    initial_balance: float = 100.0
    tick_interval: float = 0.005
    seed: Optional[int] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check every control is inside its allowed range.

        Raises
        ------
        ValueError
            If any value is out of range
        """
        if not 0.0 <= self.volatility <= 1.0:
            raise ValueError("volatility must be between 0 and 1")
        if not 0.0 <= self.a_parameter <= 1.0:
            raise ValueError("a_parameter must be between 0 and 1")
        if not 0.0 <= self.stop_loss_percent <= 100.0:
            raise ValueError("stop_loss_percent must be between 0 and 100")
        if self.tick_interval < 0:
            raise ValueError("tick_interval must be non-negative")

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "GameConfig":
        """Build a config from ``GBM_GAME_*`` environment variables.

        Parameters
        ----------
        env_file : str or Path, optional
            .env file to load first. If None, a .env in the current
            directory is used when present.

        Returns
        -------
        GameConfig
            Config with environment overrides applied
        """
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls(
            volatility=_read_float("VOLATILITY", 0.2),
            a_parameter=_read_float("A_PARAMETER", 0.3),
            stop_loss_percent=_read_float("STOP_LOSS", 10.0),
            initial_balance=_read_float("INITIAL_BALANCE", 100.0),
            tick_interval=_read_float("TICK_INTERVAL", 0.005),
            seed=_read_seed(),
        )
