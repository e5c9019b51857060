"""Round state machine: arm a path, step through it, settle once."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import numpy as np
import pandas as pd

from gbmgame.simulation.ledger import AccountLedger
from gbmgame.simulation.path_generator import PathGenerator, SimulationParameters


logger = logging.getLogger(__name__)


class RoundStateError(ValueError):
    """Raised when the round protocol is misused."""


class RoundStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    SETTLED = "settled"


class Outcome(Enum):
    PROFIT = "profit"
    LOSS = "loss"


class ExitReason(Enum):
    STOP_LOSS = "stop_loss"
    EXPIRY = "expiry"


@dataclass(frozen=True, eq=False)
class RoundState:
    """Read-only view of a round after the latest transition.

    Attributes
    ----------
    path : np.ndarray, optional
        Price path of the round (None before the first round)
    current_step : int
        Index of the most recently revealed price
    stop_loss_percent : float
        Stop-loss threshold as a percentage below the entry price
    status : RoundStatus
        Lifecycle state of the round
    last_outcome : Outcome, optional
        Outcome of the settlement, None while unsettled
    paused : bool
        Whether the clock is currently gated
    """

    path: Optional[np.ndarray]
    current_step: int
    stop_loss_percent: float
    status: RoundStatus
    last_outcome: Optional[Outcome]
    paused: bool = False

    def _key(self) -> tuple:
        # Paths are never mutated or reused, so identity names the round.
        return (
            id(self.path),
            self.current_step,
            self.stop_loss_percent,
            self.status,
            self.last_outcome,
            self.paused,
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, RoundState):
            return NotImplemented
        return self.path is other.path and self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @property
    def is_settled(self) -> bool:
        return self.status is RoundStatus.SETTLED

    @property
    def num_steps(self) -> int:
        return 0 if self.path is None else len(self.path) - 1

    @property
    def stop_loss_price(self) -> Optional[float]:
        if self.path is None:
            return None
        return float(self.path[0] * (1 - self.stop_loss_percent / 100))

    @property
    def current_price(self) -> Optional[float]:
        if self.path is None:
            return None
        return float(self.path[self.current_step])

    @property
    def revealed_prices(self) -> np.ndarray:
        if self.path is None:
            return np.array([])
        return self.path[: self.current_step + 1]


@dataclass(frozen=True)
class Settlement:
    """Record of one settled round."""

    round_number: int
    step: int
    entry_price: float
    proceeds: float
    outcome: Outcome
    reason: ExitReason
    balance: float


class RoundEngine:
    """Runs stop-loss trading rounds over generated price paths.

    Each round buys one unit at ``path[0]``, reveals one price per
    :meth:`advance_step` and sells at the first price at or below the
    stop-loss level, or at the second-to-last step if the stop is never
    hit. The engine never owns a timer; an external clock calls
    :meth:`advance_step` while :attr:`can_advance` is true.

    Parameters
    ----------
    generator : PathGenerator, optional
        Source of new paths (default: unseeded ``PathGenerator``)
    ledger : AccountLedger, optional
        Session account (default: balance of 100)
    volatility : float, default=0.2
        Volatility control used when ``start_round`` gets no parameters
    a_parameter : float, default=0.3
        Drift magnitude control used when ``start_round`` gets no parameters
    """

    def __init__(
        self,
        generator: Optional[PathGenerator] = None,
        ledger: Optional[AccountLedger] = None,
        volatility: float = 0.2,
        a_parameter: float = 0.3,
    ):
        self.generator = generator if generator is not None else PathGenerator()
        self.ledger = ledger if ledger is not None else AccountLedger()
        self.volatility = volatility
        self.a_parameter = a_parameter

        self.status = RoundStatus.IDLE
        self.path: Optional[np.ndarray] = None
        self.current_step = 0
        self.stop_loss_percent = 0.0
        self.last_outcome: Optional[Outcome] = None
        self.paused = False
        self.round_number = 0
        self.settlements: List[Settlement] = []

    @property
    def is_settled(self) -> bool:
        return self.status is RoundStatus.SETTLED

    @property
    def num_steps(self) -> int:
        return 0 if self.path is None else len(self.path) - 1

    @property
    def can_advance(self) -> bool:
        """Whether the clock may call :meth:`advance_step` right now."""
        return self.status is RoundStatus.RUNNING and not self.paused

    def snapshot(self) -> RoundState:
        return RoundState(
            path=self.path,
            current_step=self.current_step,
            stop_loss_percent=self.stop_loss_percent,
            status=self.status,
            last_outcome=self.last_outcome,
            paused=self.paused,
        )

    def start_round(
        self,
        stop_loss_percent: float,
        params: Optional[SimulationParameters] = None,
    ) -> RoundState:
        """Arm a new round on a freshly generated path.

        Parameters
        ----------
        stop_loss_percent : float
            Stop-loss as percent below the entry price, in [0, 100]
        params : SimulationParameters, optional
            Path parameters. If None, drawn from the engine's
            ``volatility`` and ``a_parameter`` controls.

        Returns
        -------
        RoundState
            Snapshot of the armed round

        Raises
        ------
        RoundStateError
            If a round is already running
        ValueError
            If ``stop_loss_percent`` is out of range
        """
        if self.status is RoundStatus.RUNNING:
            raise RoundStateError(
                "A round is already running. Call cancel_round() first."
            )
        if not 0.0 <= stop_loss_percent <= 100.0:
            raise ValueError("stop_loss_percent must be between 0 and 100")

        if params is None:
            params = self.generator.draw_parameters(self.volatility, self.a_parameter)

        path = self.generator.generate_path(params)

        self.round_number += 1
        self.path = path
        self.stop_loss_percent = float(stop_loss_percent)
        self.current_step = 0
        self.last_outcome = None
        self.paused = False
        self.ledger.debit(float(path[0]))
        self.status = RoundStatus.RUNNING

        logger.info(
            "Round %d started: entry %.2f, stop-loss %.1f%%, drift %.4f, volatility %.4f",
            self.round_number,
            path[0],
            self.stop_loss_percent,
            params.drift,
            params.volatility,
        )
        return self.snapshot()

    def advance_step(self) -> RoundState:
        """Reveal the next price and settle if the round is over.

        Returns
        -------
        RoundState
            Snapshot after the step (unchanged if already settled)

        Raises
        ------
        RoundStateError
            If no round has been started
        """
        if self.status is RoundStatus.IDLE:
            raise RoundStateError(
                "No round in progress. Call start_round() first."
            )
        if self.status is RoundStatus.SETTLED:
            return self.snapshot()

        if self.current_step < self.num_steps:
            self.current_step += 1
        logger.debug(
            "Round %d step %d: price %.4f",
            self.round_number,
            self.current_step,
            self.path[self.current_step],
        )
        self._evaluate()
        return self.snapshot()

    def _evaluate(self) -> None:
        price = float(self.path[self.current_step])
        stop_loss = float(self.path[0]) * (1 - self.stop_loss_percent / 100)

        # Stop-loss is checked first so a breach on the last step counts as one.
        if self.current_step < self.num_steps and price <= stop_loss:
            self._settle(ExitReason.STOP_LOSS, price)
        elif self.current_step >= self.num_steps - 1:
            self._settle(ExitReason.EXPIRY, price)

    def _settle(self, reason: ExitReason, proceeds: float) -> None:
        if self.status is not RoundStatus.RUNNING:
            raise RoundStateError(f"Round {self.round_number} is already settled")

        entry_price = float(self.path[0])
        outcome = Outcome.PROFIT if proceeds > entry_price else Outcome.LOSS

        balance = self.ledger.credit(proceeds)
        self.last_outcome = outcome
        self.status = RoundStatus.SETTLED
        self.settlements.append(
            Settlement(
                round_number=self.round_number,
                step=self.current_step,
                entry_price=entry_price,
                proceeds=proceeds,
                outcome=outcome,
                reason=reason,
                balance=balance,
            )
        )
        logger.info(
            "Round %d settled at step %d (%s): proceeds %.2f, %s, balance %.2f",
            self.round_number,
            self.current_step,
            reason.value,
            proceeds,
            outcome.value,
            balance,
        )

    def pause(self) -> None:
        """Stop the clock from driving the round."""
        self.paused = True

    def resume(self) -> None:
        """Let the clock drive the round again."""
        self.paused = False

    def cancel_round(self) -> RoundState:
        """Abandon a running round without settlement.

        The purchase debit is not refunded.

        Raises
        ------
        RoundStateError
            If no round is running
        """
        if self.status is not RoundStatus.RUNNING:
            raise RoundStateError("No running round to cancel")
        logger.info(
            "Round %d cancelled at step %d", self.round_number, self.current_step
        )
        self.status = RoundStatus.IDLE
        self.paused = False
        return self.snapshot()

    def settlements_frame(self) -> pd.DataFrame:
        """Settled rounds as a DataFrame indexed by round number."""
        columns = ["step", "entry_price", "proceeds", "outcome", "reason", "balance"]
        rows = [
            {
                "round_number": s.round_number,
                "step": s.step,
                "entry_price": s.entry_price,
                "proceeds": s.proceeds,
                "outcome": s.outcome.value,
                "reason": s.reason.value,
                "balance": s.balance,
            }
            for s in self.settlements
        ]
        if not rows:
            return pd.DataFrame(columns=columns, index=pd.Index([], name="round_number"))
        return pd.DataFrame(rows).set_index("round_number")[columns]
