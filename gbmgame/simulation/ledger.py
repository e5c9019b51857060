"""Account balance bookkeeping across rounds."""

import logging
from typing import List, Tuple
import pandas as pd


logger = logging.getLogger(__name__)


class AccountLedger:
    """Session account balance with a change history.

    The history starts with the initial balance and only grows when a
    debit or credit actually changes the balance.

    Parameters
    ----------
    initial_balance : float, default=100.0
        Starting balance of the session
    """

    def __init__(self, initial_balance: float = 100.0):
        self._balance = float(initial_balance)
        self._history: List[float] = [self._balance]

    @property
    def balance(self) -> float:
        return self._balance

    @property
    def balance_history(self) -> Tuple[float, ...]:
        return tuple(self._history)

    def debit(self, amount: float) -> float:
        """Subtract a purchase cost from the balance.

        Parameters
        ----------
        amount : float
            Non-negative amount to subtract

        Returns
        -------
        float
            New balance
        """
        if amount < 0:
            raise ValueError("Debit amount must be non-negative")
        return self._apply(-float(amount))

    def credit(self, amount: float) -> float:
        """Add sale proceeds to the balance.

        Parameters
        ----------
        amount : float
            Non-negative amount to add

        Returns
        -------
        float
            New balance
        """
        if amount < 0:
            raise ValueError("Credit amount must be non-negative")
        return self._apply(float(amount))

    def _apply(self, delta: float) -> float:
        self._balance += delta
        if self._balance != self._history[-1]:
            self._history.append(self._balance)
        logger.debug("Balance %.2f (delta %+.2f)", self._balance, delta)
        return self._balance

    def to_series(self) -> pd.Series:
        """Balance history as a pandas Series indexed by entry number."""
        return pd.Series(self._history, name="balance", dtype=float)
