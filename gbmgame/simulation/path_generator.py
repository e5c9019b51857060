"""Single-path price generator using Geometric Brownian Motion."""

from dataclasses import dataclass
from typing import Optional
import numpy as np


NUM_STEPS = 252
STEP_SIZE = 1.0 / 252
INITIAL_PRICE = 100.0


@dataclass(frozen=True)
class SimulationParameters:
    """Parameters for one simulated price path.

    Parameters
    ----------
    num_steps : int
        Number of time steps in the path
    step_size : float
        Time increment per step (in years)
    drift : float
        Drift coefficient (annualized)
    volatility : float
        Volatility coefficient (annualized)
    """

    num_steps: int
    step_size: float
    drift: float
    volatility: float

    def __post_init__(self):
        if self.num_steps <= 0:
            raise ValueError("num_steps must be positive")
        if self.step_size <= 0:
            raise ValueError("step_size must be positive")
        if self.volatility < 0:
            raise ValueError("volatility must be non-negative")


class PathGenerator:
    """Generates GBM price paths for the trading game.

    Normal variates come from a Box-Muller transform over an injected
    uniform source, so a path is fully determined by the source state.

    Parameters
    ----------
    initial_price : float, default=100.0
        Price at step 0 of every path
    seed : int, optional
        Random seed, used only when ``rng`` is not given
    rng : object, optional
        Uniform source exposing ``random()`` returning a float in [0, 1).
        Defaults to ``numpy.random.default_rng(seed)``.
    """

    def __init__(
        self,
        initial_price: float = INITIAL_PRICE,
        seed: Optional[int] = None,
        rng=None,
    ):
        self.initial_price = initial_price
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def _uniform(self) -> float:
        return float(self.rng.random())

    def random_normal(self) -> float:
        """Draw a standard normal variate with the Box-Muller transform.

        Returns
        -------
        float
            Sample from N(0, 1)
        """
        u1 = self._uniform()
        while u1 == 0.0:
            u1 = self._uniform()
        u2 = self._uniform()
        return float(np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2))

    def generate_path(self, params: SimulationParameters) -> np.ndarray:
        """Generate a single GBM path.

        S(t+dt) = S(t) * exp((mu - 0.5*sigma^2)*dt + sigma*sqrt(dt)*z)

        Parameters
        ----------
        params : SimulationParameters
            Step count, step size, drift and volatility

        Returns
        -------
        np.ndarray
            Read-only array of ``num_steps + 1`` prices
        """
        path = np.zeros(params.num_steps + 1)
        path[0] = self.initial_price

        drift_term = (params.drift - 0.5 * params.volatility ** 2) * params.step_size
        diffusion_scale = params.volatility * np.sqrt(params.step_size)

        for i in range(params.num_steps):
            z = self.random_normal()
            path[i + 1] = path[i] * np.exp(drift_term + diffusion_scale * z)

        path.flags.writeable = False
        return path

    def random_drift(self, a_parameter: float) -> float:
        """Pick the round's drift with a fair coin flip.

        Parameters
        ----------
        a_parameter : float
            Growth magnitude in [0, 1]

        Returns
        -------
        float
            ``ln(1 + a)`` or ``ln(1 - a)``; ``-inf`` when the price is
            set to collapse (``a == 1`` on the down branch)
        """
        if not 0.0 <= a_parameter <= 1.0:
            raise ValueError("a_parameter must be between 0 and 1")
        if self._uniform() > 0.5:
            return float(np.log1p(a_parameter))
        if a_parameter == 1.0:
            return float("-inf")
        return float(np.log1p(-a_parameter))

    def draw_parameters(
        self,
        volatility: float,
        a_parameter: float,
        num_steps: int = NUM_STEPS,
        step_size: float = STEP_SIZE,
    ) -> SimulationParameters:
        """Build the parameters for a new round from the user controls.

        Parameters
        ----------
        volatility : float
            Volatility control in [0, 1]
        a_parameter : float
            Drift magnitude control in [0, 1]
        num_steps : int, default=252
            Number of steps in the path
        step_size : float, default=1/252
            Time increment per step

        Returns
        -------
        SimulationParameters
            Parameters with a coin-flipped drift
        """
        if not 0.0 <= volatility <= 1.0:
            raise ValueError("volatility must be between 0 and 1")
        drift = self.random_drift(a_parameter)
        return SimulationParameters(
            num_steps=num_steps,
            step_size=step_size,
            drift=drift,
            volatility=volatility,
        )


def generate_path(
    num_steps: int,
    step_size: float,
    drift: float,
    volatility: float,
    rng=None,
    initial_price: float = INITIAL_PRICE,
) -> np.ndarray:
    """Generate one GBM price path.

    Convenience wrapper around :meth:`PathGenerator.generate_path`.

    Parameters
    ----------
    num_steps : int
        Number of time steps
    step_size : float
        Time increment per step
    drift : float
        Drift coefficient
    volatility : float
        Volatility coefficient
    rng : object, optional
        Uniform source with a ``random()`` method
    initial_price : float, default=100.0
        Price at step 0

    Returns
    -------
    np.ndarray
        Read-only array of ``num_steps + 1`` prices
    """
    params = SimulationParameters(
        num_steps=num_steps,
        step_size=step_size,
        drift=drift,
        volatility=volatility,
    )
    return PathGenerator(initial_price=initial_price, rng=rng).generate_path(params)
