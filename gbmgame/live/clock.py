"""Periodic clock that drives a round forward one step per tick."""

import logging
import time
from typing import Callable, Optional

from gbmgame.simulation.round_engine import RoundEngine, RoundState


logger = logging.getLogger(__name__)


class StepClock:
    """Fixed-interval driver for :meth:`RoundEngine.advance_step`.

    Ticks only while the engine reports ``can_advance``; a pause or a
    settlement ends :meth:`run`. Call :meth:`run` again after
    ``resume()`` to continue a paused round.

    Parameters
    ----------
    engine : RoundEngine
        Engine to drive
    interval_seconds : float, default=0.005
        Delay between ticks
    callback : callable, optional
        Called with the snapshot after every tick
    sleep : callable, default=time.sleep
        Sleep function, replaceable for testing
    """

    def __init__(
        self,
        engine: RoundEngine,
        interval_seconds: float = 0.005,
        callback: Optional[Callable[[RoundState], None]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.engine = engine
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.sleep = sleep

        self.running = False
        self.tick_count = 0

    def tick(self) -> RoundState:
        """Advance the engine by one step if it may advance.

        Returns
        -------
        RoundState
            Snapshot after the tick
        """
        if not self.engine.can_advance:
            return self.engine.snapshot()

        self.tick_count += 1
        state = self.engine.advance_step()

        if self.callback:
            self.callback(state)

        return state

    def run(self, max_ticks: Optional[int] = None) -> RoundState:
        """Tick until the round settles, is paused or the clock is stopped.

        Parameters
        ----------
        max_ticks : int, optional
            Upper bound on ticks for this call

        Returns
        -------
        RoundState
            Snapshot when the loop ended

        Raises
        ------
        KeyboardInterrupt
            Re-raised after pausing the round
        """
        self.running = True
        ticks = 0
        logger.debug("Clock started (interval: %ss)", self.interval_seconds)

        try:
            while self.running and self.engine.can_advance:
                if max_ticks is not None and ticks >= max_ticks:
                    break
                self.tick()
                ticks += 1
                if self.engine.can_advance:
                    self.sleep(self.interval_seconds)
        except KeyboardInterrupt:
            logger.info("Clock interrupted after %d ticks", ticks)
            self.engine.pause()
            raise
        finally:
            self.running = False

        return self.engine.snapshot()

    def stop(self) -> None:
        """Stop the loop after the current tick."""
        self.running = False

    def get_status(self) -> dict:
        """Get current status of the clock.

        Returns
        -------
        dict
            Status information
        """
        state = self.engine.snapshot()
        return {
            "running": self.running,
            "tick_count": self.tick_count,
            "interval_seconds": self.interval_seconds,
            "round_number": self.engine.round_number,
            "current_step": state.current_step,
            "status": state.status.value,
            "paused": state.paused,
        }
