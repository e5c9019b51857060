"""Clock for driving rounds in real time."""

from gbmgame.live.clock import StepClock

__all__ = ["StepClock"]
