"""logic/idle.py — Detects when the viewer has stopped touching anything."""

from __future__ import annotations

from core.tuning import get as _tun
from simulation.scheduler import Timer, TimerScheduler


class IdleTimer:
    """``is_idle`` turns True ``timeout`` seconds after the last ``poke()``.

    The renderer uses it to resume slow globe auto-rotation.
    """

    def __init__(self, scheduler: TimerScheduler, timeout: float | None = None):
        self.scheduler = scheduler
        self.timeout = timeout if timeout is not None else float(_tun("idle", "timeout", 6.0))
        self.is_idle = False
        self._timer: Timer | None = None

    def start(self) -> None:
        self.poke()

    def poke(self) -> None:
        """Register user activity and re-arm the single idle timer."""
        self.is_idle = False
        self.scheduler.cancel(self._timer)
        self._timer = self.scheduler.post(self.timeout, self._fire, owner=self,
                                          label="idle")

    def stop(self) -> None:
        self.scheduler.cancel_owner(self)
        self._timer = None

    def _fire(self) -> None:
        self._timer = None
        self.is_idle = True
