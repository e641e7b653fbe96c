"""logic/performance.py — Frame-rate sampling and the reduced-effects latch.

    monitor = FPSMonitor(store)
    # once per rendered frame:
    monitor.frame(scheduler.now)

Every 3s window publishes the rounded average FPS to ``fps``.  Two
windows in a row under 45 FPS set ``reduced_effects``; it stays set
for the rest of the session.
"""

from __future__ import annotations

from core.store import Store
from core.tuning import get as _tun


class FPSMonitor:
    def __init__(self, store: Store, window: float | None = None,
                 low_fps: float | None = None, low_windows: int | None = None):
        self.store = store
        self.window = window if window is not None else float(_tun("performance", "sample_window", 3.0))
        self.low_fps = low_fps if low_fps is not None else float(_tun("performance", "low_fps", 45.0))
        self.low_windows = low_windows if low_windows is not None else int(_tun("performance", "low_windows", 2))
        self._window_start: float | None = None
        self._frames = 0
        self._low_streak = 0

    @property
    def reduced(self) -> bool:
        return bool(self.store.get().get("reduced_effects"))

    def frame(self, now: float) -> int | None:
        """Count one frame.  Returns the FPS when a window closes."""
        if self._window_start is None:
            self._window_start = now
            return None
        self._frames += 1
        span = now - self._window_start
        if span < self.window:
            return None

        fps = round(self._frames / span)
        self._frames = 0
        self._window_start = now
        self._low_streak = self._low_streak + 1 if fps < self.low_fps else 0

        update: dict = {"fps": fps}
        if self._low_streak >= self.low_windows and not self.reduced:
            update["reduced_effects"] = True
            print(f"[PERF] {fps} FPS for {self._low_streak} windows, reducing effects")
        self.store.set(update)
        return fps
