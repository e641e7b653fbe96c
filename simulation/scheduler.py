"""simulation/scheduler.py — The world clock.

Every timer in the dashboard (KPI drift, event generation, per-route
recovery, prediction/weather spawn intervals, autopilot cues, the idle
timer) is an entry in one priority queue ordered by virtual time.  The
frame loop advances the clock by ``dt``; tests advance it by hand.
Nothing ever sleeps.

    clock = TimerScheduler()
    t = clock.post(2.5, drift, owner=engine, interval=2.5, label="kpi-drift")
    ...
    clock.advance(dt)            # fires everything due
    clock.cancel_owner(engine)   # what engine.stop() does: nothing it armed survives
"""

from __future__ import annotations
import heapq
import traceback
from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(order=True)
class Timer:
    """A single pending callback in the scheduler queue.

    Ordered by ``time`` so the heap gives us earliest-first.
    """
    time: float
    # heapq tiebreaker: insertion order
    _seq: int = field(compare=True, repr=False)
    callback: Callable[[], Any] = field(compare=False, repr=False, default=None)
    owner: Any = field(compare=False, repr=False, default=None)
    interval: float | None = field(compare=False, default=None)
    label: str = field(compare=False, default="")
    cancelled: bool = field(compare=False, default=False)
    fired: int = field(compare=False, default=0)

    @property
    def pending(self) -> bool:
        return not self.cancelled and (self.interval is not None or self.fired == 0)


class TimerScheduler:
    """Priority-queue timer wheel driven by explicit ``advance()`` calls."""

    def __init__(self, start: float = 0.0) -> None:
        self._queue: list[Timer] = []
        self._seq: int = 0
        self._now: float = start
        # Per-owner tracking for cancellation
        self._owned: dict[int, list[Timer]] = {}
        # Stats
        self.fired_total: int = 0

    @property
    def now(self) -> float:
        return self._now

    # ── Posting ──────────────────────────────────────────────────────

    def post(self, delay: float, callback: Callable[[], Any],
             owner: Any = None, *, interval: float | None = None,
             label: str = "") -> Timer:
        """Run *callback* ``delay`` seconds from now.

        With ``interval`` the timer re-arms itself every ``interval``
        seconds after the first firing until cancelled.
        """
        if delay < 0:
            raise ValueError(f"negative delay {delay!r} for {label or callback!r}")
        if interval is not None and interval <= 0:
            raise ValueError(f"interval must be positive, got {interval!r}")
        self._seq += 1
        timer = Timer(
            time=self._now + delay,
            _seq=self._seq,
            callback=callback,
            owner=owner,
            interval=interval,
            label=label,
        )
        heapq.heappush(self._queue, timer)
        self._owned.setdefault(id(owner), []).append(timer)
        return timer

    # ── Cancellation ─────────────────────────────────────────────────

    def cancel(self, timer: Timer | None) -> bool:
        """Cancel one timer.  Returns True if it was still pending."""
        if timer is None or timer.cancelled:
            return False
        was_pending = timer.pending
        timer.cancelled = True
        self._forget(timer)
        return was_pending

    def cancel_owner(self, owner: Any) -> int:
        """Cancel every pending timer *owner* armed.  Returns count."""
        timers = self._owned.pop(id(owner), [])
        count = 0
        for timer in timers:
            if timer.pending:
                count += 1
            timer.cancelled = True
        return count

    # ── Advancing time ───────────────────────────────────────────────

    def advance(self, dt: float) -> int:
        """Move the clock forward by *dt* and fire everything due."""
        if dt < 0:
            raise ValueError(f"cannot advance by negative dt {dt!r}")
        return self.run_until(self._now + dt)

    def run_until(self, target: float) -> int:
        """Fire every timer due at or before *target*, in time order.

        ``now`` steps to each timer's own due time while its callback
        runs, so anything the callback posts is scheduled relative to
        the moment it logically fired.
        """
        count = 0
        while self._queue:
            head = self._queue[0]
            if head.cancelled:
                heapq.heappop(self._queue)
                continue
            if head.time > target:
                break

            timer = heapq.heappop(self._queue)
            self._now = max(self._now, timer.time)
            timer.fired += 1
            if timer.interval is not None:
                timer.time += timer.interval
                heapq.heappush(self._queue, timer)
            else:
                self._forget(timer)

            try:
                timer.callback()
            except Exception as exc:
                print(f"[SCHED] timer {timer.label or timer.callback!r} raised: {exc}")
                traceback.print_exc()
            count += 1

        self._now = max(self._now, target)
        self.fired_total += count
        return count

    # ── Queries ──────────────────────────────────────────────────────

    def pending_count(self, owner: Any = None) -> int:
        """Number of live timers (optionally only those *owner* armed)."""
        if owner is None:
            return sum(1 for t in self._queue if not t.cancelled)
        return sum(1 for t in self._owned.get(id(owner), []) if t.pending)

    def peek_time(self) -> float:
        """Return the due time of the next timer, or inf if empty."""
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
        if self._queue:
            return self._queue[0].time
        return float("inf")

    def debug_dump(self, limit: int = 20) -> list[str]:
        """Return a human-readable list of the next N timers."""
        timers = sorted(
            (t for t in self._queue if not t.cancelled),
            key=lambda t: (t.time, t._seq),
        )[:limit]
        return [
            f"{t.time:7.2f}  {t.label or '?'}"
            + (f"  every {t.interval:g}s" if t.interval else "")
            for t in timers
        ]

    # ── Internal ─────────────────────────────────────────────────────

    def _forget(self, timer: Timer) -> None:
        owned = self._owned.get(id(timer.owner))
        if owned:
            try:
                owned.remove(timer)
            except ValueError:
                pass
            if not owned:
                del self._owned[id(timer.owner)]
