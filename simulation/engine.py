"""simulation/engine.py — The synthetic world clock.

Owns the ``kpis``, ``events``, ``route_statuses`` and ``is_running``
keys of the Store.  Other components change those keys only through
``set_route_status()`` / ``add_event()``.

    engine = SimulationEngine(store, scheduler, catalog, rng=random.Random(7))
    engine.start()            # KPI drift every 2.5s, events every 8–14s
    scheduler.advance(30.0)
    engine.stop()             # cancels drift, the pending event and every recovery

Every callback re-checks ``is_running`` when it fires: a timer that was
already due on the tick ``stop()`` ran must not mutate anything.

``hold(corridor_id)`` reserves a corridor for scripted changes: random
escalation skips it and its pending recovery is cancelled.  Holds
survive ``stop()``; ``release()`` drops them.
"""

from __future__ import annotations
import random

from components.catalog import Catalog, ROUTE_STATUSES
from components.state import TradeEvent
from core.store import Store
from core.tuning import get as _tun
from simulation.generators import drift_kpis, generate_event
from simulation.scheduler import Timer, TimerScheduler


class SimulationEngine:
    def __init__(self, store: Store, scheduler: TimerScheduler,
                 catalog: Catalog, rng: random.Random | None = None):
        self.store = store
        self.scheduler = scheduler
        self.catalog = catalog
        self.rng = rng or random.Random()

        self._drift_timer: Timer | None = None
        self._event_timer: Timer | None = None
        # corridor id → pending recovery back to "normal"
        self._recovery: dict[str, Timer] = {}
        # corridors a script is driving; random escalation leaves them alone
        self._held: set[str] = set()

        self.kpi_tick = float(_tun("simulation", "kpi_tick", 2.5))
        self.event_min = float(_tun("simulation", "event_min_delay", 8.0))
        self.event_max = float(_tun("simulation", "event_max_delay", 14.0))
        self.event_cap = int(_tun("simulation", "event_cap", 50))
        self.recovery_windows = {
            "critical": (float(_tun("simulation", "critical_recovery_min", 15.0)),
                         float(_tun("simulation", "critical_recovery_max", 25.0))),
            "warning": (float(_tun("simulation", "warning_recovery_min", 10.0)),
                        float(_tun("simulation", "warning_recovery_max", 18.0))),
        }
        self.kpis_per_tick = (int(_tun("simulation", "kpis_per_tick_min", 2)),
                              int(_tun("simulation", "kpis_per_tick_max", 3)))

    @property
    def is_running(self) -> bool:
        return bool(self.store.get().get("is_running"))

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> None:
        if self.is_running:
            return
        self.store.set({"is_running": True})
        self._drift_timer = self.scheduler.post(
            self.kpi_tick, self.drift_tick, owner=self,
            interval=self.kpi_tick, label="kpi-drift")
        self._schedule_next_event()
        print(f"[SIM] started at t={self.scheduler.now:.1f}")

    def stop(self) -> None:
        self.store.set({"is_running": False})
        self.scheduler.cancel(self._drift_timer)
        self.scheduler.cancel(self._event_timer)
        for timer in self._recovery.values():
            self.scheduler.cancel(timer)
        self._drift_timer = None
        self._event_timer = None
        self._recovery.clear()
        leftover = self.scheduler.cancel_owner(self)
        if leftover:
            print(f"[SIM] cancelled {leftover} stray timers on stop")
        print(f"[SIM] stopped at t={self.scheduler.now:.1f}")

    def pending_recoveries(self) -> dict[str, float]:
        """Corridor id → due time of its recovery timer."""
        return {cid: t.time for cid, t in self._recovery.items() if t.pending}

    # ── Scripted corridors ───────────────────────────────────────────

    def hold(self, corridor_id: str) -> None:
        """Reserve *corridor_id* for scripted status changes.

        Random escalation skips a held corridor and its pending recovery
        is cancelled, so only ``set_route_status()`` callers move it.
        """
        self._held.add(corridor_id)
        if self.scheduler.cancel(self._recovery.pop(corridor_id, None)):
            print(f"[SIM] {corridor_id} held, pending recovery cancelled")

    def release(self, corridor_id: str | None = None) -> None:
        """Return one held corridor (or all of them) to the random stream."""
        if corridor_id is None:
            self._held.clear()
        else:
            self._held.discard(corridor_id)

    def is_held(self, corridor_id: str) -> bool:
        return corridor_id in self._held

    # ── Direct mutators ──────────────────────────────────────────────

    def set_route_status(self, corridor_id: str, status: str) -> None:
        if status not in ROUTE_STATUSES:
            raise ValueError(f"unknown route status {status!r}")
        self.store.set(lambda s: {
            "route_statuses": {**s["route_statuses"], corridor_id: status},
        })

    def add_event(self, event: TradeEvent) -> None:
        """Prepend *event*; the ticker keeps the newest ``event_cap``."""
        cap = self.event_cap
        self.store.set(lambda s: {"events": (event, *s["events"])[:cap]})

    # ── Ticks ────────────────────────────────────────────────────────

    def drift_tick(self) -> None:
        if not self.is_running:
            return
        lo, hi = self.kpis_per_tick
        self.store.set(lambda s: {
            "kpis": drift_kpis(s["kpis"], self.catalog.kpis, self.rng,
                               pick_min=lo, pick_max=hi),
        })

    def event_tick(self) -> None:
        self._event_timer = None
        if not self.is_running:
            return
        event = generate_event(self.catalog, self.rng)
        if event is not None:
            self.add_event(event)
            # listeners run inside add_event and may have stopped us
            if not self.is_running:
                return
            self._escalate(event)
        if self.is_running:
            self._schedule_next_event()

    # ── Internal ─────────────────────────────────────────────────────

    def _schedule_next_event(self) -> None:
        delay = self.rng.uniform(self.event_min, self.event_max)
        self._event_timer = self.scheduler.post(
            delay, self.event_tick, owner=self, label="event-gen")

    def _escalate(self, event: TradeEvent) -> None:
        """Critical → disrupted, warning → congested, then recover."""
        if event.severity == "critical":
            status = "disrupted"
        elif event.severity == "warning":
            status = "congested"
        else:
            return
        cid = event.corridor_id
        if cid is None or self.catalog.corridor(cid) is None:
            return
        if cid in self._held:
            return

        self.set_route_status(cid, status)
        if not self.is_running:
            return
        lo, hi = self.recovery_windows[event.severity]
        # a newer escalation owns the corridor's recovery
        self.scheduler.cancel(self._recovery.pop(cid, None))
        self._recovery[cid] = self.scheduler.post(
            self.rng.uniform(lo, hi), lambda: self._recover(cid),
            owner=self, label=f"recover-{cid}")
        print(f"[SIM] {cid} → {status} ({event.label})")

    def _recover(self, corridor_id: str) -> None:
        self._recovery.pop(corridor_id, None)
        if not self.is_running or corridor_id in self._held:
            return
        self.set_route_status(corridor_id, "normal")
        print(f"[SIM] {corridor_id} recovered")
