"""logic/effects/alerts.py — Predictive congestion alerts.

An interval timer proposes a new alert every 25s while the simulation
runs.  Each alert counts down 30–45s, then resolves exactly once:
"occurred" (p=0.7) feeds a confirmation event back into the engine
if the simulation is still running, "averted" just shows a badge.  The
badge stays 5s past the end of the countdown, then the alert leaves
the pool.

Rules:
  - at most 3 unresolved alerts at any instant
  - never two unresolved alerts on the same port
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from components.effects import PredictiveAlert, Visual
from components.state import TradeEvent
from core.geo import GLOBE_RADIUS, lat_lng_to_vector3
from core.tuning import get as _tun
from logic.effects.pool import TransientPool
from logic.formatters import format_countdown, format_timestamp
from simulation.generators import next_event_id

if TYPE_CHECKING:
    from simulation.engine import SimulationEngine


class AlertPool(TransientPool[PredictiveAlert]):
    name = "alert"

    def __init__(self, store, scheduler, catalog, rng=None,
                 engine: "SimulationEngine | None" = None):
        super().__init__(store, scheduler, catalog, rng)
        self.engine = engine
        self.interval = float(_tun("effects.alerts", "interval", 25.0))
        self.countdown_min = float(_tun("effects.alerts", "countdown_min", 30.0))
        self.countdown_jitter = float(_tun("effects.alerts", "countdown_jitter", 15.0))
        self.max_unresolved = int(_tun("effects.alerts", "max_unresolved", 3))
        self.grace = float(_tun("effects.alerts", "resolved_grace", 5.0))
        self.occur_p = float(_tun("effects.alerts", "occur_probability", 0.7))
        self.prob_min = int(_tun("effects.alerts", "probability_min", 65))
        self.prob_span = int(_tun("effects.alerts", "probability_span", 30))
        self.resolutions = 0
        self._timer = None
        # listeners notified with each alert as it resolves
        self.on_resolve: list = []

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> None:
        if self._timer is not None and self._timer.pending:
            return
        self._timer = self.scheduler.post(
            self.interval, self.tick, owner=self,
            interval=self.interval, label="alert-spawn")

    def detach(self) -> None:
        super().detach()
        self._timer = None

    # ── Queries ──────────────────────────────────────────────────────

    def holds_key(self, alert: PredictiveAlert) -> bool:
        return not alert.resolved

    def unresolved(self) -> list[PredictiveAlert]:
        return [a for a in self._entities if not a.resolved]

    def message_for(self, alert: PredictiveAlert, now: float | None = None) -> str:
        if now is None:
            now = self.scheduler.now
        return alert.message.replace("{time}", format_countdown(alert.remaining(now)))

    # ── Spawning ─────────────────────────────────────────────────────

    def tick(self) -> None:
        if not self.store.get().get("is_running"):
            return
        alert = self.propose()
        if alert is not None:
            self.spawn([alert])

    def propose(self) -> PredictiveAlert | None:
        """Build one alert, or None if the cap or the catalog forbids it."""
        if len(self.unresolved()) >= self.max_unresolved:
            return None
        if not self.catalog.predictions:
            return None
        template = self.rng.choice(self.catalog.predictions)
        busy = {a.location_id for a in self.unresolved()}
        candidates = [lid for lid in template.locations
                      if lid not in busy and self.catalog.location(lid)]
        if not candidates:
            return None
        loc = self.catalog.location(self.rng.choice(candidates))
        countdown = self.countdown_min + self.rng.random() * self.countdown_jitter
        return PredictiveAlert(
            id=self.next_id(loc.id),
            key=loc.id,
            start_time=self.scheduler.now,
            duration=countdown,
            location_id=loc.id,
            position=lat_lng_to_vector3(loc.lat, loc.lng, GLOBE_RADIUS + 0.15),
            message=template.message,
            probability=self.prob_min + self.rng.randint(0, self.prob_span - 1),
        )

    # ── Resolution ───────────────────────────────────────────────────

    def resolve(self, alert: PredictiveAlert, now: float) -> bool:
        """Settle *alert* once.  Later calls return False and do nothing."""
        if alert.resolved:
            return False
        alert.resolved = True
        # the badge clock starts at the countdown end, not at the sampling frame
        alert.resolved_at = min(now, alert.countdown_end)
        alert.resolved_as = "occurred" if self.rng.random() < self.occur_p else "averted"
        self.resolutions += 1
        print(f"[FX] alert {alert.id} {alert.resolved_as}")
        running = bool(self.store.get().get("is_running"))
        if alert.resolved_as == "occurred" and self.engine is not None and running:
            loc = self.catalog.location(alert.location_id)
            name = loc.name if loc else alert.location_id
            self.engine.add_event(TradeEvent(
                id=next_event_id("pred"),
                timestamp=format_timestamp(),
                label=f"AI prediction confirmed — congestion at {name}",
                severity="warning",
                location_id=alert.location_id,
            ))
        for callback in self.on_resolve:
            callback(alert)
        return True

    # ── Animation ────────────────────────────────────────────────────

    def is_expired(self, alert: PredictiveAlert, now: float) -> bool:
        return alert.resolved and now - alert.resolved_at > self.grace

    def animate(self, now=None):
        if now is None:
            now = self.scheduler.now
        for alert in list(self._entities):
            if not alert.resolved and now >= alert.countdown_end:
                self.resolve(alert, now)
        return super().animate(now)

    def visual(self, alert: PredictiveAlert, t: float, now: float) -> Visual:
        if alert.resolved:
            fade = 1.0 - min(1.0, (now - alert.resolved_at) / self.grace)
            return Visual(progress=1.0, opacity=fade, label_visible=True)
        return Visual(progress=t, opacity=min(1.0, alert.elapsed(now) / 0.5),
                      scale=1.0 + 0.1 * t, label_visible=True)
