"""logic/effects/weather.py — Slow-moving weather cells over the oceans.

Three cells are seeded from the first catalog zones on ``start()``; an
interval timer tops the sky up with jittered cells while fewer than five
are live.  Weather events bound to a corridor drop a storm cell over
the corridor's midpoint.
"""

from __future__ import annotations
import math
from typing import Iterable

from components.catalog import WeatherZone
from components.effects import Visual, WeatherCell
from components.state import new_events
from core.geo import GLOBE_RADIUS, great_circle_points, vector3_to_lat_lng
from core.tuning import get as _tun
from logic.effects.pool import TransientPool


class WeatherPool(TransientPool[WeatherCell]):
    name = "weather"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.spawn_interval = float(_tun("effects.weather", "spawn_interval", 20.0))
        self.initial_cells = int(_tun("effects.weather", "initial_cells", 3))
        self.max_cells = int(_tun("effects.weather", "max_cells", 5))
        self.lifetime_min = float(_tun("effects.weather", "lifetime_min", 25.0))
        self.lifetime_span = float(_tun("effects.weather", "lifetime_span", 35.0))
        self.seed_min = float(_tun("effects.weather", "seed_lifetime_min", 30.0))
        self.seed_span = float(_tun("effects.weather", "seed_lifetime_span", 30.0))
        self.fade = float(_tun("effects.weather", "fade", 3.0))
        self.storm_spin = float(_tun("effects.weather", "storm_spin", 1.2))
        self.calm_spin = float(_tun("effects.weather", "calm_spin", 0.3))
        self._timer = None

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> None:
        """Seed the initial cells and arm the top-up timer (idempotent)."""
        if self._timer is not None and self._timer.pending:
            return
        for i, zone in enumerate(self.catalog.weather_zones[:self.initial_cells]):
            lifetime = self.seed_min + self.rng.random() * self.seed_span
            self.spawn([self._cell(f"zone-{i}", zone.kind, zone.lat, zone.lng,
                                   zone.intensity, zone.radius, lifetime)])
        self._timer = self.scheduler.post(
            self.spawn_interval, self.tick, owner=self,
            interval=self.spawn_interval, label="weather-spawn")

    def detach(self) -> None:
        super().detach()
        self._timer = None

    # ── Spawning ─────────────────────────────────────────────────────

    def _cell(self, key: str, kind: str, lat: float, lng: float,
              intensity: float, radius: float, lifetime: float) -> WeatherCell:
        return WeatherCell(
            id=self.next_id(kind),
            key=key,
            start_time=self.scheduler.now,
            duration=lifetime,
            kind=kind,
            lat=lat,
            lng=lng,
            intensity=intensity,
            radius=radius,
            rotation=self.rng.random() * math.tau,
        )

    def jittered(self, zone: WeatherZone) -> WeatherCell:
        lat = max(-85.0, min(85.0, zone.lat + (self.rng.random() - 0.5) * 20.0))
        lng = zone.lng + (self.rng.random() - 0.5) * 30.0
        intensity = zone.intensity * (0.8 + self.rng.random() * 0.4)
        radius = zone.radius * (0.8 + self.rng.random() * 0.4)
        lifetime = self.lifetime_min + self.rng.random() * self.lifetime_span
        return self._cell(self.next_id("cell"), zone.kind, lat, lng,
                          intensity, radius, lifetime)

    def tick(self) -> None:
        self.animate()
        if self.store.get().get("reduced_effects"):
            return
        if len(self._entities) >= self.max_cells or not self.catalog.weather_zones:
            return
        self.spawn([self.jittered(self.rng.choice(self.catalog.weather_zones))])

    def triggered(self, state: dict, prev: dict) -> Iterable[list[WeatherCell]]:
        if state.get("reduced_effects"):
            return
        for event in reversed(new_events(state, prev)):
            if not event.weather or event.corridor_id is None:
                continue
            cell = self.storm_over(event.corridor_id)
            if cell is not None:
                yield [cell]

    def storm_over(self, corridor_id: str) -> WeatherCell | None:
        corridor = self.catalog.corridor(corridor_id)
        if corridor is None:
            return None
        a = self.catalog.location(corridor.origin)
        b = self.catalog.location(corridor.destination)
        if a is None or b is None:
            return None
        points = great_circle_points((a.lat, a.lng), (b.lat, b.lng), GLOBE_RADIUS)
        lat, lng = vector3_to_lat_lng(points[len(points) // 2])
        lifetime = self.lifetime_min + self.rng.random() * self.lifetime_span
        return self._cell(corridor_id, "storm", lat, lng, 0.85, 0.12, lifetime)

    # ── Animation ────────────────────────────────────────────────────

    def visual(self, cell: WeatherCell, t: float, now: float) -> Visual:
        elapsed = cell.elapsed(now)
        fade_in = min(1.0, elapsed / self.fade)
        fade_out = min(1.0, (cell.duration - elapsed) / self.fade)
        spin = self.storm_spin if cell.kind == "storm" else self.calm_spin
        return Visual(
            progress=t,
            opacity=cell.intensity * max(0.0, min(fade_in, fade_out)) * 0.6,
            rotation=cell.rotation + elapsed * spin,
        )
