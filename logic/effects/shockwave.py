"""logic/effects/shockwave.py — Expanding rings at disruption epicentres.

Every new critical or warning event spawns three staggered rings at the
event's port (or, for corridor events, the corridor's origin port).
"""

from __future__ import annotations
from typing import Iterable

from components.effects import ShockwaveRing, Visual
from components.state import TradeEvent, new_events
from core.geo import GLOBE_RADIUS, lat_lng_to_vector3
from core.tuning import get as _tun
from logic.effects.pool import TransientPool


class ShockwavePool(TransientPool[ShockwaveRing]):
    name = "shockwave"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.ring_count = int(_tun("effects.shockwave", "ring_count", 3))
        self.stagger = float(_tun("effects.shockwave", "ring_stagger", 0.2))
        self.duration = float(_tun("effects.shockwave", "ring_duration", 1.5))
        self.max_scale = float(_tun("effects.shockwave", "max_scale", 0.8))
        self.base_size = float(_tun("effects.shockwave", "base_size", 0.12))
        self.surface_offset = float(_tun("effects.shockwave", "surface_offset", 0.04))

    def epicentre(self, event: TradeEvent) -> str | None:
        """Location id the rings centre on, or None if unresolvable."""
        if event.location_id:
            loc = self.catalog.location(event.location_id)
            return loc.id if loc else None
        corridor = self.catalog.corridor(event.corridor_id)
        if corridor is None:
            return None
        loc = self.catalog.location(corridor.origin)
        return loc.id if loc else None

    def triggered(self, state: dict, prev: dict) -> Iterable[list[ShockwaveRing]]:
        reduced = state.get("reduced_effects", False)
        for event in reversed(new_events(state, prev)):
            if event.severity not in ("critical", "warning"):
                continue
            batch = self.rings_for(event, single=reduced)
            if batch:
                yield batch

    def rings_for(self, event: TradeEvent, single: bool = False) -> list[ShockwaveRing]:
        loc = self.catalog.location(self.epicentre(event))
        if loc is None:
            return []
        position = lat_lng_to_vector3(loc.lat, loc.lng, GLOBE_RADIUS + self.surface_offset)
        normal = position.normalize()
        now = self.scheduler.now
        count = 1 if single else self.ring_count
        return [
            ShockwaveRing(
                id=f"{event.id}-ring-{i}",
                key=loc.id,
                start_time=now + i * self.stagger,
                duration=self.duration,
                position=position,
                normal=normal,
                ring_index=i,
                event_id=event.id,
            )
            for i in range(count)
        ]

    def visual(self, ring: ShockwaveRing, t: float, now: float) -> Visual:
        peak = 0.9 if ring.ring_index == 0 else 0.5
        return Visual(
            progress=t,
            scale=1.0 + t * self.max_scale / self.base_size,
            opacity=(1.0 - t) * peak,
        )
