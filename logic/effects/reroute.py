"""logic/effects/reroute.py — Alternative-path overlays for disrupted corridors."""

from __future__ import annotations
from typing import Iterable

from pygame.math import Vector3

from components.effects import RerouteOverlay, Visual
from core.geo import GLOBE_RADIUS, great_circle_points, polyline_midpoint
from core.tuning import get as _tun
from logic.effects.pool import TransientPool


class ReroutePool(TransientPool[RerouteOverlay]):
    name = "reroute"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.draw_duration = float(_tun("effects.reroute", "draw_duration", 1.2))
        self.display_duration = float(_tun("effects.reroute", "display_duration", 12.0))
        self.label_lift = float(_tun("effects.reroute", "label_lift", 0.4))

    def triggered(self, state: dict, prev: dict) -> Iterable[list[RerouteOverlay]]:
        statuses = state.get("route_statuses", {})
        before = prev.get("route_statuses", {})
        if statuses is before:
            return
        for cid, status in statuses.items():
            if status != "disrupted" or before.get(cid) == "disrupted":
                continue
            overlay = self.overlay_for(cid)
            if overlay is not None:
                yield [overlay]

    def path_points(self, waypoints: Iterable[str]) -> list[Vector3]:
        """Great-circle polyline through every resolvable waypoint pair."""
        points: list[Vector3] = []
        ids = list(waypoints)
        for a_id, b_id in zip(ids, ids[1:]):
            a = self.catalog.location(a_id)
            b = self.catalog.location(b_id)
            if a is None or b is None:
                continue
            segment = great_circle_points((a.lat, a.lng), (b.lat, b.lng), GLOBE_RADIUS)
            # consecutive segments share an endpoint
            points.extend(segment[1:] if points else segment)
        return points

    def overlay_for(self, corridor_id: str) -> RerouteOverlay | None:
        option = self.catalog.reroute_for(corridor_id)
        if option is None:
            return None
        points = self.path_points(option.waypoints)
        if len(points) < 2:
            return None
        return RerouteOverlay(
            id=self.next_id(corridor_id),
            key=corridor_id,
            start_time=self.scheduler.now,
            duration=self.display_duration,
            option=option,
            points=points,
            midpoint=polyline_midpoint(points, GLOBE_RADIUS + self.label_lift),
        )

    def visual(self, overlay: RerouteOverlay, t: float, now: float) -> Visual:
        reveal = min(overlay.elapsed(now) / self.draw_duration, 1.0)
        return Visual(progress=t, reveal=reveal, label_visible=reveal >= 1.0)
