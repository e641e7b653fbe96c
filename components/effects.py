"""components.effects — Short-lived visual entities and their frame output.

Each effect pool owns a list of these.  Entities carry only what they
were spawned with (start time, duration, payload); everything visual is
re-derived from ``(start_time, now)`` every frame, so a dropped frame
never desynchronises an animation.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from pygame.math import Vector3

from components.catalog import RerouteOption


@dataclass
class Transient:
    """Base record shared by every effect family."""
    id: str
    key: str                         # logical identity for duplicate checks
    start_time: float
    duration: float

    def elapsed(self, now: float) -> float:
        return now - self.start_time

    def progress(self, now: float) -> float:
        return self.elapsed(now) / self.duration if self.duration > 0 else 1.0


@dataclass
class ShockwaveRing(Transient):
    position: Vector3 = field(default_factory=Vector3)
    normal: Vector3 = field(default_factory=Vector3)
    ring_index: int = 0
    event_id: str = ""


@dataclass
class PredictiveAlert(Transient):
    location_id: str = ""
    position: Vector3 = field(default_factory=Vector3)
    message: str = ""
    probability: int = 0             # percent
    resolved: bool = False
    resolved_as: str | None = None   # "occurred" | "averted"
    resolved_at: float | None = None

    @property
    def countdown_end(self) -> float:
        return self.start_time + self.duration

    def remaining(self, now: float) -> float:
        return max(0.0, self.countdown_end - now)


@dataclass
class RerouteOverlay(Transient):
    option: RerouteOption | None = None
    points: list[Vector3] = field(default_factory=list)
    midpoint: Vector3 = field(default_factory=Vector3)


@dataclass
class WeatherCell(Transient):
    kind: str = "storm"              # "storm" | "fog" | "wind"
    lat: float = 0.0
    lng: float = 0.0
    intensity: float = 0.5
    radius: float = 0.1
    rotation: float = 0.0            # at start_time; spin is derived


@dataclass(frozen=True)
class Visual:
    """What the renderer draws for one entity on one frame."""
    visible: bool = True
    progress: float = 0.0
    scale: float = 1.0
    opacity: float = 1.0
    reveal: float = 1.0              # fraction of a polyline drawn
    rotation: float = 0.0
    label_visible: bool = False
