"""components.catalog — Static domain records.

Loaded once from ``data/catalog.toml`` by ``core.data.load_catalog`` and
never mutated afterwards.  Lookups return ``None`` for unknown ids so
callers can skip a spawn instead of building something malformed.
"""

from __future__ import annotations
from dataclasses import dataclass, field

ROUTE_STATUSES = ("normal", "congested", "disrupted")
SEVERITIES = ("info", "warning", "critical")
IMPORTANCE = ("high", "medium", "low")
KPI_FORMATS = ("teu", "percent", "hours", "index")


@dataclass(frozen=True)
class Location:
    """A port on the globe plus its headline operating metrics."""
    id: str
    name: str
    lat: float
    lng: float
    country: str = ""
    region: str = ""
    throughput: float = 0.0          # TEU/day
    dwell_time: float = 0.0          # hours
    on_time: float = 0.0             # %
    congestion_index: float = 0.0
    carbon_index: float = 0.0
    recommendation: str = ""
    top_corridors: tuple[str, ...] = ()


@dataclass(frozen=True)
class Corridor:
    """A directed trade link.  ``status`` is the baseline, never changed."""
    id: str
    origin: str
    destination: str
    importance: str = "medium"
    status: str = "normal"
    volume: float = 0.0              # thousand TEU / year


@dataclass(frozen=True)
class KPIDefinition:
    id: str
    label: str
    min: float
    max: float
    max_delta: float
    initial: float
    unit: str = ""
    format: str = "index"

    def clamp(self, value: float) -> float:
        return min(self.max, max(self.min, value))


@dataclass(frozen=True)
class EventTemplate:
    label: str
    severity: str = "info"
    requires_location: bool = False
    requires_corridor: bool = False
    weather: bool = False


@dataclass(frozen=True)
class RerouteOption:
    corridor: str
    waypoints: tuple[str, ...]
    label: str
    savings: str = ""


@dataclass(frozen=True)
class PredictionTemplate:
    message: str
    locations: tuple[str, ...]


@dataclass(frozen=True)
class WeatherZone:
    lat: float
    lng: float
    kind: str = "storm"              # "storm" | "fog" | "wind"
    intensity: float = 0.5
    radius: float = 0.1


@dataclass
class Catalog:
    locations: list[Location] = field(default_factory=list)
    corridors: list[Corridor] = field(default_factory=list)
    kpis: list[KPIDefinition] = field(default_factory=list)
    event_templates: list[EventTemplate] = field(default_factory=list)
    vessels: list[str] = field(default_factory=list)
    reroutes: list[RerouteOption] = field(default_factory=list)
    predictions: list[PredictionTemplate] = field(default_factory=list)
    weather_zones: list[WeatherZone] = field(default_factory=list)

    def __post_init__(self):
        self._locations = {loc.id: loc for loc in self.locations}
        self._corridors = {c.id: c for c in self.corridors}
        self._kpis = {k.id: k for k in self.kpis}
        self._reroutes = {r.corridor: r for r in self.reroutes}

    # ── Lookups ──────────────────────────────────────────────────────

    def location(self, location_id: str | None) -> Location | None:
        if location_id is None:
            return None
        return self._locations.get(location_id)

    def corridor(self, corridor_id: str | None) -> Corridor | None:
        if corridor_id is None:
            return None
        return self._corridors.get(corridor_id)

    def kpi(self, kpi_id: str) -> KPIDefinition | None:
        return self._kpis.get(kpi_id)

    def reroute_for(self, corridor_id: str) -> RerouteOption | None:
        return self._reroutes.get(corridor_id)

    def corridor_label(self, corridor: Corridor) -> str:
        """``Origin–Destination`` display name, or ``Unknown``."""
        a = self.location(corridor.origin)
        b = self.location(corridor.destination)
        if a is None or b is None:
            return "Unknown"
        return f"{a.name}–{b.name}"

    def initial_kpis(self) -> dict[str, float]:
        return {k.id: float(k.initial) for k in self.kpis}
