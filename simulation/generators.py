"""simulation/generators.py — Pure helpers behind the simulation ticks.

No state lives here; every function takes the random source it draws
from, so tests can pass a seeded ``random.Random`` (or a scripted stub).
"""

from __future__ import annotations
import itertools
import random
from typing import Iterable

from components.catalog import Catalog, KPIDefinition
from components.state import TradeEvent
from logic.formatters import format_timestamp

# Process-wide so ids stay unique across engines sharing one ticker.
_event_ids = itertools.count(101)


def next_event_id(prefix: str = "evt") -> str:
    return f"{prefix}-{next(_event_ids)}"


def drift_value(current: float, kpi: KPIDefinition, rng: random.Random) -> float:
    """Nudge *current* by a uniform delta in ±max_delta, clamped to range."""
    delta = rng.uniform(-kpi.max_delta, kpi.max_delta)
    return kpi.clamp(current + delta)


def drift_kpis(current: dict[str, float], kpis: Iterable[KPIDefinition],
               rng: random.Random, *, pick_min: int = 2,
               pick_max: int = 3) -> dict[str, float]:
    """Return a copy of *current* with 2–3 random KPIs drifted.

    KPIs are chosen without replacement; the rest are untouched.
    """
    defs = list(kpis)
    updated = dict(current)
    if not defs:
        return updated
    count = min(len(defs), rng.randint(pick_min, pick_max))
    for kpi in rng.sample(defs, count):
        base = current.get(kpi.id, kpi.initial)
        updated[kpi.id] = drift_value(base, kpi, rng)
    return updated


def generate_event(catalog: Catalog, rng: random.Random,
                   timestamp: str | None = None) -> TradeEvent | None:
    """Fill a random template with a random port, corridor and vessel.

    Only the references the template asks for end up on the event.
    Returns ``None`` when the catalog has no templates.
    """
    if not catalog.event_templates:
        return None
    template = rng.choice(catalog.event_templates)
    location = rng.choice(catalog.locations) if catalog.locations else None
    corridor = rng.choice(catalog.corridors) if catalog.corridors else None
    vessel = rng.choice(catalog.vessels) if catalog.vessels else "Unknown vessel"

    route_label = catalog.corridor_label(corridor) if corridor else "Unknown"
    label = (template.label
             .replace("{port}", location.name if location else "Unknown")
             .replace("{route}", route_label)
             .replace("{vessel}", vessel))

    return TradeEvent(
        id=next_event_id(),
        timestamp=timestamp or format_timestamp(),
        label=label,
        severity=template.severity,
        location_id=location.id if (template.requires_location and location) else None,
        corridor_id=corridor.id if (template.requires_corridor and corridor) else None,
        weather=template.weather,
    )
