"""components.state — Records that live in the shared Store."""

from __future__ import annotations
from dataclasses import dataclass

from components.catalog import Catalog


@dataclass(frozen=True)
class TradeEvent:
    """One line of the event ticker.  Appended, never mutated."""
    id: str
    timestamp: str                   # display only, HH:MM:SS
    label: str
    severity: str = "info"           # "info" | "warning" | "critical"
    location_id: str | None = None
    corridor_id: str | None = None
    weather: bool = False


@dataclass(frozen=True)
class AutopilotStatus:
    phase: str = "idle"              # idle | boot | pulse | focus | disruption | summary
    is_active: bool = False
    is_completed: bool = False
    was_interrupted: bool = False


def initial_state(catalog: Catalog) -> dict:
    """Store contents at process start."""
    return {
        # simulation engine
        "kpis": catalog.initial_kpis(),
        "events": (),
        "route_statuses": {},
        "is_running": False,
        # selection / presentation
        "selected_location": None,
        "hovered_location": None,
        "executive": False,
        # autopilot
        "autopilot": AutopilotStatus(),
        # performance / sound
        "fps": 60,
        "reduced_effects": False,
        "muted": False,
    }


def effective_status(state: dict, catalog: Catalog, corridor_id: str) -> str | None:
    """Current status of a corridor: override if present, else baseline."""
    corridor = catalog.corridor(corridor_id)
    if corridor is None:
        return None
    return state["route_statuses"].get(corridor_id, corridor.status)


def new_events(state: dict, prev: dict) -> list[TradeEvent]:
    """Events present in *state* but not in *prev*, newest first.

    Compares by identity rather than list length: once the ticker is
    full every append also evicts, so the length stops changing.
    """
    events = state.get("events", ())
    old = prev.get("events", ())
    if events is old or not events:
        return []
    if not old:
        return list(events)
    seen = {e.id for e in old}
    fresh: list[TradeEvent] = []
    for event in events:
        if event.id in seen:
            break
        fresh.append(event)
    return fresh
