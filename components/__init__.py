"""components — Plain records shared across the dashboard, by domain.

Submodules
----------
catalog     Location, Corridor, KPIDefinition, templates, Catalog
state       TradeEvent, AutopilotStatus, initial Store contents
effects     Transient entity records and the per-frame Visual
autopilot   AutopilotProxy — interpolated camera / globe / UI scalars

The catalog and state records are re-exported here so code can do
``from components import Catalog``.  ``effects`` and ``autopilot`` pull
in pygame's vector maths and are imported from their modules directly.
"""

# ── Catalog ──────────────────────────────────────────────────────────
from components.catalog import (
    Catalog, Location, Corridor, KPIDefinition, EventTemplate,
    RerouteOption, PredictionTemplate, WeatherZone,
    ROUTE_STATUSES, SEVERITIES,
)

# ── Store records ────────────────────────────────────────────────────
from components.state import TradeEvent, AutopilotStatus, initial_state

__all__ = [
    "Catalog", "Location", "Corridor", "KPIDefinition", "EventTemplate",
    "RerouteOption", "PredictionTemplate", "WeatherZone",
    "ROUTE_STATUSES", "SEVERITIES",
    "TradeEvent", "AutopilotStatus", "initial_state",
]
