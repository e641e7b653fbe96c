"""
core/data.py — TOML → catalog loader

Reads ``data/catalog.toml`` and builds the read-only ``Catalog``.
The mapping from TOML array-of-tables to record classes lives here.

You define your records in components/catalog.py.
You define the content in catalog.toml.
This file connects them.

Usage:
    catalog = load_catalog()                    # default data/catalog.toml
    catalog = load_catalog("tests/mini.toml")
"""

from __future__ import annotations
try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib
from pathlib import Path
from dataclasses import fields

from components.catalog import (
    Catalog, Location, Corridor, KPIDefinition, EventTemplate,
    RerouteOption, PredictionTemplate, WeatherZone,
    ROUTE_STATUSES, SEVERITIES,
)

DEFAULT_PATH = Path(__file__).resolve().parent.parent / "data" / "catalog.toml"

# TOML table name → record class
_TABLES: dict[str, type] = {
    "locations": Location,
    "corridors": Corridor,
    "kpis": KPIDefinition,
    "event_templates": EventTemplate,
    "reroutes": RerouteOption,
    "predictions": PredictionTemplate,
    "weather_zones": WeatherZone,
}


def load_catalog(path: str | Path | None = None) -> Catalog:
    """Load a catalog file.  Unknown keys inside a table are ignored."""
    path = Path(path) if path is not None else DEFAULT_PATH
    with open(path, "rb") as f:
        data = tomllib.load(f)
    catalog = catalog_from_dict(data)
    print(f"[DATA] Catalog: {len(catalog.locations)} locations, "
          f"{len(catalog.corridors)} corridors, {len(catalog.kpis)} KPIs, "
          f"{len(catalog.event_templates)} event templates")
    return catalog


def catalog_from_dict(data: dict) -> Catalog:
    """Build a ``Catalog`` from already-parsed TOML (or a test dict)."""
    kwargs: dict = {}
    for table, record_type in _TABLES.items():
        rows = data.get(table, [])
        kwargs[table] = [_build_record(record_type, row) for row in rows
                         if isinstance(row, dict)]
    kwargs["vessels"] = [str(v) for v in data.get("vessels", [])]

    for corridor in kwargs["corridors"]:
        if corridor.status not in ROUTE_STATUSES:
            raise ValueError(f"corridor {corridor.id}: bad status {corridor.status!r}")
    for template in kwargs["event_templates"]:
        if template.severity not in SEVERITIES:
            raise ValueError(f"event template {template.label!r}: "
                             f"bad severity {template.severity!r}")
    return Catalog(**kwargs)


def _build_record(record_type: type, kwargs: dict):
    """Build a dataclass instance, skipping unknown fields.

    TOML arrays become tuples so frozen records stay hashable.
    """
    valid = {f.name for f in fields(record_type)}
    filtered = {k: (tuple(v) if isinstance(v, list) else v)
                for k, v in kwargs.items() if k in valid}
    return record_type(**filtered)
