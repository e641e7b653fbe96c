"""core/tuning.py — Data-driven timing constants.

Intervals, durations and thresholds for the simulation, the effect
layers and the autopilot live in ``data/tuning.toml``.  Call sites
always pass their own default, so a missing file or key changes
nothing::

    from core.tuning import get
    tick = get("simulation", "kpi_tick", 2.5)

The file can be swapped without editing code by pointing the
``TRADENET_TUNING`` environment variable at another TOML file.
``reload()`` re-reads whichever file was loaded last (F5 in the
dashboard scene) and discards in-memory overrides.
"""

from __future__ import annotations
import os
from pathlib import Path

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib                # pip install tomli

ENV_VAR = "TRADENET_TUNING"
DEFAULT_PATH = Path(__file__).resolve().parent.parent / "data" / "tuning.toml"

_data: dict = {}
_path: Path | None = None


def load(path: str | Path | None = None) -> None:
    """Load tuning constants.

    Resolution order: explicit *path*, then ``$TRADENET_TUNING``, then
    ``data/tuning.toml`` next to the ``core`` package.
    """
    global _data, _path
    _path = Path(path or os.environ.get(ENV_VAR) or DEFAULT_PATH)

    if not _path.exists():
        print(f"[TUNING] {_path} not found, using built-in defaults")
        _data = {}
        return
    try:
        with open(_path, "rb") as f:
            _data = tomllib.load(f)
    except tomllib.TOMLDecodeError as ex:
        print(f"[TUNING] {_path} is not valid TOML ({ex}), using built-in defaults")
        _data = {}
        return
    print(f"[TUNING] Loaded {_count_leaves(_data)} values from {_path}")


def reload() -> None:
    load(_path)


def get(section: str, key: str, default=None):
    """Read one value.  *section* is dotted: ``"effects.alerts"``."""
    node = _data
    for part in section.split("."):
        node = node.get(part) if isinstance(node, dict) else None
        if node is None:
            return default
    return node.get(key, default) if isinstance(node, dict) else default


def override(section: str, key: str, value) -> None:
    """Pin a value in memory until the next ``load()``/``reload()``."""
    node = _data
    for part in section.split("."):
        node = node.setdefault(part, {})
    node[key] = value


def _count_leaves(d: dict) -> int:
    return sum(_count_leaves(v) if isinstance(v, dict) else 1 for v in d.values())
