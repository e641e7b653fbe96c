"""core/save.py — Viewer preference persistence.

The dashboard keeps almost nothing between runs.  The one persisted
value is the sound mute flag, stored as JSON:

    saves/prefs.json    {"sound_muted": true}

Everything else (KPIs, events, route statuses, autopilot progress) is
regenerated on launch.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any


SAVES_DIR = Path("saves")
PREFS_NAME = "prefs.json"


def get_prefs_file(saves_dir: Path | None = None) -> Path:
    """Get the path of the preferences file (creating its directory)."""
    base = Path(saves_dir) if saves_dir is not None else SAVES_DIR
    base.mkdir(parents=True, exist_ok=True)
    return base / PREFS_NAME


def load_prefs(saves_dir: Path | None = None) -> dict[str, Any]:
    """Read the preferences dict.  Missing or unreadable file → ``{}``."""
    path = get_prefs_file(saves_dir)
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as ex:
        print(f"[PREFS] Error loading {path}: {ex}")
        return {}
    if not isinstance(data, dict):
        print(f"[PREFS] Ignoring {path}: expected an object")
        return {}
    return data


def save_prefs(prefs: dict[str, Any], saves_dir: Path | None = None) -> Path:
    """Merge *prefs* into the stored preferences and write them back."""
    path = get_prefs_file(saves_dir)
    data = load_prefs(saves_dir)
    data.update(prefs)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    return path


def load_muted(saves_dir: Path | None = None) -> bool:
    return bool(load_prefs(saves_dir).get("sound_muted", False))


def save_muted(muted: bool, saves_dir: Path | None = None) -> Path:
    return save_prefs({"sound_muted": bool(muted)}, saves_dir)
