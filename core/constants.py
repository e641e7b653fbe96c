"""core/constants.py — Shared display constants.

Centralises colours and layout numbers so there's exactly one place to
change them.  Only the renderer (scenes/dashboard_draw.py) reads these;
nothing in the simulation or effect layers depends on pixels.

Map projection
--------------
The globe is drawn as an equirectangular map inside ``MAP_RECT``:

    x = left + (lng + 180) / 360 · width
    y = top  + (90 − lat) / 180 · height
"""

# ── Layout (virtual pixels) ─────────────────────────────────────────
SCREEN_W = 1280
SCREEN_H = 720
MAP_RECT = (20, 60, 900, 450)            # left, top, width, height
PANEL_X = 940
TICKER_Y = 530
TICKER_ROWS = 8

# ── Palette ─────────────────────────────────────────────────────────
BG_COLOR = (8, 12, 24)
MAP_COLOR = (14, 24, 44)
GRID_COLOR = (26, 40, 66)
TEXT_COLOR = (220, 230, 245)
DIM_TEXT = (120, 140, 170)
PORT_COLOR = (90, 200, 255)
SELECTED_COLOR = (255, 255, 255)

STATUS_COLORS = {
    "normal": (40, 170, 255),
    "congested": (255, 190, 40),
    "disrupted": (255, 70, 70),
}

SEVERITY_COLORS = {
    "info": (120, 180, 255),
    "warning": (255, 190, 40),
    "critical": (255, 70, 70),
}

WEATHER_COLORS = {
    "storm": (150, 110, 255),
    "fog": (170, 180, 190),
    "wind": (110, 220, 200),
}

RING_COLOR = (255, 90, 60)
ALERT_COLOR = (255, 160, 40)
ALERT_OCCURRED = (255, 80, 80)
ALERT_AVERTED = (80, 220, 120)
REROUTE_COLOR = (60, 255, 160)

# Corridor line width by importance tier
IMPORTANCE_WIDTH = {"high": 3, "medium": 2, "low": 1}
