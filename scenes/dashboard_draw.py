"""scenes/dashboard_draw.py — Rendering helpers for the dashboard scene.

All pure-draw functions live here so that DashboardScene.draw() stays
thin.  Every function receives the data it needs as parameters; none of
them mutates the Store or an effect pool.
"""

from __future__ import annotations
import math

import pygame
from pygame.math import Vector3

from components.autopilot import AutopilotProxy
from components.catalog import Catalog
from components.state import effective_status
from core.app import App
from core.constants import (
    ALERT_AVERTED, ALERT_COLOR, ALERT_OCCURRED, DIM_TEXT, GRID_COLOR,
    IMPORTANCE_WIDTH, MAP_COLOR, MAP_RECT, PANEL_X, PORT_COLOR, REROUTE_COLOR,
    RING_COLOR, SELECTED_COLOR, SEVERITY_COLORS, STATUS_COLORS, TEXT_COLOR,
    TICKER_ROWS, TICKER_Y, WEATHER_COLORS,
)
from core.geo import GLOBE_RADIUS, great_circle_points, vector3_to_lat_lng
from logic.formatters import format_kpi


# ── Projection ──────────────────────────────────────────────────────

def map_rect(proxy: AutopilotProxy) -> pygame.Rect:
    """The map area, scaled about its centre by the globe scale."""
    left, top, w, h = MAP_RECT
    sw, sh = w * proxy.globe_scale, h * proxy.globe_scale
    return pygame.Rect(int(left + (w - sw) / 2), int(top + (h - sh) / 2),
                       int(sw), int(sh))


def project(lat: float, lng: float, rect: pygame.Rect) -> tuple[int, int]:
    x = rect.left + (lng + 180.0) / 360.0 * rect.width
    y = rect.top + (90.0 - lat) / 180.0 * rect.height
    return int(x), int(y)


def project_vec(v: Vector3, rect: pygame.Rect) -> tuple[int, int]:
    lat, lng = vector3_to_lat_lng(v)
    return project(lat, lng, rect)


def world_to_px(size: float, rect: pygame.Rect) -> int:
    """Convert a length on the globe surface to map pixels."""
    degrees = math.degrees(size / GLOBE_RADIUS)
    return max(1, int(degrees / 360.0 * rect.width))


def _alpha_circle(surface, color, center, radius, alpha, width=0):
    if alpha <= 0 or radius <= 0:
        return
    size = radius * 2 + 4
    layer = pygame.Surface((size, size), pygame.SRCALPHA)
    pygame.draw.circle(layer, (*color, int(255 * min(1.0, alpha))),
                       (size // 2, size // 2), radius, width)
    surface.blit(layer, (center[0] - size // 2, center[1] - size // 2))


def _polyline(points: list[tuple[int, int]], rect: pygame.Rect):
    """Split a projected polyline where it wraps around the antimeridian."""
    runs: list[list[tuple[int, int]]] = [[]]
    for p in points:
        run = runs[-1]
        if run and abs(p[0] - run[-1][0]) > rect.width / 2:
            runs.append([])
        runs[-1].append(p)
    return [r for r in runs if len(r) >= 2]


# ── Map ─────────────────────────────────────────────────────────────

def draw_map(surface: pygame.Surface, rect: pygame.Rect):
    pygame.draw.rect(surface, MAP_COLOR, rect)
    for lng in range(-180, 181, 30):
        x, _ = project(0, lng, rect)
        pygame.draw.line(surface, GRID_COLOR, (x, rect.top), (x, rect.bottom))
    for lat in range(-60, 61, 30):
        _, y = project(lat, 0, rect)
        pygame.draw.line(surface, GRID_COLOR, (rect.left, y), (rect.right, y))


def draw_corridors(surface: pygame.Surface, rect: pygame.Rect,
                   catalog: Catalog, state: dict):
    for corridor in catalog.corridors:
        a = catalog.location(corridor.origin)
        b = catalog.location(corridor.destination)
        if a is None or b is None:
            continue
        status = effective_status(state, catalog, corridor.id) or "normal"
        pts = [project_vec(p, rect) for p in
               great_circle_points((a.lat, a.lng), (b.lat, b.lng), segments=24)]
        for run in _polyline(pts, rect):
            pygame.draw.lines(surface, STATUS_COLORS[status], False, run,
                              IMPORTANCE_WIDTH.get(corridor.importance, 1))


def draw_ports(surface: pygame.Surface, app: App, rect: pygame.Rect,
               catalog: Catalog, state: dict):
    selected = state.get("selected_location")
    hovered = state.get("hovered_location")
    for loc in catalog.locations:
        p = project(loc.lat, loc.lng, rect)
        if loc.id == selected:
            pygame.draw.circle(surface, SELECTED_COLOR, p, 7, 2)
        pygame.draw.circle(surface, PORT_COLOR, p, 3)
        if loc.id in (selected, hovered):
            app.draw_text_bg(surface, loc.name, p[0] + 8, p[1] - 6, font=app.font_sm)


# ── Effects ─────────────────────────────────────────────────────────

def draw_weather(surface: pygame.Surface, rect: pygame.Rect, frames):
    for cell, vis in frames:
        if not vis.visible:
            continue
        p = project(cell.lat, cell.lng, rect)
        r = world_to_px(cell.radius * 4, rect)
        color = WEATHER_COLORS.get(cell.kind, WEATHER_COLORS["fog"])
        _alpha_circle(surface, color, p, r, vis.opacity * 0.5)
        # spin marker
        tip = (int(p[0] + r * math.cos(vis.rotation)), int(p[1] + r * math.sin(vis.rotation)))
        _alpha_circle(surface, color, tip, 2, vis.opacity)


def draw_reroutes(surface: pygame.Surface, app: App, rect: pygame.Rect, frames):
    for overlay, vis in frames:
        if not vis.visible or len(overlay.points) < 2:
            continue
        n = max(2, int(len(overlay.points) * vis.reveal))
        pts = [project_vec(p, rect) for p in overlay.points[:n]]
        for run in _polyline(pts, rect):
            pygame.draw.lines(surface, REROUTE_COLOR, False, run, 2)
        if vis.label_visible and overlay.option is not None:
            x, y = project_vec(overlay.midpoint, rect)
            app.draw_text_bg(surface, overlay.option.label, x, y - 18,
                             color=REROUTE_COLOR, font=app.font_sm)
            app.draw_text_bg(surface, overlay.option.savings, x, y - 4,
                             font=app.font_sm)


def draw_shockwaves(surface: pygame.Surface, rect: pygame.Rect, frames,
                    base_size: float):
    for ring, vis in frames:
        if not vis.visible:
            continue
        p = project_vec(ring.position, rect)
        r = world_to_px(base_size * vis.scale, rect)
        _alpha_circle(surface, RING_COLOR, p, r, vis.opacity, width=2)


def draw_alerts(surface: pygame.Surface, app: App, rect: pygame.Rect,
                frames, message_for):
    for alert, vis in frames:
        if not vis.visible:
            continue
        p = project_vec(alert.position, rect)
        if alert.resolved:
            color = ALERT_OCCURRED if alert.resolved_as == "occurred" else ALERT_AVERTED
            text = "Occurred" if alert.resolved_as == "occurred" else "Averted"
        else:
            color = ALERT_COLOR
            text = f"{message_for(alert)} ({alert.probability}%)"
        _alpha_circle(surface, color, p, 6, vis.opacity, width=2)
        if vis.label_visible and vis.opacity > 0.05:
            app.draw_text_bg(surface, text, p[0] + 10, p[1] + 4, color=color,
                             font=app.font_sm)


# ── Panels ──────────────────────────────────────────────────────────

def draw_kpis(surface: pygame.Surface, app: App, catalog: Catalog, state: dict,
              executive: bool):
    y = 60
    app.draw_text(surface, "EXECUTIVE SUMMARY" if executive else "NETWORK KPIs",
                  PANEL_X, y, color=DIM_TEXT)
    y += 24
    for kpi in catalog.kpis:
        value = state["kpis"].get(kpi.id, kpi.initial)
        app.draw_text(surface, kpi.label, PANEL_X, y, color=DIM_TEXT, font=app.font_sm)
        app.draw_text(surface, format_kpi(value, kpi.format), PANEL_X, y + 12,
                      font=app.font_lg)
        y += 44 if not executive else 52


def draw_ticker(surface: pygame.Surface, app: App, events):
    y = TICKER_Y
    app.draw_text(surface, "EVENTS", 20, y, color=DIM_TEXT)
    for event in events[:TICKER_ROWS]:
        y += 20
        color = SEVERITY_COLORS.get(event.severity, TEXT_COLOR)
        app.draw_text(surface, f"{event.timestamp}  {event.label}", 20, y,
                      color=color, font=app.font_sm)


def draw_status_bar(surface: pygame.Surface, app: App, state: dict,
                    phase: str, is_idle: bool):
    sim = "RUNNING" if state.get("is_running") else "PAUSED"
    bits = [f"SIM {sim}", f"{state.get('fps', 0)} FPS"]
    if phase != "idle":
        bits.append(f"AUTOPILOT {phase.upper()}")
    if state.get("reduced_effects"):
        bits.append("REDUCED FX")
    if state.get("muted"):
        bits.append("MUTED")
    if is_idle:
        bits.append("IDLE")
    app.draw_text(surface, "   ".join(bits), 20, 20, color=TEXT_COLOR)
    app.draw_text(surface, "R replay  M mute  E executive  S sim  Esc clear",
                  20, 38, color=DIM_TEXT, font=app.font_sm)


def fade_overlay(surface: pygame.Surface, opacity: float):
    """Darken everything drawn so far by ``1 − opacity``."""
    if opacity >= 1.0:
        return
    veil = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    veil.fill((0, 0, 0, int(255 * (1.0 - max(0.0, opacity)))))
    surface.blit(veil, (0, 0))
