"""scenes/dashboard_scene.py — The one interactive view.

Each frame: advance the dashboard clock, sample the autopilot proxy,
animate every effect pool, then draw.  Pointer-down, wheel and touch
input interrupt a running autopilot tour.

Keys
----
R     replay the autopilot tour
M     mute / unmute (persisted)
E     toggle executive summary mode
S     start / stop the simulation
Esc   clear the selected port
F5    reload data/tuning.toml (affects components built afterwards)
"""

from __future__ import annotations
from typing import TYPE_CHECKING

import pygame

from core import tuning
from core.bootstrap import Dashboard
from core.constants import BG_COLOR
from core.scene import Scene
from scenes import dashboard_draw as draw

if TYPE_CHECKING:
    from core.app import App

PICK_RADIUS = 10
INTERRUPT_EVENTS = (pygame.MOUSEBUTTONDOWN, pygame.MOUSEWHEEL, pygame.FINGERDOWN)


class DashboardScene(Scene):
    def __init__(self, dashboard: Dashboard, autopilot: bool = True):
        self.dash = dashboard
        self.autopilot_on_enter = autopilot
        self.frames: dict[str, list] = {}

    def on_enter(self, app: App):
        self.dash.sound.load()
        self.dash.start(autopilot=self.autopilot_on_enter)

    def on_exit(self, app: App):
        self.dash.shutdown()

    # ── Input ────────────────────────────────────────────────────────

    def _port_at(self, pos) -> str | None:
        rect = draw.map_rect(self.dash.autopilot.proxy)
        best, best_d = None, PICK_RADIUS ** 2
        for loc in self.dash.catalog.locations:
            x, y = draw.project(loc.lat, loc.lng, rect)
            d = (x - pos[0]) ** 2 + (y - pos[1]) ** 2
            if d <= best_d:
                best, best_d = loc.id, d
        return best

    def handle_event(self, event: pygame.event.Event, app: App):
        dash = self.dash
        if event.type in INTERRUPT_EVENTS or event.type == pygame.KEYDOWN:
            dash.idle.poke()

        if event.type in INTERRUPT_EVENTS:
            dash.autopilot.interrupt()
            tapped = (event.type == pygame.FINGERDOWN
                      or (event.type == pygame.MOUSEBUTTONDOWN and event.button == 1))
            if tapped:
                port = self._port_at(event.pos)
                if port is not None:
                    dash.selection.set_selected(port)

        elif event.type == pygame.MOUSEMOTION:
            dash.idle.poke()
            dash.selection.set_hovered(self._port_at(event.pos))

        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_r:
                dash.autopilot.replay()
            elif event.key == pygame.K_m:
                dash.sound.toggle_mute()
            elif event.key == pygame.K_e:
                dash.executive.toggle()
            elif event.key == pygame.K_s:
                if dash.engine.is_running:
                    dash.engine.stop()
                else:
                    dash.engine.start()
            elif event.key == pygame.K_F5:
                tuning.reload()
            elif event.key == pygame.K_ESCAPE:
                dash.selection.clear()

    # ── Update ───────────────────────────────────────────────────────

    def update(self, dt: float, app: App):
        dash = self.dash
        dash.tick(dt)
        now = dash.scheduler.now
        self.frames = {
            "weather": dash.weather.animate(now),
            "reroutes": dash.reroutes.animate(now),
            "shockwaves": dash.shockwaves.animate(now),
            "alerts": dash.alerts.animate(now),
        }

    # ── Draw ─────────────────────────────────────────────────────────

    def draw(self, surface: pygame.Surface, app: App):
        dash = self.dash
        state = dash.store.get()
        proxy = dash.autopilot.proxy
        rect = draw.map_rect(proxy)
        frames = self.frames

        surface.fill(BG_COLOR)
        draw.draw_map(surface, rect)
        draw.draw_weather(surface, rect, frames.get("weather", ()))
        draw.draw_corridors(surface, rect, dash.catalog, state)
        draw.draw_reroutes(surface, app, rect, frames.get("reroutes", ()))
        draw.draw_ports(surface, app, rect, dash.catalog, state)
        draw.draw_shockwaves(surface, rect, frames.get("shockwaves", ()),
                             dash.shockwaves.base_size)
        draw.draw_alerts(surface, app, rect, frames.get("alerts", ()),
                         dash.alerts.message_for)
        draw.draw_kpis(surface, app, dash.catalog, state, state.get("executive", False))
        draw.draw_ticker(surface, app, state.get("events", ()))
        draw.draw_status_bar(surface, app, state, dash.autopilot.phase,
                             dash.idle.is_idle)
        draw.fade_overlay(surface, proxy.ui_opacity)
