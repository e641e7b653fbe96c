"""core/bootstrap.py — Dashboard assembly.

Extracted from main.py.
Wires one Store and one TimerScheduler into every component:

  - catalog load (data/catalog.toml)
  - simulation engine, selection, executive mode
  - the four effect pools
  - autopilot director
  - FPS monitor, idle timer, sound board

Tests build the same bundle headless with a seed and a temp saves dir.
"""

from __future__ import annotations
import random
from dataclasses import dataclass, field
from pathlib import Path

from components.catalog import Catalog
from components.state import initial_state
from core.data import load_catalog
from core.store import Store
from logic.autopilot import AutopilotDirector
from logic.effects import AlertPool, ReroutePool, ShockwavePool, TransientPool, WeatherPool
from logic.idle import IdleTimer
from logic.performance import FPSMonitor
from logic.selection import ExecutiveMode, Selection
from logic.sound import SoundBoard
from simulation.engine import SimulationEngine
from simulation.scheduler import TimerScheduler


@dataclass
class Dashboard:
    store: Store
    scheduler: TimerScheduler
    catalog: Catalog
    engine: SimulationEngine
    selection: Selection
    executive: ExecutiveMode
    autopilot: AutopilotDirector
    shockwaves: ShockwavePool
    alerts: AlertPool
    reroutes: ReroutePool
    weather: WeatherPool
    fps: FPSMonitor
    idle: IdleTimer
    sound: SoundBoard
    started: bool = field(default=False)

    @property
    def pools(self) -> list[TransientPool]:
        return [self.weather, self.reroutes, self.shockwaves, self.alerts]

    def start(self, autopilot: bool = True) -> None:
        """Attach every listener, seed the weather, and begin the tour."""
        if self.started:
            return
        self.started = True
        for pool in self.pools:
            pool.attach()
        self.sound.attach()
        self.weather.start()
        self.alerts.start()
        self.idle.start()
        if autopilot:
            self.autopilot.start()
        else:
            self.engine.start()

    def tick(self, dt: float) -> None:
        """Advance the world clock and settle per-frame state."""
        self.scheduler.advance(dt)
        now = self.scheduler.now
        self.autopilot.update(now)
        self.fps.frame(now)

    def shutdown(self) -> None:
        if self.autopilot.is_active:
            self.autopilot.interrupt()
        self.engine.stop()
        for pool in self.pools:
            pool.detach()
        self.sound.detach()
        self.idle.stop()
        self.started = False


def build_dashboard(catalog: Catalog | None = None, seed: int | None = None,
                    saves_dir: Path | None = None) -> Dashboard:
    """Construct (but do not start) a complete dashboard."""
    if catalog is None:
        catalog = load_catalog()
    rng = random.Random(seed)
    store = Store(initial_state(catalog))
    scheduler = TimerScheduler()

    engine = SimulationEngine(store, scheduler, catalog, rng=rng)
    selection = Selection(store)
    executive = ExecutiveMode(store)
    sound = SoundBoard(store, saves_dir=saves_dir)
    alerts = AlertPool(store, scheduler, catalog, rng, engine=engine)
    alerts.on_resolve.append(sound.on_alert_resolved)

    return Dashboard(
        store=store,
        scheduler=scheduler,
        catalog=catalog,
        engine=engine,
        selection=selection,
        executive=executive,
        autopilot=AutopilotDirector(store, scheduler, catalog, engine,
                                    selection, executive),
        shockwaves=ShockwavePool(store, scheduler, catalog, rng),
        alerts=alerts,
        reroutes=ReroutePool(store, scheduler, catalog, rng),
        weather=WeatherPool(store, scheduler, catalog, rng),
        fps=FPSMonitor(store),
        idle=IdleTimer(scheduler),
        sound=sound,
    )
