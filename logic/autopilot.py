"""logic/autopilot.py — The scripted tour the dashboard plays on launch.

Two pieces:

``Choreography``
    An ordered list of ``Cue(offset, name, action)`` side effects plus a
    list of ``Tween``s over ``AutopilotProxy`` fields.  Cues are posted
    to the shared ``TimerScheduler`` (owner = the choreography), so
    ``kill()`` is one ``cancel_owner`` call.  Tweens are not timers: the
    director samples them each frame from ``elapsed`` alone.

``AutopilotDirector``
    The phase state machine
    ``idle → boot → pulse → focus → disruption → summary → idle`` with
    ``start()``, ``interrupt()``, ``complete()``, ``reset()`` and
    ``replay()``.  It publishes an ``AutopilotStatus`` to the Store's
    ``autopilot`` key and owns the proxy the renderer samples.
    While a run is active the disruption corridor is held on the engine,
    so only the script changes its status.

Script (seconds from start):

     0.0  boot        globe 0.92 → 1.0, UI fades in from 1.2
     3.0  pulse       simulation starts
    10.0  focus       select Jebel Ali, camera flies in, then drifts
    18.0  disruption  r05 congested → 19.5 disrupted → 21.5 congested → 23.0 normal
    24.0  summary     selection cleared, camera home, 27.0 executive mode
    30.0  complete
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from components.autopilot import AutopilotProxy, CAMERA_HOME
from components.catalog import Catalog
from components.state import AutopilotStatus, TradeEvent
from core.geo import GLOBE_RADIUS, lat_lng_to_vector3
from core.store import Store
from core.tuning import get as _tun
from logic.easing import EASINGS, lerp
from logic.formatters import format_timestamp
from logic.selection import ExecutiveMode, Selection
from simulation.engine import SimulationEngine
from simulation.generators import next_event_id
from simulation.scheduler import TimerScheduler

PHASES = ("idle", "boot", "pulse", "focus", "disruption", "summary")


@dataclass
class Cue:
    offset: float
    name: str
    action: Callable[[], None]


@dataclass
class Tween:
    """Move proxy fields to ``targets`` over ``[offset, offset+duration]``.

    With ``relative`` the targets are deltas added to wherever the
    fields were when the tween began.
    """
    offset: float
    duration: float
    targets: dict[str, float]
    ease: str = "linear"
    relative: bool = False
    start_values: dict[str, float] | None = field(default=None, repr=False)

    def apply(self, proxy: AutopilotProxy, elapsed: float) -> None:
        if elapsed < self.offset:
            return
        if self.start_values is None:
            self.start_values = {k: getattr(proxy, k) for k in self.targets}
        if self.duration > 0:
            t = min(1.0, (elapsed - self.offset) / self.duration)
        else:
            t = 1.0
        k = EASINGS[self.ease](t)
        for name, value in self.targets.items():
            a = self.start_values[name]
            b = a + value if self.relative else value
            setattr(proxy, name, lerp(a, b, k))


class Choreography:
    def __init__(self, scheduler: TimerScheduler, cues: list[Cue],
                 tweens: list[Tween]):
        self.scheduler = scheduler
        self.cues = sorted(cues, key=lambda c: c.offset)
        self.tweens = sorted(tweens, key=lambda t: t.offset)
        self.started_at: float | None = None
        self.fired: list[str] = []

    @property
    def live(self) -> bool:
        return self.scheduler.pending_count(self) > 0

    def play(self) -> None:
        self.started_at = self.scheduler.now
        for cue in self.cues:
            self.scheduler.post(cue.offset, self._fire_cb(cue), owner=self,
                                label=f"autopilot-{cue.name}")

    def _fire_cb(self, cue: Cue):
        def fire():
            self.fired.append(cue.name)
            cue.action()
        return fire

    def kill(self) -> int:
        return self.scheduler.cancel_owner(self)

    def elapsed(self, now: float) -> float:
        if self.started_at is None:
            return 0.0
        return now - self.started_at

    def sample(self, proxy: AutopilotProxy, elapsed: float) -> None:
        """Apply every tween that has begun, in start order."""
        for tween in self.tweens:
            tween.apply(proxy, elapsed)


class AutopilotDirector:
    def __init__(self, store: Store, scheduler: TimerScheduler, catalog: Catalog,
                 engine: SimulationEngine, selection: Selection,
                 executive: ExecutiveMode):
        self.store = store
        self.scheduler = scheduler
        self.catalog = catalog
        self.engine = engine
        self.selection = selection
        self.executive = executive
        self.proxy = AutopilotProxy.neutral()
        self.choreography: Choreography | None = None
        self._session = 0

        self.total = float(_tun("autopilot", "total_duration", 30.0))
        self.focus_location = _tun("autopilot", "focus_location", "jebel-ali")
        self.corridor = _tun("autopilot", "disruption_corridor", "r05")
        self.fly_distance = float(_tun("autopilot", "fly_to_distance", 5.0))

    # ── Status ───────────────────────────────────────────────────────

    @property
    def status(self) -> AutopilotStatus:
        return self.store.get().get("autopilot") or AutopilotStatus()

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def phase(self) -> str:
        return self.status.phase

    def _publish(self, **changes) -> None:
        current = self.status
        values = {
            "phase": current.phase,
            "is_active": current.is_active,
            "is_completed": current.is_completed,
            "was_interrupted": current.was_interrupted,
        }
        values.update(changes)
        self.store.set({"autopilot": AutopilotStatus(**values)})

    def _enter(self, phase: str) -> None:
        if phase not in PHASES:
            raise ValueError(f"unknown autopilot phase {phase!r}")
        self._publish(phase=phase)
        print(f"[AUTOPILOT] → {phase} (t={self.scheduler.now:.1f})")

    # ── Transitions ──────────────────────────────────────────────────

    def start(self) -> bool:
        """Begin a run.  Refused (returns False) while one is active."""
        if self.is_active:
            return False
        self._session += 1
        self.engine.hold(self.corridor)
        self.proxy.assign(AutopilotProxy.scripted())
        self.choreography = self.build_script(self._session)
        self.choreography.play()
        self._publish(phase="boot", is_active=True,
                      is_completed=False, was_interrupted=False)
        print(f"[AUTOPILOT] started session {self._session}")
        return True

    def interrupt(self) -> bool:
        """User took over: stop everything, snap to interactive defaults."""
        if not self.is_active:
            return False
        self._halt()
        self.proxy.assign(AutopilotProxy.neutral())
        self.selection.clear()
        self._publish(phase="idle", is_active=False,
                      is_completed=False, was_interrupted=True)
        print(f"[AUTOPILOT] interrupted at t={self.scheduler.now:.1f}")
        return True

    def complete(self) -> bool:
        """Natural end of the run.  Ignored unless a run is active."""
        if not self.is_active:
            return False
        if self.choreography is not None:
            self.choreography.sample(self.proxy, self.total)
        self._halt()
        self._publish(phase="idle", is_active=False,
                      is_completed=True, was_interrupted=False)
        print("[AUTOPILOT] complete")
        return True

    def reset(self) -> None:
        self._halt()
        self.choreography = None
        self.proxy.assign(AutopilotProxy.neutral())
        self.store.set({"autopilot": AutopilotStatus()})

    def replay(self) -> bool:
        self.executive.set(False)
        self.engine.stop()
        self.reset()
        return self.start()

    def update(self, now: float | None = None) -> AutopilotProxy:
        """Sample the tweens for this frame.  Returns the proxy."""
        if now is None:
            now = self.scheduler.now
        if self.is_active and self.choreography is not None:
            self.choreography.sample(self.proxy, self.choreography.elapsed(now))
        return self.proxy

    def _halt(self) -> None:
        # bumping the session turns any cue that slipped through into a no-op
        self._session += 1
        self.engine.release(self.corridor)
        if self.choreography is not None:
            self.choreography.kill()

    # ── Script ───────────────────────────────────────────────────────

    def build_script(self, session: int) -> Choreography:
        def cue(offset: float, name: str, action: Callable[[], None]) -> Cue:
            def guarded():
                if session == self._session:
                    action()
            return Cue(offset, name, guarded)

        cid = self.corridor
        cues = [
            cue(3.0, "pulse", self._pulse),
            cue(10.0, "focus", self._focus),
            cue(18.0, "disruption", self._disruption_start),
            cue(19.5, "disrupted", self._disrupted),
            cue(21.5, "rerouted", lambda: self._route_step(
                "congested", "info",
                "AI reroute activated — alternative path via Singapore hub")),
            cue(23.0, "recovered", lambda: self._route_step(
                "normal", "info",
                "On-time performance recovered +0.6% after reroute")),
            cue(24.0, "summary", self._summary),
            cue(27.0, "executive", lambda: self.executive.set(True)),
            cue(self.total, "complete", self.complete),
        ]

        tweens = [
            Tween(0.0, 2.5, {"globe_scale": 1.0}, "power2.out"),
            Tween(1.2, 1.8, {"ui_opacity": 1.0}, "power1.out"),
        ]
        loc = self.catalog.location(self.focus_location)
        if loc is not None:
            surface = lat_lng_to_vector3(loc.lat, loc.lng, GLOBE_RADIUS)
            eye = surface.normalize() * self.fly_distance
            look = surface * 0.3
            tweens += [
                Tween(10.0, 1.6, {"camera_x": eye.x, "camera_y": eye.y, "camera_z": eye.z,
                                  "target_x": look.x, "target_y": look.y, "target_z": look.z},
                      "expo.inOut"),
                Tween(11.6, 6.4, {"camera_x": 0.5, "camera_y": 0.3},
                      "sine.inOut", relative=True),
            ]
        tweens.append(
            Tween(24.0, 2.0, {"camera_x": CAMERA_HOME[0], "camera_y": CAMERA_HOME[1],
                              "camera_z": CAMERA_HOME[2], "target_x": 0.0,
                              "target_y": 0.0, "target_z": 0.0},
                  "expo.inOut"))
        if self.catalog.corridor(cid) is None:
            print(f"[AUTOPILOT] corridor {cid!r} not in catalog, "
                  "disruption beat will only log")
        return Choreography(self.scheduler, cues, tweens)

    def _pulse(self) -> None:
        self._enter("pulse")
        self.engine.start()

    def _focus(self) -> None:
        self._enter("focus")
        if self.catalog.location(self.focus_location) is not None:
            self.selection.set_selected(self.focus_location)

    def _disruption_start(self) -> None:
        self._enter("disruption")
        if self.catalog.corridor(self.corridor) is not None:
            self.engine.set_route_status(self.corridor, "congested")

    def _disrupted(self) -> None:
        corridor = self.catalog.corridor(self.corridor)
        if corridor is None:
            return
        self.engine.set_route_status(self.corridor, "disrupted")
        self.engine.add_event(TradeEvent(
            id=next_event_id("auto"),
            timestamp=format_timestamp(),
            label=f"Route disruption — {self.catalog.corridor_label(corridor)} corridor suspended",
            severity="critical",
            corridor_id=self.corridor,
        ))

    def _route_step(self, status: str, severity: str, label: str) -> None:
        if self.catalog.corridor(self.corridor) is None:
            return
        self.engine.set_route_status(self.corridor, status)
        self.engine.add_event(TradeEvent(
            id=next_event_id("auto"),
            timestamp=format_timestamp(),
            label=label,
            severity=severity,
            corridor_id=self.corridor,
        ))

    def _summary(self) -> None:
        self._enter("summary")
        self.selection.clear()
