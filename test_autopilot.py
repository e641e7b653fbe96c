"""test_autopilot.py — Headless verification of the scripted tour.

Tests:
1. Easing endpoints and tween sampling
2. start / interrupt: snap to neutral, nothing left scheduled
3. A full 30s run: phases, the r05 status sequence, final proxy
4. Interrupt mid-run stops every later mutation
5. complete / reset / replay
6. A corridor missing from the catalog
7. Holding a corridor against random escalation
8. The full run against the shipped event templates over many seeds

Sections 1-7 run on an info-only catalog so the random event stream
never touches r05.  Section 8 uses the real templates and relies on the
run holding r05.

Run: python test_autopilot.py      (or collect with pytest)
"""
from __future__ import annotations
import math, random, sys, tempfile, traceback
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib

from core import tuning
tuning.load()

from core.bootstrap import build_dashboard
from components.autopilot import CAMERA_HOME, AutopilotProxy
from components.state import TradeEvent, initial_state
from core.data import DEFAULT_PATH, catalog_from_dict
from core.store import Store
from logic.autopilot import AutopilotDirector, Tween
from logic.easing import EASINGS
from logic.selection import ExecutiveMode, Selection
from simulation.engine import SimulationEngine
from simulation.scheduler import TimerScheduler


# ── Test harness ─────────────────────────────────────────────────────

_passed = 0
_failed = 0

def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")

def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    msg = f"  [FAIL] {label}"
    if detail:
        msg += f" — {detail}"
    print(msg)

def check(cond: bool, label: str, detail: str = ""):
    if cond:
        ok(label)
    else:
        fail(label, detail)
        raise AssertionError(f"{label}: {detail}" if detail else label)


def approx(a: float, b: float, tol: float = 1e-6) -> bool:
    return math.isclose(a, b, abs_tol=tol)


DT = 1 / 60
QUIET_TEMPLATES = [
    {"label": "Berth allocation confirmed at {port}", "severity": "info",
     "requires_location": True},
]


# ── Fixtures ─────────────────────────────────────────────────────────

def _catalog(drop_corridor: str | None = None):
    with open(DEFAULT_PATH, "rb") as f:
        data = tomllib.load(f)
    data["event_templates"] = QUIET_TEMPLATES
    if drop_corridor is not None:
        data["corridors"] = [c for c in data["corridors"] if c["id"] != drop_corridor]
        data["reroutes"] = [r for r in data.get("reroutes", [])
                            if r["corridor"] != drop_corridor]
    return catalog_from_dict(data)


class Rig:
    """Store + clock + engine + director, plus recorders for r05 and phases."""

    def __init__(self, catalog=None, seed: int = 3):
        self.catalog = catalog or _catalog()
        self.store = Store(initial_state(self.catalog))
        self.clock = TimerScheduler()
        self.engine = SimulationEngine(self.store, self.clock, self.catalog,
                                       rng=random.Random(seed))
        self.selection = Selection(self.store)
        self.executive = ExecutiveMode(self.store)
        self.director = AutopilotDirector(self.store, self.clock, self.catalog,
                                          self.engine, self.selection, self.executive)
        self.r05: list[str] = []
        self.phases: list[str] = []
        self.store.subscribe(self._record)

    def _record(self, state, prev):
        now = state["route_statuses"].get("r05")
        if now != prev["route_statuses"].get("r05"):
            self.r05.append(now)
        if state["autopilot"].phase != prev["autopilot"].phase:
            self.phases.append(state["autopilot"].phase)

    def run_to(self, target: float):
        while self.clock.now < target - 1e-9:
            self.clock.advance(min(DT, target - self.clock.now))
            self.director.update()


# ═══════════════════════════════════════════════════════════════════════
#  1. Easing and tweens
# ═══════════════════════════════════════════════════════════════════════

def test_easing_and_tweens():
    print("\n--- 1. Easing & tweens ---")
    for name, fn in EASINGS.items():
        check(approx(fn(0.0), 0.0) and approx(fn(1.0), 1.0),
              f"1a: {name} maps 0→0 and 1→1", f"got {fn(0.0)}, {fn(1.0)}")
    check(EASINGS["power2.out"](0.5) > 0.5, "1b: out-curves lead linear at t=0.5")
    check(approx(EASINGS["sine.inOut"](0.5), 0.5), "1c: sine.inOut symmetric")

    proxy = AutopilotProxy(camera_x=1.0)
    tw = Tween(2.0, 2.0, {"camera_x": 0.5}, "linear", relative=True)
    tw.apply(proxy, 1.0)
    check(proxy.camera_x == 1.0 and tw.start_values is None,
          "1d: tween before its offset leaves the proxy alone")
    proxy.camera_x = 3.0  # moved by an earlier tween before this one began
    tw.apply(proxy, 3.0)
    check(approx(proxy.camera_x, 3.25), "1e: relative tween starts from the live value",
          f"got {proxy.camera_x}")
    tw.apply(proxy, 10.0)
    check(approx(proxy.camera_x, 3.5), "1f: tween clamps at its end",
          f"got {proxy.camera_x}")

    absolute = Tween(0.0, 0.0, {"globe_scale": 2.0})
    absolute.apply(proxy, 0.0)
    check(proxy.globe_scale == 2.0, "1g: zero-length tween jumps to target")


# ═══════════════════════════════════════════════════════════════════════
#  2. start / interrupt
# ═══════════════════════════════════════════════════════════════════════

def test_start_then_interrupt():
    print("\n--- 2. start → interrupt ---")
    rig = Rig()
    d = rig.director
    rig.selection.set_selected("rotterdam")

    check(d.start(), "2a: start accepted")
    check(d.is_active and d.phase == "boot", "2b: active in boot")
    check(d.proxy.globe_scale == 0.92 and d.proxy.ui_opacity == 0.0,
          "2c: proxy starts scripted")
    check(not d.start(), "2d: second start refused while active")
    check(rig.clock.pending_count(d.choreography) == 9, "2e: every cue scheduled",
          f"got {rig.clock.pending_count(d.choreography)}")

    check(d.interrupt(), "2f: interrupt accepted")
    s = d.status
    check(not s.is_active and s.was_interrupted and not s.is_completed,
          "2g: flags after interrupt", f"got {s}")
    check(s.phase == "idle", "2h: phase back to idle")
    check(d.proxy == AutopilotProxy.neutral(), "2i: proxy snapped to neutral")
    check(rig.selection.selected is None, "2j: selection cleared")
    check(rig.clock.pending_count(d.choreography) == 0,
          "2k: no choreography timers left")
    check(not d.interrupt(), "2l: interrupt when idle is a no-op")

    rig.run_to(35.0)
    check(rig.r05 == [] and not rig.engine.is_running,
          "2m: nothing scripted happens afterwards")


# ═══════════════════════════════════════════════════════════════════════
#  3. Full run
# ═══════════════════════════════════════════════════════════════════════

def test_full_run():
    print("\n--- 3. Full run ---")
    rig = Rig()
    d = rig.director
    d.start()

    rig.run_to(2.9)
    check(not rig.engine.is_running, "3a: simulation idle during boot")
    check(approx(d.proxy.globe_scale, 1.0) and 0.9 < d.proxy.ui_opacity < 1.0,
          "3b: globe settled, UI still fading in",
          f"scale={d.proxy.globe_scale} opacity={d.proxy.ui_opacity}")

    rig.run_to(3.05)
    check(rig.engine.is_running and d.phase == "pulse"
          and approx(d.proxy.ui_opacity, 1.0),
          "3c: pulse starts the simulation with the UI fully visible")

    rig.run_to(10.05)
    check(d.phase == "focus" and rig.selection.selected == "jebel-ali",
          "3d: focus selects Jebel Ali")

    rig.run_to(11.7)
    eye = d.proxy.camera
    check(approx(eye.length(), d.fly_distance, 0.05),
          "3e: camera flew to the focus distance", f"|eye|={eye.length():.3f}")

    rig.run_to(18.05)
    check(d.phase == "disruption" and rig.r05 == ["congested"],
          "3f: disruption begins with r05 congested", f"got {rig.r05}")

    rig.run_to(19.6)
    scripted = [e for e in rig.store["events"] if e.corridor_id == "r05"]
    check(rig.r05[-1] == "disrupted", "3g: r05 disrupted at 19.5")
    check(len(scripted) == 1 and scripted[0].severity == "critical"
          and "suspended" in scripted[0].label,
          "3h: critical disruption event published", f"got {scripted}")

    rig.run_to(24.05)
    check(d.phase == "summary" and rig.selection.selected is None,
          "3i: summary clears the selection")
    check(rig.r05 == ["congested", "disrupted", "congested", "normal"],
          "3j: exact r05 status sequence", f"got {rig.r05}")
    labels = [e.label for e in rig.store["events"] if e.corridor_id == "r05"]
    check(any("reroute activated" in l for l in labels)
          and any("recovered" in l for l in labels),
          "3k: reroute and recovery events published")

    rig.run_to(27.05)
    check(rig.executive.enabled, "3l: executive mode at 27s")

    rig.run_to(30.5)
    s = d.status
    check(s.is_completed and not s.is_active and not s.was_interrupted,
          "3m: completion flags", f"got {s}")
    check(rig.phases == ["boot", "pulse", "focus", "disruption", "summary", "idle"],
          "3n: phase sequence", f"got {rig.phases}")
    home = AutopilotProxy.neutral()
    check(all(approx(getattr(d.proxy, k), getattr(home, k), 1e-3)
              for k in ("camera_x", "camera_y", "camera_z",
                        "target_x", "target_y", "target_z")),
          "3o: camera back home", f"got {d.proxy.as_dict()}")
    check(approx(d.proxy.camera_x, CAMERA_HOME[0], 1e-3)
          and approx(d.proxy.globe_scale, 1.0) and approx(d.proxy.ui_opacity, 1.0),
          "3p: final proxy at scale 1, opacity 1")
    check(rig.engine.is_running, "3q: simulation keeps running after the tour")
    check(rig.clock.pending_count(d.choreography) == 0, "3r: choreography drained")


# ═══════════════════════════════════════════════════════════════════════
#  4. Interrupt mid-run
# ═══════════════════════════════════════════════════════════════════════

def test_interrupt_mid_run():
    print("\n--- 4. Interrupt mid-run ---")
    rig = Rig()
    d = rig.director
    d.start()
    rig.run_to(19.0)
    check(rig.r05 == ["congested"], "4a: disruption under way", f"got {rig.r05}")

    d.interrupt()
    marker = len(rig.r05)
    proxy_after = d.proxy.as_dict()
    rig.run_to(40.0)
    check(rig.r05[marker:] == [], "4b: no scripted route changes after interrupt",
          f"got {rig.r05[marker:]}")
    check(not rig.executive.enabled, "4c: executive cue never fired")
    check(not d.status.is_completed and d.status.was_interrupted,
          "4d: run counts as interrupted, not completed")
    check(d.proxy.as_dict() == proxy_after, "4e: proxy frozen at neutral")
    check(rig.engine.is_running, "4f: simulation left running for the user")


# ═══════════════════════════════════════════════════════════════════════
#  5. complete / reset / replay
# ═══════════════════════════════════════════════════════════════════════

def test_complete_reset_replay():
    print("\n--- 5. complete / reset / replay ---")
    rig = Rig()
    d = rig.director
    check(not d.complete(), "5a: complete ignored when idle")
    check(d.status.is_completed is False, "5b: ...and sets no flags")

    d.start()
    rig.run_to(12.0)
    check(d.complete(), "5c: early complete accepted")
    check(d.status.is_completed and d.phase == "idle", "5d: completed, idle")
    check(approx(d.proxy.camera_x, CAMERA_HOME[0], 1e-3),
          "5e: complete samples the end of the script")
    rig.run_to(30.0)
    check(rig.r05 == [], "5f: later cues dropped after complete", f"got {rig.r05}")

    d.reset()
    s = d.status
    check(s.phase == "idle" and not (s.is_active or s.is_completed or s.was_interrupted),
          "5g: reset restores pristine flags")

    rig.executive.set(True)
    check(d.replay(), "5h: replay starts a new run")
    check(not rig.executive.enabled, "5i: replay leaves executive mode")
    check(not rig.engine.is_running, "5j: replay stops the simulation until pulse")
    check(d.is_active and d.phase == "boot" and d.proxy.globe_scale == 0.92,
          "5k: replay begins from boot")
    start = rig.clock.now
    rig.run_to(start + 3.05)
    check(rig.engine.is_running, "5l: replayed run reaches pulse")

    d.replay()
    check(rig.clock.pending_count(d.choreography) == 9 and d.is_active,
          "5m: replay while active restarts cleanly")


def test_missing_corridor():
    print("\n--- 6. Corridor missing from catalog ---")
    rig = Rig(catalog=_catalog(drop_corridor="r05"))
    d = rig.director
    d.start()
    rig.run_to(31.0)
    check(rig.r05 == [], "6a: no route changes for an unknown corridor")
    check(d.status.is_completed, "6b: run still completes")


def _critical(corridor_id: str, severity: str = "critical") -> TradeEvent:
    return TradeEvent(id=f"t-{severity}", timestamp="00:00:00",
                      label=f"{corridor_id} {severity}", severity=severity,
                      corridor_id=corridor_id)


def test_corridor_hold():
    print("\n--- 7. Held corridor ---")
    rig = Rig()
    eng = rig.engine
    eng.start()
    eng._escalate(_critical("r05"))
    check(rig.store["route_statuses"]["r05"] == "disrupted"
          and "r05" in eng.pending_recoveries(),
          "7a: critical event disrupts r05 and arms a recovery")

    eng.hold("r05")
    check(eng.is_held("r05") and "r05" not in eng.pending_recoveries(),
          "7b: holding cancels the pending recovery",
          f"pending={eng.pending_recoveries()}")

    eng._escalate(_critical("r05", "warning"))
    rig.run_to(40.0)
    check(rig.store["route_statuses"]["r05"] == "disrupted",
          "7c: held corridor ignores escalation and never recovers",
          f"got {rig.store['route_statuses']['r05']}")

    eng.release("r05")
    eng._escalate(_critical("r05", "warning"))
    check(rig.store["route_statuses"]["r05"] == "congested"
          and "r05" in eng.pending_recoveries(),
          "7d: released corridor escalates again")

    eng.hold("r05")
    eng.hold("r01")
    eng.stop()
    check(eng.is_held("r05"), "7e: stop keeps holds")
    eng.release()
    check(not eng.is_held("r05") and not eng.is_held("r01"),
          "7f: release() with no id frees every corridor")

    d = rig.director
    d.start()
    check(eng.is_held(d.corridor), "7g: a run holds the disruption corridor")
    d.interrupt()
    check(not eng.is_held(d.corridor), "7h: interrupt hands it back")
    d.start()
    d.complete()
    check(not eng.is_held(d.corridor), "7i: complete hands it back")


SEEDS = range(60)

def test_full_run_live_events():
    print("\n--- 8. Full run on the shipped event templates ---")
    bad = []
    for seed in SEEDS:
        dash = build_dashboard(seed=seed, saves_dir=Path(tempfile.mkdtemp()))
        seen: list[str] = []

        def record(state, prev, seen=seen):
            now = state["route_statuses"].get("r05")
            if now != prev["route_statuses"].get("r05"):
                seen.append(now)

        dash.store.subscribe(record)
        dash.start(autopilot=True)
        while dash.scheduler.now < 29.9:
            dash.tick(DT)
        tour = list(seen)
        while dash.scheduler.now < 30.5:
            dash.tick(DT)
        if tour != ["congested", "disrupted", "congested", "normal"] \
                or not dash.autopilot.status.is_completed:
            bad.append((seed, tour))
        dash.shutdown()
    check(not bad, f"8a: exact r05 sequence for seeds {SEEDS.start}-{SEEDS.stop - 1}",
          f"deviating: {bad[:5]}")


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    sections = [
        ("Easing & tweens", test_easing_and_tweens),
        ("start → interrupt", test_start_then_interrupt),
        ("Full run", test_full_run),
        ("Interrupt mid-run", test_interrupt_mid_run),
        ("complete / reset / replay", test_complete_reset_replay),
        ("Missing corridor", test_missing_corridor),
        ("Held corridor", test_corridor_hold),
        ("Full run, live events", test_full_run_live_events),
    ]

    for name, fn in sections:
        try:
            fn()
        except AssertionError:
            print(f"  [ABORT] {name} — stopped at first failure")
        except Exception:
            _failed += 1
            print(f"\n  [CRASH] {name} — unhandled exception:")
            traceback.print_exc()

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Autopilot Tests: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
