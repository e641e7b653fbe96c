"""test_dashboard.py — Whole-dashboard and support-module checks.

Tests:
1. Catalog loads and cross-references resolve
2. Formatters
3. Selection and executive mode
4. FPS monitor and the reduced-effects latch
5. Idle timer
6. Sound board cues and the persisted mute flag
7. A headless 60s session checked every frame, then shut down

Run: python test_dashboard.py      (or collect with pytest)
"""
from __future__ import annotations
import json, re, sys, tempfile, traceback
from pathlib import Path

from core import tuning
tuning.load()

from components.state import TradeEvent, initial_state
from core import save
from core.bootstrap import build_dashboard
from core.data import catalog_from_dict, load_catalog
from core.store import Store
from logic.formatters import (format_countdown, format_hours, format_index,
                              format_kpi, format_percent, format_teu,
                              format_timestamp)
from logic.idle import IdleTimer
from logic.performance import FPSMonitor
from logic.selection import ExecutiveMode, Selection
from logic.sound import SoundBoard
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


DT = 1 / 60


# ═══════════════════════════════════════════════════════════════════════
#  1. Catalog
# ═══════════════════════════════════════════════════════════════════════

def test_catalog():
    print("\n--- 1. Catalog ---")
    cat = load_catalog()
    check(len(cat.locations) == 15, "1a: 15 locations", f"got {len(cat.locations)}")
    check(len(cat.corridors) == 24, "1b: 24 corridors", f"got {len(cat.corridors)}")
    check(len(cat.kpis) == 6, "1c: 6 KPIs", f"got {len(cat.kpis)}")
    check(len(cat.event_templates) == 15, "1d: 15 event templates")

    dangling = [c.id for c in cat.corridors
                if cat.location(c.origin) is None or cat.location(c.destination) is None]
    check(not dangling, "1e: every corridor endpoint resolves", f"dangling {dangling}")
    bad_waypoints = [r.corridor for r in cat.reroutes
                     if any(cat.location(w) is None for w in r.waypoints)]
    check(not bad_waypoints, "1f: every reroute waypoint resolves",
          f"bad {bad_waypoints}")
    check(all(k.min <= cat.initial_kpis()[k.id] <= k.max for k in cat.kpis),
          "1g: initial KPIs inside their ranges")

    r05 = cat.corridor("r05")
    check(cat.corridor_label(r05) == "Jebel Ali–Rotterdam",
          "1h: corridor label joins port names", f"got {cat.corridor_label(r05)}")
    check(cat.location("atlantis") is None and cat.corridor(None) is None,
          "1i: unknown ids resolve to None")

    try:
        catalog_from_dict({"corridors": [{"id": "x", "origin": "a",
                                          "destination": "b", "status": "closed"}]})
        check(False, "1j: bad corridor status rejected")
    except ValueError:
        ok("1j: bad corridor status rejected")


# ═══════════════════════════════════════════════════════════════════════
#  2. Formatters
# ═══════════════════════════════════════════════════════════════════════

def test_formatters():
    print("\n--- 2. Formatters ---")
    check(format_teu(47250) == "47.2K" or format_teu(47250) == "47.3K",
          "2a: TEU in thousands", f"got {format_teu(47250)}")
    check(format_teu(950) == "950", "2b: small TEU stays whole")
    check(format_percent(91.24) == "91.2%", "2c: percent one decimal")
    check(format_hours(18.0) == "18.0h", "2d: hours one decimal")
    check(format_index(71.6) == "72", "2e: index rounds")
    check(format_kpi(5, "no-such-format") == "5", "2f: unknown format falls back to index")
    check(format_countdown(125) == "2m 5s", "2g: minutes and seconds")
    check(format_countdown(42.7) == "42s", "2h: seconds only under a minute")
    check(format_countdown(-3) == "0s", "2i: negative clamps to zero")
    check(re.fullmatch(r"\d\d:\d\d:\d\d", format_timestamp(0)) is not None,
          "2j: timestamp is HH:MM:SS")


# ═══════════════════════════════════════════════════════════════════════
#  3. Selection
# ═══════════════════════════════════════════════════════════════════════

def test_selection():
    print("\n--- 3. Selection & executive ---")
    store = Store(initial_state(load_catalog()))
    sel = Selection(store)
    sel.set_selected("busan")
    n = store.transitions
    sel.set_selected("busan")
    check(sel.selected == "busan" and store.transitions == n,
          "3a: re-selecting the same port writes nothing")
    sel.set_hovered("santos")
    sel.clear()
    check(sel.selected is None and sel.hovered is None, "3b: clear drops both")
    n = store.transitions
    sel.clear()
    check(store.transitions == n, "3c: clearing an empty selection writes nothing")

    ex = ExecutiveMode(store)
    check(ex.toggle() is True and ex.enabled, "3d: toggle on")
    check(ex.toggle() is False and not store["executive"], "3e: toggle off")


# ═══════════════════════════════════════════════════════════════════════
#  4. FPS monitor
# ═══════════════════════════════════════════════════════════════════════

def _feed(monitor: FPSMonitor, start: float, fps: int, seconds: int) -> float:
    frames = fps * seconds
    for k in range(1, frames + 1):
        monitor.frame(start + k / fps)
    return start + seconds


def test_fps_monitor():
    print("\n--- 4. FPS monitor ---")
    store = Store(initial_state(load_catalog()))
    mon = FPSMonitor(store, window=1.0, low_fps=45, low_windows=2)
    mon.frame(0.0)

    t = _feed(mon, 0.0, 60, 1)
    check(store["fps"] == 60 and not store["reduced_effects"], "4a: healthy window")

    t = _feed(mon, t, 30, 1)
    check(store["fps"] == 30 and not store["reduced_effects"],
          "4b: one slow window is tolerated")
    t = _feed(mon, t, 60, 1)
    t = _feed(mon, t, 30, 1)
    check(not store["reduced_effects"], "4c: streak resets on a healthy window")

    t = _feed(mon, t, 30, 1)
    check(store["reduced_effects"], "4d: two slow windows in a row reduce effects")
    _feed(mon, t, 60, 2)
    check(store["fps"] == 60 and store["reduced_effects"],
          "4e: reduced effects stay latched after recovery")


# ═══════════════════════════════════════════════════════════════════════
#  5. Idle timer
# ═══════════════════════════════════════════════════════════════════════

def test_idle_timer():
    print("\n--- 5. Idle timer ---")
    clock = TimerScheduler()
    idle = IdleTimer(clock, timeout=6.0)
    idle.start()
    clock.advance(5.9)
    check(not idle.is_idle, "5a: not idle before the timeout")
    idle.poke()
    clock.advance(5.9)
    check(not idle.is_idle, "5b: poke restarts the countdown")
    check(clock.pending_count(idle) == 1, "5c: a single idle timer is armed")
    clock.advance(0.2)
    check(idle.is_idle, "5d: idle after six quiet seconds")
    idle.poke()
    check(not idle.is_idle, "5e: activity ends idling")
    idle.stop()
    check(clock.pending_count(idle) == 0, "5f: stop disarms")


# ═══════════════════════════════════════════════════════════════════════
#  6. Sound
# ═══════════════════════════════════════════════════════════════════════

def test_sound_board():
    print("\n--- 6. Sound board ---")
    saves = Path(tempfile.mkdtemp())
    store = Store(initial_state(load_catalog()))
    board = SoundBoard(store, saves_dir=saves)
    check(not board.muted, "6a: unmuted without prefs")

    board.attach()
    store.set({"events": (TradeEvent(id="t-2", timestamp="00:00:02",
                                     label="b", severity="critical"),
                          TradeEvent(id="t-1", timestamp="00:00:01",
                                     label="a", severity="warning"))})
    check(board.played["alert"] == 1 and board.played["warning"] == 1,
          "6b: one cue per new event by severity", f"got {board.played}")
    check(board.play("ping") is False, "6c: no mixer → cue counted, silent")

    try:
        board.play("kazoo")
        check(False, "6d: unknown cue rejected")
    except ValueError:
        ok("6d: unknown cue rejected")

    check(board.toggle_mute() is True and store["muted"], "6e: mute toggles")
    prefs = json.loads((saves / save.PREFS_NAME).read_text())
    check(prefs == {"sound_muted": True}, "6f: mute persisted", f"got {prefs}")

    fresh = SoundBoard(Store(initial_state(load_catalog())), saves_dir=saves)
    check(fresh.muted, "6g: a new board restores the mute flag")

    (saves / save.PREFS_NAME).write_text("{not json")
    check(save.load_prefs(saves) == {} and not save.load_muted(saves),
          "6h: unreadable prefs fall back to defaults")
    board.detach()


# ═══════════════════════════════════════════════════════════════════════
#  7. Headless session
# ═══════════════════════════════════════════════════════════════════════

def test_headless_session():
    print("\n--- 7. Headless session ---")
    dash = build_dashboard(seed=11, saves_dir=Path(tempfile.mkdtemp()))
    cat = dash.catalog
    dash.start()
    dash.start()  # second start is a no-op
    check(dash.autopilot.is_active, "7a: autopilot running on start")
    check(len(dash.weather) == 3, "7b: three seeded weather cells",
          f"got {len(dash.weather)}")

    problems: list[str] = []
    peak = {"weather": 0, "alerts": 0, "events": 0}
    for frame in range(60 * 60):
        dash.tick(DT)
        now = dash.scheduler.now
        for pool in dash.pools:
            pool.animate(now)
        state = dash.store.get()
        for k in cat.kpis:
            v = state["kpis"][k.id]
            if not k.min <= v <= k.max:
                problems.append(f"{k.id}={v} at t={now:.1f}")
        peak["weather"] = max(peak["weather"], len(dash.weather))
        peak["alerts"] = max(peak["alerts"], len(dash.alerts.unresolved()))
        peak["events"] = max(peak["events"], len(state["events"]))

    check(not problems, "7c: KPIs stayed in range every frame", f"{problems[:3]}")
    check(peak["weather"] <= 5, "7d: at most five weather cells", f"peak {peak}")
    check(peak["alerts"] <= 3, "7e: at most three unresolved alerts", f"peak {peak}")
    check(0 < peak["events"] <= 50, "7f: ticker filled and capped", f"peak {peak}")
    check(dash.autopilot.status.is_completed, "7g: tour completed")
    check(dash.executive.enabled, "7h: tour left executive mode on")
    check(dash.store["route_statuses"].get("r05") in ("normal", "congested", "disrupted"),
          "7i: tour touched r05")
    check(sum(dash.sound.played.values()) > 0, "7j: events produced sound cues")
    check(dash.store["fps"] == 60 and not dash.store["reduced_effects"],
          "7k: steady 60 FPS keeps full effects", f"fps={dash.store['fps']}")

    dash.shutdown()
    check(not dash.engine.is_running, "7l: shutdown stops the simulation")
    check(dash.scheduler.pending_count() == 0, "7m: no timers survive shutdown",
          f"left {dash.scheduler.debug_dump()}")
    before = dash.store.transitions
    dash.scheduler.advance(120.0)
    check(dash.store.transitions == before, "7n: nothing writes after shutdown")


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    sections = [
        ("Catalog", test_catalog),
        ("Formatters", test_formatters),
        ("Selection & executive", test_selection),
        ("FPS monitor", test_fps_monitor),
        ("Idle timer", test_idle_timer),
        ("Sound board", test_sound_board),
        ("Headless session", test_headless_session),
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
    print(f"  Dashboard Tests: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
