"""logic/sound.py — Short synthesized cues for ticker events.

    board = SoundBoard(store)          # restores the mute flag from prefs
    board.attach()                     # listen for new events
    board.toggle_mute()                # flips + persists

Critical events play an alert, warnings a two-note warning, info a
ping; a resolved prediction plays a chime.  Tones are built once into
``pygame.mixer.Sound`` buffers.  Without an initialised mixer (headless
runs, CI) cues are still counted in ``played`` but make no noise.
"""

from __future__ import annotations
import array
import math
from pathlib import Path

import pygame

from components.state import new_events
from core import save
from core.store import Store

# cue name → [(frequency Hz, seconds)], played back to back
TONES: dict[str, list[tuple[float, float]]] = {
    "alert": [(880.0, 0.12), (660.0, 0.12), (880.0, 0.16)],
    "warning": [(520.0, 0.14), (440.0, 0.18)],
    "ping": [(1320.0, 0.08)],
    "resolve": [(660.0, 0.1), (990.0, 0.18)],
}

SEVERITY_CUES = {"critical": "alert", "warning": "warning", "info": "ping"}
VOLUME = 0.25


def synth_samples(notes: list[tuple[float, float]], rate: int,
                  channels: int = 1) -> array.array:
    """16-bit PCM for *notes* with a short linear fade on each note."""
    out = array.array("h")
    for freq, seconds in notes:
        n = int(rate * seconds)
        fade = max(1, int(rate * 0.01))
        for i in range(n):
            env = min(1.0, i / fade, (n - i) / fade)
            value = int(32767 * VOLUME * env * math.sin(math.tau * freq * i / rate))
            for _ in range(channels):
                out.append(value)
    return out


class SoundBoard:
    def __init__(self, store: Store, saves_dir: Path | None = None):
        self.store = store
        self.saves_dir = saves_dir
        self.played: dict[str, int] = {name: 0 for name in TONES}
        self._sounds: dict[str, "pygame.mixer.Sound"] = {}
        self._unsub = None
        self.store.set({"muted": save.load_muted(saves_dir)})

    @property
    def muted(self) -> bool:
        return bool(self.store.get().get("muted"))

    # ── Lifecycle ────────────────────────────────────────────────────

    def attach(self) -> None:
        if self._unsub is None:
            self._unsub = self.store.subscribe(self._on_state)

    def detach(self) -> None:
        if self._unsub is not None:
            self._unsub()
            self._unsub = None

    def load(self) -> int:
        """Synthesize every cue for the current mixer.  Returns count."""
        init = pygame.mixer.get_init()
        if not init:
            print("[SOUND] mixer not initialised, cues will be silent")
            return 0
        rate, _size, channels = init
        for name, notes in TONES.items():
            samples = synth_samples(notes, rate, channels)
            self._sounds[name] = pygame.mixer.Sound(buffer=samples.tobytes())
        print(f"[SOUND] {len(self._sounds)} cues at {rate} Hz")
        return len(self._sounds)

    # ── Playback ─────────────────────────────────────────────────────

    def play(self, name: str) -> bool:
        """Play cue *name*.  Returns True if it reached the mixer."""
        if name not in TONES:
            raise ValueError(f"unknown sound cue {name!r}")
        self.played[name] += 1
        if self.muted:
            return False
        sound = self._sounds.get(name)
        if sound is None:
            return False
        sound.play()
        return True

    def on_alert_resolved(self, alert) -> None:
        self.play("resolve")

    def toggle_mute(self) -> bool:
        muted = not self.muted
        self.store.set({"muted": muted})
        save.save_muted(muted, self.saves_dir)
        print(f"[SOUND] {'muted' if muted else 'unmuted'}")
        return muted

    def _on_state(self, state: dict, prev: dict) -> None:
        for event in reversed(new_events(state, prev)):
            self.play(SEVERITY_CUES.get(event.severity, "ping"))
