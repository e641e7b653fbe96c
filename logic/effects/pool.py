"""logic/effects/pool.py — Shared lifecycle for short-lived visual entities.

Shockwave rings, predictive alerts, reroute overlays and weather cells
all follow the same life:

  1. **spawn** — a Store change (or the family's own interval timer)
     produces new entities.  A batch whose logical ``key`` already has
     a live entity is dropped.
  2. **animate** — each frame, ``elapsed = now − start_time``;
     negative means "not yet visible" (staggered start), progress > 1
     means expired, anything else goes through the family's pure
     ``visual()``.
  3. **cleanup** — expired entities leave the pool on the same frame
     they cross the threshold.

A family subclasses ``TransientPool`` and overrides ``triggered()``
(Store-driven spawns), ``visual()`` and, where its rules differ,
``is_expired()`` / ``holds_key()``.

    pool = ShockwavePool(store, scheduler, catalog)
    pool.attach()
    ...
    for entity, vis in pool.animate(scheduler.now):
        draw(entity, vis)
"""

from __future__ import annotations
import random
from typing import Generic, Iterable, Sequence, TypeVar

from components.catalog import Catalog
from components.effects import Transient, Visual
from core.store import Store
from simulation.scheduler import TimerScheduler

E = TypeVar("E", bound=Transient)

HIDDEN = Visual(visible=False, progress=0.0, opacity=0.0, reveal=0.0)


class TransientPool(Generic[E]):
    """Owns one family's entity list.  Nothing else adds or removes."""

    name = "fx"

    def __init__(self, store: Store, scheduler: TimerScheduler,
                 catalog: Catalog, rng: random.Random | None = None):
        self.store = store
        self.scheduler = scheduler
        self.catalog = catalog
        self.rng = rng or random.Random()
        self._entities: list[E] = []
        self._unsub = None
        self._seq = 0
        self.spawned = 0
        self.duplicates = 0

    # ── Lifecycle ────────────────────────────────────────────────────

    def attach(self) -> None:
        """Start listening to the Store (idempotent)."""
        if self._unsub is None:
            self._unsub = self.store.subscribe(self._on_state)

    def detach(self) -> None:
        """Stop listening and cancel every timer this pool armed."""
        if self._unsub is not None:
            self._unsub()
            self._unsub = None
        self.scheduler.cancel_owner(self)

    def clear(self) -> None:
        self._entities.clear()

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def live(self) -> tuple[E, ...]:
        """Read-only view for renderers."""
        return tuple(self._entities)

    def __len__(self) -> int:
        return len(self._entities)

    def holds_key(self, entity: E) -> bool:
        """Whether *entity* blocks new spawns with the same key."""
        return True

    def has_live_key(self, key: str) -> bool:
        return any(e.key == key and self.holds_key(e) for e in self._entities)

    # ── Spawning ─────────────────────────────────────────────────────

    def next_id(self, stem: str) -> str:
        self._seq += 1
        return f"{self.name}-{stem}-{self._seq}"

    def spawn(self, batch: Sequence[E]) -> list[E]:
        """Add *batch* unless one of its keys is already represented."""
        if not batch:
            return []
        if any(self.has_live_key(k) for k in {e.key for e in batch}):
            self.duplicates += 1
            return []
        self._entities.extend(batch)
        self.spawned += len(batch)
        return list(batch)

    def triggered(self, state: dict, prev: dict) -> Iterable[Sequence[E]]:
        """Batches to spawn in reaction to a Store transition."""
        return ()

    def _on_state(self, state: dict, prev: dict) -> None:
        for batch in self.triggered(state, prev):
            self.spawn(batch)

    # ── Animation ────────────────────────────────────────────────────

    def is_expired(self, entity: E, now: float) -> bool:
        return entity.progress(now) > 1.0

    def visual(self, entity: E, t: float, now: float) -> Visual:
        """Pure map from progress ``t`` in [0, 1] to what gets drawn."""
        return Visual(progress=t)

    def animate(self, now: float | None = None) -> list[tuple[E, Visual]]:
        """Drop expired entities and return ``(entity, visual)`` pairs."""
        if now is None:
            now = self.scheduler.now
        kept: list[E] = []
        frames: list[tuple[E, Visual]] = []
        for entity in self._entities:
            if self.is_expired(entity, now):
                continue
            kept.append(entity)
            if entity.elapsed(now) < 0:
                frames.append((entity, HIDDEN))
                continue
            t = min(1.0, entity.progress(now))
            frames.append((entity, self.visual(entity, t, now)))
        self._entities = kept
        return frames
