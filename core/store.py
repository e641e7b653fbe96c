"""core/store.py — Observable key/value state container.

One ``Store`` instance is the shared state for a dashboard.  It is
passed explicitly to every component that reads or writes it (the
simulation engine, the autopilot director, the effect pools), so two
independent dashboards can live in one process::

    store = Store({"kpis": {}, "events": []})
    unsub = store.subscribe(lambda state, prev: print(state["kpis"]))
    store.set({"kpis": {"congestion": 34.0}})
    store.set(lambda s: {"events": [evt, *s["events"]]})
    unsub()

Rules:
  - State is a plain dict that is never mutated in place; ``set()``
    builds a new dict, so a snapshot from ``get()`` stays stable.
  - Listeners are called as ``listener(state, previous)`` after every
    ``set()``, in registration order, once per transition.
  - ``set()`` from inside a listener applies immediately (``get()``
    reflects it) but its notification is queued and delivered after
    the current transition reaches every listener (breadth-first, like
    an event-bus drain).
  - A listener that raises is reported and skipped; the others still
    run.
"""

from __future__ import annotations
import traceback
from typing import Any, Callable, Mapping, Union

Listener = Callable[[dict, dict], None]
Update = Union[Mapping[str, Any], Callable[[dict], Mapping[str, Any]]]

# Transitions flushed per outermost set() before we assume a listener loop.
FLUSH_LIMIT = 1000


class Store:
    def __init__(self, initial: Mapping[str, Any] | None = None):
        self._state: dict = dict(initial or {})
        self._listeners: list[Listener] = []
        self._pending: list[tuple[dict, dict]] = []
        self._flushing = False
        self.transitions = 0

    # ── Public API ───────────────────────────────────────────────────

    def get(self) -> dict:
        """Current state snapshot.  Do not mutate it."""
        return self._state

    def __getitem__(self, key: str) -> Any:
        return self._state[key]

    def set(self, update: Update) -> None:
        """Merge *update* (a mapping or ``fn(state) -> mapping``)."""
        partial = update(self._state) if callable(update) else update
        if not partial:
            return
        prev = self._state
        self._state = {**prev, **partial}
        self.transitions += 1
        self._pending.append((self._state, prev))
        if not self._flushing:
            self._flush()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*.  Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def listener_count(self) -> int:
        return len(self._listeners)

    # ── Notification ─────────────────────────────────────────────────

    def _flush(self) -> None:
        self._flushing = True
        delivered = 0
        try:
            while self._pending:
                if delivered >= FLUSH_LIMIT:
                    print(f"[STORE] dropped {len(self._pending)} notifications "
                          f"after {FLUSH_LIMIT} transitions — listener loop?")
                    self._pending.clear()
                    break
                state, prev = self._pending.pop(0)
                for listener in list(self._listeners):
                    try:
                        listener(state, prev)
                    except Exception as exc:
                        print(f"[STORE] listener error: {exc}")
                        traceback.print_exc()
                delivered += 1
        finally:
            self._flushing = False

    def __repr__(self) -> str:
        return (f"Store(keys={sorted(self._state)}, "
                f"listeners={len(self._listeners)})")
