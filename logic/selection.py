"""logic/selection.py — Owners of the selection and summary-mode Store keys.

Nothing else writes ``selected_location``, ``hovered_location`` or
``executive``; the autopilot and the input layer go through these.
"""

from __future__ import annotations

from core.store import Store


class Selection:
    def __init__(self, store: Store):
        self.store = store

    @property
    def selected(self) -> str | None:
        return self.store.get().get("selected_location")

    @property
    def hovered(self) -> str | None:
        return self.store.get().get("hovered_location")

    def set_selected(self, location_id: str | None) -> None:
        if location_id != self.selected:
            self.store.set({"selected_location": location_id})

    def set_hovered(self, location_id: str | None) -> None:
        if location_id != self.hovered:
            self.store.set({"hovered_location": location_id})

    def clear(self) -> None:
        if self.selected is not None or self.hovered is not None:
            self.store.set({"selected_location": None, "hovered_location": None})


class ExecutiveMode:
    """The condensed summary layout shown at the end of a run."""

    def __init__(self, store: Store):
        self.store = store

    @property
    def enabled(self) -> bool:
        return bool(self.store.get().get("executive"))

    def set(self, value: bool) -> None:
        if bool(value) != self.enabled:
            self.store.set({"executive": bool(value)})

    def toggle(self) -> bool:
        self.set(not self.enabled)
        return self.enabled
