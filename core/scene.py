"""
core/scene.py — Scene interface

A Scene is one full-window view.  ``App`` keeps a stack of them; only
the top one receives input, updates and draw calls.

Lifecycle contract: anything a scene arms in ``on_enter`` (timers,
Store subscriptions) it disarms in ``on_exit``.  The app calls
``on_exit`` on every remaining scene when the window closes.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import pygame
    from core.app import App


class Scene:
    def on_enter(self, app: App) -> None:
        """Became the top scene."""

    def on_exit(self, app: App) -> None:
        """Covered, popped, or the app is quitting."""

    def handle_event(self, event: pygame.event.Event, app: App) -> None:
        """Pointer events arrive with ``pos`` in design-surface pixels."""

    def update(self, dt: float, app: App) -> None:
        """Advance by *dt* seconds of (capped) wall time."""

    def draw(self, surface: pygame.Surface, app: App) -> None:
        """Render onto the design surface."""
