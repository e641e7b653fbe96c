"""
core/app.py — Pygame window and frame loop

Owns the display, the frame clock and input dispatch.  Scenes draw
onto a fixed-size design surface which is stretched to whatever size
the window currently has; pointer positions are mapped back into
design coordinates before a scene sees them.

    app = App(title="Trade Network", width=1280, height=720)
    app.push_scene(DashboardScene(dashboard))
    app.run()

Frame times are capped at ``display.max_dt`` so dragging or minimising
the window does not fast-forward the simulation clock.
"""

from __future__ import annotations
import pygame
from core.scene import Scene
from core.tuning import get as _tun

POINTER_EVENTS = (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP, pygame.MOUSEMOTION)
FINGER_EVENTS = (pygame.FINGERDOWN, pygame.FINGERUP, pygame.FINGERMOTION)


class App:
    def __init__(self, title: str = "Trade Network", width: int = 1280, height: int = 720):
        pygame.init()
        self.title = title
        self.design_size = (width, height)
        self.canvas = pygame.Surface(self.design_size)
        self._window_size = (width, height)
        self.screen = pygame.display.set_mode(self._window_size, pygame.RESIZABLE)
        pygame.display.set_caption(title)

        self.clock = pygame.time.Clock()
        self.fps = int(_tun("display", "fps", 60))
        self.max_dt = float(_tun("display", "max_dt", 0.1))
        self.dt = 0.0
        self.frame = 0
        self.running = True
        self.fullscreen = False
        self._scenes: list[Scene] = []

        self.font = pygame.font.SysFont("monospace", 14)
        self.font_sm = pygame.font.SysFont("monospace", 11)
        self.font_lg = pygame.font.SysFont("monospace", 20)

    @property
    def size(self) -> tuple[int, int]:
        return self.design_size

    # ── Scenes ───────────────────────────────────────────────────────

    @property
    def scene(self) -> Scene | None:
        return self._scenes[-1] if self._scenes else None

    def push_scene(self, scene: Scene):
        if self.scene is not None:
            self.scene.on_exit(self)
        self._scenes.append(scene)
        scene.on_enter(self)

    def pop_scene(self) -> Scene | None:
        if not self._scenes:
            return None
        top = self._scenes.pop()
        top.on_exit(self)
        if self.scene is not None:
            self.scene.on_enter(self)
        return top

    # ── Input mapping ────────────────────────────────────────────────

    def to_design(self, pos) -> tuple[int, int]:
        """Window pixel → design-surface pixel."""
        ww, wh = self.screen.get_size()
        dw, dh = self.design_size
        return int(pos[0] * dw / max(1, ww)), int(pos[1] * dh / max(1, wh))

    def _map_event(self, event: pygame.event.Event) -> pygame.event.Event:
        if event.type in POINTER_EVENTS:
            attrs = {k: v for k, v in event.dict.items() if k != "pos"}
            attrs["pos"] = self.to_design(event.pos)
            return pygame.event.Event(event.type, **attrs)
        if event.type in FINGER_EVENTS:
            # finger coordinates are normalised 0..1 over the window
            attrs = dict(event.dict)
            attrs["pos"] = (int(event.x * self.design_size[0]),
                            int(event.y * self.design_size[1]))
            return pygame.event.Event(event.type, **attrs)
        return event

    def _handle_window(self, event: pygame.event.Event) -> bool:
        """Window-level events the app consumes itself."""
        if event.type == pygame.QUIT:
            self.running = False
            return True
        if event.type == pygame.KEYDOWN and event.key == pygame.K_F11:
            self.toggle_fullscreen()
            return True
        if event.type == pygame.VIDEORESIZE and not self.fullscreen:
            self._window_size = (event.w, event.h)
            self.screen = pygame.display.set_mode(self._window_size, pygame.RESIZABLE)
            return True
        return False

    # ── Frame loop ───────────────────────────────────────────────────

    def step(self) -> None:
        """Run one frame: input, update, draw, present."""
        self.dt = min(self.clock.tick(self.fps) / 1000.0, self.max_dt)
        self.frame += 1

        for event in pygame.event.get():
            if self._handle_window(event) or self.scene is None:
                continue
            self.scene.handle_event(self._map_event(event), self)

        scene = self.scene
        if scene is not None:
            scene.update(self.dt, self)
            scene.draw(self.canvas, self)

        pygame.transform.scale(self.canvas, self.screen.get_size(), self.screen)
        pygame.display.flip()
        if self.frame % self.fps == 0:
            pygame.display.set_caption(f"{self.title} — {self.clock.get_fps():.0f} FPS")

    def run(self):
        try:
            while self.running:
                self.step()
        finally:
            while self._scenes:
                self._scenes.pop().on_exit(self)
            pygame.quit()

    def toggle_fullscreen(self):
        self.fullscreen = not self.fullscreen
        if self.fullscreen:
            self.screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
        else:
            self.screen = pygame.display.set_mode(self._window_size, pygame.RESIZABLE)
        print(f"[APP] fullscreen {'on' if self.fullscreen else 'off'}")

    # ── Text helpers ─────────────────────────────────────────────────

    def draw_text(self, surface: pygame.Surface, text: str, x: int, y: int,
                  color=(255, 255, 255), font=None) -> pygame.Rect:
        """Blit *text* at (x, y).  Returns the rect for stacking rows."""
        img = (font or self.font).render(text, True, color)
        return surface.blit(img, (x, y))

    def draw_text_bg(self, surface: pygame.Surface, text: str, x: int, y: int,
                     color=(255, 255, 255), bg=(0, 0, 0, 160), font=None,
                     pad: int = 2) -> pygame.Rect:
        """Like ``draw_text`` over a translucent plate (map labels)."""
        img = (font or self.font).render(text, True, color)
        plate = pygame.Surface((img.get_width() + pad * 2, img.get_height() + pad * 2),
                               pygame.SRCALPHA)
        plate.fill(bg)
        surface.blit(plate, (x - pad, y - pad))
        return surface.blit(img, (x, y))
