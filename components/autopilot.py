"""components.autopilot — The bag of scalars the renderer samples each frame."""

from __future__ import annotations
from dataclasses import dataclass, fields

from pygame.math import Vector3

CAMERA_HOME = (3.1, 2.5, -4.5)


@dataclass
class AutopilotProxy:
    """Camera position, look-at target, globe scale and UI opacity.

    Written only by the autopilot director; read by everyone else.
    """
    camera_x: float = CAMERA_HOME[0]
    camera_y: float = CAMERA_HOME[1]
    camera_z: float = CAMERA_HOME[2]
    target_x: float = 0.0
    target_y: float = 0.0
    target_z: float = 0.0
    globe_scale: float = 1.0
    ui_opacity: float = 1.0

    @classmethod
    def scripted(cls) -> "AutopilotProxy":
        """Values a run starts from: globe slightly shrunk, UI hidden."""
        return cls(globe_scale=0.92, ui_opacity=0.0)

    @classmethod
    def neutral(cls) -> "AutopilotProxy":
        """Interactive defaults after an interrupt."""
        return cls()

    @property
    def camera(self) -> Vector3:
        return Vector3(self.camera_x, self.camera_y, self.camera_z)

    @property
    def target(self) -> Vector3:
        return Vector3(self.target_x, self.target_y, self.target_z)

    def assign(self, other: "AutopilotProxy") -> None:
        """Copy every scalar from *other* in place (renderers hold refs)."""
        for f in fields(self):
            setattr(self, f.name, getattr(other, f.name))

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
