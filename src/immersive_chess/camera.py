"""
Camera focus model.

Driven once per rendered frame. The orbit control's target eases toward either the
board centre (CENTERED) or the cursor (FOLLOW). In FOLLOW the camera body is moved by
the same frame-to-frame delta as the target, so manual orbit/zoom offsets survive.
The previous-target tracker is resynchronised on every mode switch so a switch
never produces a one-frame jump.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .config import SETTINGS
from .oracle import WHITE


@dataclass(frozen=True)
class Vec3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, k: float) -> "Vec3":
        return Vec3(self.x * k, self.y * k, self.z * k)

    def lerp(self, to: "Vec3", alpha: float) -> "Vec3":
        return self + (to - self).scale(alpha)

    def distance_to(self, other: "Vec3") -> float:
        d = other - self
        return (d.x * d.x + d.y * d.y + d.z * d.z) ** 0.5

    def as_list(self) -> list[float]:
        return [self.x, self.y, self.z]


BOARD_CENTER = Vec3(0.0, 0.0, 0.0)
CAMERA_HEIGHT = 8.0
CAMERA_DISTANCE = 8.0


class CameraMode(str, Enum):
    CENTERED = "centered"
    FOLLOW = "follow"

    @classmethod
    def parse(cls, value: str) -> "CameraMode":
        key = str(value or "").strip().lower()
        aliases = {"orbit": cls.CENTERED, "embodied": cls.FOLLOW}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown camera mode '{value}'. Expected 'centered' or 'follow'.") from None


@dataclass
class OrbitControl:
    """The manual orbit control: a look-at target plus the camera body position."""

    target: Vec3 = BOARD_CENTER
    position: Vec3 = Vec3(0.0, CAMERA_HEIGHT, -CAMERA_DISTANCE)


class CameraFocusModel:
    def __init__(
        self,
        control: OrbitControl | None = None,
        mode: CameraMode = CameraMode.CENTERED,
        k_center: float | None = None,
        k_follow: float | None = None,
    ):
        self.control = control or OrbitControl()
        self.mode = mode
        self.k_center = SETTINGS.camera_k_center if k_center is None else k_center
        self.k_follow = SETTINGS.camera_k_follow if k_follow is None else k_follow
        self._prev_target = self.control.target

    @property
    def focus_point(self) -> Vec3:
        return self.control.target

    def set_mode(self, mode: CameraMode) -> None:
        self.mode = mode
        self._prev_target = self.control.target

    def orbit(self, target: Vec3 | None = None, position: Vec3 | None = None) -> None:
        """Apply a manual orbit, pan or zoom; in follow mode the new offset is kept from here on."""
        if target is not None:
            self.control.target = target
        if position is not None:
            self.control.position = position
        self._prev_target = self.control.target

    def reset_for_side(self, side: str) -> None:
        """Put the camera behind the given side, looking at the board centre."""
        z = -CAMERA_DISTANCE if side == WHITE else CAMERA_DISTANCE
        self.control.position = Vec3(0.0, CAMERA_HEIGHT, z)
        self.control.target = BOARD_CENTER
        self._prev_target = BOARD_CENTER

    def step(self, dt: float, cursor_world: Vec3) -> Vec3:
        """Advance one frame of dt seconds; returns the new focus point."""
        if dt <= 0:
            return self.control.target
        if self.mode is CameraMode.FOLLOW:
            alpha = min(1.0, self.k_follow * dt)
            self.control.target = self.control.target.lerp(cursor_world, alpha)
            self.control.position = self.control.position + (self.control.target - self._prev_target)
        else:
            alpha = min(1.0, self.k_center * dt)
            self.control.target = self.control.target.lerp(BOARD_CENTER, alpha)
        self._prev_target = self.control.target
        return self.control.target

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "focus_point": self.control.target.as_list(),
            "camera_position": self.control.position.as_list(),
        }
