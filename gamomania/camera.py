"""A free-flying right-handed camera and the matrices it needs."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

__all__ = ["Camera", "format_vec3", "look_at", "perspective"]

PITCH_LIMIT = 75.0


def _vec(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float32).reshape(3)
    return arr.copy()


def _normalize(v: np.ndarray) -> np.ndarray:
    with np.errstate(invalid="ignore", divide="ignore"):
        return (v / np.linalg.norm(v)).astype(np.float32)


def format_vec3(label: str, v: Sequence[float]) -> str:
    """Return a one-line description of a 3-vector."""
    return f"{label} => v={{{v[0]:.2f}, {v[1]:.2f}, {v[2]:.2f}}}"


def look_at(eye: Sequence[float], center: Sequence[float], up: Sequence[float]) -> np.ndarray:
    """Right-handed view matrix, row-major: ``M @ [x, y, z, 1]`` gives view space."""
    eye_v = _vec(eye)
    f = _normalize(_vec(center) - eye_v)
    s = _normalize(np.cross(f, _vec(up)))
    u = np.cross(s, f)
    m = np.identity(4, dtype=np.float32)
    m[0, :3] = s
    m[1, :3] = u
    m[2, :3] = -f
    m[0, 3] = -np.dot(s, eye_v)
    m[1, 3] = -np.dot(u, eye_v)
    m[2, 3] = np.dot(f, eye_v)
    return m


def perspective(fov_y: float, aspect: float, near_z: float, far_z: float) -> np.ndarray:
    """Right-handed perspective matrix (clip depth -1..1), row-major; ``fov_y`` in radians."""
    if aspect == 0:
        raise ValueError("aspect ratio must not be zero")
    if near_z == far_z:
        raise ValueError("near and far planes must differ")
    tan_half = math.tan(fov_y / 2.0)
    m = np.zeros((4, 4), dtype=np.float32)
    m[0, 0] = 1.0 / (aspect * tan_half)
    m[1, 1] = 1.0 / tan_half
    m[2, 2] = -(far_z + near_z) / (far_z - near_z)
    m[2, 3] = -(2.0 * far_z * near_z) / (far_z - near_z)
    m[3, 2] = -1.0
    return m


@dataclass
class Camera:
    """Camera position, orientation and projection settings; ``view`` is kept up to date."""

    fov: float = 75.0
    aspect: float = 800.0 / 600.0
    near_z: float = 0.1
    far_z: float = 128.0
    pos: np.ndarray = field(default_factory=lambda: _vec((0.0, 0.0, 3.0)))
    euler_angle: np.ndarray = field(default_factory=lambda: _vec((0.0, -90.0, 0.0)))
    up: np.ndarray = field(init=False)
    forward: np.ndarray = field(init=False)
    right: np.ndarray = field(init=False)
    view: np.ndarray = field(init=False)

    def __post_init__(self) -> None:
        self.pos = _vec(self.pos)
        self.euler_angle = _vec(self.euler_angle)
        up = _vec((0.0, 1.0, 0.0))
        # Aim at the scene centre.
        self.forward = _normalize(_vec((0.0, 0.0, 0.0)) - self.pos)
        self.right = np.cross(up, self.forward).astype(np.float32)
        self.up = np.cross(self.forward, self.right).astype(np.float32)
        self._update_view()

    def _update_view(self) -> None:
        self.view = look_at(self.pos, self.pos + self.forward, self.up)

    def set_pos(self, pos: Sequence[float]) -> None:
        self.pos = _vec(pos)
        self._update_view()

    def set_dir(self, direction: Sequence[float]) -> None:
        self.forward = _vec(direction)
        self._update_view()

    def set_dir_from_target(self, target: Sequence[float]) -> None:
        self.forward = _normalize(_vec(target) - self.pos)
        self._update_view()

    def set_pos_and_dir(self, pos: Sequence[float], direction: Sequence[float]) -> None:
        self.pos = _vec(pos)
        self.forward = _vec(direction)
        self._update_view()

    def set_pos_and_dir_from_target(self, pos: Sequence[float], target: Sequence[float]) -> None:
        self.pos = _vec(pos)
        self.forward = _normalize(_vec(target) - self.pos)
        self._update_view()

    def set_aspect_from_viewport(self, width: int, height: int) -> None:
        if height == 0:
            raise ValueError("viewport height must not be zero")
        self.aspect = float(width) / float(height)

    def set_z(self, near_z: float, far_z: float) -> None:
        self.near_z = near_z
        self.far_z = far_z

    def _shift(self, offset: np.ndarray) -> None:
        self.pos = (self.pos + offset).astype(np.float32)
        self._update_view()

    def move_forward(self, step: float) -> None:
        self._shift(self.forward * step)

    def move_backward(self, step: float) -> None:
        self._shift(-self.forward * step)

    def move_right(self, step: float) -> None:
        self._shift(self.right * step)

    def move_left(self, step: float) -> None:
        self._shift(-self.right * step)

    def move_up(self, step: float) -> None:
        self._shift(self.up * step)

    def move_down(self, step: float) -> None:
        self._shift(-self.up * step)

    def rotate(self, yaw_step: float, pitch_step: float) -> None:
        """Turn by yaw/pitch degrees; pitch is clamped and yaw wrapped to one turn."""
        pitch = float(self.euler_angle[0]) - pitch_step
        yaw = float(self.euler_angle[1]) + yaw_step
        pitch = max(-PITCH_LIMIT, min(PITCH_LIMIT, pitch))
        yaw = math.fmod(yaw, 360.0)
        self.euler_angle[0] = pitch
        self.euler_angle[1] = yaw

        yaw_r = math.radians(yaw)
        pitch_r = math.radians(pitch)
        self.forward = _vec(
            (
                math.cos(yaw_r) * math.cos(pitch_r),
                math.sin(pitch_r),
                math.sin(yaw_r) * math.cos(pitch_r),
            )
        )
        self.right = _normalize(np.cross(self.forward, self.up))
        self._update_view()

    def projection(self) -> np.ndarray:
        """Perspective matrix for the current fov (degrees), aspect and planes."""
        return perspective(math.radians(self.fov), self.aspect, self.near_z, self.far_z)