"""Keyboard and mouse movement state for the camera."""

from __future__ import annotations

from collections.abc import Container
from dataclasses import dataclass
from enum import IntEnum

__all__ = ["Direction", "Movement", "KEY_BINDINGS", "SPEED_KEY"]


class Direction(IntEnum):
    """Bit index of each movement direction."""

    FORWARD = 0
    RIGHT = 1
    LEFT = 2
    BACK = 3
    UP = 4
    DOWN = 5


KEY_BINDINGS: dict[str, Direction] = {
    "w": Direction.FORWARD,
    "s": Direction.BACK,
    "d": Direction.RIGHT,
    "a": Direction.LEFT,
    "e": Direction.UP,
    "q": Direction.DOWN,
}
"""Key names that drive each direction."""

SPEED_KEY = "lshift"


@dataclass
class Movement:
    """Pending camera movement: held directions, speed boost and last mouse motion."""

    direction: int = 0
    speed: bool = False
    mouse_x: float = 0.0
    mouse_y: float = 0.0
    rotate: bool = False

    def apply_keys(self, pressed: Container[str]) -> None:
        """Set each direction bit and the speed boost from the keys held down."""
        for key, direction in KEY_BINDINGS.items():
            bit = 1 << direction
            if key in pressed:
                self.direction |= bit
            else:
                self.direction &= ~bit
        self.speed = SPEED_KEY in pressed

    def record_mouse(self, dx: float, dy: float) -> None:
        """Store a relative mouse motion and request a rotation."""
        self.mouse_x = dx
        self.mouse_y = dy
        self.rotate = True

    def is_moving(self, direction: Direction) -> bool:
        return bool(self.direction & (1 << direction))