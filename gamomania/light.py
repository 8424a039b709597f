"""Scene lights and their upload to shader uniforms."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Sequence, Tuple, Union

__all__ = ["LIGHT_MAX", "Light", "LightLimitError", "LightType", "SceneLight"]

log = logging.getLogger(__name__)

LIGHT_MAX = 16

Vec3 = Tuple[float, float, float]
UniformValue = Union[int, float, Vec3]


class LightType(IntEnum):
    DIRECTIONAL = 0
    SPOT = 1
    POINT = 2
    AMBIENT = 3


def _vec3(values: Sequence[float]) -> Vec3:
    vec = tuple(float(c) for c in values)
    if len(vec) != 3:
        raise ValueError(f"expected 3 components, got {len(vec)}")
    return vec  # type: ignore[return-value]


@dataclass
class Light:
    """A light; only the fields that belong to its type are meaningful."""

    type: LightType
    pos: Vec3
    color: Vec3
    intensity: float
    direction: Vec3 = (0.0, 0.0, 0.0)
    constant: float = 0.0
    linear: float = 0.0
    quadratic: float = 0.0
    inner_cut_off: float = 0.0
    outer_cut_off: float = 0.0


class LightLimitError(RuntimeError):
    """The scene already holds its maximum number of lights."""


_UNIFORM_ARRAYS = {
    LightType.DIRECTIONAL: "directionalLights",
    LightType.POINT: "pointLights",
    LightType.AMBIENT: "ambientLights",
}


@dataclass
class SceneLight:
    """The lights of a scene, in the order they were added."""

    max_lights: int = LIGHT_MAX
    lights: list[Light] = field(default_factory=list)

    def _add(self, light: Light) -> Light:
        if len(self.lights) >= self.max_lights:
            log.info("Max number of light reached")
            raise LightLimitError(f"a scene holds at most {self.max_lights} lights")
        self.lights.append(light)
        return light

    def add_point_light(
        self,
        pos: Sequence[float],
        color: Sequence[float],
        intensity: float,
        linear: float,
        quadratic: float,
    ) -> Light:
        return self._add(
            Light(
                LightType.POINT,
                _vec3(pos),
                _vec3(color),
                float(intensity),
                constant=1.0,
                linear=float(linear),
                quadratic=float(quadratic),
            )
        )

    def add_spot_light(
        self,
        pos: Sequence[float],
        color: Sequence[float],
        intensity: float,
        direction: Sequence[float],
        inner_cut_off: float,
        outer_cut_off: float,
    ) -> Light:
        return self._add(
            Light(
                LightType.SPOT,
                _vec3(pos),
                _vec3(color),
                float(intensity),
                direction=_vec3(direction),
                inner_cut_off=float(inner_cut_off),
                outer_cut_off=float(outer_cut_off),
            )
        )

    def add_directional_light(
        self,
        pos: Sequence[float],
        color: Sequence[float],
        intensity: float,
        direction: Sequence[float],
    ) -> Light:
        return self._add(
            Light(
                LightType.DIRECTIONAL,
                _vec3(pos),
                _vec3(color),
                float(intensity),
                direction=_vec3(direction),
            )
        )

    def add_ambient_light(
        self, pos: Sequence[float], color: Sequence[float], intensity: float
    ) -> Light:
        return self._add(Light(LightType.AMBIENT, _vec3(pos), _vec3(color), float(intensity)))

    def uniform_values(self) -> dict[str, UniformValue]:
        """Shader uniform names and values for every light, then the count of each type."""
        counts = {kind: 0 for kind in LightType}
        values: dict[str, UniformValue] = {}
        for light in self.lights:
            index = counts[light.type]
            counts[light.type] += 1
            array = _UNIFORM_ARRAYS.get(light.type)
            if array is None:
                continue  # spot lights are counted but not uploaded yet
            prefix = f"{array}[{index}]"
            if light.type is not LightType.AMBIENT:
                values[f"{prefix}.pos"] = light.pos
            values[f"{prefix}.color"] = light.color
            values[f"{prefix}.intensity"] = light.intensity
            if light.type is LightType.DIRECTIONAL:
                values[f"{prefix}.dir"] = light.direction
            elif light.type is LightType.POINT:
                values[f"{prefix}.constant"] = light.constant
                values[f"{prefix}.linear"] = light.linear
                values[f"{prefix}.quadratic"] = light.quadratic
        values["pointLightsLen"] = counts[LightType.POINT]
        values["spotLightsLen"] = counts[LightType.SPOT]
        values["directionalLightsLen"] = counts[LightType.DIRECTIONAL]
        values["ambientLightsLen"] = counts[LightType.AMBIENT]
        return values

    def load(self, program: Any) -> None:
        """Set every light uniform on ``program``."""
        for name, value in self.uniform_values().items():
            location = program.uniform(name)
            if isinstance(value, int):
                program.set_int(location, value)
            elif isinstance(value, float):
                program.set_float(location, value)
            else:
                program.set_vec3(location, value)