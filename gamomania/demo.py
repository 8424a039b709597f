"""The demo scene: camera, shader program, model and lights."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from os import PathLike
from typing import Any, Optional

import numpy as np

from .camera import Camera
from .event import Direction, Movement
from .light import SceneLight
from .model import Model
from .shader import GL_FRAGMENT_SHADER, GL_VERTEX_SHADER, ShaderProgram, ShaderStage
from .texture import TextureBank

__all__ = ["BASE_SPEED", "DEFAULT_MODEL", "Demo", "camera_speed"]

log = logging.getLogger(__name__)

BASE_SPEED = 0.0025
"""Camera distance per millisecond."""
DEFAULT_MODEL = "backpack/backpack.obj"

GL_DEPTH_TEST = 0x0B71
GL_CULL_FACE = 0x0B44
GL_MULTISAMPLE = 0x809D


def camera_speed(delta_ms: float, boost: bool) -> float:
    """Distance travelled over ``delta_ms``; doubled with the speed boost."""
    speed = BASE_SPEED * float(delta_ms)
    return speed * 2.0 if boost else speed


@dataclass
class Demo:
    """Everything the demo draws, with the movement input that drives its camera."""

    gl: Any
    root: str | PathLike[str] = "."
    model_path: str = DEFAULT_MODEL
    viewport_width: int = 800
    viewport_height: int = 600
    cam: Camera = field(default_factory=Camera)
    movement: Movement = field(default_factory=Movement)
    scene_light: SceneLight = field(default_factory=SceneLight)
    program: Optional[ShaderProgram] = None
    tex_bank: Optional[TextureBank] = None
    model: Optional[Model] = None
    last_frame: int = -1

    def update(self, now_ms: int) -> None:
        """Move and turn the camera from the pending input."""
        delta = now_ms - self.last_frame
        self.last_frame = now_ms
        step = camera_speed(delta, self.movement.speed)
        moves = (
            (Direction.FORWARD, self.cam.move_forward),
            (Direction.BACK, self.cam.move_backward),
            (Direction.RIGHT, self.cam.move_right),
            (Direction.LEFT, self.cam.move_left),
            (Direction.UP, self.cam.move_up),
            (Direction.DOWN, self.cam.move_down),
        )
        for direction, move in moves:
            if self.movement.is_moving(direction):
                move(step)
        if self.movement.rotate:
            self.cam.rotate(self.movement.mouse_x, self.movement.mouse_y)
            self.movement.rotate = False

    def setup(self) -> None:
        """Create the camera, program, textures, model and lights."""
        self.cam = Camera()
        self.cam.fov = 75.0
        self.cam.set_aspect_from_viewport(self.viewport_width, self.viewport_height)
        self.cam.set_pos_and_dir_from_target((0.0, 0.0, 3.0), (0.0, 0.0, 0.0))

        stages = [
            ShaderStage("modelFragment.glsl", GL_FRAGMENT_SHADER),
            ShaderStage("modelVertex.glsl", GL_VERTEX_SHADER),
        ]
        try:
            self.program = ShaderProgram.build(stages, self.root, self.gl)
        finally:
            for stage in stages:
                stage.unload(self.gl)

        self.tex_bank = TextureBank(self.gl, root=self.root)
        self.model = Model.create(self.model_path, self.root, self.tex_bank, self.gl)

        lights = SceneLight()
        lights.add_ambient_light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 0.15)
        lights.add_directional_light(
            (0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 1.0, (0.5, -0.5, -0.5)
        )
        for x in (1.0, 0.0, -1.0):
            lights.add_point_light((x, 0.5, 0.5), (1.0, 1.0, 1.0), 0.9, 0.09, 0.032)
        lights.load(self.program)
        self.scene_light = lights

        for cap in (GL_DEPTH_TEST, GL_CULL_FACE, GL_MULTISAMPLE):
            self.gl.glEnable(cap)

    def render(self) -> None:
        """Upload the matrices and camera position, then draw the model."""
        if self.program is None or self.model is None:
            raise RuntimeError("demo is not set up")
        program = self.program
        program.use()
        model_mat = np.identity(4, dtype=np.float32)
        program.set_mat4(program.uniform("model"), model_mat)
        program.set_mat4(program.uniform("view"), self.cam.view)
        program.set_mat4(program.uniform("projection"), self.cam.projection())
        program.set_vec3(program.uniform("viewPos"), self.cam.pos)
        self.model.draw(program)

    def delete(self) -> None:
        """Release every resource the demo created."""
        self.scene_light.lights.clear()
        if self.tex_bank is not None:
            self.tex_bank.delete()
            self.tex_bank = None
        if self.model is not None:
            self.model.delete()
            self.model = None
        if self.program is not None:
            self.program.delete()
            self.program = None