"""Shader stage compilation, program linking and uniform lookup.

The ``gl`` object handed to these functions exposes OpenGL entry points with
plain Python signatures:

* ``glCreateShader(type) -> int``, ``glShaderSource(shader, text)``,
  ``glCompileShader(shader)``, ``glGetShaderiv(shader, pname) -> int``,
  ``glGetShaderInfoLog(shader) -> str``, ``glDeleteShader(shader)``
* ``glCreateProgram() -> int``, ``glAttachShader(program, shader)``,
  ``glLinkProgram(program)``, ``glGetProgramiv(program, pname) -> int``,
  ``glGetProgramInfoLog(program) -> str``, ``glUseProgram(program)``,
  ``glDeleteProgram(program)``
* ``glGetActiveUniformsiv(program, indices, pname) -> list[int]``,
  ``glGetActiveUniformName(program, index) -> str``,
  ``glGetUniformLocation(program, name) -> int``,
  ``glGetActiveUniformBlockName(program, index) -> str``,
  ``glGetUniformBlockIndex(program, name) -> int``
* ``glUniform1i``, ``glUniform1f``, ``glUniform2f``, ``glUniform3f``,
  ``glUniform4f``, ``glUniformMatrix4fv(location, count, transpose, values)``
* ``glGetError() -> int``
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from os import PathLike
from typing import Any, Iterable, Sequence

import numpy as np

from .files import concat_path, read_file
from .gl_debug import check_error

__all__ = [
    "GL_ACTIVE_UNIFORMS",
    "GL_ACTIVE_UNIFORM_BLOCKS",
    "GL_COMPILE_STATUS",
    "GL_FRAGMENT_SHADER",
    "GL_LINK_STATUS",
    "GL_UNIFORM_BLOCK_INDEX",
    "GL_VERTEX_SHADER",
    "INVALID_LOCATION",
    "INVALID_PROGRAM_ID",
    "INVALID_SHADER_ID",
    "SHADER_FOLDER",
    "ShaderError",
    "ShaderProgram",
    "ShaderStage",
    "link_program",
    "load_shader",
]

log = logging.getLogger(__name__)

GL_FRAGMENT_SHADER = 0x8B30
GL_VERTEX_SHADER = 0x8B31
GL_COMPILE_STATUS = 0x8B81
GL_LINK_STATUS = 0x8B82
GL_ACTIVE_UNIFORMS = 0x8B86
GL_ACTIVE_UNIFORM_BLOCKS = 0x8A36
GL_UNIFORM_BLOCK_INDEX = 0x8A3A

SHADER_FOLDER = "src/shader"
"""Shader sources directory, relative to the project root."""

INVALID_PROGRAM_ID = 0
INVALID_SHADER_ID = 0
INVALID_LOCATION = -1


class ShaderError(RuntimeError):
    """A shader could not be read, compiled or linked."""


def _raise_on_gl_error(gl: Any, where: str) -> None:
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    line = caller.f_lineno if caller is not None else 0
    codes = check_error(gl, where, line)
    if codes:
        raise ShaderError(f"{where}: OpenGL error {codes[0]:#x}")


@dataclass
class ShaderStage:
    """One shader source file to compile, with the id it gets once compiled."""

    file_path: str
    type: int
    id: int = INVALID_SHADER_ID

    def unload(self, gl: Any) -> None:
        """Delete the compiled shader, if any."""
        if self.id == INVALID_SHADER_ID:
            return
        gl.glDeleteShader(self.id)
        check_error(gl, "ShaderStage.unload", 0)
        self.id = INVALID_SHADER_ID


def load_shader(stage: ShaderStage, root: str | PathLike[str], gl: Any) -> int:
    """Read and compile ``stage`` from the shader folder under ``root``; return its id."""
    path = concat_path(str(root), SHADER_FOLDER, stage.file_path)
    try:
        source = read_file(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ShaderError(f"cannot read shader file {stage.file_path}") from exc

    stage.id = int(gl.glCreateShader(stage.type))
    _raise_on_gl_error(gl, "load_shader")
    gl.glShaderSource(stage.id, source)
    _raise_on_gl_error(gl, "load_shader")
    gl.glCompileShader(stage.id)
    if not gl.glGetShaderiv(stage.id, GL_COMPILE_STATUS):
        info = gl.glGetShaderInfoLog(stage.id)
        log.error("OPENGL(-):\t compiler shader = %s", info)
        raise ShaderError(f"cannot compile {stage.file_path}: {info}")
    _raise_on_gl_error(gl, "load_shader")
    return stage.id


def link_program(stages: Iterable[ShaderStage], root: str | PathLike[str], gl: Any) -> int:
    """Compile every stage, attach it to a new program and link it; return the program id."""
    stages = list(stages)
    if not stages:
        raise ValueError("a program needs at least one shader stage")

    program_id = int(gl.glCreateProgram())
    _raise_on_gl_error(gl, "link_program")
    for stage in stages:
        load_shader(stage, root, gl)
        gl.glAttachShader(program_id, stage.id)
        _raise_on_gl_error(gl, "link_program")
    gl.glLinkProgram(program_id)
    _raise_on_gl_error(gl, "link_program")
    if not gl.glGetProgramiv(program_id, GL_LINK_STATUS):
        info = gl.glGetProgramInfoLog(program_id)
        log.error("OPENGL(-):\t link program = %s", info)
        raise ShaderError(f"cannot link program: {info}")
    return program_id


@dataclass
class ShaderProgram:
    """A linked program with its uniform locations and uniform block indices by name."""

    id: int
    gl: Any
    uniforms: dict[str, int] = field(default_factory=dict)
    uniform_blocks: dict[str, int] = field(default_factory=dict)

    @classmethod
    def build(
        cls, stages: Iterable[ShaderStage], root: str | PathLike[str], gl: Any
    ) -> ShaderProgram:
        """Link ``stages`` into a program and collect its uniforms."""
        program = cls(link_program(stages, root, gl), gl)
        program.load_uniforms()
        return program

    def load_uniforms(self) -> None:
        """Record the location of every plain uniform and the index of every uniform block."""
        gl = self.gl
        gl.glUseProgram(self.id)

        count = int(gl.glGetProgramiv(self.id, GL_ACTIVE_UNIFORMS))
        block_indices = gl.glGetActiveUniformsiv(self.id, list(range(count)), GL_UNIFORM_BLOCK_INDEX)
        for index, block_index in enumerate(block_indices):
            if block_index != -1:
                continue  # members of uniform blocks have no location of their own
            name = gl.glGetActiveUniformName(self.id, index)
            self.uniforms[name] = int(gl.glGetUniformLocation(self.id, name))

        count = int(gl.glGetProgramiv(self.id, GL_ACTIVE_UNIFORM_BLOCKS))
        for index in range(count):
            name = gl.glGetActiveUniformBlockName(self.id, index)
            self.uniform_blocks[name] = int(gl.glGetUniformBlockIndex(self.id, name))

    def uniform(self, name: str) -> int:
        """Location of uniform ``name``, or ``INVALID_LOCATION``."""
        return self.uniforms.get(name, INVALID_LOCATION)

    def uniform_block(self, name: str) -> int:
        """Index of uniform block ``name``, or ``INVALID_LOCATION``."""
        return self.uniform_blocks.get(name, INVALID_LOCATION)

    def use(self) -> None:
        self.gl.glUseProgram(self.id)

    def set_int(self, location: int, value: int) -> None:
        self.gl.glUniform1i(location, int(value))

    def set_float(self, location: int, value: float) -> None:
        self.gl.glUniform1f(location, float(value))

    def set_vec2(self, location: int, value: Sequence[float]) -> None:
        x, y = (float(c) for c in value)
        self.gl.glUniform2f(location, x, y)

    def set_vec3(self, location: int, value: Sequence[float]) -> None:
        x, y, z = (float(c) for c in value)
        self.gl.glUniform3f(location, x, y, z)

    def set_vec4(self, location: int, value: Sequence[float]) -> None:
        x, y, z, w = (float(c) for c in value)
        self.gl.glUniform4f(location, x, y, z, w)

    def set_mat4(
        self, location: int, value: Any, count: int = 1, transpose: bool = False
    ) -> None:
        """Upload ``count`` row-major 4x4 matrices, laid out column by column as OpenGL expects."""
        matrices = np.asarray(value, dtype=np.float32).reshape(-1, 4, 4)
        if len(matrices) < count:
            raise ValueError(f"expected {count} matrices, got {len(matrices)}")
        data = matrices[:count].transpose(0, 2, 1).ravel()
        self.gl.glUniformMatrix4fv(location, count, bool(transpose), [float(v) for v in data])

    def delete(self) -> None:
        """Delete the program and forget its uniforms."""
        self.uniforms.clear()
        self.uniform_blocks.clear()
        if self.id == INVALID_PROGRAM_ID:
            return
        self.gl.glDeleteProgram(self.id)
        check_error(self.gl, "ShaderProgram.delete", 0)
        self.id = INVALID_PROGRAM_ID