"""Indexed triangle meshes in GPU buffers.

The ``gl`` object exposes OpenGL entry points with plain Python signatures:
``glGenVertexArrays(n) -> int``, ``glGenBuffers(n) -> int``,
``glBindVertexArray(id)``, ``glBindBuffer(target, id)``,
``glBufferData(target, data, usage)`` with ``data`` as bytes,
``glEnableVertexAttribArray(index)``,
``glVertexAttribPointer(index, size, type, normalized, stride, offset)``,
``glActiveTexture(unit)``, ``glBindTexture(target, id)``,
``glDrawElements(mode, count, type, offset)``, ``glDeleteVertexArrays(id)``,
``glDeleteBuffers(id)`` and ``glGetError() -> int``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence, Tuple

import numpy as np

from .gl_debug import check_error
from .material import Material
from .texture import GL_TEXTURE_2D

__all__ = [
    "NORMAL_OFFSET",
    "TEXEL_OFFSET",
    "VERTEX_FLOATS",
    "VERTEX_STRIDE",
    "Mesh",
    "Vertex",
    "pack_vertices",
]

GL_ARRAY_BUFFER = 0x8892
GL_ELEMENT_ARRAY_BUFFER = 0x8893
GL_STATIC_DRAW = 0x88E4
GL_FLOAT = 0x1406
GL_UNSIGNED_INT = 0x1405
GL_TRIANGLES = 0x0004
GL_TEXTURE0 = 0x84C0
GL_TEXTURE1 = 0x84C1
GL_FALSE = 0

VERTEX_FLOATS = 14
VERTEX_STRIDE = VERTEX_FLOATS * 4
NORMAL_OFFSET = 3 * 4
TEXEL_OFFSET = 6 * 4

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


@dataclass
class Vertex:
    pos: Vec3 = (0.0, 0.0, 0.0)
    normal: Vec3 = (0.0, 0.0, 0.0)
    texel: Vec2 = (0.0, 0.0)
    tan: Vec3 = (0.0, 0.0, 0.0)
    bitan: Vec3 = (0.0, 0.0, 0.0)


def pack_vertices(vertices: Iterable[Vertex]) -> np.ndarray:
    """Interleave vertices as float32 rows: position, normal, texel, tangent, bitangent."""
    rows = [(*v.pos, *v.normal, *v.texel, *v.tan, *v.bitan) for v in vertices]
    return np.asarray(rows, dtype=np.float32).reshape(-1, VERTEX_FLOATS)


def _raise_on_gl_error(gl: Any, where: str) -> None:
    codes = check_error(gl, where, 0)
    if codes:
        raise RuntimeError(f"{where}: OpenGL error {codes[0]:#x}")


@dataclass
class Mesh:
    """Vertices and triangle indices; ``material_id`` indexes the owning model's materials."""

    vertices: list[Vertex]
    indices: list[int]
    material_id: int = -1
    materials: Sequence[Material] = field(default_factory=list)
    vao: int = 0
    vbo: int = 0
    ebo: int = 0

    def load(self, gl: Any) -> None:
        """Create the vertex array and buffers and describe the vertex layout."""
        self.vao = int(gl.glGenVertexArrays(1))
        self.vbo = int(gl.glGenBuffers(1))
        self.ebo = int(gl.glGenBuffers(1))

        gl.glBindVertexArray(self.vao)
        gl.glBindBuffer(GL_ARRAY_BUFFER, self.vbo)
        gl.glBufferData(GL_ARRAY_BUFFER, pack_vertices(self.vertices).tobytes(), GL_STATIC_DRAW)
        gl.glBindBuffer(GL_ELEMENT_ARRAY_BUFFER, self.ebo)
        gl.glBufferData(
            GL_ELEMENT_ARRAY_BUFFER,
            np.asarray(self.indices, dtype=np.uint32).tobytes(),
            GL_STATIC_DRAW,
        )

        for index, size, offset in ((0, 3, 0), (1, 3, NORMAL_OFFSET), (2, 2, TEXEL_OFFSET)):
            gl.glEnableVertexAttribArray(index)
            gl.glVertexAttribPointer(index, size, GL_FLOAT, GL_FALSE, VERTEX_STRIDE, offset)

        gl.glBindVertexArray(0)
        _raise_on_gl_error(gl, "Mesh.load")

    def draw(self, program: Any, gl: Any) -> None:
        """Bind the material's maps (white when missing), set its uniforms and draw."""
        if not 0 <= self.material_id < len(self.materials):
            raise ValueError(f"mesh material {self.material_id} does not exist")
        mat = self.materials[self.material_id]

        gl.glActiveTexture(GL_TEXTURE0)
        program.set_int(program.uniform("material.texDiffuse"), 0)
        gl.glBindTexture(GL_TEXTURE_2D, mat.tex_diffuse or mat.tex_white)
        gl.glActiveTexture(GL_TEXTURE1)
        program.set_int(program.uniform("material.texSpecular"), 1)
        gl.glBindTexture(GL_TEXTURE_2D, mat.tex_specular or mat.tex_white)
        gl.glActiveTexture(GL_TEXTURE0)

        program.set_vec3(program.uniform("material.color"), mat.color)
        program.set_vec3(program.uniform("material.specular"), mat.specular)
        program.set_float(program.uniform("material.shininess"), mat.shininess)

        gl.glBindVertexArray(self.vao)
        gl.glDrawElements(GL_TRIANGLES, len(self.indices), GL_UNSIGNED_INT, 0)
        gl.glBindVertexArray(0)
        _raise_on_gl_error(gl, "Mesh.draw")

    def delete(self, gl: Any) -> None:
        """Release the GPU objects and drop the geometry."""
        self.vertices = []
        self.indices = []
        gl.glDeleteVertexArrays(self.vao)
        gl.glDeleteBuffers(self.ebo)
        gl.glDeleteBuffers(self.vbo)
        self.vao = self.vbo = self.ebo = 0