"""Image textures and the bank that shares them between materials.

The ``gl`` object exposes OpenGL entry points with plain Python signatures:
``glGenTextures(n) -> int``, ``glBindTexture(target, id)``,
``glTexParameteri(target, pname, value)``,
``glTexImage2D(target, level, internal_format, width, height, border, format, type, data)``,
``glGenerateMipmap(target)``, ``glDeleteTextures(id)`` and ``glGetError() -> int``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from os import PathLike
from typing import Any

import numpy as np
from PIL import Image

from .files import concat_path
from .gl_debug import check_error

__all__ = [
    "GL_RED",
    "GL_RGB",
    "GL_RGBA",
    "GL_SRGB",
    "GL_SRGB_ALPHA",
    "GL_TEXTURE_2D",
    "TEXTURE_BANK_SIZE",
    "TEXTURE_FOLDER",
    "TEXTURE_INVALID",
    "TEXTURE_WHITE1X1_PATH",
    "TextureBank",
    "TextureError",
    "TextureType",
    "create_texture_from_image",
    "delete_texture",
    "texture_formats",
]

log = logging.getLogger(__name__)

TEXTURE_FOLDER = "asset/texture"
TEXTURE_WHITE1X1_PATH = "white1x1.jpg"
TEXTURE_INVALID = 0
TEXTURE_BANK_SIZE = 16

GL_TEXTURE_2D = 0x0DE1
GL_RED = 0x1903
GL_RGB = 0x1907
GL_RGBA = 0x1908
GL_SRGB = 0x8C40
GL_SRGB_ALPHA = 0x8C42
GL_UNSIGNED_BYTE = 0x1401
GL_TEXTURE_MAG_FILTER = 0x2800
GL_TEXTURE_MIN_FILTER = 0x2801
GL_TEXTURE_WRAP_S = 0x2802
GL_TEXTURE_WRAP_T = 0x2803
GL_LINEAR = 0x2601
GL_LINEAR_MIPMAP_LINEAR = 0x2703
GL_REPEAT = 0x2901


class TextureType(IntEnum):
    DIFFUSE = 0
    BUMP = 1
    SPECULAR = 2
    HEIGHT = 3


class TextureError(RuntimeError):
    """A texture could not be loaded or stored."""


def texture_formats(channels: int, use_srgb: bool) -> tuple[int, int]:
    """Return ``(internal_format, pixel_format)`` for an image with ``channels`` channels."""
    if channels == 1:
        return GL_RED, GL_RED
    if channels == 3:
        return (GL_SRGB if use_srgb else GL_RGB), GL_RGB
    if channels == 4:
        return (GL_SRGB_ALPHA if use_srgb else GL_RGBA), GL_RGBA
    raise TextureError(f"unsupported number of channels: {channels}")


def _native_image(img: Image.Image) -> Image.Image:
    if img.mode in ("L", "LA", "RGB", "RGBA"):
        return img
    if img.mode in ("1", "I", "I;16", "F"):
        return img.convert("L")
    if "A" in img.mode or "transparency" in img.info:
        return img.convert("RGBA")
    return img.convert("RGB")


def _raise_on_gl_error(gl: Any) -> None:
    codes = check_error(gl, "create_texture_from_image", 0)
    if codes:
        raise TextureError(f"OpenGL error {codes[0]:#x}")


def create_texture_from_image(path: str | PathLike[str], use_srgb: bool, gl: Any) -> int:
    """Load the image at ``path`` bottom row first into a new mipmapped texture; return its id."""
    try:
        with Image.open(path) as opened:
            opened.load()
            img = _native_image(opened)
    except OSError as exc:
        raise TextureError(f"cannot load image {path}") from exc

    width, height = img.size
    internal_format, pixel_format = texture_formats(len(img.getbands()), use_srgb)
    data = np.ascontiguousarray(np.asarray(img, dtype=np.uint8)[::-1]).tobytes()

    texture_id = int(gl.glGenTextures(1))
    _raise_on_gl_error(gl)
    gl.glBindTexture(GL_TEXTURE_2D, texture_id)
    _raise_on_gl_error(gl)
    gl.glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_S, GL_REPEAT)
    gl.glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_WRAP_T, GL_REPEAT)
    gl.glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MIN_FILTER, GL_LINEAR_MIPMAP_LINEAR)
    gl.glTexParameteri(GL_TEXTURE_2D, GL_TEXTURE_MAG_FILTER, GL_LINEAR)
    gl.glTexImage2D(
        GL_TEXTURE_2D, 0, internal_format, width, height, 0, pixel_format, GL_UNSIGNED_BYTE, data
    )
    _raise_on_gl_error(gl)
    gl.glGenerateMipmap(GL_TEXTURE_2D)
    _raise_on_gl_error(gl)
    return texture_id


def delete_texture(texture_id: int, gl: Any) -> None:
    """Delete a texture; the invalid id is ignored."""
    if texture_id == TEXTURE_INVALID:
        return
    gl.glDeleteTextures(texture_id)


@dataclass
class TextureBank:
    """Textures loaded once by name, plus a shared 1x1 white texture.

    When ``root`` is given, the white texture is loaded from the texture folder under it.
    """

    gl: Any
    root: str | PathLike[str] | None = None
    capacity: int = TEXTURE_BANK_SIZE
    white: int = TEXTURE_INVALID
    textures: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.root is not None and self.white == TEXTURE_INVALID:
            path = concat_path(str(self.root), TEXTURE_FOLDER, TEXTURE_WHITE1X1_PATH)
            self.white = create_texture_from_image(path, False, self.gl)

    def get(self, name: str) -> int:
        """Id of the texture loaded from ``name``, or ``TEXTURE_INVALID``."""
        return self.textures.get(name, TEXTURE_INVALID)

    def add(self, name: str, use_srgb: bool) -> int:
        """Return the texture for ``name``, loading it the first time."""
        texture_id = self.get(name)
        if texture_id != TEXTURE_INVALID:
            return texture_id
        if len(self.textures) >= self.capacity:
            raise TextureError(f"texture bank is full ({self.capacity} textures)")
        try:
            texture_id = create_texture_from_image(name, use_srgb, self.gl)
        except TextureError:
            log.info("TextureBank.add: Cannot load texture %s", name)
            raise
        self.textures[name] = texture_id
        return texture_id

    def delete(self) -> None:
        """Delete every texture of the bank, the white one included."""
        for texture_id in self.textures.values():
            delete_texture(texture_id, self.gl)
        self.textures.clear()
        delete_texture(self.white, self.gl)
        self.white = TEXTURE_INVALID