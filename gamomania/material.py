"""Surface materials: colours, lighting parameters and texture maps."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from .texture import TEXTURE_INVALID, TextureBank, TextureError, TextureType

__all__ = ["MATERIAL_FOLDER", "MATERIAL_NAME_MAX", "Material"]

log = logging.getLogger(__name__)

MATERIAL_FOLDER = "asset/material"
MATERIAL_NAME_MAX = 63
"""Longest material name kept; longer names are truncated."""

Vec3 = Tuple[float, float, float]

_TEXTURE_FIELDS = {
    TextureType.DIFFUSE: "tex_diffuse",
    TextureType.SPECULAR: "tex_specular",
    TextureType.BUMP: "tex_bump",
    TextureType.HEIGHT: "tex_height",
}


@dataclass
class Material:
    """A material; texture ids are borrowed from a ``TextureBank``."""

    name: str = ""
    tex_white: int = TEXTURE_INVALID
    color: Vec3 = (0.0, 0.0, 0.0)
    specular: Vec3 = (0.0, 0.0, 0.0)
    emission: Vec3 = (0.0, 0.0, 0.0)
    reflectivity: float = 0.0
    opacity: float = 1.0
    refraction: float = 0.0
    shininess: float = 0.0
    emission_strength: float = 0.0
    type: int = 0
    tex_diffuse: int = TEXTURE_INVALID
    tex_specular: int = TEXTURE_INVALID
    tex_bump: int = TEXTURE_INVALID
    tex_height: int = TEXTURE_INVALID

    def __post_init__(self) -> None:
        self.name = self.name[:MATERIAL_NAME_MAX]

    def add_texture(self, bank: TextureBank, name: str, texture_type: TextureType) -> int:
        """Load ``name`` through ``bank`` as the map of ``texture_type``; diffuse maps use sRGB."""
        texture_type = TextureType(texture_type)
        try:
            texture_id = bank.add(name, texture_type is TextureType.DIFFUSE)
        except TextureError:
            log.info("Material.add_texture: Cannot load texture %s", name)
            raise
        setattr(self, _TEXTURE_FIELDS[texture_type], texture_id)
        return texture_id