"""Models: Wavefront OBJ scenes turned into meshes and materials."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from os import PathLike
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from .files import concat_path
from .material import Material
from .mesh import Mesh, Vertex
from .texture import TextureBank, TextureError, TextureType

__all__ = [
    "DEFAULT_MATERIAL_NAME",
    "MODEL_FOLDER",
    "Model",
    "ModelError",
    "Scene",
    "SceneMaterial",
    "SceneMesh",
    "SceneNode",
    "load_scene",
]

log = logging.getLogger(__name__)

MODEL_FOLDER = "asset/model"
DEFAULT_MATERIAL_NAME = "DefaultMaterial"

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


class ModelError(RuntimeError):
    """A model file could not be imported."""


@dataclass
class SceneMaterial:
    """Material properties as read from a material library."""

    name: str
    diffuse: Optional[Vec3] = None
    specular: Optional[Vec3] = None
    shininess: Optional[float] = None
    diffuse_textures: list[str] = field(default_factory=list)
    specular_textures: list[str] = field(default_factory=list)


@dataclass
class SceneMesh:
    """Deduplicated vertex attributes and triangles of one material group."""

    positions: list[Vec3]
    faces: list[tuple[int, ...]]
    material_index: int
    normals: Optional[list[Vec3]] = None
    texcoords: Optional[list[Vec2]] = None
    tangents: Optional[list[Vec3]] = None
    bitangents: Optional[list[Vec3]] = None


@dataclass
class SceneNode:
    meshes: list[int] = field(default_factory=list)
    children: list[SceneNode] = field(default_factory=list)


@dataclass
class Scene:
    meshes: list[SceneMesh]
    materials: list[SceneMaterial]
    root: SceneNode


def _floats(parts: Sequence[str], count: int) -> tuple[float, ...]:
    values = [float(p) for p in parts[:count]]
    values += [0.0] * (count - len(values))
    return tuple(values)


def _resolve(index: str, size: int) -> int:
    value = int(index)
    return size + value if value < 0 else value - 1


def _parse_mtl(path: str) -> list[SceneMaterial]:
    materials: list[SceneMaterial] = []
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            lines = handle.read().splitlines()
    except OSError:
        log.warning("cannot read material library %s", path)
        return materials
    current: Optional[SceneMaterial] = None
    for raw in lines:
        parts = raw.split("#", 1)[0].split()
        if not parts:
            continue
        key, args = parts[0], parts[1:]
        if key == "newmtl":
            current = SceneMaterial(" ".join(args))
            materials.append(current)
        elif current is None:
            continue
        elif key == "Kd":
            current.diffuse = _floats(args, 3)  # type: ignore[assignment]
        elif key == "Ks":
            current.specular = _floats(args, 3)  # type: ignore[assignment]
        elif key == "Ns" and args:
            current.shininess = float(args[0])
        elif key == "map_Kd" and args:
            current.diffuse_textures.append(args[-1])
        elif key == "map_Ks" and args:
            current.specular_textures.append(args[-1])
    return materials


def _normalize_rows(rows: np.ndarray) -> np.ndarray:
    norms = np.linalg.norm(rows, axis=1, keepdims=True)
    safe = np.where(norms == 0, 1.0, norms)
    return rows / safe


def _smooth_normals(positions: np.ndarray, faces: list[tuple[int, ...]]) -> np.ndarray:
    accum: dict[tuple[float, ...], np.ndarray] = {}
    for a, b, c in faces:
        normal = np.cross(positions[b] - positions[a], positions[c] - positions[a])
        for i in (a, b, c):
            key = tuple(positions[i])
            accum[key] = accum.get(key, np.zeros(3)) + normal
    rows = np.array([accum.get(tuple(p), np.zeros(3)) for p in positions], dtype=np.float64)
    return _normalize_rows(rows.reshape(-1, 3))


def _tangent_space(
    positions: np.ndarray, texcoords: np.ndarray, faces: list[tuple[int, ...]]
) -> tuple[np.ndarray, np.ndarray]:
    tangents = np.zeros_like(positions)
    bitangents = np.zeros_like(positions)
    for a, b, c in faces:
        e1, e2 = positions[b] - positions[a], positions[c] - positions[a]
        d1, d2 = texcoords[b] - texcoords[a], texcoords[c] - texcoords[a]
        det = d1[0] * d2[1] - d2[0] * d1[1]
        if det == 0:
            continue
        f = 1.0 / det
        tangent = f * (d2[1] * e1 - d1[1] * e2)
        bitangent = f * (d1[0] * e2 - d2[0] * e1)
        for i in (a, b, c):
            tangents[i] += tangent
            bitangents[i] += bitangent
    return _normalize_rows(tangents), _normalize_rows(bitangents)


def _as_tuples(rows: np.ndarray) -> list:
    return [tuple(float(v) for v in row) for row in rows]


def load_scene(path: str | PathLike[str]) -> Scene:
    """Import an OBJ file: triangulated, shared vertices joined, UVs flipped, normals and tangents filled in."""
    path = os.fspath(path)
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            lines = handle.read().splitlines()
    except OSError as exc:
        raise ModelError(f"cannot open model {path}: {exc}") from exc

    directory = os.path.dirname(path)
    positions: list[Vec3] = []
    texcoords: list[Vec2] = []
    normals: list[Vec3] = []
    materials: list[SceneMaterial] = []
    segments: list[tuple[Optional[str], list[list[tuple[int, Optional[int], Optional[int]]]]]] = []
    current_material: Optional[str] = None

    for raw in lines:
        parts = raw.split("#", 1)[0].split()
        if not parts:
            continue
        key, args = parts[0], parts[1:]
        if key == "v":
            positions.append(_floats(args, 3))  # type: ignore[arg-type]
        elif key == "vt":
            u, v = _floats(args, 2)
            texcoords.append((u, 1.0 - v))
        elif key == "vn":
            normals.append(_floats(args, 3))  # type: ignore[arg-type]
        elif key == "mtllib" and args:
            materials.extend(_parse_mtl(os.path.join(directory, " ".join(args))))
        elif key == "usemtl":
            current_material = " ".join(args)
        elif key == "f":
            corners = []
            for token in args:
                fields = token.split("/") + ["", ""]
                vi = _resolve(fields[0], len(positions))
                ti = _resolve(fields[1], len(texcoords)) if fields[1] else None
                ni = _resolve(fields[2], len(normals)) if fields[2] else None
                corners.append((vi, ti, ni))
            if len(corners) < 3:
                continue
            if not segments or segments[-1][0] != current_material:
                segments.append((current_material, []))
            segments[-1][1].append(corners)

    if not segments:
        raise ModelError(f"model {path} holds no faces")

    names = {mat.name: i for i, mat in enumerate(materials)}
    default_index: Optional[int] = None

    meshes: list[SceneMesh] = []
    try:
        for material_name, polygons in segments:
            if material_name in names:
                material_index = names[material_name]
            else:
                if default_index is None:
                    default_index = len(materials)
                    materials.append(SceneMaterial(DEFAULT_MATERIAL_NAME))
                material_index = default_index

            lookup: dict[tuple[int, Optional[int], Optional[int]], int] = {}
            corners_list: list[tuple[int, Optional[int], Optional[int]]] = []
            faces: list[tuple[int, ...]] = []
            for polygon in polygons:
                indices = []
                for corner in polygon:
                    if corner not in lookup:
                        lookup[corner] = len(corners_list)
                        corners_list.append(corner)
                    indices.append(lookup[corner])
                faces.extend((indices[0], indices[k], indices[k + 1]) for k in range(1, len(indices) - 1))

            pos = np.array([positions[vi] for vi, _, _ in corners_list], dtype=np.float64)
            has_tex = any(ti is not None for _, ti, _ in corners_list)
            has_norm = all(ni is not None for _, _, ni in corners_list)
            mesh = SceneMesh(_as_tuples(pos), faces, material_index)
            if has_norm:
                mesh.normals = [normals[ni] for _, _, ni in corners_list]  # type: ignore[index]
            else:
                mesh.normals = _as_tuples(_smooth_normals(pos, faces))
            if has_tex:
                tex = np.array(
                    [texcoords[ti] if ti is not None else (0.0, 0.0) for _, ti, _ in corners_list],
                    dtype=np.float64,
                )
                mesh.texcoords = _as_tuples(tex)
                tan, bitan = _tangent_space(pos, tex, faces)
                mesh.tangents = _as_tuples(tan)
                mesh.bitangents = _as_tuples(bitan)
            meshes.append(mesh)
    except IndexError as exc:
        raise ModelError(f"model {path} refers to a missing vertex attribute") from exc

    return Scene(meshes, materials, SceneNode(list(range(len(meshes)))))


@dataclass
class Model:
    """Meshes and the materials they share, with textures borrowed from a bank."""

    directory: str
    tex_bank: TextureBank
    gl: Any
    materials: list[Material] = field(default_factory=list)
    meshes: list[Mesh] = field(default_factory=list)

    @classmethod
    def from_scene(cls, scene: Scene, directory: str, tex_bank: TextureBank, gl: Any) -> Model:
        """Build the materials first, then one mesh per node mesh, depth first."""
        model = cls(directory, tex_bank, gl)
        model._process_materials(scene)
        model._process_node(scene.root, scene)
        return model

    @classmethod
    def create(
        cls, path: str, root: str | PathLike[str], tex_bank: TextureBank, gl: Any
    ) -> Model:
        """Load ``path`` from the model folder under ``root``."""
        full_path = concat_path(str(root), MODEL_FOLDER, path)
        slash = full_path.rfind("/")
        if slash < 0:
            raise ModelError(f"cannot find directory in {full_path}")
        scene = load_scene(full_path)
        return cls.from_scene(scene, full_path[:slash], tex_bank, gl)

    def texture_path(self, file_path: str) -> str:
        return concat_path(self.directory, file_path)

    def _process_materials(self, scene: Scene) -> None:
        for source in scene.materials:
            mat = Material(source.name, tex_white=self.tex_bank.white)
            if source.diffuse is not None:
                mat.color = source.diffuse
            if source.specular is not None:
                mat.specular = source.specular
            if source.shininess is not None:
                mat.shininess = source.shininess
            for files, kind in (
                (source.diffuse_textures, TextureType.DIFFUSE),
                (source.specular_textures, TextureType.SPECULAR),
            ):
                for file_name in files:
                    tex_path = self.texture_path(file_name)
                    try:
                        mat.add_texture(self.tex_bank, tex_path, kind)
                    except TextureError as exc:
                        log.error("Cannot load texture %s", tex_path)
                        raise ModelError(f"cannot load texture {tex_path}") from exc
            self.materials.append(mat)

    def _process_node(self, node: SceneNode, scene: Scene) -> None:
        for index in node.meshes:
            self._add_mesh(scene.meshes[index])
        for child in node.children:
            self._process_node(child, scene)

    def _add_mesh(self, source: SceneMesh) -> None:
        vertices = []
        for i, pos in enumerate(source.positions):
            vertex = Vertex(pos=pos)
            if source.normals is not None:
                vertex.normal = source.normals[i]
            if source.texcoords is not None:
                vertex.texel = source.texcoords[i]
                if source.tangents is not None:
                    vertex.tan = source.tangents[i]
                if source.bitangents is not None:
                    vertex.bitan = source.bitangents[i]
            vertices.append(vertex)
        indices = [index for face in source.faces for index in face]
        mesh = Mesh(vertices, indices, source.material_index, materials=self.materials)
        mesh.load(self.gl)
        self.meshes.append(mesh)

    def draw(self, program: Any) -> None:
        for mesh in self.meshes:
            mesh.draw(program, self.gl)

    def delete(self) -> None:
        for mesh in self.meshes:
            mesh.delete(self.gl)
        self.meshes.clear()
        self.materials.clear()