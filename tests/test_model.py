import itertools

import pytest
from PIL import Image

from gamomania.model import (
    DEFAULT_MATERIAL_NAME,
    Model,
    ModelError,
    load_scene,
)
from gamomania.texture import TextureBank


class FakeGL:
    def __init__(self):
        self.calls = []
        self._ids = itertools.count(1)

    def glGetError(self):
        return 0

    def __getattr__(self, name):
        if not name.startswith("gl"):
            raise AttributeError(name)

        def call(*args):
            self.calls.append((name, args))
            if name.startswith(("glGen", "glCreate")):
                return next(self._ids)
            return None

        return call

    def named(self, name):
        return [args for n, args in self.calls if n == name]


class FakeProgram:
    def __init__(self):
        self.set = []

    def uniform(self, name):
        return 1

    def set_int(self, loc, v):
        self.set.append(v)

    def set_float(self, loc, v):
        self.set.append(v)

    def set_vec3(self, loc, v):
        self.set.append(v)


QUAD = """
mtllib box.mtl
v 0 0 0
v 1 0 0
v 1 1 0
v 0 1 0
vt 0 0
vt 1 0
vt 1 1
vt 0 1
usemtl red
f 1/1 2/2 3/3 4/4
"""

MTL = """
newmtl red
Kd 1 0 0
Ks 0.5 0.5 0.5
Ns 32
map_Kd tex.png
"""


def write_box(directory, obj=QUAD, mtl=MTL, with_texture=True):
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "box.obj").write_text(obj)
    (directory / "box.mtl").write_text(mtl)
    if with_texture:
        Image.new("RGB", (2, 2), (255, 0, 0)).save(directory / "tex.png")
    return directory / "box.obj"


def test_quad_is_triangulated_and_joined(tmp_path):
    scene = load_scene(write_box(tmp_path))
    assert len(scene.meshes) == 1
    mesh = scene.meshes[0]
    assert len(mesh.positions) == 4
    assert len(mesh.faces) == 2
    assert all(len(f) == 3 for f in mesh.faces)


def test_uvs_are_flipped(tmp_path):
    mesh = load_scene(write_box(tmp_path)).meshes[0]
    assert mesh.texcoords[0] == (0.0, 1.0)
    assert mesh.texcoords[2] == (1.0, 0.0)


def test_normals_are_generated_unit_length(tmp_path):
    mesh = load_scene(write_box(tmp_path)).meshes[0]
    for n in mesh.normals:
        assert sum(c * c for c in n) == pytest.approx(1.0)
        assert abs(n[2]) == pytest.approx(1.0)


def test_material_library_is_read(tmp_path):
    scene = load_scene(write_box(tmp_path))
    mat = scene.materials[0]
    assert mat.name == "red"
    assert mat.diffuse == (1.0, 0.0, 0.0)
    assert mat.shininess == 32.0
    assert mat.diffuse_textures == ["tex.png"]


def test_default_material_added_without_usemtl(tmp_path):
    obj = "v 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n"
    scene = load_scene(write_box(tmp_path, obj=obj, mtl=""))
    assert scene.materials[-1].name == DEFAULT_MATERIAL_NAME
    assert scene.meshes[0].material_index == len(scene.materials) - 1
    assert scene.meshes[0].texcoords is None


def test_missing_file_raises(tmp_path):
    with pytest.raises(ModelError):
        load_scene(tmp_path / "nothing.obj")


def test_file_without_faces_raises(tmp_path):
    with pytest.raises(ModelError):
        load_scene(write_box(tmp_path, obj="v 0 0 0\n", mtl=""))


def test_create_loads_textures_and_meshes(tmp_path):
    write_box(tmp_path / "asset" / "model" / "box")
    gl = FakeGL()
    bank = TextureBank(gl)
    model = Model.create("box/box.obj", tmp_path, bank, gl)
    assert model.directory.endswith("asset/model/box")
    assert len(model.meshes) == 1
    assert model.materials[0].tex_diffuse == bank.get(model.texture_path("tex.png"))
    assert model.meshes[0].materials is model.materials
    assert len(model.meshes[0].indices) == 6


def test_missing_texture_raises(tmp_path):
    write_box(tmp_path / "asset" / "model" / "box", with_texture=False)
    gl = FakeGL()
    with pytest.raises(ModelError):
        Model.create("box/box.obj", tmp_path, TextureBank(gl), gl)


def test_texture_path_joins_directory(tmp_path):
    gl = FakeGL()
    model = Model("some/dir", TextureBank(gl), gl)
    assert model.texture_path("a.png") == "some/dir/a.png"


def test_draw_and_delete(tmp_path):
    gl = FakeGL()
    model = Model.from_scene(load_scene(write_box(tmp_path)), str(tmp_path), TextureBank(gl), gl)
    model.draw(FakeProgram())
    assert gl.named("glDrawElements")[0][1] == 6
    model.delete()
    assert model.meshes == []
    assert len(gl.named("glDeleteVertexArrays")) == 1