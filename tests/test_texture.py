import pytest
from PIL import Image

from gamomania.texture import (
    GL_RED,
    GL_RGB,
    GL_RGBA,
    GL_SRGB,
    GL_SRGB_ALPHA,
    GL_TEXTURE_2D,
    TEXTURE_FOLDER,
    TEXTURE_INVALID,
    TEXTURE_WHITE1X1_PATH,
    TextureBank,
    TextureError,
    create_texture_from_image,
    delete_texture,
    texture_formats,
)


class FakeGL:
    def __init__(self):
        self.calls = []
        self.errors = []
        self._next = 1

    def glGetError(self):
        return self.errors.pop(0) if self.errors else 0

    def glGenTextures(self, n):
        ident = self._next
        self._next += 1
        self.calls.append(("glGenTextures", (n,)))
        return ident

    def __getattr__(self, name):
        if name.startswith("gl"):
            return lambda *args: self.calls.append((name, args))
        raise AttributeError(name)

    def named(self, name):
        return [args for call, args in self.calls if call == name]


def make_image(path, mode, pixels, size):
    img = Image.new(mode, size)
    img.putdata(pixels)
    img.save(path)
    return str(path)


def test_texture_formats():
    assert texture_formats(3, True) == (GL_SRGB, GL_RGB)
    assert texture_formats(3, False) == (GL_RGB, GL_RGB)
    assert texture_formats(4, True) == (GL_SRGB_ALPHA, GL_RGBA)
    assert texture_formats(4, False) == (GL_RGBA, GL_RGBA)
    assert texture_formats(1, True) == (GL_RED, GL_RED)


def test_texture_formats_rejects_two_channels():
    with pytest.raises(TextureError):
        texture_formats(2, False)


def test_create_uploads_flipped_rows(tmp_path):
    red, blue = (255, 0, 0), (0, 0, 255)
    path = make_image(tmp_path / "img.png", "RGB", [red, blue], (1, 2))
    gl = FakeGL()
    tex = create_texture_from_image(path, True, gl)
    (args,) = gl.named("glTexImage2D")
    assert args[0] == GL_TEXTURE_2D
    assert args[2] == GL_SRGB
    assert args[3:5] == (1, 2)
    assert args[6] == GL_RGB
    assert args[8] == bytes(blue + red)
    assert gl.named("glBindTexture") == [(GL_TEXTURE_2D, tex)]
    assert gl.named("glGenerateMipmap") == [(GL_TEXTURE_2D,)]


def test_create_rgba_without_srgb(tmp_path):
    path = make_image(tmp_path / "img.png", "RGBA", [(1, 2, 3, 4)], (1, 1))
    gl = FakeGL()
    create_texture_from_image(path, False, gl)
    (args,) = gl.named("glTexImage2D")
    assert args[2] == GL_RGBA
    assert args[8] == bytes((1, 2, 3, 4))


def test_create_missing_file(tmp_path):
    with pytest.raises(TextureError):
        create_texture_from_image(str(tmp_path / "nope.png"), False, FakeGL())


def test_create_gl_error_raises(tmp_path):
    path = make_image(tmp_path / "img.png", "RGB", [(1, 1, 1)], (1, 1))
    gl = FakeGL()
    gl.errors = [0x0500]
    with pytest.raises(TextureError):
        create_texture_from_image(path, False, gl)


def test_delete_texture_ignores_invalid():
    gl = FakeGL()
    delete_texture(TEXTURE_INVALID, gl)
    delete_texture(7, gl)
    assert gl.named("glDeleteTextures") == [(7,)]


def test_bank_loads_once(tmp_path):
    path = make_image(tmp_path / "img.png", "RGB", [(9, 9, 9)], (1, 1))
    gl = FakeGL()
    bank = TextureBank(gl)
    assert bank.get(path) == TEXTURE_INVALID
    first = bank.add(path, False)
    second = bank.add(path, True)
    assert first == second
    assert bank.get(path) == first
    assert len(gl.named("glGenTextures")) == 1


def test_bank_capacity(tmp_path):
    paths = [
        make_image(tmp_path / f"img{i}.png", "RGB", [(i, i, i)], (1, 1)) for i in range(3)
    ]
    bank = TextureBank(FakeGL(), capacity=2)
    bank.add(paths[0], False)
    bank.add(paths[1], False)
    with pytest.raises(TextureError):
        bank.add(paths[2], False)
    assert len(bank.textures) == 2


def test_bank_add_missing_raises(tmp_path):
    bank = TextureBank(FakeGL())
    with pytest.raises(TextureError):
        bank.add(str(tmp_path / "missing.png"), False)
    assert bank.textures == {}


def test_bank_loads_white_from_root_and_deletes_all(tmp_path):
    folder = tmp_path / TEXTURE_FOLDER
    folder.mkdir(parents=True)
    Image.new("RGB", (1, 1), (255, 255, 255)).save(folder / TEXTURE_WHITE1X1_PATH)
    other = make_image(tmp_path / "img.png", "RGB", [(3, 3, 3)], (1, 1))
    gl = FakeGL()
    bank = TextureBank(gl, root=str(tmp_path))
    assert bank.white != TEXTURE_INVALID
    tex = bank.add(other, False)
    white = bank.white
    bank.delete()
    assert sorted(gl.named("glDeleteTextures")) == sorted([(tex,), (white,)])
    assert bank.textures == {}
    assert bank.white == TEXTURE_INVALID