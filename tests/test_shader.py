import pytest

from gamomania.shader import (
    GL_ACTIVE_UNIFORM_BLOCKS,
    GL_ACTIVE_UNIFORMS,
    GL_COMPILE_STATUS,
    GL_FRAGMENT_SHADER,
    GL_LINK_STATUS,
    GL_UNIFORM_BLOCK_INDEX,
    GL_VERTEX_SHADER,
    INVALID_LOCATION,
    INVALID_SHADER_ID,
    ShaderError,
    ShaderProgram,
    ShaderStage,
    link_program,
    load_shader,
)


class FakeGL:
    def __init__(self, compile_ok=True, link_ok=True, uniforms=(), blocks=()):
        self.compile_ok = compile_ok
        self.link_ok = link_ok
        self.uniforms = list(uniforms)  # (name, location, block_index)
        self.blocks = list(blocks)  # (name, index)
        self.errors = []
        self.next_id = 1
        self.sources = {}
        self.attached = []
        self.deleted_shaders = []
        self.deleted_programs = []
        self.used = []
        self.calls = []

    def _new_id(self):
        ident = self.next_id
        self.next_id += 1
        return ident

    def glGetError(self):
        return self.errors.pop(0) if self.errors else 0

    def glCreateShader(self, kind):
        return self._new_id()

    def glShaderSource(self, shader, text):
        self.sources[shader] = text

    def glCompileShader(self, shader):
        pass

    def glGetShaderiv(self, shader, pname):
        assert pname == GL_COMPILE_STATUS
        return 1 if self.compile_ok else 0

    def glGetShaderInfoLog(self, shader):
        return "syntax error near main"

    def glDeleteShader(self, shader):
        self.deleted_shaders.append(shader)

    def glCreateProgram(self):
        return self._new_id()

    def glAttachShader(self, program, shader):
        self.attached.append((program, shader))

    def glLinkProgram(self, program):
        pass

    def glGetProgramiv(self, program, pname):
        if pname == GL_LINK_STATUS:
            return 1 if self.link_ok else 0
        if pname == GL_ACTIVE_UNIFORMS:
            return len(self.uniforms)
        if pname == GL_ACTIVE_UNIFORM_BLOCKS:
            return len(self.blocks)
        raise AssertionError(pname)

    def glGetProgramInfoLog(self, program):
        return "undefined symbol"

    def glUseProgram(self, program):
        self.used.append(program)

    def glDeleteProgram(self, program):
        self.deleted_programs.append(program)

    def glGetActiveUniformsiv(self, program, indices, pname):
        assert pname == GL_UNIFORM_BLOCK_INDEX
        return [self.uniforms[i][2] for i in indices]

    def glGetActiveUniformName(self, program, index):
        return self.uniforms[index][0]

    def glGetUniformLocation(self, program, name):
        return next(loc for n, loc, _ in self.uniforms if n == name)

    def glGetActiveUniformBlockName(self, program, index):
        return self.blocks[index][0]

    def glGetUniformBlockIndex(self, program, name):
        return next(idx for n, idx in self.blocks if n == name)

    def __getattr__(self, name):
        if name.startswith("glUniform"):
            return lambda *args: self.calls.append((name, *args))
        raise AttributeError(name)


@pytest.fixture
def root(tmp_path):
    folder = tmp_path / "src" / "shader"
    folder.mkdir(parents=True)
    (folder / "v.glsl").write_text("void main() { gl_Position = vec4(0); }")
    (folder / "f.glsl").write_text("void main() {}")
    return tmp_path


def test_load_shader_reads_source_from_shader_folder(root):
    gl = FakeGL()
    stage = ShaderStage("v.glsl", GL_VERTEX_SHADER)
    ident = load_shader(stage, root, gl)
    assert stage.id == ident
    assert gl.sources[ident] == "void main() { gl_Position = vec4(0); }"


def test_load_shader_missing_file(root):
    with pytest.raises(ShaderError):
        load_shader(ShaderStage("missing.glsl", GL_VERTEX_SHADER), root, FakeGL())


def test_load_shader_compile_failure_reports_log(root):
    gl = FakeGL(compile_ok=False)
    with pytest.raises(ShaderError, match="syntax error near main"):
        load_shader(ShaderStage("v.glsl", GL_VERTEX_SHADER), root, gl)


def test_load_shader_gl_error(root):
    gl = FakeGL()
    gl.errors.append(0x0500)
    with pytest.raises(ShaderError):
        load_shader(ShaderStage("v.glsl", GL_VERTEX_SHADER), root, gl)


def test_link_program_attaches_every_stage(root):
    gl = FakeGL()
    stages = [ShaderStage("v.glsl", GL_VERTEX_SHADER), ShaderStage("f.glsl", GL_FRAGMENT_SHADER)]
    program_id = link_program(stages, root, gl)
    assert gl.attached == [(program_id, stages[0].id), (program_id, stages[1].id)]


def test_link_program_needs_stages(root):
    with pytest.raises(ValueError):
        link_program([], root, FakeGL())


def test_link_program_link_failure(root):
    gl = FakeGL(link_ok=False)
    with pytest.raises(ShaderError, match="undefined symbol"):
        link_program([ShaderStage("v.glsl", GL_VERTEX_SHADER)], root, gl)


def test_build_collects_uniforms_and_skips_block_members(root):
    gl = FakeGL(
        uniforms=[("model", 4, -1), ("view", 7, -1), ("Matrices.proj", 2, 0)],
        blocks=[("Matrices", 0)],
    )
    program = ShaderProgram.build([ShaderStage("v.glsl", GL_VERTEX_SHADER)], root, gl)
    assert program.uniform("model") == 4
    assert program.uniform("view") == 7
    assert program.uniform("Matrices.proj") == INVALID_LOCATION
    assert program.uniform_block("Matrices") == 0
    assert program.uniform_block("Lights") == INVALID_LOCATION
    assert gl.used == [program.id]


def test_unknown_uniform_is_invalid_location():
    program = ShaderProgram(1, FakeGL())
    assert program.uniform("nothing") == -1


def test_stage_unload_deletes_once():
    gl = FakeGL()
    stage = ShaderStage("v.glsl", GL_VERTEX_SHADER, id=5)
    stage.unload(gl)
    stage.unload(gl)
    assert gl.deleted_shaders == [5]
    assert stage.id == INVALID_SHADER_ID


def test_program_delete():
    gl = FakeGL()
    program = ShaderProgram(9, gl, uniforms={"model": 1})
    program.delete()
    program.delete()
    assert gl.deleted_programs == [9]
    assert program.uniform("model") == INVALID_LOCATION


def test_scalar_and_vector_setters():
    gl = FakeGL()
    program = ShaderProgram(1, gl)
    program.set_int(3, 2)
    program.set_float(4, 0.5)
    program.set_vec2(5, (1, 2))
    program.set_vec3(6, (1, 2, 3))
    program.set_vec4(7, (1, 2, 3, 4))
    assert gl.calls == [
        ("glUniform1i", 3, 2),
        ("glUniform1f", 4, 0.5),
        ("glUniform2f", 5, 1.0, 2.0),
        ("glUniform3f", 6, 1.0, 2.0, 3.0),
        ("glUniform4f", 7, 1.0, 2.0, 3.0, 4.0),
    ]


def test_set_mat4_uploads_column_major():
    gl = FakeGL()
    program = ShaderProgram(1, gl)
    matrix = [[float(r * 4 + c) for c in range(4)] for r in range(4)]
    program.set_mat4(2, matrix)
    name, location, count, transpose, data = gl.calls[0]
    assert (name, location, count, transpose) == ("glUniformMatrix4fv", 2, 1, False)
    assert data[:4] == [matrix[0][0], matrix[1][0], matrix[2][0], matrix[3][0]]
    assert len(data) == 16


def test_set_mat4_rejects_too_few_matrices():
    program = ShaderProgram(1, FakeGL())
    with pytest.raises(ValueError):
        program.set_mat4(0, [[0.0] * 4] * 4, count=2)