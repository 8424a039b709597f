"""Window, input routing and the frame loop."""

from __future__ import annotations

import argparse
import logging
import time
from typing import Any, Callable, Optional

from .demo import DEFAULT_MODEL, Demo

__all__ = ["AppWindow", "main", "parse_args"]

log = logging.getLogger(__name__)

KEY_T = ord("t")
KEY_ESCAPE = 0xFF1B

GL_FRONT_AND_BACK = 0x0408
GL_LINE = 0x1B01
GL_FILL = 0x1B02
GL_FRAMEBUFFER_SRGB = 0x8DB9
GL_COLOR_BUFFER_BIT = 0x4000
GL_DEPTH_BUFFER_BIT = 0x0100
CLEAR_COLOR = (0.2, 0.3, 0.3, 0.5)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="gamomania", description="Render a lit model.")
    parser.add_argument("--root", default=".", help="project directory holding asset/ and src/shader/")
    parser.add_argument("--model", default=DEFAULT_MODEL, help="model path under asset/model")
    parser.add_argument("--width", type=int, default=800)
    parser.add_argument("--height", type=int, default=600)
    return parser.parse_args(argv)


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


class AppWindow:
    """Event handlers that drive a ``Demo`` from a window."""

    def __init__(
        self,
        demo: Demo,
        keys: Optional[Callable[[], set[str]]] = None,
        clock: Callable[[], int] = _now_ms,
        window: Any = None,
    ) -> None:
        self.demo = demo
        self.keys = keys or set
        self.clock = clock
        self.window = window
        self.wireframe = False
        self.running = True

    def _apply_keys(self) -> None:
        self.demo.movement.apply_keys(self.keys())

    def on_resize(self, width: int, height: int) -> bool:
        self.demo.viewport_width = width
        self.demo.viewport_height = height
        if height:
            self.demo.cam.set_aspect_from_viewport(width, height)
        self.demo.gl.glViewport(0, 0, width, height)
        self._apply_keys()
        return True

    def on_key_release(self, symbol: int, modifiers: int) -> None:
        if symbol == KEY_T:
            mode = GL_FILL if self.wireframe else GL_LINE
            self.demo.gl.glPolygonMode(GL_FRONT_AND_BACK, mode)
            self.wireframe = not self.wireframe
        elif symbol == KEY_ESCAPE:
            self.running = False
            if self.window is not None:
                self.window.close()
            return
        self._apply_keys()

    def on_mouse_motion(self, x: int, y: int, dx: float, dy: float) -> None:
        # Window y grows upward; the camera expects downward motion as positive.
        self.demo.movement.record_mouse(float(dx), float(-dy))
        self._apply_keys()

    def on_draw(self) -> None:
        gl = self.demo.gl
        self._apply_keys()
        self.demo.update(self.clock())
        gl.glDisable(GL_FRAMEBUFFER_SRGB)
        gl.glClearColor(*CLEAR_COLOR)
        gl.glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        self.demo.render()
        gl.glEnable(GL_FRAMEBUFFER_SRGB)

    def on_close(self) -> None:
        self.demo.delete()
        self.running = False
        log.info("App quit success")


class _PygletGL:
    """OpenGL calls with plain Python arguments on top of pyglet's bindings."""

    def __init__(self, gl: Any) -> None:
        self._gl = gl

    def __getattr__(self, name: str) -> Any:
        if not name.startswith("gl"):
            raise AttributeError(name)
        return getattr(self._gl, name)

    def _chars(self, text: str) -> Any:
        data = text.encode("utf-8")
        buf = (self._gl.GLchar * (len(data) + 1))()
        buf.value = data
        return buf

    def _text(self, fill: Callable[[Any, Any], None], size: int = 512) -> str:
        buf = (self._gl.GLchar * size)()
        length = self._gl.GLsizei(0)
        fill(length, buf)
        return buf.value.decode("utf-8", errors="replace")

    def glShaderSource(self, shader: int, text: str) -> None:
        g = self._gl
        src = self._chars(text)
        pointer_type = g.glShaderSource.argtypes[2]._type_
        sources = (pointer_type * 1)(src)
        g.glShaderSource(shader, 1, sources, None)

    def glGetShaderiv(self, shader: int, pname: int) -> int:
        value = self._gl.GLint(0)
        self._gl.glGetShaderiv(shader, pname, value)
        return value.value

    def glGetShaderInfoLog(self, shader: int) -> str:
        return self._text(lambda n, b: self._gl.glGetShaderInfoLog(shader, 512, n, b))

    def glGetProgramiv(self, program: int, pname: int) -> int:
        value = self._gl.GLint(0)
        self._gl.glGetProgramiv(program, pname, value)
        return value.value

    def glGetProgramInfoLog(self, program: int) -> str:
        return self._text(lambda n, b: self._gl.glGetProgramInfoLog(program, 512, n, b))

    def glGetActiveUniformsiv(self, program: int, indices: list[int], pname: int) -> list[int]:
        g = self._gl
        count = len(indices)
        if count == 0:
            return []
        out = (g.GLint * count)()
        g.glGetActiveUniformsiv(program, count, (g.GLuint * count)(*indices), pname, out)
        return list(out)

    def glGetActiveUniformName(self, program: int, index: int) -> str:
        g = self._gl
        size, kind = g.GLint(0), g.GLenum(0)
        return self._text(
            lambda n, b: g.glGetActiveUniform(program, index, 128, n, size, kind, b),
            128,
        )

    def glGetUniformLocation(self, program: int, name: str) -> int:
        return self._gl.glGetUniformLocation(program, self._chars(name))

    def glGetActiveUniformBlockName(self, program: int, index: int) -> str:
        return self._text(
            lambda n, b: self._gl.glGetActiveUniformBlockName(program, index, 128, n, b), 128
        )

    def glGetUniformBlockIndex(self, program: int, name: str) -> int:
        return self._gl.glGetUniformBlockIndex(program, self._chars(name))

    def glUniformMatrix4fv(self, location: int, count: int, transpose: bool, values: list[float]) -> None:
        g = self._gl
        g.glUniformMatrix4fv(location, count, bool(transpose), (g.GLfloat * len(values))(*values))

    def _gen(self, func: Callable[..., None]) -> int:
        value = self._gl.GLuint(0)
        func(1, value)
        return value.value

    def glGenTextures(self, n: int) -> int:
        return self._gen(self._gl.glGenTextures)

    def glGenBuffers(self, n: int) -> int:
        return self._gen(self._gl.glGenBuffers)

    def glGenVertexArrays(self, n: int) -> int:
        return self._gen(self._gl.glGenVertexArrays)

    def _delete(self, func: Callable[..., None], ident: int) -> None:
        func(1, self._gl.GLuint(ident))

    def glDeleteTextures(self, ident: int) -> None:
        self._delete(self._gl.glDeleteTextures, ident)

    def glDeleteBuffers(self, ident: int) -> None:
        self._delete(self._gl.glDeleteBuffers, ident)

    def glDeleteVertexArrays(self, ident: int) -> None:
        self._delete(self._gl.glDeleteVertexArrays, ident)

    def glTexImage2D(self, target, level, internal, width, height, border, fmt, kind, data: bytes) -> None:
        g = self._gl
        buf = (g.GLubyte * len(data)).from_buffer_copy(data)
        g.glTexImage2D(target, level, internal, width, height, border, fmt, kind, buf)

    def glBufferData(self, target: int, data: bytes, usage: int) -> None:
        g = self._gl
        payload = data or b"\0"
        buf = (g.GLubyte * len(payload)).from_buffer_copy(payload)
        g.glBufferData(target, len(data), buf, usage)

    def glVertexAttribPointer(self, index, size, kind, normalized, stride, offset: int) -> None:
        self._gl.glVertexAttribPointer(index, size, kind, normalized, stride, offset or None)

    def glDrawElements(self, mode: int, count: int, kind: int, offset: int) -> None:
        self._gl.glDrawElements(mode, count, kind, offset or None)


def main(argv: Optional[list[str]] = None) -> int:
    """Open the window, set the demo up and run until it is closed."""
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    import pyglet
    from pyglet.window import key

    config = pyglet.gl.Config(
        major_version=4,
        minor_version=3,
        depth_size=24,
        double_buffer=True,
        sample_buffers=1,
        samples=16,
        debug=True,
    )
    window = pyglet.window.Window(
        args.width, args.height, caption="Gamomania", resizable=True, config=config, vsync=True
    )
    window.set_exclusive_mouse(True)
    gl = _PygletGL(pyglet.gl)
    log.info("OpenGL version: %s", window.context.get_info().get_version())
    gl.glViewport(0, 0, args.width, args.height)

    demo = Demo(gl, root=args.root, model_path=args.model,
                viewport_width=args.width, viewport_height=args.height)
    try:
        demo.setup()
    except Exception:
        log.exception("demo setup failed")
        window.close()
        return 1

    key_state = key.KeyStateHandler()
    window.push_handlers(key_state)

    def pressed() -> set[str]:
        return {key.symbol_string(sym).lower() for sym, down in key_state.items() if down}

    app = AppWindow(demo, keys=pressed, window=window)
    window.push_handlers(app)
    log.info("App start")
    pyglet.app.run()
    return 0