"""Reporting of OpenGL errors and debug messages."""

from __future__ import annotations

import logging
from typing import Any

__all__ = ["GL_ERROR_NAMES", "IGNORED_DEBUG_IDS", "error_name", "check_error", "debug_output"]

log = logging.getLogger(__name__)

GL_NO_ERROR = 0

GL_ERROR_NAMES: dict[int, str] = {
    0x0500: "INVALID_ENUM",
    0x0501: "INVALID_VALUE",
    0x0502: "INVALID_OPERATION",
    0x0503: "STACK_OVERFLOW",
    0x0504: "STACK_UNDERFLOW",
    0x0505: "OUT_OF_MEMORY",
    0x0506: "INVALID_FRAMEBUFFER_OPERATION",
}

IGNORED_DEBUG_IDS = frozenset({131169, 131185, 131218, 131204})
"""Driver message ids that carry no useful information."""


def error_name(code: int) -> str:
    """Name of an OpenGL error code, ``UNKNOWN`` if it is not a known one."""
    return GL_ERROR_NAMES.get(code, "UNKNOWN")


def check_error(gl: Any, function: str, line: int) -> list[int]:
    """Drain and log every pending error of ``gl``; return the codes found, oldest first."""
    found: list[int] = []
    while (code := int(gl.glGetError())) != GL_NO_ERROR:
        log.error("OPENGL(%d):\t%s:%d: %s", code, function, line, error_name(code))
        found.append(code)
    return found


def debug_output(
    source: int,
    kind: int,
    ident: int,
    severity: int,
    length: int,
    message: Any,
    user_param: Any,
) -> bool:
    """Debug message callback; logs the message unless its id is ignored. Returns whether it was logged."""
    if ident in IGNORED_DEBUG_IDS:
        return False
    if isinstance(message, (bytes, bytearray)):
        message = bytes(message).decode("utf-8", errors="replace")
    log.error("OPENGL(%d):\t%s", ident, message)
    return True