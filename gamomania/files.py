"""Path building and whole-file reading helpers."""

from __future__ import annotations

import logging
from os import PathLike

__all__ = ["MAX_PATH_LEN", "concat_path", "read_file"]

log = logging.getLogger(__name__)

MAX_PATH_LEN = 1024
"""Size of the path buffer; a joined path keeps at most one less character."""


def concat_path(base: str, *args: str) -> str:
    """Join ``base`` and ``args`` with ``/``, truncated to ``MAX_PATH_LEN - 1`` characters."""
    if base is None:
        raise ValueError("base path must not be None")
    joined = "/".join((str(base), *(str(part) for part in args)))
    return joined[: MAX_PATH_LEN - 1]


def read_file(path: str | PathLike[str]) -> str:
    """Return the whole content of ``path`` as text."""
    if path is None:
        raise ValueError("path must not be None")
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        log.error("read_file: %s", exc)
        raise
    return data.decode("utf-8")