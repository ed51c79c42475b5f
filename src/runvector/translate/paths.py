"""Lexical path helpers for container paths.

Container paths are always POSIX, whatever host runs the translation, and the
host filesystem may not exist at translation time, so cleaning is purely
lexical: no symlink resolution, no ``os.path``.
"""

from __future__ import annotations

import posixpath


def is_absolute(path: str) -> bool:
    return path.startswith("/")


def clean_path(path: str) -> str:
    """Return the canonical lexical form of an absolute or relative path.

    >>> clean_path("/srv//data/./x/../")
    '/srv/data'
    >>> clean_path("//tmp")
    '/tmp'
    """
    cleaned = posixpath.normpath(path)
    # normpath keeps a leading "//" (implementation-defined on POSIX)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def is_within(path: str, ancestor: str) -> bool:
    """True when ``path`` equals ``ancestor`` or lies underneath it.

    Both arguments must already be cleaned absolute paths.
    """
    if path == ancestor or ancestor == "/":
        return True
    return path.startswith(ancestor + "/")
