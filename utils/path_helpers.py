import os
import re

UNKNOWN = "Unknown"

_UNSAFE_CHARS = {"/", "\\", "\0", ":"}
_SEPARATOR_RUN = re.compile(r"([ _])[ _]+")


def sanitize_component(text) -> str:
    """Return ``text`` as a single filesystem-safe path component.

    Path separators, ``:``, NUL and control characters become ``_``; runs of
    spaces/underscores collapse to their first character. Empty results map
    to ``"Unknown"``; a bare ``.`` or ``..`` becomes ``_``.
    """
    if text is None:
        return UNKNOWN
    s = str(text).strip()
    s = "".join("_" if c in _UNSAFE_CHARS or ord(c) < 32 else c for c in s)
    s = _SEPARATOR_RUN.sub(r"\1", s).strip()
    if s in (".", ".."):
        return "_"
    return s or UNKNOWN


def normalize_path(path: str) -> str:
    return os.path.normcase(os.path.normpath(os.path.abspath(path)))


def resolve_release_dir(scan_root: str, file_path: str, depth: int) -> str:
    """Return the release directory owning ``file_path``.

    The release is the first ``depth`` directory levels of the file's parent
    below ``scan_root`` (the whole parent when it is shallower). Files lying
    directly in ``scan_root`` belong to their own parent directory.
    """
    depth = max(int(depth), 1)
    rel = os.path.relpath(file_path, scan_root)
    rel_parent = os.path.dirname(rel)
    if not rel_parent:
        return os.path.dirname(file_path)
    parts = rel_parent.split(os.sep)
    return os.path.join(scan_root, *parts[:depth])


def ensure_long_path(path: str) -> str:
    if os.name == "nt":
        path = os.path.abspath(path)
        if not path.startswith("\\\\?\\"):
            path = "\\\\?\\" + os.path.normpath(path)
    return path
