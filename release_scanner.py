"""Discover releases under scan roots.

Two stages:

``iter_audio_files``
    lazy walk yielding candidate files of one extension. Knows nothing about
    releases.
``scan_releases``
    groups candidates into release directories, reads tags once per release
    and yields :class:`release_facets.ReleaseInfo`.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Mapping, Optional

from release_facets import ReleaseInfo, build_release_info
from utils.audio_metadata_reader import read_release_tags
from utils.path_helpers import normalize_path, resolve_release_dir

logger = logging.getLogger(__name__)

TagReader = Callable[[str], Optional[Mapping[str, object]]]


@dataclass
class ScanStats:
    files_seen: int = 0
    releases_found: int = 0


def _log_walk_error(err: OSError) -> None:
    logger.debug("Skipping unreadable entry %s: %s", err.filename, err.strerror or err)


def iter_audio_files(root: str, extension: str, follow_symlinks: bool = False) -> Iterator[str]:
    """Yield regular files under ``root`` whose extension matches ``extension``.

    Matching is case-insensitive. Entries that cannot be read are skipped.
    With ``follow_symlinks`` each real directory is entered at most once.
    """
    ext = extension.lower()
    visited = set()
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error, followlinks=follow_symlinks):
        if follow_symlinks:
            real = os.path.realpath(dirpath)
            if real in visited:
                dirnames[:] = []
                continue
            visited.add(real)
        dirnames.sort()
        for fname in sorted(filenames):
            if os.path.splitext(fname)[1].lower() != ext:
                continue
            full = os.path.join(dirpath, fname)
            if os.path.isfile(full):
                yield full


def scan_releases(
    roots: Iterable[str],
    extension: str,
    depth: int,
    follow_symlinks: bool = False,
    *,
    tag_reader: TagReader = read_release_tags,
    stats: ScanStats | None = None,
) -> Iterator[ReleaseInfo]:
    """Yield one :class:`ReleaseInfo` per distinct release directory.

    The first file of a release with readable tags supplies its facets.
    Files whose tags cannot be read count toward ``stats.files_seen`` only.
    Each call walks the filesystem afresh.
    """
    if stats is None:
        stats = ScanStats()
    seen = set()

    for root in roots:
        if not os.path.exists(root):
            logger.warning("Scan root does not exist: %s", root)
            continue

        for path in iter_audio_files(root, extension, follow_symlinks):
            stats.files_seen += 1
            release_dir = resolve_release_dir(root, path, depth)
            key = normalize_path(release_dir)
            if key in seen:
                continue

            tags = tag_reader(path)
            if tags is None:
                logger.debug("No readable tags, skipping %s", path)
                continue

            seen.add(key)
            stats.releases_found += 1
            yield build_release_info(os.path.abspath(release_dir), tags)
