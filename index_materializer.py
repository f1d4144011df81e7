"""Write and clean the symlink trees of the release index.

Layout: ``<index_root>/<type>/<category>/<facet value>/<release name>``,
each entry a symlink to the release directory. Failures here raise
:class:`indexer_errors.IndexWriteError` and abort the run.
"""
from __future__ import annotations

import logging
import os
import shutil
from typing import Iterable, List, Tuple

from indexer_errors import IndexWriteError
from release_facets import ReleaseInfo

logger = logging.getLogger(__name__)

# category name -> (directory name, ReleaseInfo attribute)
CATEGORY_FIELDS = {
    "alpha": ("alpha", "alpha"),
    "genre": ("genre", "genre"),
    "year": ("year", "year"),
    "artist": ("artist", "artist"),
    "album": ("album", "album"),
    "group": ("groups", "group"),
    "groups": ("groups", "group"),
}


def category_dir_name(category: str) -> str:
    if category == "group":
        return "groups"
    return category


def category_facets(info: ReleaseInfo, categories: Iterable[str]) -> List[Tuple[str, str]]:
    """Return ``(category directory, facet value)`` pairs for ``info``.

    Unrecognized category names are skipped.
    """
    pairs = []
    for category in categories:
        field = CATEGORY_FIELDS.get(category)
        if field is None:
            continue
        dir_name, attr = field
        pairs.append((dir_name, getattr(info, attr)))
    return pairs


def ensure_dir(path: str, dry_run: bool) -> None:
    if dry_run:
        return
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise IndexWriteError("mkdir", path, e) from e


def _remove_entry(path: str, recursive: bool = True) -> None:
    if os.path.isdir(path) and not os.path.islink(path):
        if recursive:
            shutil.rmtree(path)
        else:
            # only empty directories are replaced by a link
            os.rmdir(path)
    else:
        os.unlink(path)


def _link_target(target: str, link_path: str, relative: bool) -> str:
    if not relative:
        return target
    try:
        return os.path.relpath(target, os.path.dirname(link_path))
    except ValueError:
        # e.g. different drives on Windows
        return target


def create_or_replace_symlink(
    target: str,
    link_path: str,
    *,
    relative: bool = False,
    force: bool = False,
    dry_run: bool = False,
) -> bool:
    """Point ``link_path`` at ``target``.

    Returns ``False`` when an entry already exists and ``force`` is not set;
    the existing entry is left as is. Returns ``True`` when the link was
    written, or would have been under ``dry_run``.
    """
    link_target = _link_target(target, link_path, relative)

    if os.path.lexists(link_path):
        if not force:
            logger.debug("Keeping existing entry %s", link_path)
            return False
        if not dry_run:
            try:
                _remove_entry(link_path, recursive=False)
            except OSError as e:
                raise IndexWriteError("remove", link_path, e) from e

    if dry_run:
        logger.debug("Would link %s -> %s", link_path, link_target)
        return True

    try:
        os.symlink(link_target, link_path, target_is_directory=True)
    except OSError as e:
        raise IndexWriteError("symlink", link_path, e, detail=f"-> {link_target}") from e
    logger.debug("Linked %s -> %s", link_path, link_target)
    return True


def materialize_release(
    index_root: str,
    type_name: str,
    info: ReleaseInfo,
    categories: Iterable[str],
    *,
    relative: bool = False,
    force: bool = False,
    dry_run: bool = False,
) -> int:
    """Link ``info`` into every enabled category of ``type_name``.

    Returns the number of links written.
    """
    type_root = os.path.join(index_root, type_name)
    target = os.path.abspath(info.release_dir)
    written = 0
    for dir_name, value in category_facets(info, categories):
        base = os.path.join(type_root, dir_name, value)
        ensure_dir(base, dry_run)
        link = os.path.join(base, info.release_name)
        if create_or_replace_symlink(target, link, relative=relative, force=force, dry_run=dry_run):
            written += 1
    return written


def clean_index(index_root: str, type_name: str, categories: Iterable[str], dry_run: bool = False) -> int:
    """Empty the enabled category trees of ``type_name``.

    Only the listed categories are touched. Returns the number of top-level
    entries removed (or that would be removed under ``dry_run``).
    """
    removed = 0
    done = set()
    for category in categories:
        dir_name = category_dir_name(category)
        if dir_name in done:
            continue
        done.add(dir_name)

        base = os.path.join(index_root, type_name, dir_name)
        if os.path.islink(base):
            logger.warning("Not cleaning symlinked category directory %s", base)
            continue
        if not os.path.isdir(base):
            continue
        try:
            children = sorted(os.listdir(base))
        except OSError as e:
            raise IndexWriteError("list", base, e) from e

        for child in children:
            path = os.path.join(base, child)
            if dry_run:
                logger.info("Would remove %s", path)
            else:
                try:
                    _remove_entry(path)
                except OSError as e:
                    raise IndexWriteError("remove", path, e) from e
            removed += 1
    return removed
