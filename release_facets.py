"""Facet values for a release: tag-derived fields plus name-derived buckets."""
from __future__ import annotations

import os
import string
from dataclasses import dataclass
from typing import Mapping, Tuple

from utils.path_helpers import UNKNOWN, sanitize_component
from utils.year_normalizer import normalize_year

_ALPHA_CHARS = set(string.ascii_uppercase + string.digits)


@dataclass
class ReleaseInfo:
    """One release directory and the facet values it is indexed under."""

    release_dir: str
    release_name: str
    artist: str
    album: str
    genre: str
    year: str
    group: str
    alpha: str


def alpha_bucket(release_name: str) -> str:
    first = release_name[:1].upper() or "#"
    return first if first in _ALPHA_CHARS else "#"


def release_group(release_name: str) -> str:
    """Return the text after the last ``-`` of ``release_name``, sanitized."""
    pos = release_name.rfind("-")
    if pos == -1 or pos + 1 >= len(release_name):
        return UNKNOWN
    return sanitize_component(release_name[pos + 1:])


def derive_facets(release_name: str) -> Tuple[str, str]:
    return alpha_bucket(release_name), release_group(release_name)


def build_release_info(release_dir: str, tags: Mapping[str, object]) -> ReleaseInfo:
    release_name = os.path.basename(os.path.normpath(release_dir))
    alpha, group = derive_facets(release_name)
    return ReleaseInfo(
        release_dir=release_dir,
        release_name=release_name,
        artist=sanitize_component(tags.get("artist")),
        album=sanitize_component(tags.get("album")),
        genre=sanitize_component(tags.get("genre")),
        year=normalize_year(tags.get("year")),
        group=group,
        alpha=alpha,
    )
