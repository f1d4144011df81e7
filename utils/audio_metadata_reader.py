"""Read the release-level tags (artist, album, genre, year) of an audio file."""
from __future__ import annotations

import logging
from typing import Dict, Optional

from mutagen import File as MutagenFile

from utils.path_helpers import ensure_long_path

logger = logging.getLogger(__name__)

TAG_KEYS = (
    "artist",
    "album",
    "genre",
    "year",
)

ReleaseTags = Dict[str, object]


def _blank_tags() -> ReleaseTags:
    return {key: None for key in TAG_KEYS}


def _first_value(value: object) -> object:
    if isinstance(value, (list, tuple)):
        return _first_value(value[0]) if value else None
    if hasattr(value, "text"):
        text_value = value.text
        if isinstance(text_value, (list, tuple)):
            return _first_value(text_value[0]) if text_value else None
        return str(text_value) if text_value is not None else None
    return value


def tags_from_mutagen(audio) -> ReleaseTags:
    """Extract release tags from a loaded mutagen object.

    A file without a tag block yields all-``None`` fields.
    """
    values = _blank_tags()
    tags = getattr(audio, "tags", None)
    if not tags:
        return values
    values["artist"] = _first_value(tags.get("artist"))
    values["album"] = _first_value(tags.get("album"))
    values["genre"] = _first_value(tags.get("genre"))
    values["year"] = _first_value(tags.get("date") or tags.get("year"))
    return values


def read_release_tags(path: str) -> Optional[ReleaseTags]:
    """Return the release tags for ``path``, or ``None`` if it has no readable metadata."""
    try:
        audio = MutagenFile(ensure_long_path(path), easy=True)
    except Exception as exc:
        logger.debug("Tag read failed for %s: %s", path, exc)
        return None
    if audio is None:
        logger.debug("Unrecognized audio format: %s", path)
        return None
    return tags_from_mutagen(audio)
