import os

import pytest


def _read_fake_tags(path):
    """Tag reader for plain-text "tracks": ``artist|album|genre|year``.

    An empty file reads as having no tags at all.
    """
    with open(path, "r", encoding="utf-8") as f:
        text = f.read().strip()
    if not text:
        return None
    artist, album, genre, year = (text.split("|") + ["", "", "", ""])[:4]
    return {"artist": artist, "album": album, "genre": genre, "year": year}


@pytest.fixture
def fake_reader():
    return _read_fake_tags


@pytest.fixture
def write_track():
    def _write(path, tags=""):
        path = str(path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(tags)
        return path

    return _write


def collect_links(index_root):
    """Return ``{relative link path: link target}`` for every symlink under ``index_root``."""
    links = {}
    for dirpath, dirnames, filenames in os.walk(index_root):
        for name in dirnames + filenames:
            full = os.path.join(dirpath, name)
            if os.path.islink(full):
                links[os.path.relpath(full, index_root)] = os.readlink(full)
    return links


@pytest.fixture
def link_snapshot():
    return collect_links
