import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from indexer_errors import ConfigError

logger = logging.getLogger(__name__)

# Audio types the indexer knows about, in processing order.
SUPPORTED_TYPES = {
    "mp3": ".mp3",
    "flac": ".flac",
}

DEFAULT_ENABLE_TYPES = ["mp3", "flac"]
DEFAULT_INDEXES = {
    "mp3": ["alpha", "genre", "year", "groups"],
    "flac": ["alpha", "genre", "groups", "year"],
}
DEFAULT_RELEASE_DEPTH = 1

TRUE_VALUES = {"1", "true", "yes", "on"}

# Shown by ``--help``.
CONFIG_KEYS_HELP = """\
config keys:
  MUSIC_DIR=/path            repeatable, fallback roots for every type
  MP3_DIR=/path              repeatable, preferred roots for mp3
  FLAC_DIR=/path             repeatable, preferred roots for flac
  INDEX_ROOT=/index          required
  ENABLE_TYPES=mp3,flac
  MP3_INDEXES=alpha,genre,year,groups
  FLAC_INDEXES=alpha,genre,groups,year
                             (also supported: artist, album)
  MP3_RELEASE_DEPTH=1        root/YYYY-MM-DD/<release>/... => 2
  FLAC_RELEASE_DEPTH=1
  RELATIVE_SYMLINKS=true|false
  CLEAN_ON_START=true|false
  FOLLOW_SYMLINKS=true|false
"""


@dataclass
class TypeSettings:
    """Effective scan settings for one audio type."""

    name: str
    extension: str
    roots: List[str]
    release_depth: int
    categories: List[str]


@dataclass
class IndexerConfig:
    index_root: str
    music_dirs: List[str] = field(default_factory=list)
    mp3_dirs: List[str] = field(default_factory=list)
    flac_dirs: List[str] = field(default_factory=list)
    relative_symlinks: bool = False
    clean_on_start: bool = False
    follow_symlinks: bool = False
    enable_types: List[str] = field(default_factory=lambda: list(DEFAULT_ENABLE_TYPES))
    mp3_indexes: List[str] = field(default_factory=lambda: list(DEFAULT_INDEXES["mp3"]))
    flac_indexes: List[str] = field(default_factory=lambda: list(DEFAULT_INDEXES["flac"]))
    mp3_release_depth: int = DEFAULT_RELEASE_DEPTH
    flac_release_depth: int = DEFAULT_RELEASE_DEPTH

    def type_settings(self, type_name: str) -> TypeSettings:
        """Return the settings for ``type_name`` ("mp3" or "flac").

        Type-specific roots win; ``music_dirs`` is used when there are none.
        """
        if type_name not in SUPPORTED_TYPES:
            raise KeyError(type_name)
        own_dirs = getattr(self, f"{type_name}_dirs")
        return TypeSettings(
            name=type_name,
            extension=SUPPORTED_TYPES[type_name],
            roots=list(own_dirs or self.music_dirs),
            release_depth=getattr(self, f"{type_name}_release_depth"),
            categories=list(getattr(self, f"{type_name}_indexes")),
        )


def parse_bool(value: str) -> bool:
    return value.strip().lower() in TRUE_VALUES


def parse_depth(value: str, default: int = DEFAULT_RELEASE_DEPTH) -> int:
    try:
        depth = int(value.strip())
    except ValueError:
        return default
    return depth if depth > 0 else default


def split_csv(value: str) -> List[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


def parse_config_lines(lines: Iterable[str]) -> Dict[str, List[str]]:
    """Collect ``KEY=value`` pairs; keys are lower-cased, values kept in order."""
    values: Dict[str, List[str]] = {}
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip().lower()
        if not sep or not key:
            continue
        values.setdefault(key, []).append(value.strip())
    return values


def _dirs(values: Dict[str, List[str]], key: str) -> List[str]:
    return [os.path.expanduser(v) for v in values.get(key, []) if v]


def build_config(values: Dict[str, List[str]]) -> IndexerConfig:
    """Turn parsed config values into an :class:`IndexerConfig`.

    Raises :class:`ConfigError` if no scan root or no ``INDEX_ROOT`` is set.
    """
    music_dirs = _dirs(values, "music_dir")
    mp3_dirs = _dirs(values, "mp3_dir")
    flac_dirs = _dirs(values, "flac_dir")
    if not (music_dirs or mp3_dirs or flac_dirs):
        raise ConfigError(
            "Config error: at least one MUSIC_DIR=... or MP3_DIR=... or FLAC_DIR=... is required"
        )

    index_root = values.get("index_root", [""])[-1]
    if not index_root:
        raise ConfigError("Config error: INDEX_ROOT=... is required")

    def last(key: str):
        found = values.get(key)
        return found[-1] if found else None

    cfg = IndexerConfig(
        index_root=os.path.expanduser(index_root),
        music_dirs=music_dirs,
        mp3_dirs=mp3_dirs,
        flac_dirs=flac_dirs,
    )
    for key in ("relative_symlinks", "clean_on_start", "follow_symlinks"):
        if last(key) is not None:
            setattr(cfg, key, parse_bool(last(key)))
    for key in ("enable_types", "mp3_indexes", "flac_indexes"):
        if last(key) is not None:
            setattr(cfg, key, split_csv(last(key)))
    for key in ("mp3_release_depth", "flac_release_depth"):
        if last(key) is not None:
            setattr(cfg, key, parse_depth(last(key)))
    return cfg


def load_config(path: str) -> IndexerConfig:
    """Load and validate the config file at ``path``."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            values = parse_config_lines(f)
    except OSError as e:
        raise ConfigError(f"Cannot open config file: {path} ({e.strerror or e})") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"Cannot read config file: {path} ({e})") from e
    cfg = build_config(values)
    logger.debug("Loaded config from %s: %s", path, cfg)
    return cfg
