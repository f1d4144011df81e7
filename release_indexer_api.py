# release_indexer_api.py

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional

import run_logger
from config import CONFIG_KEYS_HELP, SUPPORTED_TYPES, IndexerConfig, load_config
from index_materializer import clean_index, materialize_release
from indexer_errors import IndexerError
from release_scanner import ScanStats, TagReader, scan_releases
from utils.audio_metadata_reader import read_release_tags

logger = logging.getLogger(__name__)

LogCallback = Callable[[str], None]


def _log(log_callback: Optional[LogCallback], message: str) -> None:
    if log_callback:
        log_callback(message)
    else:
        logger.info(message)


# ─── A. ONE AUDIO TYPE ─────────────────────────────────────────────────

def index_type(
    config: IndexerConfig,
    type_name: str,
    *,
    force: bool = False,
    clean: bool = False,
    dry_run: bool = False,
    tag_reader: TagReader = read_release_tags,
    log_callback: Optional[LogCallback] = None,
) -> ScanStats:
    """
    1) Optionally empty the enabled category trees of ``type_name``.
    2) Scan the type's roots for releases.
    3) Link every release found into each enabled category.
    Returns the scan counters. IndexWriteError aborts immediately.
    """
    settings = config.type_settings(type_name)

    if clean:
        removed = clean_index(config.index_root, type_name, settings.categories, dry_run)
        _log(log_callback, f"[{type_name}] cleaned {removed} index entries")

    stats = ScanStats()
    for info in scan_releases(
        settings.roots,
        settings.extension,
        settings.release_depth,
        config.follow_symlinks,
        tag_reader=tag_reader,
        stats=stats,
    ):
        materialize_release(
            config.index_root,
            type_name,
            info,
            settings.categories,
            relative=config.relative_symlinks,
            force=force,
            dry_run=dry_run,
        )

    _log(
        log_callback,
        f"[{type_name}] scanned files: {stats.files_seen}, indexed releases: {stats.releases_found}",
    )
    return stats


# ─── B. FULL RUN ────────────────────────────────────────────────────────

def enabled_types(config: IndexerConfig) -> List[str]:
    """Return the enabled types in processing order, warning about unknown names."""
    for name in config.enable_types:
        if name not in SUPPORTED_TYPES:
            logger.warning("Ignoring unsupported type in ENABLE_TYPES: %s", name)
    return [name for name in SUPPORTED_TYPES if name in config.enable_types]


def run_indexer(
    config: IndexerConfig,
    *,
    force: bool = False,
    clean: Optional[bool] = None,
    dry_run: bool = False,
    tag_reader: TagReader = read_release_tags,
    log_callback: Optional[LogCallback] = None,
) -> Dict[str, Dict[str, int]]:
    """Index every enabled type. ``clean=None`` defers to ``CLEAN_ON_START``.

    Returns ``{type: {"files_seen": N, "releases_indexed": M}}``.
    """
    if clean is None:
        clean = config.clean_on_start
    if dry_run:
        _log(log_callback, "Dry run: the index tree will not be modified")

    summary = {}
    for type_name in enabled_types(config):
        stats = index_type(
            config,
            type_name,
            force=force,
            clean=clean,
            dry_run=dry_run,
            tag_reader=tag_reader,
            log_callback=log_callback,
        )
        summary[type_name] = {
            "files_seen": stats.files_seen,
            "releases_indexed": stats.releases_found,
        }
    return summary


# ─── CLI Entry Point ─────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="release-indexer",
        description="Build a browsable symlink index of audio releases",
        epilog=CONFIG_KEYS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("config", help="path to the KEY=value config file")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="report what would be linked without touching the index tree",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="replace index entries that already exist",
    )
    parser.add_argument(
        "--clean",
        dest="clean",
        action="store_true",
        default=None,
        help="empty the enabled category trees first (overrides CLEAN_ON_START)",
    )
    parser.add_argument(
        "--no-clean",
        dest="clean",
        action="store_false",
        help="keep existing category trees (overrides CLEAN_ON_START)",
    )
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--log-file", help="also write a rotating log file here")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    run_logger.install(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_path=args.log_file,
    )

    try:
        config = load_config(args.config)
        run_indexer(config, force=args.force, clean=args.clean, dry_run=args.dry_run)
    except IndexerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        run_logger.uninstall()
    return 0


if __name__ == "__main__":
    sys.exit(main())
