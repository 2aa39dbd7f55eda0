"""
Steam library discovery for Catan Universe Patcher.

A library root is a directory whose steamapps/ holds libraryfolders.vdf.
Roots come from a fixed list of conventional locations, plus the default
data-home Steam root; only when none of those pan out do we fall back to a
shallow search of the home directory.

Public API
----------
discover_library_roots(settings) -> list[Path]
scan_app_manifests(roots)        -> list[AppManifest]
walk_dirs(base, max_depth)       -> iterator of directories below base
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from acf_manifest import APP_MANIFEST_GLOB, AppManifest, read_app_manifest
from patcher_config import LIBRARY_MANIFEST, PatcherSettings
from patcher_errors import NoLibrariesFoundError

LIBRARY_MANIFEST_NAME = LIBRARY_MANIFEST.name

_log = logging.getLogger(__name__)


# ── Filesystem walking ────────────────────────────────────────────────


def _children(directory: Path) -> list[Path]:
    try:
        return sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        # Unreadable directories are skipped, same as `find 2>/dev/null`
        _log.debug("Skipping unreadable directory %s: %s", directory, exc)
        return []


def _walk(base: Path, max_depth: int, depth: int = 1) -> Iterator[tuple[Path, int]]:
    for child in _children(base):
        yield child, depth
        if depth < max_depth and child.is_dir() and not child.is_symlink():
            yield from _walk(child, max_depth, depth + 1)


def walk_dirs(base: Path, max_depth: int) -> Iterator[Path]:
    """Yield real (non-symlink) directories 1..max_depth levels below base.

    Order is depth-first preorder with siblings sorted by name.
    """
    for path, _ in _walk(base, max_depth):
        if path.is_dir() and not path.is_symlink():
            yield path


def find_files_named(base: Path, name: str, max_depth: int) -> Iterator[Path]:
    """Yield regular files called ``name`` at most max_depth levels below base."""
    for path, _ in _walk(base, max_depth):
        if path.name == name and path.is_file() and not path.is_symlink():
            yield path


# ── Library discovery ─────────────────────────────────────────────────


def has_library_manifest(root: Path) -> bool:
    return (root / LIBRARY_MANIFEST).is_file()


def _dedupe(paths: list[Path]) -> list[Path]:
    seen: set[str] = set()
    unique: list[Path] = []
    for p in paths:
        key = str(p)
        if key not in seen:
            seen.add(key)
            unique.append(p)
    return unique


def discover_library_roots(settings: PatcherSettings) -> list[Path]:
    """Return every Steam library root we can find, first-seen order, no repeats.

    Raises ``NoLibrariesFoundError`` if there are none.
    """
    libraries: list[Path] = []

    for candidate in settings.probe_paths:
        if candidate.is_dir() and has_library_manifest(candidate):
            _log.debug("Library root (probe): %s", candidate)
            libraries.append(candidate)

    # The data-home root counts as soon as its steamapps/ exists
    if (settings.default_steam_root / "steamapps").is_dir():
        libraries.append(settings.default_steam_root)

    if not libraries:
        _log.info(
            "No library root at conventional paths, searching %s (depth %d)",
            settings.home,
            settings.library_search_depth,
        )
        for vdf in find_files_named(
            settings.home, LIBRARY_MANIFEST_NAME, settings.library_search_depth
        ):
            # steamapps/ or config/ both sit one level below the Steam root
            root = vdf.parent.parent
            _log.debug("Library root (search): %s", root)
            libraries.append(root)

    libraries = _dedupe(libraries)
    if not libraries:
        raise NoLibrariesFoundError(settings.probe_paths, settings.home)
    return libraries


# ── Manifest scan ─────────────────────────────────────────────────────


def scan_app_manifests(roots: list[Path]) -> list[AppManifest]:
    """Read every appmanifest_*.acf directly under each root's steamapps/."""
    manifests: list[AppManifest] = []
    for root in roots:
        steamapps = root / "steamapps"
        if not steamapps.is_dir():
            continue
        for acf in sorted(steamapps.glob(APP_MANIFEST_GLOB)):
            if not acf.is_file():
                continue
            manifest = read_app_manifest(acf)
            if manifest is not None:
                manifests.append(manifest)
    _log.info("Scanned %d app manifest(s) in %d library root(s)", len(manifests), len(roots))
    return manifests
