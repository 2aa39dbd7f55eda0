"""
Resolve matching app manifests to Catan Universe install directories.

Resolution order for a manifest whose name matches
---------------------------------------------------
a. <steamapps>/common/<installdir> exists
b. a directory named <installdir> (any case) within two levels of common/
c. no installdir at all: every directory within two levels of common/ that
   matches the game-name wildcard
d. otherwise a diagnostic string saying what was not found

Results from every library are merged and deduplicated by their label, so a
game visible through two overlapping roots is only processed once.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass
from pathlib import Path

from acf_manifest import AppManifest
from patcher_config import PatcherSettings
from patcher_errors import NoInstallationsFoundError
from steam_library import walk_dirs

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedInstallation:
    """A directory believed to hold the game, or a note on why none was found."""

    manifest: AppManifest
    path: Path | None = None
    diagnostic: str | None = None

    def __post_init__(self):
        if (self.path is None) == (self.diagnostic is None):
            raise ValueError("ResolvedInstallation needs exactly one of path or diagnostic")

    @property
    def label(self) -> str:
        return str(self.path) if self.path is not None else self.diagnostic

    @property
    def is_resolved(self) -> bool:
        return self.path is not None


def name_matches(name: str, target_name: str) -> bool:
    return bool(name) and target_name.casefold() in name.casefold()


def _find_dir_icase(base: Path, dirname: str, max_depth: int) -> Path | None:
    wanted = dirname.casefold()
    for d in walk_dirs(base, max_depth):
        if d.name.casefold() == wanted:
            return d
    return None


def _find_dirs_matching(base: Path, pattern: str, max_depth: int) -> list[Path]:
    pattern = pattern.casefold()
    return [d for d in walk_dirs(base, max_depth) if fnmatch.fnmatchcase(d.name.casefold(), pattern)]


def resolve_manifest(
    manifest: AppManifest, settings: PatcherSettings
) -> list[ResolvedInstallation]:
    """Resolve one matching manifest to install directories (or a diagnostic)."""
    common = manifest.common_dir
    depth = settings.common_search_depth
    where = f"{manifest.steamapps_dir} (appmanifest: {manifest.path})"

    if manifest.installdir:
        candidate = common / manifest.installdir
        if candidate.is_dir():
            return [ResolvedInstallation(manifest, path=candidate)]

        # Folder may exist with different case, or one level deeper
        match = _find_dir_icase(common, Path(manifest.installdir).name, depth)
        if match is not None:
            return [ResolvedInstallation(manifest, path=match)]

        return [
            ResolvedInstallation(
                manifest,
                diagnostic=f"{where} - installdir '{manifest.installdir}' not found",
            )
        ]

    guesses = _find_dirs_matching(common, settings.game_dir_pattern, depth)
    if guesses:
        return [ResolvedInstallation(manifest, path=g) for g in guesses]

    return [
        ResolvedInstallation(
            manifest,
            diagnostic=f"{where} - name '{manifest.name}' matched but no folder found",
        )
    ]


def resolve_installations(
    manifests: list[AppManifest], settings: PatcherSettings
) -> list[ResolvedInstallation]:
    """Filter manifests by game name and resolve each, deduplicated in order.

    Raises ``NoInstallationsFoundError`` if nothing matched.
    """
    found: list[ResolvedInstallation] = []
    seen: set[str] = set()

    for manifest in manifests:
        if not name_matches(manifest.name, settings.target_name):
            continue
        _log.info("Manifest %s matches: %r", manifest.path, manifest.name)
        for resolved in resolve_manifest(manifest, settings):
            if resolved.label in seen:
                continue
            seen.add(resolved.label)
            found.append(resolved)

    if not found:
        raise NoInstallationsFoundError()
    return found
