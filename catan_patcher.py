"""
Catan Universe Patcher - Core Logic

Finds Catan Universe installs across Steam libraries and copies the bundled
replacement files (install) or the backed-up originals (restore) into each
install's data directory.
"""

from __future__ import annotations

import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Literal, Optional

from install_locator import ResolvedInstallation, resolve_installations
from patcher_config import Mode, PatcherSettings
from patcher_errors import MissingSourceDirectoryError, NoInstallationsModifiedError
from steam_library import discover_library_roots, scan_app_manifests

_log = logging.getLogger(__name__)

InstallOutcome = Literal[
    "installed",
    "not_a_directory",
    "no_executable",
    "no_data_directory",
    "copy_failed",
]


@dataclass(frozen=True)
class InstallationTarget:
    """A resolved install with both an executable and a data directory."""

    install_dir: Path
    executable: str
    data_dir: Path


@dataclass
class RunReport:
    """What happened to each resolved installation during one run."""

    mode: Mode
    outcomes: list[tuple[ResolvedInstallation, InstallOutcome]] = field(default_factory=list)
    copied_files: list[Path] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for _, outcome in self.outcomes if outcome == "installed")

    def summary(self) -> str:
        if self.mode == "restore":
            return f"Successfully restored original files in {self.success_count} installation(s)."
        return f"Successfully modified {self.success_count} installation(s)."


def _print_error(msg: str):
    print(msg, file=sys.stderr)


class CatanPatcher:
    """
    Main patcher controller.

    Workflow:
        1. locate() to discover libraries and resolve installations
        2. apply() to validate each installation and copy the source files
        run() does both and enforces the run-level result.
    """

    def __init__(
        self,
        settings: PatcherSettings | None = None,
        log_callback: Optional[Callable[[str], None]] = None,
        error_callback: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings or PatcherSettings.from_env()
        self._log_cb = log_callback or print
        self._error_cb = error_callback or _print_error

    # ── Logging ───────────────────────────────────────────────────────

    def log(self, msg: str):
        _log.info(msg)
        self._log_cb(msg)

    def error(self, msg: str):
        _log.warning(msg)
        self._error_cb(msg)

    # ── Discovery ─────────────────────────────────────────────────────

    def locate(self) -> list[ResolvedInstallation]:
        roots = discover_library_roots(self.settings)
        _log.info("Library roots: %s", [str(r) for r in roots])
        manifests = scan_app_manifests(roots)
        found = resolve_installations(manifests, self.settings)

        self.log(f"Found {len(found)} Catan Universe installation(s):")
        for inst in found:
            self.log(f"  {inst.label}")
        self.log("")
        return found

    # ── Detection ─────────────────────────────────────────────────────

    def detect_executable(self, install_dir: Path) -> str | None:
        for name in self.settings.executable_names:
            if (install_dir / name).is_file():
                return name

        try:
            entries = sorted(install_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            self.error(f"  Cannot list {install_dir}: {e}")
            return None
        for entry in entries:
            if entry.is_file() and entry.name.endswith(self.settings.executable_suffixes):
                return entry.name
        return None

    def detect_data_dir(self, install_dir: Path) -> Path | None:
        for name in self.settings.data_dir_names:
            candidate = install_dir / name
            if candidate.is_dir():
                return candidate
        return None

    def inspect(
        self, inst: ResolvedInstallation
    ) -> tuple[InstallationTarget | None, InstallOutcome | None]:
        """Turn a resolved installation into a copy target, or say why not."""
        if inst.path is None or not inst.path.is_dir():
            self.error(f"Skipping: {inst.label} (not a valid directory)")
            return None, "not_a_directory"

        install_dir = inst.path
        exe = self.detect_executable(install_dir)
        if exe is None:
            self.error(f"Skipping: {install_dir} (no game executable found)")
            return None, "no_executable"
        self.log(f"Found executable: {exe} in {install_dir}")

        data_dir = self.detect_data_dir(install_dir)
        if data_dir is None:
            self.error(
                f"Warning: {self.settings.data_dir_names[0]} directory not found in {install_dir}"
            )
            return None, "no_data_directory"
        self.log(f"Found data directory: {data_dir}")

        return InstallationTarget(install_dir, exe, data_dir), None

    # ── Copy ──────────────────────────────────────────────────────────

    def require_source_dir(self, mode: Mode) -> Path:
        source_dir = self.settings.source_dir_for(mode)
        if not source_dir.is_dir():
            raise MissingSourceDirectoryError(source_dir)
        return source_dir

    def copy_source_files(self, source_dir: Path, data_dir: Path) -> tuple[bool, list[Path]]:
        """Copy every entry directly inside source_dir into data_dir.

        Subdirectories are not descended into; one being present makes the
        copy count as failed, though the plain files are still copied.
        """
        try:
            entries = sorted(source_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            self.error(f"  Cannot list {source_dir}: {e}")
            return False, []
        if not entries:
            self.error(f"  No files to copy in {source_dir}")
            return False, []

        ok = True
        copied: list[Path] = []
        for src in entries:
            dst = data_dir / src.name
            if src.is_dir():
                self.error(f"  Omitting directory '{src}'")
                ok = False
                continue
            if dst.is_dir():
                self.error(f"  Cannot overwrite directory '{dst}' with non-directory '{src}'")
                ok = False
                continue
            try:
                shutil.copy2(src, dst)
            except OSError as e:
                self.error(f"  Cannot copy '{src}': {e}")
                ok = False
                continue
            copied.append(dst)
            self.log(f"  '{src}' -> '{dst}'")
        return ok, copied

    # ── Apply ─────────────────────────────────────────────────────────

    def apply(self, installations: list[ResolvedInstallation], mode: Mode) -> RunReport:
        """Process each installation independently and record its outcome.

        A missing source directory is a packaging problem, not an
        installation problem, so it aborts the run before anything is copied.
        """
        report = RunReport(mode=mode)
        source_dir = self.require_source_dir(mode)
        action_verb = "Restoring" if mode == "restore" else "Installing"

        for inst in installations:
            target, outcome = self.inspect(inst)
            if target is None:
                report.outcomes.append((inst, outcome))
                continue

            self.log(f"{action_verb} files to {target.data_dir}...")
            ok, copied = self.copy_source_files(source_dir, target.data_dir)
            report.copied_files.extend(copied)
            if ok:
                if mode == "restore":
                    self.log(f"✓ Successfully restored original files to {target.data_dir}")
                else:
                    self.log(f"✓ Successfully installed cracked files to {target.data_dir}")
                report.outcomes.append((inst, "installed"))
            else:
                self.error(f"✗ Failed to copy files to {target.data_dir}")
                report.outcomes.append((inst, "copy_failed"))
            self.log("")

        return report

    def run(self, mode: Mode) -> RunReport:
        """Locate, apply, and fail the run if nothing was modified."""
        _log.info("Run started in %s mode", mode)
        report = self.apply(self.locate(), mode)
        if report.success_count == 0:
            raise NoInstallationsModifiedError()
        self.log(report.summary())
        return report


def locate_and_apply(
    mode: Mode,
    settings: PatcherSettings | None = None,
    log_callback: Optional[Callable[[str], None]] = None,
    error_callback: Optional[Callable[[str], None]] = None,
) -> RunReport:
    """Run the whole pipeline once. Raises a PatcherError on run-level failure."""
    patcher = CatanPatcher(settings, log_callback=log_callback, error_callback=error_callback)
    return patcher.run(mode)
