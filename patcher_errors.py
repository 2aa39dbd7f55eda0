"""
Run-level failures for Catan Universe Patcher.

Every error that aborts a whole run derives from PatcherError and carries
the process exit code the CLI reports for it. Problems scoped to a single
installation are never raised; they are recorded as an InstallOutcome.
"""

from __future__ import annotations

from pathlib import Path


class PatcherError(Exception):
    """Base class for all run-level patcher failures."""

    exit_code: int = 1


class NoLibrariesFoundError(PatcherError):
    """
    Raised when no Steam library root could be discovered.

    Attributes
    ----------
    probed      : The conventional root paths that were checked.
    search_root : The directory the fallback search started from.
    """

    exit_code = 1

    def __init__(self, probed: list[Path], search_root: Path) -> None:
        self.probed = probed
        self.search_root = search_root
        checked = " ".join(str(p) for p in probed)
        super().__init__(
            f"No Steam libraryfolders found. Checked: {checked} and searched {search_root}"
        )


class NoInstallationsFoundError(PatcherError):
    """Raised when no manifest in any library matches the game."""

    exit_code = 2

    def __init__(self, target_name: str = "Catan Universe") -> None:
        super().__init__(
            f"No {target_name} installations found in detected Steam libraries."
        )


class MissingSourceDirectoryError(PatcherError):
    """Raised when the bundled source directory for the run mode is absent."""

    exit_code = 3

    def __init__(self, source_dir: Path) -> None:
        self.source_dir = source_dir
        super().__init__(
            f"Error: {source_dir.name} directory not found at {source_dir}"
        )


class NoInstallationsModifiedError(PatcherError):
    """Raised when installations were found but none was written to."""

    exit_code = 4

    def __init__(self) -> None:
        super().__init__("No installations were successfully modified.")
