"""
Runtime settings for Catan Universe Patcher.

Everything the locator needs to know about the game and the Steam layout
lives on PatcherSettings so tests (and odd setups) can point the pipeline at
a different home directory or source root without touching module globals.

Environment overrides
---------------------
CATANPATCH_HOME          home directory used for library probes and search
CATANPATCH_SOURCE_ROOT   directory holding cracktanedFiles/ and OriginalFiles/
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

Mode = Literal["install", "restore"]

INSTALL_SOURCE_DIR_NAME = "cracktanedFiles"
RESTORE_SOURCE_DIR_NAME = "OriginalFiles"

LIBRARY_MANIFEST = Path("steamapps") / "libraryfolders.vdf"


def default_source_root() -> Path:
    # Frozen exe unpacks bundled data into _MEIPASS, dev runs from the checkout
    if getattr(sys, "frozen", False):
        return Path(sys._MEIPASS)
    return Path(__file__).resolve().parent


class PatcherSettings(BaseModel):
    """What to look for, where to look, and where the replacement files are."""

    target_name: str = "catan universe"
    game_dir_pattern: str = "*catan*"
    executable_names: tuple[str, ...] = (
        "Catan.exe",
        "CatanUniverse.exe",
        "Catan.x86_64",
        "CatanUniverse.x86_64",
    )
    executable_suffixes: tuple[str, ...] = (".exe", ".x86_64")
    data_dir_names: tuple[str, ...] = ("CatanUniverse_Data", "Catan_Data")
    install_source_dir: str = INSTALL_SOURCE_DIR_NAME
    restore_source_dir: str = RESTORE_SOURCE_DIR_NAME

    home: Path = Field(default_factory=Path.home)
    source_root: Path = Field(default_factory=default_source_root)
    system_steam_roots: tuple[Path, ...] = (
        Path("/usr/local/share/steam"),
        Path("/usr/share/steam"),
    )
    library_search_depth: int = 3
    common_search_depth: int = 2

    @field_validator("library_search_depth", "common_search_depth")
    @classmethod
    def _positive_depth(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"search depth must be at least 1, got {v}")
        return v

    @classmethod
    def from_env(cls, **overrides) -> PatcherSettings:
        env_home = os.environ.get("CATANPATCH_HOME")
        env_source = os.environ.get("CATANPATCH_SOURCE_ROOT")
        if env_home and "home" not in overrides:
            overrides["home"] = Path(env_home).expanduser()
        if env_source and "source_root" not in overrides:
            overrides["source_root"] = Path(env_source).expanduser()
        return cls(**overrides)

    @property
    def default_steam_root(self) -> Path:
        """The Steam root under the user's data home (~/.local/share/Steam)."""
        return self.home / ".local" / "share" / "Steam"

    @property
    def probe_paths(self) -> list[Path]:
        """Conventional library roots, in the order they are checked."""
        return [
            self.home / ".steam",
            self.default_steam_root,
            self.home / ".steam" / "steam",
            *self.system_steam_roots,
        ]

    def source_dir_for(self, mode: Mode) -> Path:
        name = self.restore_source_dir if mode == "restore" else self.install_source_dir
        return self.source_root / name
