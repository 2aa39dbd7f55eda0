"""
Steam app manifest (appmanifest_*.acf) reading for Catan Universe Patcher.

ACF files are Valve KeyValues text:

    "AppState"
    {
        "appid"         "544360"
        "name"          "Catan Universe"
        "installdir"    "Catan Universe"
    }

We do not parse the grammar. Only ``name`` and ``installdir`` are needed, so
each is pulled out with a line scanner that tolerates formatting drift:

1. primary: a line that starts with the quoted key followed by a quoted value
2. fallback: the first line mentioning the quoted key, split on ``"``, taking
   the fourth field (the value that follows the key)

A field that neither tier finds is an empty string, never an error.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pydantic import BaseModel, field_validator

APP_MANIFEST_GLOB = "appmanifest_*.acf"

_log = logging.getLogger(__name__)


class AppManifest(BaseModel):
    """The two fields of an appmanifest that matter for locating a game."""

    path: Path
    name: str = ""
    installdir: str = ""

    @field_validator("installdir")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return v.replace("\\", "/").strip().strip("/")

    @property
    def steamapps_dir(self) -> Path:
        return self.path.parent

    @property
    def common_dir(self) -> Path:
        return self.path.parent / "common"


def _primary_value(lines: list[str], key: str) -> str:
    pattern = re.compile(rf'^\s*"{re.escape(key)}"\s*"(.*)"')
    for line in lines:
        m = pattern.match(line)
        if m:
            # greedy capture runs to the last quote; cut at the first one
            return m.group(1).split('"', 1)[0]
    return ""


def _fallback_value(lines: list[str], key: str) -> str:
    needle = f'"{key}"'
    for line in lines:
        if needle in line:
            fields = line.split('"')
            return fields[3] if len(fields) > 3 else ""
    return ""


def extract_field(text: str, key: str) -> str:
    """Return the value of ``key`` in ACF ``text``, or "" if it can't be found."""
    lines = text.splitlines()
    return _primary_value(lines, key) or _fallback_value(lines, key)


def parse_app_manifest(text: str, path: Path) -> AppManifest:
    return AppManifest(
        path=path,
        name=extract_field(text, "name"),
        installdir=extract_field(text, "installdir"),
    )


def read_app_manifest(path: Path) -> AppManifest | None:
    """Read and parse one .acf file. Returns None if the file can't be read."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        _log.warning("Could not read %s: %s", path, exc)
        return None
    manifest = parse_app_manifest(text, path)
    _log.debug("%s: name=%r installdir=%r", path.name, manifest.name, manifest.installdir)
    return manifest
