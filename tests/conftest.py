"""
Shared fixtures and helpers for the Catan Universe Patcher test suite.
"""

from pathlib import Path

import pytest

from patcher_config import PatcherSettings

ACF_TEMPLATE = """"AppState"
{{
\t"appid"\t\t"{appid}"
\t"Universe"\t\t"1"
\t"name"\t\t"{name}"
\t"StateFlags"\t\t"4"
{installdir_line}\t"SizeOnDisk"\t\t"1234"
}}
"""


def make_library(root: Path) -> Path:
    """Create <root>/steamapps/libraryfolders.vdf and return <root>/steamapps."""
    steamapps = root / "steamapps"
    steamapps.mkdir(parents=True, exist_ok=True)
    (steamapps / "libraryfolders.vdf").write_text('"libraryfolders"\n{\n}\n', encoding="utf-8")
    return steamapps


def write_manifest(steamapps: Path, appid: int, name: str, installdir: str | None = None) -> Path:
    installdir_line = f'\t"installdir"\t\t"{installdir}"\n' if installdir is not None else ""
    acf = steamapps / f"appmanifest_{appid}.acf"
    acf.write_text(
        ACF_TEMPLATE.format(appid=appid, name=name, installdir_line=installdir_line),
        encoding="utf-8",
    )
    return acf


def make_game(install_dir: Path, exe: str | None = "Catan.exe", data: str | None = "CatanUniverse_Data") -> Path:
    install_dir.mkdir(parents=True, exist_ok=True)
    if exe:
        (install_dir / exe).write_bytes(b"MZ")
    if data:
        (install_dir / data).mkdir(exist_ok=True)
        (install_dir / data / "globalgamemanagers").write_bytes(b"original-ggm")
    return install_dir


def make_source(source_root: Path, dirname: str, files: dict[str, bytes]) -> Path:
    src = source_root / dirname
    src.mkdir(parents=True, exist_ok=True)
    for name, data in files.items():
        (src / name).write_bytes(data)
    return src


def snapshot(directory: Path) -> dict[str, bytes]:
    return {
        p.relative_to(directory).as_posix(): p.read_bytes()
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def fake_home(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def source_root(tmp_path):
    root = tmp_path / "tool"
    root.mkdir()
    return root


@pytest.fixture
def settings(fake_home, source_root):
    """Settings isolated from the real home directory and /usr/share/steam."""
    return PatcherSettings(home=fake_home, source_root=source_root, system_steam_roots=())


@pytest.fixture
def steam_library(fake_home):
    """The default ~/.local/share/Steam library, returned as its steamapps/ dir."""
    return make_library(fake_home / ".local" / "share" / "Steam")


@pytest.fixture
def catan_install(steam_library):
    """A complete Catan Universe install in the default library."""
    write_manifest(steam_library, 544360, "Catan Universe", "CatanUniverse")
    return make_game(steam_library / "common" / "CatanUniverse")
