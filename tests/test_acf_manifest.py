"""
Tests for tolerant appmanifest field extraction.
"""

from pathlib import Path

from acf_manifest import extract_field, parse_app_manifest, read_app_manifest
from tests.conftest import write_manifest


def test_extract_standard_fields():
    text = '"AppState"\n{\n\t"appid"\t\t"544360"\n\t"name"\t\t"Catan Universe"\n\t"installdir"\t\t"Catan Universe"\n}\n'
    assert extract_field(text, "name") == "Catan Universe"
    assert extract_field(text, "installdir") == "Catan Universe"
    assert extract_field(text, "appid") == "544360"


def test_extract_first_occurrence_wins():
    text = '\t"name"\t\t"First"\n\t"name"\t\t"Second"\n'
    assert extract_field(text, "name") == "First"


def test_extract_falls_back_when_key_not_at_line_start():
    text = '"AppState"\n{ "name" "Catan Universe" }\n{ "installdir" "CatanUniverse" }\n'
    assert extract_field(text, "name") == "Catan Universe"
    assert extract_field(text, "installdir") == "CatanUniverse"


def test_fallback_reads_fourth_quoted_field():
    # the value after the first quoted token on the line, whatever that token is
    text = '{ "name" "Catan Universe" "installdir" "CatanUniverse" }\n'
    assert extract_field(text, "installdir") == "Catan Universe"


def test_extract_missing_field_is_empty():
    text = '"AppState"\n{\n\t"appid"\t\t"1"\n}\n'
    assert extract_field(text, "name") == ""
    assert extract_field(text, "installdir") == ""


def test_extract_key_without_value_is_empty():
    assert extract_field('\t"name"\n', "name") == ""


def test_key_match_is_exact():
    text = '\t"username"\t\t"someone"\n'
    assert extract_field(text, "name") == ""


def test_parse_normalizes_installdir():
    m = parse_app_manifest('\t"name"\t"Catan Universe"\n\t"installdir"\t"  Games\\CatanUniverse\\ "\n', Path("x.acf"))
    assert m.name == "Catan Universe"
    assert m.installdir == "Games/CatanUniverse"


def test_read_app_manifest_paths(tmp_path):
    steamapps = tmp_path / "steamapps"
    steamapps.mkdir()
    acf = write_manifest(steamapps, 544360, "Catan Universe", "CatanUniverse")

    m = read_app_manifest(acf)

    assert m is not None
    assert m.path == acf
    assert m.steamapps_dir == steamapps
    assert m.common_dir == steamapps / "common"
    assert m.installdir == "CatanUniverse"


def test_read_app_manifest_unreadable_returns_none(tmp_path):
    assert read_app_manifest(tmp_path / "appmanifest_404.acf") is None
