"""Tests for directory scanning."""

import pytest

from assetlens.assets.scanner import ScanError, scan_directory


def write(path, size=2048):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x89PNG" + b"x" * (size - 4))
    return path


@pytest.fixture
def project(tmp_path):
    catalog = tmp_path / "App" / "Assets.xcassets"
    write(catalog / "Star.imageset" / "star.png")
    write(catalog / "Star.imageset" / "star@2x.png")
    write(catalog / "Star.imageset" / "star@3x.png")
    (catalog / "Star.imageset" / "Contents.json").write_text("{}")
    write(catalog / "Moon.imageset" / "moon.pdf")
    write(tmp_path / "App" / "Resources" / "banner.JPG")
    write(tmp_path / "App" / "Resources" / "logo.svg")
    write(tmp_path / "App" / "Resources" / "tiny.png", size=100)
    write(tmp_path / "App" / "Resources" / "LaunchImage.png")
    write(tmp_path / "App" / "Resources" / "icon.generated.png")
    write(tmp_path / "App" / "Resources" / "backup~.png")
    write(tmp_path / "App" / "Resources" / "notes.txt")
    write(tmp_path / ".git" / "hidden.png")
    write(tmp_path / "App" / ".secret.png")
    return tmp_path


class TestScanDirectory:
    def test_filters_and_collapses_imagesets(self, project):
        assets = scan_directory(project, min_size_kb=1)
        names = [asset.path.name for asset in assets]

        assert names == ["moon.pdf", "star.png", "banner.JPG", "logo.svg"]

    def test_order_is_stable(self, project):
        first = scan_directory(project)
        second = scan_directory(project)
        assert first == second

    def test_min_size_zero_keeps_small_files(self, project):
        names = {asset.path.name for asset in scan_directory(project, min_size_kb=0)}
        assert "tiny.png" in names

    def test_large_min_size_filters_everything(self, project):
        assert scan_directory(project, min_size_kb=100) == []

    def test_file_types_are_recorded(self, project):
        types = {asset.path.name: asset.file_type for asset in scan_directory(project)}
        assert types["banner.JPG"] == "jpg"
        assert types["moon.pdf"] == "pdf"

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(ScanError):
            scan_directory(tmp_path / "does-not-exist")

    def test_file_root_raises(self, tmp_path):
        with pytest.raises(ScanError):
            scan_directory(write(tmp_path / "file.png"))
