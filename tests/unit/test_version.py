"""Tests for version lookup."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from pathlib import Path

import pytest

import itemdata
from itemdata import _version


class TestSourceVersion:
    """source_version() reads [project].version of the itemdata pyproject."""

    def test_reads_project_version(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "itemdata"\nversion = "1.2.3"\n')
        assert _version.source_version(path) == "1.2.3"

    def test_other_project(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "something-else"\nversion = "9.9.9"\n')
        assert _version.source_version(path) == "0.0.0"

    def test_missing_file(self, tmp_path: Path) -> None:
        assert _version.source_version(tmp_path / "pyproject.toml") == "0.0.0"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("[project\nversion = 1\n")
        assert _version.source_version(path) == "0.0.0"


class TestGetVersion:
    def test_installed_metadata_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(_version, "_metadata_version", lambda name: "4.5.6")
        assert _version.get_version() == "4.5.6"

    def test_falls_back_to_pyproject(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        def not_installed(name: str) -> str:
            raise PackageNotFoundError(name)

        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "itemdata"\nversion = "0.9.0"\n')
        monkeypatch.setattr(_version, "_metadata_version", not_installed)
        monkeypatch.setattr(_version, "PYPROJECT", path)

        assert _version.get_version() == "0.9.0"

    def test_package_version_is_set(self) -> None:
        assert itemdata.__version__
        assert itemdata.__version__ != "0.0.0"
