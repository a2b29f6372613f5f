"""Shared fixtures for CLI unit tests."""

import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner():
    """Provide a CLI runner."""
    return CliRunner()


@pytest.fixture
def settings_file(tmp_path):
    """Create a settings file declaring filters from several sources."""
    path = tmp_path / "vellum.yaml"
    path.write_text(
        """
local_filters: []
imported_packages:
  - string
filters:
  base: "os.path:basename"
"""
    )
    return path


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run from an empty directory with no settings file configured."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("VELLUM_SETTINGS", raising=False)
    return tmp_path
