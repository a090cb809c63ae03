"""Shared fixtures for CLI tests."""

from pathlib import Path

import pytest
import yaml


@pytest.fixture
def tmp_config_path(tmp_path: Path) -> Path:
    """Provide a temporary config file path."""
    return tmp_path / "shipmate.yaml"


@pytest.fixture
def config_file(tmp_path: Path, tmp_config_path: Path) -> Path:
    """Config file pointing plugins and the directory at test locations."""
    tmp_config_path.write_text(
        yaml.safe_dump(
            {
                "plugins": {
                    "plugin_location": str(tmp_path / "plugins"),
                    "directory": {"url": "http://directory.test"},
                }
            }
        )
    )
    return tmp_config_path
