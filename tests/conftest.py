"""Pytest configuration and shared fixtures."""

import pytest

from shipmate.config.schema import ShipmateConfig


@pytest.fixture
def default_config() -> ShipmateConfig:
    """Provide a default configuration for tests."""
    return ShipmateConfig()


@pytest.fixture
def custom_config(tmp_path) -> ShipmateConfig:
    """Provide a custom configuration for tests."""
    config = ShipmateConfig()
    config.plugins.plugin_location = str(tmp_path / "plugins")
    config.plugins.compatibility.policy = "metadata_tag"
    config.plugins.package_manager.executable = "/usr/local/bin/npm"
    return config
