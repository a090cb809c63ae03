"""Fixtures for plugin resolution and installation tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest
from semantic_version import NpmSpec, Version

from shipmate.plugins.errors import PackageManagerError
from shipmate.plugins.models import AuthorizedPlugin


class FakePackageManager:
    """In-memory stand-in for npm.

    ``registry`` maps a source to its published versions and metadata;
    ``failing_installs`` lists specs whose install should fail.
    """

    def __init__(self, registry: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self.registry = registry or {}
        self.failing_installs: set[str] = set()
        self.failing_uninstalls: set[str] = set()
        self.viewed: list[str] = []
        self.installed: list[str] = []
        self.uninstalled: list[str] = []

    async def load(self, prefix, options=None) -> None:
        pass

    async def view(self, spec: str) -> dict[str, dict[str, Any]]:
        self.viewed.append(spec)
        source, _, constraint = spec.rpartition("@")
        if source not in self.registry:
            raise PackageManagerError("view", f"404 Not Found - {source}")
        versions = self.registry[source]
        if constraint == "*":
            return dict(versions)
        if constraint in versions:
            return {constraint: versions[constraint]}
        # ranges such as ^2.0.0 or 2.1 are matched the way npm matches them
        spec = NpmSpec(constraint)
        return {v: m for v, m in versions.items() if Version(v) in spec}

    async def install(self, spec: str) -> None:
        if spec in self.failing_installs:
            raise PackageManagerError("install", f"could not install {spec}")
        self.installed.append(spec)

    async def uninstall(self, name: str) -> None:
        if name in self.failing_uninstalls:
            raise PackageManagerError("uninstall", f"could not remove {name}")
        self.uninstalled.append(name)

    async def list_installed(self) -> dict[str, str]:
        return {}


def versions(*names: str) -> dict[str, dict[str, Any]]:
    """Version map with minimal metadata for each version."""
    return {name: {"version": name} for name in names}


@pytest.fixture
def package_manager() -> FakePackageManager:
    return FakePackageManager(
        {
            "containership.plugin.navigator": versions("0.9.0", "1.4.2", "1.10.0", "2.0.0", "2.3.1"),
            "containership.plugin.logs": versions("1.0.0", "1.1.0-beta.1"),
            "containership.plugin.v2only": versions("2.0.0", "3.1.0"),
            "https://github.com/acme/containership.plugin.cloud.git": versions("1.2.0"),
        }
    )


@pytest.fixture
def directory() -> dict[str, AuthorizedPlugin]:
    return {
        "navigator": AuthorizedPlugin(
            source="containership.plugin.navigator",
            description="Web UI for containership clusters",
        ),
        "cloud": AuthorizedPlugin(
            source="https://github.com/acme/containership.plugin.cloud.git",
            description="Cloud provider integration",
        ),
    }


@pytest.fixture
def directory_client(directory) -> AsyncMock:
    client = AsyncMock()
    client.fetch.return_value = directory
    return client
