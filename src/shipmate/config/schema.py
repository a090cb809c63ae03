"""Pydantic models for shipmate.yaml configuration."""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from semantic_version import Version


class DirectoryConfig(BaseModel):
    """Authorized plugin directory configuration."""

    url: str = Field(
        default="http://plugins.containership.io",
        description="URL of the curated plugin directory (JSON)",
    )
    timeout: float = Field(default=10.0, description="Request timeout in seconds", gt=0)


class CompatibilityConfig(BaseModel):
    """Rules deciding which plugin versions the host can load."""

    policy: Literal["cutoff", "metadata_tag"] = Field(
        default="cutoff",
        description="'cutoff' compares against a boundary version, "
        "'metadata_tag' reads the generation tag from package metadata",
    )
    cutoff_version: str = Field(
        default="2.0.0",
        description="First version that is no longer a V1 plugin (cutoff policy)",
    )
    metadata_key: str = Field(
        default="containership",
        description="package.json key holding {'plugin': {'version': ...}} (metadata_tag policy)",
    )
    incompatible_tags: list[str] = Field(
        default_factory=lambda: ["v2"],
        description="Generation tags that cannot be installed (metadata_tag policy)",
    )

    @field_validator("cutoff_version")
    @classmethod
    def _valid_semver(cls, value: str) -> str:
        Version(value)  # raises ValueError on malformed versions
        return value


class PackageManagerConfig(BaseModel):
    """npm invocation settings."""

    executable: str = Field(default="npm", description="npm executable name or path")
    timeout: float = Field(default=300.0, description="Timeout per npm command in seconds", gt=0)
    options: dict[str, Any] = Field(
        default_factory=lambda: {"force": True, "unsafe-perm": True, "loglevel": "silent"},
        description="npm config flags; true becomes --flag, other values --flag=value",
    )


class PluginsConfig(BaseModel):
    """Plugin management configuration."""

    plugin_location: str = Field(
        default="~/.containership/plugins",
        description="npm prefix that plugins are installed into",
    )
    display_prefix: str = Field(
        default="containership.plugin.",
        description="Namespace prefix stripped from plugin names when printing",
    )
    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)
    compatibility: CompatibilityConfig = Field(default_factory=CompatibilityConfig)
    package_manager: PackageManagerConfig = Field(default_factory=PackageManagerConfig)


class ShipmateConfig(BaseModel):
    """Root configuration model for shipmate.yaml."""

    plugins: PluginsConfig = Field(
        default_factory=PluginsConfig,
        description="Plugin management configuration",
    )
