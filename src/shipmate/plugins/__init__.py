"""Plugin resolution and installation for Shipmate.

Maps user supplied plugin names to registry sources, picks the newest
version allowed by the compatibility policy, and installs it with npm.
"""

from shipmate.plugins.compatibility import (
    CompatibilityPolicy,
    CutoffPolicy,
    MetadataTagPolicy,
    PolicyRegistry,
    create_policy,
    register_policy,
)
from shipmate.plugins.directory import AuthorizedDirectoryClient
from shipmate.plugins.errors import (
    ConstraintViolation,
    MetadataLookupFailure,
    NoValidVersion,
    PackageManagerError,
    PluginDirectoryError,
    PluginError,
)
from shipmate.plugins.installer import PluginInstaller, create_installer
from shipmate.plugins.models import (
    AuthorizedPlugin,
    BatchResult,
    PluginCommandOptions,
    PluginIdentifier,
    PluginOutcome,
    ResolvedPlugin,
)
from shipmate.plugins.package_manager import NpmPackageManager, PackageManager
from shipmate.plugins.registry import VersionMetadataFetcher

__all__ = [
    "AuthorizedDirectoryClient",
    "AuthorizedPlugin",
    "BatchResult",
    "CompatibilityPolicy",
    "ConstraintViolation",
    "CutoffPolicy",
    "MetadataLookupFailure",
    "MetadataTagPolicy",
    "NoValidVersion",
    "NpmPackageManager",
    "PackageManager",
    "PackageManagerError",
    "PluginCommandOptions",
    "PluginDirectoryError",
    "PluginError",
    "PluginIdentifier",
    "PluginInstaller",
    "PluginOutcome",
    "PolicyRegistry",
    "ResolvedPlugin",
    "VersionMetadataFetcher",
    "create_installer",
    "create_policy",
    "register_policy",
]
