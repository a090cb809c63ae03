"""Batch install, update and uninstall of plugins.

Each plugin in a batch is handled by its own asyncio task. A failure while
resolving or installing one plugin is recorded in its outcome and does not
affect the others. Constraint violations are checked for the whole batch
before anything is looked up, and abort it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from shipmate.plugins.compatibility import CompatibilityPolicy, create_policy
from shipmate.plugins.directory import AuthorizedDirectoryClient
from shipmate.plugins.errors import PluginError
from shipmate.plugins.identifier import (
    local_package_name,
    parse_identifier,
    resolve_source,
)
from shipmate.plugins.models import (
    WILDCARD,
    AuthorizedDirectory,
    BatchResult,
    PAST_TENSE,
    Operation,
    PluginCommandOptions,
    PluginIdentifier,
    PluginOutcome,
    ResolvedPlugin,
)
from shipmate.plugins.package_manager import NpmPackageManager, PackageManager
from shipmate.plugins.registry import VersionMetadataFetcher

logger = logging.getLogger(__name__)


class PluginInstaller:
    """Resolves plugin identifiers and applies them with the package manager."""

    def __init__(
        self,
        package_manager: PackageManager,
        directory_client: AuthorizedDirectoryClient,
        policy: CompatibilityPolicy,
        fetcher: VersionMetadataFetcher | None = None,
    ) -> None:
        """Initialize the installer.

        Args:
            package_manager: Loaded package manager to install with
            directory_client: Source of curated plugin names
            policy: Compatibility policy used to pick versions
            fetcher: Version lookup, defaults to one backed by package_manager
        """
        self.package_manager = package_manager
        self.directory_client = directory_client
        self.policy = policy
        self.fetcher = fetcher or VersionMetadataFetcher(package_manager)

    async def install(self, options: PluginCommandOptions) -> BatchResult:
        """Install the newest compatible version of each plugin."""
        return await self._apply("install", options)

    async def update(self, options: PluginCommandOptions) -> BatchResult:
        """Move each plugin to its newest compatible version."""
        return await self._apply("update", options)

    async def uninstall(self, options: PluginCommandOptions) -> BatchResult:
        """Remove each plugin from the plugin directory."""
        return await self._apply("uninstall", options)

    async def resolve(
        self, identifier: PluginIdentifier, directory: AuthorizedDirectory
    ) -> ResolvedPlugin:
        """Pick the version of one plugin that would be installed.

        Raises:
            ConstraintViolation: If the constraint crosses the policy boundary
            MetadataLookupFailure: If the registry lookup fails
            NoValidVersion: If no published version passes the policy
        """
        self.policy.check_constraint(identifier.constraint)

        source = resolve_source(identifier.name, directory)
        versions = await self.fetcher.fetch(source, identifier.constraint)
        version = self.policy.select(source, versions)
        return ResolvedPlugin(canonical_source=source, selected_version=version)

    async def _apply(self, operation: Operation, options: PluginCommandOptions) -> BatchResult:
        identifiers = [
            parse_identifier(raw, default_constraint=options.version or WILDCARD)
            for raw in options.plugin
        ]

        if operation != "uninstall":
            # Structural errors abort before any registry call is made
            for identifier in identifiers:
                self.policy.check_constraint(identifier.constraint)

        directory = await self.directory_client.fetch()

        logger.info(
            "Running %s for %d plugin(s): %s",
            operation,
            len(identifiers),
            ", ".join(str(i) for i in identifiers),
        )

        if operation == "uninstall":
            tasks = [self._uninstall_one(i, directory) for i in identifiers]
        else:
            tasks = [self._install_one(operation, i, directory) for i in identifiers]

        outcomes = await asyncio.gather(*tasks)
        return BatchResult(operation=operation, outcomes=list(outcomes))

    async def _install_one(
        self,
        operation: Operation,
        identifier: PluginIdentifier,
        directory: AuthorizedDirectory,
    ) -> PluginOutcome:
        resolved = None
        try:
            resolved = await self.resolve(identifier, directory)
            await self.package_manager.install(resolved.spec)
        except PluginError as e:
            if e.fatal:
                raise
            logger.warning("Failed to %s plugin %s: %s", operation, identifier, e)
            return PluginOutcome(
                identifier=identifier,
                operation=operation,
                success=False,
                resolved=resolved,
                error=str(e),
            )

        logger.info("%s %s", PAST_TENSE[operation], resolved.spec)
        return PluginOutcome(
            identifier=identifier,
            operation=operation,
            success=True,
            resolved=resolved,
            package=resolved.spec,
        )

    async def _uninstall_one(
        self, identifier: PluginIdentifier, directory: AuthorizedDirectory
    ) -> PluginOutcome:
        package = local_package_name(resolve_source(identifier.name, directory))
        try:
            await self.package_manager.uninstall(package)
        except PluginError as e:
            if e.fatal:
                raise
            logger.warning("Failed to uninstall %s: %s", package, e)
            return PluginOutcome(
                identifier=identifier,
                operation="uninstall",
                success=False,
                package=package,
                error=str(e),
            )

        logger.info("Uninstalled %s", package)
        return PluginOutcome(
            identifier=identifier,
            operation="uninstall",
            success=True,
            package=package,
        )


async def create_installer(config: Any) -> PluginInstaller:
    """Build an installer from configuration, with npm loaded on the plugin prefix.

    Args:
        config: PluginsConfig instance

    Raises:
        PluginDirectoryError: If the plugin directory cannot be created
    """
    package_manager = NpmPackageManager(
        executable=config.package_manager.executable,
        timeout=config.package_manager.timeout,
    )
    await package_manager.load(config.plugin_location, config.package_manager.options)

    return PluginInstaller(
        package_manager=package_manager,
        directory_client=AuthorizedDirectoryClient(
            url=config.directory.url,
            timeout=config.directory.timeout,
        ),
        policy=create_policy(config.compatibility),
    )
