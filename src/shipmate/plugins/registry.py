"""Version metadata lookup against the package registry."""

from __future__ import annotations

import logging

from shipmate.plugins.errors import MetadataLookupFailure, PackageManagerError
from shipmate.plugins.models import WILDCARD, VersionMetadataMap
from shipmate.plugins.package_manager import PackageManager

logger = logging.getLogger(__name__)


class VersionMetadataFetcher:
    """Lists the published versions of a plugin source."""

    def __init__(self, package_manager: PackageManager) -> None:
        self.package_manager = package_manager

    async def fetch(self, source: str, constraint: str = WILDCARD) -> VersionMetadataMap:
        """Versions of ``source`` matching ``constraint``, with their metadata.

        Args:
            source: Canonical registry source
            constraint: Version or range, ``*`` for all versions

        Returns:
            Mapping of version string to package metadata

        Raises:
            MetadataLookupFailure: If the registry lookup fails
        """
        spec = f"{source}@{constraint or WILDCARD}"
        try:
            versions = await self.package_manager.view(spec)
        except PackageManagerError as e:
            raise MetadataLookupFailure(source, e.message) from e

        logger.debug("Registry lists %d versions for %s", len(versions), spec)
        return versions
