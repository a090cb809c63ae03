"""Client for the authorized plugin directory.

The directory is a JSON object served over HTTP that maps curated plugin
names to their canonical source and a short description::

    {
        "navigator": {
            "source": "containership.plugin.navigator",
            "description": "Web UI for containership clusters"
        }
    }

Availability wins over completeness here: when the directory cannot be
reached the client returns an empty mapping and every identifier is used
as its own source.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from shipmate.plugins.models import AuthorizedDirectory, AuthorizedPlugin

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY_URL = "http://plugins.containership.io"


class AuthorizedDirectoryClient:
    """Fetches the curated plugin directory."""

    def __init__(
        self,
        url: str = DEFAULT_DIRECTORY_URL,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the directory client.

        Args:
            url: Directory endpoint
            timeout: Request timeout in seconds
        """
        self.url = url
        self.timeout = timeout

    async def fetch(self) -> AuthorizedDirectory:
        """Fetch a fresh snapshot of the directory.

        Returns:
            Mapping of curated name to entry, empty if the directory is
            unavailable or its body is not a JSON object
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url)
        except httpx.HTTPError as e:
            logger.warning("Plugin directory %s unavailable: %s", self.url, e)
            return {}

        if response.status_code != 200:
            logger.warning(
                "Plugin directory %s returned HTTP %d, ignoring curated names",
                self.url,
                response.status_code,
            )
            return {}

        try:
            body = response.json()
        except ValueError as e:
            logger.warning("Plugin directory %s returned invalid JSON: %s", self.url, e)
            return {}

        return parse_directory(body)


def parse_directory(body: Any) -> AuthorizedDirectory:
    """Build an AuthorizedDirectory from a decoded JSON body."""
    if not isinstance(body, dict):
        logger.warning("Plugin directory body is not an object, ignoring it")
        return {}

    directory: AuthorizedDirectory = {}
    for name, entry in body.items():
        if not isinstance(entry, dict) or not isinstance(entry.get("source"), str):
            logger.warning("Skipping malformed directory entry '%s'", name)
            continue
        directory[name] = AuthorizedPlugin(
            source=entry["source"],
            description=str(entry.get("description") or ""),
        )

    logger.debug("Loaded %d authorized plugins", len(directory))
    return directory


def search(directory: AuthorizedDirectory, pattern: str | None = None) -> list[str]:
    """Names in the directory matching a regular expression, sorted.

    Raises:
        ValueError: If the pattern is not a valid regular expression
    """
    if not pattern:
        return sorted(directory)

    try:
        regex = re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid search pattern {pattern!r}: {e}") from e

    return sorted(name for name in directory if regex.search(name))
