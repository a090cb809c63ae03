"""Exceptions raised while resolving and installing plugins.

Errors fall in two groups. Structural errors (``ConstraintViolation``,
``PluginDirectoryError``) abort the whole command. Everything else is
isolated to the plugin it concerns and reported as a failed outcome.
"""

from __future__ import annotations


class PluginError(Exception):
    """Base class for plugin resolution and installation errors."""

    fatal = False


class ConstraintViolation(PluginError):
    """Requested version lies on or above the compatibility boundary."""

    fatal = True

    def __init__(self, constraint: str, boundary: str) -> None:
        self.constraint = constraint
        self.boundary = boundary
        super().__init__(
            f"You cannot specify a version greater than or equal to {boundary} "
            f"for V1 plugins (requested {constraint})"
        )


class PluginDirectoryError(PluginError):
    """The local plugin directory could not be created."""

    fatal = True


class MetadataLookupFailure(PluginError):
    """The registry could not return version metadata for a source."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to retrieve plugin versions: {source}: {reason}")


class NoValidVersion(PluginError):
    """No published version passed the compatibility policy."""

    def __init__(self, source: str, versions: list[str], requirement: str) -> None:
        self.source = source
        self.versions = versions
        self.requirement = requirement
        found = ", ".join(versions) if versions else "none"
        super().__init__(
            f"Unable to find a valid version of {source} in the registry. "
            f"{requirement}. Found plugin versions: [{found}]"
        )


class PackageManagerError(PluginError):
    """A package manager command failed."""

    def __init__(self, command: str, message: str) -> None:
        self.command = command
        self.message = message
        super().__init__(f"npm {command} failed: {message}")
