"""Compatibility policies between V1 and V2 plugin generations.

A policy decides which published versions of a plugin this host may load
and picks the newest of them. Two policies exist:

- ``cutoff``: every version below a boundary (``2.0.0``) is a V1 plugin.
- ``metadata_tag``: versions declare their generation in package.json
  (``{"containership": {"plugin": {"version": "v2"}}}``) and tagged
  incompatible versions are dropped.

Usage::

    policy = create_policy(config.plugins.compatibility)
    policy.check_constraint("1.4.0")
    version = policy.select(source, versions)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, ClassVar

from semantic_version import Version

from shipmate.plugins.errors import ConstraintViolation, NoValidVersion
from shipmate.plugins.models import WILDCARD, VersionMetadataMap

logger = logging.getLogger(__name__)

DEFAULT_CUTOFF_VERSION = "2.0.0"
DEFAULT_METADATA_KEY = "containership"
DEFAULT_INCOMPATIBLE_TAGS = ("v2",)


class PolicyRegistry:
    """Lookup of compatibility policies by configuration name."""

    _policies: ClassVar[dict[str, type[CompatibilityPolicy]]] = {}

    @classmethod
    def register(cls, name: str, policy_cls: type[CompatibilityPolicy]) -> None:
        cls._policies[name] = policy_cls

    @classmethod
    def get(cls, name: str) -> type[CompatibilityPolicy]:
        if name not in cls._policies:
            raise KeyError(f"Unknown compatibility policy: {name!r}. Available: {cls.available()}")
        return cls._policies[name]

    @classmethod
    def available(cls) -> list[str]:
        return sorted(cls._policies.keys())


def register_policy(name: str) -> Any:
    """Class decorator that registers a policy under *name*."""

    def decorator(cls: type[CompatibilityPolicy]) -> type[CompatibilityPolicy]:
        cls.name = name
        PolicyRegistry.register(name, cls)
        return cls

    return decorator


def parse_version(value: str) -> Version | None:
    """Parse a semantic version, tolerating a leading ``v`` or ``=``."""
    try:
        return Version(value.strip().lstrip("=v"))
    except ValueError:
        return None


class CompatibilityPolicy:
    """Base class for compatibility policies.

    Subclasses implement ``accepts``; ``check_constraint`` may be
    overridden to reject user input before the registry is queried.
    """

    name: ClassVar[str] = ""

    def check_constraint(self, constraint: str) -> None:
        """Reject a user constraint that can never be satisfied.

        Raises:
            ConstraintViolation: If the constraint is structurally invalid
        """

    def accepts(self, version: Version, metadata: dict[str, Any]) -> bool:
        raise NotImplementedError

    def describe(self) -> str:
        """One line explanation used in NoValidVersion messages."""
        raise NotImplementedError

    def candidates(self, versions: VersionMetadataMap) -> list[str]:
        """Version strings that pass the policy, in no particular order."""
        accepted = []
        for raw, metadata in versions.items():
            version = parse_version(raw)
            if version is None:
                logger.debug("Ignoring unparseable version %r", raw)
                continue
            if self.accepts(version, metadata if isinstance(metadata, dict) else {}):
                accepted.append(raw)
        return accepted

    def select(self, source: str, versions: VersionMetadataMap) -> str:
        """Newest version of ``source`` that passes the policy.

        Raises:
            NoValidVersion: If no version passes
        """
        accepted = self.candidates(versions)
        if not accepted:
            raise NoValidVersion(source, sorted(versions, key=_sort_key), self.describe())

        # Build metadata has no precedence, so equal precedence falls back to the raw string
        return max(accepted, key=lambda raw: (parse_version(raw).precedence_key, raw))


@register_policy("cutoff")
class CutoffPolicy(CompatibilityPolicy):
    """V1 plugins are all versions strictly below a boundary version."""

    def __init__(self, boundary: str = DEFAULT_CUTOFF_VERSION) -> None:
        parsed = parse_version(boundary)
        if parsed is None:
            raise ValueError(f"Invalid compatibility boundary: {boundary!r}")
        self.boundary = boundary
        self._boundary = parsed

    def check_constraint(self, constraint: str) -> None:
        if not constraint or constraint == WILDCARD:
            return

        # Only concrete versions are checked; ranges are left to select()
        requested = parse_version(constraint)
        if requested is not None and requested >= self._boundary:
            raise ConstraintViolation(constraint, self.boundary)

    def accepts(self, version: Version, metadata: dict[str, Any]) -> bool:
        return version < self._boundary

    def describe(self) -> str:
        return f"V1 plugins must have versions less than {self.boundary}"


@register_policy("metadata_tag")
class MetadataTagPolicy(CompatibilityPolicy):
    """Drops versions whose package metadata tags an incompatible generation."""

    def __init__(
        self,
        metadata_key: str = DEFAULT_METADATA_KEY,
        incompatible_tags: Iterable[str] = DEFAULT_INCOMPATIBLE_TAGS,
    ) -> None:
        self.metadata_key = metadata_key
        self.incompatible_tags = frozenset(incompatible_tags)

    def tag(self, metadata: dict[str, Any]) -> str | None:
        """Plugin generation declared by a version, if any."""
        section = metadata.get(self.metadata_key)
        if not isinstance(section, dict):
            return None
        plugin = section.get("plugin")
        if not isinstance(plugin, dict):
            return None
        tag = plugin.get("version")
        return tag if isinstance(tag, str) else None

    def accepts(self, version: Version, metadata: dict[str, Any]) -> bool:
        return self.tag(metadata) not in self.incompatible_tags

    def describe(self) -> str:
        tags = ", ".join(sorted(self.incompatible_tags))
        return f"Versions tagged {self.metadata_key}.plugin.version in [{tags}] are incompatible"


def create_policy(config: Any) -> CompatibilityPolicy:
    """Build the configured policy.

    Args:
        config: CompatibilityConfig instance

    Raises:
        KeyError: If the policy name is not registered
    """
    policy_cls = PolicyRegistry.get(config.policy)
    if policy_cls is CutoffPolicy:
        return CutoffPolicy(boundary=config.cutoff_version)
    if policy_cls is MetadataTagPolicy:
        return MetadataTagPolicy(
            metadata_key=config.metadata_key,
            incompatible_tags=config.incompatible_tags,
        )
    return policy_cls()


def _sort_key(raw: str) -> tuple[int, Any]:
    # Parseable versions first in semver order, the rest alphabetically
    version = parse_version(raw)
    if version is None:
        return (1, raw)
    return (0, (version.precedence_key, raw))
