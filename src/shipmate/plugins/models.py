"""Plugin directory entries, resolution results and batch outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Operation = Literal["install", "update", "uninstall"]

PAST_TENSE: dict[str, str] = {"install": "Installed", "update": "Updated", "uninstall": "Uninstalled"}

WILDCARD = "*"

# version string -> package metadata as published to the registry
VersionMetadataMap = dict[str, dict[str, Any]]


@dataclass(frozen=True)
class AuthorizedPlugin:
    """A curated plugin listed in the authorized directory."""

    source: str
    description: str = ""


# curated name -> entry; an empty mapping means "no curated names known"
AuthorizedDirectory = dict[str, AuthorizedPlugin]


@dataclass(frozen=True)
class PluginIdentifier:
    """A user supplied plugin reference, split into name and constraint."""

    name: str
    constraint: str = WILDCARD

    @property
    def is_wildcard(self) -> bool:
        return self.constraint == WILDCARD

    def __str__(self) -> str:
        if self.is_wildcard:
            return self.name
        return f"{self.name}@{self.constraint}"


@dataclass(frozen=True)
class ResolvedPlugin:
    """The single concrete install target chosen for one identifier."""

    canonical_source: str
    selected_version: str

    @property
    def spec(self) -> str:
        """Package spec handed to the package manager."""
        return f"{self.canonical_source}@{self.selected_version}"


@dataclass
class PluginCommandOptions:
    """Options accepted by the add, update and remove commands.

    ``version`` is the constraint applied to plugins given without one.
    """

    plugin: list[str] = field(default_factory=list)
    version: str | None = None


@dataclass
class PluginOutcome:
    """Result of one install, update or uninstall within a batch."""

    identifier: PluginIdentifier
    operation: Operation
    success: bool
    resolved: ResolvedPlugin | None = None
    package: str | None = None
    error: str | None = None


@dataclass
class BatchResult:
    """Outcomes of one batch, in the order the identifiers were given."""

    operation: Operation
    outcomes: list[PluginOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[PluginOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[PluginOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def ok(self) -> bool:
        return not self.failed
