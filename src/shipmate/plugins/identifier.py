"""Plugin name parsing and resolution.

Users refer to plugins by curated names (``navigator``), registry names
(``containership.plugin.navigator``) or source URLs, optionally followed
by ``@constraint``. These helpers turn such strings into the source the
package manager should act on.
"""

from __future__ import annotations

from shipmate.plugins.models import WILDCARD, AuthorizedDirectory, PluginIdentifier

DEFAULT_DISPLAY_PREFIX = "containership.plugin."


def parse_identifier(raw: str, default_constraint: str = WILDCARD) -> PluginIdentifier:
    """Split ``name@constraint`` on the last ``@``.

    The trailing part only counts as a constraint when both sides are
    non-empty and it holds no ``/``, so scoped packages (``@scope/pkg``)
    and git URLs with a user part (``git+ssh://git@host/repo.git``) stay
    whole.

    Args:
        raw: Identifier as typed by the user
        default_constraint: Constraint used when the identifier has none

    Returns:
        Parsed identifier
    """
    raw = raw.strip()
    head, sep, tail = raw.rpartition("@")

    if sep and head and not tail:
        # "name@" carries no constraint
        return PluginIdentifier(name=head, constraint=default_constraint)

    if sep and head and "/" not in tail:
        return PluginIdentifier(name=head, constraint=tail)

    return PluginIdentifier(name=raw, constraint=default_constraint)


def resolve_source(name: str, directory: AuthorizedDirectory) -> str:
    """Map a curated name to its canonical source; other names pass through."""
    entry = directory.get(name)
    if entry is None:
        return name
    return entry.source


def display_name(name: str, prefix: str = DEFAULT_DISPLAY_PREFIX) -> str:
    """Strip the conventional namespace prefix for printing."""
    if prefix and name.startswith(prefix):
        return name[len(prefix) :]
    return name


def local_package_name(source: str) -> str:
    """Name under which a source ends up in ``node_modules``.

    ``https://github.com/containership/containership.plugin.navigator.git#v1``
    becomes ``containership.plugin.navigator``. Plain registry names,
    including scoped ones, are returned as they are.
    """
    if source.startswith("@") and source.count("/") == 1:
        return source

    name = source.rsplit("/", 1)[-1].split("#", 1)[0]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name
