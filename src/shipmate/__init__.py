"""Shipmate - plugin manager for containership hosts.

Shipmate resolves plugin names against a curated directory, picks the
newest registry version that the host's plugin generation can load, and
drives npm to install, update or remove plugins.

Key modules:

- :mod:`shipmate.plugins` - Name resolution, compatibility policies, installer
- :mod:`shipmate.config` - YAML configuration (pydantic schema + loader)
- :mod:`shipmate.cli` - Typer command line
"""

__version__ = "0.1.0"
