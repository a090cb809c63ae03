"""Read and write ``shipmate.yaml``.

A missing or empty file means "use the defaults", so a fresh host can run
``shipmate plugin add`` without ``shipmate init`` first.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from shipmate.config.schema import ShipmateConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".containership" / "shipmate.yaml"


class ConfigError(Exception):
    """shipmate.yaml could not be read or does not describe a valid configuration."""


def _resolve(path: Optional[Union[str, Path]]) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def load_config(path: Optional[Union[str, Path]] = None) -> ShipmateConfig:
    """Load shipmate settings.

    Args:
        path: Config file, defaults to ~/.containership/shipmate.yaml

    Raises:
        ConfigError: If the file cannot be read, is not YAML, has a
            non-mapping top level, or fails validation
    """
    path = _resolve(path)
    if not path.exists():
        logger.debug("No config at %s, using defaults", path)
        return ShipmateConfig()

    try:
        data: Any = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return ShipmateConfig()
    if not isinstance(data, dict):
        raise ConfigError(
            f"{path} must contain a mapping of settings, not {type(data).__name__}"
        )

    try:
        return ShipmateConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def save_config(config: ShipmateConfig, path: Optional[Union[str, Path]] = None) -> Path:
    """Write settings as YAML, creating parent directories.

    Returns:
        The path written
    """
    path = _resolve(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False))
    logger.debug("Wrote config to %s", path)
    return path
