"""
Calculator configuration.

The configuration is a small YAML (or JSON) document, for example::

    high_accuracy: true

It is loaded once per process and cached. Evaluators read the flag when
they are built; ``set_config`` switches it at runtime.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("landau.expr.config")

# Environment variable naming the configuration file
CONFIG_PATH_ENV = "LANDAU_CONFIG"

DEFAULT_CONFIG_PATH = "config.yaml"


class CalculatorConfig(BaseModel):
    """Configuration for expression evaluation."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # Use the high-precision real-exponent routine for superscripts
    high_accuracy: bool = Field(default=False, alias="highAccuracy")


def _parse_yaml(content: str) -> dict[str, Any]:
    """Parse YAML content as a configuration object."""
    parsed = yaml.safe_load(content or "")
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError("Parsed YAML configuration must be an object")
    return parsed


def load_config(path: Optional[str] = None) -> CalculatorConfig:
    """
    Loads the calculator configuration from a file.

    Args:
        path: Configuration file; defaults to $LANDAU_CONFIG, then
            ``config.yaml`` in the working directory

    Returns:
        The configuration, with defaults when the file does not exist

    Raises:
        ValueError: If the file does not hold a mapping
        pydantic.ValidationError: If a field has the wrong type
    """
    path = path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH

    if not os.path.isfile(path):
        logger.debug("No configuration at %s, using defaults", path)
        return CalculatorConfig()

    with open(path, encoding="utf-8") as handle:
        data = _parse_yaml(handle.read())

    config = CalculatorConfig.model_validate(data)
    logger.debug("Loaded configuration from %s: %s", path, config.model_dump())
    return config


_lock = threading.Lock()
_active_config: Optional[CalculatorConfig] = None


def get_config() -> CalculatorConfig:
    """
    Returns the process-wide configuration, loading it on first use.

    An unreadable or invalid configuration file is logged and replaced by
    the defaults.
    """
    global _active_config
    with _lock:
        if _active_config is None:
            try:
                _active_config = load_config()
            except (OSError, ValueError, yaml.YAMLError) as error:
                logger.warning("Invalid calculator configuration, using defaults: %s", error)
                _active_config = CalculatorConfig()
        return _active_config


def set_config(config: CalculatorConfig) -> None:
    """Replaces the process-wide configuration."""
    global _active_config
    with _lock:
        _active_config = config


def reset_config() -> None:
    """Drops the cached configuration so the next read loads it again."""
    global _active_config
    with _lock:
        _active_config = None
