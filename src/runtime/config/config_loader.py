"""Configuration file loading with environment variable substitution."""

from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from src.infra.errors import ConfigurationError
from src.runtime.config.config_data import ConfigData
from src.runtime.config.config_utils import load_env_file, substitute_env_vars

CONFIG_FILENAME = "cfn-deploy.yaml"


def load_config(file_path: Path) -> ConfigData:
    """
    Load a YAML config file with environment variable substitution.

    The YAML file must have a top-level 'config:' key containing configuration
    data. An empty 'config:' section yields the defaults.

    Args:
        file_path: Path to the YAML file

    Returns:
        Validated ConfigData

    Raises:
        ConfigurationError: If the file is missing or unreadable, a required
            environment variable is unset, the YAML is malformed, or
            validation fails
    """
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file: {file_path}", str(e)) from e

    try:
        content = substitute_env_vars(content)
    except ValueError as e:
        raise ConfigurationError(f"Invalid config file: {file_path}", str(e)) from e

    try:
        loaded: Any = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML: {file_path}", str(e)) from e

    if not isinstance(loaded, dict) or "config" not in loaded:
        raise ConfigurationError(
            f"Invalid YAML structure in {file_path}: missing 'config' key"
        )

    try:
        config = ConfigData(**(loaded["config"] or {}))
    except (TypeError, ValidationError) as e:
        raise ConfigurationError(f"Invalid configuration: {file_path}", str(e)) from e

    logger.debug(f"Loaded configuration from {file_path}: backend={config.backend}")
    return config


def resolve_config(project_root: Path, config_path: Path | None = None) -> ConfigData:
    """Load the configuration that applies to a run.

    Loads ``.env`` from the project root first so placeholders can refer to
    it. An explicit ``config_path`` must exist; otherwise ``cfn-deploy.yaml``
    in the project root is used when present, and defaults when not.

    Args:
        project_root: Directory templates are resolved against
        config_path: Explicit config file from the command line

    Returns:
        Validated ConfigData
    """
    load_env_file(project_root)

    if config_path is not None:
        if not config_path.is_absolute():
            config_path = project_root / config_path
        if not config_path.is_file():
            raise ConfigurationError(f"Config file does not exist: {config_path}")
        return load_config(config_path)

    default_path = project_root / CONFIG_FILENAME
    if default_path.is_file():
        return load_config(default_path)

    logger.debug("No config file found, using defaults")
    return ConfigData()
