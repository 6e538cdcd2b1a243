"""Runtime configuration for the deployment tool."""

from .config_data import ConfigData
from .config_loader import CONFIG_FILENAME, load_config, resolve_config

__all__ = ["ConfigData", "CONFIG_FILENAME", "load_config", "resolve_config"]
