"""
Project configuration for the cabinet command line.

A YAML file (``.cabinet.yml`` and friends) supplies defaults for the options
that are otherwise passed on every invocation: the root directory, the AMD,
webpack and TypeScript configs, the package.json entry field and logging.
"""

import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_NAMES = [".cabinet.yml", ".cabinet.yaml", "cabinet.yml", "cabinet.yaml"]

# Keys holding paths, resolved against the config file's directory
_PATH_KEYS = ("directory", "amd_config", "webpack_config", "ts_config")


@dataclass
class CabinetConfig:
    """Defaults for resolution requests made from the command line."""
    directory: Optional[str] = None
    amd_config: Optional[str] = None
    webpack_config: Optional[str] = None
    ts_config: Optional[str] = None
    node_modules_entry: Optional[str] = None
    no_type_definitions: bool = False
    log_level: str = "WARNING"


def load_config(config_path: Optional[str] = None) -> CabinetConfig:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Path to config file (YAML). If None, uses defaults.

    Returns:
        CabinetConfig instance
    """
    defaults = asdict(CabinetConfig())

    if not config_path or not os.path.exists(config_path):
        return CabinetConfig(**defaults)

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"expected a mapping, got {type(file_config).__name__}")
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Using default configuration.")
        return CabinetConfig(**defaults)

    unknown = set(file_config) - set(defaults)
    if unknown:
        logger.warning(f"Ignoring unknown keys in {config_path}: {sorted(unknown)}")

    merged: Dict[str, Any] = dict(defaults)
    merged.update({key: value for key, value in file_config.items() if key in defaults})

    base_dir = os.path.dirname(os.path.abspath(config_path))
    for key in _PATH_KEYS:
        value = merged.get(key)
        if isinstance(value, str) and value:
            merged[key] = os.path.normpath(os.path.join(base_dir, value))

    return CabinetConfig(**merged)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Looks for, in order: .cabinet.yml, .cabinet.yaml, cabinet.yml, cabinet.yaml

    Args:
        start_path: File or directory to start searching from

    Returns:
        Path to config file or None if not found
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.isfile(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            break
        current_path = parent_path

    return None
