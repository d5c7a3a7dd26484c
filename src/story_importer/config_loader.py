#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Adapted the loader to the story importer configuration file
# - Load errors raise ConfigError instead of exiting the process
# - Merged the line number lookup used for error reporting into this module
#

"""
config_loader.py - Configuration loading and merging utilities for the story importer
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from .common_yaml_utils import load_safe_yaml, merge_yaml_configs
from .config_schema import DEFAULT_CONFIG_TEMPLATE
from .exceptions import ConfigError


def find_line_number(key_path: str, config_lines: list[str]) -> int | None:
    """
    Find the line number of a configuration key in the YAML file.

    Args:
        key_path: Dot-separated path to key
        config_lines: Configuration file lines

    Returns:
        1-based line number or None if not found
    """
    keys = key_path.split(".")
    depth = 0
    for i, line in enumerate(config_lines, 1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        indent = len(line) - len(line.lstrip())
        # YAML files written from the template use 2-space indentation
        if indent == depth * 2 and stripped.startswith(f"{keys[depth]}:"):
            if depth == len(keys) - 1:
                return i
            depth += 1
    return None


class ConfigLoader:
    """Handles loading and merging of configuration files."""

    def __init__(self, config_path: Path, logger: logging.Logger | None = None):
        """
        Initialize configuration loader.

        Args:
            config_path: Path to configuration file
            logger: Logger instance
        """
        self.config_path = config_path
        self.logger = logger or logging.getLogger(__name__)
        self._config_lines: list[str] = []

    def load_config(self, create_default: bool = True) -> dict[str, Any]:
        """
        Load configuration from file, creating the default file if missing.

        Args:
            create_default: Write the default template when the file is missing;
                otherwise the defaults are used without touching the disk

        Returns:
            Configuration dictionary as written in the file

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        if not self.config_path.exists():
            if not create_default:
                return self.get_default_config()
            self.logger.info(f"Configuration file not found. Creating default at: {self.config_path}")
            self._create_default_config()

        try:
            self._config_lines = self.config_path.read_text(encoding="utf-8").split("\n")
            config = load_safe_yaml(self.config_path)
        except (OSError, ValueError) as e:
            raise ConfigError(str(self.config_path), str(e)) from e

        if not config:
            self.logger.warning("Configuration file is empty. Using defaults.")
            return self.get_default_config()
        return config

    def _create_default_config(self) -> None:
        try:
            self.config_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
        except OSError as e:
            self.logger.error(f"Failed to create configuration file: {e}")
            raise ConfigError(str(self.config_path), f"cannot create default configuration: {e}") from e
        self.logger.info("Default configuration file created successfully.")

    def get_default_config(self) -> dict[str, Any]:
        """Default configuration as a dictionary."""
        result = yaml.safe_load(DEFAULT_CONFIG_TEMPLATE)
        return result if isinstance(result, dict) else {}

    def merge_with_defaults(self, config: dict[str, Any]) -> dict[str, Any]:
        """Merge user config over the defaults so every key exists."""
        return merge_yaml_configs(self.get_default_config(), config)

    def get_config_lines(self) -> list[str]:
        return self._config_lines

    def find_line_number(self, key_path: str) -> int | None:
        return find_line_number(key_path, self._config_lines)
