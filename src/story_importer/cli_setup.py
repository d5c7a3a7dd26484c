#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Adapted configuration and logging setup for story-import
# - Configuration errors are printed with the key path and line, then exit 1
# - Removed the iCloud and colorama setup
#

"""
cli_setup.py - CLI setup and initialization utilities
=====================================================

Handles initialization of configuration and logging for the story-import
command.
"""

from __future__ import annotations

import logging
import signal
import sys
from pathlib import Path
from typing import Any

from rich.markup import escape

from .common_print_utils import safe_print
from .config_manager import ConfigManager
from .exceptions import ConfigError


def setup_configuration(config_path: str | Path) -> ConfigManager:
    """Load and validate configuration from the config file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        ConfigManager instance
    """
    try:
        return ConfigManager(config_path=Path(config_path))
    except ConfigError as e:
        location = f" (line {e.line})" if e.line else ""
        safe_print(f"[bold red]Configuration error{location}: {escape(str(e))}[/bold red]")
        safe_print("Please fix the configuration file or delete it to regenerate defaults.")
        sys.exit(1)


def setup_logging(config: dict[str, Any]) -> logging.Logger:
    """Set up logging based on configuration.

    Args:
        config: Configuration dictionary

    Returns:
        Configured logger for the story_importer package
    """
    log_level = getattr(logging, str(config["logging"]["level"]).upper(), logging.INFO)
    log_format = config["logging"]["format"]

    logging.basicConfig(level=log_level, format=log_format, force=True)
    logger = logging.getLogger("story_importer")
    logger.setLevel(log_level)

    if config["logging"]["file_enabled"]:
        try:
            file_handler = logging.FileHandler(config["logging"]["file_path"], encoding="utf-8")
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(log_format))
            logger.addHandler(file_handler)
        except OSError as e:
            logger.error(f"Failed to set up file logging to {config['logging']['file_path']}: {e}")
            # Continue without file logging

    return logger


def setup_signal_handler(logger: logging.Logger) -> None:
    """Exit quietly on Ctrl+C."""

    def signal_handler(sig: int, frame: Any) -> None:
        logger.info("Interrupt received. Exiting.")
        sys.exit(130)

    signal.signal(signal.SIGINT, signal_handler)
