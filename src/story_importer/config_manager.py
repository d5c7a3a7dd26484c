#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Reworked the manager for the story importer configuration
# - Validation reports the first error found, with its key path and line
# - Added build_import_options() and build_registry() so the engine gets its
#   settings injected instead of reading a global configuration
# - Removed the global config instance
# - Non-string regular expressions are rejected during validation
#
# Copyright 2025 Emasoft
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
config_manager.py - Configuration management for the story importer
"""

from __future__ import annotations

import dataclasses
import logging
import re
from pathlib import Path
from typing import Any

from .chapter_patterns import PatternRegistry, compile_user_pattern
from .common_yaml_utils import merge_yaml_configs
from .config_loader import ConfigLoader
from .config_schema import (
    DEFAULT_CONFIG_FILENAME,
    VALID_ENHANCEMENT_LEVELS,
    VALID_FILTER_ACTIONS,
    VALID_FILTER_SEVERITIES,
    VALID_FILTER_TYPES,
    VALID_LOG_LEVELS,
    VALID_OUTPUT_FORMATS,
    VALID_SPLIT_METHODS,
)
from .exceptions import ConfigError, ImportStageError
from .import_constants import EXTENSION_ALIASES
from .models import AIProcessingOptions, ImportOptions, SplitOptions

MAPPING_SECTIONS = ("import", "ai", "batch", "output", "logging")


def _lookup(config: dict[str, Any], key_path: str, default: Any = None) -> Any:
    value: Any = config
    for key in key_path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config_first_error(config: dict[str, Any], defaults: dict[str, Any]) -> tuple[str, str] | None:
    """
    Validate configuration and return only the FIRST error found.

    Args:
        config: Configuration as written by the user
        defaults: Default configuration, for the set of known sections

    Returns:
        (key path, message) of the first error, or None if valid
    """
    for key in config:
        if key not in defaults:
            return key, f"Unknown or malformed key '{key}'"

    for section in MAPPING_SECTIONS:
        if section in config and not isinstance(config[section], dict):
            return section, f"Section '{section}' must be a mapping"
    if "patterns" in config and not isinstance(config["patterns"], list):
        return "patterns", "Section 'patterns' must be a list"

    checks = [
        ("import.file_format", lambda v: str(v).lower() in EXTENSION_ALIASES, f"one of {sorted(set(EXTENSION_ALIASES.values()))}"),
        ("import.split.method", lambda v: v in VALID_SPLIT_METHODS, f"one of {VALID_SPLIT_METHODS}"),
        ("import.split.word_count", lambda v: v is None or (_is_int(v) and v > 0), "a positive integer"),
        ("import.max_file_size", lambda v: v is None or (_is_int(v) and v > 0), "a positive integer or null"),
        ("ai.enhancement_level", lambda v: v in VALID_ENHANCEMENT_LEVELS, f"one of {VALID_ENHANCEMENT_LEVELS}"),
        ("batch.max_concurrency", lambda v: _is_int(v) and v >= 0, "a non-negative integer"),
        ("output.format", lambda v: v in VALID_OUTPUT_FORMATS, f"one of {VALID_OUTPUT_FORMATS}"),
        ("logging.level", lambda v: str(v).upper() in VALID_LOG_LEVELS, f"one of {VALID_LOG_LEVELS}"),
    ]
    missing = object()
    for key_path, is_valid, expected in checks:
        value = _lookup(config, key_path, missing)
        if value is not missing and not is_valid(value):
            return key_path, f"Invalid value '{value}'. Must be {expected}"

    split_pattern = _lookup(config, "import.split.pattern")
    if split_pattern:
        if not isinstance(split_pattern, str):
            return "import.split.pattern", "Pattern must be a string (quote it in YAML)"
        try:
            re.compile(split_pattern)
        except re.error as e:
            return "import.split.pattern", f"Invalid regular expression: {e}"

    filters = _lookup(config, "ai.content_filters", [])
    if not isinstance(filters, list):
        return "ai.content_filters", "Must be a list"
    for index, item in enumerate(filters):
        error = _validate_filter(item)
        if error:
            return f"ai.content_filters[{index}]", error

    for index, item in enumerate(config.get("patterns") or []):
        error = _validate_pattern(item)
        if error:
            return f"patterns[{index}]", error

    return None


def _validate_filter(item: Any) -> str | None:
    if not isinstance(item, dict):
        return "Each filter must be a mapping with 'type' and 'action'"
    if item.get("type") not in VALID_FILTER_TYPES:
        return f"Invalid filter type '{item.get('type')}'. Must be one of {VALID_FILTER_TYPES}"
    if item.get("action") not in VALID_FILTER_ACTIONS:
        return f"Invalid filter action '{item.get('action')}'. Must be one of {VALID_FILTER_ACTIONS}"
    if item.get("severity", "medium") not in VALID_FILTER_SEVERITIES:
        return f"Invalid filter severity '{item.get('severity')}'. Must be one of {VALID_FILTER_SEVERITIES}"
    if item["type"] == "custom" and not item.get("custom_pattern"):
        return "Custom filters need a 'custom_pattern'"
    if item.get("custom_pattern") is not None and not isinstance(item["custom_pattern"], str):
        return "'custom_pattern' must be a string (quote it in YAML)"
    # custom_pattern validity is checked when the filter runs, where it is reported per file
    return None


def _validate_pattern(item: Any) -> str | None:
    if not isinstance(item, dict) or not item.get("name") or not item.get("regex"):
        return "Each pattern must be a mapping with 'name' and 'regex'"
    if not isinstance(item["regex"], str):
        return f"Regular expression for pattern '{item['name']}' must be a string"
    if not _is_int(item.get("priority", 100)):
        return f"Priority of pattern '{item['name']}' must be an integer"
    try:
        re.compile(item["regex"])
    except re.error as e:
        return f"Invalid regular expression for pattern '{item['name']}': {e}"
    return None


class ConfigManager:
    """Manages configuration for the story importer."""

    def __init__(
        self,
        config_path: Path | str | None = None,
        logger: logging.Logger | None = None,
        create_default: bool = True,
        config: dict[str, Any] | None = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file (default: story_importer.yml)
            logger: Logger instance
            create_default: Write the default template when the file is missing
            config: Use this dictionary instead of reading a file

        Raises:
            ConfigError: If the configuration is unreadable or invalid
        """
        self.logger = logger or logging.getLogger(__name__)
        self.config_path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_FILENAME)
        self.loader = ConfigLoader(self.config_path, self.logger)

        raw = config if config is not None else self.loader.load_config(create_default)
        self._validate(raw)
        self.config = self.loader.merge_with_defaults(raw)

    def _validate(self, config: dict[str, Any]) -> None:
        error = validate_config_first_error(config, self.loader.get_default_config())
        if error:
            key_path, message = error
            line = self.loader.find_line_number(key_path)
            self.logger.error(f"Configuration error at {key_path}: {message}")
            raise ConfigError(key_path, message, line)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path (e.g., 'import.split.method')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return _lookup(self.config, key_path, default)

    def update_with_args(self, args: Any) -> dict[str, Any]:
        """
        Update configuration with command-line arguments.

        Command-line args take precedence over the config file. Arguments that
        were not given (None) leave the configuration untouched.

        Args:
            args: Parsed command-line arguments

        Returns:
            Updated configuration dictionary

        Raises:
            ConfigError: If the resulting configuration is invalid
        """
        overrides: dict[str, Any] = {}

        def put(key_path: str, value: Any) -> None:
            node = overrides
            *parents, leaf = key_path.split(".")
            for key in parents:
                node = node.setdefault(key, {})
            node[leaf] = value

        mapping = {
            "format": "import.file_format",
            "encoding": "import.encoding",
            "method": "import.split.method",
            "pattern": "import.split.pattern",
            "word_count": "import.split.word_count",
            "max_concurrency": "batch.max_concurrency",
            "output_format": "output.format",
        }
        for attr, key_path in mapping.items():
            value = getattr(args, attr, None)
            if value is not None:
                put(key_path, value)

        if getattr(args, "no_split", False):
            put("import.auto_split", False)
        if getattr(args, "verbose", False):
            put("logging.level", "DEBUG")

        filters = getattr(args, "filters", None)
        if filters:
            put("ai.enabled", True)
            put("ai.content_moderation", True)
            put("ai.content_filters", list(self.get("ai.content_filters") or []) + list(filters))

        updated = merge_yaml_configs(self.config, overrides)
        self._validate(updated)
        self.config = updated
        return self.config

    def build_import_options(self) -> ImportOptions:
        """Turn the configuration into the ImportOptions used by the importer."""
        section = self.get("import", {})
        ai = self.get("ai", {})
        file_format = str(section.get("file_format") or "txt").lower()
        return ImportOptions(
            file_format=EXTENSION_ALIASES.get(file_format, file_format),
            encoding=section.get("encoding") or None,
            auto_split=bool(section.get("auto_split", True)),
            split_options=SplitOptions.from_dict(section.get("split") or {}),
            ai_processing=bool(ai.get("enabled", False)),
            ai_processing_options=AIProcessingOptions.from_dict(
                {
                    "enable_content_moderation": ai.get("content_moderation", False),
                    "enable_content_enhancement": ai.get("content_enhancement", False),
                    "enable_translation": ai.get("translation", False),
                    "target_language": ai.get("target_language"),
                    "content_filters": ai.get("content_filters") or [],
                    "enhancement_level": ai.get("enhancement_level", "light"),
                    "preserve_style": ai.get("preserve_style", True),
                }
            ),
            preserve_formatting=bool(section.get("preserve_formatting", True)),
            create_hierarchy=bool(section.get("create_hierarchy", False)),
            max_file_size=section.get("max_file_size"),
        )

    def build_registry(self) -> PatternRegistry:
        """Built-in chapter patterns plus the ones listed under 'patterns'."""
        registry = PatternRegistry()
        for index, item in enumerate(self.get("patterns") or []):
            try:
                pattern = compile_user_pattern(
                    item["regex"],
                    item.get("title_group"),
                    item.get("content_group"),
                    name=item["name"],
                )
            except ImportStageError as e:
                raise ConfigError(f"patterns[{index}]", e.message) from e
            registry.register_pattern(dataclasses.replace(pattern, priority=item.get("priority", 100)))
        return registry
