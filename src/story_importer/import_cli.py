#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# Copyright (c) 2025 Emasoft
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
#
# CHANGELOG:
# - Replaced the translation workflow entry point with story-import
# - Imports files/directories as one batch and prints a summary table
# - Optional JSON or YAML report of the batch result
# - Exit status 0 when at least one file imported, 1 otherwise
#

"""
import_cli.py - Command-line entry point for the story importer
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from rich.markup import escape

from .batch_processor import BatchImporter
from .book_importer import StoryImporter
from .cli_parser import create_parser, validate_args
from .cli_setup import setup_configuration, setup_logging, setup_signal_handler
from .common_print_utils import print_batch_summary, print_patterns, safe_print
from .common_yaml_utils import save_safe_yaml
from .exceptions import ConfigError
from .models import BatchImportResult

logger = logging.getLogger(__name__)


def batch_report(result: BatchImportResult, include_content: bool = True) -> dict[str, Any]:
    """Batch result as plain data, optionally without chapter text."""
    data = result.to_dict()
    if not include_content:
        for story in data["stories"]:
            for chapter in story["chapters"]:
                chapter.pop("content", None)
                chapter.pop("boundary", None)
    return data


def write_report(
    result: BatchImportResult,
    output_path: str | Path,
    output_format: str = "json",
    include_content: bool = True,
) -> Path:
    """
    Write the batch result to a JSON or YAML file.

    Args:
        result: Batch result
        output_path: Destination file
        output_format: 'json' or 'yaml'
        include_content: Keep chapter text in the report

    Returns:
        The path written
    """
    output_path = Path(output_path)
    data = batch_report(result, include_content)
    if output_format == "yaml":
        save_safe_yaml(data, output_path)
    else:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
    return output_path


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the story-import command."""
    parser = create_parser()
    args = parser.parse_args(argv)
    validate_args(args, parser)

    config_manager = setup_configuration(args.config)
    try:
        config = config_manager.update_with_args(args)
    except ConfigError as e:
        safe_print(f"[bold red]Invalid option: {escape(str(e))}[/bold red]")
        return 1

    tolog = setup_logging(config)
    setup_signal_handler(tolog)

    try:
        registry = config_manager.build_registry()
    except ConfigError as e:
        safe_print(f"[bold red]Configuration error: {escape(str(e))}[/bold red]")
        return 1

    if args.list_patterns:
        print_patterns(registry.get_patterns())
        return 0

    options = config_manager.build_import_options()
    importer = StoryImporter(registry=registry, logger=tolog)
    batch = BatchImporter(importer, max_concurrency=config["batch"]["max_concurrency"], logger=tolog)

    tolog.info(f"Importing from: {', '.join(args.paths)}")
    result = asyncio.run(batch.import_paths(args.paths, options))
    print_batch_summary(result)

    if args.output:
        try:
            path = write_report(
                result,
                args.output,
                config["output"]["format"],
                config["output"]["include_content"],
            )
        except (OSError, ValueError) as e:
            tolog.error(f"Failed to write report: {e}")
            safe_print(f"[bold red]Failed to write report: {escape(str(e))}[/bold red]")
            return 1
        safe_print(f"[green]Report written to {escape(str(path))}[/green]")

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
