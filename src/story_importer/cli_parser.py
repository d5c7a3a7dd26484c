#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Replaced the translation options with import and splitting options
# - Split option groups into _add_input_args, _add_split_args,
#   _add_filter_args and _add_output_args
# - Added parse_filter_spec() for --filter TYPE:ACTION[:SEVERITY[:PATTERN]]
# - Options default to None so only given ones override the config file
#

"""
cli_parser.py - Command-line argument parsing for story-import
==============================================================

Handles parsing and validation of command-line arguments. Defaults come from
the configuration file; an option left out on the command line keeps the
configured value.
"""

from __future__ import annotations

import argparse
from typing import Any

from .config_schema import (
    DEFAULT_CONFIG_FILENAME,
    VALID_FILTER_ACTIONS,
    VALID_FILTER_SEVERITIES,
    VALID_FILTER_TYPES,
    VALID_OUTPUT_FORMATS,
    VALID_SPLIT_METHODS,
)
from .import_constants import SUPPORTED_FORMATS

EPILOG = """
Examples:
  story-import novel.txt
  story-import manuscripts/ --output stories.json
  story-import book.md --method word_count --word-count 1500
  story-import truyen.txt --pattern "^Chương\\s*(\\d+)[:.\\s]*(.+?)$"
  story-import draft.docx --filter profanity:replace --filter "custom:remove:high:secret\\s+code"
"""


def parse_filter_spec(spec: str) -> dict[str, Any]:
    """
    Parse a --filter value.

    Format: TYPE:ACTION[:SEVERITY[:PATTERN]]. The pattern may itself contain
    colons. Custom filters need a pattern.

    Args:
        spec: The option value

    Returns:
        Filter mapping as used in the configuration file

    Raises:
        argparse.ArgumentTypeError: If the value is malformed
    """
    parts = spec.split(":", 3)
    if len(parts) < 2:
        raise argparse.ArgumentTypeError(f"Expected TYPE:ACTION[:SEVERITY[:PATTERN]], got '{spec}'")

    filter_type, action = parts[0].strip().lower(), parts[1].strip().lower()
    severity = parts[2].strip().lower() if len(parts) > 2 and parts[2].strip() else "medium"
    pattern = parts[3] if len(parts) > 3 else None

    if filter_type not in VALID_FILTER_TYPES:
        raise argparse.ArgumentTypeError(f"Unknown filter type '{filter_type}' (choose from {', '.join(VALID_FILTER_TYPES)})")
    if action not in VALID_FILTER_ACTIONS:
        raise argparse.ArgumentTypeError(f"Unknown filter action '{action}' (choose from {', '.join(VALID_FILTER_ACTIONS)})")
    if severity not in VALID_FILTER_SEVERITIES:
        raise argparse.ArgumentTypeError(f"Unknown severity '{severity}' (choose from {', '.join(VALID_FILTER_SEVERITIES)})")
    if filter_type == "custom" and not pattern:
        raise argparse.ArgumentTypeError("Custom filters need a pattern: custom:ACTION:SEVERITY:PATTERN")

    result: dict[str, Any] = {"type": filter_type, "action": action, "severity": severity}
    if pattern:
        result["custom_pattern"] = pattern
    return result


def _add_input_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "paths",
        nargs="*",
        help="Manuscript files or directories (directories are scanned for .txt, .md, .docx, .epub)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_FILENAME,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_FILENAME})",
    )
    parser.add_argument(
        "--format",
        choices=SUPPORTED_FORMATS,
        help="Format for files without a recognizable extension",
    )
    parser.add_argument(
        "--encoding",
        type=str,
        help="Character encoding of text files. Common: utf-8, gb18030, big5, cp1258 (default: detect)",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        help="Maximum number of files imported at the same time (0 for no limit)",
    )


def _add_split_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("chapter splitting")
    group.add_argument("--method", choices=VALID_SPLIT_METHODS, help="Chapter split method")
    group.add_argument(
        "--pattern",
        type=str,
        help="Explicit chapter heading regex; the last capture group is used as the title",
    )
    group.add_argument("--word-count", type=int, help="Words per chapter for the word_count method")
    group.add_argument(
        "--no-split",
        action="store_true",
        help="Import each file as a single chapter",
    )
    group.add_argument(
        "--list-patterns",
        action="store_true",
        help="Show the chapter pattern library and exit",
    )


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("content filters")
    group.add_argument(
        "--filter",
        dest="filters",
        action="append",
        type=parse_filter_spec,
        metavar="TYPE:ACTION[:SEVERITY[:PATTERN]]",
        help="Add a content filter (repeatable). Types: " + ", ".join(VALID_FILTER_TYPES) + "; actions: " + ", ".join(VALID_FILTER_ACTIONS),
    )


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("output")
    group.add_argument("--output", "-o", type=str, help="Write the batch result to this file")
    group.add_argument("--output-format", choices=VALID_OUTPUT_FORMATS, help="Format of the --output file")
    group.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def create_parser() -> argparse.ArgumentParser:
    """Create the story-import argument parser."""
    parser = argparse.ArgumentParser(
        prog="story-import",
        description="Import manuscripts (txt, md, docx, epub) and split them into chapters.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    _add_input_args(parser)
    _add_split_args(parser)
    _add_filter_args(parser)
    _add_output_args(parser)
    return parser


def validate_args(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    """Reject argument combinations argparse cannot check on its own."""
    if not args.paths and not args.list_patterns:
        parser.error("at least one file or directory is required")
    if args.word_count is not None and args.word_count <= 0:
        parser.error("--word-count must be a positive integer")
    if args.max_concurrency is not None and args.max_concurrency < 0:
        parser.error("--max-concurrency cannot be negative")
