#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Test suite for the story-import command line (cli_parser, cli_setup and
import_cli).
"""

import argparse
import io
import json
import logging
from unittest.mock import patch

import pytest
import yaml
from rich.console import Console
from rich.markup import escape

from story_importer.batch_processor import run_batch
from story_importer.cli_parser import create_parser, parse_filter_spec, validate_args
from story_importer.cli_setup import setup_configuration, setup_logging
from story_importer.common_print_utils import safe_print, strip_markup
from story_importer.import_cli import batch_report, main, write_report


class TestParseFilterSpec:
    """Test --filter values."""

    def test_type_and_action(self):
        """Severity defaults to medium."""
        assert parse_filter_spec("Profanity:Replace") == {"type": "profanity", "action": "replace", "severity": "medium"}

    def test_custom_pattern_with_colons(self):
        """Everything after the third colon is the pattern."""
        assert parse_filter_spec(r"custom:remove:high:a:b\s+c") == {
            "type": "custom",
            "action": "remove",
            "severity": "high",
            "custom_pattern": r"a:b\s+c",
        }

    @pytest.mark.parametrize(
        "spec",
        ["profanity", "gore:remove", "violence:explode", "violence:flag:extreme", "custom:remove", "custom:remove:low:"],
    )
    def test_invalid(self, spec):
        """Malformed values are rejected."""
        with pytest.raises(argparse.ArgumentTypeError):
            parse_filter_spec(spec)


class TestParser:
    """Test the argument parser."""

    def test_defaults(self):
        """Options not given are None so the config file wins."""
        args = create_parser().parse_args(["book.txt"])
        assert args.paths == ["book.txt"]
        assert args.method is None
        assert args.word_count is None
        assert args.filters is None
        assert args.config == "story_importer.yml"

    def test_repeated_filters(self):
        """--filter can be given several times."""
        args = create_parser().parse_args(["a.txt", "--filter", "violence:flag", "--filter", "profanity:remove"])
        assert [f["type"] for f in args.filters] == ["violence", "profanity"]

    def test_requires_path(self):
        """A path is required unless patterns are listed."""
        parser = create_parser()
        with pytest.raises(SystemExit):
            validate_args(parser.parse_args([]), parser)
        validate_args(parser.parse_args(["--list-patterns"]), parser)

    @pytest.mark.parametrize("argv", [["a.txt", "--word-count", "0"], ["a.txt", "--max-concurrency", "-1"]])
    def test_rejects_bad_numbers(self, argv):
        """Non-positive word counts and negative concurrency are errors."""
        parser = create_parser()
        with pytest.raises(SystemExit):
            validate_args(parser.parse_args(argv), parser)


class TestSetup:
    """Test configuration and logging setup."""

    def test_invalid_configuration_exits(self, write_file):
        """A broken configuration file exits with status 1."""
        path = write_file("cfg.yml", "batch:\n  max_concurrency: many\n")
        with pytest.raises(SystemExit) as exc_info:
            setup_configuration(path)
        assert exc_info.value.code == 1

    def test_logging_level(self, tmp_path):
        """The package logger follows the configured level."""
        manager = setup_configuration(tmp_path / "cfg.yml")
        config = manager.update_with_args(argparse.Namespace(verbose=True))
        logger = setup_logging(config)
        assert logger.name == "story_importer"
        assert logger.level == logging.DEBUG

    def test_strip_markup(self):
        """Rich markup tags are removed for plain output."""
        assert strip_markup("[bold red]Error[/bold red] done") == "Error done"

    @pytest.mark.parametrize("name", ["out[draft].json", "out[1].json", "notes [v2] final.txt"])
    def test_strip_markup_keeps_escaped_brackets(self, name):
        """Brackets escaped with rich.markup.escape survive plain output."""
        assert strip_markup(f"[green]Report written to {escape(name)}[/green]") == f"Report written to {name}"

    def test_safe_print_plain_output(self):
        """Output that is not a terminal gets plain text with literal brackets."""
        buffer = io.StringIO()
        with patch("story_importer.common_print_utils.console", Console(file=buffer, width=200, force_terminal=False)):
            safe_print(f"[bold red]Failed to write {escape('out[draft].json')}[/bold red]")
        assert buffer.getvalue().strip() == "Failed to write out[draft].json"


class TestReports:
    """Test batch report output."""

    def test_report_without_content(self, write_file, tmp_path, vietnamese_text):
        """Chapter text can be left out of reports."""
        write_file("a.txt", vietnamese_text)
        result = run_batch([tmp_path / "a.txt"])
        data = batch_report(result, include_content=False)
        chapter = data["stories"][0]["chapters"][0]
        assert "content" not in chapter
        assert chapter["title"] == "Chương 1: Mở đầu"

    def test_yaml_report(self, write_file, tmp_path, vietnamese_text):
        """YAML reports keep Vietnamese text readable."""
        write_file("a.txt", vietnamese_text)
        result = run_batch([tmp_path / "a.txt"])
        path = write_report(result, tmp_path / "out" / "report.yml", "yaml")
        assert "Nội dung A" in path.read_text(encoding="utf-8")
        assert yaml.safe_load(path.read_text(encoding="utf-8"))["summary"]["successful_files"] == 1


@patch("story_importer.import_cli.setup_signal_handler")
class TestMain:
    """Test the main() entry point."""

    def test_import_and_report(self, mock_signal, write_file, tmp_path, vietnamese_text):
        """Files are imported and a JSON report is written."""
        book = write_file("books/truyen.txt", vietnamese_text)
        output = tmp_path / "report.json"
        code = main([str(book), "--config", str(tmp_path / "cfg.yml"), "--output", str(output)])

        assert code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["success"] is True
        assert data["summary"]["total_files"] == 1
        assert [c["content"] for c in data["stories"][0]["chapters"]] == ["Nội dung A", "Nội dung B"]
        mock_signal.assert_called_once()

    def test_pattern_option(self, mock_signal, write_file, tmp_path, vietnamese_text):
        """--pattern overrides auto-detection."""
        book = write_file("truyen.txt", vietnamese_text)
        output = tmp_path / "report.json"
        code = main(
            [
                str(book),
                "--config",
                str(tmp_path / "cfg.yml"),
                "--pattern",
                r"^Chương\s*(\d+)[:\.\s]*(.+?)$",
                "-o",
                str(output),
            ]
        )
        assert code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert [c["title"] for c in data["stories"][0]["chapters"]] == ["Mở đầu", "Tiếp theo"]

    def test_all_failed(self, mock_signal, write_file, tmp_path):
        """A batch without any imported file exits with 1."""
        scan = write_file("scan.pdf", b"%PDF")
        assert main([str(scan), "--config", str(tmp_path / "cfg.yml")]) == 1

    def test_list_patterns(self, mock_signal, tmp_path):
        """--list-patterns exits with 0 without importing."""
        assert main(["--list-patterns", "--config", str(tmp_path / "cfg.yml")]) == 0

    def test_bad_override(self, mock_signal, write_file, tmp_path):
        """An invalid --pattern is reported with exit status 1."""
        book = write_file("a.txt", "text")
        assert main([str(book), "--config", str(tmp_path / "cfg.yml"), "--pattern", "(oops"]) == 1
