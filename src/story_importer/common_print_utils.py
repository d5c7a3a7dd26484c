#!/usr/bin/env python3
# -*- coding: utf-8 -*-

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
Common print utilities for console output with rich formatting support.
"""

from typing import Any, Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .chapter_metadata import summarize_chapters
from .models import BatchImportResult, ChapterPattern

console = Console()


def strip_markup(text: str) -> str:
    """Render rich markup such as [bold red]...[/bold red] to plain text. Escaped brackets are kept."""
    return Text.from_markup(text).plain


def safe_print(*args: Any, **kwargs: Any) -> None:
    """Print with rich markup, or as plain text when the output is not a terminal.

    Args:
        *args: Arguments to print
        **kwargs: Keyword arguments for Console.print
    """
    if console.is_terminal:
        console.print(*args, **kwargs)
    else:
        console.print(*(strip_markup(arg) if isinstance(arg, str) else arg for arg in args), markup=False, **kwargs)


def print_batch_summary(result: BatchImportResult, target: Optional[Console] = None) -> None:
    """Print one table row per imported story, then the batch errors."""
    out = target or console
    table = Table(title="Imported stories", show_header=True, header_style="bold cyan")
    table.add_column("File", style="white")
    table.add_column("Title", style="white")
    table.add_column("Chapters", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Reading time", justify="right")
    table.add_column("Encoding", style="dim")

    for story in result.stories:
        stats = summarize_chapters(story.chapters)
        table.add_row(
            escape(story.original_file),
            escape(story.title),
            str(stats["chapter_count"]),
            str(story.metadata.total_words),
            f"{stats['total_reading_time']} min",
            story.metadata.encoding,
        )
    out.print(table)

    summary = result.summary
    colour = "green" if result.success else "red"
    out.print(
        f"[{colour}]{summary.successful_files}/{summary.total_files} files imported "
        f"in {summary.total_processing_time} ms[/{colour}]"
    )
    for issue in result.errors:
        out.print(f"[yellow]{issue.kind.value}[/yellow] {escape(issue.message)}", highlight=False)


def print_patterns(patterns: Iterable[ChapterPattern], target: Optional[Console] = None) -> None:
    """Print the chapter pattern library in trial order."""
    out = target or console
    table = Table(title="Chapter patterns", show_header=True, header_style="bold cyan")
    table.add_column("Priority", justify="right", style="dim")
    table.add_column("Name")
    table.add_column("Regex", overflow="fold")
    for pattern in patterns:
        table.add_row(str(pattern.priority), escape(pattern.name), escape(pattern.matcher.pattern))
    out.print(table)
