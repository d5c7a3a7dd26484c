#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Turned the module-level heading regexes into ChapterPattern records
# - Added Vietnamese, Chinese, ordinal, Markdown and separator families
# - Added PatternRegistry, an ordered caller-owned list replacing the globals
# - Added compile_user_pattern() for explicit boundary regexes
# - Roman numerals in English headings must end the line or precede heading punctuation
#

"""
chapter_patterns.py - Chapter boundary patterns and their registry
==================================================================

Every pattern is compiled with re.MULTILINE and matches one heading (or
separator) line. Patterns are tried in ascending priority during
auto-detection; the first one that matches anywhere in the text is used for
the whole document.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator

from .exceptions import ImportStageError
from .models import ChapterPattern, GroupRef, ImportErrorKind

# ────────────────────────── regexes & tables ────────────────────────── #

WORD_NUMS = (
    "one|two|three|four|five|six|seven|eight|nine|ten|eleven|twelve|thirteen|fourteen|"
    "fifteen|sixteen|seventeen|eighteen|nineteen|twenty|thirty|forty|fifty|sixty|seventy|"
    "eighty|ninety|hundred|thousand"
)

# Chinese numerals (including financial forms) and full-width digits
CJK_NUMERALS = "0-9０-９零〇一二两三四五六七八九十百千万壹贰叁肆伍陆柒捌玖拾佰仟"

VIETNAMESE_CHAPTER_RE = re.compile(
    r"^[ \t]*(?P<title>(?:chương|chuong|hồi|phần|quyển|tập)[ \t]+(?:\d+|[ivxlcdm]+)\b[^\n]*?)[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)

# Heading line followed by a captured body running up to the next heading
VIETNAMESE_BODY_RE = re.compile(
    r"^[ \t]*(?P<title>(?:chương|chap)[ \t]*\d+)[: \t]*\n"
    r"(?P<content>[\s\S]*?)(?=^[ \t]*(?:chương|chap)[ \t]*\d+|\Z)",
    re.IGNORECASE | re.MULTILINE,
)

CHINESE_CHAPTER_RE = re.compile(
    rf"^[ \t　]*(?P<title>第[ \t]*[{CJK_NUMERALS}]+[ \t]*[章节節回卷部集篇][^\n]*?)[ \t　]*$",
    re.MULTILINE,
)

ENGLISH_CHAPTER_RE = re.compile(
    rf"^[ \t]*(?P<title>(?:chapter|chap\.?|ch\.|part|volume|vol\.|book)"
    rf"(?:[ \t]*\d+[a-z]?|[ \t]+(?:[ivxlcdm]+(?=[ \t]*(?:$|[.:\-\u2013\u2014]))|(?:{WORD_NUMS})(?:[- ](?:{WORD_NUMS}))*))"
    rf"\b[^\n]*?)[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)

NUMERIC_ORDINAL_RE = re.compile(
    r"^[ \t]*(?P<title>\d{1,4}[.)](?:[ \t]+[^\n]{1,80}?)?)[ \t]*$",
    re.MULTILINE,
)

ROMAN_ORDINAL_RE = re.compile(
    r"^[ \t]*(?P<title>[IVXLCDM]+(?:[.)](?:[ \t]+[^\n]{1,80}?)?)?)[ \t]*$",
    re.MULTILINE,
)

MARKDOWN_HEADING_RE = re.compile(
    r"^[ \t]{0,3}#{1,6}[ \t]+(?P<title>[^\n]+?)(?:[ \t]+#+)?[ \t]*$",
    re.MULTILINE,
)

SEPARATOR_RE = re.compile(
    r"^[ \t]*(?:"
    r"(?:\*[ \t]*){3,}"
    r"|(?:-[ \t]*){3,}"
    r"|(?:~[ \t]*){3,}"
    r"|(?:=[ \t]*){3,}"
    r"|(?:#[ \t]*){3,}"
    r"|(?:[→⟶➔➜][ \t]*){3,}"
    r"|(?:[☆★][ \t]*){3,}"
    r")$",
    re.MULTILINE,
)


def default_patterns() -> list[ChapterPattern]:
    """Return the built-in pattern families, lowest priority value first."""
    return [
        ChapterPattern("vietnamese_chapter", VIETNAMESE_CHAPTER_RE, "title", None, 10),
        ChapterPattern("vietnamese_chapter_body", VIETNAMESE_BODY_RE, "title", "content", 15),
        ChapterPattern("chinese_chapter", CHINESE_CHAPTER_RE, "title", None, 20),
        ChapterPattern("english_chapter", ENGLISH_CHAPTER_RE, "title", None, 30),
        ChapterPattern("numeric_ordinal", NUMERIC_ORDINAL_RE, "title", None, 50),
        ChapterPattern("roman_ordinal", ROMAN_ORDINAL_RE, "title", None, 60),
        ChapterPattern("markdown_heading", MARKDOWN_HEADING_RE, "title", None, 70),
        ChapterPattern("separator", SEPARATOR_RE, None, None, 80),
    ]


class PatternRegistry:
    """
    Ordered set of chapter boundary patterns.

    The registry is an ordinary object owned by whoever builds the importer.
    Patterns are kept sorted by ascending priority; patterns with equal
    priority keep their registration order.
    """

    def __init__(self, patterns: Iterable[ChapterPattern] | None = None) -> None:
        self._patterns: list[ChapterPattern] = []
        for pattern in default_patterns() if patterns is None else patterns:
            self._patterns.append(pattern)
        self._sort()

    def _sort(self) -> None:
        # list.sort is stable, which keeps registration order among ties
        self._patterns.sort(key=lambda p: p.priority)

    def get_patterns(self) -> list[ChapterPattern]:
        """Return a copy of the active patterns in trial order."""
        return list(self._patterns)

    def register_pattern(self, pattern: ChapterPattern) -> None:
        """Add a pattern and re-sort the active set."""
        self._patterns.append(pattern)
        self._sort()

    def find(self, name: str) -> ChapterPattern | None:
        """Return the first pattern registered under `name`, if any."""
        for pattern in self._patterns:
            if pattern.name == name:
                return pattern
        return None

    def detect(self, text: str) -> ChapterPattern | None:
        """
        Pick the pattern to split `text` with.

        Args:
            text: Normalized manuscript text

        Returns:
            The first pattern in priority order with at least one match, or
            None when no pattern matches
        """
        for pattern in self._patterns:
            if pattern.matcher.search(text):
                return pattern
        return None

    def __iter__(self) -> Iterator[ChapterPattern]:
        return iter(self.get_patterns())

    def __len__(self) -> int:
        return len(self._patterns)


def compile_user_pattern(
    pattern: str,
    title_group: GroupRef = None,
    content_group: GroupRef = None,
    name: str = "user_pattern",
) -> ChapterPattern:
    """
    Build a ChapterPattern from a caller-supplied regular expression.

    The expression is compiled with MULTILINE and IGNORECASE. When no title
    group is given, the highest-numbered group is used (so for
    "^Chương\\s*(\\d+)[:.\\s]*(.+?)$" the title is the second group). Without a
    content group, each chapter body starts right after its heading match.

    Args:
        pattern: Regular expression source
        title_group: Group index or name holding the chapter title
        content_group: Group index or name where the chapter body starts
        name: Name of the resulting pattern

    Returns:
        A ChapterPattern with priority 0

    Raises:
        ImportStageError: 'content' when the expression does not compile
    """
    try:
        matcher = re.compile(pattern, re.MULTILINE | re.IGNORECASE)
    except re.error as e:
        raise ImportStageError(
            ImportErrorKind.CONTENT,
            f"Invalid chapter pattern '{pattern}': {e}",
            position=e.pos,
        ) from e

    if title_group is None and matcher.groups:
        title_group = matcher.groups
    return ChapterPattern(name, matcher, title_group, content_group, 0)
