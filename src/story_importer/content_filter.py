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
# - Created new module for the content filter pipeline
# - Filters run in list order on every chapter, each on the previous output
# - flag findings are collected in a FilterReport instead of being dropped
# - rewrite goes through the optional TextProcessor and never fails the import
# - Custom patterns are compiled with the regex module and matched with a timeout
# - Custom patterns that are not strings are reported like invalid regexes
#

"""
content_filter.py - Category filters applied to imported chapter text

Filtering degrades gracefully: an invalid or runaway custom pattern, or a
failing rewrite collaborator, leaves the text of that step unchanged and is
reported through FilterReport.errors and the log. Chapter counts are not
recomputed after filtering; see chapter_metadata.refresh_chapter_metadata().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional

import regex

from .chapter_metadata import count_characters, count_words
from .filter_patterns import REMOVAL_TOKENS, REPLACEMENT_PHRASES, category_source
from .import_constants import CUSTOM_PATTERN_TIMEOUT
from .models import (
    ContentFilter,
    ContentFlag,
    FilterAction,
    FilterType,
    ImportedChapter,
    ImportErrorKind,
    ImportIssue,
    _Record,
)

if TYPE_CHECKING:
    from .ai_collaborators import TextProcessor

logger = logging.getLogger(__name__)

_CATEGORY_MATCHERS = {
    filter_type: regex.compile(category_source(filter_type), regex.IGNORECASE)
    for filter_type in (FilterType.VIOLENCE, FilterType.EXPLICIT, FilterType.PROFANITY, FilterType.SENSITIVE)
}


@dataclass
class FilterReport(_Record):
    """Side channel for flag findings and non-fatal filter problems."""

    flags: list[ContentFlag] = field(default_factory=list)
    errors: list[ImportIssue] = field(default_factory=list)


@dataclass(frozen=True)
class ContentAnalysis(_Record):
    has_violence: bool
    has_explicit_content: bool
    has_profanity: bool
    has_sensitive_content: bool
    word_count: int
    character_count: int


def analyze_content(text: str) -> ContentAnalysis:
    """
    Run the category detectors over `text` without changing it.

    Used for pre-flight display, whether or not filtering is enabled.
    """
    return ContentAnalysis(
        has_violence=bool(_CATEGORY_MATCHERS[FilterType.VIOLENCE].search(text)),
        has_explicit_content=bool(_CATEGORY_MATCHERS[FilterType.EXPLICIT].search(text)),
        has_profanity=bool(_CATEGORY_MATCHERS[FilterType.PROFANITY].search(text)),
        has_sensitive_content=bool(_CATEGORY_MATCHERS[FilterType.SENSITIVE].search(text)),
        word_count=count_words(text),
        character_count=count_characters(text),
    )


class ContentFilterPipeline:
    """Apply an ordered list of ContentFilter settings to chapters."""

    def __init__(
        self,
        rewriter: Optional[TextProcessor] = None,
        logger: Optional[logging.Logger] = None,
        pattern_timeout: float = CUSTOM_PATTERN_TIMEOUT,
    ) -> None:
        self.rewriter = rewriter
        self.logger = logger or globals()["logger"]
        self.pattern_timeout = pattern_timeout

    async def apply(
        self,
        chapters: list[ImportedChapter],
        filters: Iterable[ContentFilter],
        report: Optional[FilterReport] = None,
    ) -> list[ImportedChapter]:
        """
        Filter chapter content in place.

        Args:
            chapters: Chapters to filter; their `content` is replaced
            filters: Filter settings, applied in order
            report: Receives flag findings and non-fatal errors

        Returns:
            The same chapter list
        """
        report = report if report is not None else FilterReport()
        steps = []
        for content_filter in filters:
            matcher = self._matcher_for(content_filter, report)
            if matcher is not None:
                steps.append((content_filter, matcher))

        for chapter in chapters:
            for content_filter, matcher in steps:
                chapter.content = await self._apply_step(chapter, content_filter, matcher, report)
        return chapters

    def _matcher_for(self, content_filter: ContentFilter, report: FilterReport) -> Optional[regex.Pattern]:
        if content_filter.type != FilterType.CUSTOM:
            return _CATEGORY_MATCHERS[content_filter.type]
        if not content_filter.custom_pattern:
            self.logger.debug("Custom filter without a pattern skipped")
            return None
        try:
            return regex.compile(content_filter.custom_pattern, regex.IGNORECASE)
        except (regex.error, TypeError) as e:
            self.logger.warning(f"Invalid custom filter pattern '{content_filter.custom_pattern}': {e}")
            report.errors.append(
                ImportIssue(
                    kind=ImportErrorKind.CONTENT,
                    message=f"Invalid custom filter pattern '{content_filter.custom_pattern}': {e}",
                    position=getattr(e, "pos", None),
                )
            )
            return None

    async def _apply_step(
        self,
        chapter: ImportedChapter,
        content_filter: ContentFilter,
        matcher: regex.Pattern,
        report: FilterReport,
    ) -> str:
        content = chapter.content
        action = content_filter.action
        try:
            if action == FilterAction.REMOVE:
                token = REMOVAL_TOKENS[content_filter.type]
                return matcher.sub(lambda _m: token, content, timeout=self.pattern_timeout)
            if action == FilterAction.REPLACE:
                phrase = REPLACEMENT_PHRASES[content_filter.type]
                return matcher.sub(lambda _m: phrase, content, timeout=self.pattern_timeout)
            if action == FilterAction.FLAG:
                for match in matcher.finditer(content, timeout=self.pattern_timeout):
                    report.flags.append(
                        ContentFlag(
                            chapter_id=chapter.id,
                            filter_type=content_filter.type,
                            start=match.start(),
                            end=match.end(),
                            text=match.group(),
                        )
                    )
                return content
            if action == FilterAction.REWRITE:
                if matcher.search(content, timeout=self.pattern_timeout) is None:
                    return content
                return await self._rewrite(content, content_filter)
        except TimeoutError:
            self.logger.warning(
                f"Filter '{content_filter.type.value}' timed out on chapter '{chapter.title}', step skipped"
            )
            report.errors.append(
                ImportIssue(
                    kind=ImportErrorKind.CONTENT,
                    message=f"Filter pattern timed out after {self.pattern_timeout}s on chapter '{chapter.title}'",
                )
            )
        return content

    async def _rewrite(self, content: str, content_filter: ContentFilter) -> str:
        if self.rewriter is None:
            return content
        try:
            rewritten = await self.rewriter.rewrite(content, content_filter.type.value, content_filter.severity.value)
        except Exception as e:
            self.logger.warning(f"Rewrite collaborator failed for '{content_filter.type.value}': {e}")
            return content
        return rewritten if isinstance(rewritten, str) else content
