#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Replaced the translation chunk splitter with a chapter splitter
# - Added pattern, word_count, manual and ai split methods
# - Pattern splitting honors each pattern's declared title/content groups
# - Chapters keep the separating text in `boundary` for lossless rebuilds
# - The ai method asks an optional ChapterSplitAssistant, then falls back
#   to pattern splitting
#

"""
chapter_splitter.py - Split normalized text into chapter records
================================================================

Pattern mode: every boundary match starts a chapter. Its title comes from
the pattern's title group and its body runs from the content group start
(or the end of the match) to the next match. Non-blank text before the
first match becomes an untitled chapter. For every chapter, `boundary`
holds the text between the previous chapter's content and this one's, so
"".join(c.boundary + c.content for c in chapters) gives back the input.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Sequence

from .chapter_metadata import compute_chapter_metadata
from .chapter_patterns import PatternRegistry, compile_user_pattern
from .exceptions import ImportStageError
from .import_constants import (
    CHAPTER_ID_PREFIX,
    DEFAULT_WORDS_PER_CHAPTER,
    MANUAL_SPLIT_TITLE,
    PLACEHOLDER_TITLE,
)
from .models import (
    ChapterPattern,
    GroupRef,
    ImportedChapter,
    ImportErrorKind,
    SplitMethod,
    SplitOptions,
    generate_id,
)

if TYPE_CHECKING:
    from .ai_collaborators import ChapterSplitAssistant

logger = logging.getLogger(__name__)


def placeholder_title(number: int) -> str:
    return PLACEHOLDER_TITLE.format(number=number)


def _group_span(match: re.Match[str], ref: GroupRef) -> tuple[int, int] | None:
    """Span of a group, or None when the group is undeclared, unknown or did not participate."""
    if ref is None:
        return None
    try:
        start, end = match.span(ref)
    except IndexError:
        return None
    if start < 0:
        return None
    return start, end


def _trim_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Shrink [start, end) so it excludes leading and trailing whitespace."""
    segment = text[start:end]
    stripped = segment.strip()
    if not stripped:
        return end, end
    lead = len(segment) - len(segment.lstrip())
    return start + lead, start + lead + len(stripped)


class ChapterSplitter:
    """Turn normalized text into an ordered list of ImportedChapter records."""

    def __init__(
        self,
        registry: PatternRegistry | None = None,
        ai_splitter: ChapterSplitAssistant | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.registry = registry if registry is not None else PatternRegistry()
        self.ai_splitter = ai_splitter
        self.logger = logger or globals()["logger"]

    # ───────────────────────────── entry points ───────────────────────────── #

    def split(self, text: str, options: SplitOptions | None = None) -> list[ImportedChapter]:
        """
        Split text with the method named in `options`.

        The ai method uses the pattern algorithm here; split_async() is the
        entry point that consults the split assistant.

        Args:
            text: Normalized text
            options: Split configuration (defaults to pattern auto-detection)

        Returns:
            Chapters in source order, original_position 0..n-1

        Raises:
            ImportStageError: 'content' for an invalid explicit pattern or a
                non-positive word window
        """
        options = options or SplitOptions()
        if options.method == SplitMethod.WORD_COUNT:
            return self.split_by_word_count(text, options.word_count)
        if options.method == SplitMethod.MANUAL:
            return [self.create_single_chapter(text, MANUAL_SPLIT_TITLE)]
        return self.split_by_pattern(text, options)

    async def split_async(self, text: str, options: SplitOptions | None = None) -> list[ImportedChapter]:
        """Like split(), but the ai method asks the split assistant first."""
        options = options or SplitOptions()
        if options.method == SplitMethod.AI and self.ai_splitter is not None:
            try:
                sections = await self.ai_splitter.split(text)
            except Exception as e:
                self.logger.warning(f"AI chapter split failed, falling back to pattern split: {e}")
                sections = None
            if sections:
                return self._chapters_from_sections(sections)
            self.logger.info("AI chapter split returned nothing, using pattern split")
        return self.split(text, options)

    # ───────────────────────────── strategies ───────────────────────────── #

    def split_by_pattern(self, text: str, options: SplitOptions) -> list[ImportedChapter]:
        pattern = self._resolve_pattern(text, options)
        matches = list(pattern.matcher.finditer(text)) if pattern is not None else []
        if not matches:
            if pattern is not None:
                self.logger.debug(f"Pattern '{pattern.name}' found no chapter boundaries")
            return [self.create_single_chapter(text, placeholder_title(1))]

        self.logger.debug(f"Splitting with pattern '{pattern.name}': {len(matches)} boundaries")

        # (title or None, content start, content end)
        sections: list[tuple[str | None, int, int]] = []

        preamble_start, preamble_end = _trim_span(text, 0, matches[0].start())
        if preamble_start < preamble_end:
            sections.append((None, preamble_start, preamble_end))

        for index, match in enumerate(matches):
            content_span = _group_span(match, pattern.content_group)
            body_start = content_span[0] if content_span else match.end()
            body_end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
            body_start = min(body_start, body_end)
            start, end = _trim_span(text, body_start, body_end)

            title = None
            if options.preserve_titles:
                title_span = _group_span(match, pattern.title_group)
                if title_span:
                    title = text[title_span[0] : title_span[1]].strip() or None
            sections.append((title, start, end))

        chapters = []
        previous_end = 0
        for position, (title, start, end) in enumerate(sections):
            chapters.append(
                self._make_chapter(
                    content=text[start:end],
                    title=title or placeholder_title(position + 1),
                    position=position,
                    boundary=text[previous_end:start],
                )
            )
            previous_end = end
        return chapters

    def split_by_word_count(self, text: str, word_count: int | None = None) -> list[ImportedChapter]:
        """
        Partition whitespace tokens into windows of `word_count` words.

        The last window may be shorter. Text without words yields no chapters.
        """
        window = DEFAULT_WORDS_PER_CHAPTER if word_count is None else word_count
        if window <= 0:
            raise ImportStageError(ImportErrorKind.CONTENT, f"Words per chapter must be positive, got {window}")

        words = text.split()
        return [
            self._make_chapter(
                content=" ".join(words[offset : offset + window]),
                title=placeholder_title(index + 1),
                position=index,
            )
            for index, offset in enumerate(range(0, len(words), window))
        ]

    def create_single_chapter(self, content: str, title: str, position: int = 0) -> ImportedChapter:
        """Wrap the whole text in one chapter."""
        return self._make_chapter(content=content, title=title, position=position)

    # ───────────────────────────── helpers ───────────────────────────── #

    def _resolve_pattern(self, text: str, options: SplitOptions) -> ChapterPattern | None:
        if options.pattern:
            return compile_user_pattern(options.pattern, options.title_group, options.content_group)
        pattern = self.registry.detect(text)
        if pattern is None:
            self.logger.debug("No registered pattern matches, keeping the text as one chapter")
        return pattern

    def _chapters_from_sections(self, sections: Sequence[tuple[str, str]]) -> list[ImportedChapter]:
        return [
            self._make_chapter(
                content=body.strip(),
                title=(title or "").strip() or placeholder_title(position + 1),
                position=position,
            )
            for position, (title, body) in enumerate(sections)
        ]

    def _make_chapter(self, content: str, title: str, position: int, boundary: str = "") -> ImportedChapter:
        stats = compute_chapter_metadata(content)
        return ImportedChapter(
            id=generate_id(CHAPTER_ID_PREFIX),
            title=title,
            content=content,
            original_position=position,
            word_count=stats.word_count,
            character_count=stats.character_count,
            estimated_reading_time=stats.estimated_reading_time,
            boundary=boundary,
        )
