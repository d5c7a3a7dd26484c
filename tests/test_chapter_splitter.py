#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Test suite for chapter_splitter module.
"""

import asyncio
import re

import pytest

from story_importer.chapter_patterns import PatternRegistry
from story_importer.chapter_splitter import ChapterSplitter, placeholder_title
from story_importer.exceptions import ImportStageError
from story_importer.models import ChapterPattern, ImportErrorKind, SplitMethod, SplitOptions


def rebuild(chapters):
    return "".join(chapter.boundary + chapter.content for chapter in chapters)


class FakeSplitAssistant:
    """Split assistant returning canned sections."""

    def __init__(self, sections=None, error=None):
        self.sections = sections
        self.error = error
        self.calls = 0

    async def split(self, text):
        self.calls += 1
        if self.error:
            raise self.error
        return self.sections


class TestPatternSplit:
    """Test splitting on chapter headings."""

    def test_explicit_vietnamese_pattern(self, vietnamese_text):
        """The last capture group becomes the title and the body follows the heading."""
        options = SplitOptions(pattern=r"^Chương\s*(\d+)[:\.\s]*(.+?)$")
        chapters = ChapterSplitter().split(vietnamese_text, options)

        assert [c.title for c in chapters] == ["Mở đầu", "Tiếp theo"]
        assert [c.content for c in chapters] == ["Nội dung A", "Nội dung B"]
        assert [c.original_position for c in chapters] == [0, 1]
        assert chapters[0].word_count == 3
        assert chapters[0].estimated_reading_time == 1

    def test_auto_detect_keeps_heading_line(self, vietnamese_text):
        """Auto-detection titles chapters with the whole heading line."""
        chapters = ChapterSplitter().split(vietnamese_text)
        assert [c.title for c in chapters] == ["Chương 1: Mở đầu", "Chương 2: Tiếp theo"]
        assert [c.content for c in chapters] == ["Nội dung A", "Nội dung B"]

    def test_preamble_becomes_chapter(self, english_text):
        """Text before the first heading is kept as a placeholder chapter."""
        chapters = ChapterSplitter().split(english_text)
        assert [c.title for c in chapters] == ["Chapter 1", "Chapter 1: The Beginning", "Chapter 2: Continuing"]
        assert chapters[0].content == "A short foreword before the story."
        assert chapters[2].content == "The rain kept falling."

    def test_lossless(self, english_text, chinese_text, vietnamese_text):
        """Boundaries and contents concatenate back to the input."""
        splitter = ChapterSplitter()
        for text in (english_text, chinese_text, vietnamese_text):
            assert rebuild(splitter.split(text)) == text

    def test_no_match_single_chapter(self):
        """Text without boundaries becomes one placeholder chapter."""
        text = "Just some prose.\n\nAnother paragraph."
        chapters = ChapterSplitter().split(text)
        assert len(chapters) == 1
        assert chapters[0].title == "Chapter 1"
        assert chapters[0].content == text
        assert chapters[0].boundary == ""

    def test_explicit_pattern_without_matches(self):
        """An explicit pattern that matches nothing keeps the text whole."""
        chapters = ChapterSplitter().split("no headings here", SplitOptions(pattern=r"^Episode \d+$"))
        assert len(chapters) == 1
        assert chapters[0].content == "no headings here"

    def test_invalid_pattern(self):
        """Invalid explicit patterns raise a content error."""
        with pytest.raises(ImportStageError) as exc_info:
            ChapterSplitter().split("text", SplitOptions(pattern="(unclosed"))
        assert exc_info.value.kind == ImportErrorKind.CONTENT

    def test_preserve_titles_off(self, vietnamese_text):
        """Placeholder titles replace captured ones without moving split points."""
        chapters = ChapterSplitter().split(vietnamese_text, SplitOptions(preserve_titles=False))
        assert [c.title for c in chapters] == ["Chapter 1", "Chapter 2"]
        assert [c.content for c in chapters] == ["Nội dung A", "Nội dung B"]

    def test_separator_chapters_get_placeholders(self):
        """Patterns without a title group produce numbered titles."""
        text = "Opening scene.\n\n***\n\nSecond scene.\n\n***\n\nThird scene."
        chapters = ChapterSplitter().split(text)
        assert [c.title for c in chapters] == ["Chapter 1", "Chapter 2", "Chapter 3"]
        assert [c.content for c in chapters] == ["Opening scene.", "Second scene.", "Third scene."]
        assert rebuild(chapters) == text

    def test_content_group(self):
        """Bodies start at the content group when one is declared."""
        text = "Chương 1\nMột hai\nChương 2\nBa bốn"
        registry = PatternRegistry([PatternRegistry().find("vietnamese_chapter_body")])
        chapters = ChapterSplitter(registry).split(text)
        assert [c.title for c in chapters] == ["Chương 1", "Chương 2"]
        assert [c.content for c in chapters] == ["Một hai", "Ba bốn"]
        assert rebuild(chapters) == text

    def test_unknown_group_name_falls_back(self):
        """An unknown title group yields placeholder titles."""
        pattern = ChapterPattern("odd", re.compile(r"^== (\w+) ==$", re.M), "missing", "also_missing", 1)
        chapters = ChapterSplitter(PatternRegistry([pattern])).split("== One ==\nx\n== Two ==\ny")
        assert [c.title for c in chapters] == ["Chapter 1", "Chapter 2"]
        assert [c.content for c in chapters] == ["x", "y"]

    def test_empty_heading_body(self):
        """Consecutive headings produce an empty chapter between them."""
        chapters = ChapterSplitter().split("Chapter 1\nChapter 2\nText")
        assert [c.content for c in chapters] == ["", "Text"]
        assert chapters[0].word_count == 0
        assert chapters[0].estimated_reading_time == 0

    def test_unique_ids(self, chinese_text):
        """Every chapter gets its own id."""
        chapters = ChapterSplitter().split(chinese_text)
        assert len({c.id for c in chapters}) == len(chapters) == 3
        assert all(c.id.startswith("imported_") for c in chapters)


class TestWordCountSplit:
    """Test fixed-size word windows."""

    def test_windows(self):
        """4500 words at 2000 per chapter give 2000, 2000 and 500."""
        text = " ".join(f"w{i}" for i in range(4500))
        chapters = ChapterSplitter().split(text, SplitOptions(method=SplitMethod.WORD_COUNT))
        assert [c.word_count for c in chapters] == [2000, 2000, 500]
        assert [c.title for c in chapters] == ["Chapter 1", "Chapter 2", "Chapter 3"]
        assert [c.estimated_reading_time for c in chapters] == [10, 10, 3]
        assert chapters[2].content.startswith("w4000 ")

    def test_whitespace_is_collapsed(self):
        """Chapter text is the window's words joined by single spaces."""
        chapters = ChapterSplitter().split_by_word_count("a  b\n\nc\td e", 2)
        assert [c.content for c in chapters] == ["a b", "c d", "e"]

    def test_empty_text(self):
        """Text without words yields no chapters."""
        assert ChapterSplitter().split_by_word_count("   \n ", 10) == []

    @pytest.mark.parametrize("window", [0, -5])
    def test_non_positive_window(self, window):
        """Non-positive windows raise a content error."""
        with pytest.raises(ImportStageError) as exc_info:
            ChapterSplitter().split("a b c", SplitOptions(method="word_count", word_count=window))
        assert exc_info.value.kind == ImportErrorKind.CONTENT

    def test_none_window_uses_default(self):
        """A missing window falls back to 2000 words."""
        text = " ".join(["x"] * 2001)
        chapters = ChapterSplitter().split_by_word_count(text, None)
        assert len(chapters) == 2


class TestOtherMethods:
    """Test manual and AI split methods."""

    def test_manual(self, english_text):
        """Manual mode returns the whole text as one chapter."""
        chapters = ChapterSplitter().split(english_text, SplitOptions(method="manual"))
        assert len(chapters) == 1
        assert chapters[0].title == "Manual Split"
        assert chapters[0].content == english_text

    def test_ai_without_assistant_uses_patterns(self, vietnamese_text):
        """The ai method falls back to pattern splitting."""
        chapters = asyncio.run(ChapterSplitter().split_async(vietnamese_text, SplitOptions(method="ai")))
        assert len(chapters) == 2

    def test_ai_assistant_sections(self, vietnamese_text):
        """Sections from the assistant become chapters."""
        assistant = FakeSplitAssistant(sections=[("Intro", " Body one "), ("", "Body two")])
        splitter = ChapterSplitter(ai_splitter=assistant)
        chapters = asyncio.run(splitter.split_async(vietnamese_text, SplitOptions(method="ai")))
        assert [c.title for c in chapters] == ["Intro", "Chapter 2"]
        assert [c.content for c in chapters] == ["Body one", "Body two"]
        assert assistant.calls == 1

    def test_ai_assistant_failure_falls_back(self, vietnamese_text, mock_logger):
        """A failing assistant is logged and pattern splitting is used."""
        assistant = FakeSplitAssistant(error=RuntimeError("service down"))
        splitter = ChapterSplitter(ai_splitter=assistant, logger=mock_logger)
        chapters = asyncio.run(splitter.split_async(vietnamese_text, SplitOptions(method="ai")))
        assert [c.content for c in chapters] == ["Nội dung A", "Nội dung B"]
        mock_logger.warning.assert_called_once()

    def test_ai_assistant_empty_result_falls_back(self, vietnamese_text):
        """An empty proposal falls back to pattern splitting."""
        splitter = ChapterSplitter(ai_splitter=FakeSplitAssistant(sections=[]))
        chapters = asyncio.run(splitter.split_async(vietnamese_text, SplitOptions(method="ai")))
        assert len(chapters) == 2

    def test_assistant_ignored_for_other_methods(self, vietnamese_text):
        """The assistant is only consulted for the ai method."""
        assistant = FakeSplitAssistant(sections=[("x", "y")])
        splitter = ChapterSplitter(ai_splitter=assistant)
        asyncio.run(splitter.split_async(vietnamese_text, SplitOptions()))
        assert assistant.calls == 0


class TestPlaceholderTitle:
    """Test placeholder titles."""

    def test_format(self):
        """Placeholders are numbered from one."""
        assert placeholder_title(3) == "Chapter 3"
