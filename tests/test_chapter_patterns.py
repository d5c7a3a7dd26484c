#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Tests for the chapter pattern library and registry
"""

import re

import pytest

from story_importer.chapter_patterns import PatternRegistry, compile_user_pattern, default_patterns
from story_importer.exceptions import ImportStageError
from story_importer.models import ChapterPattern, ImportErrorKind


def titles(pattern, text):
    return [m.group(pattern.title_group).strip() for m in pattern.matcher.finditer(text)]


class TestDefaultPatterns:
    """Test the built-in pattern families."""

    def test_priority_order(self):
        """Defaults are listed from lowest to highest priority value."""
        priorities = [p.priority for p in default_patterns()]
        assert priorities == sorted(priorities)
        assert default_patterns()[0].name == "vietnamese_chapter"
        assert default_patterns()[-1].name == "separator"

    def test_vietnamese(self, vietnamese_text):
        """Vietnamese headings are matched with their full title line."""
        pattern = PatternRegistry().find("vietnamese_chapter")
        assert titles(pattern, vietnamese_text) == ["Chương 1: Mở đầu", "Chương 2: Tiếp theo"]

    @pytest.mark.parametrize("heading", ["Hồi 5", "Phần II", "chuong 12 - Ket thuc", "Quyển 3"])
    def test_vietnamese_variants(self, heading):
        """Other Vietnamese section words are recognized."""
        pattern = PatternRegistry().find("vietnamese_chapter")
        assert pattern.matcher.search(f"intro\n{heading}\nbody")

    def test_chinese(self, chinese_text):
        """Chinese headings with CJK numerals are matched."""
        pattern = PatternRegistry().find("chinese_chapter")
        assert titles(pattern, chinese_text) == ["第一章 开始", "第二章 继续", "第十二章 结束"]

    @pytest.mark.parametrize(
        "heading",
        ["Chapter 1", "CHAPTER 12: The End", "Chapter Twenty-One", "Chapter IV", "Part IV: The Fall", "Book III - Return", "Part 2", "Ch. 7"],
    )
    def test_english(self, heading):
        """English headings with digits, words or roman numerals are matched."""
        pattern = PatternRegistry().find("english_chapter")
        match = pattern.matcher.search(f"text\n{heading}\nmore")
        assert match is not None
        assert match.group("title") == heading

    def test_english_ignores_prose(self):
        """Sentences that merely start with 'chapter' words are not headings."""
        pattern = PatternRegistry().find("english_chapter")
        assert pattern.matcher.search("Chapters were read aloud.\nThe book ended.") is None

    @pytest.mark.parametrize("line", ["Part civil unrest broke out.", "Book mix of old stories", "Volume dim and low"])
    def test_english_roman_letters_in_prose(self, line):
        """Words made of roman numeral letters do not turn prose into headings."""
        pattern = PatternRegistry().find("english_chapter")
        assert pattern.matcher.search(f"text\n{line}\nmore") is None

    def test_markdown_heading(self):
        """ATX headings yield their text."""
        pattern = PatternRegistry().find("markdown_heading")
        assert titles(pattern, "## The Road ##\ntext") == ["The Road"]

    def test_separator(self):
        """Separator lines are boundaries without a title."""
        pattern = PatternRegistry().find("separator")
        assert pattern.title_group is None
        assert len(pattern.matcher.findall("a\n***\nb\n- - -\nc\n☆☆☆\nd")) == 3

    def test_vietnamese_body_pattern_captures_content(self):
        """The body pattern captures the chapter text as a group."""
        pattern = PatternRegistry().find("vietnamese_chapter_body")
        matches = list(pattern.matcher.finditer("Chương 1\nMột\nChương 2\nHai"))
        assert [m.group("title") for m in matches] == ["Chương 1", "Chương 2"]
        assert matches[0].group("content") == "Một\n"


class TestPatternRegistry:
    """Test the PatternRegistry class."""

    def test_defaults(self):
        """A new registry holds the built-in patterns."""
        assert len(PatternRegistry()) == len(default_patterns())

    def test_get_patterns_returns_copy(self):
        """Mutating the returned list does not change the registry."""
        registry = PatternRegistry()
        patterns = registry.get_patterns()
        patterns.clear()
        assert len(registry.get_patterns()) == len(default_patterns())

    def test_register_sorts_by_priority(self):
        """Registered patterns take their place by priority."""
        registry = PatternRegistry()
        custom = ChapterPattern("episode", re.compile(r"^Episode (\d+)$", re.M), 1, None, 25)
        registry.register_pattern(custom)
        names = [p.name for p in registry]
        assert names.index("chinese_chapter") < names.index("episode") < names.index("english_chapter")

    def test_ties_keep_registration_order(self):
        """Equal priorities keep the order in which they were added."""
        registry = PatternRegistry([])
        first = ChapterPattern("first", re.compile("a"), None, None, 5)
        second = ChapterPattern("second", re.compile("a"), None, None, 5)
        registry.register_pattern(first)
        registry.register_pattern(second)
        assert [p.name for p in registry.get_patterns()] == ["first", "second"]
        assert registry.detect("a").name == "first"

    def test_detect_picks_first_matching(self, english_text, chinese_text):
        """Detection follows priority order."""
        registry = PatternRegistry()
        assert registry.detect(english_text).name == "english_chapter"
        assert registry.detect(chinese_text).name == "chinese_chapter"

    def test_detect_none(self):
        """Text without boundaries detects nothing."""
        assert PatternRegistry().detect("just a paragraph of prose") is None

    def test_find_unknown(self):
        """Unknown names return None."""
        assert PatternRegistry().find("nope") is None


class TestCompileUserPattern:
    """Test compile_user_pattern()."""

    def test_default_title_group_is_last(self):
        """Without a title group, the highest-numbered group is used."""
        pattern = compile_user_pattern(r"^Chương\s*(\d+)[:\.\s]*(.+?)$")
        assert pattern.title_group == 2
        assert pattern.content_group is None
        assert pattern.priority == 0

    def test_flags(self):
        """User patterns are multiline and case-insensitive."""
        pattern = compile_user_pattern(r"^episode (\d+)$")
        assert len(pattern.matcher.findall("EPISODE 1\ntext\nEpisode 2")) == 2

    def test_no_groups(self):
        """Patterns without groups have no title group."""
        assert compile_user_pattern(r"^---$").title_group is None

    def test_invalid_pattern(self):
        """Invalid expressions raise a content error with the position."""
        with pytest.raises(ImportStageError) as exc_info:
            compile_user_pattern(r"^Chapter (\d+")
        assert exc_info.value.kind == ImportErrorKind.CONTENT
        assert exc_info.value.position is not None
