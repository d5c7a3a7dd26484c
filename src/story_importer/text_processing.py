#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Replaced the Chinese punctuation helpers with manuscript normalization rules
# - Added plain text normalization (line endings, tabs, trailing whitespace)
# - Added Markdown stripping that runs to a fixed point
# - Added whitespace collapsing for text extracted from DOCX/EPUB markup
#

"""
text_processing.py - Text normalization rules for imported manuscripts
======================================================================

This module contains the cleaning functions applied to raw manuscript text
before chapter boundary detection. Every function here is idempotent.
"""

import re

from .import_constants import TAB_WIDTH

# Markdown block prefixes
MD_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}(?:\s+|$)")
MD_CLOSING_HASHES_RE = re.compile(r"\s+#+\s*$")
MD_BLOCKQUOTE_RE = re.compile(r"^\s*>\s?")
MD_BULLET_RE = re.compile(r"^\s*[-*+]\s+")
MD_NUMBERED_RE = re.compile(r"^\s*\d+[.)]\s+")
MD_FENCE_RE = re.compile(r"^\s*```[\w+-]*\s*$")
# "***", "- - -", "~~~" and friends are kept as decorative separators
MD_SEPARATOR_RE = re.compile(r"^\s*([-*_~=])(?:\s*\1){2,}\s*$")

# Markdown inline markup
MD_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
MD_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]*\)")
MD_INLINE_CODE_RE = re.compile(r"`([^`]+)`")
MD_STAR_EMPHASIS_RE = re.compile(r"(\*{1,3})(\S(?:.*?\S)?)\1")
MD_UNDERSCORE_EMPHASIS_RE = re.compile(r"(?<!\w)(_{1,3})(\S(?:.*?\S)?)\1(?!\w)")
MD_STRIKE_RE = re.compile(r"~~(\S(?:.*?\S)?)~~")

HORIZONTAL_SPACE_RE = re.compile(r"[^\S\n]+")
BLANK_LINES_RE = re.compile(r"\n{3,}")


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def normalize_plain_text(text: str) -> str:
    """
    Clean up common text file artifacts.

    - CRLF/CR line endings become LF
    - tabs become four spaces
    - trailing whitespace is removed from every line
    - leading and trailing whitespace of the whole text is removed

    Args:
        text: Raw text

    Returns:
        Normalized text
    """
    text = normalize_line_endings(text)
    text = text.replace("\t", " " * TAB_WIDTH)
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    return text.strip()


def _strip_block_prefixes(line: str) -> str:
    """Remove heading, blockquote and list markers from the start of a line."""
    while True:
        stripped = MD_BLOCKQUOTE_RE.sub("", line, count=1)
        stripped = MD_BULLET_RE.sub("", stripped, count=1)
        stripped = MD_NUMBERED_RE.sub("", stripped, count=1)
        if MD_HEADING_RE.match(stripped):
            stripped = MD_HEADING_RE.sub("", stripped, count=1)
            stripped = MD_CLOSING_HASHES_RE.sub("", stripped)
        if stripped == line:
            return line
        line = stripped


def _strip_inline_markup(line: str) -> str:
    """Remove images, links, inline code and emphasis markers from a line."""
    line = MD_IMAGE_RE.sub(r"\1", line)
    line = MD_LINK_RE.sub(r"\1", line)
    line = MD_INLINE_CODE_RE.sub(r"\1", line)
    line = MD_STAR_EMPHASIS_RE.sub(r"\2", line)
    line = MD_UNDERSCORE_EMPHASIS_RE.sub(r"\2", line)
    line = MD_STRIKE_RE.sub(r"\1", line)
    return line


def _strip_markdown_once(text: str) -> str:
    lines = []
    for line in text.split("\n"):
        if MD_FENCE_RE.match(line):
            continue
        if MD_SEPARATOR_RE.match(line):
            lines.append(line.strip())
            continue
        line = _strip_block_prefixes(line)
        line = _strip_inline_markup(line)
        lines.append(line.rstrip())
    return "\n".join(lines).strip()


def strip_markdown(text: str) -> str:
    """
    Convert Markdown into prose suitable for chapter pattern matching.

    Heading markers, emphasis markers, link syntax (the link text is kept),
    inline code markers, blockquote markers and list bullets/numbers are
    removed. Decorative separator lines are kept. The rules run until the
    text stops changing, so nested markup like "> - **x**" is fully removed
    and a second call is a no-op. Each changing pass only deletes
    characters, which bounds the loop.

    Args:
        text: Text already normalized with normalize_plain_text()

    Returns:
        Plain prose
    """
    while True:
        stripped = _strip_markdown_once(text)
        if stripped == text:
            return text
        text = stripped


def normalize_markdown(text: str) -> str:
    """Plain text normalization followed by Markdown stripping."""
    return strip_markdown(normalize_plain_text(text))


def collapse_whitespace(text: str) -> str:
    """
    Collapse whitespace in text extracted from document markup.

    Runs of spaces, tabs and other horizontal whitespace become a single
    space, lines are trimmed, and runs of blank lines become one blank line.
    Line structure is kept so chapter headings stay on their own lines.

    Args:
        text: Text extracted from DOCX/EPUB markup

    Returns:
        Collapsed text
    """
    text = normalize_line_endings(text)
    text = HORIZONTAL_SPACE_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()
