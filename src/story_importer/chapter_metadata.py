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

"""
chapter_metadata.py - Word counts, reading times and per-file metadata

Counts are derived from whitespace tokenization. Character counts are
UTF-16 code units so that they agree with editors and browsers that store
text as UTF-16 (characters outside the BMP count as two).
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Any, Iterable

from .import_constants import (
    ESTIMATE_AI_FACTOR,
    ESTIMATE_KB_PER_SECOND,
    ESTIMATE_MAX_SECONDS,
    ESTIMATE_SPLIT_FACTOR,
    WORDS_PER_MINUTE,
)
from .models import ImportedChapter, ImportMetadata, ImportOptions, SourceFile, _Record


@dataclass(frozen=True)
class ChapterStats(_Record):
    word_count: int
    character_count: int
    estimated_reading_time: int  # minutes


def count_words(text: str) -> int:
    """Number of whitespace-delimited tokens."""
    return len(text.split())


def count_characters(text: str) -> int:
    """Length of `text` in UTF-16 code units."""
    return len(text.encode("utf-16-le")) // 2


def reading_time(word_count: int) -> int:
    """Minutes to read `word_count` words; 0 for no words, else at least 1."""
    if word_count <= 0:
        return 0
    return math.ceil(word_count / WORDS_PER_MINUTE)


def compute_chapter_metadata(content: str) -> ChapterStats:
    words = count_words(content)
    return ChapterStats(
        word_count=words,
        character_count=count_characters(content),
        estimated_reading_time=reading_time(words),
    )


def refresh_chapter_metadata(chapter: ImportedChapter) -> ImportedChapter:
    """
    Recompute the counts of a chapter whose content was changed.

    Content filters rewrite chapter text without touching the counts, so
    the numbers are stale after filtering until this is called.

    Args:
        chapter: Chapter to update in place

    Returns:
        The same chapter, for chaining
    """
    stats = compute_chapter_metadata(chapter.content)
    chapter.word_count = stats.word_count
    chapter.character_count = stats.character_count
    chapter.estimated_reading_time = stats.estimated_reading_time
    return chapter


def compute_import_metadata(
    source: SourceFile,
    text: str,
    start_time: float,
    encoding: str,
) -> ImportMetadata:
    """
    Build the metadata record for one imported file.

    Args:
        source: The imported source; its byte length becomes total_size
        text: The normalized text; totals are counted on it, not on raw bytes
        start_time: time.perf_counter() value taken when work on the file began
        encoding: Encoding label used to decode the file

    Returns:
        Immutable ImportMetadata
    """
    return ImportMetadata(
        total_size=source.byte_size,
        total_characters=count_characters(text),
        total_words=count_words(text),
        encoding=encoding,
        file_name=source.name,
        import_date=int(time.time() * 1000),
        processing_time=elapsed_ms(start_time),
    )


def elapsed_ms(start_time: float) -> int:
    """Milliseconds elapsed since a time.perf_counter() reading."""
    return max(0, round((time.perf_counter() - start_time) * 1000))


def estimate_processing_time(file_size: int, options: ImportOptions) -> float:
    """
    Rough number of seconds an import of `file_size` bytes will take.

    The base rate is 100 KB per second. Automatic splitting multiplies it by
    1.5 and AI processing by 3. The estimate is capped at five minutes.
    """
    seconds = file_size / 1024 / ESTIMATE_KB_PER_SECOND
    if options.auto_split:
        seconds *= ESTIMATE_SPLIT_FACTOR
    if options.ai_processing:
        seconds *= ESTIMATE_AI_FACTOR
    return min(seconds, ESTIMATE_MAX_SECONDS)


def summarize_chapters(chapters: Iterable[ImportedChapter]) -> dict[str, Any]:
    """Aggregate statistics for a list of chapters."""
    chapters = list(chapters)
    total_words = sum(chapter.word_count for chapter in chapters)
    return {
        "chapter_count": len(chapters),
        "total_words": total_words,
        "total_characters": sum(chapter.character_count for chapter in chapters),
        "average_words": round(total_words / len(chapters)) if chapters else 0,
        "total_reading_time": sum(chapter.estimated_reading_time for chapter in chapters),
    }
