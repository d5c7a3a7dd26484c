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
# - Replaced the translation Book/Chunk/Variation records with import records
# - Added chapter, issue, metadata and result value objects
# - Added option objects consumed by the import orchestrators
# - Added to_dict() serialization for CLI output
#

"""Data models for the story import pipeline."""

from __future__ import annotations

import enum
import re
import uuid
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Union

from .import_constants import DEFAULT_WORDS_PER_CHAPTER, EXTENSION_ALIASES

GroupRef = Union[int, str, None]


def generate_id(prefix: str) -> str:
    """Return a unique id such as "imported_3f2b..."."""
    return f"{prefix}_{uuid.uuid4().hex}"


def _plain(value: Any) -> Any:
    """Convert enums, patterns and nested records into plain data."""
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


class _Record:
    """Mixin providing to_dict() for dataclass records."""

    def to_dict(self) -> dict[str, Any]:
        return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}  # type: ignore[arg-type]


class ImportErrorKind(str, enum.Enum):
    """Category of a per-file import problem."""

    PARSE = "parse"
    """The content could not be normalized."""
    ENCODING = "encoding"
    """Declared or detected encoding does not match the bytes."""
    FORMAT = "format"
    """Unsupported or unknown file type."""
    SIZE = "size"
    """The file exceeds the configured size limit (advisory)."""
    CONTENT = "content"
    """A filter or matcher rejected its input, e.g. an invalid regex."""


class SplitMethod(str, enum.Enum):
    PATTERN = "pattern"
    WORD_COUNT = "word_count"
    MANUAL = "manual"
    AI = "ai"


class FilterType(str, enum.Enum):
    VIOLENCE = "violence"
    EXPLICIT = "explicit"
    PROFANITY = "profanity"
    SENSITIVE = "sensitive"
    CUSTOM = "custom"


class FilterAction(str, enum.Enum):
    REMOVE = "remove"
    REPLACE = "replace"
    FLAG = "flag"
    REWRITE = "rewrite"


class FilterSeverity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EnhancementLevel(str, enum.Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


class ProcessingStage(str, enum.Enum):
    UPLOADING = "uploading"
    PARSING = "parsing"
    SPLITTING = "splitting"
    AI_PROCESSING = "ai_processing"
    SAVING = "saving"


@dataclass(frozen=True)
class ChapterPattern(_Record):
    """
    A chapter boundary rule.

    The matcher is run with finditer(); title_group and content_group name the
    capture groups holding the heading title and the start of the body. Lower
    priority values are tried first during auto-detection.
    """

    name: str
    matcher: re.Pattern[str]
    title_group: GroupRef = None
    content_group: GroupRef = None
    priority: int = 100


@dataclass
class ImportedChapter(_Record):
    """
    One chapter produced by the splitter.

    The content filter pipeline rewrites `content` in place without touching
    the counts; call chapter_metadata.refresh_chapter_metadata() when fresh
    numbers are needed. `boundary` keeps the source text that separated this
    chapter's content from the previous one (heading line and separators).
    """

    id: str
    title: str
    content: str
    original_position: int
    word_count: int
    character_count: int
    estimated_reading_time: int
    boundary: str = ""


@dataclass
class ImportIssue(_Record):
    """A problem found while importing one file."""

    kind: ImportErrorKind
    message: str
    position: int | None = None
    line: int | None = None

    def __post_init__(self) -> None:
        self.kind = ImportErrorKind(self.kind)


@dataclass(frozen=True)
class ImportMetadata(_Record):
    total_size: int
    total_characters: int
    total_words: int
    encoding: str
    file_name: str
    import_date: int  # epoch milliseconds
    processing_time: int  # milliseconds


@dataclass
class ContentFlag(_Record):
    """A match found by a filter running with the `flag` action."""

    chapter_id: str
    filter_type: FilterType
    start: int
    end: int
    text: str


@dataclass
class ImportResult(_Record):
    success: bool
    chapters: list[ImportedChapter]
    errors: list[ImportIssue]
    metadata: ImportMetadata
    flags: list[ContentFlag] = field(default_factory=list)


@dataclass
class ImportedStory(_Record):
    id: str
    title: str
    chapters: list[ImportedChapter]
    metadata: ImportMetadata
    original_file: str


@dataclass
class ContentFilter(_Record):
    type: FilterType
    action: FilterAction
    severity: FilterSeverity = FilterSeverity.MEDIUM
    custom_pattern: str | None = None

    def __post_init__(self) -> None:
        self.type = FilterType(self.type)
        self.action = FilterAction(self.action)
        self.severity = FilterSeverity(self.severity)
        if isinstance(self.custom_pattern, (int, float)) and not isinstance(self.custom_pattern, bool):
            self.custom_pattern = str(self.custom_pattern)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentFilter:
        return cls(
            type=data["type"],
            action=data["action"],
            severity=data.get("severity", FilterSeverity.MEDIUM),
            custom_pattern=data.get("custom_pattern"),
        )


@dataclass
class ProcessingProgress(_Record):
    stage: ProcessingStage
    progress: int  # 0-100
    message: str
    current_item: str | None = None
    estimated_time_remaining: float | None = None


@dataclass
class SplitOptions(_Record):
    """
    How to split normalized text into chapters.

    preserve_titles and generate_titles never move split points. With
    preserve_titles off, pattern mode uses placeholder titles instead of the
    captured headings.
    """

    method: SplitMethod = SplitMethod.PATTERN
    pattern: str | None = None
    word_count: int | None = DEFAULT_WORDS_PER_CHAPTER
    preserve_titles: bool = True
    generate_titles: bool = True
    title_group: GroupRef = None
    content_group: GroupRef = None

    def __post_init__(self) -> None:
        self.method = SplitMethod(self.method)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SplitOptions:
        return cls(
            method=data.get("method", SplitMethod.PATTERN),
            pattern=data.get("pattern") or None,
            word_count=data.get("word_count", DEFAULT_WORDS_PER_CHAPTER),
            preserve_titles=data.get("preserve_titles", True),
            generate_titles=data.get("generate_titles", True),
            title_group=data.get("title_group"),
            content_group=data.get("content_group"),
        )


@dataclass
class AIProcessingOptions(_Record):
    enable_content_moderation: bool = False
    enable_content_enhancement: bool = False
    enable_translation: bool = False
    target_language: str | None = None
    content_filters: list[ContentFilter] = field(default_factory=list)
    enhancement_level: EnhancementLevel = EnhancementLevel.LIGHT
    preserve_style: bool = True

    def __post_init__(self) -> None:
        self.enhancement_level = EnhancementLevel(self.enhancement_level)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AIProcessingOptions:
        return cls(
            enable_content_moderation=data.get("enable_content_moderation", False),
            enable_content_enhancement=data.get("enable_content_enhancement", False),
            enable_translation=data.get("enable_translation", False),
            target_language=data.get("target_language") or None,
            content_filters=[ContentFilter.from_dict(item) for item in data.get("content_filters") or []],
            enhancement_level=data.get("enhancement_level", EnhancementLevel.LIGHT),
            preserve_style=data.get("preserve_style", True),
        )


@dataclass
class ImportOptions(_Record):
    """Shared configuration for one import call (single file or batch)."""

    file_format: str = "txt"
    encoding: str | None = None
    auto_split: bool = True
    split_options: SplitOptions = field(default_factory=SplitOptions)
    ai_processing: bool = False
    ai_processing_options: AIProcessingOptions = field(default_factory=AIProcessingOptions)
    preserve_formatting: bool = True
    create_hierarchy: bool = False
    max_file_size: int | None = None  # bytes, advisory

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImportOptions:
        return cls(
            file_format=data.get("file_format", "txt"),
            encoding=data.get("encoding") or None,
            auto_split=data.get("auto_split", True),
            split_options=SplitOptions.from_dict(data.get("split_options") or {}),
            ai_processing=data.get("ai_processing", False),
            ai_processing_options=AIProcessingOptions.from_dict(data.get("ai_processing_options") or {}),
            preserve_formatting=data.get("preserve_formatting", True),
            create_hierarchy=data.get("create_hierarchy", False),
            max_file_size=data.get("max_file_size"),
        )


@dataclass
class SourceFile(_Record):
    """
    A manuscript handed to the importer.

    Content comes from `data` when given, else it is read from `path`.
    """

    name: str
    data: bytes | str | None = None
    format: str | None = None
    path: Path | None = None
    size: int | None = None

    @classmethod
    def from_path(cls, path: str | Path, format: str | None = None) -> SourceFile:
        path = Path(path)
        size = path.stat().st_size if path.is_file() else None
        return cls(name=path.name, path=path, format=format, size=size)

    @property
    def byte_size(self) -> int:
        """Size of the source in bytes."""
        if self.size is not None:
            return self.size
        if isinstance(self.data, bytes):
            return len(self.data)
        if isinstance(self.data, str):
            return len(self.data.encode("utf-8"))
        if self.path is not None and self.path.is_file():
            return self.path.stat().st_size
        return 0

    def resolved_format(self, default: str | None = None) -> str | None:
        """Declared format, else the file extension, else `default`."""
        candidate = self.format or Path(self.name).suffix.lstrip(".") or default
        if not candidate:
            return None
        candidate = candidate.lower().lstrip(".")
        return EXTENSION_ALIASES.get(candidate, candidate)

    def to_dict(self) -> dict[str, Any]:
        # raw content is not serialized
        return {
            "name": self.name,
            "format": self.format,
            "path": str(self.path) if self.path else None,
            "size": self.byte_size,
        }


@dataclass
class BatchSummary(_Record):
    total_files: int
    successful_files: int
    total_processing_time: int  # milliseconds


@dataclass
class BatchImportResult(_Record):
    success: bool
    stories: list[ImportedStory]
    errors: list[ImportIssue]
    summary: BatchSummary
