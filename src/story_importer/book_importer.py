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
# - Replaced the database-backed book import with StoryImporter
# - Import runs read -> decode/normalize -> split -> AI processing -> metadata
# - Stage failures become ImportIssue records; import_file never raises
# - Added progress callbacks with a remaining time estimate
# - Added story title derivation from the first chapter or the file name
#

"""Single-file import for the story importer."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from pathlib import Path
from typing import Callable, Mapping, Optional

from .ai_collaborators import ChapterSplitAssistant, TextProcessor, apply_ai_processing
from .chapter_metadata import compute_import_metadata, elapsed_ms, estimate_processing_time
from .chapter_patterns import PatternRegistry
from .chapter_splitter import ChapterSplitter
from .content_filter import FilterReport
from .document_decoders import DocumentDecoder
from .exceptions import ImportStageError
from .file_handler import decode_bytes, detect_encoding, read_source, strip_bom
from .import_constants import (
    DEFAULT_ENCODING,
    STORY_ID_PREFIX,
    SUPPORTED_FORMATS,
    TEXT_FORMATS,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
    TITLE_SCAN_LINES,
)
from .models import (
    ContentFlag,
    ImportedChapter,
    ImportedStory,
    ImportErrorKind,
    ImportIssue,
    ImportMetadata,
    ImportOptions,
    ImportResult,
    ProcessingProgress,
    ProcessingStage,
    SourceFile,
    generate_id,
)
from .text_normalizer import TextNormalizer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProcessingProgress], None]

FILENAME_SEPARATORS_RE = re.compile(r"[_\-.]+")


def derive_story_title(chapters: list[ImportedChapter], file_name: str) -> str:
    """
    Pick a story title.

    The first non-blank lines of the first chapter are scanned and the first
    one between 10 and 100 characters long wins. Otherwise the file name is
    used with its extension stripped and `_`, `-`, `.` turned into spaces.

    Args:
        chapters: Imported chapters
        file_name: Name of the source file

    Returns:
        The story title
    """
    if chapters:
        lines = [line.strip() for line in chapters[0].content.split("\n") if line.strip()]
        for line in lines[:TITLE_SCAN_LINES]:
            if TITLE_MIN_LENGTH <= len(line) <= TITLE_MAX_LENGTH:
                return line

    title = FILENAME_SEPARATORS_RE.sub(" ", Path(file_name).stem).strip()
    return title or file_name


def build_story(result: ImportResult, source: SourceFile) -> ImportedStory:
    """Wrap the chapters of a successful import into an ImportedStory."""
    return ImportedStory(
        id=generate_id(STORY_ID_PREFIX),
        title=derive_story_title(result.chapters, source.name),
        chapters=result.chapters,
        metadata=result.metadata,
        original_file=source.name,
    )


class StoryImporter:
    """
    Import one manuscript file into chapters.

    All collaborators are injected: the pattern registry used for
    auto-detection, DOCX/EPUB decoders, and the optional AI services.

    Args:
        registry: Chapter pattern registry (built-in patterns when None)
        decoders: Format -> DocumentDecoder mapping (built-in when None)
        text_processor: Optional AI service for rewrite/enhance/translate
        split_assistant: Optional AI service for the ai split method
        logger: Optional logger
    """

    def __init__(
        self,
        registry: Optional[PatternRegistry] = None,
        decoders: Optional[Mapping[str, DocumentDecoder]] = None,
        text_processor: Optional[TextProcessor] = None,
        split_assistant: Optional[ChapterSplitAssistant] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or globals()["logger"]
        self.registry = registry if registry is not None else PatternRegistry()
        self.normalizer = TextNormalizer(decoders, logger=self.logger)
        self.splitter = ChapterSplitter(self.registry, split_assistant, logger=self.logger)
        self.text_processor = text_processor

    async def import_file(
        self,
        source: SourceFile,
        options: Optional[ImportOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ImportResult:
        """
        Import a single file.

        Every failure is reported in the returned result; this method does
        not raise for problems with the file or its content.

        Args:
            source: The manuscript
            options: Import configuration
            on_progress: Called with a ProcessingProgress at each stage

        Returns:
            ImportResult, with success=False and no chapters when a stage failed
        """
        options = options or ImportOptions()
        start_time = time.perf_counter()
        estimate = estimate_processing_time(source.byte_size, options)
        issues: list[ImportIssue] = []
        flags: list[ContentFlag] = []

        def progress(stage: ProcessingStage, percent: int, message: str) -> None:
            if on_progress is None:
                return
            event = ProcessingProgress(
                stage=stage,
                progress=percent,
                message=message,
                current_item=source.name,
                estimated_time_remaining=round(estimate * (100 - percent) / 100, 2),
            )
            try:
                on_progress(event)
            except Exception as e:
                self.logger.warning(f"Progress callback failed: {e}")

        try:
            progress(ProcessingStage.UPLOADING, 0, f"Reading {source.name}")
            raw = await asyncio.to_thread(read_source, source)

            if options.max_file_size is not None and source.byte_size > options.max_file_size:
                self.logger.warning(f"{source.name} is {source.byte_size} bytes, limit is {options.max_file_size}")
                issues.append(
                    ImportIssue(
                        kind=ImportErrorKind.SIZE,
                        message=f"File size {source.byte_size} exceeds the limit of {options.max_file_size} bytes",
                    )
                )

            fmt = source.resolved_format(options.file_format)
            if fmt not in SUPPORTED_FORMATS:
                raise ImportStageError(ImportErrorKind.FORMAT, f"Unsupported file format: '{fmt}'")

            progress(ProcessingStage.PARSING, 20, f"Parsing {fmt} content")
            text, encoding = await self._normalize(raw, fmt, options)

            progress(ProcessingStage.SPLITTING, 50, "Detecting chapters")
            if options.auto_split:
                chapters = await self.splitter.split_async(text, options.split_options)
            else:
                chapters = [self.splitter.create_single_chapter(text, source.name)]
            self.logger.info(f"{source.name}: {len(chapters)} chapters")

            if options.ai_processing:
                progress(ProcessingStage.AI_PROCESSING, 70, "Processing chapters")
                report = FilterReport()
                await apply_ai_processing(
                    chapters,
                    options.ai_processing_options,
                    self.text_processor,
                    report,
                    logger=self.logger,
                )
                issues.extend(report.errors)
                flags.extend(report.flags)

            progress(ProcessingStage.SAVING, 90, "Computing metadata")
            metadata = compute_import_metadata(source, text, start_time, encoding)
        except ImportStageError as e:
            self.logger.error(f"Import of {source.name} failed ({e.kind.value}): {e.message}")
            issues.append(e.to_issue())
            return ImportResult(False, [], issues, self._failure_metadata(source, options, start_time))
        except Exception as e:
            self.logger.error(f"Import of {source.name} failed: {e}")
            issues.append(ImportIssue(kind=ImportErrorKind.PARSE, message=f"Failed to import file: {e}"))
            return ImportResult(False, [], issues, self._failure_metadata(source, options, start_time))

        progress(ProcessingStage.SAVING, 100, "Import complete")
        return ImportResult(True, chapters, issues, metadata, flags)

    async def _normalize(self, raw: bytes | str, fmt: str, options: ImportOptions) -> tuple[str, str]:
        if fmt not in TEXT_FORMATS:
            return await self.normalizer.normalize_async(raw, fmt), DEFAULT_ENCODING

        if isinstance(raw, bytes):
            decoded, encoding = decode_bytes(raw, options.encoding, logger=self.logger)
        else:
            encoding = options.encoding or detect_encoding(raw, logger=self.logger)
            decoded = strip_bom(raw)
        return await self.normalizer.normalize_async(decoded, fmt), encoding

    def _failure_metadata(self, source: SourceFile, options: ImportOptions, start_time: float) -> ImportMetadata:
        return ImportMetadata(
            total_size=source.byte_size,
            total_characters=0,
            total_words=0,
            encoding=options.encoding or DEFAULT_ENCODING,
            file_name=source.name,
            import_date=int(time.time() * 1000),
            processing_time=elapsed_ms(start_time),
        )
