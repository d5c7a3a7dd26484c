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
Story Importer - manuscript import and chapter segmentation

Imports plain text, Markdown, DOCX and EPUB manuscripts, normalizes them,
detects chapter boundaries with a ranked multilingual pattern library and
returns chapter records, one file or a whole batch at a time.
"""

__version__ = "0.1.0"
__author__ = "Emasoft"
__email__ = "713559+Emasoft@users.noreply.github.com"
__license__ = "Apache-2.0"

from .ai_collaborators import (
    ChapterSplitAssistant,
    NullTextProcessor,
    ResilientTextProcessor,
    TextProcessor,
    apply_ai_processing,
)
from .batch_processor import BatchImporter, collect_sources, run_batch
from .book_importer import StoryImporter, build_story, derive_story_title
from .chapter_metadata import (
    ChapterStats,
    compute_chapter_metadata,
    compute_import_metadata,
    estimate_processing_time,
    refresh_chapter_metadata,
    summarize_chapters,
)
from .chapter_patterns import PatternRegistry, compile_user_pattern, default_patterns
from .chapter_splitter import ChapterSplitter
from .content_filter import ContentAnalysis, ContentFilterPipeline, FilterReport, analyze_content
from .document_decoders import DocumentDecoder, DocxDecoder, EpubDecoder, default_decoders
from .exceptions import ConfigError, ImportStageError, StoryImportError
from .file_handler import decode_bytes, detect_encoding
from .models import (
    AIProcessingOptions,
    BatchImportResult,
    BatchSummary,
    ChapterPattern,
    ContentFilter,
    ContentFlag,
    EnhancementLevel,
    FilterAction,
    FilterSeverity,
    FilterType,
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
    SplitMethod,
    SplitOptions,
)
from .text_normalizer import TextNormalizer, normalize

__all__ = [
    "AIProcessingOptions",
    "BatchImportResult",
    "BatchImporter",
    "BatchSummary",
    "ChapterPattern",
    "ChapterSplitAssistant",
    "ChapterSplitter",
    "ChapterStats",
    "ConfigError",
    "ContentAnalysis",
    "ContentFilter",
    "ContentFilterPipeline",
    "ContentFlag",
    "DocumentDecoder",
    "DocxDecoder",
    "EnhancementLevel",
    "EpubDecoder",
    "FilterAction",
    "FilterReport",
    "FilterSeverity",
    "FilterType",
    "ImportErrorKind",
    "ImportIssue",
    "ImportMetadata",
    "ImportOptions",
    "ImportResult",
    "ImportStageError",
    "ImportedChapter",
    "ImportedStory",
    "NullTextProcessor",
    "PatternRegistry",
    "ProcessingProgress",
    "ProcessingStage",
    "ResilientTextProcessor",
    "SourceFile",
    "SplitMethod",
    "SplitOptions",
    "StoryImportError",
    "StoryImporter",
    "TextNormalizer",
    "TextProcessor",
    "analyze_content",
    "apply_ai_processing",
    "build_story",
    "collect_sources",
    "compile_user_pattern",
    "compute_chapter_metadata",
    "compute_import_metadata",
    "decode_bytes",
    "default_decoders",
    "default_patterns",
    "derive_story_title",
    "detect_encoding",
    "estimate_processing_time",
    "normalize",
    "refresh_chapter_metadata",
    "run_batch",
    "summarize_chapters",
]
