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
Common constants used across the story importer modules.

This module centralizes shared constants to avoid duplication and ensure
consistency across the codebase.
"""

# Supported manuscript formats, keyed by file extension
SUPPORTED_FORMATS = ("txt", "md", "docx", "epub")
TEXT_FORMATS = ("txt", "md")
BINARY_FORMATS = ("docx", "epub")
EXTENSION_ALIASES = {
    "txt": "txt",
    "text": "txt",
    "md": "md",
    "markdown": "md",
    "docx": "docx",
    "epub": "epub",
}

# File encoding defaults
DEFAULT_ENCODING = "utf-8"
DEFAULT_ENCODING_FALLBACKS = ["utf-8", "gb18030", "big5", "cp1258", "latin-1"]
ENCODING_SAMPLE_SIZE = 32 * 1024  # bytes handed to the encoding detector
MIN_ENCODING_CONFIDENCE = 0.5

# Byte order marks, in detection priority order
BOM_SIGNATURES = (
    (b"\xef\xbb\xbf", "utf-8-bom"),
    (b"\xfe\xff", "utf-16be"),
    (b"\xff\xfe", "utf-16le"),
)

# Python codec names for the labels produced by detect_encoding()
CODEC_NAMES = {
    "utf-8-bom": "utf-8-sig",
    "utf-16be": "utf-16-be",
    "utf-16le": "utf-16-le",
}

# Tab expansion width used by the plain text normalizer
TAB_WIDTH = 4

# Chapter splitting
DEFAULT_WORDS_PER_CHAPTER = 2000
WORDS_PER_MINUTE = 200
PLACEHOLDER_TITLE = "Chapter {number}"
MANUAL_SPLIT_TITLE = "Manual Split"

# Story title derivation
TITLE_SCAN_LINES = 5
TITLE_MIN_LENGTH = 10
TITLE_MAX_LENGTH = 100

# Processing time estimate (seconds)
ESTIMATE_KB_PER_SECOND = 100
ESTIMATE_SPLIT_FACTOR = 1.5
ESTIMATE_AI_FACTOR = 3.0
ESTIMATE_MAX_SECONDS = 300

# AI collaborator retry settings
DEFAULT_AI_RETRY_ATTEMPTS = 3
DEFAULT_AI_RETRY_WAIT_MIN = 0.5
DEFAULT_AI_RETRY_WAIT_MAX = 8.0

# Custom filter regexes are user supplied, so matching is time boxed
CUSTOM_PATTERN_TIMEOUT = 2.0  # seconds

# Prefix of generated ids
CHAPTER_ID_PREFIX = "imported"
STORY_ID_PREFIX = "story"
