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
# - Reworked file loading for in-memory and on-disk manuscript sources
# - Added BOM-first encoding classification with a regional heuristic
# - Byte decoding now falls back through DEFAULT_ENCODING_FALLBACKS
# - Explicit encodings that do not match the bytes raise an encoding error
# - Cut multi-byte sequences are only tolerated when the sample was truncated
#

"""File handling and encoding utilities for the story importer."""

from __future__ import annotations

import codecs
import logging
import re

import chardet

from .exceptions import ImportStageError
from .import_constants import (
    BOM_SIGNATURES,
    CODEC_NAMES,
    DEFAULT_ENCODING,
    DEFAULT_ENCODING_FALLBACKS,
    ENCODING_SAMPLE_SIZE,
    MIN_ENCODING_CONFIDENCE,
)
from .models import ImportErrorKind, SourceFile

logger = logging.getLogger(__name__)

# Latin-1 supplement through Latin Extended Additional (Vietnamese), plus CJK
REGIONAL_CHARS_RE = re.compile("[\u00c0-\u1ef9\u3000-\u303f\u4e00-\u9fff]")

_TEXT_BOMS = (
    ("\ufeff", "utf-8-bom"),
    ("\ufffe", "utf-16be"),
)


def detect_encoding(sample: bytes | str, logger: logging.Logger | None = None) -> str:
    """
    Classify the encoding of a content sample.

    Byte order marks are checked first (utf-8-bom, utf-16be, utf-16le), then
    the sample is checked for regional characters (Vietnamese, CJK) that
    decode cleanly as UTF-8. Byte samples that are not valid UTF-8 are handed
    to chardet. Anything else defaults to utf-8.

    This is a best-effort classifier; callers may override it through
    ImportOptions.encoding.

    Args:
        sample: Leading bytes of a file, or text already read
        logger: Optional logger for debug output

    Returns:
        Encoding label (e.g. 'utf-8', 'utf-8-bom', 'utf-16le', 'gb2312')
    """
    log = logger or globals()["logger"]

    if isinstance(sample, str):
        for mark, label in _TEXT_BOMS:
            if sample.startswith(mark):
                return label
        if REGIONAL_CHARS_RE.search(sample):
            log.debug("Regional characters found in text sample")
        return DEFAULT_ENCODING

    for mark, label in BOM_SIGNATURES:
        if sample.startswith(mark):
            return label

    head = sample[:ENCODING_SAMPLE_SIZE]
    try:
        text = head.decode("utf-8")
    except UnicodeDecodeError as e:
        # a multi-byte sequence may be cut at the sample boundary
        truncated = len(sample) > ENCODING_SAMPLE_SIZE
        if not truncated or e.start < len(head) - 3:
            return _detect_with_chardet(head, log)
        text = head[: e.start].decode("utf-8")

    if REGIONAL_CHARS_RE.search(text):
        log.debug("Regional characters found in UTF-8 sample")
    return DEFAULT_ENCODING


def _detect_with_chardet(sample: bytes, logger: logging.Logger) -> str:
    """Detect encoding using chardet.detect on a byte sample."""
    result = chardet.detect(sample)
    encoding = result.get("encoding")
    confidence = result.get("confidence") or 0.0
    logger.debug(f"chardet.detect: {encoding} (confidence: {confidence})")
    if encoding and confidence >= MIN_ENCODING_CONFIDENCE:
        return encoding.lower()
    return DEFAULT_ENCODING


def codec_for(label: str) -> str:
    """Map an encoding label to a Python codec name."""
    return CODEC_NAMES.get(label.lower(), label)


def decode_bytes(
    data: bytes,
    encoding: str | None = None,
    fallback_encodings: list[str] | None = None,
    logger: logging.Logger | None = None,
) -> tuple[str, str]:
    """
    Decode raw bytes into text.

    With an explicit `encoding` the bytes must decode cleanly, otherwise an
    ImportStageError of kind 'encoding' is raised. Without one, the detected
    encoding is tried first and then each fallback; as a last resort the
    first fallback is used with replacement characters.

    Args:
        data: Raw file content
        encoding: Encoding requested by the caller, if any
        fallback_encodings: Encodings to try when detection fails
        logger: Optional logger for debug output

    Returns:
        Tuple of (decoded text without BOM, encoding label used)

    Raises:
        ImportStageError: If an explicit encoding does not match the bytes
    """
    log = logger or globals()["logger"]

    if encoding:
        try:
            codecs.lookup(codec_for(encoding))
        except LookupError as e:
            raise ImportStageError(ImportErrorKind.ENCODING, f"Unknown encoding '{encoding}'") from e
        try:
            text = data.decode(codec_for(encoding))
        except UnicodeDecodeError as e:
            raise ImportStageError(
                ImportErrorKind.ENCODING,
                f"Content is not valid {encoding}: {e.reason}",
                position=e.start,
            ) from e
        return strip_bom(text), encoding

    detected = detect_encoding(data, logger=log)
    candidates = [detected] + [enc for enc in (fallback_encodings or DEFAULT_ENCODING_FALLBACKS) if enc != detected]
    for label in candidates:
        try:
            text = data.decode(codec_for(label))
        except (UnicodeDecodeError, LookupError):
            log.debug(f"Failed to decode with {label}")
            continue
        log.debug(f"Successfully decoded with {label}")
        return strip_bom(text), label

    fallback = (fallback_encodings or DEFAULT_ENCODING_FALLBACKS)[0]
    log.warning(f"All encodings failed, using {fallback} with error replacement")
    return strip_bom(data.decode(codec_for(fallback), errors="replace")), fallback


def strip_bom(text: str) -> str:
    """Remove a leading byte order mark from decoded text."""
    return text[1:] if text.startswith("\ufeff") else text


def read_source(source: SourceFile) -> bytes | str:
    """
    Load the raw content of a source file.

    Args:
        source: The manuscript to read

    Returns:
        Raw bytes (or text, for sources created from strings)

    Raises:
        ImportStageError: If the source has no content and no readable path
    """
    if source.data is not None:
        return source.data
    if source.path is None:
        raise ImportStageError(ImportErrorKind.PARSE, f"No content available for '{source.name}'")
    try:
        return source.path.read_bytes()
    except (OSError, PermissionError) as e:
        raise ImportStageError(ImportErrorKind.PARSE, f"Error reading file {source.path}: {e}") from e
