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
text_normalizer.py - Format dispatch for manuscript normalization

Text formats are cleaned with the rules in text_processing; binary formats
are handed to a DocumentDecoder looked up by format name.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping

from .document_decoders import DocumentDecoder, default_decoders
from .exceptions import ImportStageError
from .file_handler import decode_bytes
from .import_constants import BINARY_FORMATS, EXTENSION_ALIASES
from .models import ImportErrorKind
from .text_processing import normalize_markdown, normalize_plain_text

logger = logging.getLogger(__name__)


class TextNormalizer:
    """Normalize raw manuscript content into plain text."""

    def __init__(
        self,
        decoders: Mapping[str, DocumentDecoder] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.decoders = dict(default_decoders() if decoders is None else decoders)
        self.logger = logger or globals()["logger"]

    def normalize(self, raw: bytes | str, fmt: str) -> str:
        """
        Normalize content according to its format.

        Args:
            raw: File content; text formats given as bytes are decoded first
            fmt: One of txt, md, docx, epub

        Returns:
            Normalized text

        Raises:
            ImportStageError: 'format' for an unknown format, 'parse' when a
                binary format has no decoder or the decoder fails
        """
        fmt = self._canonical(fmt)
        if fmt in BINARY_FORMATS:
            return self._decode(raw, fmt)

        text = raw if isinstance(raw, str) else decode_bytes(raw, logger=self.logger)[0]
        if fmt == "md":
            return normalize_markdown(text)
        return normalize_plain_text(text)

    async def normalize_async(self, raw: bytes | str, fmt: str) -> str:
        """Same as normalize(), with decoder calls run in a worker thread."""
        fmt = self._canonical(fmt)
        if fmt in BINARY_FORMATS:
            return await asyncio.to_thread(self._decode, raw, fmt)
        return self.normalize(raw, fmt)

    def _canonical(self, fmt: str) -> str:
        canonical = EXTENSION_ALIASES.get((fmt or "").lower().lstrip("."))
        if canonical is None:
            raise ImportStageError(ImportErrorKind.FORMAT, f"Unsupported file format: '{fmt}'")
        return canonical

    def _decode(self, raw: bytes | str, fmt: str) -> str:
        decoder = self.decoders.get(fmt)
        if decoder is None:
            raise ImportStageError(ImportErrorKind.PARSE, f"No decoder available for '{fmt}' content")
        try:
            return decoder.decode(raw)
        except ImportStageError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to decode {fmt} content: {e}")
            raise ImportStageError(ImportErrorKind.PARSE, f"Could not extract text from {fmt} content: {e}") from e


def normalize(
    raw: bytes | str,
    fmt: str,
    decoders: Mapping[str, DocumentDecoder] | None = None,
) -> str:
    """Normalize content with a one-off TextNormalizer."""
    return TextNormalizer(decoders).normalize(raw, fmt)
