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
ai_collaborators.py - Interfaces to optional AI text services

The importer never talks to an AI provider itself. Callers inject objects
implementing TextProcessor and/or ChapterSplitAssistant; when none is
configured, NullTextProcessor keeps every text unchanged. Wrapping a real
service in ResilientTextProcessor adds tenacity retries and turns a final
failure into "keep the original text".
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from tenacity import AsyncRetrying, before_sleep_log, stop_after_attempt, wait_exponential

from .content_filter import ContentFilterPipeline, FilterReport
from .import_constants import (
    DEFAULT_AI_RETRY_ATTEMPTS,
    DEFAULT_AI_RETRY_WAIT_MAX,
    DEFAULT_AI_RETRY_WAIT_MIN,
)
from .models import AIProcessingOptions, ImportedChapter

logger = logging.getLogger(__name__)


class TextProcessor(Protocol):
    """AI text service used for enhancement, translation and rewriting."""

    async def enhance(self, text: str, level: str, preserve_style: bool) -> str: ...

    async def translate(self, text: str, target_language: str) -> str: ...

    async def rewrite(self, text: str, category: str, severity: str) -> str: ...


class ChapterSplitAssistant(Protocol):
    """AI service that proposes chapter boundaries as (title, body) pairs."""

    async def split(self, text: str) -> Sequence[tuple[str, str]]: ...


class NullTextProcessor:
    """TextProcessor used when no AI service is configured."""

    async def enhance(self, text: str, level: str, preserve_style: bool) -> str:
        return text

    async def translate(self, text: str, target_language: str) -> str:
        return text

    async def rewrite(self, text: str, category: str, severity: str) -> str:
        return text


class ResilientTextProcessor:
    """
    Retry calls to another TextProcessor and fall back to the input text.

    Args:
        inner: The wrapped processor
        attempts: Total attempts per call
        wait_min: Minimum seconds between attempts
        wait_max: Maximum seconds between attempts
        logger: Optional logger
    """

    def __init__(
        self,
        inner: TextProcessor,
        attempts: int = DEFAULT_AI_RETRY_ATTEMPTS,
        wait_min: float = DEFAULT_AI_RETRY_WAIT_MIN,
        wait_max: float = DEFAULT_AI_RETRY_WAIT_MAX,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.inner = inner
        self.attempts = max(1, attempts)
        self.wait_min = wait_min
        self.wait_max = wait_max
        self.logger = logger or globals()["logger"]

    async def _call(self, operation: str, text: str, *args: object) -> str:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(multiplier=self.wait_min, min=self.wait_min, max=self.wait_max),
            before_sleep=before_sleep_log(self.logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await getattr(self.inner, operation)(text, *args)
        except Exception as e:
            self.logger.error(f"AI {operation} failed after {self.attempts} attempts, keeping original text: {e}")
            return text
        if not isinstance(result, str):
            self.logger.warning(f"AI {operation} returned {type(result).__name__}, keeping original text")
            return text
        return result

    async def enhance(self, text: str, level: str, preserve_style: bool) -> str:
        return await self._call("enhance", text, level, preserve_style)

    async def translate(self, text: str, target_language: str) -> str:
        return await self._call("translate", text, target_language)

    async def rewrite(self, text: str, category: str, severity: str) -> str:
        return await self._call("rewrite", text, category, severity)


async def apply_ai_processing(
    chapters: list[ImportedChapter],
    options: AIProcessingOptions,
    processor: Optional[TextProcessor] = None,
    report: Optional[FilterReport] = None,
    logger: Optional[logging.Logger] = None,
) -> list[ImportedChapter]:
    """
    Run moderation, enhancement and translation over chapters, in that order.

    Moderation is the content filter pipeline driven by
    options.content_filters. Translation only runs when a target language is
    set. Without a processor, enhancement and translation keep the text.

    Args:
        chapters: Chapters to process in place
        options: Which steps to run
        processor: Optional AI text service
        report: Receives filter flags and non-fatal errors
        logger: Optional logger

    Returns:
        The same chapter list
    """
    log = logger or globals()["logger"]
    processor = processor or NullTextProcessor()

    if options.enable_content_moderation and options.content_filters:
        log.debug(f"Applying {len(options.content_filters)} content filters")
        pipeline = ContentFilterPipeline(rewriter=processor, logger=log)
        await pipeline.apply(chapters, options.content_filters, report)

    if options.enable_content_enhancement:
        log.debug(f"Enhancing {len(chapters)} chapters ({options.enhancement_level.value})")
        for chapter in chapters:
            chapter.content = await _keep_on_failure(
                processor.enhance(chapter.content, options.enhancement_level.value, options.preserve_style),
                chapter.content,
                "enhancement",
                log,
            )

    if options.enable_translation and options.target_language:
        log.debug(f"Translating {len(chapters)} chapters to {options.target_language}")
        for chapter in chapters:
            chapter.content = await _keep_on_failure(
                processor.translate(chapter.content, options.target_language),
                chapter.content,
                "translation",
                log,
            )

    return chapters


async def _keep_on_failure(call, original: str, step: str, log: logging.Logger) -> str:
    try:
        result = await call
    except Exception as e:
        log.warning(f"AI {step} failed, keeping original text: {e}")
        return original
    return result if isinstance(result, str) else original
