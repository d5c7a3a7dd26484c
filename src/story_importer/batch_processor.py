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
# - Replaced the sequential translation batch with concurrent imports
# - All files start at once and are awaited together (asyncio.gather)
# - Optional concurrency cap through a semaphore
# - Per-file failures are collected; a batch succeeds when any file imports
# - Added import_paths() for files and directories, and a sync run_batch()
#

"""Batch import of multiple manuscripts."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Iterable, Optional

from .book_importer import StoryImporter, build_story
from .chapter_metadata import elapsed_ms
from .import_constants import EXTENSION_ALIASES
from .models import (
    BatchImportResult,
    BatchSummary,
    ImportedStory,
    ImportIssue,
    ImportOptions,
    ImportResult,
    SourceFile,
)

logger = logging.getLogger(__name__)


def collect_sources(paths: Iterable[str | Path], logger: Optional[logging.Logger] = None) -> list[SourceFile]:
    """
    Turn file and directory paths into SourceFile objects.

    Directories are expanded (non-recursively) to the files with a supported
    extension, sorted by name. Files are kept as given, whatever their
    extension, so unsupported ones show up as batch errors.

    Args:
        paths: Files and/or directories
        logger: Optional logger

    Returns:
        Sources in the order given
    """
    log = logger or globals()["logger"]
    sources = []
    for path in map(Path, paths):
        if path.is_dir():
            found = sorted(
                (item for item in path.iterdir() if item.is_file() and item.suffix.lstrip(".").lower() in EXTENSION_ALIASES),
                key=lambda item: item.name,
            )
            log.debug(f"{path}: {len(found)} importable files")
            sources.extend(SourceFile.from_path(item) for item in found)
        else:
            sources.append(SourceFile.from_path(path))
    return sources


class BatchImporter:
    """
    Import several files concurrently with shared options.

    Args:
        importer: Single-file importer (a default StoryImporter when None)
        max_concurrency: Maximum imports in flight; None means no cap
        logger: Optional logger
    """

    def __init__(
        self,
        importer: Optional[StoryImporter] = None,
        max_concurrency: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or globals()["logger"]
        self.importer = importer or StoryImporter(logger=self.logger)
        self.max_concurrency = max_concurrency if max_concurrency and max_concurrency > 0 else None

    async def import_files(
        self,
        sources: Iterable[SourceFile],
        options: Optional[ImportOptions] = None,
    ) -> BatchImportResult:
        """
        Import every source and aggregate the outcome.

        A failing file never stops the others. Its issues are added to the
        batch errors prefixed with the file name. Non-fatal issues of files
        that did import (size advisories, filter problems) are reported too.

        Args:
            sources: Files to import
            options: Options shared by every file

        Returns:
            BatchImportResult; success is True when at least one file imported
        """
        sources = list(sources)
        options = options or ImportOptions()
        start_time = time.perf_counter()
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def run(source: SourceFile) -> ImportResult:
            if semaphore is None:
                return await self.importer.import_file(source, options)
            async with semaphore:
                return await self.importer.import_file(source, options)

        self.logger.info(f"Importing {len(sources)} files")
        results = await asyncio.gather(*(run(source) for source in sources))

        stories: list[ImportedStory] = []
        errors: list[ImportIssue] = []
        for source, result in zip(sources, results):
            if result.success:
                stories.append(build_story(result, source))
            else:
                self.logger.warning(f"Failed to import {source.name}")
            errors.extend(
                ImportIssue(
                    kind=issue.kind,
                    message=f"{source.name}: {issue.message}",
                    position=issue.position,
                    line=issue.line,
                )
                for issue in result.errors
            )

        summary = BatchSummary(
            total_files=len(sources),
            successful_files=len(stories),
            total_processing_time=elapsed_ms(start_time),
        )
        self.logger.info(f"Imported {summary.successful_files}/{summary.total_files} files")
        return BatchImportResult(
            success=summary.successful_files > 0,
            stories=stories,
            errors=errors,
            summary=summary,
        )

    async def import_paths(
        self,
        paths: Iterable[str | Path],
        options: Optional[ImportOptions] = None,
    ) -> BatchImportResult:
        """Import files and directories from the filesystem."""
        return await self.import_files(collect_sources(paths, self.logger), options)


def run_batch(
    paths: Iterable[str | Path],
    options: Optional[ImportOptions] = None,
    importer: Optional[StoryImporter] = None,
    max_concurrency: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> BatchImportResult:
    """Synchronous wrapper around BatchImporter.import_paths()."""
    batch = BatchImporter(importer, max_concurrency=max_concurrency, logger=logger)
    return asyncio.run(batch.import_paths(paths, options))
