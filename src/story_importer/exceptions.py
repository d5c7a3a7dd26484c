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

"""Exception types raised by the import pipeline stages."""

from __future__ import annotations

from .models import ImportErrorKind, ImportIssue


class StoryImportError(Exception):
    """Base class for all errors raised by the story importer."""


class ImportStageError(StoryImportError):
    """
    A pipeline stage could not complete for one file.

    The single-file orchestrator converts these into ImportIssue records,
    so they never escape an import call.
    """

    def __init__(
        self,
        kind: ImportErrorKind,
        message: str,
        position: int | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = ImportErrorKind(kind)
        self.message = message
        self.position = position
        self.line = line

    def to_issue(self) -> ImportIssue:
        """Convert the exception into the record stored on an ImportResult."""
        return ImportIssue(
            kind=self.kind,
            message=self.message,
            position=self.position,
            line=self.line,
        )


class ConfigError(StoryImportError):
    """Raised when the configuration file holds an invalid value."""

    def __init__(self, key_path: str, message: str, line: int | None = None) -> None:
        super().__init__(f"{key_path}: {message}")
        self.key_path = key_path
        self.message = message
        self.line = line
