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
# - Replaced the EPUB writer helpers with readers for DOCX and EPUB containers
# - Added DocumentDecoder protocol so callers can inject their own decoders
# - Spine documents are read in reading order from the OPF package file
#

"""
document_decoders.py - Text extraction from DOCX and EPUB containers
====================================================================

Both formats are zip archives holding XML/XHTML parts. The container is
opened with zipfile and the markup is stripped with BeautifulSoup using the
stdlib html.parser backend, so no XML parser extension is required.
"""

from __future__ import annotations

import io
import posixpath
import warnings
import zipfile
from typing import Protocol
from urllib.parse import unquote

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from .text_processing import collapse_whitespace

warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

# Elements that start a new line in extracted EPUB text
BLOCK_TAGS = [
    "p",
    "div",
    "section",
    "article",
    "blockquote",
    "pre",
    "li",
    "tr",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "hr",
]

XHTML_MEDIA_TYPES = ("application/xhtml+xml", "text/html")


class DocumentDecoder(Protocol):
    """Turns the raw content of a binary manuscript into plain text."""

    def decode(self, data: bytes | str) -> str: ...


def markup_to_text(markup: bytes | str) -> str:
    """
    Strip HTML/XHTML markup, keeping one line per block element.

    Args:
        markup: HTML or XHTML document

    Returns:
        Collapsed plain text
    """
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for tag in soup.find_all(BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")
    return collapse_whitespace(soup.get_text())


def _open_archive(data: bytes | str) -> zipfile.ZipFile:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return zipfile.ZipFile(io.BytesIO(data))


class DocxDecoder:
    """Extract paragraph text from word/document.xml."""

    DOCUMENT_PART = "word/document.xml"

    def decode(self, data: bytes | str) -> str:
        # Already-extracted markup (e.g. from a clipboard paste) is handled directly
        if isinstance(data, str) and not data.startswith("PK"):
            return markup_to_text(data)

        with _open_archive(data) as archive:
            xml = archive.read(self.DOCUMENT_PART)

        soup = BeautifulSoup(xml, "html.parser")
        paragraphs = []
        for paragraph in soup.find_all("w:p"):
            parts = []
            for node in paragraph.find_all(["w:t", "w:tab", "w:br", "w:cr"]):
                if node.name == "w:t":
                    parts.append(node.get_text())
                elif node.name == "w:tab":
                    parts.append(" ")
                else:
                    parts.append("\n")
            paragraphs.append("".join(parts))
        return collapse_whitespace("\n".join(paragraphs))


class EpubDecoder:
    """
    Extract the text of an EPUB in reading order.

    The OPF package file is located through META-INF/container.xml and its
    spine gives the order of the content documents. Archives without a
    usable container fall back to every XHTML/HTML member in name order.
    """

    CONTAINER_PART = "META-INF/container.xml"

    def decode(self, data: bytes | str) -> str:
        if isinstance(data, str) and not data.startswith("PK"):
            return markup_to_text(data)

        with _open_archive(data) as archive:
            documents = self._spine_documents(archive)
            texts = [markup_to_text(archive.read(name)) for name in documents]
        return collapse_whitespace("\n\n".join(text for text in texts if text))

    def _spine_documents(self, archive: zipfile.ZipFile) -> list[str]:
        members = set(archive.namelist())
        opf_path = self._find_package_file(archive, members)
        if opf_path is None:
            return sorted(name for name in members if name.lower().endswith((".xhtml", ".html", ".htm")))

        opf = BeautifulSoup(archive.read(opf_path), "html.parser")
        base = posixpath.dirname(opf_path)
        manifest = {}
        for item in opf.find_all("item"):
            item_id = item.get("id")
            href = item.get("href")
            if item_id and href:
                manifest[item_id] = (
                    posixpath.normpath(posixpath.join(base, unquote(href))),
                    item.get("media-type", ""),
                )

        documents = []
        for itemref in opf.find_all("itemref"):
            entry = manifest.get(itemref.get("idref", ""))
            if entry is None:
                continue
            path, media_type = entry
            if path in members and (media_type in XHTML_MEDIA_TYPES or not media_type):
                documents.append(path)
        return documents

    def _find_package_file(self, archive: zipfile.ZipFile, members: set[str]) -> str | None:
        if self.CONTAINER_PART in members:
            container = BeautifulSoup(archive.read(self.CONTAINER_PART), "html.parser")
            rootfile = container.find("rootfile")
            if rootfile is not None and rootfile.get("full-path") in members:
                return str(rootfile["full-path"])
        opf_files = sorted(name for name in members if name.lower().endswith(".opf"))
        return opf_files[0] if opf_files else None


def default_decoders() -> dict[str, DocumentDecoder]:
    """Return a fresh format -> decoder mapping with the built-in decoders."""
    return {"docx": DocxDecoder(), "epub": EpubDecoder()}
