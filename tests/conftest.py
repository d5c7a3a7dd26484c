#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pytest configuration and shared fixtures for all tests
"""

import io
import os
import sys
import zipfile
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to path so we can import our modules
src_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
sys.path.insert(0, src_dir)


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing"""
    logger = Mock()
    logger.info = Mock()
    logger.debug = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.exception = Mock()
    return logger


@pytest.fixture
def vietnamese_text():
    """Two Vietnamese chapters with titled headings"""
    return "Chương 1: Mở đầu\nNội dung A\nChương 2: Tiếp theo\nNội dung B"


@pytest.fixture
def chinese_text():
    """Sample Chinese novel text with CJK numeral chapter headings"""
    return "第一章 开始\n这是第一章的内容。\n\n第二章 继续\n更多内容。\n\n第十二章 结束\n最后的内容。"


@pytest.fixture
def english_text():
    """Sample English text with a preamble and two chapters"""
    return (
        "A short foreword before the story.\n\n"
        "Chapter 1: The Beginning\n"
        "It was a dark and stormy night.\n\n"
        "Chapter 2: Continuing\n"
        "The rain kept falling."
    )


def _build_zip(members: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def docx_bytes():
    """Minimal DOCX container with three paragraphs"""
    document = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
        "<w:body>"
        "<w:p><w:r><w:t>Chapter 1: Arrival</w:t></w:r></w:p>"
        '<w:p><w:r><w:t xml:space="preserve">The   train </w:t></w:r><w:r><w:t>was late.</w:t></w:r></w:p>'
        "<w:p><w:r><w:t>Chapter 2: Departure</w:t></w:r></w:p>"
        "<w:p><w:r><w:t>She left</w:t></w:r><w:r><w:tab/><w:t>at dawn.</w:t></w:r></w:p>"
        "</w:body></w:document>"
    )
    return _build_zip({"[Content_Types].xml": "<Types/>", "word/document.xml": document})


@pytest.fixture
def epub_bytes():
    """Minimal EPUB whose spine order differs from the file name order"""
    container = (
        '<?xml version="1.0"?>'
        '<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
        '<rootfiles><rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/></rootfiles>'
        "</container>"
    )
    opf = (
        '<?xml version="1.0"?>'
        '<package xmlns="http://www.idpf.org/2007/opf" version="3.0">'
        "<manifest>"
        '<item id="b" href="text/b.xhtml" media-type="application/xhtml+xml"/>'
        '<item id="a" href="text/a.xhtml" media-type="application/xhtml+xml"/>'
        '<item id="css" href="style.css" media-type="text/css"/>'
        "</manifest>"
        '<spine><itemref idref="b"/><itemref idref="a"/></spine>'
        "</package>"
    )
    page_b = (
        "<html><head><title>ignored</title><style>p { color: red; }</style></head>"
        "<body><h1>Chapter 1</h1><p>First <b>bold</b> page.</p></body></html>"
    )
    page_a = "<html><body><h1>Chapter 2</h1><p>Second page.</p></body></html>"
    return _build_zip(
        {
            "mimetype": "application/epub+zip",
            "META-INF/container.xml": container,
            "OEBPS/content.opf": opf,
            "OEBPS/text/a.xhtml": page_a,
            "OEBPS/text/b.xhtml": page_b,
            "OEBPS/style.css": "p { color: red; }",
        }
    )


@pytest.fixture
def write_file(tmp_path):
    """Write a file under tmp_path and return its path"""

    def _write(name: str, content, encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding=encoding)
        return path

    return _write
