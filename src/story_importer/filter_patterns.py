#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Created new module holding the content filter detection tables
# - Vietnamese, Chinese and English families per filter category
# - Placeholder tokens for the remove and replace actions
#

"""
filter_patterns.py - Detection patterns and placeholders for content filters
============================================================================

Each category maps to a list of regular expression sources (compiled
case-insensitively with the `regex` module by content_filter). The remove
and replace actions substitute every match with the category's token; the
replace phrase is shorter and visibly different from the removal token so
reviewers can tell the two apart.
"""

from .models import FilterType

CATEGORY_PATTERNS = {
    FilterType.VIOLENCE: [
        # Vietnamese
        r"giết\s+chết",
        r"đâm\s+chết",
        r"bắn\s+chết",
        r"đánh\s+chết",
        r"hành\s+hạ",
        r"tra\s+tấn",
        r"máu\s+me",
        r"thây\s+ma",
        r"xác\s+chết",
        r"thủ\s+tiêu",
        # Chinese
        r"暗杀",
        r"杀戮",
        r"暴力",
        r"死亡",
        r"流血",
        # English
        r"\bmurder(?:s|ed|ing)?\b",
        r"\bstabb(?:ed|ing)\b",
        r"\btortur(?:e|ed|es|ing)\b",
        r"\bslaughter(?:s|ed|ing)?\b",
        r"\bbloodbath\b",
    ],
    FilterType.EXPLICIT: [
        r"làm\s+chuyện\s+ấy",
        r"quan\s+hệ",
        r"yêu\s+đương",
        r"thân\s+mật",
        r"chăn\s+gối",
        r"hôn\s+nhau",
        r"ôm\s+nhau",
        r"chạm\s+nhau",
        r"nụ\s+hôn",
        r"da\s+thịt",
        r"tình\s+dục",
        r"性爱",
        r"亲密",
        r"身体",
        r"亲吻",
        r"\bsexual\s+intercourse\b",
        r"\bmaking\s+love\b",
        r"\bnaked\b",
    ],
    FilterType.PROFANITY: [
        r"địt",
        r"đụ",
        r"khốn\s+nạn",
        r"mẹ\s+kiếp",
        r"con\s+đĩ",
        r"đĩ\s+thõa",
        r"操",
        r"他妈的",
        r"贱人",
        r"混蛋",
        r"\bfuck\w*",
        r"\bshit\w*",
        r"\bbastards?\b",
        r"\bbitch\w*",
    ],
    FilterType.SENSITIVE: [
        r"chính\s+trị",
        r"tôn\s+giáo",
        r"dân\s+tộc",
        r"phân\s+biệt",
        r"政治",
        r"宗教",
        r"民族",
        r"歧视",
        r"\bpolitic(?:s|al)\b",
        r"\breligio(?:n|ns|us)\b",
        r"\bethnicity\b",
        r"\bracis[mt]\b",
    ],
}

REMOVAL_TOKENS = {
    FilterType.VIOLENCE: "[Nội dung đã được loại bỏ]",
    FilterType.EXPLICIT: "[Nội dung 18+ đã được loại bỏ]",
    FilterType.PROFANITY: "[***]",
    FilterType.SENSITIVE: "[Nội dung nhạy cảm đã được loại bỏ]",
    FilterType.CUSTOM: "[Nội dung tùy chỉnh đã được loại bỏ]",
}

REPLACEMENT_PHRASES = {
    FilterType.VIOLENCE: "[Nội dung được chỉnh sửa]",
    FilterType.EXPLICIT: "[Nội dung người lớn]",
    FilterType.PROFANITY: "[Từ thô tục]",
    FilterType.SENSITIVE: "[Nội dung nhạy cảm]",
    FilterType.CUSTOM: "[Nội dung tùy chỉnh]",
}


def category_source(filter_type: FilterType) -> str:
    """Join the patterns of a category into one alternation."""
    return "|".join(f"(?:{pattern})" for pattern in CATEGORY_PATTERNS[FilterType(filter_type)])
