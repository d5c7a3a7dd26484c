#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# HERE IS THE CHANGELOG FOR THIS VERSION OF THE CODE:
# - Replaced the translation settings template with import settings
# - Sections: import, ai, patterns, batch, output, logging
# - Added the value sets used by ConfigManager validation
#

"""
config_schema.py - Configuration schema and default template for the story importer
"""

from .import_constants import DEFAULT_WORDS_PER_CHAPTER, SUPPORTED_FORMATS
from .models import EnhancementLevel, FilterAction, FilterSeverity, FilterType, SplitMethod

DEFAULT_CONFIG_FILENAME = "story_importer.yml"

VALID_SPLIT_METHODS = [method.value for method in SplitMethod]
VALID_FILTER_TYPES = [filter_type.value for filter_type in FilterType]
VALID_FILTER_ACTIONS = [action.value for action in FilterAction]
VALID_FILTER_SEVERITIES = [severity.value for severity in FilterSeverity]
VALID_ENHANCEMENT_LEVELS = [level.value for level in EnhancementLevel]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_OUTPUT_FORMATS = ["json", "yaml"]

# Default configuration template with extensive comments
DEFAULT_CONFIG_TEMPLATE = f"""# Story Importer Configuration File
# =================================
# Default settings for importing manuscripts and splitting them into chapters.
# Any command-line arguments will override these settings.

# Import Settings
# ---------------
import:
  # Format used when a file has no recognizable extension: {', '.join(SUPPORTED_FORMATS)}
  file_format: txt

  # Text encoding; null means detect (BOM, then UTF-8, then chardet)
  encoding: null

  # Split the text into chapters; when false the whole file is one chapter
  auto_split: true

  # Kept for callers that render the chapters; not used by the splitter
  preserve_formatting: true
  create_hierarchy: false

  # Files above this size (bytes) are imported with a size warning; null disables
  max_file_size: 52428800

  split:
    # Split method: pattern, word_count, manual, ai
    method: pattern

    # Explicit boundary regex; null means auto-detect from the pattern library
    pattern: null

    # Group holding the title and group where the body starts (index or name)
    title_group: null
    content_group: null

    # Words per chapter for the word_count method
    word_count: {DEFAULT_WORDS_PER_CHAPTER}

    # Use captured headings as titles (false uses "Chapter N")
    preserve_titles: true
    generate_titles: true

# AI Processing
# -------------
# Requires an AI text service to be injected by the embedding application.
# Without one, enhancement and translation leave the text unchanged.
ai:
  enabled: false
  content_moderation: false
  content_enhancement: false
  translation: false
  target_language: null

  # Enhancement level: light, moderate, heavy
  enhancement_level: light
  preserve_style: true

  # Content filters, applied in order. Example:
  #   - type: profanity      # violence, explicit, profanity, sensitive, custom
  #     action: replace      # remove, replace, flag, rewrite
  #     severity: medium     # low, medium, high
  #   - type: custom
  #     action: remove
  #     custom_pattern: "secret\\\\s+code"
  content_filters: []

# Extra Chapter Patterns
# ----------------------
# Added to the built-in pattern library. Lower priority values are tried first
# (built-in priorities range from 10 to 80). Example:
#   - name: episode
#     regex: "^Episode\\\\s+(\\\\d+)\\\\s*[:.-]?\\\\s*(.*)$"
#     title_group: 2
#     priority: 25
patterns: []

# Batch Processing
# ----------------
batch:
  # Maximum number of files imported at the same time; 0 means no limit
  max_concurrency: 4

# Output
# ------
output:
  # Format of the batch report written with --output: json, yaml
  format: json
  # Include chapter text in the report
  include_content: true

# Logging
# -------
logging:
  # Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL
  level: INFO

  # Log to file
  file_enabled: false
  file_path: story_importer.log

  # Log format
  format: "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
"""
