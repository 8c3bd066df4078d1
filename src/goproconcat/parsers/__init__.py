"""Filename parsers for chaptered camera recordings."""

from .chapter_filename import CHAPTER_FILENAME_PATTERN, is_chapter_file, parse_file_name

__all__ = ["CHAPTER_FILENAME_PATTERN", "is_chapter_file", "parse_file_name"]
