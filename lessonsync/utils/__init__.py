"""Utility functions for LessonSync."""
from .file_utils import ensure_directory, read_json, write_json_atomic

__all__ = ['ensure_directory', 'read_json', 'write_json_atomic']
