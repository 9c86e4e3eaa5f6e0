"""LessonSync command-line interface."""
