"""Core domain layer for LessonSync."""
