"""LessonSync - timed speech synthesis and timeline compilation for mixed-language lessons."""

__version__ = "0.1.0"
