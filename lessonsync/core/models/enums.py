"""Enums for the LessonSync domain model."""
from enum import Enum, auto
from typing import Optional, Type, TypeVar

T = TypeVar('T', bound='AutoName')


class AutoName(str, Enum):
    """Enum that automatically generates values as lowercase names."""
    def _generate_next_value_(name: str, start: int, count: int, last_values: list) -> str:
        return name.lower()

    @classmethod
    def from_string(cls: Type[T], value: str) -> Optional[T]:
        """Get enum member from string value (case-insensitive)."""
        try:
            return cls[value.upper()]
        except KeyError:
            # Try to find by value if not found by name
            value_lower = value.lower()
            for member in cls:
                if member.value.lower() == value_lower:
                    return member
            return None


class LanguageTag(AutoName):
    """Language of a text fragment.

    L1 is the learner's native language, L2 the language being taught.
    """
    L1 = auto()
    L2 = auto()


class ScreenRole(AutoName):
    """Visual role of a lesson segment on screen."""
    TITLE_CARD = auto()
    OBJECTIVE_CARD = auto()
    EXPLANATION_CARD = auto()
    VOCABULARY_CARD = auto()
    GRAMMAR_CARD = auto()
    PRACTICE_CARD = auto()
    REVIEW_CARD = auto()
    CONCLUSION_CARD = auto()
    CONTENT_CARD = auto()


class PipelineStage(AutoName):
    """Stage of lesson generation an event belongs to."""
    SYNTHESIS = auto()
    TIMELINE = auto()


class PipelineStatus(AutoName):
    """Status reported by a pipeline event."""
    GENERATING = auto()
    COMPLETED = auto()
    FAILED = auto()
    SKIPPED = auto()


class StorageType(AutoName):
    """Where lesson artifacts are published."""
    LOCAL = auto()
    S3 = auto()
    R2 = auto()
