"""Base exceptions for the LessonSync application."""
from typing import Any, Dict, Optional


class LessonSyncError(Exception):
    """Base exception for all LessonSync-specific exceptions."""

    error_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
            cause: The underlying exception that caused this one
        """
        self.message = message
        self.error_code = error_code or type(self).error_code
        self.details = details or {}
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        """Get a string representation of the error."""
        parts = [f"{self.__class__.__name__}"]
        if self.error_code:
            parts.append(f"[{self.error_code}]")
        parts.append(self.message)
        return " ".join(parts)


class ValidationError(LessonSyncError):
    """Raised when input validation fails."""
    error_code = "validation_error"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs: Any
    ) -> None:
        """Initialize the validation error.

        Args:
            message: Error message
            field: The field that failed validation
            value: The invalid value
            **kwargs: Additional error details
        """
        details = kwargs.pop('details', {})
        if field is not None:
            details['field'] = field
        if value is not None:
            details['value'] = value

        super().__init__(message=message, details=details, **kwargs)


class ConfigurationError(LessonSyncError):
    """Raised when there's a configuration error."""
    error_code = "configuration_error"


class MissingInputError(LessonSyncError):
    """Raised when a lesson script or an expected prior artifact is absent."""
    error_code = "missing_input"

    def __init__(self, message: str, path: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs.pop('details', {})
        if path is not None:
            details['path'] = str(path)
        super().__init__(message=message, details=details, **kwargs)


class SynthesisError(LessonSyncError):
    """Raised when speech synthesis fails or yields an empty or invalid result."""
    error_code = "synthesis_error"


class ProbeError(LessonSyncError):
    """Raised when the duration of an audio file cannot be measured."""
    error_code = "probe_error"


class ConcatenationError(LessonSyncError):
    """Raised when audio files cannot be joined, even after re-encoding."""
    error_code = "concatenation_error"


class ArtifactWriteError(LessonSyncError):
    """Raised when an output artifact cannot be written."""
    error_code = "artifact_write_error"

    def __init__(self, message: str, path: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs.pop('details', {})
        if path is not None:
            details['path'] = str(path)
        super().__init__(message=message, details=details, **kwargs)


class LessonAbortedError(LessonSyncError):
    """Raised when a lesson is aborted because one of its segments failed.

    The original error is available as ``cause``; ``details`` names the
    failing segment and the kind of error.
    """
    error_code = "lesson_aborted"

    def __init__(self, segment_id: str, cause: Exception, **kwargs: Any) -> None:
        self.segment_id = segment_id
        error_kind = type(cause).__name__
        super().__init__(
            message=f"Segment '{segment_id}' failed with {error_kind}: {getattr(cause, 'message', cause)}",
            details={"segment_id": segment_id, "error_kind": error_kind},
            cause=cause,
            **kwargs
        )

    @property
    def error_kind(self) -> str:
        return self.details["error_kind"]
