"""Structured status events emitted while a lesson is generated."""
from typing import Optional

from .base import DomainModel
from .enums import PipelineStage, PipelineStatus


class PipelineEvent(DomainModel):
    """Status of one step of lesson generation.

    Segment-level events carry ``segment_id``; lesson-level events (cache
    hits, timeline compilation) leave it unset.
    """
    stage: PipelineStage
    status: PipelineStatus
    segment_id: Optional[str] = None
    index: Optional[int] = None
    total: Optional[int] = None
    duration: Optional[float] = None
    message: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return self.status == PipelineStatus.FAILED
