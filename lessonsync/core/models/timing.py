"""Timing models produced by segment audio assembly."""
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from pydantic import ConfigDict, Field, model_validator

from .base import DomainModel
from .enums import LanguageTag

# Tolerance for floating point comparisons of offsets
OFFSET_EPSILON = 1e-6


class FragmentTiming(DomainModel):
    """Where one synthesized fragment sits inside its segment's audio."""
    content: str
    language_tag: LanguageTag
    duration: float = Field(..., ge=0.0)
    start_offset: float = Field(..., ge=0.0)
    end_offset: float = Field(..., ge=0.0)
    auxiliary_translation: Optional[str] = None

    @model_validator(mode='after')
    def check_offsets(self) -> 'FragmentTiming':
        if abs(self.end_offset - (self.start_offset + self.duration)) > OFFSET_EPSILON:
            raise ValueError(
                f"end_offset {self.end_offset} != start_offset {self.start_offset} + duration {self.duration}"
            )
        return self


class SegmentAudioResult(DomainModel):
    """The audio artifact of one segment and the timing of its fragments."""
    model_config = ConfigDict(frozen=True, validate_assignment=False)

    audio_artifact_path: Path
    duration: float = Field(..., ge=0.0)
    fragment_timings: List[FragmentTiming] = Field(default_factory=list)

    @property
    def fragment_duration_sum(self) -> float:
        return sum(timing.duration for timing in self.fragment_timings)


class SegmentTimingRecord(DomainModel):
    """One segment entry of the per-lesson timing manifest."""
    segment_id: str
    file_name: str
    duration: float = Field(..., ge=0.0)
    start_time: float = Field(..., ge=0.0)
    end_time: float = Field(..., ge=0.0)
    text: str = ""
    fragment_timings: Optional[List[FragmentTiming]] = None

    def to_result(self, segments_dir: Path) -> SegmentAudioResult:
        """Rebuild the segment audio result this record was written from."""
        return SegmentAudioResult(
            audio_artifact_path=segments_dir / self.file_name,
            duration=self.duration,
            fragment_timings=list(self.fragment_timings or []),
        )


class TimingManifest(DomainModel):
    """Per-lesson record of every segment's audio file and timing."""
    segments: List[SegmentTimingRecord] = Field(default_factory=list)
    total_duration: float = 0.0
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def results_by_segment(self, segments_dir: Path) -> dict:
        """Map segment ids to their audio results."""
        return {
            record.segment_id: record.to_result(segments_dir)
            for record in self.segments
        }
