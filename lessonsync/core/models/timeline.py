"""Timeline models: the compiled, absolute-time description of a lesson."""
from typing import List, Optional

from pydantic import ConfigDict, Field, model_validator

from .base import DomainModel
from .enums import ScreenRole
from .fragment import TextFragment
from .timing import OFFSET_EPSILON, FragmentTiming


class TimelineEntry(DomainModel):
    """One segment placed on the lesson's absolute timeline."""
    start_time: float = Field(..., ge=0.0)
    end_time: float = Field(..., ge=0.0)
    duration: float = Field(..., ge=0.0)
    screen_role: ScreenRole
    audio_ref: str
    text: Optional[str] = None
    vocab_anchor: Optional[str] = None
    visual_ref: Optional[str] = None
    fragments: Optional[List[TextFragment]] = None
    fragment_timings: Optional[List[FragmentTiming]] = None


class SynchronizedTimeline(DomainModel):
    """Ordered, contiguous timeline of every segment in a lesson.

    Entries start at zero and each entry ends exactly where the next one
    begins.
    """
    model_config = ConfigDict(frozen=True, validate_assignment=False)

    entries: List[TimelineEntry] = Field(default_factory=list)
    total_duration: float = 0.0

    @model_validator(mode='after')
    def check_contiguity(self) -> 'SynchronizedTimeline':
        if self.entries and abs(self.entries[0].start_time) > OFFSET_EPSILON:
            raise ValueError(
                f"Timeline must start at 0, first entry starts at {self.entries[0].start_time}"
            )
        for index, (current, following) in enumerate(zip(self.entries, self.entries[1:])):
            if abs(current.end_time - following.start_time) > OFFSET_EPSILON:
                raise ValueError(
                    f"Timeline gap or overlap between entries {index} and {index + 1}: "
                    f"{current.end_time} != {following.start_time}"
                )
        return self


class LessonTimelineBody(DomainModel):
    segment_based_timing: List[TimelineEntry] = Field(default_factory=list)


class LessonTimelineDocument(DomainModel):
    """On-disk form of a compiled timeline, as read by the renderer and the viewer."""
    lesson: LessonTimelineBody = Field(default_factory=LessonTimelineBody)
    audio_url: str

    @classmethod
    def from_timeline(cls, timeline: SynchronizedTimeline, audio_url: str) -> 'LessonTimelineDocument':
        return cls(
            lesson=LessonTimelineBody(segment_based_timing=list(timeline.entries)),
            audio_url=audio_url,
        )

    def to_timeline(self) -> SynchronizedTimeline:
        entries = self.lesson.segment_based_timing
        total = entries[-1].end_time if entries else 0.0
        return SynchronizedTimeline(entries=list(entries), total_duration=total)
