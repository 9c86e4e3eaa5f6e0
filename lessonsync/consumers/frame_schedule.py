"""Frame placement of timeline entries for a frame-indexed video renderer."""
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from lessonsync.core.models.enums import ScreenRole
from lessonsync.core.models.timeline import SynchronizedTimeline

DEFAULT_FPS = 30


def js_round(value: float) -> int:
    """Round half up, like JavaScript's ``Math.round``.

    Python's ``round`` rounds half to even, which would place some scenes one
    frame off from the renderer.
    """
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ScenePlacement:
    """A timeline entry placed on frames ``[start_frame, end_frame)``."""
    index: int
    screen_role: ScreenRole
    start_frame: int
    duration_frames: int
    audio_ref: str
    visual_ref: Optional[str] = None

    @property
    def end_frame(self) -> int:
        return self.start_frame + self.duration_frames


@dataclass(frozen=True)
class FrameGap:
    """Frames ``[start_frame, end_frame)`` not covered by any scene."""
    start_frame: int
    end_frame: int

    @property
    def length(self) -> int:
        return self.end_frame - self.start_frame


def build_frame_schedule(timeline: SynchronizedTimeline, fps: int = DEFAULT_FPS) -> List[ScenePlacement]:
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    return [
        ScenePlacement(
            index=index,
            screen_role=entry.screen_role,
            start_frame=js_round(entry.start_time * fps),
            duration_frames=js_round(entry.duration * fps),
            audio_ref=entry.audio_ref,
            visual_ref=entry.visual_ref,
        )
        for index, entry in enumerate(timeline.entries)
    ]


def total_frames(timeline: SynchronizedTimeline, fps: int = DEFAULT_FPS) -> int:
    return int(math.ceil(timeline.total_duration * fps))


def find_gaps(schedule: Sequence[ScenePlacement]) -> List[FrameGap]:
    """Find frame ranges between frame 0 and the last scene that no scene covers."""
    gaps: List[FrameGap] = []
    covered_until = 0
    for placement in sorted(schedule, key=lambda p: p.start_frame):
        if placement.start_frame > covered_until:
            gaps.append(FrameGap(covered_until, placement.start_frame))
        covered_until = max(covered_until, placement.end_frame)
    return gaps
