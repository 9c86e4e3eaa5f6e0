"""Reference consumers of compiled lesson timelines."""
from .frame_schedule import FrameGap, ScenePlacement, build_frame_schedule, find_gaps, js_round, total_frames
from .playback_monitor import FragmentBoundary, PauseEvent, PlaybackMonitor

__all__ = [
    'FrameGap',
    'FragmentBoundary',
    'PauseEvent',
    'PlaybackMonitor',
    'ScenePlacement',
    'build_frame_schedule',
    'find_gaps',
    'js_round',
    'total_frames',
]
