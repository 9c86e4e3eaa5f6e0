"""Core models for the LessonSync application."""
from .base import DomainModel
from .enums import LanguageTag, PipelineStage, PipelineStatus, ScreenRole, StorageType
from .events import PipelineEvent
from .fragment import SegmentScript, TextFragment
from .layout import LessonLayout
from .timeline import LessonTimelineDocument, SynchronizedTimeline, TimelineEntry
from .timing import FragmentTiming, SegmentAudioResult, SegmentTimingRecord, TimingManifest

__all__ = [
    'DomainModel',
    'LanguageTag',
    'PipelineStage',
    'PipelineStatus',
    'ScreenRole',
    'StorageType',
    'PipelineEvent',
    'TextFragment',
    'SegmentScript',
    'LessonLayout',
    'FragmentTiming',
    'SegmentAudioResult',
    'SegmentTimingRecord',
    'TimingManifest',
    'TimelineEntry',
    'SynchronizedTimeline',
    'LessonTimelineDocument',
]
