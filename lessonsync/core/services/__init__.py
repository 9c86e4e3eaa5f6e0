"""Core services for lesson audio assembly and timeline compilation."""
from .duration import estimate_duration_from_size, measure_duration
from .fragment_merger import FragmentMerger
from .lesson_pipeline import LessonPipeline
from .segment_assembler import SegmentAudioAssembler
from .timeline_compiler import TimelineCompiler

__all__ = [
    'FragmentMerger',
    'LessonPipeline',
    'SegmentAudioAssembler',
    'TimelineCompiler',
    'estimate_duration_from_size',
    'measure_duration',
]
