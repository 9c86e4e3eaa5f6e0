"""Lesson-level orchestration of segment synthesis and timeline compilation."""
import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

from ..exceptions import LessonAbortedError, LessonSyncError, MissingInputError
from ..models.enums import LanguageTag, PipelineStage, PipelineStatus
from ..models.events import PipelineEvent
from ..models.fragment import SegmentScript
from ..models.layout import LessonLayout
from ..models.timeline import SynchronizedTimeline
from ..models.timing import SegmentAudioResult, SegmentTimingRecord, TimingManifest
from ..parsers.script_parser import load_segment_scripts
from .artifacts import read_timing_manifest, write_timing_manifest
from .segment_assembler import SegmentAudioAssembler
from .timeline_compiler import TimelineCompiler

logger = logging.getLogger(__name__)


class LessonPipeline:
    """Turns a lesson script into segment audio and a compiled timeline.

    Progress is reported as a stream of ``PipelineEvent`` objects. Segments
    are processed one after another in script order. The first failing
    segment aborts the lesson with ``LessonAbortedError``; no manifest or
    timeline is written for an aborted lesson.

    Existing artifacts are treated as a cache: a present timeline skips the
    whole lesson and a present timing manifest skips synthesis.
    """

    def __init__(
        self,
        assembler: SegmentAudioAssembler,
        compiler: TimelineCompiler,
        language_codes: Optional[Mapping[str, LanguageTag]] = None,
        audio_url: str = "synchronized_audio.mp3",
    ) -> None:
        self.assembler = assembler
        self.compiler = compiler
        self.language_codes = dict(language_codes) if language_codes else None
        self.audio_url = audio_url

    async def stream(
        self,
        layout: LessonLayout,
        synthesize: bool = True,
        compile: bool = True,
    ) -> AsyncIterator[PipelineEvent]:
        """Process a lesson, yielding an event for every step.

        Args:
            layout: Paths of the lesson
            synthesize: Synthesize segments missing from the timing manifest
            compile: Compile and persist the lesson timeline

        Raises:
            MissingInputError: If the script, or the manifest when not synthesizing, is absent
            LessonAbortedError: If a segment fails
        """
        async for event in self._process(layout, synthesize, compile, {}):
            yield event

    async def run(
        self,
        layout: LessonLayout,
        synthesize: bool = True,
        compile: bool = True,
    ) -> Optional[SynchronizedTimeline]:
        """Process a lesson and return the compiled timeline.

        Returns:
            The timeline, or None if it was not compiled in this run
        """
        outcome: Dict[str, Any] = {}
        async for event in self._process(layout, synthesize, compile, outcome):
            logger.debug("Pipeline event: %s", event.to_dict())
        return outcome.get("timeline")

    async def _process(
        self,
        layout: LessonLayout,
        synthesize: bool,
        compile: bool,
        outcome: Dict[str, Any],
    ) -> AsyncIterator[PipelineEvent]:
        if compile and layout.timeline_path.exists():
            logger.info("Lesson %s already compiled, nothing to do", layout.relative_dir)
            yield PipelineEvent(
                stage=PipelineStage.TIMELINE,
                status=PipelineStatus.SKIPPED,
                message=f"Timeline already exists at {layout.timeline_path}",
            )
            return

        scripts = load_segment_scripts(layout.script_path, self.language_codes)

        if layout.manifest_path.exists():
            manifest = read_timing_manifest(layout.manifest_path)
            results = manifest.results_by_segment(layout.segments_dir)
            logger.info("Reusing timing manifest %s", layout.manifest_path)
            yield PipelineEvent(
                stage=PipelineStage.SYNTHESIS,
                status=PipelineStatus.SKIPPED,
                total=len(scripts),
                duration=manifest.total_duration,
                message=f"Timing manifest already exists at {layout.manifest_path}",
            )
        elif synthesize:
            results = {}
            async for event in self._synthesize(layout, scripts, results):
                yield event
        else:
            raise MissingInputError(
                f"Timing manifest not found: {layout.manifest_path}",
                path=str(layout.manifest_path),
            )

        if not compile:
            return

        pairs = self.compiler.pair_with_results(scripts, results)
        try:
            timeline = self.compiler.compile_lesson(layout, pairs, self.audio_url)
        except LessonSyncError as e:
            segment_id = e.details.get("segment_id")
            logger.error("Timeline compilation failed for %s: %s", layout.relative_dir, e)
            yield PipelineEvent(
                stage=PipelineStage.TIMELINE,
                status=PipelineStatus.FAILED,
                segment_id=segment_id,
                message=e.message,
                error_kind=type(e).__name__,
            )
            if segment_id is not None:
                raise LessonAbortedError(segment_id, e) from e
            raise

        outcome["timeline"] = timeline
        if timeline is None:
            yield PipelineEvent(stage=PipelineStage.TIMELINE, status=PipelineStatus.SKIPPED)
            return
        yield PipelineEvent(
            stage=PipelineStage.TIMELINE,
            status=PipelineStatus.COMPLETED,
            total=len(timeline.entries),
            duration=timeline.total_duration,
            message=f"Timeline written to {layout.timeline_path}",
        )

    async def _synthesize(
        self,
        layout: LessonLayout,
        scripts: List[SegmentScript],
        results: Dict[str, SegmentAudioResult],
    ) -> AsyncIterator[PipelineEvent]:
        records: List[SegmentTimingRecord] = []
        cursor = 0.0
        total = len(scripts)

        for index, script in enumerate(scripts):
            yield PipelineEvent(
                stage=PipelineStage.SYNTHESIS,
                status=PipelineStatus.GENERATING,
                segment_id=script.id,
                index=index,
                total=total,
            )
            try:
                result = await self.assembler.assemble(script, layout.segments_dir)
            except LessonSyncError as e:
                logger.error("Segment '%s' failed, aborting lesson %s: %s", script.id, layout.relative_dir, e)
                yield PipelineEvent(
                    stage=PipelineStage.SYNTHESIS,
                    status=PipelineStatus.FAILED,
                    segment_id=script.id,
                    index=index,
                    total=total,
                    message=e.message,
                    error_kind=type(e).__name__,
                )
                raise LessonAbortedError(script.id, e) from e

            results[script.id] = result
            records.append(SegmentTimingRecord(
                segment_id=script.id,
                file_name=result.audio_artifact_path.name,
                duration=result.duration,
                start_time=cursor,
                end_time=cursor + result.duration,
                text=script.display_text,
                fragment_timings=list(result.fragment_timings) or None,
            ))
            cursor += result.duration
            yield PipelineEvent(
                stage=PipelineStage.SYNTHESIS,
                status=PipelineStatus.COMPLETED,
                segment_id=script.id,
                index=index,
                total=total,
                duration=result.duration,
            )

        write_timing_manifest(
            layout.manifest_path,
            TimingManifest(segments=records, total_duration=cursor),
        )
