"""Compilation of per-segment audio results into one lesson timeline."""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..exceptions import MissingInputError
from ..models.enums import ScreenRole
from ..models.fragment import SegmentScript
from ..models.layout import (
    COMPRESSED_IMAGE_EXTENSION,
    UNCOMPRESSED_IMAGE_EXTENSION,
    LessonLayout,
)
from ..models.timeline import LessonTimelineDocument, SynchronizedTimeline, TimelineEntry
from ..models.timing import SegmentAudioResult
from ..ports.storage import ArtifactStorage
from .artifacts import write_lesson_timeline

logger = logging.getLogger(__name__)

SegmentPair = Tuple[SegmentScript, Optional[SegmentAudioResult]]

# Checked in order against the start of the segment id
SCREEN_ROLE_PREFIXES: List[Tuple[str, ScreenRole]] = [
    ("learning_objective", ScreenRole.OBJECTIVE_CARD),
    ("objective", ScreenRole.OBJECTIVE_CARD),
    ("explanation", ScreenRole.EXPLANATION_CARD),
    ("vocab", ScreenRole.VOCABULARY_CARD),
    ("grammar", ScreenRole.GRAMMAR_CARD),
    ("practice", ScreenRole.PRACTICE_CARD),
]

SCREEN_ROLE_IDS: Dict[str, ScreenRole] = {
    "intro": ScreenRole.TITLE_CARD,
    "conclusion": ScreenRole.CONCLUSION_CARD,
    "lesson_review": ScreenRole.REVIEW_CARD,
}


class TimelineCompiler:
    """Places every segment of a lesson on one absolute timeline."""

    def __init__(self, storage: ArtifactStorage) -> None:
        self.storage = storage

    def resolve_screen_role(self, segment: SegmentScript) -> ScreenRole:
        """Pick the on-screen role of a segment.

        A vocabulary anchor always yields the vocabulary role. Otherwise the
        declared role wins, then the id tables, then the generic content role.
        """
        if segment.vocab_anchor:
            return ScreenRole.VOCABULARY_CARD
        if segment.screen_role is not None:
            return segment.screen_role
        if segment.id in SCREEN_ROLE_IDS:
            return SCREEN_ROLE_IDS[segment.id]
        for prefix, role in SCREEN_ROLE_PREFIXES:
            if segment.id.startswith(prefix):
                return role
        return ScreenRole.CONTENT_CARD

    def resolve_visual_ref(self, layout: LessonLayout, segment: SegmentScript) -> Optional[str]:
        """Get the public URL of a segment's background image, if it declares one.

        The compressed variant is preferred, then the uncompressed sibling.
        When neither is present locally the compressed variant is assumed to
        exist remotely.
        """
        if not segment.visual_resource_key:
            return None
        compressed = layout.visual_key(segment.visual_resource_key, COMPRESSED_IMAGE_EXTENSION)
        if self.storage.exists(compressed):
            return self.storage.public_url(compressed)
        uncompressed = layout.visual_key(segment.visual_resource_key, UNCOMPRESSED_IMAGE_EXTENSION)
        if self.storage.exists(uncompressed):
            logger.debug("Using uncompressed image for segment '%s'", segment.id)
            return self.storage.public_url(uncompressed)
        logger.debug("No local image for segment '%s', assuming %s", segment.id, compressed)
        return self.storage.public_url(compressed)

    def compile(self, layout: LessonLayout, pairs: Sequence[SegmentPair]) -> SynchronizedTimeline:
        """Build the timeline from ``(script, audio result)`` pairs in script order.

        Raises:
            MissingInputError: If any segment has no audio result
        """
        entries: List[TimelineEntry] = []
        cursor = 0.0

        for segment, result in pairs:
            if result is None:
                raise MissingInputError(
                    f"No audio result for segment '{segment.id}'",
                    details={"segment_id": segment.id},
                )

            start_time = cursor
            end_time = cursor + result.duration
            cursor = end_time

            entries.append(TimelineEntry(
                start_time=start_time,
                end_time=end_time,
                duration=result.duration,
                screen_role=self.resolve_screen_role(segment),
                audio_ref=self.storage.public_url(layout.segment_key(result.audio_artifact_path.name)),
                text=segment.display_text,
                vocab_anchor=segment.vocab_anchor,
                visual_ref=self.resolve_visual_ref(layout, segment),
                fragments=list(segment.fragments),
                fragment_timings=list(result.fragment_timings) or None,
            ))

        logger.info("Compiled timeline with %d entries (%.3fs)", len(entries), cursor)
        return SynchronizedTimeline(entries=entries, total_duration=cursor)

    def compile_lesson(
        self,
        layout: LessonLayout,
        pairs: Sequence[SegmentPair],
        audio_url: str,
    ) -> Optional[SynchronizedTimeline]:
        """Compile and persist the lesson timeline unless it already exists.

        Returns:
            The compiled timeline, or None if a timeline artifact was already present
        """
        if layout.timeline_path.exists():
            logger.info("Timeline already exists at %s, skipping compilation", layout.timeline_path)
            return None

        timeline = self.compile(layout, pairs)
        write_lesson_timeline(
            layout.timeline_path,
            LessonTimelineDocument.from_timeline(timeline, audio_url),
        )
        return timeline

    @staticmethod
    def pair_with_results(
        scripts: Sequence[SegmentScript],
        results_by_id: Dict[str, SegmentAudioResult],
    ) -> List[SegmentPair]:
        """Pair scripts with their audio results, keeping script order."""
        return [(script, results_by_id.get(script.id)) for script in scripts]
