"""Tests for the LessonSync domain models."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from lessonsync.core.models import (
    FragmentTiming,
    LanguageTag,
    LessonLayout,
    LessonTimelineDocument,
    PipelineEvent,
    PipelineStage,
    PipelineStatus,
    ScreenRole,
    SegmentScript,
    SegmentTimingRecord,
    SynchronizedTimeline,
    TextFragment,
    TimelineEntry,
)


def entry(start, end, role=ScreenRole.CONTENT_CARD):
    return TimelineEntry(
        start_time=start,
        end_time=end,
        duration=end - start,
        screen_role=role,
        audio_ref="/videos/v/a.wav",
    )


class TestEnums:
    def test_values_are_lowercase_names(self):
        assert LanguageTag.L1.value == "l1"
        assert ScreenRole.VOCABULARY_CARD.value == "vocabulary_card"

    @pytest.mark.parametrize("value, expected", [
        ("practice_card", ScreenRole.PRACTICE_CARD),
        ("PRACTICE_CARD", ScreenRole.PRACTICE_CARD),
        ("Title_Card", ScreenRole.TITLE_CARD),
        ("unknown", None),
    ])
    def test_from_string(self, value, expected):
        assert ScreenRole.from_string(value) == expected


class TestTextFragment:
    def test_accepts_wire_names(self):
        fragment = TextFragment.model_validate({
            "content": "hello",
            "languageTag": "l2",
            "synthesisRate": 0.8,
            "auxiliaryTranslation": "hello",
        })

        assert fragment.language_tag == LanguageTag.L2
        assert fragment.synthesis_rate == 0.8

    def test_keeps_surrounding_whitespace(self):
        assert TextFragment(content=" means ", language_tag="l1").content == " means "

    @pytest.mark.parametrize("content", ["", "   "])
    def test_rejects_empty_content(self, content):
        with pytest.raises(ValidationError):
            TextFragment(content=content, language_tag=LanguageTag.L1)

    @pytest.mark.parametrize("rate", [0.0, -1.0])
    def test_rejects_non_positive_rate(self, rate):
        with pytest.raises(ValidationError):
            TextFragment(content="hi", language_tag=LanguageTag.L1, synthesis_rate=rate)

    def test_rejects_unknown_language(self):
        with pytest.raises(ValidationError):
            TextFragment(content="hi", language_tag="l3")

    def test_to_dict_uses_camel_case_and_drops_none(self):
        data = TextFragment(content="hi", language_tag=LanguageTag.L2).to_dict()

        assert data == {"content": "hi", "languageTag": "l2"}


class TestSegmentScript:
    def test_requires_fragments(self):
        with pytest.raises(ValidationError):
            SegmentScript(id="intro", fragments=[])

    def test_requires_id(self):
        with pytest.raises(ValidationError):
            SegmentScript(id="", fragments=[TextFragment(content="hi", language_tag="l1")])


class TestFragmentTiming:
    def test_end_offset_must_match(self):
        with pytest.raises(ValidationError):
            FragmentTiming(content="a", language_tag="l1", duration=1.0, start_offset=0.5, end_offset=1.0)

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            FragmentTiming(content="a", language_tag="l1", duration=-1.0, start_offset=0.0, end_offset=-1.0)


class TestSegmentTimingRecord:
    def test_to_result(self, tmp_path):
        record = SegmentTimingRecord(
            segment_id="intro", file_name="intro.wav", duration=2.0, start_time=0.0, end_time=2.0,
        )

        result = record.to_result(tmp_path)

        assert result.audio_artifact_path == tmp_path / "intro.wav"
        assert result.fragment_timings == []
        assert result.fragment_duration_sum == 0


class TestSynchronizedTimeline:
    def test_contiguous_entries(self):
        timeline = SynchronizedTimeline(entries=[entry(0.0, 1.5), entry(1.5, 4.0)], total_duration=4.0)

        assert len(timeline.entries) == 2

    def test_empty_timeline(self):
        assert SynchronizedTimeline().entries == []

    def test_gap_is_rejected(self):
        with pytest.raises(ValidationError, match="gap or overlap"):
            SynchronizedTimeline(entries=[entry(0.0, 1.5), entry(1.6, 4.0)])

    def test_overlap_is_rejected(self):
        with pytest.raises(ValidationError):
            SynchronizedTimeline(entries=[entry(0.0, 1.5), entry(1.0, 4.0)])

    def test_must_start_at_zero(self):
        with pytest.raises(ValidationError, match="start at 0"):
            SynchronizedTimeline(entries=[entry(0.5, 1.5)])

    def test_document_total_is_last_end_time(self):
        document = LessonTimelineDocument.model_validate({
            "lesson": {"segmentBasedTiming": [
                {"startTime": 0, "endTime": 2, "duration": 2, "screenRole": "title_card", "audioRef": "a"},
                {"startTime": 2, "endTime": 5, "duration": 3, "screenRole": "content_card", "audioRef": "b"},
            ]},
            "audioUrl": "synchronized_audio.mp3",
        })

        assert document.to_timeline().total_duration == 5


class TestLessonLayout:
    def test_paths(self, tmp_path):
        layout = LessonLayout(root=tmp_path, video_id="video-1", lesson_number=3)

        assert layout.lesson_dir == tmp_path / "video-1" / "lesson_3"
        assert layout.script_path.name == "audio_segments.json"
        assert layout.segments_dir == layout.lesson_dir / "lesson_segments"
        assert layout.manifest_path == layout.segments_dir / "timing-metadata.json"
        assert layout.timeline_path == layout.lesson_dir / "final_synchronized_lesson.json"
        assert layout.segment_key("intro.wav") == "video-1/lesson_3/lesson_segments/intro.wav"
        assert layout.visual_key("intro", "webp") == "video-1/lesson_3/lesson_segments/intro.webp"

    def test_single_lesson_video(self, tmp_path):
        layout = LessonLayout(root=tmp_path, video_id="video-1")

        assert layout.lesson_dir == tmp_path / "video-1"
        assert layout.segment_key("a.wav") == "video-1/lesson_segments/a.wav"

    def test_from_lesson_dir(self, tmp_path):
        layout = LessonLayout.from_lesson_dir(tmp_path / "videos" / "video-1" / "lesson_2")

        assert layout.root == (tmp_path / "videos").resolve()
        assert layout.video_id == "video-1"
        assert layout.lesson_number == 2

    def test_from_video_dir_with_explicit_root(self, tmp_path):
        layout = LessonLayout.from_lesson_dir(tmp_path / "videos" / "video-1", root=tmp_path / "videos")

        assert layout.lesson_number is None
        assert layout.relative_dir == "video-1"


class TestPipelineEvent:
    def test_is_failure(self):
        failed = PipelineEvent(stage=PipelineStage.SYNTHESIS, status=PipelineStatus.FAILED, segment_id="intro")
        done = PipelineEvent(stage=PipelineStage.TIMELINE, status=PipelineStatus.COMPLETED)

        assert failed.is_failure
        assert not done.is_failure
