"""Tests for compiling segment audio results into a lesson timeline."""
import json

import pytest

from lessonsync.core.config.pipeline import StorageSettings
from lessonsync.core.exceptions import MissingInputError
from lessonsync.core.models.enums import LanguageTag, ScreenRole
from lessonsync.core.models.fragment import SegmentScript, TextFragment
from lessonsync.core.models.layout import LessonLayout
from lessonsync.core.models.timing import FragmentTiming, SegmentAudioResult
from lessonsync.core.services.timeline_compiler import TimelineCompiler
from lessonsync.infrastructure.services.storage.storage_service import StorageService


@pytest.fixture
def layout(tmp_path):
    layout = LessonLayout(root=tmp_path, video_id="video-1", lesson_number=2)
    layout.segments_dir.mkdir(parents=True)
    return layout


@pytest.fixture
def compiler(tmp_path):
    return TimelineCompiler(StorageService(StorageSettings(), root=tmp_path))


def script(segment_id, text="Hello there", **kwargs):
    return SegmentScript(
        id=segment_id,
        fragments=[TextFragment(content=text, language_tag=LanguageTag.L2)],
        **kwargs,
    )


def result(layout, segment_id, duration, timings=None):
    return SegmentAudioResult(
        audio_artifact_path=layout.segments_dir / f"{segment_id}.wav",
        duration=duration,
        fragment_timings=timings or [],
    )


def test_entries_are_contiguous_from_zero(compiler, layout):
    pairs = [
        (script("intro"), result(layout, "intro", 2.5)),
        (script("vocab_1"), result(layout, "vocab_1", 1.25)),
        (script("conclusion"), result(layout, "conclusion", 3.0)),
    ]

    timeline = compiler.compile(layout, pairs)

    starts = [entry.start_time for entry in timeline.entries]
    ends = [entry.end_time for entry in timeline.entries]
    assert starts == [0.0, 2.5, 3.75]
    assert ends == [2.5, 3.75, 6.75]
    assert timeline.total_duration == 6.75
    for entry in timeline.entries:
        assert entry.end_time == pytest.approx(entry.start_time + entry.duration)


def test_audio_ref_is_public_url_of_segment_file(compiler, layout):
    timeline = compiler.compile(layout, [(script("intro"), result(layout, "intro", 1.0))])

    assert timeline.entries[0].audio_ref == "/videos/video-1/lesson_2/lesson_segments/intro.wav"


def test_audio_ref_uses_remote_base_url(tmp_path, layout):
    storage = StorageService(
        StorageSettings(type="r2", public_url="https://cdn.example.com/"),
        root=tmp_path,
    )
    compiler = TimelineCompiler(storage)

    timeline = compiler.compile(layout, [(script("intro"), result(layout, "intro", 1.0))])

    assert timeline.entries[0].audio_ref == (
        "https://cdn.example.com/video-1/lesson_2/lesson_segments/intro.wav"
    )


@pytest.mark.parametrize("segment_id, expected", [
    ("intro", ScreenRole.TITLE_CARD),
    ("conclusion", ScreenRole.CONCLUSION_CARD),
    ("lesson_review", ScreenRole.REVIEW_CARD),
    ("learning_objective", ScreenRole.OBJECTIVE_CARD),
    ("objective_2", ScreenRole.OBJECTIVE_CARD),
    ("explanation_3", ScreenRole.EXPLANATION_CARD),
    ("vocab_intro", ScreenRole.VOCABULARY_CARD),
    ("grammar_point", ScreenRole.GRAMMAR_CARD),
    ("practice_1", ScreenRole.PRACTICE_CARD),
    ("cultural_note", ScreenRole.CONTENT_CARD),
])
def test_screen_role_from_segment_id(compiler, segment_id, expected):
    assert compiler.resolve_screen_role(script(segment_id)) == expected


def test_declared_screen_role_wins_over_id(compiler):
    segment = script("intro", screen_role=ScreenRole.PRACTICE_CARD)

    assert compiler.resolve_screen_role(segment) == ScreenRole.PRACTICE_CARD


@pytest.mark.parametrize("segment_id", ["intro", "practice_2", "cultural_note"])
def test_vocab_anchor_forces_vocabulary_role(compiler, segment_id):
    segment = script(segment_id, vocab_anchor="Apple", screen_role=ScreenRole.PRACTICE_CARD)

    assert compiler.resolve_screen_role(segment) == ScreenRole.VOCABULARY_CARD


def test_visual_ref_prefers_compressed_image(compiler, layout):
    (layout.segments_dir / "intro.webp").write_bytes(b"webp")
    (layout.segments_dir / "intro.png").write_bytes(b"png")

    ref = compiler.resolve_visual_ref(layout, script("intro", visual_resource_key="intro"))

    assert ref == "/videos/video-1/lesson_2/lesson_segments/intro.webp"


def test_visual_ref_falls_back_to_uncompressed_image(compiler, layout):
    (layout.segments_dir / "intro.png").write_bytes(b"png")

    ref = compiler.resolve_visual_ref(layout, script("intro", visual_resource_key="intro"))

    assert ref == "/videos/video-1/lesson_2/lesson_segments/intro.png"


def test_visual_ref_assumes_compressed_image_when_absent(compiler, layout):
    ref = compiler.resolve_visual_ref(layout, script("intro", visual_resource_key="intro"))

    assert ref == "/videos/video-1/lesson_2/lesson_segments/intro.webp"


def test_no_visual_ref_without_resource_key(compiler, layout):
    assert compiler.resolve_visual_ref(layout, script("intro")) is None


def test_entry_carries_fragments_and_timings(compiler, layout):
    segment = SegmentScript(
        id="vocab_1",
        fragments=[
            TextFragment(content="Apple", language_tag=LanguageTag.L2, auxiliary_translation="Apple"),
            TextFragment(content=" means ", language_tag=LanguageTag.L1),
        ],
        vocab_anchor="Apple",
    )
    timings = [
        FragmentTiming(content="Apple", language_tag=LanguageTag.L2, duration=0.5, start_offset=0.0, end_offset=0.5),
        FragmentTiming(content=" means ", language_tag=LanguageTag.L1, duration=0.7, start_offset=0.5, end_offset=1.2),
    ]

    timeline = compiler.compile(layout, [(segment, result(layout, "vocab_1", 1.2, timings))])

    entry = timeline.entries[0]
    assert entry.text == "Apple means "
    assert entry.vocab_anchor == "Apple"
    assert [f.content for f in entry.fragments] == ["Apple", " means "]
    assert entry.fragments[0].auxiliary_translation == "Apple"
    assert entry.fragment_timings == timings


def test_missing_result_raises(compiler, layout):
    pairs = [
        (script("intro"), result(layout, "intro", 1.0)),
        (script("vocab_1"), None),
    ]

    with pytest.raises(MissingInputError) as exc_info:
        compiler.compile(layout, pairs)

    assert exc_info.value.details["segment_id"] == "vocab_1"


def test_pair_with_results_keeps_script_order(layout):
    scripts = [script("intro"), script("vocab_1"), script("conclusion")]
    results = {
        "conclusion": result(layout, "conclusion", 1.0),
        "intro": result(layout, "intro", 2.0),
    }

    pairs = TimelineCompiler.pair_with_results(scripts, results)

    assert [s.id for s, _ in pairs] == ["intro", "vocab_1", "conclusion"]
    assert pairs[1][1] is None
    assert pairs[0][1].duration == 2.0


def test_compile_lesson_writes_document(compiler, layout):
    pairs = [(script("intro"), result(layout, "intro", 2.0))]

    timeline = compiler.compile_lesson(layout, pairs, audio_url="synchronized_audio.mp3")

    assert timeline is not None
    document = json.loads(layout.timeline_path.read_text(encoding="utf-8"))
    assert document["audioUrl"] == "synchronized_audio.mp3"
    entries = document["lesson"]["segmentBasedTiming"]
    assert len(entries) == 1
    assert entries[0]["startTime"] == 0.0
    assert entries[0]["endTime"] == 2.0
    assert entries[0]["screenRole"] == "title_card"
    assert entries[0]["audioRef"] == "/videos/video-1/lesson_2/lesson_segments/intro.wav"


def test_compile_lesson_skips_existing_timeline(compiler, layout):
    layout.timeline_path.write_text("{}", encoding="utf-8")

    timeline = compiler.compile_lesson(layout, [(script("intro"), None)], audio_url="a.mp3")

    assert timeline is None
    assert layout.timeline_path.read_text(encoding="utf-8") == "{}"
