"""Pytest configuration and fixtures for LessonSync tests."""
import io
import json
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pytest
from pydub import AudioSegment

from lessonsync.core.exceptions import ProbeError, SynthesisError
from lessonsync.core.models.enums import LanguageTag
from lessonsync.core.models.layout import LessonLayout
from lessonsync.core.ports.audio_processor import AudioConcatenator, DurationProbe

# Configure asyncio to be less verbose
logging.getLogger("asyncio").setLevel(logging.WARNING)

SAMPLE_RATE = 24000

requires_ffmpeg = pytest.mark.skipif(
    shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
    reason="ffmpeg/ffprobe not installed",
)


def silent_wav_bytes(duration_ms: int) -> bytes:
    """Return a 24 kHz mono 16-bit silent WAV file of the given length."""
    buffer = io.BytesIO()
    AudioSegment.silent(duration=duration_ms, frame_rate=SAMPLE_RATE).export(buffer, format="wav")
    return buffer.getvalue()


def write_silent_wav(path: Union[str, Path], duration_ms: int) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(silent_wav_bytes(duration_ms))
    return path


class FakeSynthesizer:
    """Synthesizer returning silence, 100 ms per character of text."""

    def __init__(self, ms_per_char: int = 100, fail_on: Optional[str] = None, empty_on: Optional[str] = None):
        self.ms_per_char = ms_per_char
        self.fail_on = fail_on
        self.empty_on = empty_on
        self.calls: List[Tuple[str, LanguageTag, float]] = []

    @property
    def name(self) -> str:
        return "fake"

    def duration_ms(self, text: str) -> int:
        return len(text) * self.ms_per_char

    async def synthesize(self, text: str, language: LanguageTag, rate: float = 1.0) -> bytes:
        self.calls.append((text, language, rate))
        if self.fail_on is not None and self.fail_on in text:
            raise SynthesisError(f"fake failure for {text!r}")
        if self.empty_on is not None and self.empty_on in text:
            return b""
        return silent_wav_bytes(self.duration_ms(text))


class FakeAudioProcessor(DurationProbe, AudioConcatenator):
    """Probe and concatenator working on WAV files with pydub only (no ffmpeg)."""

    def __init__(self, fail_probe: bool = False, fail_concat: Optional[Exception] = None):
        self.fail_probe = fail_probe
        self.fail_concat = fail_concat
        self.probe_calls: List[Path] = []
        self.concat_calls: List[Tuple[List[Path], Path]] = []

    async def probe_duration(self, audio_file: Union[str, Path]) -> float:
        self.probe_calls.append(Path(audio_file))
        if self.fail_probe:
            raise ProbeError(f"fake probe failure for {audio_file}")
        return len(AudioSegment.from_wav(str(audio_file))) / 1000.0

    async def concatenate(self, input_files: Sequence[Union[str, Path]], output_file: Union[str, Path]) -> Path:
        self.concat_calls.append(([Path(f) for f in input_files], Path(output_file)))
        if self.fail_concat is not None:
            Path(output_file).write_bytes(b"partial")
            raise self.fail_concat
        combined = AudioSegment.empty()
        for path in input_files:
            combined += AudioSegment.from_wav(str(path))
        combined.export(str(output_file), format="wav")
        return Path(output_file)


@pytest.fixture
def fake_synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def fake_audio_processor() -> FakeAudioProcessor:
    return FakeAudioProcessor()


@pytest.fixture
def sample_script_data() -> Dict[str, Any]:
    """Return an audio_segments.json document as written by the content generator."""
    return {
        "audioSegments": [
            {
                "id": "intro",
                "text": "Welcome to today's lesson",
                "textParts": [
                    {"text": "Welcome to today's lesson", "language": "th"},
                ],
                "backgroundImageDescription": "A sunny market",
            },
            {
                "id": "vocab_1",
                "text": "Apple means แอปเปิ้ล",
                "textParts": [
                    {"text": "Apple", "language": "en", "englishTranslation": "Apple"},
                    {"text": " means ", "language": "th"},
                    {"text": "แอปเปิ้ล", "language": "th", "englishTranslation": "apple"},
                ],
                "vocabWord": "Apple",
            },
            {
                "id": "practice_1",
                "text": "Say it: thank you",
                "textParts": [
                    {"text": "Say it:", "language": "th"},
                    {"text": "thank you", "language": "en", "speakingRate": 0.7},
                ],
                "screenElement": "practice_card",
            },
            {
                "id": "conclusion",
                "text": "Well done",
            },
        ]
    }


@pytest.fixture
def lesson_layout(tmp_path: Path, sample_script_data: Dict[str, Any]) -> LessonLayout:
    """Return the layout of a lesson whose script has been written to disk."""
    layout = LessonLayout(root=tmp_path / "videos", video_id="video-1", lesson_number=1)
    layout.lesson_dir.mkdir(parents=True)
    layout.script_path.write_text(json.dumps(sample_script_data, ensure_ascii=False), encoding="utf-8")
    return layout
