"""Integration tests for GoogleSpeechSynthesizer with a mocked API client."""
from unittest.mock import AsyncMock, MagicMock

import pytest

pytest.importorskip("google.cloud.texttospeech")

from google.api_core.exceptions import ServiceUnavailable  # noqa: E402
from google.cloud import texttospeech  # noqa: E402

from lessonsync.core.config.tts import DEFAULT_GOOGLE_VOICES  # noqa: E402
from lessonsync.core.exceptions import ConfigurationError, SynthesisError  # noqa: E402
from lessonsync.core.models.enums import LanguageTag  # noqa: E402
from lessonsync.infrastructure.services.tts.google_tts_service import (  # noqa: E402
    GoogleSpeechSynthesizer,
    language_code_for_voice,
)


@pytest.fixture
def client():
    client = MagicMock()
    client.synthesize_speech = AsyncMock(return_value=MagicMock(audio_content=b"RIFF-linear16"))
    return client


@pytest.mark.parametrize("voice, expected", [
    ("th-TH-Chirp3-HD-Achird", "th-TH"),
    ("en-US-Chirp3-HD-Achernar", "en-US"),
])
def test_language_code_for_voice(voice, expected):
    assert language_code_for_voice(voice) == expected


def test_language_code_for_bad_voice():
    with pytest.raises(ConfigurationError):
        language_code_for_voice("narrator")


class TestGoogleSpeechSynthesizer:
    async def test_request(self, client):
        synthesizer = GoogleSpeechSynthesizer(DEFAULT_GOOGLE_VOICES, client=client)

        audio = await synthesizer.synthesize("thank you", LanguageTag.L2, rate=0.8)

        assert audio == b"RIFF-linear16"
        kwargs = client.synthesize_speech.await_args.kwargs
        assert kwargs["input"].text == "thank you"
        assert kwargs["voice"].name == "en-US-Chirp3-HD-Achernar"
        assert kwargs["voice"].language_code == "en-US"
        assert kwargs["audio_config"].audio_encoding == texttospeech.AudioEncoding.LINEAR16
        assert kwargs["audio_config"].sample_rate_hertz == 24000
        assert kwargs["audio_config"].speaking_rate == pytest.approx(0.8)

    async def test_api_error(self, client):
        client.synthesize_speech.side_effect = ServiceUnavailable("backend down")
        synthesizer = GoogleSpeechSynthesizer(DEFAULT_GOOGLE_VOICES, client=client)

        with pytest.raises(SynthesisError, match="backend down"):
            await synthesizer.synthesize("hello", LanguageTag.L2)

    async def test_empty_audio(self, client):
        client.synthesize_speech.return_value = MagicMock(audio_content=b"")
        synthesizer = GoogleSpeechSynthesizer(DEFAULT_GOOGLE_VOICES, client=client)

        with pytest.raises(SynthesisError, match="no audio"):
            await synthesizer.synthesize("hello", LanguageTag.L1)

    async def test_missing_voice(self, client):
        synthesizer = GoogleSpeechSynthesizer({LanguageTag.L1: "th-TH-Chirp3-HD-Achird"}, client=client)

        with pytest.raises(SynthesisError):
            await synthesizer.synthesize("hello", LanguageTag.L2)
        client.synthesize_speech.assert_not_awaited()

    async def test_missing_credentials_file(self, tmp_path):
        synthesizer = GoogleSpeechSynthesizer(DEFAULT_GOOGLE_VOICES, credentials_path=tmp_path / "key.json")

        with pytest.raises(ConfigurationError, match="Credentials file not found"):
            await synthesizer.synthesize("hello", LanguageTag.L1)
