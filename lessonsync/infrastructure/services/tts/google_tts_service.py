"""Google Cloud Text-to-Speech speech synthesizer."""
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from google.api_core.exceptions import GoogleAPICallError, RetryError
from google.cloud import texttospeech
from google.oauth2 import service_account

from lessonsync.core.exceptions import ConfigurationError, SynthesisError
from lessonsync.core.models.enums import LanguageTag

logger = logging.getLogger(__name__)


def language_code_for_voice(voice_name: str) -> str:
    """Extract the language code from a voice name, e.g. ``th-TH-Chirp3-HD-Achird`` -> ``th-TH``."""
    parts = voice_name.split("-")
    if len(parts) < 2:
        raise ConfigurationError(f"Cannot derive a language code from voice name {voice_name!r}")
    return "-".join(parts[:2])


class GoogleSpeechSynthesizer:
    """Speech synthesizer using Google Cloud Text-to-Speech.

    Audio is requested as LINEAR16, which Google returns as a complete WAV
    file.
    """

    def __init__(
        self,
        voices: Dict[LanguageTag, str],
        credentials_path: Optional[Path] = None,
        sample_rate: int = 24000,
        client: Optional[Any] = None,
    ) -> None:
        self.voices = dict(voices)
        self.credentials_path = credentials_path
        self.sample_rate = sample_rate
        self._client = client

    @property
    def name(self) -> str:
        return "google_tts"

    def _get_client(self) -> Any:
        """Create the API client on first use."""
        if self._client is not None:
            return self._client

        credentials = None
        if self.credentials_path is not None:
            path = Path(self.credentials_path).expanduser()
            if not path.exists():
                raise ConfigurationError(f"Credentials file not found: {path}")
            credentials = service_account.Credentials.from_service_account_file(str(path))
        # Without explicit credentials GOOGLE_APPLICATION_CREDENTIALS is used
        self._client = texttospeech.TextToSpeechAsyncClient(credentials=credentials)
        return self._client

    async def synthesize(self, text: str, language: LanguageTag, rate: float = 1.0) -> bytes:
        voice_name = self.voices.get(language)
        if not voice_name:
            raise SynthesisError(
                f"No Google TTS voice configured for language {language.value}",
                details={"language": language.value},
            )

        client = self._get_client()
        voice = texttospeech.VoiceSelectionParams(
            language_code=language_code_for_voice(voice_name),
            name=voice_name,
        )
        audio_config = texttospeech.AudioConfig(
            audio_encoding=texttospeech.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            speaking_rate=rate,
        )
        logger.debug("Google TTS: voice=%s rate=%.2f text=%r", voice_name, rate, text[:50])

        try:
            response = await client.synthesize_speech(
                input=texttospeech.SynthesisInput(text=text),
                voice=voice,
                audio_config=audio_config,
            )
        except (GoogleAPICallError, RetryError) as e:
            logger.error("Google TTS request failed: %s", e)
            raise SynthesisError(f"Failed to synthesize speech: {e}", cause=e) from e

        if not response.audio_content:
            raise SynthesisError(f"Google TTS returned no audio for {text!r}")
        return response.audio_content
