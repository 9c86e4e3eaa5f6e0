"""Edge TTS speech synthesizer."""
import asyncio
import logging
from io import BytesIO
from typing import Any, Dict, Optional

import aiohttp
import edge_tts
from edge_tts.exceptions import NoAudioReceived, WebSocketError
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError, CouldntEncodeError

from lessonsync.core.exceptions import SynthesisError
from lessonsync.core.models.enums import LanguageTag

logger = logging.getLogger(__name__)

# Timeout for TTS requests in seconds
REQUEST_TIMEOUT = 30.0


def format_rate(rate: float) -> str:
    """Format a speaking rate (1.0 = natural) as an Edge TTS percentage, e.g. ``-20%``."""
    rate_percent = int(round((rate - 1.0) * 100))
    return f"{rate_percent:+d}%"


class EdgeSpeechSynthesizer:
    """Speech synthesizer using Microsoft Edge TTS.

    Edge TTS returns MP3; the audio is decoded with pydub and re-exported as
    WAV at the configured sample rate, mono, 16-bit, so segment files can be
    joined without re-encoding.
    """

    def __init__(
        self,
        voices: Dict[LanguageTag, str],
        pitch: str = "+0Hz",
        volume: str = "+0%",
        sample_rate: int = 24000,
        communicate_class: Optional[Any] = None,
    ) -> None:
        """Initialize the Edge TTS synthesizer.

        Args:
            voices: Voice name per language tag
            pitch: Pitch adjustment passed to Edge TTS
            volume: Volume adjustment passed to Edge TTS
            sample_rate: Sample rate of the returned WAV audio
            communicate_class: Class used to talk to the Edge TTS service.
                Defaults to ``edge_tts.Communicate``.
        """
        self.voices = dict(voices)
        self.pitch = pitch
        self.volume = volume
        self.sample_rate = sample_rate
        self._communicate_class = communicate_class or edge_tts.Communicate

    @property
    def name(self) -> str:
        return "edge_tts"

    def voice_for(self, language: LanguageTag) -> str:
        try:
            return self.voices[language]
        except KeyError:
            raise SynthesisError(
                f"No Edge TTS voice configured for language {language.value}",
                details={"language": language.value},
            ) from None

    async def synthesize(self, text: str, language: LanguageTag, rate: float = 1.0) -> bytes:
        voice = self.voice_for(language)
        rate_str = format_rate(rate)
        logger.debug("Edge TTS: voice=%s rate=%s text=%r", voice, rate_str, text[:50])

        communicate = self._communicate_class(
            text=text,
            voice=voice,
            rate=rate_str,
            pitch=self.pitch,
            volume=self.volume,
        )
        try:
            mp3_data = await asyncio.wait_for(self._collect_audio(communicate), timeout=REQUEST_TIMEOUT)
        except asyncio.TimeoutError as e:
            raise SynthesisError(f"Edge TTS request timed out after {REQUEST_TIMEOUT}s", cause=e) from e
        except NoAudioReceived as e:
            raise SynthesisError(f"No audio received from Edge TTS for {text!r}", cause=e) from e
        except (WebSocketError, aiohttp.ClientError) as e:
            raise SynthesisError(f"Network error during Edge TTS: {e}", cause=e) from e

        if not mp3_data:
            raise SynthesisError(f"Edge TTS returned no audio for {text!r}")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._to_wav, mp3_data)

    @staticmethod
    async def _collect_audio(communicate: Any) -> bytes:
        buffer = BytesIO()
        async for chunk in communicate.stream():
            if chunk.get("type") == "audio":
                buffer.write(chunk["data"])
        return buffer.getvalue()

    def _to_wav(self, mp3_data: bytes) -> bytes:
        try:
            audio = AudioSegment.from_file(BytesIO(mp3_data), format="mp3")
        except (CouldntDecodeError, IndexError) as e:
            raise SynthesisError(f"Could not decode Edge TTS audio: {e}", cause=e) from e
        audio = audio.set_frame_rate(self.sample_rate).set_channels(1).set_sample_width(2)
        output = BytesIO()
        try:
            audio.export(output, format="wav")
        except CouldntEncodeError as e:
            raise SynthesisError(f"Could not encode Edge TTS audio as WAV: {e}", cause=e) from e
        return output.getvalue()
