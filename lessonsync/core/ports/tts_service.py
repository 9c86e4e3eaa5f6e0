"""Interface for speech synthesis services."""
from abc import abstractmethod
from typing import Protocol, runtime_checkable

from ..models.enums import LanguageTag


@runtime_checkable
class SpeechSynthesizer(Protocol):
    """Protocol defining the interface for speech synthesis providers.

    One implementation exists per provider; the provider is chosen once at
    startup from configuration. Implementations do not retry internally
    beyond what their provider library does, and report every failure as
    ``SynthesisError``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the name of the provider (e.g., 'edge_tts', 'google_tts')."""
        ...

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        language: LanguageTag,
        rate: float = 1.0,
    ) -> bytes:
        """Synthesize one fragment of text.

        Args:
            text: The text to speak
            language: Language the text is spoken in; selects the voice
            rate: Speaking rate, 1.0 being the voice's natural speed

        Returns:
            WAV audio bytes (24 kHz, mono, 16-bit PCM)

        Raises:
            SynthesisError: If the provider fails or returns no audio
        """
        ...
