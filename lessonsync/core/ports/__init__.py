"""Ports to external collaborators."""
from .audio_processor import AudioConcatenator, DurationProbe
from .storage import ArtifactStorage
from .tts_service import SpeechSynthesizer

__all__ = ['ArtifactStorage', 'AudioConcatenator', 'DurationProbe', 'SpeechSynthesizer']
