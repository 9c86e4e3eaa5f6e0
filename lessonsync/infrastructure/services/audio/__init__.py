"""Audio processing adapters."""
from .ffmpeg_audio_processor import FFmpegAudioProcessor

__all__ = ['FFmpegAudioProcessor']
