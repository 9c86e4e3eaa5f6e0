"""Factory functions for creating service instances."""
import logging
from pathlib import Path
from typing import Optional, Union

from lessonsync.core.config import AppConfig
from lessonsync.consumers.playback_monitor import PlaybackMonitor
from lessonsync.core.config.pipeline import AudioSettings, StorageSettings, TimelineSettings
from lessonsync.core.config.tts import TTSSettings
from lessonsync.core.exceptions import ConfigurationError
from lessonsync.core.models.timeline import SynchronizedTimeline
from lessonsync.core.ports.tts_service import SpeechSynthesizer
from lessonsync.core.services.fragment_merger import FragmentMerger
from lessonsync.core.services.lesson_pipeline import LessonPipeline
from lessonsync.core.services.segment_assembler import SegmentAudioAssembler
from lessonsync.core.services.timeline_compiler import TimelineCompiler
from lessonsync.infrastructure.services.audio.ffmpeg_audio_processor import FFmpegAudioProcessor
from lessonsync.infrastructure.services.storage.storage_service import StorageService
from lessonsync.infrastructure.services.tts.edge_tts_service import EdgeSpeechSynthesizer

logger = logging.getLogger(__name__)


def create_speech_synthesizer(settings: TTSSettings) -> SpeechSynthesizer:
    """Create the speech synthesizer selected by configuration.

    Raises:
        ConfigurationError: If the provider is not supported
    """
    provider = settings.provider

    if provider == 'edge':
        logger.info("Using Edge TTS")
        return EdgeSpeechSynthesizer(
            voices=settings.edge_tts.voices,
            pitch=settings.edge_tts.pitch,
            volume=settings.edge_tts.volume,
            sample_rate=settings.sample_rate,
        )

    if provider == 'google':
        logger.info("Using Google Cloud Text-to-Speech")
        # Import here to avoid the dependency if not used
        from lessonsync.infrastructure.services.tts.google_tts_service import GoogleSpeechSynthesizer
        return GoogleSpeechSynthesizer(
            voices=settings.google_tts.voices,
            credentials_path=settings.google_tts.credentials_path,
            sample_rate=settings.sample_rate,
        )

    raise ConfigurationError(f"Unsupported TTS provider: {provider}")


def create_audio_processor(settings: AudioSettings) -> FFmpegAudioProcessor:
    return FFmpegAudioProcessor(
        ffmpeg_binary=settings.ffmpeg_binary,
        sample_rate=settings.sample_rate,
        channels=settings.channels,
        sample_width=settings.sample_width,
    )


def create_storage_service(
    settings: StorageSettings,
    root: Optional[Union[str, Path]] = None,
) -> StorageService:
    return StorageService(settings, root=root)


def create_lesson_pipeline(
    config: AppConfig,
    storage_root: Optional[Union[str, Path]] = None,
    synthesizer: Optional[SpeechSynthesizer] = None,
) -> LessonPipeline:
    """Wire a lesson pipeline from configuration.

    Args:
        config: Application configuration
        storage_root: Local storage root; defaults to ``storage.base_path``
        synthesizer: Synthesizer to use instead of the configured provider
    """
    synthesizer = synthesizer or create_speech_synthesizer(config.tts)
    audio_processor = create_audio_processor(config.audio)
    storage = create_storage_service(config.storage, root=storage_root)

    assembler = SegmentAudioAssembler(
        synthesizer=synthesizer,
        probe=audio_processor,
        concatenator=audio_processor,
        merger=FragmentMerger(min_length=config.audio.min_fragment_length),
        default_rates=config.tts.default_rates,
        audio_extension=config.audio.extension,
        duration_tolerance=config.audio.duration_tolerance,
    )
    logger.debug("Created lesson pipeline (synthesizer=%s, storage=%s)", synthesizer.name, storage.root)
    return LessonPipeline(
        assembler=assembler,
        compiler=TimelineCompiler(storage),
        language_codes=config.language_codes,
        audio_url=config.timeline.audio_url,
    )


def create_playback_monitor(timeline: SynchronizedTimeline, settings: TimelineSettings) -> PlaybackMonitor:
    """Create a playback monitor for a compiled timeline using the configured pause rules."""
    return PlaybackMonitor(
        timeline,
        epsilon=settings.pause_epsilon,
        cooldown=settings.pause_cooldown,
        pause_role=settings.pause_role,
        pause_language=settings.pause_language,
    )
