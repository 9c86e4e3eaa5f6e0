"""Audio, storage and timeline configuration models."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..models.enums import StorageType, ScreenRole, LanguageTag


class AudioSettings(BaseModel):
    """Settings for segment audio files and the ffmpeg toolchain."""
    extension: str = "wav"
    ffmpeg_binary: str = "ffmpeg"
    sample_rate: int = Field(default=24000, gt=0)
    channels: int = Field(default=1, ge=1)
    sample_width: int = Field(default=2, ge=1, description="Bytes per sample")
    min_fragment_length: int = Field(default=3, ge=0)
    duration_tolerance: float = Field(default=0.01, ge=0.0)

    @field_validator("extension")
    @classmethod
    def strip_extension_dot(cls, v: str) -> str:
        v = v.lstrip(".").lower()
        if not v:
            raise ValueError("Audio extension cannot be empty")
        return v


class StorageSettings(BaseModel):
    """Where lesson artifacts live and how they are addressed publicly."""
    type: StorageType = StorageType.LOCAL
    base_path: str = "videos"
    public_url: Optional[str] = None

    @field_validator("public_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.rstrip("/")


class TimelineSettings(BaseModel):
    """Settings shared by the timeline compiler and its consumers."""
    audio_url: str = "synchronized_audio.mp3"
    fps: int = Field(default=30, gt=0)
    pause_epsilon: float = Field(default=0.15, ge=0.0)
    pause_cooldown: float = Field(default=1.0, ge=0.0)
    pause_role: ScreenRole = ScreenRole.PRACTICE_CARD
    pause_language: LanguageTag = LanguageTag.L2
