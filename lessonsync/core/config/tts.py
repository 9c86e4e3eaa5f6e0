"""Speech synthesis configuration models."""
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.enums import LanguageTag

DEFAULT_EDGE_VOICES = {
    LanguageTag.L1: "th-TH-PremwadeeNeural",
    LanguageTag.L2: "en-US-AriaNeural",
}

DEFAULT_GOOGLE_VOICES = {
    LanguageTag.L1: "th-TH-Chirp3-HD-Achird",
    LanguageTag.L2: "en-US-Chirp3-HD-Achernar",
}

# Foreign-language phrases are spoken more slowly for learners
DEFAULT_RATES = {
    LanguageTag.L1: 1.0,
    LanguageTag.L2: 0.8,
}

SUPPORTED_PROVIDERS = ("edge", "google")


class EdgeTTSSettings(BaseModel):
    """Edge TTS specific settings."""
    voices: Dict[LanguageTag, str] = Field(default_factory=lambda: dict(DEFAULT_EDGE_VOICES))
    pitch: str = "+0Hz"
    volume: str = "+0%"


class GoogleTTSSettings(BaseModel):
    """Google Cloud Text-to-Speech specific settings."""
    voices: Dict[LanguageTag, str] = Field(default_factory=lambda: dict(DEFAULT_GOOGLE_VOICES))
    credentials_path: Optional[Path] = None

    @field_validator("credentials_path", mode="before")
    @classmethod
    def expand_credentials_path(cls, v: Optional[str]) -> Optional[Path]:
        if not v:
            return None
        return Path(v).expanduser()


class TTSSettings(BaseModel):
    """Speech synthesis configuration."""

    provider: str = Field(
        default="edge",
        description="Synthesis provider to use ('edge' or 'google')",
    )
    edge_tts: EdgeTTSSettings = Field(default_factory=EdgeTTSSettings)
    google_tts: GoogleTTSSettings = Field(default_factory=GoogleTTSSettings)
    default_rates: Dict[LanguageTag, float] = Field(
        default_factory=lambda: dict(DEFAULT_RATES),
        description="Speaking rate per language when a fragment does not set one",
    )
    sample_rate: int = Field(default=24000, gt=0)

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        provider = v.lower()
        if provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported TTS provider: {v}")
        return provider

    @field_validator("default_rates")
    @classmethod
    def fill_default_rates(cls, v: Dict[LanguageTag, float]) -> Dict[LanguageTag, float]:
        rates = dict(DEFAULT_RATES)
        rates.update(v)
        for tag, rate in rates.items():
            if rate <= 0:
                raise ValueError(f"Rate for {tag.value} must be positive, got {rate}")
        return rates
