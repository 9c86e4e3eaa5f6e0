"""Script models: text fragments and the segments that group them."""
from typing import Any, List, Optional

from pydantic import Field, field_validator

from .base import DomainModel
from .enums import LanguageTag, ScreenRole


class TextFragment(DomainModel):
    """The smallest unit of text submitted to speech synthesis.

    Attributes:
        content: Text to speak
        language_tag: Language the text is spoken in
        synthesis_rate: Optional speaking rate overriding the language default
        auxiliary_translation: Display-only translation, never spoken
    """
    content: str
    language_tag: LanguageTag
    synthesis_rate: Optional[float] = Field(default=None, gt=0.0)
    auxiliary_translation: Optional[str] = None

    @field_validator('content')
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Reject fragments with nothing to speak.

        Surrounding whitespace is kept because fragments are joined verbatim
        when short fragments are merged.
        """
        if not v or not v.strip():
            raise ValueError("Fragment content cannot be empty")
        return v

    @field_validator('language_tag', mode='before')
    @classmethod
    def validate_language_tag(cls, v: Any) -> LanguageTag:
        if isinstance(v, LanguageTag):
            return v
        if isinstance(v, str):
            tag = LanguageTag.from_string(v)
            if tag is not None:
                return tag
        raise ValueError(f"Unknown language tag: {v!r}")


class SegmentScript(DomainModel):
    """One lesson scene as authored by the content generator.

    Attributes:
        id: Segment identifier, unique within a lesson
        screen_role: Role declared upstream, if any
        fragments: Ordered text fragments to synthesize
        vocab_anchor: Vocabulary word this segment presents
        visual_resource_key: Key of the background image for this segment
        text: Full display text of the segment
    """
    id: str = Field(..., min_length=1)
    screen_role: Optional[ScreenRole] = None
    fragments: List[TextFragment] = Field(..., min_length=1)
    vocab_anchor: Optional[str] = None
    visual_resource_key: Optional[str] = None
    text: Optional[str] = None

    @property
    def display_text(self) -> str:
        """Text shown to the learner; falls back to the joined fragments."""
        if self.text:
            return self.text
        return "".join(fragment.content for fragment in self.fragments)
