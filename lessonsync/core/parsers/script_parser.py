"""Parser for the lesson scripts written by the content generator.

The generator writes ``audio_segments.json``::

    {"audioSegments": [
        {"id": "intro",
         "text": "...",
         "textParts": [{"text": "...", "language": "th", "speakingRate": 1.0,
                        "englishTranslation": "..."}],
         "screenElement": "title_card",
         "vocabWord": "...",
         "backgroundImageDescription": "..."}
    ]}

Records without ``textParts`` come from older generators and are read as a
single native-language fragment.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..config import DEFAULT_LANGUAGE_CODES
from ..exceptions import MissingInputError, ValidationError
from ..models.enums import LanguageTag, ScreenRole
from ..models.fragment import SegmentScript, TextFragment

logger = logging.getLogger(__name__)

SEGMENTS_KEY = "audioSegments"


def resolve_language(code: Any, language_codes: Mapping[str, LanguageTag]) -> LanguageTag:
    """Map a script language code (``th``, ``en``, ``l1``...) to a language tag."""
    if isinstance(code, LanguageTag):
        return code
    if isinstance(code, str):
        tag = language_codes.get(code.lower())
        if tag is not None:
            return tag
        tag = LanguageTag.from_string(code)
        if tag is not None:
            return tag
    raise ValidationError(f"Unknown language code: {code!r}", field="language", value=code)


def _parse_fragment(part: Any, language_codes: Mapping[str, LanguageTag], field: str) -> TextFragment:
    if not isinstance(part, Mapping):
        raise ValidationError(f"{field} must be an object", field=field, value=part)
    return TextFragment(
        content=part.get("text", part.get("content")),
        language_tag=resolve_language(part.get("language", part.get("languageTag")), language_codes),
        synthesis_rate=part.get("speakingRate", part.get("synthesisRate")),
        auxiliary_translation=part.get("englishTranslation", part.get("auxiliaryTranslation")),
    )


def _parse_screen_role(value: Optional[str], segment_id: str) -> Optional[ScreenRole]:
    if not value:
        return None
    role = ScreenRole.from_string(value)
    if role is None:
        logger.debug("Ignoring unknown screen element %r on segment '%s'", value, segment_id)
    return role


def parse_segment(
    record: Mapping[str, Any],
    language_codes: Optional[Mapping[str, LanguageTag]] = None,
) -> SegmentScript:
    """Convert one generator record into a segment script."""
    language_codes = language_codes or DEFAULT_LANGUAGE_CODES
    segment_id = record.get("id")
    text = record.get("text")

    parts = record.get("textParts") or []
    if parts:
        fragments = [
            _parse_fragment(part, language_codes, f"textParts[{index}]") for index, part in enumerate(parts)
        ]
    elif record.get("fragments"):
        fragments = [
            _parse_fragment(part, language_codes, f"fragments[{index}]")
            for index, part in enumerate(record["fragments"])
        ]
    else:
        fragments = [TextFragment(content=text or "", language_tag=LanguageTag.L1)]

    visual_resource_key = record.get("visualResourceKey")
    if not visual_resource_key and record.get("backgroundImageDescription"):
        visual_resource_key = segment_id

    return SegmentScript(
        id=segment_id,
        screen_role=_parse_screen_role(record.get("screenElement") or record.get("screenRole"), str(segment_id)),
        fragments=fragments,
        vocab_anchor=record.get("vocabWord") or record.get("vocabAnchor"),
        visual_resource_key=visual_resource_key,
        text=text,
    )


def parse_segment_scripts(
    data: Any,
    language_codes: Optional[Mapping[str, LanguageTag]] = None,
) -> List[SegmentScript]:
    """Convert a parsed ``audio_segments.json`` document into segment scripts.

    Raises:
        ValidationError: If the document or any of its records is invalid
    """
    if isinstance(data, Mapping):
        records = data.get(SEGMENTS_KEY)
    else:
        records = data
    if not isinstance(records, list):
        raise ValidationError(f"Expected a list under '{SEGMENTS_KEY}'", field=SEGMENTS_KEY)

    scripts: List[SegmentScript] = []
    seen: Dict[str, int] = {}
    for index, record in enumerate(records):
        field = f"{SEGMENTS_KEY}[{index}]"
        if not isinstance(record, Mapping):
            raise ValidationError(f"{field} must be an object", field=field)
        try:
            script = parse_segment(record, language_codes)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid segment {field}: {e}", field=field, cause=e) from e
        except ValidationError as e:
            e.details.setdefault("segment", field)
            raise
        if script.id in seen:
            raise ValidationError(
                f"Duplicate segment id '{script.id}' at {field} (first seen at index {seen[script.id]})",
                field=field,
                value=script.id,
            )
        seen[script.id] = index
        scripts.append(script)

    return scripts


def load_segment_scripts(
    path: Union[str, Path],
    language_codes: Optional[Mapping[str, LanguageTag]] = None,
) -> List[SegmentScript]:
    """Read a lesson's segment scripts in file order.

    Args:
        path: Path to ``audio_segments.json``
        language_codes: Script language code to language tag table

    Raises:
        MissingInputError: If the file does not exist
        ValidationError: If the file is not valid JSON or a record is invalid
    """
    path = Path(path)
    if not path.exists():
        raise MissingInputError(f"Lesson script not found: {path}", path=str(path))

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Lesson script is not valid JSON: {path}: {e}", field=str(path), cause=e) from e

    scripts = parse_segment_scripts(data, language_codes)
    logger.info("Loaded %d segment scripts from %s", len(scripts), path)
    return scripts
