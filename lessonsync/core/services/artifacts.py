"""JSON persistence of the timing manifest and the compiled lesson timeline."""
import json
import logging
from pathlib import Path
from typing import Type, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from ...utils.file_utils import read_json, write_json_atomic
from ..exceptions import ArtifactWriteError, MissingInputError, ValidationError
from ..models.base import DomainModel
from ..models.timeline import LessonTimelineDocument
from ..models.timing import TimingManifest

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=DomainModel)


def _read_artifact(path: Union[str, Path], model: Type[M], kind: str) -> M:
    path = Path(path)
    if not path.exists():
        raise MissingInputError(f"{kind} not found: {path}", path=str(path))
    try:
        return model.model_validate(read_json(path))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"{kind} is not valid JSON: {path}", field=str(path), cause=e) from e
    except PydanticValidationError as e:
        raise ValidationError(f"{kind} is invalid: {path}: {e}", field=str(path), cause=e) from e
    except OSError as e:
        raise MissingInputError(f"Could not read {kind.lower()} {path}: {e}", path=str(path), cause=e) from e


def _write_artifact(path: Union[str, Path], document: DomainModel, kind: str) -> Path:
    path = Path(path)
    try:
        write_json_atomic(path, document.to_dict())
    except OSError as e:
        raise ArtifactWriteError(f"Could not write {kind.lower()} {path}: {e}", path=str(path), cause=e) from e
    logger.info("Wrote %s to %s", kind.lower(), path)
    return path


def read_timing_manifest(path: Union[str, Path]) -> TimingManifest:
    return _read_artifact(path, TimingManifest, "Timing manifest")


def write_timing_manifest(path: Union[str, Path], manifest: TimingManifest) -> Path:
    return _write_artifact(path, manifest, "Timing manifest")


def read_lesson_timeline(path: Union[str, Path]) -> LessonTimelineDocument:
    return _read_artifact(path, LessonTimelineDocument, "Lesson timeline")


def write_lesson_timeline(path: Union[str, Path], document: LessonTimelineDocument) -> Path:
    return _write_artifact(path, document, "Lesson timeline")
