"""Deterministic on-disk layout of a lesson's artifacts."""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

SCRIPT_FILE_NAME = "audio_segments.json"
SEGMENTS_DIR_NAME = "lesson_segments"
MANIFEST_FILE_NAME = "timing-metadata.json"
TIMELINE_FILE_NAME = "final_synchronized_lesson.json"

COMPRESSED_IMAGE_EXTENSION = "webp"
UNCOMPRESSED_IMAGE_EXTENSION = "png"

_LESSON_DIR_PATTERN = re.compile(r"^lesson_(\d+)$")


@dataclass(frozen=True)
class LessonLayout:
    """Paths of one lesson below the storage root.

    A lesson lives in ``{root}/{video_id}/lesson_{n}``, or directly in
    ``{root}/{video_id}`` for videos published as a single lesson.
    """
    root: Path
    video_id: str
    lesson_number: Optional[int] = None

    @classmethod
    def from_lesson_dir(cls, lesson_dir: Union[str, Path], root: Optional[Union[str, Path]] = None) -> 'LessonLayout':
        """Derive the layout from a lesson directory path.

        Args:
            lesson_dir: Either ``.../{video_id}/lesson_{n}`` or ``.../{video_id}``
            root: Storage root; defaults to the directory above the video
        """
        lesson_dir = Path(lesson_dir).resolve()
        match = _LESSON_DIR_PATTERN.match(lesson_dir.name)
        if match:
            video_dir = lesson_dir.parent
            lesson_number: Optional[int] = int(match.group(1))
        else:
            video_dir = lesson_dir
            lesson_number = None
        root_path = Path(root).resolve() if root is not None else video_dir.parent
        return cls(root=root_path, video_id=video_dir.name, lesson_number=lesson_number)

    @property
    def relative_dir(self) -> str:
        if self.lesson_number is None:
            return self.video_id
        return f"{self.video_id}/lesson_{self.lesson_number}"

    @property
    def lesson_dir(self) -> Path:
        return self.root / self.relative_dir

    @property
    def script_path(self) -> Path:
        return self.lesson_dir / SCRIPT_FILE_NAME

    @property
    def segments_dir(self) -> Path:
        return self.lesson_dir / SEGMENTS_DIR_NAME

    @property
    def manifest_path(self) -> Path:
        return self.segments_dir / MANIFEST_FILE_NAME

    @property
    def timeline_path(self) -> Path:
        return self.lesson_dir / TIMELINE_FILE_NAME

    def segment_key(self, file_name: str) -> str:
        """Storage key of a file in the lesson's segment directory."""
        return f"{self.relative_dir}/{SEGMENTS_DIR_NAME}/{file_name}"

    def visual_key(self, resource_key: str, extension: str) -> str:
        return self.segment_key(f"{resource_key}.{extension}")
