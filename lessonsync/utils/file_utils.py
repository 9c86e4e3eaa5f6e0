"""File utility functions for LessonSync."""
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Union


def ensure_directory(directory: Union[str, Path]) -> Path:
    """Ensure that a directory exists, creating it if necessary.

    Args:
        directory: The directory path to ensure exists.

    Returns:
        Path: The path to the directory, guaranteed to exist.

    Raises:
        OSError: If the directory cannot be created.
    """
    path = Path(directory).expanduser().resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_json_atomic(path: Union[str, Path], data: Any, indent: int = 2) -> Path:
    """Write JSON so that readers never observe a partially written file.

    The document is written to a temporary file in the target directory and
    moved into place with ``os.replace``.

    Raises:
        OSError: If the file cannot be written.
    """
    path = Path(path)
    directory = ensure_directory(path.parent)
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
            f.write("\n")
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise
    return path


def read_json(path: Union[str, Path]) -> Any:
    """Read a UTF-8 JSON document."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)
