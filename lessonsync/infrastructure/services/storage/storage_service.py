"""Storage addressing of lesson artifacts."""
import logging
from pathlib import Path
from typing import Optional, Union

from lessonsync.core.config.pipeline import StorageSettings
from lessonsync.core.exceptions import ConfigurationError
from lessonsync.core.models.enums import StorageType

logger = logging.getLogger(__name__)

# Path under which the web server exposes the local storage root
LOCAL_URL_PREFIX = "/videos"


class StorageService:
    """Maps storage keys to local paths and public URLs.

    Artifacts are always written below a local root. Locally served
    artifacts are published under ``/videos/{key}``; with S3 or R2 the
    configured public URL is used as base.
    """

    def __init__(self, settings: StorageSettings, root: Optional[Union[str, Path]] = None) -> None:
        self.settings = settings
        self.root = Path(root if root is not None else settings.base_path)
        if settings.type != StorageType.LOCAL and not settings.public_url:
            raise ConfigurationError(
                f"storage.public_url is required for {settings.type.value} storage"
            )

    @property
    def storage_type(self) -> StorageType:
        return self.settings.type

    @staticmethod
    def normalize_key(key: str) -> str:
        return key.replace("\\", "/").lstrip("/")

    def public_url(self, key: str) -> str:
        key = self.normalize_key(key)
        if self.settings.type == StorageType.LOCAL:
            return f"{LOCAL_URL_PREFIX}/{key}"
        return f"{self.settings.public_url}/{key}"

    def local_path(self, key: str) -> Path:
        return self.root / self.normalize_key(key)

    def exists(self, key: str) -> bool:
        return self.local_path(key).exists()
