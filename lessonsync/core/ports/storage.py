"""Interface for the durable storage holding lesson artifacts."""
from abc import abstractmethod
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ArtifactStorage(Protocol):
    """Addresses lesson artifacts by storage key.

    Keys are ``/``-separated paths relative to the storage root, e.g.
    ``video-1/lesson_1/lesson_segments/intro.wav``.
    """

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Get the URL under which consumers fetch the artifact."""
        ...

    @abstractmethod
    def local_path(self, key: str) -> Path:
        """Get the local filesystem path of the artifact."""
        ...

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether the artifact is present locally."""
        ...
