"""Storage adapters."""
from .storage_service import StorageService

__all__ = ['StorageService']
