"""Services for audiocatalog."""

from .deletion import DeletionCoordinator, DeletionOutcome
from .library_service import LibraryService
from .remote_service import RemoteRecordingsService

__all__ = [
    "DeletionCoordinator",
    "DeletionOutcome",
    "LibraryService",
    "RemoteRecordingsService",
]
