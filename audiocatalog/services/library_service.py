"""Library service: the local recordings catalog behind a worker pool."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..catalog import CatalogScanner, ReconciliationEngine
from ..catalog.probe import AbstractMediaProbe, MutagenMediaProbe
from ..config import CatalogConfig
from ..errors import RecordingNotFoundError, UnsupportedFormatError
from ..models.recording import RecordingRecord
from ..storage import RecordingsDirectory, SidecarStore, filename_codec
from .deletion import DeletionCoordinator

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class LibraryService:
    """High-level access to the recordings stored on this machine.

    This service provides a clean API for clients to:
    1. List the catalog (reconciled audio/sidecar pairs, newest first)
    2. Look up, rename and re-save single recordings
    3. Import external audio files into the recordings directory
    4. Delete recordings together with their metadata

    Every operation is blocking; the ``submit_*`` variants run the same work
    on the service's I/O thread pool and return a Future.
    """

    def __init__(self,
                 config: CatalogConfig,
                 probe: Optional[AbstractMediaProbe] = None,
                 sidecar_store: Optional[SidecarStore] = None):
        """Initialize library service.

        Args:
            config: Application configuration
            probe: Media probe used for durations (mutagen by default)
            sidecar_store: Sidecar store shared by all components
        """
        self.config = config
        self.sidecar_store = sidecar_store or SidecarStore()
        self.probe = probe or MutagenMediaProbe()

        self.directory = RecordingsDirectory(config.get_data_directory(),
                                             sidecar_store=self.sidecar_store,
                                             probe=self.probe)
        self.reconciler = ReconciliationEngine(self.sidecar_store, self.probe)
        self.scanner = CatalogScanner(self.reconciler)
        self.deleter = DeletionCoordinator()

        io_threads = int(config.get('workers.io_threads', 2))
        self._executor = ThreadPoolExecutor(max_workers=max(1, io_threads),
                                            thread_name_prefix="catalog_io")

        logger.info(f"LibraryService initialized for {self.directory.recordings_dir}")

    @property
    def recordings_dir(self) -> Path:
        return self.directory.recordings_dir

    def load_recordings(self) -> List[RecordingRecord]:
        """Scan the recordings directory.

        Returns:
            Recordings sorted newest first
        """
        logger.debug(f"Loading recordings from {self.recordings_dir}")
        records = self.scanner.scan(self.recordings_dir)
        logger.info(f"Loaded {len(records)} recordings")
        return records

    def get_recording(self, path: PathLike) -> RecordingRecord:
        """Reconcile a single recording.

        Raises:
            RecordingNotFoundError: If the audio file does not exist
            UnsupportedFormatError: If the file is not a supported audio type
        """
        path = Path(path)
        if not path.is_file():
            raise RecordingNotFoundError(f"Recording not found: {path}")
        if not filename_codec.is_supported(path.name):
            raise UnsupportedFormatError(f"Unsupported file type: {path.name}")
        return self.reconciler.reconcile(path)

    def save_metadata(self, record: RecordingRecord) -> bool:
        """Overwrite the sidecar of ``record`` with its current fields."""
        return self.sidecar_store.write_for_audio(record)

    def update_title(self, path: PathLike, new_title: str) -> RecordingRecord:
        """Rename a recording by rewriting its sidecar.

        A missing or corrupt sidecar is replaced by one synthesized from the
        file name and a fresh probe, carrying the new title.

        Args:
            path: Audio file path
            new_title: Title to store; must not be blank

        Returns:
            The updated record

        Raises:
            ValueError: If ``new_title`` is blank
            RecordingNotFoundError: If the audio file does not exist
            UnsupportedFormatError: If the file is not a supported audio type
            OSError: If the sidecar could not be written
        """
        if not new_title or not new_title.strip():
            raise ValueError("Title must not be blank")

        current = self.get_recording(path)
        updated = current.with_title(new_title.strip())
        if not self.save_metadata(updated):
            raise OSError(f"Failed to save metadata for {current.file_name}")

        logger.info(f"Updated title of {current.file_name} to {updated.title!r}")
        return updated

    def import_recording(self, source: PathLike, title: Optional[str] = None) -> RecordingRecord:
        """Copy an external audio file into the catalog."""
        return self.directory.import_audio_file(source, title)

    def delete_recordings(self, records: Iterable[RecordingRecord]) -> bool:
        """Delete recordings and their sidecars; True only if all succeeded."""
        return self.deleter.delete_many(records)

    def delete_paths(self, paths: Iterable[PathLike]) -> bool:
        """Delete recordings identified by audio file path.

        Paths that no longer exist are treated as already deleted, but their
        sidecars are still removed.
        """
        records = []
        for path in paths:
            path = Path(path)
            if path.is_file():
                records.append(self.reconciler.reconcile(path))
            else:
                records.append(RecordingRecord(id=0, file_path=str(path), file_name=path.name,
                                               title="", timestamp_millis=0))
        return self.delete_recordings(records)

    def get_storage_stats(self) -> Dict[str, Any]:
        return self.directory.get_storage_stats()

    # Worker pool variants

    def submit_load_recordings(self) -> "Future[List[RecordingRecord]]":
        return self._executor.submit(self.load_recordings)

    def submit_get_recording(self, path: PathLike) -> "Future[RecordingRecord]":
        return self._executor.submit(self.get_recording, path)

    def submit_update_title(self, path: PathLike, new_title: str) -> "Future[RecordingRecord]":
        return self._executor.submit(self.update_title, path, new_title)

    def submit_save_metadata(self, record: RecordingRecord) -> "Future[bool]":
        return self._executor.submit(self.save_metadata, record)

    def submit_import_recording(self, source: PathLike,
                                title: Optional[str] = None) -> "Future[RecordingRecord]":
        return self._executor.submit(self.import_recording, source, title)

    def submit_delete_recordings(self, records: Iterable[RecordingRecord]) -> "Future[bool]":
        return self._executor.submit(self.delete_recordings, list(records))

    def submit_delete_paths(self, paths: Iterable[PathLike]) -> "Future[bool]":
        return self._executor.submit(self.delete_paths, list(paths))

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker pool."""
        self._executor.shutdown(wait=wait)
        logger.info("LibraryService shut down")

    def __enter__(self) -> "LibraryService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
