"""File management for the app-private recordings directory."""

import logging
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..catalog.probe import AbstractMediaProbe, MutagenMediaProbe, probe_duration_millis
from ..errors import InsufficientStorageError, RecordingNotFoundError, UnsupportedFormatError
from ..models.recording import RecordingRecord
from . import filename_codec
from .sidecar_store import SidecarStore

logger = logging.getLogger(__name__)

RECORDINGS_DIRECTORY_NAME = "Recordings"
MIN_REQUIRED_SPACE_BYTES = 50 * 1024 * 1024
COPY_BUFFER_SIZE = 8 * 1024


class RecordingsDirectory:
    """Manages the recordings directory: layout, imports and storage statistics."""

    def __init__(self,
                 data_dir: Union[str, Path] = "./data",
                 sidecar_store: Optional[SidecarStore] = None,
                 probe: Optional[AbstractMediaProbe] = None):
        """Initialize with the application data directory.

        Args:
            data_dir: Base directory; recordings live in ``<data_dir>/Recordings``
            sidecar_store: Store used to write initial metadata on import
            probe: Media probe used to measure imported files
        """
        self.data_dir = Path(data_dir)
        self.recordings_dir = self.data_dir / RECORDINGS_DIRECTORY_NAME
        self.sidecar_store = sidecar_store or SidecarStore()
        self.probe = probe or MutagenMediaProbe()

        logger.info(f"RecordingsDirectory initialized with data_dir: {self.data_dir}")

    def ensure_directory(self) -> Path:
        """Create the recordings directory if needed and return it.

        Raises:
            NotADirectoryError: If the path exists but is not a directory
        """
        if self.recordings_dir.exists() and not self.recordings_dir.is_dir():
            raise NotADirectoryError(f"Path exists but is not a directory: {self.recordings_dir}")
        if not self.recordings_dir.exists():
            self.recordings_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created recordings directory at: {self.recordings_dir}")
        return self.recordings_dir

    def new_recording_path(self, extension: str = filename_codec.DEFAULT_AUDIO_EXTENSION,
                           timestamp: Optional[datetime] = None) -> Path:
        """Return an unused canonical path for a new recording.

        Seconds are bumped until the name is free, so two recordings started
        within the same second never share a file.
        """
        directory = self.ensure_directory()
        moment = (timestamp or datetime.now()).replace(microsecond=0)
        while True:
            candidate = directory / filename_codec.format(moment, extension)
            if not candidate.exists():
                return candidate
            moment += timedelta(seconds=1)

    def has_sufficient_storage(self, required_bytes: int = MIN_REQUIRED_SPACE_BYTES) -> bool:
        """Return True if the recordings directory has more than ``required_bytes`` free."""
        try:
            usage = shutil.disk_usage(self.ensure_directory())
            logger.debug(f"Available storage in {self.recordings_dir}: {usage.free} bytes. "
                         f"Required: {required_bytes} bytes.")
            return usage.free > required_bytes
        except OSError as e:
            logger.error(f"Failed to check available storage: {e}")
            return False

    def import_audio_file(self, source: Union[str, Path], title: Optional[str] = None) -> RecordingRecord:
        """Copy an audio file into the recordings directory and write its sidecar.

        Args:
            source: Path to the audio file to import
            title: Optional title; blank titles fall back to the file name

        Returns:
            RecordingRecord of the imported copy

        Raises:
            RecordingNotFoundError: If ``source`` does not exist
            UnsupportedFormatError: If ``source`` has an unsupported extension
            InsufficientStorageError: If there is not enough free space
            OSError: If the copy or the metadata write fails
        """
        source = Path(source)
        logger.info(f"Starting import for {source}, title: {title!r}")

        if not source.is_file():
            raise RecordingNotFoundError(f"File not found or is not a valid file: {source}")
        if not filename_codec.is_supported(source.name):
            raise UnsupportedFormatError(f"Unsupported file type: {source.name}")

        required = source.stat().st_size or MIN_REQUIRED_SPACE_BYTES
        if not self.has_sufficient_storage(required):
            raise InsufficientStorageError("Not enough storage space to save the recording.")

        _, extension = filename_codec.split_extension(source.name)
        destination = self.new_recording_path(extension)

        with open(source, "rb") as src, open(destination, "wb") as dst:
            shutil.copyfileobj(src, dst, COPY_BUFFER_SIZE)
        logger.debug(f"File copied to: {destination}")

        duration_millis = probe_duration_millis(self.probe, destination)
        timestamp_millis = filename_codec.parse(destination.name).timestamp_millis
        if timestamp_millis is None:
            timestamp_millis = int(datetime.now().timestamp() * 1000)

        final_title = title if title and title.strip() else filename_codec.humanize(destination.name)
        record = RecordingRecord(
            id=timestamp_millis,
            file_path=str(destination),
            file_name=destination.name,
            title=final_title,
            timestamp_millis=timestamp_millis,
            duration_millis=duration_millis,
        )

        if not self.sidecar_store.write_for_audio(record):
            logger.error(f"Failed to save initial metadata for imported file, removing {destination.name}")
            destination.unlink(missing_ok=True)
            raise OSError(f"Failed to save metadata for imported file: {destination.name}")

        logger.info(f"Imported {source.name} as {destination.name}")
        return record

    def get_storage_stats(self) -> Dict[str, Any]:
        """Get storage usage statistics.

        Returns:
            Dictionary with storage statistics
        """
        try:
            total_size = 0
            audio_files = 0
            sidecar_files = 0

            if self.recordings_dir.is_dir():
                for file_path in self.recordings_dir.iterdir():
                    if not file_path.is_file():
                        continue
                    total_size += file_path.stat().st_size
                    if filename_codec.is_supported(file_path.name):
                        audio_files += 1
                    elif file_path.suffix == filename_codec.SIDECAR_EXTENSION:
                        sidecar_files += 1

            return {
                "total_size_bytes": total_size,
                "total_size_mb": round(total_size / (1024 * 1024), 2),
                "audio_files": audio_files,
                "sidecar_files": sidecar_files,
                "recordings_directory": str(self.recordings_dir),
            }

        except OSError as e:
            logger.error(f"Error getting storage stats: {e}")
            return {}
