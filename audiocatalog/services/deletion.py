"""Deletion of recordings together with their metadata sidecars."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..models.recording import RecordingRecord
from ..storage.sidecar_store import sidecar_path_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionOutcome:
    """Per-artifact result of deleting one recording."""
    audio_deleted: bool
    sidecar_deleted: bool

    @property
    def succeeded(self) -> bool:
        return self.audio_deleted and self.sidecar_deleted


class DeletionCoordinator:
    """Deletes an audio file and its sidecar as a unit.

    The audio file is always handled first and the sidecar is only touched
    once the audio is gone. If the sidecar delete then fails the audio is not
    restored, leaving an orphan sidecar that the next scan ignores.
    """

    def delete_pair(self, record: RecordingRecord) -> DeletionOutcome:
        """Delete the audio file and sidecar of ``record``, reporting each step."""
        audio_path = Path(record.file_path)

        if not audio_path.exists():
            logger.warning(f"Audio file not found for deletion (considered success): {audio_path}")
        else:
            try:
                os.remove(audio_path)
                logger.info(f"Deleted audio file: {record.file_name}")
            except FileNotFoundError:
                logger.warning(f"Audio file vanished before deletion: {audio_path}")
            except OSError as e:
                logger.error(f"Failed to delete audio file {record.file_name}: {e}")
                return DeletionOutcome(audio_deleted=False, sidecar_deleted=False)

        sidecar_path = sidecar_path_for(audio_path)
        if sidecar_path is None:
            logger.debug(f"No metadata file can exist for unsupported file: {audio_path.name}")
            return DeletionOutcome(audio_deleted=True, sidecar_deleted=True)

        if not sidecar_path.exists():
            logger.debug(f"Metadata file not found (considered success): {sidecar_path.name}")
            return DeletionOutcome(audio_deleted=True, sidecar_deleted=True)

        try:
            os.remove(sidecar_path)
            logger.info(f"Deleted metadata file: {sidecar_path.name}")
            return DeletionOutcome(audio_deleted=True, sidecar_deleted=True)
        except OSError as e:
            logger.error(f"Failed to delete metadata file {sidecar_path.name}, "
                         f"it is now orphaned: {e}")
            return DeletionOutcome(audio_deleted=True, sidecar_deleted=False)

    def delete_one(self, record: RecordingRecord) -> bool:
        """Delete one recording.

        Returns:
            True only if both the audio file and its sidecar are gone
        """
        return self.delete_pair(record).succeeded

    def delete_many(self, records: Iterable[RecordingRecord]) -> bool:
        """Delete each recording independently.

        A failure on one record does not stop the others.

        Returns:
            True if every record was fully deleted
        """
        records = list(records)
        logger.info(f"Attempting to batch delete {len(records)} recordings")
        all_succeeded = True
        for record in records:
            if not self.delete_one(record):
                logger.warning(f"Batch delete failed for: {record.file_path}")
                all_succeeded = False
        logger.info(f"Batch delete finished. Overall success: {all_succeeded}")
        return all_succeeded
