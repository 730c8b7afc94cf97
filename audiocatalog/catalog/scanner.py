"""Directory scanning that turns audio/sidecar pairs into a sorted catalog."""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..models.recording import RecordingRecord
from ..storage import filename_codec
from .reconciler import ReconciliationEngine

logger = logging.getLogger(__name__)


class CatalogScanner:
    """Lists a recordings directory and reconciles every supported audio file."""

    def __init__(self, reconciler: Optional[ReconciliationEngine] = None):
        self.reconciler = reconciler or ReconciliationEngine()

    def scan(self, directory: Union[str, Path]) -> List[RecordingRecord]:
        """Scan ``directory`` for recordings.

        Files with unsupported extensions are ignored. A file that fails to
        reconcile is logged and skipped; it never aborts the scan.

        Args:
            directory: Recordings directory

        Returns:
            Records sorted by timestamp, newest first; empty if the directory
            is missing or not a directory
        """
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning(f"Recordings directory not found or invalid: {directory}")
            return []

        try:
            candidates = [
                path for path in directory.iterdir()
                if filename_codec.is_supported(path.name) and path.is_file()
            ]
        except OSError as e:
            logger.error(f"Error listing recordings directory {directory}: {e}")
            return []

        logger.debug(f"Found {len(candidates)} potential recording audio files in {directory}")

        records = []
        for path in candidates:
            try:
                records.append(self.reconciler.reconcile(path))
            except Exception as e:
                logger.error(f"Error processing file in list: {path.name}: {e}", exc_info=True)

        records.sort(key=lambda record: record.timestamp_millis, reverse=True)
        logger.debug(f"Scanned {len(records)} recordings from {directory}")
        return records
