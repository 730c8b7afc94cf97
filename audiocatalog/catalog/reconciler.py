"""Reconciliation of an audio file and its sidecar into one canonical record."""

import logging
from pathlib import Path
from typing import Optional, Union

from ..errors import ErrorKind
from ..models.recording import RecordingRecord
from ..storage import filename_codec
from ..storage.sidecar_store import SidecarReadResult, SidecarStore
from .probe import AbstractMediaProbe, MutagenMediaProbe, probe_duration_millis

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Builds a RecordingRecord using a fixed fallback precedence.

    - timestamp: parsed from the file name, else the file's mtime
    - title: sidecar title, else degraded title from a corrupt sidecar,
      else the humanized file name
    - duration: sidecar duration if positive, else a fresh probe
    - id: always the timestamp, so a copied or stale sidecar cannot
      lend its id to another file
    """

    def __init__(self,
                 sidecar_store: Optional[SidecarStore] = None,
                 probe: Optional[AbstractMediaProbe] = None):
        self.sidecar_store = sidecar_store or SidecarStore()
        self.probe = probe or MutagenMediaProbe()

    def reconcile(self,
                  audio_path: Union[str, Path],
                  sidecar: Optional[SidecarReadResult] = None) -> RecordingRecord:
        """Produce the canonical record for ``audio_path``.

        Args:
            audio_path: Path of the audio file; must exist
            sidecar: Already-read sidecar result; read from disk when omitted

        Returns:
            RecordingRecord for the file

        Raises:
            OSError: If the audio file cannot be stat'ed
        """
        audio_path = Path(audio_path)
        file_name = audio_path.name
        parsed = filename_codec.parse(file_name)

        timestamp_millis = parsed.timestamp_millis
        if timestamp_millis is None:
            timestamp_millis = int(audio_path.stat().st_mtime * 1000)

        if sidecar is None:
            sidecar = self.sidecar_store.read_for_audio(audio_path)

        stored = sidecar.record
        if sidecar.error is ErrorKind.PARSE_FAILED:
            logger.warning(f"Metadata for {file_name} is unreadable, synthesizing from filename")

        title = self._pick_title(file_name, sidecar)

        if stored is not None and stored.duration_millis > 0:
            duration_millis = stored.duration_millis
        else:
            duration_millis = probe_duration_millis(self.probe, audio_path)

        return RecordingRecord(
            id=timestamp_millis,
            file_path=str(audio_path),
            file_name=file_name,
            title=title,
            timestamp_millis=timestamp_millis,
            duration_millis=max(0, duration_millis),
        )

    @staticmethod
    def _pick_title(file_name: str, sidecar: SidecarReadResult) -> str:
        if sidecar.record is not None and sidecar.record.title and sidecar.record.title.strip():
            return sidecar.record.title
        if sidecar.degraded_title and sidecar.degraded_title.strip():
            return sidecar.degraded_title
        return filename_codec.humanize(file_name)
