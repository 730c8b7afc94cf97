"""Reading and writing of the JSON metadata sidecar paired with an audio file."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from ..errors import ErrorKind
from ..models.recording import RecordingRecord, SidecarRecord
from . import filename_codec

logger = logging.getLogger(__name__)

TITLE_MARKER = '"title":"'


@dataclass(frozen=True)
class SidecarReadResult:
    """Outcome of reading a sidecar.

    Exactly one of these holds:
    - ``record`` is set (well-formed sidecar, ``error`` is None);
    - ``degraded_title`` is set (corrupt sidecar, ``error`` is PARSE_DEGRADED);
    - neither is set (``error`` is FILE_NOT_FOUND or PARSE_FAILED).
    """
    record: Optional[SidecarRecord] = None
    degraded_title: Optional[str] = None
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @property
    def degraded(self) -> bool:
        return self.error is ErrorKind.PARSE_DEGRADED

    @property
    def title(self) -> Optional[str]:
        if self.record is not None:
            return self.record.title
        return self.degraded_title


def sidecar_path_for(audio_path: Union[str, Path]) -> Optional[Path]:
    """Return the sidecar path for an audio file, or None if the name is unsupported."""
    audio_path = Path(audio_path)
    name = filename_codec.sidecar_name(audio_path.name)
    if name is None:
        return None
    return audio_path.with_name(name)


def recover_title(raw_text: str) -> Optional[str]:
    """Pull a title out of malformed sidecar text by plain string search."""
    start = raw_text.find(TITLE_MARKER)
    if start == -1:
        return None
    start += len(TITLE_MARKER)
    end = raw_text.find('"', start)
    if end == -1:
        return None
    return raw_text[start:end]


class SidecarStore:
    """Reads and writes sidecar files; never raises on I/O or parse failure."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def read(self, path: Union[str, Path]) -> SidecarReadResult:
        """Read and parse the sidecar at ``path``.

        Args:
            path: Sidecar file path

        Returns:
            SidecarReadResult describing a full, degraded or failed parse
        """
        path = Path(path)
        if not path.is_file():
            return SidecarReadResult(error=ErrorKind.FILE_NOT_FOUND)

        try:
            raw_text = path.read_text(encoding=self.encoding, errors="replace")
        except OSError as e:
            logger.error(f"Failed to read metadata file {path.name}: {e}")
            return SidecarReadResult(error=ErrorKind.PARSE_FAILED)

        try:
            record = SidecarRecord.model_validate_json(raw_text)
            logger.debug(f"Parsed metadata from {path.name}")
            return SidecarReadResult(record=record)
        except ValidationError as e:
            logger.warning(f"Failed to parse metadata file {path.name}: {e.error_count()} error(s)")

        title = recover_title(raw_text)
        if title:
            logger.warning(f"Recovered title from {path.name} using fallback text scan")
            return SidecarReadResult(degraded_title=title, error=ErrorKind.PARSE_DEGRADED)

        logger.error(f"Fallback title scan also failed for {path.name}")
        return SidecarReadResult(error=ErrorKind.PARSE_FAILED)

    def read_for_audio(self, audio_path: Union[str, Path]) -> SidecarReadResult:
        """Read the sidecar paired with ``audio_path``."""
        sidecar_path = sidecar_path_for(audio_path)
        if sidecar_path is None:
            return SidecarReadResult(error=ErrorKind.UNSUPPORTED_FORMAT)
        return self.read(sidecar_path)

    def write(self, path: Union[str, Path], record: Union[SidecarRecord, RecordingRecord]) -> bool:
        """Serialize ``record`` and overwrite the sidecar at ``path``.

        Returns:
            True if the file was written, False otherwise
        """
        path = Path(path)
        if isinstance(record, RecordingRecord):
            record = record.to_sidecar()

        try:
            path.write_text(record.to_json(), encoding=self.encoding)
            logger.info(f"Saved metadata to {path.name}")
            return True
        except PermissionError as e:
            logger.error(f"Permission denied saving metadata to {path.name}: {e}")
        except OSError as e:
            logger.error(f"I/O error saving metadata to {path.name}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error saving metadata to {path.name}: {e}")
        return False

    def write_for_audio(self, record: RecordingRecord) -> bool:
        """Write the sidecar paired with ``record.file_path``."""
        sidecar_path = sidecar_path_for(record.file_path)
        if sidecar_path is None:
            logger.error(f"Could not determine metadata file path for audio: {record.file_path}")
            return False
        return self.write(sidecar_path, record)
