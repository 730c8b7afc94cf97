"""Media duration probing with guaranteed handle release."""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

import mutagen

logger = logging.getLogger(__name__)


class ProbeHandle(ABC):
    """An open probe on a single media file."""

    @abstractmethod
    def duration_millis(self) -> int:
        """Return the media duration in milliseconds."""
        pass

    @abstractmethod
    def release(self) -> None:
        """Release any resources held by the handle."""
        pass


class AbstractMediaProbe(ABC):
    """Opens probe handles on media files."""

    @abstractmethod
    def open(self, path: Union[str, Path]) -> ProbeHandle:
        """Open a handle on ``path``; may raise."""
        pass


class MutagenProbeHandle(ProbeHandle):
    """Probe handle backed by mutagen reading from a file object we own."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._fileobj = open(self.path, "rb")
        self._media: Optional[mutagen.FileType] = None

    def duration_millis(self) -> int:
        if self._media is None:
            self._media = mutagen.File(self._fileobj)
        if self._media is None or self._media.info is None:
            logger.debug(f"mutagen could not identify media type of {self.path.name}")
            return 0
        length = getattr(self._media.info, "length", 0) or 0
        return max(0, int(length * 1000))

    def release(self) -> None:
        if not self._fileobj.closed:
            self._fileobj.close()


class MutagenMediaProbe(AbstractMediaProbe):
    """Default probe; supports every container mutagen recognizes."""

    def open(self, path: Union[str, Path]) -> ProbeHandle:
        return MutagenProbeHandle(path)


@contextmanager
def opened_probe(probe: AbstractMediaProbe, path: Union[str, Path]) -> Iterator[ProbeHandle]:
    """Open a probe handle and release it on every exit path."""
    handle = probe.open(path)
    try:
        yield handle
    finally:
        try:
            handle.release()
        except Exception as e:
            logger.error(f"Error releasing media probe for {Path(path).name}: {e}")


def probe_duration_millis(probe: AbstractMediaProbe, path: Union[str, Path]) -> int:
    """Best-effort duration of ``path`` in milliseconds; 0 on any failure."""
    try:
        with opened_probe(probe, path) as handle:
            return max(0, int(handle.duration_millis()))
    except Exception as e:
        logger.error(f"Failed to get duration for file {Path(path).name}: {e}")
        return 0
