"""Parsing and formatting of the canonical ``Recording_<timestamp>.<ext>`` names."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "Recording_"
FILENAME_DATE_FORMAT = "%Y-%m-%d_%H-%M-%S"
SIDECAR_EXTENSION = ".json"
DEFAULT_AUDIO_EXTENSION = "m4a"
SUPPORTED_AUDIO_EXTENSIONS = frozenset({"m4a", "mp3", "wav", "aac", "ogg", "flac"})


@dataclass(frozen=True)
class ParsedFileName:
    """Pieces of an audio file name."""
    timestamp_millis: Optional[int]
    base_name: str
    extension: str

    @property
    def is_supported(self) -> bool:
        return self.extension.lower() in SUPPORTED_AUDIO_EXTENSIONS


def split_extension(file_name: str):
    """Split ``file_name`` into base name and extension (without the dot)."""
    base, dot, extension = file_name.rpartition(".")
    if not dot or not base:
        return file_name, ""
    return base, extension


def is_supported(file_name: str) -> bool:
    """Return True if the file name carries a supported audio extension."""
    _, extension = split_extension(file_name)
    return extension.lower() in SUPPORTED_AUDIO_EXTENSIONS


def parse(file_name: str) -> ParsedFileName:
    """Parse a recording file name.

    Args:
        file_name: Bare file name, e.g. ``Recording_2024-05-01_09-30-00.m4a``

    Returns:
        ParsedFileName; timestamp_millis is None when the name does not follow
        the canonical pattern
    """
    base_name, extension = split_extension(file_name)
    timestamp_millis = None

    if base_name.startswith(FILENAME_PREFIX):
        stamp = base_name[len(FILENAME_PREFIX):]
        try:
            parsed = datetime.strptime(stamp, FILENAME_DATE_FORMAT)
            timestamp_millis = int(parsed.timestamp() * 1000)
        except ValueError:
            logger.debug(f"Could not parse timestamp from filename: {file_name}")

    return ParsedFileName(timestamp_millis=timestamp_millis, base_name=base_name, extension=extension)


def format(timestamp: Union[datetime, int, float, None] = None,
           extension: str = DEFAULT_AUDIO_EXTENSION) -> str:
    """Build a canonical file name for ``timestamp`` (a datetime or epoch millis).

    Defaults to the current local time.
    """
    if timestamp is None:
        moment = datetime.now()
    elif isinstance(timestamp, datetime):
        moment = timestamp
    else:
        moment = datetime.fromtimestamp(timestamp / 1000)

    extension = extension.lstrip(".").lower() or DEFAULT_AUDIO_EXTENSION
    return f"{FILENAME_PREFIX}{moment.strftime(FILENAME_DATE_FORMAT)}.{extension}"


def humanize(file_name: str) -> str:
    """Derive a display title from a file name.

    The ``Recording_`` prefix and the extension are stripped and underscores
    become spaces. Canonical timestamp names render their time part with
    spaces as well: ``Recording_2024-05-01_09-30-00.m4a`` -> ``2024-05-01 09 30 00``.
    """
    parsed = parse(file_name)
    base_name = parsed.base_name
    stem = base_name[len(FILENAME_PREFIX):] if base_name.startswith(FILENAME_PREFIX) else base_name

    if parsed.timestamp_millis is not None:
        date_part, _, time_part = stem.partition("_")
        return f"{date_part} {time_part.replace('-', ' ')}"

    return stem.replace("_", " ").strip() or file_name


def sidecar_name(file_name: str) -> Optional[str]:
    """Return the sidecar file name for an audio file, or None if unsupported."""
    base_name, extension = split_extension(file_name)
    if extension.lower() not in SUPPORTED_AUDIO_EXTENSIONS:
        return None
    return f"{base_name}{SIDECAR_EXTENSION}"
