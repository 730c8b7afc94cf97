"""Upload session events.

An upload produces exactly one ``Loading``, then any number of ``Progress``
events, then exactly one terminal event (``Success`` or ``Error``).
"""

from dataclasses import dataclass
from typing import Optional, Union

from ..errors import ClassifiedError
from .remote import ServerRecord


@dataclass(frozen=True)
class Loading:
    """The upload has been accepted and is starting."""

    is_terminal = False


@dataclass(frozen=True)
class Progress:
    """Percentage of the primary file written to the request body (0-100)."""
    percent: int

    is_terminal = False


@dataclass(frozen=True)
class Success:
    """Server accepted the upload; record is None when the body was empty or unparseable."""
    record: Optional[ServerRecord] = None

    is_terminal = True


@dataclass(frozen=True)
class Error:
    """Upload failed; error holds the classified failure."""
    error: ClassifiedError

    is_terminal = True

    @property
    def message(self) -> str:
        return self.error.message


UploadEvent = Union[Loading, Progress, Success, Error]
