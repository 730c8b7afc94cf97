"""Data models for the audiocatalog package."""

from .recording import RecordingRecord, SidecarRecord
from .remote import (
    ServerRecord,
    ServerTimestamp,
    SummaryRecord,
    GlossaryItem,
    RecommendationRecord,
)
from .upload import Loading, Progress, Success, Error, UploadEvent

__all__ = [
    "RecordingRecord",
    "SidecarRecord",
    # Server DTOs
    "ServerRecord",
    "ServerTimestamp",
    "SummaryRecord",
    "GlossaryItem",
    "RecommendationRecord",
    # Upload events
    "Loading",
    "Progress",
    "Success",
    "Error",
    "UploadEvent",
]
