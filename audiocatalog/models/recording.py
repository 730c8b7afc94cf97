"""Recording data models: the canonical catalog record and its JSON sidecar twin."""

from dataclasses import dataclass, replace
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class RecordingRecord:
    """Canonical view of one local recording, rebuilt on every scan."""
    id: int
    file_path: str
    file_name: str
    title: str
    timestamp_millis: int
    duration_millis: int = 0

    def with_title(self, title: str) -> "RecordingRecord":
        return replace(self, title=title)

    def to_sidecar(self) -> "SidecarRecord":
        return SidecarRecord(
            id=self.id,
            file_path=self.file_path,
            file_name=self.file_name,
            title=self.title,
            timestamp_millis=self.timestamp_millis,
            duration_millis=self.duration_millis,
        )


class SidecarRecord(BaseModel):
    """JSON metadata stored next to an audio file.

    Field aliases are the on-disk names and must not change, older app
    versions read and write the same file.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = 0
    file_path: str = Field(default="", alias="filePath")
    file_name: str = Field(default="", alias="fileName")
    title: Optional[str] = None
    timestamp_millis: int = Field(default=0, alias="timestampMillis")
    duration_millis: int = Field(default=0, alias="durationMillis")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
