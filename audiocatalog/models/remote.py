"""Server-side DTOs returned by the recordings API."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ServerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ServerTimestamp(_ServerModel):
    seconds: Optional[int] = None
    nanos: Optional[int] = None


class ServerRecord(_ServerModel):
    """Metadata the server keeps about an uploaded recording."""
    id: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")
    file_name: Optional[str] = Field(default=None, alias="fileName")
    file_size: Optional[int] = Field(default=None, alias="fileSize")
    content_type: Optional[str] = Field(default=None, alias="contentType")
    title: Optional[str] = None
    description: Optional[str] = None
    nhost_file_id: Optional[str] = Field(default=None, alias="nhostFileId")
    storage_url: Optional[str] = Field(default=None, alias="storageUrl")
    upload_timestamp: Optional[ServerTimestamp] = Field(default=None, alias="uploadTimestamp")


class GlossaryItem(_ServerModel):
    term: Optional[str] = None
    definition: Optional[str] = None


class SummaryRecord(_ServerModel):
    """AI summary generated for an uploaded recording."""
    summary_id: Optional[str] = Field(default=None, alias="summaryId")
    recording_id: Optional[str] = Field(default=None, alias="recordingId")
    key_points: Optional[List[str]] = Field(default=None, alias="keyPoints")
    topics: Optional[List[str]] = None
    glossary: Optional[List[GlossaryItem]] = None
    formatted_summary_text: Optional[str] = Field(default=None, alias="formattedSummaryText")
    created_at: Optional[str] = Field(default=None, alias="createdAt")


class RecommendationRecord(_ServerModel):
    """Learning resource (a video) recommended for an uploaded recording."""
    recommendation_id: Optional[str] = Field(default=None, alias="recommendationId")
    video_id: Optional[str] = Field(default=None, alias="videoId")
    title: Optional[str] = None
    description_snippet: Optional[str] = Field(default=None, alias="descriptionSnippet")
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailUrl")
    recording_id: Optional[str] = Field(default=None, alias="recordingId")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
