"""Upload of recordings to the summarization server."""

from .progress import ProgressTracker, UNKNOWN_SIZE
from .transport import (
    AbstractTransport,
    HttpTransport,
    MultipartPart,
    MultipartRequest,
    TransportResponse,
    UPLOAD_PATH,
)
from .session import UploadSession
from .publisher import UploadPublisher
from .pipeline import UploadPipeline, resolve_content_type

__all__ = [
    "ProgressTracker",
    "UNKNOWN_SIZE",
    "AbstractTransport",
    "HttpTransport",
    "MultipartPart",
    "MultipartRequest",
    "TransportResponse",
    "UPLOAD_PATH",
    "UploadSession",
    "UploadPublisher",
    "UploadPipeline",
    "resolve_content_type",
]
