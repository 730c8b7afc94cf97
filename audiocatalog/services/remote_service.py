"""Remote recordings service: fetch and delete server-side recordings."""

import asyncio
import logging
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError

from ..errors import ClassifiedError, ErrorKind, RemoteApiError, classify_failure
from ..models.remote import RecommendationRecord, ServerRecord, SummaryRecord
from ..upload.transport import AbstractTransport, TransportResponse

logger = logging.getLogger(__name__)

METADATA_PATH = "/api/audio/metadata"
RECORDING_PATH = "/api/recordings/{recording_id}"
SUMMARY_PATH = "/api/recordings/{recording_id}/summary"
RECOMMENDATIONS_PATH = "/api/v1/recommendations/recording/{recording_id}"

_RECORD_LIST = TypeAdapter(List[ServerRecord])
_RECOMMENDATION_LIST = TypeAdapter(List[RecommendationRecord])


class RemoteRecordingsService:
    """Blocking client for the server's recording endpoints.

    Each call runs its request on a fresh event loop, so the service can be
    used from plain threads (the CLI, the library worker pool). Any failure
    is raised as RemoteApiError carrying the classified error.
    """

    def __init__(self, transport: AbstractTransport):
        """Initialize remote service.

        Args:
            transport: Transport that performs the HTTP calls
        """
        self.transport = transport
        logger.info("RemoteRecordingsService initialized")

    def _call(self, method: str, path: str) -> TransportResponse:
        try:
            response = asyncio.run(self.transport.request(method, path))
        except Exception as e:
            error = classify_failure(exc=e)
            logger.error(f"{method} {path} failed: {error.message}")
            raise RemoteApiError(error) from e

        if not response.ok:
            error = classify_failure(status=response.status, body=response.body)
            logger.error(f"{method} {path} failed with HTTP {response.status}: {response.body}")
            raise RemoteApiError(error)
        return response

    @staticmethod
    def _parse(adapter_or_model: Any, body: str, what: str) -> Any:
        try:
            if isinstance(adapter_or_model, TypeAdapter):
                return adapter_or_model.validate_json(body)
            return adapter_or_model.model_validate_json(body)
        except ValidationError as e:
            logger.error(f"Could not parse {what} response: {e.error_count()} error(s)")
            raise RemoteApiError(ClassifiedError(ErrorKind.UNEXPECTED,
                                                 f"Invalid {what} response from server"))

    def list_recordings(self) -> List[ServerRecord]:
        """Fetch metadata of every uploaded recording.

        Returns:
            Server records; empty if the server returned no body
        """
        logger.debug("Fetching cloud recordings metadata")
        response = self._call("GET", METADATA_PATH)
        if not response.body.strip():
            return []
        records = self._parse(_RECORD_LIST, response.body, "recordings list")
        logger.info(f"Fetched {len(records)} cloud recordings")
        return records

    def get_recording(self, recording_id: str) -> ServerRecord:
        response = self._call("GET", RECORDING_PATH.format(recording_id=recording_id))
        return self._parse(ServerRecord, response.body, "recording")

    def delete_recording(self, recording_id: str) -> None:
        """Delete an uploaded recording's metadata on the server."""
        self._call("DELETE", f"{METADATA_PATH}/{recording_id}")
        logger.info(f"Deleted cloud recording {recording_id}")

    def get_summary(self, recording_id: str) -> Optional[SummaryRecord]:
        """Fetch the AI summary of a recording; None if the server sent no body."""
        response = self._call("GET", SUMMARY_PATH.format(recording_id=recording_id))
        if not response.body.strip():
            return None
        return self._parse(SummaryRecord, response.body, "summary")

    def get_recommendations(self, recording_id: str) -> List[RecommendationRecord]:
        response = self._call("GET", RECOMMENDATIONS_PATH.format(recording_id=recording_id))
        if not response.body.strip():
            return []
        return self._parse(_RECOMMENDATION_LIST, response.body, "recommendations")
