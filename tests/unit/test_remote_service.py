"""Unit tests for RemoteRecordingsService."""

import json
import pytest
import aiohttp

from audiocatalog.errors import ErrorKind, RemoteApiError
from audiocatalog.services.remote_service import RemoteRecordingsService


RECORDS = [
    {"id": "r1", "title": "Lecture 1", "fileName": "a.m4a", "fileSize": 10,
     "uploadTimestamp": {"seconds": 1714555800, "nanos": 0}},
    {"id": "r2", "title": "Lecture 2", "storageUrl": "https://cdn.example/r2", "extra": True},
]

SUMMARY = {
    "summaryId": "s1",
    "recordingId": "r1",
    "keyPoints": ["Entropy increases"],
    "topics": ["Thermodynamics"],
    "glossary": [{"term": "Entropy", "definition": "Disorder"}],
    "formattedSummaryText": "# Summary",
}

RECOMMENDATIONS = [
    {"recommendationId": "v1", "videoId": "yt1", "title": "Entropy explained", "recordingId": "r1"},
]


@pytest.mark.unit
class TestRemoteRecordingsService:
    """Test cases for remote fetch and delete calls."""

    def test_list_recordings(self, make_transport):
        transport = make_transport(status=200, body=json.dumps(RECORDS))

        records = RemoteRecordingsService(transport).list_recordings()

        assert transport.calls == [("GET", "/api/audio/metadata")]
        assert [r.id for r in records] == ["r1", "r2"]
        assert records[0].upload_timestamp.seconds == 1714555800
        assert records[1].storage_url == "https://cdn.example/r2"

    def test_list_recordings_empty_body(self, make_transport):
        assert RemoteRecordingsService(make_transport(status=200, body="")).list_recordings() == []

    def test_get_recording(self, make_transport):
        transport = make_transport(status=200, body=json.dumps(RECORDS[0]))

        record = RemoteRecordingsService(transport).get_recording("r1")

        assert transport.calls == [("GET", "/api/recordings/r1")]
        assert record.file_name == "a.m4a"

    def test_delete_recording(self, make_transport):
        transport = make_transport(status=204)

        RemoteRecordingsService(transport).delete_recording("r1")

        assert transport.calls == [("DELETE", "/api/audio/metadata/r1")]

    def test_get_summary(self, make_transport):
        transport = make_transport(status=200, body=json.dumps(SUMMARY))

        summary = RemoteRecordingsService(transport).get_summary("r1")

        assert transport.calls == [("GET", "/api/recordings/r1/summary")]
        assert summary.key_points == ["Entropy increases"]
        assert summary.glossary[0].term == "Entropy"

    def test_get_recommendations(self, make_transport):
        transport = make_transport(status=200, body=json.dumps(RECOMMENDATIONS))

        recommendations = RemoteRecordingsService(transport).get_recommendations("r1")

        assert transport.calls == [("GET", "/api/v1/recommendations/recording/r1")]
        assert recommendations[0].video_id == "yt1"

    def test_http_error_raises_classified(self, make_transport):
        service = RemoteRecordingsService(make_transport(status=401, body="expired"))

        with pytest.raises(RemoteApiError) as exc_info:
            service.list_recordings()

        assert exc_info.value.kind is ErrorKind.HTTP_CLIENT_ERROR
        assert exc_info.value.status == 401
        assert str(exc_info.value) == "Unauthenticated, please sign in again"

    def test_network_error_raises_classified(self, make_transport):
        service = RemoteRecordingsService(make_transport(error=aiohttp.ClientConnectionError("down")))

        with pytest.raises(RemoteApiError) as exc_info:
            service.delete_recording("r1")

        assert exc_info.value.kind is ErrorKind.NETWORK_UNREACHABLE

    def test_invalid_body_raises_unexpected(self, make_transport):
        service = RemoteRecordingsService(make_transport(status=200, body="{not json"))

        with pytest.raises(RemoteApiError) as exc_info:
            service.get_recording("r1")

        assert exc_info.value.kind is ErrorKind.UNEXPECTED
