"""Unit tests for SidecarStore."""

import json
import pytest
from pathlib import Path
from unittest.mock import patch

from audiocatalog.errors import ErrorKind
from audiocatalog.models.recording import RecordingRecord, SidecarRecord
from audiocatalog.storage.sidecar_store import SidecarStore, recover_title, sidecar_path_for


def _record(recordings_dir: Path, title: str = "Lecture 1", duration: int = 61000) -> RecordingRecord:
    audio = recordings_dir / "Recording_2024-05-01_09-30-00.m4a"
    return RecordingRecord(
        id=42,
        file_path=str(audio),
        file_name=audio.name,
        title=title,
        timestamp_millis=1714555800000,
        duration_millis=duration,
    )


@pytest.mark.unit
class TestSidecarStore:
    """Test cases for SidecarStore."""

    def test_write_read_round_trip(self, recordings_dir):
        """Writing then reading preserves title and duration."""
        store = SidecarStore()
        record = _record(recordings_dir)

        assert store.write_for_audio(record) is True
        result = store.read_for_audio(record.file_path)

        assert result.ok
        assert result.error is None
        assert result.record.title == "Lecture 1"
        assert result.record.duration_millis == 61000
        assert result.record.id == 42

    def test_written_file_uses_camel_case_keys(self, recordings_dir):
        store = SidecarStore()
        record = _record(recordings_dir)

        store.write_for_audio(record)
        data = json.loads(sidecar_path_for(record.file_path).read_text())

        assert data["filePath"] == record.file_path
        assert data["fileName"] == record.file_name
        assert data["timestampMillis"] == record.timestamp_millis
        assert data["durationMillis"] == 61000

    def test_unknown_fields_are_ignored(self, recordings_dir):
        path = recordings_dir / "Recording_2024-05-01_09-30-00.json"
        path.write_text('{"id": 3, "title": "Kept", "remoteId": "abc", "durationMillis": 5}')

        result = SidecarStore().read(path)

        assert result.ok
        assert result.record.title == "Kept"
        assert result.record.duration_millis == 5

    def test_missing_sidecar(self, recordings_dir):
        result = SidecarStore().read(recordings_dir / "missing.json")

        assert not result.ok
        assert result.error is ErrorKind.FILE_NOT_FOUND
        assert result.title is None

    def test_malformed_sidecar_recovers_title(self, recordings_dir):
        """A corrupt sidecar still yields the title by text scan."""
        path = recordings_dir / "Recording_2024-05-01_09-30-00.json"
        path.write_text('{"id": 1, "title":"Physics 101", "durationMillis": ')

        result = SidecarStore().read(path)

        assert result.degraded
        assert result.error is ErrorKind.PARSE_DEGRADED
        assert result.degraded_title == "Physics 101"
        assert result.title == "Physics 101"
        assert result.record is None

    def test_malformed_sidecar_without_title(self, recordings_dir):
        path = recordings_dir / "Recording_2024-05-01_09-30-00.json"
        path.write_text("not json at all")

        result = SidecarStore().read(path)

        assert result.error is ErrorKind.PARSE_FAILED
        assert result.title is None

    def test_read_for_unsupported_audio(self, recordings_dir):
        result = SidecarStore().read_for_audio(recordings_dir / "notes.txt")

        assert result.error is ErrorKind.UNSUPPORTED_FORMAT

    def test_write_failure_returns_false(self, recordings_dir):
        """Write errors are reported, never raised."""
        store = SidecarStore()
        record = _record(recordings_dir)

        with patch.object(Path, "write_text", side_effect=PermissionError("read-only")):
            assert store.write_for_audio(record) is False

    def test_write_accepts_sidecar_record(self, recordings_dir):
        path = recordings_dir / "custom.json"
        sidecar = SidecarRecord(id=7, title="Direct", duration_millis=10)

        assert SidecarStore().write(path, sidecar) is True
        assert SidecarStore().read(path).record.title == "Direct"

    def test_truncated_sidecar_recovers_title(self, recordings_dir):
        """A sidecar cut short after its title still yields that title."""
        store = SidecarStore()
        record = _record(recordings_dir, title="Physics 101")
        path = sidecar_path_for(record.file_path)
        store.write(path, record)

        text = path.read_text()
        assert '"title":"Physics 101"' in text
        path.write_text(text[:text.index("Physics 101") + len("Physics 101") + 5])

        result = store.read(path)

        assert result.error is ErrorKind.PARSE_DEGRADED
        assert result.degraded_title == "Physics 101"


@pytest.mark.unit
class TestRecoverTitle:
    """Test cases for the fallback title scan."""

    def test_recovers_first_title(self):
        assert recover_title('garbage "title":"Chemistry" more') == "Chemistry"

    def test_unterminated_title(self):
        assert recover_title('{"title":"Chem') is None

    def test_marker_with_space_is_not_recognized(self):
        assert recover_title('{"title": "Spaced"') is None
