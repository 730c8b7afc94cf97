"""Unit tests for DeletionCoordinator."""

import os
import pytest
from pathlib import Path
from unittest.mock import patch

from audiocatalog.models.recording import RecordingRecord
from audiocatalog.services.deletion import DeletionCoordinator


def _record(path: Path) -> RecordingRecord:
    return RecordingRecord(id=1, file_path=str(path), file_name=path.name, title="t", timestamp_millis=1)


def _pair(directory: Path, stamp: str):
    audio = directory / f"Recording_{stamp}.m4a"
    sidecar = directory / f"Recording_{stamp}.json"
    audio.write_bytes(b"\x00")
    sidecar.write_text('{"title":"x"}')
    return audio, sidecar


def _failing_remove(*failing):
    """os.remove replacement that raises for the given paths."""
    real_remove = os.remove
    failing = {str(path) for path in failing}

    def remove(path):
        if str(path) in failing:
            raise PermissionError(13, "Permission denied", str(path))
        real_remove(path)

    return remove


@pytest.mark.unit
class TestDeletionCoordinator:
    """Test cases for paired audio and sidecar deletion."""

    def test_deletes_audio_and_sidecar(self, recordings_dir):
        audio, sidecar = _pair(recordings_dir, "2024-05-01_09-30-00")

        assert DeletionCoordinator().delete_one(_record(audio)) is True
        assert not audio.exists()
        assert not sidecar.exists()

    def test_missing_audio_with_sidecar(self, recordings_dir):
        """Missing audio counts as deleted and the sidecar is still removed."""
        audio, sidecar = _pair(recordings_dir, "2024-05-01_09-30-00")
        audio.unlink()

        assert DeletionCoordinator().delete_one(_record(audio)) is True
        assert not sidecar.exists()

    def test_missing_sidecar_is_success(self, recordings_dir):
        audio, sidecar = _pair(recordings_dir, "2024-05-01_09-30-00")
        sidecar.unlink()

        assert DeletionCoordinator().delete_one(_record(audio)) is True
        assert not audio.exists()

    def test_audio_failure_leaves_sidecar(self, recordings_dir):
        audio, sidecar = _pair(recordings_dir, "2024-05-01_09-30-00")

        with patch("audiocatalog.services.deletion.os.remove", side_effect=_failing_remove(audio)):
            outcome = DeletionCoordinator().delete_pair(_record(audio))

        assert not outcome.succeeded
        assert not outcome.audio_deleted
        assert audio.exists()
        assert sidecar.exists()

    def test_sidecar_failure_is_not_rolled_back(self, recordings_dir):
        audio, sidecar = _pair(recordings_dir, "2024-05-01_09-30-00")

        with patch("audiocatalog.services.deletion.os.remove", side_effect=_failing_remove(sidecar)):
            outcome = DeletionCoordinator().delete_pair(_record(audio))

        assert outcome.audio_deleted
        assert not outcome.sidecar_deleted
        assert not outcome.succeeded
        assert not audio.exists()
        assert sidecar.exists()

    def test_delete_many_continues_after_failure(self, recordings_dir):
        """A failing record degrades the result but the others are still removed."""
        audio_a, sidecar_a = _pair(recordings_dir, "2024-05-01_09-30-00")
        audio_b, sidecar_b = _pair(recordings_dir, "2024-05-02_09-30-00")

        with patch("audiocatalog.services.deletion.os.remove", side_effect=_failing_remove(audio_a)):
            result = DeletionCoordinator().delete_many([_record(audio_a), _record(audio_b)])

        assert result is False
        assert audio_a.exists()
        assert sidecar_a.exists()
        assert not audio_b.exists()
        assert not sidecar_b.exists()

    def test_delete_many_all_succeed(self, recordings_dir):
        records = [_record(_pair(recordings_dir, stamp)[0])
                   for stamp in ("2024-05-01_09-30-00", "2024-05-02_09-30-00")]

        assert DeletionCoordinator().delete_many(records) is True
        assert list(recordings_dir.iterdir()) == []

    def test_delete_many_empty(self):
        assert DeletionCoordinator().delete_many([]) is True

    def test_unsupported_file_has_no_sidecar(self, recordings_dir):
        """Files without a recognized extension have no metadata file to remove."""
        notes = recordings_dir / "notes.txt"
        notes.write_text("not audio")

        outcome = DeletionCoordinator().delete_pair(_record(notes))

        assert outcome.audio_deleted
        assert outcome.sidecar_deleted
        assert outcome.succeeded
        assert not notes.exists()
