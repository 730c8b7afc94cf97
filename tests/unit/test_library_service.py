"""Unit tests for LibraryService."""

import pytest
from pathlib import Path

from audiocatalog.errors import RecordingNotFoundError, UnsupportedFormatError
from audiocatalog.services.library_service import LibraryService
from audiocatalog.storage.sidecar_store import SidecarStore, sidecar_path_for


@pytest.fixture
def library(test_config, fake_probe):
    service = LibraryService(test_config, probe=fake_probe)
    service.directory.ensure_directory()
    yield service
    service.shutdown()


def _audio(library, name="Recording_2024-05-01_09-30-00.m4a") -> Path:
    path = library.recordings_dir / name
    path.write_bytes(b"\x00" * 16)
    return path


@pytest.mark.unit
class TestLibraryService:
    """Test cases for the library facade."""

    def test_recordings_dir_under_data_directory(self, library, temp_data_dir):
        assert library.recordings_dir == Path(temp_data_dir).absolute() / "Recordings"

    def test_load_recordings(self, library):
        _audio(library, "Recording_2024-05-01_09-30-00.m4a")
        _audio(library, "Recording_2024-05-03_09-30-00.wav")
        _audio(library, "readme.txt")

        records = library.load_recordings()

        assert [r.file_name for r in records] == [
            "Recording_2024-05-03_09-30-00.wav",
            "Recording_2024-05-01_09-30-00.m4a",
        ]

    def test_submit_load_recordings(self, library):
        _audio(library)

        future = library.submit_load_recordings()

        assert len(future.result(timeout=5)) == 1

    def test_get_recording_errors(self, library):
        with pytest.raises(RecordingNotFoundError):
            library.get_recording(library.recordings_dir / "missing.m4a")

        other = library.recordings_dir / "notes.txt"
        other.write_text("x")
        with pytest.raises(UnsupportedFormatError):
            library.get_recording(other)

    def test_update_title_without_sidecar(self, library):
        """Renaming a recording with no sidecar synthesizes one."""
        audio = _audio(library)

        updated = library.update_title(audio, "  Thermodynamics  ")

        assert updated.title == "Thermodynamics"
        assert updated.duration_millis == 1500
        stored = SidecarStore().read(sidecar_path_for(audio))
        assert stored.record.title == "Thermodynamics"
        assert library.get_recording(audio).title == "Thermodynamics"

    def test_update_title_replaces_corrupt_sidecar(self, library):
        audio = _audio(library)
        sidecar_path_for(audio).write_text('{"title":"Old", broken')

        updated = library.update_title(audio, "New")

        assert updated.title == "New"
        assert SidecarStore().read(sidecar_path_for(audio)).ok

    def test_update_title_rejects_blank(self, library):
        with pytest.raises(ValueError):
            library.update_title(_audio(library), "   ")

    def test_submit_update_title_propagates_errors(self, library):
        future = library.submit_update_title(library.recordings_dir / "missing.m4a", "x")

        with pytest.raises(RecordingNotFoundError):
            future.result(timeout=5)

    def test_import_recording(self, library, tmp_path):
        source = tmp_path / "seminar.ogg"
        source.write_bytes(b"\x05" * 100)

        record = library.submit_import_recording(source, "Seminar").result(timeout=5)

        assert record.title == "Seminar"
        assert [r.id for r in library.load_recordings()] == [record.id]

    def test_delete_recordings(self, library):
        audio = _audio(library)
        library.update_title(audio, "Doomed")
        records = library.load_recordings()

        assert library.submit_delete_recordings(records).result(timeout=5) is True
        assert library.load_recordings() == []
        assert not sidecar_path_for(audio).exists()

    def test_delete_paths_handles_missing_audio(self, library):
        audio = _audio(library)
        library.update_title(audio, "Orphan")
        audio.unlink()

        assert library.delete_paths([audio]) is True
        assert not sidecar_path_for(audio).exists()

    def test_storage_stats(self, library):
        _audio(library)

        assert library.get_storage_stats()["audio_files"] == 1
