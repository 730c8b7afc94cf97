"""Pytest configuration and fixtures for audiocatalog tests."""

import pytest
import tempfile
import logging
import wave
from pathlib import Path
from typing import List, Union
from unittest.mock import Mock

from audiocatalog.catalog.probe import AbstractMediaProbe, ProbeHandle
from audiocatalog.config import CatalogConfig
from audiocatalog.upload.transport import AbstractTransport, MultipartRequest, TransportResponse


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network or hardware")
    config.addinivalue_line("markers", "integration: tests that talk to a local HTTP server")


class FakeProbeHandle(ProbeHandle):
    """Probe handle that records whether it was released."""

    def __init__(self, duration: int = 0, error: Exception = None):
        self.duration = duration
        self.error = error
        self.released = False

    def duration_millis(self) -> int:
        if self.error is not None:
            raise self.error
        return self.duration

    def release(self) -> None:
        self.released = True


class FakeProbe(AbstractMediaProbe):
    """Media probe returning a fixed duration and tracking opened handles."""

    def __init__(self, duration: int = 0, error: Exception = None, open_error: Exception = None):
        self.duration = duration
        self.error = error
        self.open_error = open_error
        self.handles: List[FakeProbeHandle] = []

    def open(self, path: Union[str, Path]) -> ProbeHandle:
        if self.open_error is not None:
            raise self.open_error
        handle = FakeProbeHandle(self.duration, self.error)
        self.handles.append(handle)
        return handle


class FakeTransport(AbstractTransport):
    """Transport that drains multipart bodies locally and returns canned responses."""

    def __init__(self, status: int = 200, body: str = "", error: Exception = None):
        self.status = status
        self.body = body
        self.error = error
        self.requests: List[MultipartRequest] = []
        self.received = {}
        self.calls = []

    async def send_multipart(self, request: MultipartRequest) -> TransportResponse:
        self.requests.append(request)
        for part in request.parts:
            if part.is_file:
                data = b""
                async for chunk in part.body:
                    data += chunk
                self.received[part.name] = data
            else:
                self.received[part.name] = part.body
        if self.error is not None:
            raise self.error
        return TransportResponse(status=self.status, body=self.body)

    async def request(self, method: str, path: str) -> TransportResponse:
        self.calls.append((method, path))
        if self.error is not None:
            raise self.error
        return TransportResponse(status=self.status, body=self.body)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def recordings_dir(temp_data_dir):
    """Recordings directory inside the temporary data directory."""
    path = Path(temp_data_dir) / "Recordings"
    path.mkdir()
    return path


@pytest.fixture
def fake_probe():
    return FakeProbe(duration=1500)


@pytest.fixture
def make_probe():
    """Factory for FakeProbe instances with custom behavior."""
    return FakeProbe


@pytest.fixture
def make_transport():
    """Factory for FakeTransport instances with canned responses."""
    return FakeTransport


@pytest.fixture
def test_config(temp_data_dir):
    """Configuration rooted at the temporary data directory."""
    return CatalogConfig.from_mapping({
        "storage": {"data_directory": temp_data_dir},
        "server": {"base_url": "http://localhost:8080", "auth_token": "test-token"},
        "workers": {"io_threads": 1},
        "logging": {"file_path": str(Path(temp_data_dir) / "logs" / "test.log")},
    })


@pytest.fixture
def sample_wav_file(temp_data_dir):
    """Create a one second 16kHz mono WAV file."""
    file_path = Path(temp_data_dir) / "Recording_2024-05-01_09-30-00.wav"

    with wave.open(str(file_path), 'wb') as wf:
        wf.setnchannels(1)  # Mono
        wf.setsampwidth(2)  # 16-bit
        wf.setframerate(16000)  # 16kHz
        wf.writeframes(b'\x00\x00' * 16000)

    return file_path


@pytest.fixture
def mock_reconciler():
    """Mock ReconciliationEngine for scanner tests."""
    return Mock()
