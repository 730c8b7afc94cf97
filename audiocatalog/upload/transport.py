"""HTTP transport for the recordings API."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterable, List, Optional, Union

import aiohttp

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/audio/upload"


@dataclass
class MultipartPart:
    """One field of a multipart/form-data body.

    ``body`` is either text (a plain form field) or an async iterable of
    bytes (a streamed file field, which requires ``filename``).
    """
    name: str
    body: Union[str, AsyncIterable[bytes]]
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.filename is not None


@dataclass
class MultipartRequest:
    path: str
    parts: List[MultipartPart] = field(default_factory=list)

    def part(self, name: str) -> Optional[MultipartPart]:
        for part in self.parts:
            if part.name == name:
                return part
        return None


@dataclass(frozen=True)
class TransportResponse:
    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299


class AbstractTransport(ABC):
    """Sends requests to the server; raises on transport-level failure only.

    Non-2xx responses are returned, not raised, so that callers classify them
    through ``classify_failure``.
    """

    @abstractmethod
    async def send_multipart(self, request: MultipartRequest) -> TransportResponse:
        pass

    @abstractmethod
    async def request(self, method: str, path: str) -> TransportResponse:
        pass


class HttpTransport(AbstractTransport):
    """aiohttp-backed transport."""

    def __init__(self, base_url: str, auth_token: Optional[str] = None, timeout_seconds: float = 300.0):
        """Initialize HTTP transport.

        Args:
            base_url: Server root, e.g. ``https://api.example.com``
            auth_token: Bearer token sent with every request, if set
            timeout_seconds: Total timeout for one request
        """
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout_seconds = timeout_seconds
        logger.info(f"HttpTransport initialized with base_url: {self.base_url}")

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @staticmethod
    def build_form(request: MultipartRequest) -> aiohttp.FormData:
        form = aiohttp.FormData()
        for part in request.parts:
            if part.is_file:
                form.add_field(part.name, part.body,
                               filename=part.filename,
                               content_type=part.content_type or "application/octet-stream")
            else:
                form.add_field(part.name, part.body, content_type=part.content_type or "text/plain")
        return form

    async def send_multipart(self, request: MultipartRequest) -> TransportResponse:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self._url(request.path),
                                    headers=self._headers(),
                                    data=self.build_form(request)) as response:
                body = await response.text()
                logger.debug(f"POST {request.path} -> {response.status}")
                return TransportResponse(status=response.status, body=body)

    async def request(self, method: str, path: str) -> TransportResponse:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(method, self._url(path), headers=self._headers()) as response:
                body = await response.text()
                logger.debug(f"{method} {path} -> {response.status}")
                return TransportResponse(status=response.status, body=body)
