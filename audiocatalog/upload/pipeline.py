"""Multipart upload of a recording with streamed progress and classified results."""

import asyncio
import contextlib
import io
import itertools
import logging
import mimetypes
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, BinaryIO, List, Optional, Tuple, Union

from pydantic import ValidationError

from ..errors import classify_failure
from ..models.remote import ServerRecord
from ..models.upload import Error, Loading, Progress, Success, UploadEvent
from ..storage import filename_codec
from .progress import UNKNOWN_SIZE, ProgressTracker
from .publisher import UploadPublisher
from .session import UploadSession
from .transport import UPLOAD_PATH, AbstractTransport, MultipartPart, MultipartRequest

logger = logging.getLogger(__name__)

FileSource = Union[str, Path, BinaryIO]

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_FILENAME = "uploaded_audio"
FALLBACK_CONTENT_TYPE = "application/octet-stream"
CANCEL_POLL_SECONDS = 0.05

AUDIO_CONTENT_TYPES = {
    "m4a": "audio/mp4",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "aac": "audio/aac",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
}


@dataclass
class UploadJob:
    """Arguments of one upload call."""
    file: FileSource
    companion_file: Optional[FileSource] = None
    title: Optional[str] = None
    description: Optional[str] = None


def resolve_content_type(filename: str) -> str:
    """Return the MIME type for ``filename``, defaulting to application/octet-stream."""
    _, extension = filename_codec.split_extension(filename)
    content_type = AUDIO_CONTENT_TYPES.get(extension.lower())
    if content_type is None:
        content_type, _ = mimetypes.guess_type(filename)
    return content_type or FALLBACK_CONTENT_TYPE


def content_length(fileobj: BinaryIO) -> int:
    """Bytes remaining in ``fileobj``, or UNKNOWN_SIZE if it cannot be told."""
    try:
        size = os.fstat(fileobj.fileno()).st_size
        return max(0, size - fileobj.tell())
    except (OSError, AttributeError, ValueError):
        pass
    try:
        if fileobj.seekable():
            position = fileobj.tell()
            end = fileobj.seek(0, io.SEEK_END)
            fileobj.seek(position)
            return max(0, end - position)
    except (OSError, AttributeError, ValueError):
        pass
    return UNKNOWN_SIZE


def parse_server_record(body: str) -> Optional[ServerRecord]:
    """Parse a 2xx response body; None when it is empty or not a record."""
    if not body or not body.strip():
        return None
    try:
        return ServerRecord.model_validate_json(body)
    except ValidationError:
        logger.warning("Upload response body could not be parsed, treating as success without data")
        return None


class UploadPipeline:
    """Uploads recordings to the server.

    Each upload runs on its own worker thread with a private event loop and
    reports through an UploadSession: ``Loading``, then ``Progress`` while the
    primary file is written, then exactly one ``Success`` or ``Error``.
    """

    _counter = itertools.count(1)

    def __init__(self,
                 transport: AbstractTransport,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 progress_buffer: int = 128,
                 upload_path: str = UPLOAD_PATH,
                 publisher: Optional[UploadPublisher] = None):
        """Initialize upload pipeline.

        Args:
            transport: Transport that performs the HTTP call
            chunk_size: Bytes read from the file per write
            progress_buffer: Capacity of each session's event buffer
            upload_path: Server path of the upload endpoint
            publisher: Optional pub/sub publisher receiving every event
        """
        self.transport = transport
        self.chunk_size = chunk_size
        self.progress_buffer = progress_buffer
        self.upload_path = upload_path
        self.publisher = publisher

    def upload(self,
               file: FileSource,
               companion_file: Optional[FileSource] = None,
               title: Optional[str] = None,
               description: Optional[str] = None,
               cancel_event: Optional[threading.Event] = None) -> UploadSession:
        """Start an upload and return its session.

        File objects passed in are owned by the pipeline and closed when the
        upload ends, fails or is cancelled.

        Args:
            file: Path or binary file object of the recording
            companion_file: Optional secondary document (e.g. slides)
            title: Optional title, sent only if non-blank
            description: Optional description, sent only if non-blank
            cancel_event: External signal that aborts the upload when set

        Returns:
            UploadSession delivering the upload's events
        """
        session = UploadSession(buffer_size=self.progress_buffer, cancel_event=cancel_event)
        if self.publisher is not None:
            session.add_listener(self.publisher.get_callback())

        job = UploadJob(file=file, companion_file=companion_file, title=title, description=description)
        logger.debug(f"Starting upload. Title: {title!r}, Desc: {description!r}")

        thread = threading.Thread(target=self._worker_loop, args=(session, job), daemon=True)
        thread.name = f"upload_{next(self._counter)}"
        thread.start()
        return session

    def upload_and_wait(self, file: FileSource, **kwargs) -> Optional[UploadEvent]:
        """Upload and block until the terminal event."""
        with self.upload(file, **kwargs) as session:
            return session.result()

    def _worker_loop(self, session: UploadSession, job: UploadJob) -> None:
        thread_name = threading.current_thread().name
        logger.debug(f"Upload worker {thread_name} starting")
        session.emit(Loading())

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(self._supervise(session, job))
        except Exception as e:
            logger.error(f"Unhandled exception in upload worker {thread_name}: {e}", exc_info=True)
            session.emit(Error(classify_failure(exc=e)))
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()
            logger.debug(f"Upload worker {thread_name} exiting and closing its event loop.")

    async def _supervise(self, session: UploadSession, job: UploadJob) -> None:
        task = asyncio.ensure_future(self._perform(session, job))
        session.bind(asyncio.get_running_loop(), task)
        watcher = asyncio.ensure_future(self._watch_cancel(session, task))
        try:
            await task
        except asyncio.CancelledError:
            logger.info("Upload aborted before completion")
        finally:
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher

    @staticmethod
    async def _watch_cancel(session: UploadSession, task: "asyncio.Future") -> None:
        while not session.cancel_event.is_set():
            await asyncio.sleep(CANCEL_POLL_SECONDS)
        if not task.done():
            task.cancel()

    async def _perform(self, session: UploadSession, job: UploadJob) -> None:
        opened: List[BinaryIO] = []
        try:
            request = self._build_request(session, job, opened)
            logger.debug(f"Executing upload call to {request.path}")
            response = await self.transport.send_multipart(request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Exception during upload: {e}", exc_info=True)
            session.emit(Error(classify_failure(exc=e)))
            return
        finally:
            for handle in opened:
                with contextlib.suppress(Exception):
                    handle.close()

        logger.debug(f"Upload call finished. Response code: {response.status}")
        if response.ok:
            record = parse_server_record(response.body)
            if record is not None:
                logger.info(f"Upload successful. Metadata ID: {record.id}")
            else:
                logger.warning(f"Upload successful (code {response.status}) but response body was empty")
            session.emit(Success(record))
        else:
            logger.error(f"Upload failed with HTTP error: {response.status} - {response.body}")
            session.emit(Error(classify_failure(status=response.status, body=response.body)))

    def _build_request(self, session: UploadSession, job: UploadJob, opened: List[BinaryIO]) -> MultipartRequest:
        fileobj, filename = self._open(job.file, opened)
        total_bytes = content_length(fileobj)
        logger.debug(f"Uploading {filename} ({total_bytes} bytes)")

        tracker = ProgressTracker(total_bytes, lambda percent: session.emit(Progress(percent)))
        parts = [
            MultipartPart(
                name="file",
                body=tracker.track(self._read_chunks(fileobj, session.cancel_event)),
                filename=filename,
                content_type=resolve_content_type(filename),
            )
        ]

        if job.companion_file is not None:
            companion, companion_name = self._open(job.companion_file, opened)
            parts.append(MultipartPart(
                name="companionFile",
                body=self._read_chunks(companion, session.cancel_event),
                filename=companion_name,
                content_type=resolve_content_type(companion_name),
            ))

        if job.title and job.title.strip():
            parts.append(MultipartPart(name="title", body=job.title))
        if job.description and job.description.strip():
            parts.append(MultipartPart(name="description", body=job.description))

        return MultipartRequest(path=self.upload_path, parts=parts)

    @staticmethod
    def _open(source: FileSource, opened: List[BinaryIO]) -> Tuple[BinaryIO, str]:
        if isinstance(source, (str, Path)):
            path = Path(source)
            fileobj = open(path, "rb")
            opened.append(fileobj)
            return fileobj, path.name

        opened.append(source)
        name = getattr(source, "name", None)
        filename = Path(name).name if isinstance(name, (str, Path)) and str(name) else DEFAULT_FILENAME
        return source, filename

    async def _read_chunks(self, fileobj: BinaryIO, cancel_event: threading.Event) -> AsyncIterator[bytes]:
        while True:
            if cancel_event.is_set():
                raise asyncio.CancelledError()
            chunk = fileobj.read(self.chunk_size)
            if not chunk:
                break
            yield chunk
            # Give the cancel watcher a chance to run between writes
            await asyncio.sleep(0)
