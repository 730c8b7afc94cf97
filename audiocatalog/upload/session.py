"""Consumer-side channel for the events of one upload."""

import asyncio
import logging
import queue
import threading
from typing import Callable, Iterator, List, Optional

from ..models.upload import UploadEvent

logger = logging.getLogger(__name__)

_TERMINAL_PUT_POLL_SECONDS = 0.05


class UploadSession:
    """Ordered, cancellable stream of UploadEvents.

    The producer never blocks on ``Progress`` events: when the buffer is full
    or the consumer has detached they are dropped. The terminal event is
    always delivered while the consumer is still attached.

    Usage::

        with pipeline.upload(path) as session:
            for event in session:
                ...
    """

    def __init__(self, buffer_size: int = 128, cancel_event: Optional[threading.Event] = None):
        self._queue: "queue.Queue[UploadEvent]" = queue.Queue(maxsize=max(2, buffer_size))
        self.cancel_event = cancel_event or threading.Event()
        self._terminal_emitted = threading.Event()
        self._terminal_received = False
        self._listeners: List[Callable[[UploadEvent], None]] = []
        self._lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._task: Optional[asyncio.Task] = None
        self.dropped_progress_events = 0

    # Producer side

    @property
    def detached(self) -> bool:
        return self.cancel_event.is_set()

    def add_listener(self, listener: Callable[[UploadEvent], None]) -> None:
        """Call ``listener`` on the producer thread for every emitted event."""
        self._listeners.append(listener)

    def bind(self, loop: asyncio.AbstractEventLoop, task: asyncio.Task) -> None:
        """Attach the running upload task so cancel() can abort it."""
        with self._lock:
            self._loop = loop
            self._task = task
        if self.detached:
            loop.call_soon_threadsafe(task.cancel)

    def emit(self, event: UploadEvent) -> bool:
        """Offer an event to the consumer.

        Returns:
            True if the event was queued
        """
        if self._terminal_emitted.is_set() or self.detached:
            return False

        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Upload event listener failed: {e}")

        if not event.is_terminal:
            try:
                self._queue.put_nowait(event)
                return True
            except queue.Full:
                self.dropped_progress_events += 1
                return False

        self._terminal_emitted.set()
        while not self.detached:
            try:
                self._queue.put(event, timeout=_TERMINAL_PUT_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    # Consumer side

    @property
    def finished(self) -> bool:
        return self._terminal_received

    def cancel(self) -> None:
        """Detach from the session and abort the in-flight upload."""
        if self._terminal_received or self.cancel_event.is_set():
            self.cancel_event.set()
            return
        logger.info("Upload cancelled by consumer")
        self.cancel_event.set()
        with self._lock:
            loop, task = self._loop, self._task
        if loop is not None and task is not None and not loop.is_closed():
            try:
                loop.call_soon_threadsafe(task.cancel)
            except RuntimeError:
                # Loop closed between the check and the call
                pass

    def next_event(self, timeout: Optional[float] = None) -> Optional[UploadEvent]:
        """Return the next event, or None when finished, detached or timed out."""
        if self._terminal_received:
            return None
        while True:
            if self.detached:
                return None
            try:
                event = self._queue.get(timeout=timeout if timeout is not None else _TERMINAL_PUT_POLL_SECONDS)
            except queue.Empty:
                if timeout is not None:
                    return None
                continue
            if event.is_terminal:
                self._terminal_received = True
            return event

    def __iter__(self) -> Iterator[UploadEvent]:
        while True:
            event = self.next_event()
            if event is None:
                return
            yield event
            if event.is_terminal:
                return

    def result(self) -> Optional[UploadEvent]:
        """Drain the session and return its terminal event (None if cancelled)."""
        terminal = None
        for event in self:
            if event.is_terminal:
                terminal = event
        return terminal

    def __enter__(self) -> "UploadSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._terminal_received:
            self.cancel()

