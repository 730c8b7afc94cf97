"""Deduplicated, monotonic upload progress reporting."""

import logging
from typing import AsyncIterable, AsyncIterator, Callable, Optional

logger = logging.getLogger(__name__)

UNKNOWN_SIZE = -1


class ProgressTracker:
    """Turns a running byte count into percentage events.

    With a known ``total_bytes`` a percentage is emitted each time its integer
    value changes, and 100 is guaranteed once every byte has been written.
    With ``UNKNOWN_SIZE`` only 0 (on start) and 100 (on finish) are emitted.
    """

    def __init__(self, total_bytes: int, on_progress: Callable[[int], None]):
        self.total_bytes = total_bytes
        self.on_progress = on_progress
        self.bytes_written = 0
        self.last_percent: Optional[int] = None

    def _emit(self, percent: int) -> None:
        if percent == self.last_percent:
            return
        if self.last_percent is not None and percent < self.last_percent:
            return
        self.last_percent = percent
        logger.debug(f"Progress: {percent}%")
        self.on_progress(percent)

    def start(self) -> None:
        """Signal that writing is about to begin."""
        if self.total_bytes == UNKNOWN_SIZE:
            logger.debug("Content length unknown, reporting 0% at start")
            self._emit(0)

    def on_bytes_written(self, byte_count: int) -> None:
        """Record that ``byte_count`` more bytes reached the sink."""
        self.bytes_written += byte_count
        if self.total_bytes > 0:
            percent = (self.bytes_written * 100) // self.total_bytes
            if 0 <= percent <= 100:
                self._emit(percent)

    def finish(self) -> None:
        """Signal that writing has completed."""
        if self.total_bytes > 0:
            if self.bytes_written >= self.total_bytes and self.last_percent != 100:
                logger.debug("Ensuring 100% progress sent at the end")
                self._emit(100)
        elif self.total_bytes == UNKNOWN_SIZE or self.total_bytes == 0:
            self._emit(100)

    async def track(self, chunks: AsyncIterable[bytes]) -> AsyncIterator[bytes]:
        """Pass ``chunks`` through, counting each one once the consumer has taken it.

        A chunk is counted when the consumer asks for the next one, i.e. after
        it has been written to the outbound sink.
        """
        self.start()
        async for chunk in chunks:
            yield chunk
            self.on_bytes_written(len(chunk))
        self.finish()
