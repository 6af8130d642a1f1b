"""Frame accumulator detecting complete telegrams in a continuous byte stream.

The transport gives no framing guarantees: a read may hold part of a line,
part of a telegram or several telegrams. The accumulator decodes every chunk
permissively and appends it to a text buffer, which is tested for the
end-of-frame marker after each append.
"""

from __future__ import annotations

import codecs
import logging

from ..exceptions import P1BufferOverflowError
from .common import DEFAULT_MAX_BUFFER_SIZE, END_OF_FRAME_PATTERN

log = logging.getLogger(__name__)


class FrameAccumulator:
    """Buffers decoded stream text until a complete telegram is present.

    Invariant: the buffer holds exactly the text received since the end of the
    last completed frame.

    Attributes:
        max_buffer_size: Maximum length of a frame in characters; longer frames
                         are considered corrupted
    """

    max_buffer_size: int

    _buffer: str
    _pending_overflow: int | None

    def __init__(self, max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE) -> None:
        if max_buffer_size <= 0:
            raise ValueError("max_buffer_size must be positive")

        self.max_buffer_size = max_buffer_size
        self._buffer = ""
        self._pending_overflow = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def buffered(self) -> str:
        """Text received since the last completed frame."""
        return self._buffer

    def feed(self, chunk: bytes) -> str | None:
        """Append a chunk of raw bytes and return a completed telegram, if any.

        Invalid byte sequences are replaced, never rejected. A multi-byte
        sequence split across two chunks decodes the same as when unsplit.

        A frame may never be longer than max_buffer_size, however the stream
        is chunked. Text left after a returned frame that already exceeds the
        limit without an end marker is discarded at once; the overflow is
        raised by the next call to pop() or feed().

        Args:
            chunk: Raw bytes from the transport (may be empty)

        Returns:
            The complete telegram text (header, data lines and end marker),
            or None when no end marker has been received yet

        Raises:
            P1BufferOverflowError: If the buffered frame exceeds max_buffer_size
                                   (the oversized text is discarded first)
        """
        self._buffer += self._decoder.decode(chunk)

        telegram = self.pop()
        if telegram is not None and self._pending_overflow is None and len(self._buffer) > self.max_buffer_size:
            if END_OF_FRAME_PATTERN.search(self._buffer) is None:
                size = len(self._buffer)
                self.reset()
                self._pending_overflow = size

        return telegram

    def pop(self) -> str | None:
        """Remove and return the next complete telegram already in the buffer.

        Raises:
            P1BufferOverflowError: If the next frame exceeds max_buffer_size
        """
        if self._pending_overflow is not None:
            size, self._pending_overflow = self._pending_overflow, None
            raise self._overflow(size)

        match = END_OF_FRAME_PATTERN.search(self._buffer)
        if match is None:
            if len(self._buffer) > self.max_buffer_size:
                size = len(self._buffer)
                self.reset()
                raise self._overflow(size)
            return None

        telegram = self._buffer[: match.end()]
        self._buffer = self._buffer[match.end() :]

        if len(telegram) > self.max_buffer_size:
            raise self._overflow(len(telegram))

        log.debug("Completed frame of %d characters, %d left in buffer", len(telegram), len(self._buffer))
        return telegram

    def reset(self) -> None:
        """Discard any partial frame and pending decoder state."""
        self._buffer = ""
        self._pending_overflow = None
        self._decoder.reset()

    def _overflow(self, size: int) -> P1BufferOverflowError:
        return P1BufferOverflowError(
            f"No end of frame within {size} buffered characters (maximum {self.max_buffer_size})"
        )
