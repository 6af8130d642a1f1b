"""Control loop feeding transport reads through framing and parsing."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from functools import partial
from typing import Protocol

from .exceptions import (
    P1BufferOverflowError,
    P1MalformedTelegramError,
    P1TransportReadError,
)
from .protocol.accumulator import FrameAccumulator
from .protocol.common import DEFAULT_READ_SIZE
from .protocol.telegram import Telegram, parse_telegram

log = logging.getLogger(__name__)


class ByteSource(Protocol):
    """Blocking byte source, such as an open Transport."""

    def read(self, size: int) -> bytes: ...


class Listener:
    """Owns the read loop of one P1 port.

    One blocking read at a time is fed to the frame accumulator; every
    completed frame is parsed and yielded. No error raised inside the loop is
    fatal:
    - read errors are logged and the read is retried after retry_delay
    - a buffer overflow drops the partial frame and framing starts over
    - a malformed telegram is logged and discarded
    """

    source: ByteSource
    accumulator: FrameAccumulator
    read_size: int
    retry_delay: float

    def __init__(
        self,
        source: ByteSource,
        accumulator: FrameAccumulator | None = None,
        read_size: int = DEFAULT_READ_SIZE,
        retry_delay: float = 1.0,
    ) -> None:
        self.source = source
        self.accumulator = accumulator if accumulator is not None else FrameAccumulator()
        self.read_size = read_size
        self.retry_delay = retry_delay

    def frames(self) -> Iterator[str]:
        """Yield the text of every completed frame, forever."""
        while True:
            try:
                chunk = self.source.read(self.read_size)
            except P1TransportReadError as e:
                log.error("Failed to read P1 port data: %s", e)
                if self.retry_delay > 0:
                    time.sleep(self.retry_delay)
                continue

            if not chunk:
                continue

            # Frames and overflows already buffered are drained before the next read
            extract: Callable[[], str | None] = partial(self.accumulator.feed, chunk)
            while True:
                try:
                    frame = extract()
                except P1BufferOverflowError as e:
                    log.error("Dropped partial frame: %s", e)
                else:
                    if frame is None:
                        break
                    yield frame

                extract = self.accumulator.pop

    def telegrams(self) -> Iterator[Telegram]:
        """Yield every telegram that parses, forever."""
        for frame in self.frames():
            try:
                telegram = parse_telegram(frame)
            except P1MalformedTelegramError as e:
                log.warning("Discarded telegram: %s", e)
                continue

            log.debug("Telegram from %s with %d data lines", telegram.identifier, len(telegram.lines))
            yield telegram
