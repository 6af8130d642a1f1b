"""
pyP1Reader: Python library for reading smart meter telegrams from a P1 port.

This library detects complete DSMR telegrams in the raw byte stream of a P1
port and decodes their data lines into OBIS field readings.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .exceptions import (
    P1BufferOverflowError,
    P1ConfigurationError,
    P1ConnectionError,
    P1Error,
    P1MalformedTelegramError,
    P1MissingValueDelimiterError,
    P1ProtocolError,
    P1TransportReadError,
)
from .listener import Listener
from .protocol import (
    FrameAccumulator,
    ObisReference,
    Reading,
    Telegram,
    decode_line,
    decode_telegram,
    extract_value,
    parse_telegram,
    resolve,
)
from .transport import Transport

__all__ = [
    "__version__",
    # Exceptions
    "P1BufferOverflowError",
    "P1ConfigurationError",
    "P1ConnectionError",
    "P1Error",
    "P1MalformedTelegramError",
    "P1MissingValueDelimiterError",
    "P1ProtocolError",
    "P1TransportReadError",
    # Protocol
    "FrameAccumulator",
    "ObisReference",
    "Reading",
    "Telegram",
    "decode_line",
    "decode_telegram",
    "extract_value",
    "parse_telegram",
    "resolve",
    # I/O
    "Listener",
    "Transport",
]
