"""Protocol layer components for P1 telegram framing and decoding.

This package contains all P1 protocol layer functionality.

Reference: DSMR P1 Companion Standard 5.0.2
"""

from .accumulator import FrameAccumulator
from .obis import ObisReference, resolve
from .telegram import (
    Reading,
    Telegram,
    decode_line,
    decode_telegram,
    extract_value,
    parse_telegram,
)

__all__ = [
    # Framing
    "FrameAccumulator",
    # OBIS catalog
    "ObisReference",
    "resolve",
    # Telegram classes
    "Reading",
    "Telegram",
    "decode_line",
    "decode_telegram",
    "extract_value",
    "parse_telegram",
]
