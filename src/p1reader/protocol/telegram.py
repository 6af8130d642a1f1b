"""Telegram parsing and value extraction.

A complete telegram (as returned by the frame accumulator) is split into its
header line and the ordered data lines of its body. Each data line is
then decoded into a Reading: the OBIS code, the resolved field identity and
the raw value text of its first parenthesized group.

Values are kept as text. Units (e.g. '*kWh') stay part of the value and no
numeric conversion is done.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..exceptions import P1MalformedTelegramError, P1MissingValueDelimiterError
from .common import (
    END_MARKER_LINE_PATTERN,
    HEADER_SEPARATOR,
    HEADER_START,
    HEADER_TAG_LENGTH,
    LINE_TERMINATOR,
    VALUE_END,
    VALUE_START,
)
from .obis import ObisReference, obis_code, resolve

log = logging.getLogger(__name__)


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class Reading:
    """One decoded data line.

    Attributes:
        obis_code: Full OBIS code including the channel prefix (e.g. '1-0:1.8.1')
        reference: Resolved field identity, or None for uncatalogued codes
        value: Text of the first parenthesized group, unconverted
    """

    obis_code: str

    reference: ObisReference | None

    value: str

    @property
    def name(self) -> str:
        """Field identity name, or the raw OBIS code when unresolved."""
        if self.reference is None:
            return self.obis_code

        return str(self.reference)


@dataclass(frozen=True, kw_only=True)
class Telegram:
    """A parsed telegram: header line plus ordered data lines.

    The header reads '/' + 4 character tag + equipment text, for example
    '/ISK5\\2M550T-1013' (tag 'ISK5': manufacturer 'ISK', baud rate
    indicator '5').
    """

    header: str

    lines: tuple[str, ...]

    @property
    def identifier(self) -> str:
        """Meter identifier: the header without its leading '/'.

        Only the '/' is dropped, so the 4 character tag stays part of the
        identifier ('ISK5\\2M550T-1013'). Use equipment for the header text
        after the fixed-width tag.
        """
        return self.header[len(HEADER_START) :]

    @property
    def tag(self) -> str:
        """Fixed-width tag following the '/' (manufacturer code + baud rate indicator)."""
        return self.header[len(HEADER_START) : HEADER_TAG_LENGTH]

    @property
    def equipment(self) -> str:
        """Header text after the fixed-width tag."""
        return self.header[HEADER_TAG_LENGTH:]

    def readings(self, resolved_only: bool = True) -> list[Reading]:
        """Decode the data lines into readings, in telegram order.

        Per-line problems never abort the telegram: lines without value
        delimiters are logged and skipped. Readings with an empty or
        all-whitespace value are dropped.

        Args:
            resolved_only: Drop readings whose OBIS code is not in the catalog

        Returns:
            Ordered list of readings
        """
        readings = []

        for line in self.lines:
            try:
                reading = decode_line(line)
            except P1MissingValueDelimiterError as e:
                log.warning("Skipping data line: %s", e)
                continue

            if reading.reference is None:
                log.debug("Unknown OBIS code %s", reading.obis_code)
                if resolved_only:
                    continue

            if not reading.value.strip():
                continue

            readings.append(reading)

        return readings


# =============================================================================
# Parsing
# =============================================================================


def parse_telegram(text: str) -> Telegram:
    """Split a complete telegram into header and data lines.

    The header is separated from the body by a blank line. The body ends at
    the end marker line ('!' followed by the checksum token); anything after
    it and any empty line is ignored.

    Args:
        text: Complete telegram text including the end marker

    Returns:
        The parsed telegram

    Raises:
        P1MalformedTelegramError: If the header/body separator is missing or
                                  the header does not carry the '/' tag
    """
    if HEADER_SEPARATOR not in text:
        raise P1MalformedTelegramError("Telegram has no blank line between header and body")

    # Line noise received before the header line is ignored, even when it
    # holds blank lines of its own
    rejected = None
    start = 0
    while True:
        index = text.find(HEADER_SEPARATOR, start)
        if index < 0:
            raise P1MalformedTelegramError(f"Telegram header is not valid: {rejected!r}")

        header = text[:index].rpartition(LINE_TERMINATOR)[2].strip()
        if header.startswith(HEADER_START) and len(header) >= HEADER_TAG_LENGTH:
            break

        if rejected is None:
            rejected = header
        start = index + len(LINE_TERMINATOR)

    body = text[index + len(HEADER_SEPARATOR) :]

    lines = []
    for line in body.split(LINE_TERMINATOR):
        if END_MARKER_LINE_PATTERN.fullmatch(line):
            break

        if line:
            lines.append(line)

    return Telegram(header=header, lines=tuple(lines))


def extract_value(line: str) -> str:
    """Return the text between the first '(' and the ')' that follows it.

    Lines with several groups (such as the power failure event log) only
    yield their first group.

    Raises:
        P1MissingValueDelimiterError: If either delimiter is missing
    """
    start = line.find(VALUE_START)
    if start < 0:
        raise P1MissingValueDelimiterError(f"No '{VALUE_START}' found in data line: {line!r}")

    end = line.find(VALUE_END, start + 1)
    if end < 0:
        raise P1MissingValueDelimiterError(f"No '{VALUE_END}' found in data line: {line!r}")

    return line[start + 1 : end]


def decode_line(line: str) -> Reading:
    """Decode one data line into a Reading.

    Raises:
        P1MissingValueDelimiterError: If the line lacks '(' or ')'
    """
    value = extract_value(line)

    return Reading(obis_code=obis_code(line), reference=resolve(line), value=value)


def decode_telegram(text: str, resolved_only: bool = True) -> list[Reading]:
    """Parse a complete telegram and decode its readings.

    Raises:
        P1MalformedTelegramError: If the telegram layout is not valid
    """
    return parse_telegram(text).readings(resolved_only=resolved_only)
