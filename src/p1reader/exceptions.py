"""P1 reader exception classes."""

from __future__ import annotations


class P1Error(Exception):
    """Base exception for all P1 reader errors."""


class P1ConnectionError(P1Error):
    """Connection-related errors."""


class P1TransportReadError(P1ConnectionError):
    """Reading from an open transport failed (recoverable)."""


class P1ProtocolError(P1Error):
    """Protocol-level errors (framing, telegram layout, data lines)."""


class P1MalformedTelegramError(P1ProtocolError):
    """Telegram header and body are not separated as expected."""


class P1MissingValueDelimiterError(P1ProtocolError):
    """Data line lacks the '(' or ')' around its value."""


class P1BufferOverflowError(P1ProtocolError):
    """Frame buffer exceeded its maximum size without an end marker."""


class P1ConfigurationError(P1Error):
    """Settings file could not be read or is invalid."""
