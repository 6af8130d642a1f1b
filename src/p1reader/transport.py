"""P1 transport layer for handling the serial connection and raw reads."""

from __future__ import annotations

from typing import Any

import serial
from serial.tools import list_ports

from .exceptions import P1ConnectionError, P1TransportReadError


class Transport:
    """Handles connection and blocking raw byte reads from a P1 port.

    Supports multiple connection types:
    - Serial ports: /dev/ttyUSB0, COM3
    - TCP sockets: socket://192.168.1.100:10001
    - RFC2217: rfc2217://192.168.1.100:10001

    All connection types are handled transparently by pyserial.

    Default serial parameters follow the P1 port (DSMR 4 and later):
    - 115200 baud
    - 8 data bits
    - No parity
    - 1 stop bit (8N1 format)
    """

    # Public attributes
    url: str
    serial_kwargs: dict[str, Any]

    # Private attributes
    _serial: serial.SerialBase | None

    def __init__(
        self,
        url: str,
        baudrate: int = 115200,
        bytesize: int = 8,
        parity: str = "N",
        stopbits: float = 1,
        timeout: float = 20.0,
        **kwargs: Any,
    ) -> None:
        """Initialize transport (does not open connection).

        Args:
            url: Connection URL (serial port or socket://host:port or rfc2217://host:port)
            baudrate: Baud rate for serial connections (default 115200 bps, DSMR 4+)
            bytesize: Number of data bits (default 8)
            parity: Parity checking - 'N'=None, 'E'=Even, 'O'=Odd (default 'N')
            stopbits: Number of stop bits - 1, 1.5, or 2 (default 1)
            timeout: Seconds a read blocks waiting for the first byte
            **kwargs: Additional serial parameters (xonxoff, rtscts, dsrdtr, etc.)

        Note:
            Meters following DSMR 2.2 and 3.0 use 9600 baud 7E1 instead.
        """
        self.url = url

        # Build serial parameters dictionary
        self.serial_kwargs = {
            "baudrate": baudrate,
            "bytesize": bytesize,
            "parity": parity,
            "stopbits": stopbits,
            "timeout": timeout,
            **kwargs,  # Additional parameters like flow control
        }

        self._serial = None

    def open(self) -> None:
        """Open connection to the P1 port.

        Raises:
            P1ConnectionError: If connection fails
        """
        if self._serial is not None:
            return  # Already connected

        try:
            self._serial = serial.serial_for_url(self.url, **self.serial_kwargs)
        except (serial.SerialException, ValueError) as e:
            raise P1ConnectionError(f"Failed to open connection to {self.url}: {e}") from e

    def close(self) -> None:
        """Close connection (idempotent - safe to call multiple times)."""
        if self._serial is None:
            return  # Already closed

        try:
            self._serial.close()
        except (serial.SerialException, OSError):
            pass  # Port may already be gone
        finally:
            self._serial = None

    def is_connected(self) -> bool:
        """Check if transport is connected.

        Returns:
            True if connected, False otherwise
        """
        return self._serial is not None

    def read(self, size: int) -> bytes:
        """Read up to size bytes.

        Blocks until at least one byte arrives or the timeout expires, then
        returns whatever is already waiting (never more than size bytes).

        Args:
            size: Maximum number of bytes to return

        Returns:
            Between 1 and size bytes, or empty bytes on timeout

        Raises:
            P1ConnectionError: If not connected
            P1TransportReadError: If the read fails
        """
        if self._serial is None:
            raise P1ConnectionError("Transport is not connected")

        try:
            data = self._serial.read(1)
            if data and size > 1:
                waiting = self._serial.in_waiting
                if waiting:
                    data += self._serial.read(min(waiting, size - 1))
            return data
        except (serial.SerialException, OSError) as e:
            raise P1TransportReadError(f"Failed to read data: {e}") from e

    def __enter__(self) -> Transport:
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()


def available_ports() -> list[str]:
    """List the serial port device names present on this system."""
    return sorted(port.device for port in list_ports.comports())
