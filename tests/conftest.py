"""Shared test fixtures for pyP1Reader tests."""

from __future__ import annotations

import os
import pty
import termios
import threading
import time
from collections.abc import Generator, Iterable
from typing import Any

import pytest

from p1reader.exceptions import P1TransportReadError

# =============================================================================
# Sample telegrams
# =============================================================================

SHORT_TELEGRAM = "/ISK5\\2M550T-1013\r\n\r\n1-0:1.8.1(001234.567*kWh)\r\n!A1B2\r\n"

# DSMR 5.0.2 example telegram (35 data lines, 3 of them not in the catalog)
DSMR5_TELEGRAM = "\r\n".join(
    [
        "/ISK5\\2M550T-1012",
        "",
        "1-3:0.2.8(50)",
        "0-0:1.0.0(101209113020W)",
        "0-0:96.1.1(4B384547303034303436333935353037)",
        "1-0:1.8.1(123456.789*kWh)",
        "1-0:1.8.2(123456.789*kWh)",
        "1-0:2.8.1(123456.789*kWh)",
        "1-0:2.8.2(123456.789*kWh)",
        "0-0:96.14.0(0002)",
        "1-0:1.7.0(01.193*kW)",
        "1-0:2.7.0(00.000*kW)",
        "0-0:96.7.21(00004)",
        "0-0:96.7.9(00002)",
        "1-0:99.97.0(2)(0-0:96.7.19)(101208152415W)(0000000240*s)(101208151004W)(0000000301*s)",
        "1-0:32.32.0(00002)",
        "1-0:52.32.0(00001)",
        "1-0:72.32.0(00000)",
        "1-0:32.36.0(00000)",
        "1-0:52.36.0(00003)",
        "1-0:72.36.0(00000)",
        "0-0:96.13.0(303132333435363738393A3B3C3D3E3F303132333435363738393A3B3C3D3E3F)",
        "1-0:32.7.0(220.1*V)",
        "1-0:52.7.0(220.2*V)",
        "1-0:72.7.0(220.3*V)",
        "1-0:31.7.0(001*A)",
        "1-0:51.7.0(002*A)",
        "1-0:71.7.0(003*A)",
        "1-0:21.7.0(01.111*kW)",
        "1-0:41.7.0(02.222*kW)",
        "1-0:61.7.0(03.333*kW)",
        "1-0:22.7.0(04.444*kW)",
        "1-0:42.7.0(05.555*kW)",
        "1-0:62.7.0(06.666*kW)",
        "0-1:24.1.0(003)",
        "0-1:96.1.0(3232323241424344313233343536373839)",
        "0-1:24.2.1(101209112500W)(12785.123*m3)",
        "!EF2F",
        "",
    ]
)


@pytest.fixture
def short_telegram() -> str:
    """Smallest well-formed telegram: one data line."""
    return SHORT_TELEGRAM


@pytest.fixture
def dsmr5_telegram() -> str:
    """Complete DSMR 5 telegram as sent by a three-phase meter."""
    return DSMR5_TELEGRAM


# =============================================================================
# Fake byte source
# =============================================================================


class FakeSource:
    """Byte source replaying scripted reads.

    Each scripted item is either bytes (returned by read) or an exception
    instance (raised by read). Once the script is exhausted, reads return
    empty bytes as a timed out serial port would, up to idle_reads times,
    then raise RuntimeError so a runaway loop ends the test.
    """

    def __init__(self, script: Iterable[bytes | Exception], idle_reads: int = 3) -> None:
        self.script = list(script)
        self.idle_reads = idle_reads
        self.read_sizes: list[int] = []

    def read(self, size: int) -> bytes:
        self.read_sizes.append(size)

        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item[:size]

        if self.idle_reads <= 0:
            raise RuntimeError("FakeSource exhausted")
        self.idle_reads -= 1
        return b""


@pytest.fixture
def fake_source_factory() -> Any:
    """Factory building FakeSource instances from a script."""
    return FakeSource


@pytest.fixture
def read_error() -> P1TransportReadError:
    """Recoverable transport read error."""
    return P1TransportReadError("Failed to read data: device reports readiness to read but returned no data")


# =============================================================================
# Integration test fixtures
# =============================================================================


class VirtualP1Port:
    """Virtual P1 port using pty for integration testing.

    Writes queued payloads to the master side, the way a meter pushes a
    telegram every second without being asked.
    """

    def __init__(self) -> None:
        self.master_fd: int = -1
        self.slave_fd: int = -1
        self.slave_name: str = ""
        self.server_thread: threading.Thread | None = None
        self.running = False
        self.interval = 0.05
        self._payloads: list[bytes] = []
        self._lock = threading.Lock()

    def start(self) -> None:
        """Start the virtual P1 port."""
        if os.name == "nt":
            pytest.skip("pty not available on Windows")

        self.master_fd, self.slave_fd = pty.openpty()
        self.slave_name = os.ttyname(self.slave_fd)

        # Raw mode: no echo and no CR/LF translation on the slave side
        attributes = termios.tcgetattr(self.slave_fd)
        attributes[0] = 0  # iflag
        attributes[1] = 0  # oflag
        attributes[3] = 0  # lflag
        termios.tcsetattr(self.slave_fd, termios.TCSANOW, attributes)

        self.running = True

        self.server_thread = threading.Thread(target=self._server_loop, daemon=True)
        self.server_thread.start()

    def stop(self) -> None:
        """Stop the virtual P1 port."""
        self.running = False
        if self.server_thread:
            self.server_thread.join(timeout=1.0)

        if self.master_fd >= 0:
            os.close(self.master_fd)
        if self.slave_fd >= 0:
            os.close(self.slave_fd)

    def send(self, *payloads: bytes) -> None:
        """Queue payloads; each one is written with a separate write call."""
        with self._lock:
            self._payloads.extend(payloads)

    def _server_loop(self) -> None:
        """Server loop writing queued payloads."""
        while self.running:
            with self._lock:
                payload = self._payloads.pop(0) if self._payloads else None

            if payload is None:
                time.sleep(0.01)
                continue

            try:
                os.write(self.master_fd, payload)
            except OSError:
                if not self.running:
                    break
            time.sleep(self.interval)


@pytest.fixture
def virtual_p1_port() -> Generator[VirtualP1Port]:
    """Create virtual P1 port for testing."""
    port = VirtualP1Port()
    port.start()
    yield port
    port.stop()


# Test markers for different test types
def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast, uses fakes)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (slower, uses real I/O)"
    )
    config.addinivalue_line(
        "markers", "serial: mark test as requiring serial port simulation"
    )
