"""Command line entry point: print the readings of every telegram received."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from . import __version__
from .config import (
    DEFAULT_SETTINGS_PATH,
    Configuration,
    load_configuration,
    write_default_configuration,
)
from .exceptions import P1ConfigurationError, P1ConnectionError
from .listener import Listener
from .protocol.accumulator import FrameAccumulator
from .protocol.telegram import Telegram
from .transport import Transport, available_ports

log = logging.getLogger(__name__)

NAME_COLUMN_WIDTH = 48


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="p1reader", description="Read smart meter telegrams from a P1 port")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=DEFAULT_SETTINGS_PATH,
        help="settings file (default: %(default)s)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="also print the meter identifier of every telegram"
    )
    parser.add_argument("-d", "--debug", action="store_true", help="show debug output")
    parser.add_argument("--all", action="store_true", help="also print readings with unknown OBIS codes")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def print_telegram(telegram: Telegram, resolved_only: bool = True, verbose: bool = False) -> None:
    """Print one line per reading: field name, tab, value."""
    if verbose:
        print(f"{'Identifier': <{NAME_COLUMN_WIDTH}}\t{telegram.identifier}", flush=True)

    for reading in telegram.readings(resolved_only=resolved_only):
        print(f"{reading.name: <{NAME_COLUMN_WIDTH}}\t{reading.value}", flush=True)


def run(configuration: Configuration, resolved_only: bool = True, verbose: bool = False) -> int:
    """Open the configured port and print telegrams until interrupted."""
    log.info(
        'Attempting to open serial port "%s" with a baud rate of %d',
        configuration.port_name,
        configuration.baud_rate,
    )

    transport = Transport(
        configuration.port_name,
        baudrate=configuration.baud_rate,
        timeout=configuration.connect_timeout,
    )

    try:
        transport.open()
    except P1ConnectionError as e:
        log.error("Unable to open serial port: %s", e)
        ports = available_ports()
        if ports:
            log.info("Available serial ports:\n%s", "\n".join(f'\t"{port}"' for port in ports))
        return 1

    listener = Listener(
        transport,
        FrameAccumulator(max_buffer_size=configuration.max_buffer_size),
        read_size=configuration.read_size,
    )

    with transport:
        for telegram in listener.telegrams():
            print_telegram(telegram, resolved_only=resolved_only, verbose=verbose)

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    _setup_logging(args.debug)

    try:
        configuration = load_configuration(args.config)
    except FileNotFoundError:
        log.warning('No configuration file found - a new one will be created for you to modify (see "%s")', args.config)
        log.warning("Please re-run the application once you are happy with the configuration")
        try:
            write_default_configuration(args.config)
        except OSError as e:
            log.error("Failed to write default configuration file: %s", e)
        return 1
    except OSError as e:
        log.error("Failed to read configuration file: %s", e)
        return 1
    except P1ConfigurationError as e:
        log.error("%s", e)
        return 1

    try:
        return run(configuration, resolved_only=not args.all, verbose=args.verbose)
    except KeyboardInterrupt:
        log.info("Interrupted, stopping")
        return 0


if __name__ == "__main__":
    sys.exit(main())
