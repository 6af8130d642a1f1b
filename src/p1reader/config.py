"""Settings file handling.

Settings live in a YAML file (``./settings.yaml`` by default):

    port_name: /dev/ttyUSB0
    baud_rate: 115200
    connect_timeout_ms: 20000
    read_size: 2048
    max_buffer_size: 16384
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, PositiveInt, ValidationError

from .exceptions import P1ConfigurationError
from .protocol.common import DEFAULT_MAX_BUFFER_SIZE, DEFAULT_READ_SIZE

DEFAULT_SETTINGS_PATH = Path("./settings.yaml")


class Configuration(BaseModel):
    """P1 port settings with sensible defaults."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    port_name: str = "/dev/ttyUSB0"
    baud_rate: PositiveInt = 115_200
    connect_timeout_ms: PositiveInt = 20_000

    read_size: PositiveInt = DEFAULT_READ_SIZE  # Bytes requested per transport read
    max_buffer_size: PositiveInt = DEFAULT_MAX_BUFFER_SIZE  # Characters buffered without an end marker

    @property
    def connect_timeout(self) -> float:
        """Connect timeout in seconds."""
        return self.connect_timeout_ms / 1000


def load_configuration(path: Path = DEFAULT_SETTINGS_PATH) -> Configuration:
    """Read and validate the settings file.

    Keys missing from the file take their default value.

    Raises:
        FileNotFoundError: If the file does not exist
        P1ConfigurationError: If the file is not valid YAML or holds invalid settings
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise P1ConfigurationError(f"Unable to read YAML settings file {path}: {e}") from e

    if data is None:
        data = {}
    elif not isinstance(data, dict):
        raise P1ConfigurationError(f"Settings file {path} must hold a mapping of settings")

    try:
        return Configuration.model_validate(data)
    except ValidationError as e:
        raise P1ConfigurationError(f"Invalid settings in {path}: {e}") from e


def write_default_configuration(path: Path = DEFAULT_SETTINGS_PATH) -> Configuration:
    """Write a settings file holding the default configuration and return it."""
    configuration = Configuration()

    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(configuration.model_dump(), f, sort_keys=False)

    return configuration
