"""OBIS (Object Identification System) field catalog and resolver.

This module maps the OBIS code at the start of a P1 data line to the semantic
field it reports:
- ObisReference enum naming every known field
- _FieldDescriptor metadata structure for each catalog entry
- Static catalog table with exact-match lookup

An OBIS code in a telegram reads 'A-B:C.D.E', for example '1-0:1.8.1'. The
'A-B:' channel prefix is skipped and only the 'C.D.E' suffix is matched, so
lines sharing a suffix on different channels resolve to the same field.

Reference: DSMR P1 Companion Standard 5.0.2
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from ..exceptions import P1MissingValueDelimiterError
from .common import OBIS_CHANNEL_PREFIX_LENGTH, VALUE_START

# =============================================================================
# Field identities
# =============================================================================


class ObisReference(StrEnum):
    """Known P1 measurement fields.

    The string value is the field name used in output.
    """

    VERSION_INFORMATION = "VersionInformation"
    MESSAGE_DATE_TIME_STAMP = "MessageDateTimeStamp"
    ELECTRICITY_EQUIPMENT_IDENTIFIER = "ElectricityEquipmentIdentifier"

    # Energy registers
    METER_READING_ELECTRICITY_DELIVERED_TO_CLIENT_TARIFF_1 = "MeterReadingElectricityDeliveredToClientTariff1"
    METER_READING_ELECTRICITY_DELIVERED_TO_CLIENT_TARIFF_2 = "MeterReadingElectricityDeliveredToClientTariff2"
    METER_READING_ELECTRICITY_DELIVERED_BY_CLIENT_TARIFF_1 = "MeterReadingElectricityDeliveredByClientTariff1"
    METER_READING_ELECTRICITY_DELIVERED_BY_CLIENT_TARIFF_2 = "MeterReadingElectricityDeliveredByClientTariff2"
    TARIFF_INDICATOR_ELECTRICITY = "TariffIndicatorElectricity"

    # Power
    ACTUAL_ELECTRICITY_POWER_DELIVERED = "ActualElectricityPowerDelivered"
    ACTUAL_ELECTRICITY_POWER_RECEIVED = "ActualElectricityPowerReceived"

    # Power failures
    NUMBER_POWER_FAILURES_ANY_PHASE = "NumberPowerFailuresAnyPhase"
    NUMBER_LONG_POWER_FAILURES_ANY_PHASE = "NumberLongPowerFailuresAnyPhase"
    POWER_FAILURE_EVENT_LOG = "PowerFailureEventLog"

    # Voltage quality
    NUMBER_VOLTAGE_SAGS_PHASE_L1 = "NumberVoltageSagsPhaseL1"
    NUMBER_VOLTAGE_SAGS_PHASE_L2 = "NumberVoltageSagsPhaseL2"
    NUMBER_VOLTAGE_SAGS_PHASE_L3 = "NumberVoltageSagsPhaseL3"
    NUMBER_VOLTAGE_SWELLS_PHASE_L1 = "NumberVoltageSwellsPhaseL1"
    NUMBER_VOLTAGE_SWELLS_PHASE_L2 = "NumberVoltageSwellsPhaseL2"
    NUMBER_VOLTAGE_SWELLS_PHASE_L3 = "NumberVoltageSwellsPhaseL3"

    # Text messages
    TEXT_MESSAGE_CODES = "TextMessageCodes"
    TEXT_MESSAGE_MAX_CHARACTERS = "TextMessageMaxCharacters"

    # Instantaneous values per phase
    INSTANTANEOUS_CURRENT_L1 = "InstantaneousCurrentL1"
    INSTANTANEOUS_CURRENT_L2 = "InstantaneousCurrentL2"
    INSTANTANEOUS_CURRENT_L3 = "InstantaneousCurrentL3"
    INSTANTANEOUS_ACTIVE_POWER_POSITIVE_L1 = "InstantaneousActivePowerPositiveL1"
    INSTANTANEOUS_ACTIVE_POWER_POSITIVE_L2 = "InstantaneousActivePowerPositiveL2"
    INSTANTANEOUS_ACTIVE_POWER_POSITIVE_L3 = "InstantaneousActivePowerPositiveL3"
    INSTANTANEOUS_ACTIVE_POWER_NEGATIVE_L1 = "InstantaneousActivePowerNegativeL1"
    INSTANTANEOUS_ACTIVE_POWER_NEGATIVE_L2 = "InstantaneousActivePowerNegativeL2"
    INSTANTANEOUS_ACTIVE_POWER_NEGATIVE_L3 = "InstantaneousActivePowerNegativeL3"

    # M-Bus connected devices
    DEVICE_TYPE = "DeviceType"
    OTHER_EQUIPMENT_IDENTIFIER = "OtherEquipmentIdentifier"
    LAST_HOURLY_VALUE_METER_READING = "LastHourlyValueMeterReading"


# =============================================================================
# Field Descriptor
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class _FieldDescriptor:
    """Catalog entry for one OBIS code suffix."""

    code: str  # 'C.D.E' suffix of the OBIS code

    reference: ObisReference

    description: str  # Human-readable description of the value


# =============================================================================
# Field Catalog
# =============================================================================


_FieldTable: tuple[_FieldDescriptor, ...] = (
    # ==========================================================================
    # Header information
    # ==========================================================================
    _FieldDescriptor(
        code="0.2.8",
        reference=ObisReference.VERSION_INFORMATION,
        description="Version information for P1 output",
    ),
    _FieldDescriptor(
        code="1.0.0",
        reference=ObisReference.MESSAGE_DATE_TIME_STAMP,
        description="Date-time stamp of the P1 message",
    ),
    _FieldDescriptor(
        code="96.1.1",
        reference=ObisReference.ELECTRICITY_EQUIPMENT_IDENTIFIER,
        description="Equipment identifier",
    ),
    # ==========================================================================
    # Energy registers
    # ==========================================================================
    _FieldDescriptor(
        code="1.8.1",
        reference=ObisReference.METER_READING_ELECTRICITY_DELIVERED_TO_CLIENT_TARIFF_1,
        description="Electricity delivered to client, tariff 1",
    ),
    _FieldDescriptor(
        code="1.8.2",
        reference=ObisReference.METER_READING_ELECTRICITY_DELIVERED_TO_CLIENT_TARIFF_2,
        description="Electricity delivered to client, tariff 2",
    ),
    _FieldDescriptor(
        code="2.8.1",
        reference=ObisReference.METER_READING_ELECTRICITY_DELIVERED_BY_CLIENT_TARIFF_1,
        description="Electricity delivered by client, tariff 1",
    ),
    _FieldDescriptor(
        code="2.8.2",
        reference=ObisReference.METER_READING_ELECTRICITY_DELIVERED_BY_CLIENT_TARIFF_2,
        description="Electricity delivered by client, tariff 2",
    ),
    _FieldDescriptor(
        code="96.14.0",
        reference=ObisReference.TARIFF_INDICATOR_ELECTRICITY,
        description="Tariff indicator electricity",
    ),
    # ==========================================================================
    # Actual power (all phases)
    # ==========================================================================
    _FieldDescriptor(
        code="1.7.0",
        reference=ObisReference.ACTUAL_ELECTRICITY_POWER_DELIVERED,
        description="Actual electricity power delivered (+P)",
    ),
    _FieldDescriptor(
        code="2.7.0",
        reference=ObisReference.ACTUAL_ELECTRICITY_POWER_RECEIVED,
        description="Actual electricity power received (-P)",
    ),
    # ==========================================================================
    # Power failures
    # ==========================================================================
    _FieldDescriptor(
        code="96.7.21",
        reference=ObisReference.NUMBER_POWER_FAILURES_ANY_PHASE,
        description="Number of power failures in any phase",
    ),
    _FieldDescriptor(
        code="96.7.9",
        reference=ObisReference.NUMBER_LONG_POWER_FAILURES_ANY_PHASE,
        description="Number of long power failures in any phase",
    ),
    _FieldDescriptor(
        code="99.97.0",
        reference=ObisReference.POWER_FAILURE_EVENT_LOG,
        description="Power failure event log (long power failures)",
    ),
    # ==========================================================================
    # Voltage sags and swells
    # ==========================================================================
    _FieldDescriptor(
        code="32.32.0",
        reference=ObisReference.NUMBER_VOLTAGE_SAGS_PHASE_L1,
        description="Number of voltage sags in phase L1",
    ),
    _FieldDescriptor(
        code="52.32.0",
        reference=ObisReference.NUMBER_VOLTAGE_SAGS_PHASE_L2,
        description="Number of voltage sags in phase L2",
    ),
    _FieldDescriptor(
        code="72.32.0",
        reference=ObisReference.NUMBER_VOLTAGE_SAGS_PHASE_L3,
        description="Number of voltage sags in phase L3",
    ),
    _FieldDescriptor(
        code="32.36.0",
        reference=ObisReference.NUMBER_VOLTAGE_SWELLS_PHASE_L1,
        description="Number of voltage swells in phase L1",
    ),
    _FieldDescriptor(
        code="52.36.0",
        reference=ObisReference.NUMBER_VOLTAGE_SWELLS_PHASE_L2,
        description="Number of voltage swells in phase L2",
    ),
    _FieldDescriptor(
        code="72.36.0",
        reference=ObisReference.NUMBER_VOLTAGE_SWELLS_PHASE_L3,
        description="Number of voltage swells in phase L3",
    ),
    # ==========================================================================
    # Text messages
    # ==========================================================================
    _FieldDescriptor(
        code="96.13.1",
        reference=ObisReference.TEXT_MESSAGE_CODES,
        description="Text message codes",
    ),
    _FieldDescriptor(
        code="96.13.0",
        reference=ObisReference.TEXT_MESSAGE_MAX_CHARACTERS,
        description="Text message (max 1024 characters)",
    ),
    # ==========================================================================
    # Instantaneous current
    # ==========================================================================
    _FieldDescriptor(
        code="31.7.0",
        reference=ObisReference.INSTANTANEOUS_CURRENT_L1,
        description="Instantaneous current L1",
    ),
    _FieldDescriptor(
        code="51.7.0",
        reference=ObisReference.INSTANTANEOUS_CURRENT_L2,
        description="Instantaneous current L2",
    ),
    _FieldDescriptor(
        code="71.7.0",
        reference=ObisReference.INSTANTANEOUS_CURRENT_L3,
        description="Instantaneous current L3",
    ),
    # ==========================================================================
    # Instantaneous active power
    # ==========================================================================
    _FieldDescriptor(
        code="21.7.0",
        reference=ObisReference.INSTANTANEOUS_ACTIVE_POWER_POSITIVE_L1,
        description="Instantaneous active power L1 (+P)",
    ),
    _FieldDescriptor(
        code="41.7.0",
        reference=ObisReference.INSTANTANEOUS_ACTIVE_POWER_POSITIVE_L2,
        description="Instantaneous active power L2 (+P)",
    ),
    _FieldDescriptor(
        code="61.7.0",
        reference=ObisReference.INSTANTANEOUS_ACTIVE_POWER_POSITIVE_L3,
        description="Instantaneous active power L3 (+P)",
    ),
    _FieldDescriptor(
        code="22.7.0",
        reference=ObisReference.INSTANTANEOUS_ACTIVE_POWER_NEGATIVE_L1,
        description="Instantaneous active power L1 (-P)",
    ),
    _FieldDescriptor(
        code="42.7.0",
        reference=ObisReference.INSTANTANEOUS_ACTIVE_POWER_NEGATIVE_L2,
        description="Instantaneous active power L2 (-P)",
    ),
    _FieldDescriptor(
        code="62.7.0",
        reference=ObisReference.INSTANTANEOUS_ACTIVE_POWER_NEGATIVE_L3,
        description="Instantaneous active power L3 (-P)",
    ),
    # ==========================================================================
    # M-Bus devices (gas, water, thermal)
    # ==========================================================================
    _FieldDescriptor(
        code="24.1.0",
        reference=ObisReference.DEVICE_TYPE,
        description="Device type",
    ),
    _FieldDescriptor(
        code="96.1.0",
        reference=ObisReference.OTHER_EQUIPMENT_IDENTIFIER,
        description="Equipment identifier of the connected device",
    ),
    _FieldDescriptor(
        code="24.2.1",
        reference=ObisReference.LAST_HOURLY_VALUE_METER_READING,
        description="Last captured meter reading of the connected device",
    ),
)

_FieldIndex: dict[str, _FieldDescriptor] = {descriptor.code: descriptor for descriptor in _FieldTable}


# =============================================================================
# Lookup
# =============================================================================


@lru_cache(maxsize=64)
def find_descriptor(suffix: str) -> _FieldDescriptor | None:
    """Find the catalog entry for an OBIS code suffix.

    Args:
        suffix: The 'C.D.E' part of an OBIS code, for example '1.8.1'

    Returns:
        The matching field descriptor, or None for codes not in the catalog
    """
    return _FieldIndex.get(suffix)


def catalog() -> Iterator[_FieldDescriptor]:
    """Iterate over all catalog entries in table order."""
    yield from _FieldTable


def obis_code(line: str) -> str:
    """Return the OBIS code of a data line (the text before the first '(').

    Raises:
        P1MissingValueDelimiterError: If the line has no '('
    """
    code, separator, _ = line.partition(VALUE_START)
    if not separator:
        raise P1MissingValueDelimiterError(f"No '{VALUE_START}' found in data line: {line!r}")

    return code


def obis_suffix(code: str) -> str:
    """Strip the 'A-B:' channel prefix from an OBIS code.

    The prefix is skipped unconditionally: it is not inspected, only its fixed
    width is assumed.
    """
    return code[OBIS_CHANNEL_PREFIX_LENGTH:]


def resolve(line: str) -> ObisReference | None:
    """Resolve a data line to the field it reports.

    Unknown codes are expected (newer meter firmware emits undocumented codes)
    and resolve to None.

    Args:
        line: A data line such as '1-0:1.8.1(001234.567*kWh)'

    Returns:
        The field identity, or None if the code is not catalogued

    Raises:
        P1MissingValueDelimiterError: If the line has no '('
    """
    descriptor = find_descriptor(obis_suffix(obis_code(line)))
    if descriptor is None:
        return None

    return descriptor.reference
