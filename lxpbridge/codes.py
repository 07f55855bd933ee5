"""Protocol enumerations and human-readable status, warning and fault codes."""

from __future__ import annotations

from enum import IntEnum

__all__ = [
    "TcpFunction",
    "DeviceFunction",
    "Register",
    "RegisterBit",
    "status_string",
    "warning_code_string",
    "fault_code_string",
]


class TcpFunction(IntEnum):
    HEARTBEAT = 193
    TRANSLATED_DATA = 194
    READ_PARAM = 195
    WRITE_PARAM = 196


class DeviceFunction(IntEnum):
    READ_HOLD = 3
    READ_INPUT = 4
    WRITE_SINGLE = 6
    WRITE_MULTI = 16


class Register(IntEnum):
    REGISTER21 = 21
    CHARGE_POWER_PERCENT_CMD = 64  # system charge rate (%)
    DISCHG_POWER_PERCENT_CMD = 65  # system discharge rate (%)
    AC_CHARGE_POWER_CMD = 66  # grid charge power rate (%)
    AC_CHARGE_SOC_LIMIT = 67  # AC charge SOC limit (%)
    FORCED_CHARGE_SOC_LIMIT = 75
    FORCED_DISCHG_SOC_LIMIT = 83
    DISCHG_CUT_OFF_SOC_EOD = 105
    EPS_DISCHG_CUTOFF_SOC_EOD = 125
    AC_CHARGE_START_SOC_LIMIT = 160
    AC_CHARGE_END_SOC_LIMIT = 161


class RegisterBit(IntEnum):
    # bits within register 21
    AC_CHARGE_ENABLE = 1 << 7
    FORCED_DISCHARGE_ENABLE = 1 << 10
    CHARGE_PRIORITY_ENABLE = 1 << 11


_STATUS = {
    0x00: "Standby",
    0x02: "FW Updating",
    0x04: "PV On-grid",
    0x08: "PV Charge",
    0x0C: "PV Charge On-grid",
    0x10: "Battery On-grid",
    0x11: "Bypass",
    0x14: "PV & Battery On-grid",
    0x19: "PV Charge + Bypass",
    0x20: "AC Charge",
    0x28: "PV & AC Charge",
    0x40: "Battery Off-grid",
    0x80: "PV Off-grid",
    0xC0: "PV & Battery Off-grid",
    0x88: "PV Charge Off-grid",
}

_WARNINGS = (
    "W000: Battery communication failure",
    "W001: AFCI communication failure",
    "W002: AFCI high",
    "W003: Meter communication failure",
    "W004: Both charge and discharge forbidden by battery",
    "W005: Auto test failed",
    "W006: Reserved",
    "W007: LCD communication failure",
    "W008: FW version mismatch",
    "W009: Fan stuck",
    "W010: Reserved",
    "W011: Parallel number out of range",
    "W012: Bat On Mos",
    "W013: Overtemperature (NTC reading is too high)",
    "W014: Reserved",
    "W015: Battery reverse connection",
    "W016: Grid power outage",
    "W017: Grid voltage out of range",
    "W018: Grid frequency out of range",
    "W019: Reserved",
    "W020: PV insulation low",
    "W021: Leakage current high",
    "W022: DCI high",
    "W023: PV short",
    "W024: Reserved",
    "W025: Battery voltage high",
    "W026: Battery voltage low",
    "W027: Battery open circuit",
    "W028: EPS overload",
    "W029: EPS voltage high",
    "W030: Meter reverse connection",
    "W031: DCV high",
)

_FAULTS = (
    "E000: Internal communication fault 1",
    "E001: Model fault",
    "E002: BatOnMosFail",
    "E003: CT Fail",
    "E004: Reserved",
    "E005: Reserved",
    "E006: Reserved",
    "E007: Reserved",
    "E008: CAN communication error in parallel system",
    "E009: master lost in parallel system",
    "E010: multiple master units in parallel system",
    "E011: AC input inconsistent in parallel system",
    "E012: UPS short",
    "E013: Reverse current on UPS output",
    "E014: Bus short",
    "E015: Phase error in three phase system",
    "E016: Relay check fault",
    "E017: Internal communication fault 2",
    "E018: Internal communication fault 3",
    "E019: Bus voltage high",
    "E020: EPS connection fault",
    "E021: PV voltage high",
    "E022: Over current protection",
    "E023: Neutral fault",
    "E024: PV short",
    "E025: Radiator temperature over range",
    "E026: Internal fault",
    "E027: Sample inconsistent between Main CPU and redundant CPU",
    "E028: Reserved",
    "E029: Reserved",
    "E030: Reserved",
    "E031: Internal communication fault 4",
)


def status_string(value: int) -> str:
    """Describe an inverter status register value."""
    return _STATUS.get(value, "Unknown")


def _lowest_bit_text(value: int, table: tuple[str, ...]) -> str:
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"code {value} is not an unsigned 32-bit value")
    if value == 0:
        return "OK"
    lowest = (value & -value).bit_length() - 1
    return table[lowest]


def warning_code_string(value: int) -> str:
    """Describe the lowest set bit of a 32-bit warning code, or "OK"."""
    return _lowest_bit_text(value, _WARNINGS)


def fault_code_string(value: int) -> str:
    """Describe the lowest set bit of a 32-bit fault code, or "OK"."""
    return _lowest_bit_text(value, _FAULTS)