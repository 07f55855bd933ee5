"""Decoded ON/OFF views of bit-field holding registers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields

__all__ = ["Register21Bits", "Register110Bits"]


def _flag(value: int, bit: int) -> str:
    mask = 1 << bit
    return "ON" if value & mask == mask else "OFF"


# Field name -> bit number. charge_priority_en reads bit 1, matching the
# established output of the bridge.
_REGISTER21_LAYOUT = {
    "eps_en": 0,
    "ovf_load_derate_en": 1,
    "drms_en": 2,
    "lvrt_en": 3,
    "anti_island_en": 4,
    "neutral_detect_en": 5,
    "grid_on_power_ss_en": 6,
    "ac_charge_en": 7,
    "sw_seamless_en": 8,
    "set_to_standby": 9,
    "forced_discharge_en": 10,
    "charge_priority_en": 1,
    "iso_en": 12,
    "gfci_en": 13,
    "dci_en": 14,
    "feed_in_grid_en": 15,
}

_REGISTER110_LAYOUT = {
    "ub_pv_grid_off_en": 0,
    "ub_run_without_grid": 1,
    "ub_micro_grid_en": 2,
}


@dataclass(frozen=True)
class Register21Bits:
    """Flags held in holding register 21."""

    eps_en: str
    ovf_load_derate_en: str
    drms_en: str
    lvrt_en: str
    anti_island_en: str
    neutral_detect_en: str
    grid_on_power_ss_en: str
    ac_charge_en: str
    sw_seamless_en: str
    set_to_standby: str
    forced_discharge_en: str
    charge_priority_en: str
    iso_en: str
    gfci_en: str
    dci_en: str
    feed_in_grid_en: str

    @classmethod
    def from_value(cls, value: int) -> "Register21Bits":
        return cls(**{f.name: _flag(value, _REGISTER21_LAYOUT[f.name]) for f in fields(cls)})

    def to_dict(self) -> dict[str, str]:
        """Return the flags in register order, ready for JSON."""
        return asdict(self)


@dataclass(frozen=True)
class Register110Bits:
    """Flags held in holding register 110."""

    ub_pv_grid_off_en: str
    ub_run_without_grid: str
    ub_micro_grid_en: str

    @classmethod
    def from_value(cls, value: int) -> "Register110Bits":
        return cls(**{f.name: _flag(value, _REGISTER110_LAYOUT[f.name]) for f in fields(cls)})

    def to_dict(self) -> dict[str, str]:
        """Return the flags in register order, ready for JSON."""
        return asdict(self)