"""Decoded input register blocks read from an inverter."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Optional, TypeVar

from .serial import Serial
from .utils import UnixTime, round_decimals

__all__ = ["ReadInputAll", "ReadInput1", "ReadInput2", "ReadInput3", "ReadInputs"]

_T = TypeVar("_T")


def _wire(fmt: str, divisor: Optional[int] = None, skip: int = 0) -> Any:
    return field(metadata={"kind": "wire", "fmt": fmt, "divisor": divisor, "skip": skip})


def _i8() -> Any:
    return _wire("<b")


def _u16() -> Any:
    return _wire("<H")


def _i16(divisor: Optional[int] = None, skip: int = 0) -> Any:
    return _wire("<h", divisor, skip)


def _u32(divisor: Optional[int] = None, skip: int = 0) -> Any:
    return _wire("<I", divisor, skip)


def _derived() -> Any:
    return field(metadata={"kind": "derived"})


def _time(skip: int = 0) -> Any:
    return field(metadata={"kind": "time", "skip": skip})


def _datalog() -> Any:
    return field(metadata={"kind": "datalog"})


def _wrap_i16(value: int) -> int:
    return (value + 0x8000) % 0x10000 - 0x8000


def _derive_day(values: dict[str, Any]) -> None:
    values["p_pv"] = _wrap_i16(values["p_pv_1"] + values["p_pv_2"] + values["p_pv_3"])
    values["p_grid"] = _wrap_i16(values["p_to_user"] - values["p_to_grid"])
    values["p_battery"] = _wrap_i16(values["p_charge"] - values["p_discharge"])
    values["e_pv_day"] = round_decimals(
        values["e_pv_day_1"] + values["e_pv_day_2"] + values["e_pv_day_3"], 1
    )


def _derive_all(values: dict[str, Any]) -> None:
    values["e_pv_all"] = round_decimals(
        values["e_pv_all_1"] + values["e_pv_all_2"] + values["e_pv_all_3"], 1
    )


def _derive_both(values: dict[str, Any]) -> None:
    _derive_day(values)
    _derive_all(values)


def _derive_nothing(values: dict[str, Any]) -> None:
    pass


def _parse_block(
    cls: type[_T],
    data: bytes | bytearray | list[int],
    datalog: Serial,
    derive: Callable[[dict[str, Any]], None],
) -> _T:
    """Decode little-endian register bytes into cls; trailing bytes are ignored."""
    view = bytes(data)
    pos = 0
    values: dict[str, Any] = {}
    for f in fields(cls):  # type: ignore[arg-type]
        meta = f.metadata
        kind = meta["kind"]
        pos += meta.get("skip", 0)
        if pos > len(view):
            raise ValueError(f"{cls.__name__}: input too short ({len(view)} bytes)")
        if kind == "wire":
            fmt = meta["fmt"]
            size = struct.calcsize(fmt)
            if pos + size > len(view):
                raise ValueError(f"{cls.__name__}: input too short ({len(view)} bytes)")
            (raw,) = struct.unpack_from(fmt, view, pos)
            pos += size
            divisor = meta["divisor"]
            values[f.name] = raw / divisor if divisor else raw
        elif kind == "time":
            values[f.name] = UnixTime.now()
        elif kind == "datalog":
            values[f.name] = datalog
    derive(values)
    return cls(**values)


def _block_to_dict(block: Any) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for f in fields(block):
        value = getattr(block, f.name)
        if isinstance(value, UnixTime):
            value = value.timestamp()
        elif isinstance(value, Serial):
            value = str(value)
        result[f.name] = value
    return result


@dataclass(frozen=True)
class ReadInputAll:
    """All input registers, decoded from a single 254-byte read."""

    status: int = _i16()
    v_pv_1: float = _i16(10)
    v_pv_2: float = _i16(10)
    v_pv_3: float = _i16(10)
    v_bat: float = _i16(10)
    soc: int = _i8()
    soh: int = _i8()
    internal_fault: int = _u16()
    p_pv: int = _derived()
    p_pv_1: int = _i16()
    p_pv_2: int = _i16()
    p_pv_3: int = _i16()
    p_battery: int = _derived()
    p_charge: int = _i16()
    p_discharge: int = _i16()
    v_ac_r: float = _i16(10)
    v_ac_s: float = _i16(10)
    v_ac_t: float = _i16(10)
    f_ac: float = _i16(100)
    p_inv: int = _i16()
    p_rec: int = _i16()
    pf: float = _i16(1000, skip=2)
    v_eps_r: float = _i16(10)
    v_eps_s: float = _i16(10)
    v_eps_t: float = _i16(10)
    f_eps: float = _i16(100)
    p_eps: int = _i16()
    s_eps: int = _i16()
    p_grid: int = _derived()
    p_to_grid: int = _i16()
    p_to_user: int = _i16()
    e_pv_day: float = _derived()
    e_pv_day_1: float = _i16(10)
    e_pv_day_2: float = _i16(10)
    e_pv_day_3: float = _i16(10)
    e_inv_day: float = _i16(10)
    e_rec_day: float = _i16(10)
    e_chg_day: float = _i16(10)
    e_dischg_day: float = _i16(10)
    e_eps_day: float = _i16(10)
    e_to_grid_day: float = _i16(10)
    e_to_user_day: float = _i16(10)
    v_bus_1: float = _i16(10)
    v_bus_2: float = _i16(10)
    e_pv_all: float = _derived()
    e_pv_all_1: float = _u32(10)
    e_pv_all_2: float = _u32(10)
    e_pv_all_3: float = _u32(10)
    e_inv_all: float = _u32(10)
    e_rec_all: float = _u32(10)
    e_chg_all: float = _u32(10)
    e_dischg_all: float = _u32(10)
    e_eps_all: float = _u32(10)
    e_to_grid_all: float = _u32(10)
    e_to_user_all: float = _u32(10)
    fault_code: int = _u32()
    warning_code: int = _u32()
    t_inner: int = _i16()
    t_rad_1: int = _i16()
    t_rad_2: int = _i16()
    t_bat: int = _i16()
    runtime: int = _u32(skip=2)
    # 18 bytes of auto-test data, then battery brand / comms type
    max_chg_curr: float = _i16(100, skip=20)
    max_dischg_curr: float = _i16(100)
    charge_volt_ref: float = _i16(10)
    dischg_cut_volt: float = _i16(10)
    bat_status_0: int = _i16()
    bat_status_1: int = _i16()
    bat_status_2: int = _i16()
    bat_status_3: int = _i16()
    bat_status_4: int = _i16()
    bat_status_5: int = _i16()
    bat_status_6: int = _i16()
    bat_status_7: int = _i16()
    bat_status_8: int = _i16()
    bat_status_9: int = _i16()
    bat_status_inv: int = _i16()
    bat_count: int = _i16()
    bat_capacity: int = _i16()
    bat_current: float = _i16(100)
    bms_event_1: int = _i16()
    bms_event_2: int = _i16()
    max_cell_voltage: float = _i16(100)
    min_cell_voltage: float = _i16(100)
    max_cell_temp: float = _i16(100)
    min_cell_temp: float = _i16(100)
    bms_fw_update_state: int = _i16()
    cycle_count: int = _i16()
    vbat_inv: float = _i16(10)
    time: UnixTime = _time(skip=14)
    datalog: Serial = _datalog()

    @classmethod
    def parse(cls, data: bytes | bytearray | list[int], datalog: Serial) -> ReadInputAll:
        """Decode a full 254-byte input read."""
        return _parse_block(cls, data, datalog, _derive_both)

    def to_dict(self) -> dict[str, Any]:
        """Field values in declaration order, ready for JSON."""
        return _block_to_dict(self)


@dataclass(frozen=True)
class ReadInput1:
    """Input registers 0 to 39."""

    status: int = _i16()
    v_pv_1: float = _i16(10)
    v_pv_2: float = _i16(10)
    v_pv_3: float = _i16(10)
    v_bat: float = _i16(10)
    soc: int = _i8()
    soh: int = _i8()
    internal_fault: int = _u16()
    p_pv: int = _derived()
    p_pv_1: int = _i16()
    p_pv_2: int = _i16()
    p_pv_3: int = _i16()
    p_battery: int = _derived()
    p_charge: int = _i16()
    p_discharge: int = _i16()
    v_ac_r: float = _i16(10)
    v_ac_s: float = _i16(10)
    v_ac_t: float = _i16(10)
    f_ac: float = _i16(100)
    p_inv: int = _i16()
    p_rec: int = _i16()
    pf: float = _i16(1000, skip=2)
    v_eps_r: float = _i16(10)
    v_eps_s: float = _i16(10)
    v_eps_t: float = _i16(10)
    f_eps: float = _i16(100)
    p_eps: int = _i16()
    s_eps: int = _i16()
    p_grid: int = _derived()
    p_to_grid: int = _i16()
    p_to_user: int = _i16()
    e_pv_day: float = _derived()
    e_pv_day_1: float = _i16(10)
    e_pv_day_2: float = _i16(10)
    e_pv_day_3: float = _i16(10)
    e_inv_day: float = _i16(10)
    e_rec_day: float = _i16(10)
    e_chg_day: float = _i16(10)
    e_dischg_day: float = _i16(10)
    e_eps_day: float = _i16(10)
    e_to_grid_day: float = _i16(10)
    e_to_user_day: float = _i16(10)
    v_bus_1: float = _i16(10)
    v_bus_2: float = _i16(10)
    time: UnixTime = _time()
    datalog: Serial = _datalog()

    @classmethod
    def parse(cls, data: bytes | bytearray | list[int], datalog: Serial) -> ReadInput1:
        """Decode the first 80-byte input block."""
        return _parse_block(cls, data, datalog, _derive_day)

    def to_dict(self) -> dict[str, Any]:
        """Field values in declaration order, ready for JSON."""
        return _block_to_dict(self)


@dataclass(frozen=True)
class ReadInput2:
    """Input registers 40 to 79."""

    e_pv_all: float = _derived()
    e_pv_all_1: float = _u32(10)
    e_pv_all_2: float = _u32(10)
    e_pv_all_3: float = _u32(10)
    e_inv_all: float = _u32(10)
    e_rec_all: float = _u32(10)
    e_chg_all: float = _u32(10)
    e_dischg_all: float = _u32(10)
    e_eps_all: float = _u32(10)
    e_to_grid_all: float = _u32(10)
    e_to_user_all: float = _u32(10)
    fault_code: int = _u32()
    warning_code: int = _u32()
    t_inner: int = _i16()
    t_rad_1: int = _i16()
    t_rad_2: int = _i16()
    t_bat: int = _i16()
    runtime: int = _u32(skip=2)
    time: UnixTime = _time()
    datalog: Serial = _datalog()

    @classmethod
    def parse(cls, data: bytes | bytearray | list[int], datalog: Serial) -> ReadInput2:
        """Decode the second 80-byte input block."""
        return _parse_block(cls, data, datalog, _derive_all)

    def to_dict(self) -> dict[str, Any]:
        """Field values in declaration order, ready for JSON."""
        return _block_to_dict(self)


@dataclass(frozen=True)
class ReadInput3:
    """Input registers 80 to 119."""

    max_chg_curr: float = _i16(100, skip=2)
    max_dischg_curr: float = _i16(100)
    charge_volt_ref: float = _i16(10)
    dischg_cut_volt: float = _i16(10)
    bat_status_0: int = _i16()
    bat_status_1: int = _i16()
    bat_status_2: int = _i16()
    bat_status_3: int = _i16()
    bat_status_4: int = _i16()
    bat_status_5: int = _i16()
    bat_status_6: int = _i16()
    bat_status_7: int = _i16()
    bat_status_8: int = _i16()
    bat_status_9: int = _i16()
    bat_status_inv: int = _i16()
    bat_count: int = _i16()
    bat_capacity: int = _i16()
    bat_current: float = _i16(100)
    bms_event_1: int = _i16()
    bms_event_2: int = _i16()
    max_cell_voltage: float = _i16(100)
    min_cell_voltage: float = _i16(100)
    max_cell_temp: float = _i16(100)
    min_cell_temp: float = _i16(100)
    bms_fw_update_state: int = _i16()
    cycle_count: int = _i16()
    vbat_inv: float = _i16(10)
    time: UnixTime = _time()
    datalog: Serial = _datalog()

    @classmethod
    def parse(cls, data: bytes | bytearray | list[int], datalog: Serial) -> ReadInput3:
        """Decode the third 80-byte input block."""
        return _parse_block(cls, data, datalog, _derive_nothing)

    def to_dict(self) -> dict[str, Any]:
        """Field values in declaration order, ready for JSON."""
        return _block_to_dict(self)


def _field_values(block: Any) -> dict[str, Any]:
    return {f.name: getattr(block, f.name) for f in fields(block)}


@dataclass
class ReadInputs:
    """Collects the three partial input reads until a full set is present."""

    read_input_1: Optional[ReadInput1] = None
    read_input_2: Optional[ReadInput2] = None
    read_input_3: Optional[ReadInput3] = None

    def to_input_all(self) -> Optional[ReadInputAll]:
        """Combine the three reads, or return None if any is missing."""
        if self.read_input_1 is None or self.read_input_2 is None or self.read_input_3 is None:
            return None
        # time and datalog come from the first block
        merged = {
            **_field_values(self.read_input_3),
            **_field_values(self.read_input_2),
            **_field_values(self.read_input_1),
        }
        return ReadInputAll(**{f.name: merged[f.name] for f in fields(ReadInputAll)})