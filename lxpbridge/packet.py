"""Packets exchanged with an inverter's datalogger and their TCP framing."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Union

from .codes import DeviceFunction, TcpFunction
from .inputs import ReadInput1, ReadInput2, ReadInput3, ReadInputAll
from .serial import Serial
from .utils import i16ify, u16ify

__all__ = [
    "PacketError",
    "Heartbeat",
    "TranslatedData",
    "ReadParam",
    "WriteParam",
    "Packet",
    "ReadInput",
    "modbus_crc",
    "build_frame",
    "parse_packet",
]

log = logging.getLogger(__name__)

_PREFIX = bytes([161, 26])


class PacketError(ValueError):
    """Raised when a frame cannot be parsed or a packet cannot be decoded."""


def modbus_crc(data: bytes | bytearray | list[int]) -> int:
    """CRC-16/MODBUS of ``data``."""
    crc = 0xFFFF
    for byte in bytes(data):
        crc ^= byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ 0xA001
            else:
                crc >>= 1
    return crc


def _checksum(data: bytes) -> bytes:
    return struct.pack("<H", modbus_crc(data))


def _pairs(register: int, values: bytes, reader) -> list[tuple[int, int]]:
    return [
        (register + pos, reader(values[start : start + 2], 0))
        for pos, start in enumerate(range(0, len(values), 2))
    ]


@dataclass
class Heartbeat:
    """Keep-alive sent by the datalogger; it carries no data."""

    datalog: Serial

    @property
    def protocol(self) -> int:
        return 2

    @property
    def tcp_function(self) -> TcpFunction:
        return TcpFunction.HEARTBEAT

    @classmethod
    def decode(cls, frame: bytes | bytearray | list[int]) -> "Heartbeat":
        frame = bytes(frame)
        if len(frame) < 19:
            raise PacketError("heartbeat packet too short")
        if frame[18] != 0:
            raise PacketError(f"heartbeat with non-zero ({frame[18]}) length byte?")
        return cls(Serial.from_bytes(frame[8:18]))

    def to_bytes(self) -> bytes:
        return b"\x00"


@dataclass
class TranslatedData:
    """A Modbus-style register read or write relayed through the datalogger."""

    datalog: Serial
    device_function: DeviceFunction
    inverter: Serial
    register: int
    values: bytes

    def __post_init__(self) -> None:
        self.device_function = DeviceFunction(self.device_function)
        self.values = bytes(self.values)

    @property
    def protocol(self) -> int:
        return 2 if self.device_function == DeviceFunction.WRITE_MULTI else 1

    @property
    def tcp_function(self) -> TcpFunction:
        return TcpFunction.TRANSLATED_DATA

    def pairs(self) -> list[tuple[int, int]]:
        """(register, unsigned value) for each two-byte value."""
        return _pairs(self.register, self.values, u16ify)

    def value(self) -> int:
        """The first value as an unsigned 16-bit integer."""
        return u16ify(self.values, 0)

    def read_input(self) -> "ReadInput":
        """Decode the values as one of the known input register blocks."""
        layouts = {
            (0, 254): ReadInputAll,
            (0, 80): ReadInput1,
            (40, 80): ReadInput2,
            (80, 80): ReadInput3,
        }
        block = layouts.get((self.register, len(self.values)))
        if block is None:
            raise PacketError(
                f"unhandled ReadInput register={self.register} len={len(self.values)}"
            )
        try:
            return block.parse(self.values, self.datalog)
        except ValueError as err:
            raise PacketError(str(err)) from err

    @staticmethod
    def _has_value_length_byte(
        from_inverter: bool, protocol: int, device_function: DeviceFunction
    ) -> bool:
        p1 = protocol == 1
        if device_function in (DeviceFunction.READ_HOLD, DeviceFunction.READ_INPUT):
            return not p1 and from_inverter
        if device_function == DeviceFunction.WRITE_SINGLE:
            return False
        return not p1 and not from_inverter

    @classmethod
    def decode(cls, frame: bytes | bytearray | list[int]) -> "TranslatedData":
        frame = bytes(frame)
        if len(frame) < 38:
            raise PacketError("TranslatedData::decode packet too short")

        protocol = i16ify(frame, 2)
        datalog = Serial.from_bytes(frame[8:18])
        data = frame[20:-2]
        checksum = frame[-2:]
        expected = _checksum(data)
        if checksum != expected:
            raise PacketError(
                "TranslatedData::decode checksum mismatch - "
                f"got {list(checksum)}, expected {list(expected)}"
            )

        try:
            device_function = DeviceFunction(data[1])
        except ValueError as err:
            raise PacketError(f"unknown device function {data[1]}") from err
        inverter = Serial.from_bytes(data[2:12])
        register = i16ify(data, 12)

        value_len = 2
        value_offset = 14
        if cls._has_value_length_byte(True, protocol, device_function):
            value_len = data[value_offset]
            value_offset += 1

        values = data[value_offset:]
        if len(values) != value_len:
            raise PacketError(
                f"TranslatedData::decode mismatch: values.len()={len(values)}, "
                f"value_length_byte={value_len}"
            )
        return cls(datalog, device_function, inverter, register, values)

    def to_bytes(self) -> bytes:
        data = bytearray(2)  # data length, filled in below
        data += bytes([0, self.device_function])  # address 0: writing to inverter
        data += self.inverter.data
        data += struct.pack("<h", self.register)
        if self.device_function == DeviceFunction.WRITE_MULTI:
            data += struct.pack("<h", len(self.pairs()))
        if self._has_value_length_byte(False, self.protocol, self.device_function):
            data.append(len(self.values) & 0xFF)
        data += self.values
        data[0:2] = struct.pack("<h", len(data))
        # the checksum excludes the two length bytes
        data += _checksum(bytes(data[2:]))
        return bytes(data)


@dataclass
class ReadParam:
    """A datalogger parameter read."""

    datalog: Serial
    register: int
    values: bytes

    def __post_init__(self) -> None:
        self.values = bytes(self.values)

    @property
    def protocol(self) -> int:
        return 2

    @property
    def tcp_function(self) -> TcpFunction:
        return TcpFunction.READ_PARAM

    def pairs(self) -> list[tuple[int, int]]:
        """(register, signed value) for each two-byte value."""
        return _pairs(self.register, self.values, i16ify)

    def value(self) -> int:
        return u16ify(self.values, 0)

    @classmethod
    def decode(cls, frame: bytes | bytearray | list[int]) -> "ReadParam":
        frame = bytes(frame)
        if len(frame) < 24:
            raise PacketError("ReadParam::decode packet too short")

        protocol = i16ify(frame, 2)
        datalog = Serial.from_bytes(frame[8:18])
        data = frame[18:]
        register = i16ify(data, 0)

        value_len = 2
        value_offset = 2
        if protocol == 2:
            value_len = i16ify(data, value_offset)
            value_offset += 2

        values = data[value_offset:]
        if len(values) != value_len:
            raise PacketError(
                f"ReadParam::decode mismatch: values.len()={len(values)}, "
                f"value_length_byte={value_len}"
            )
        return cls(datalog, register, values)

    def to_bytes(self) -> bytes:
        return bytes([self.register & 0xFF, 0])


@dataclass
class WriteParam:
    """A datalogger parameter write."""

    datalog: Serial
    register: int
    values: bytes

    def __post_init__(self) -> None:
        self.values = bytes(self.values)

    @property
    def protocol(self) -> int:
        return 2

    @property
    def tcp_function(self) -> TcpFunction:
        return TcpFunction.WRITE_PARAM

    def pairs(self) -> list[tuple[int, int]]:
        """(register, signed value) for each two-byte value."""
        return _pairs(self.register, self.values, i16ify)

    def value(self) -> int:
        return u16ify(self.values, 0)

    @classmethod
    def decode(cls, frame: bytes | bytearray | list[int]) -> "WriteParam":
        frame = bytes(frame)
        if len(frame) < 21:
            raise PacketError("WriteParam::decode packet too short")

        datalog = Serial.from_bytes(frame[8:18])
        data = frame[18:]
        register = data[0]
        values = data[1:]
        if len(values) != 2:
            raise PacketError(
                f"WriteParam::decode mismatch: values.len()={len(values)}, "
                "value_length_byte=2"
            )
        return cls(datalog, register, values)

    def to_bytes(self) -> bytes:
        return (
            struct.pack("<h", self.register)
            + struct.pack("<h", len(self.values))
            + self.values
        )


Packet = Union[Heartbeat, TranslatedData, ReadParam, WriteParam]
ReadInput = Union[ReadInputAll, ReadInput1, ReadInput2, ReadInput3]

_DECODERS = {
    TcpFunction.HEARTBEAT: Heartbeat,
    TcpFunction.TRANSLATED_DATA: TranslatedData,
    TcpFunction.READ_PARAM: ReadParam,
    TcpFunction.WRITE_PARAM: WriteParam,
}


def build_frame(packet: Packet) -> bytes:
    """Wrap a packet in the TCP frame the datalogger expects."""
    data = packet.to_bytes()
    frame_length = 18 + len(data)
    header = struct.pack(
        "<BBhhBB",
        _PREFIX[0],
        _PREFIX[1],
        packet.protocol,
        frame_length - 6,
        1,
        packet.tcp_function,
    )
    return header + packet.datalog.data + data


def parse_packet(frame: bytes | bytearray | list[int]) -> Packet:
    """Decode one complete TCP frame into a packet."""
    frame = bytes(frame)
    if len(frame) < 18:
        raise PacketError("packet less than 18 bytes?")
    if frame[0:2] != _PREFIX:
        raise PacketError("invalid packet prefix")

    declared = u16ify(frame, 4)
    if len(frame) < declared - 6:
        raise PacketError(
            f"Parser::parse mismatch: input.len()={len(frame)}, "
            f"frame_length={declared - 6}"
        )

    try:
        function = TcpFunction(frame[7])
    except ValueError as err:
        raise PacketError(f"unhandled tcp_function={frame[7]}") from err

    return _DECODERS[function].decode(frame)