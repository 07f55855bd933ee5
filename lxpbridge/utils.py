"""Small numeric and time helpers shared across the package."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from datetime import datetime, timezone

__all__ = ["UnixTime", "round_decimals", "i16ify", "u16ify", "utc_now"]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def round_decimals(x: float, decimals: int) -> float:
    """Round ``x`` to ``decimals`` places, halves away from zero."""
    scale = float(10**decimals)
    scaled = x * scale
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / scale


def _two_bytes(data: bytes | bytearray | list[int], offset: int) -> bytes:
    chunk = bytes(data[offset : offset + 2])
    if offset < 0 or len(chunk) != 2:
        raise IndexError(f"need 2 bytes at offset {offset}, have {len(data)} bytes")
    return chunk


def i16ify(data: bytes | bytearray | list[int], offset: int) -> int:
    """Read a little-endian signed 16-bit integer at ``offset``."""
    return struct.unpack("<h", _two_bytes(data, offset))[0]


def u16ify(data: bytes | bytearray | list[int], offset: int) -> int:
    """Read a little-endian unsigned 16-bit integer at ``offset``."""
    return struct.unpack("<H", _two_bytes(data, offset))[0]


@dataclass(frozen=True)
class UnixTime:
    """A point in time that serialises as whole seconds since the epoch."""

    time: datetime = field(default_factory=utc_now)

    @classmethod
    def now(cls) -> "UnixTime":
        """Return the current UTC time."""
        return cls(utc_now())

    def timestamp(self) -> int:
        """Seconds since the epoch, rounded down."""
        moment = self.time
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return math.floor(moment.timestamp())