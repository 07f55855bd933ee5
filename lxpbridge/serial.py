"""Ten-byte serial numbers identifying dataloggers and inverters."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Serial"]

_SERIAL_LENGTH = 10


@dataclass(frozen=True)
class Serial:
    """A fixed-length serial number held as raw bytes."""

    data: bytes

    def __post_init__(self) -> None:
        raw = bytes(self.data)
        if len(raw) != _SERIAL_LENGTH:
            raise ValueError(
                f"serial must be exactly {_SERIAL_LENGTH} bytes, got {len(raw)}"
            )
        object.__setattr__(self, "data", raw)

    @classmethod
    def from_str(cls, text: str) -> "Serial":
        """Build a serial from text that encodes to exactly ten bytes."""
        encoded = text.encode("utf-8")
        if len(encoded) != _SERIAL_LENGTH:
            raise ValueError(f"{text} must be exactly {_SERIAL_LENGTH} characters")
        return cls(encoded)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | list[int]) -> "Serial":
        """Build a serial from exactly ten raw bytes."""
        return cls(bytes(data))

    @classmethod
    def default(cls) -> "Serial":
        """A serial of ten zero bytes."""
        return cls(bytes(_SERIAL_LENGTH))

    def __str__(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return str(self)