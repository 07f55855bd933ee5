"""Incremental splitting of a TCP byte stream into packets."""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from .packet import Packet, PacketError, parse_packet
from .utils import u16ify

__all__ = ["PacketDecoder"]

log = logging.getLogger(__name__)

_PREFIX = bytes([161, 26])


class PacketDecoder:
    """Buffers received bytes and yields complete packets as they arrive."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, data: bytes | bytearray) -> None:
        """Append received bytes to the buffer."""
        self._buffer += data

    def decode(self) -> Optional[Packet]:
        """Return the next complete packet, or None if more bytes are needed."""
        if len(self._buffer) < 6:
            return None
        if self._buffer[0:2] != _PREFIX:
            raise PacketError("161, 26 header not found")

        frame_len = 6 + u16ify(self._buffer, 4)
        if len(self._buffer) < frame_len:
            return None

        frame = bytes(self._buffer[:frame_len])
        del self._buffer[:frame_len]
        log.debug("%d bytes in: %s", len(frame), list(frame))
        return parse_packet(frame)

    def decode_eof(self) -> Optional[Packet]:
        """Like decode, but leftover bytes that form no packet are an error."""
        packet = self.decode()
        if packet is None and self._buffer:
            raise PacketError("bytes remaining on stream")
        return packet

    def __iter__(self) -> Iterator[Packet]:
        while (packet := self.decode()) is not None:
            yield packet