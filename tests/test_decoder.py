import pytest

from lxpbridge.codes import DeviceFunction
from lxpbridge.decoder import PacketDecoder
from lxpbridge.packet import Heartbeat, PacketError, TranslatedData
from lxpbridge.serial import Serial

HEARTBEAT_FRAME = bytes(
    [161, 26, 2, 0, 13, 0, 1, 193, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 0]
)

WRITE_SINGLE_REPLY = bytes(
    [
        161, 26, 2, 0, 32, 0, 1, 194, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 18, 0, 1, 6, 53, 53,
        53, 53, 53, 53, 53, 53, 53, 53, 66, 0, 100, 0, 73, 173,
    ]
)


def heartbeat():
    return Heartbeat(Serial.from_str("2222222222"))


def write_single_reply():
    return TranslatedData(
        Serial.from_str("2222222222"),
        DeviceFunction.WRITE_SINGLE,
        Serial.from_str("5555555555"),
        66,
        [100, 0],
    )


def test_decodes_complete_frame():
    decoder = PacketDecoder()
    decoder.feed(HEARTBEAT_FRAME)
    assert decoder.decode() == heartbeat()
    assert decoder.decode() is None


def test_too_few_bytes_for_header():
    decoder = PacketDecoder()
    decoder.feed(HEARTBEAT_FRAME[:5])
    assert decoder.decode() is None


def test_partial_frame_waits_for_rest():
    decoder = PacketDecoder()
    decoder.feed(WRITE_SINGLE_REPLY[:20])
    assert decoder.decode() is None
    decoder.feed(WRITE_SINGLE_REPLY[20:])
    assert decoder.decode() == write_single_reply()


def test_iterates_over_concatenated_frames():
    decoder = PacketDecoder()
    decoder.feed(HEARTBEAT_FRAME + WRITE_SINGLE_REPLY + HEARTBEAT_FRAME[:7])
    assert list(decoder) == [heartbeat(), write_single_reply()]
    decoder.feed(HEARTBEAT_FRAME[7:])
    assert list(decoder) == [heartbeat()]


def test_bad_header_raises():
    decoder = PacketDecoder()
    decoder.feed(bytes([0, 0]) + HEARTBEAT_FRAME[2:])
    with pytest.raises(PacketError):
        decoder.decode()


def test_invalid_frame_contents_raise():
    frame = bytearray(WRITE_SINGLE_REPLY)
    frame[-1] ^= 0xFF
    decoder = PacketDecoder()
    decoder.feed(frame)
    with pytest.raises(PacketError):
        decoder.decode()


def test_decode_eof_on_empty_buffer():
    decoder = PacketDecoder()
    decoder.feed(HEARTBEAT_FRAME)
    assert decoder.decode_eof() == heartbeat()
    assert decoder.decode_eof() is None


def test_decode_eof_with_leftover_bytes_raises():
    decoder = PacketDecoder()
    decoder.feed(HEARTBEAT_FRAME[:10])
    with pytest.raises(PacketError):
        decoder.decode_eof()