import pytest

from lxpbridge.codes import DeviceFunction, TcpFunction
from lxpbridge.inputs import ReadInput1, ReadInputAll
from lxpbridge.packet import (
    Heartbeat,
    PacketError,
    ReadParam,
    TranslatedData,
    WriteParam,
    build_frame,
    modbus_crc,
    parse_packet,
)
from lxpbridge.serial import Serial


def datalog():
    return Serial.from_str("2222222222")


def serial():
    return Serial.from_str("5555555555")


HEARTBEAT_FRAME = bytes(
    [161, 26, 2, 0, 13, 0, 1, 193, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 0]
)


def test_parse_heartbeat():
    assert parse_packet(HEARTBEAT_FRAME) == Heartbeat(datalog())


def test_build_heartbeat():
    assert build_frame(Heartbeat(datalog())) == HEARTBEAT_FRAME


def test_build_read_hold():
    packet = TranslatedData(datalog(), DeviceFunction.READ_HOLD, serial(), 12, [3, 0])
    assert build_frame(packet) == bytes(
        [
            161, 26, 1, 0, 32, 0, 1, 194, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 18, 0, 0, 3, 53,
            53, 53, 53, 53, 53, 53, 53, 53, 53, 12, 0, 3, 0, 112, 38,
        ]
    )


def test_parse_read_hold_reply():
    frame = [
        161, 26, 2, 0, 37, 0, 1, 194, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 23, 0, 1, 3, 53, 53,
        53, 53, 53, 53, 53, 53, 53, 53, 12, 0, 6, 22, 6, 20, 5, 16, 57, 93, 135,
    ]
    assert parse_packet(frame) == TranslatedData(
        datalog(), DeviceFunction.READ_HOLD, serial(), 12, [22, 6, 20, 5, 16, 57]
    )


def test_build_read_inputs():
    packet = TranslatedData(datalog(), DeviceFunction.READ_INPUT, serial(), 0, [40, 0])
    assert build_frame(packet) == bytes(
        [
            161, 26, 1, 0, 32, 0, 1, 194, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 18, 0, 0, 4, 53,
            53, 53, 53, 53, 53, 53, 53, 53, 53, 0, 0, 40, 0, 42, 132,
        ]
    )


def test_parse_read_inputs_reply():
    values = [
        32, 0, 0, 0, 0, 0, 0, 0, 250, 1, 77, 0, 0, 53, 0, 0, 0, 0, 0, 0, 128, 13, 0, 0,
        114, 9, 0, 16, 132, 0, 142, 19, 0, 0, 198, 13, 202, 5, 232, 3, 114, 9, 0, 10, 80,
        112, 142, 19, 0, 0, 0, 0, 0, 0, 36, 15, 0, 0, 0, 0, 0, 0, 91, 0, 83, 0, 87, 0, 114,
        0, 0, 0, 1, 0, 102, 0, 174, 14, 183, 12,
    ]
    frame = (
        [161, 26, 2, 0, 111, 0, 1, 194]
        + [50] * 10
        + [97, 0, 1, 4]
        + [53] * 10
        + [0, 0, 80]
        + values
        + [71, 187]
    )
    assert parse_packet(frame) == TranslatedData(
        datalog(), DeviceFunction.READ_INPUT, serial(), 0, values
    )


def test_parse_read_inputs_all_protocol5_reply():
    values = [
        16, 0, 0, 0, 0, 0, 121, 15, 247, 1, 100, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 74,
        9, 0, 0, 0, 0, 141, 19, 0, 0, 0, 0, 120, 0, 0, 0, 73, 9, 212, 1, 193, 124, 140, 19,
        0, 0, 0, 0, 0, 0, 8, 2, 0, 0, 0, 0, 0, 0, 0, 0, 9, 0, 8, 0, 1, 0, 0, 0, 0, 0, 55,
        0, 118, 15, 232, 13, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 232, 1, 0, 0,
        177, 1, 0, 0, 61, 0, 0, 0, 41, 0, 0, 0, 0, 0, 0, 0, 217, 10, 0, 0, 0, 0, 0, 0, 0,
        0, 0, 0, 24, 0, 25, 0, 39, 0, 24, 0, 0, 0, 75, 52, 30, 0, 0, 0, 0, 0, 0, 0, 0, 0,
        0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 34, 0, 0, 0, 136, 19, 23, 2, 0, 0, 0, 0, 1, 8, 0, 16,
        16, 220, 255, 42, 48, 18, 255, 171, 14, 131, 240, 96, 157, 16, 2, 0, 1, 0, 50, 0,
        76, 255, 0, 0, 245, 1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 3, 16, 246, 1, 0, 0, 0, 0, 0,
        0, 0, 0, 0, 0, 4, 1, 0, 0, 50, 48, 52, 51, 48, 50, 50, 52, 48, 49, 0, 0, 0, 0, 0,
        0, 0, 0, 0, 0, 0, 0, 0, 0,
    ]
    frame = (
        [161, 26, 5, 0, 29, 1, 1, 194]
        + [50] * 10
        + [15, 1, 1, 4]
        + [53] * 10
        + [0, 0, 254]
        + values
        + [189, 20]
    )
    assert len(values) == 254
    assert parse_packet(frame) == TranslatedData(
        datalog(), DeviceFunction.READ_INPUT, serial(), 0, values
    )


def test_build_write_single():
    packet = TranslatedData(datalog(), DeviceFunction.WRITE_SINGLE, serial(), 66, [100, 0])
    assert build_frame(packet) == bytes(
        [
            161, 26, 1, 0, 32, 0, 1, 194, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 18, 0, 0, 6, 53,
            53, 53, 53, 53, 53, 53, 53, 53, 53, 66, 0, 100, 0, 136, 61,
        ]
    )


def test_parse_write_single_reply():
    frame = [
        161, 26, 2, 0, 32, 0, 1, 194, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 18, 0, 1, 6, 53, 53,
        53, 53, 53, 53, 53, 53, 53, 53, 66, 0, 100, 0, 73, 173,
    ]
    assert parse_packet(frame) == TranslatedData(
        datalog(), DeviceFunction.WRITE_SINGLE, serial(), 66, [100, 0]
    )


def test_build_write_multi():
    packet = TranslatedData(
        datalog(), DeviceFunction.WRITE_MULTI, serial(), 12, [22, 6, 19, 20, 23, 33]
    )
    assert build_frame(packet) == bytes(
        [
            161, 26, 2, 0, 39, 0, 1, 194, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 25, 0, 0, 16, 53,
            53, 53, 53, 53, 53, 53, 53, 53, 53, 12, 0, 3, 0, 6, 22, 6, 19, 20, 23, 33, 115, 71,
        ]
    )


def test_parse_write_multi_reply():
    frame = [
        161, 26, 2, 0, 32, 0, 1, 194, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 18, 0, 1, 16, 53, 53,
        53, 53, 53, 53, 53, 53, 53, 53, 12, 0, 3, 0, 226, 187,
    ]
    assert parse_packet(frame) == TranslatedData(
        datalog(), DeviceFunction.WRITE_MULTI, serial(), 12, [3, 0]
    )


def test_build_read_param():
    packet = ReadParam(datalog(), 7, [0, 0])
    assert build_frame(packet) == bytes(
        [161, 26, 2, 0, 14, 0, 1, 195, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 7, 0]
    )


def test_parse_read_param_reply():
    frame = [
        161, 26, 2, 0, 18, 0, 1, 195, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 0, 0, 2, 0, 44, 1,
    ]
    assert parse_packet(frame) == ReadParam(datalog(), 0, [44, 1])


def test_build_write_param():
    packet = WriteParam(datalog(), 7, [0, 3])
    assert build_frame(packet) == bytes(
        [161, 26, 2, 0, 18, 0, 1, 196, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 7, 0, 2, 0, 0, 3]
    )


def test_parse_write_param_reply():
    frame = [161, 26, 2, 0, 15, 0, 1, 196, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 7, 0, 3]
    assert parse_packet(frame) == WriteParam(datalog(), 7, [0, 3])


@pytest.mark.parametrize(
    "device_function", [DeviceFunction.READ_HOLD, DeviceFunction.WRITE_SINGLE]
)
def test_protocol1_translated_data_round_trip(device_function):
    packet = TranslatedData(datalog(), device_function, serial(), 66, [100, 0])
    assert parse_packet(build_frame(packet)) == packet


def test_heartbeat_round_trip():
    packet = Heartbeat(datalog())
    assert parse_packet(build_frame(packet)) == packet


def test_modbus_crc_check_value():
    assert modbus_crc(b"123456789") == 0x4B37


def test_modbus_crc_matches_frame_checksum():
    frame = bytes(
        [
            161, 26, 2, 0, 32, 0, 1, 194, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 18, 0, 1, 6, 53,
            53, 53, 53, 53, 53, 53, 53, 53, 53, 66, 0, 100, 0, 73, 173,
        ]
    )
    assert modbus_crc(frame[20:-2]) == int.from_bytes(frame[-2:], "little")


def test_translated_data_pairs_and_value():
    packet = TranslatedData(
        datalog(), DeviceFunction.READ_HOLD, serial(), 12, [22, 6, 7, 8, 9, 0]
    )
    assert packet.pairs() == [(12, 1558), (13, 2055), (14, 9)]
    assert packet.value() == 1558


def test_protocol_and_tcp_function():
    multi = TranslatedData(datalog(), DeviceFunction.WRITE_MULTI, serial(), 12, [3, 0])
    single = TranslatedData(datalog(), DeviceFunction.READ_HOLD, serial(), 12, [3, 0])
    assert multi.protocol == 2
    assert single.protocol == 1
    assert single.tcp_function == TcpFunction.TRANSLATED_DATA
    assert ReadParam(datalog(), 0, b"").tcp_function == TcpFunction.READ_PARAM
    assert WriteParam(datalog(), 0, b"").tcp_function == TcpFunction.WRITE_PARAM


def test_read_param_pairs_are_signed():
    packet = ReadParam(datalog(), 0, [255, 255])
    assert packet.pairs() == [(0, -1)]
    assert packet.value() == 0xFFFF


def test_read_input_dispatches_to_read_input1():
    packet = TranslatedData(datalog(), DeviceFunction.READ_INPUT, serial(), 0, bytes(80))
    result = packet.read_input()
    assert isinstance(result, ReadInput1)
    assert result.status == 0
    assert result.datalog == datalog()


def test_read_input_all_from_ones():
    packet = TranslatedData(datalog(), DeviceFunction.READ_INPUT, serial(), 0, [1] * 254)
    result = packet.read_input()
    assert isinstance(result, ReadInputAll)
    assert result.status == 257
    assert result.v_pv_1 == 25.7
    assert result.p_pv == 771
    assert result.p_battery == 0
    assert result.e_pv_day == 77.1
    assert result.e_pv_all == 5052902.7
    assert result.fault_code == 16843009


def test_read_input_unhandled_layout():
    packet = TranslatedData(datalog(), DeviceFunction.READ_INPUT, serial(), 127, bytes(254))
    with pytest.raises(PacketError):
        packet.read_input()


def test_parse_rejects_short_frame():
    with pytest.raises(PacketError):
        parse_packet(HEARTBEAT_FRAME[:10])


def test_parse_rejects_bad_prefix():
    with pytest.raises(PacketError):
        parse_packet(bytes([0, 0]) + HEARTBEAT_FRAME[2:])


def test_parse_rejects_unknown_tcp_function():
    frame = bytearray(HEARTBEAT_FRAME)
    frame[7] = 200
    with pytest.raises(PacketError):
        parse_packet(frame)


def test_heartbeat_rejects_nonzero_length_byte():
    frame = bytearray(HEARTBEAT_FRAME)
    frame[18] = 1
    with pytest.raises(PacketError):
        Heartbeat.decode(frame)


def test_translated_data_checksum_mismatch():
    packet = TranslatedData(datalog(), DeviceFunction.READ_HOLD, serial(), 12, [3, 0])
    frame = bytearray(build_frame(packet))
    frame[-1] ^= 0xFF
    with pytest.raises(PacketError):
        parse_packet(frame)


def test_read_param_length_mismatch():
    frame = [
        161, 26, 2, 0, 18, 0, 1, 195, 50, 50, 50, 50, 50, 50, 50, 50, 50, 50, 0, 0, 4, 0, 44, 1,
    ]
    with pytest.raises(PacketError):
        parse_packet(frame)