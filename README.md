# lxpbridge

A library for working with LuxPower inverters through their WiFi datalog
dongle. It covers the TCP frame format the datalog speaks, decoding of the
inverter's input registers into named values, and the mapping from inverter
packets to MQTT messages. It has no dependencies outside the standard library.

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `lxpbridge.packet`: the packet types `Heartbeat`, `TranslatedData`,
  `ReadParam` and `WriteParam`. Each has `decode(frame)` and `to_bytes()`;
  `TranslatedData`, `ReadParam` and `WriteParam` also have `pairs()`
  (register, value) and `value()` (the first value). `parse_packet(frame)`
  turns a whole frame into a packet, `build_frame(packet)` wraps a packet in
  a frame, and `modbus_crc(data)` computes the CRC-16/MODBUS checksum used in
  translated-data frames. `TranslatedData.read_input()` decodes an input read
  into one of the input blocks below. Malformed input raises `PacketError`,
  a subclass of `ValueError`.
- `lxpbridge.decoder`: `PacketDecoder` buffers bytes as they arrive from a
  socket (`feed`) and returns whole packets from `decode()`, which gives
  `None` while a frame is still incomplete. `decode_eof()` raises
  `PacketError` if bytes are left over that make no packet. Iterating over
  the decoder yields every complete packet in the buffer.
- `lxpbridge.inputs`: `ReadInput1`, `ReadInput2` and `ReadInput3` (input
  registers 0-39, 40-79 and 80-119) and `ReadInputAll` (a single 254-byte
  read), each with `parse(data, datalog)` and `to_dict()`. Totals such as
  `p_pv`, `p_grid`, `p_battery`, `e_pv_day` and `e_pv_all` are computed while
  parsing. `ReadInputs` holds the three partial blocks and
  `to_input_all()` joins them, or returns `None` while any is missing.
- `lxpbridge.codes`: the enums `TcpFunction`, `DeviceFunction`, `Register`
  and `RegisterBit`, and `status_string`, `warning_code_string` and
  `fault_code_string`. The last two describe the lowest set bit of a 32-bit
  code, or return `"OK"` for zero.
- `lxpbridge.bits`: `Register21Bits` and `Register110Bits` split the flag
  registers into named `"ON"`/`"OFF"` values (`from_value`, `to_dict`).
- `lxpbridge.message`: `Message` (topic, retain, payload) builds MQTT
  messages from packets with `for_param`, `for_hold`, `for_input` and
  `for_input_all`, and reads incoming command messages with
  `split_cmd_topic`, `payload_int`, `payload_int_or_1`, `payload_bool` and
  `payload_start_end_time`. Topics do not include the MQTT namespace.
- `lxpbridge.serial`: `Serial`, the ten-byte serial number of a datalog or
  inverter (`from_str`, `from_bytes`, `default`).
- `lxpbridge.utils`: `UnixTime`, a timestamp that serialises as whole
  seconds, and the helpers `round_decimals`, `i16ify`, `u16ify` and
  `utc_now`.

## Example

```python
from lxpbridge.codes import DeviceFunction
from lxpbridge.decoder import PacketDecoder
from lxpbridge.message import Message
from lxpbridge.packet import TranslatedData, build_frame
from lxpbridge.serial import Serial

packet = TranslatedData(
    datalog=Serial.from_str("2222222222"),
    device_function=DeviceFunction.READ_HOLD,
    inverter=Serial.from_str("5555555555"),
    register=12,
    values=bytes([22, 6]),
)
frame = build_frame(packet)

decoder = PacketDecoder()
decoder.feed(frame[:10])
assert decoder.decode() is None      # frame not complete yet
decoder.feed(frame[10:])
for received in decoder:
    for message in Message.for_hold(received):
        print(message.topic, message.payload)   # 2222222222/hold/12 1558
```

## What it does not do

This package only encodes, decodes and maps data. It does not open TCP
connections to a datalog, connect to an MQTT broker, read a configuration
file, schedule time synchronisation, or write to a database or InfluxDB, and
it has no command-line program. An application built on it supplies the
sockets, the MQTT client and the loop that moves packets between them.