"""MQTT messages built from inverter packets, and helpers for command messages."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from .bits import Register21Bits, Register110Bits
from .codes import fault_code_string, status_string, warning_code_string
from .inputs import ReadInput1, ReadInput2, ReadInput3, ReadInputAll
from .packet import PacketError, ReadParam, TranslatedData
from .serial import Serial

__all__ = ["Message"]

log = logging.getLogger(__name__)

_UNSIGNED = re.compile(r"\+?[0-9]+")
_TRUE_WORDS = frozenset({"1", "t", "true", "on", "y", "yes"})

_INPUT_TOPICS = {
    ReadInputAll: "all",
    ReadInput1: "1",
    ReadInput2: "2",
    ReadInput3: "3",
}


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _parse_unsigned(text: str, maximum: int, what: str) -> int:
    if not _UNSIGNED.fullmatch(text):
        raise ValueError(f"{what}: invalid digit found in string {text!r}")
    number = int(text)
    if number > maximum:
        raise ValueError(f"{what}: number too large to fit in target type: {text}")
    return number


@dataclass(frozen=True)
class Message:
    """A single MQTT message; the topic excludes the namespace prefix."""

    topic: str
    retain: bool
    payload: str

    @classmethod
    def for_param(cls, packet: ReadParam) -> list["Message"]:
        """One retained message per parameter register."""
        return [
            cls(f"{packet.datalog}/param/{register}", True, _to_json(value))
            for register, value in packet.pairs()
        ]

    @classmethod
    def for_hold(cls, packet: TranslatedData) -> list["Message"]:
        """One retained message per holding register, plus decoded bit fields."""
        messages: list[Message] = []
        for register, value in packet.pairs():
            messages.append(cls(f"{packet.datalog}/hold/{register}", True, _to_json(value)))
            bits: Optional[dict[str, str]] = None
            if register == 21:
                bits = Register21Bits.from_value(value).to_dict()
            elif register == 110:
                bits = Register110Bits.from_value(value).to_dict()
            if bits is not None:
                messages.append(
                    cls(f"{packet.datalog}/hold/{register}/bits", True, _to_json(bits))
                )
        return messages

    @classmethod
    def for_input_all(cls, inputs: ReadInputAll, datalog: Serial) -> "Message":
        """A message carrying a complete set of input registers."""
        return cls(f"{datalog}/inputs/all", False, _to_json(inputs.to_dict()))

    @classmethod
    def for_input(
        cls, packet: TranslatedData, publish_individual: bool
    ) -> list["Message"]:
        """Messages for an input register read.

        With ``publish_individual`` every register gets its own message, along
        with parsed status, warning and fault descriptions. A message for the
        whole decoded block follows when the read matches a known layout.
        """
        datalog = packet.datalog
        messages: list[Message] = []

        if publish_individual:
            fault_code = 0
            fault_seen = False
            warning_code = 0
            warning_seen = False

            for register, value in packet.pairs():
                messages.append(cls(f"{datalog}/input/{register}", False, _to_json(value)))

                if register == 0:
                    messages.append(
                        cls(f"{datalog}/input/{register}/parsed", False, status_string(value))
                    )
                if register == 60:
                    fault_code |= value
                    fault_seen = True
                elif register == 61:
                    fault_code |= value << 16
                    fault_seen = True
                elif register == 62:
                    warning_code |= value
                    warning_seen = True
                elif register == 63:
                    warning_code |= value << 16
                    warning_seen = True

            if warning_seen:
                messages.append(
                    cls(
                        f"{datalog}/input/warning_code/parsed",
                        False,
                        warning_code_string(warning_code),
                    )
                )
            if fault_seen:
                messages.append(
                    cls(
                        f"{datalog}/input/fault_code/parsed",
                        False,
                        fault_code_string(fault_code),
                    )
                )

        try:
            block = packet.read_input()
        except PacketError as err:
            log.warning("ignoring %s", err)
        else:
            suffix = _INPUT_TOPICS[type(block)]
            messages.append(
                cls(f"{datalog}/inputs/{suffix}", False, _to_json(block.to_dict()))
            )

        return messages

    def split_cmd_topic(self) -> tuple[Optional[Serial], list[str]]:
        """Split ``cmd/<datalog>/...`` into its target and remaining parts.

        The target is None when the command is for all inverters.
        """
        parts = self.topic.split("/")
        if len(parts) < 2:
            raise ValueError(f"ignoring badly formed MQTT topic: {self.topic}")
        datalog, rest = parts[1], parts[2:]
        if datalog == "all":
            return None, rest
        return Serial.from_str(datalog), rest

    def payload_int(self) -> int:
        """The payload as an unsigned 16-bit integer."""
        return _parse_unsigned(self.payload, 0xFFFF, "payload_int")

    def payload_int_or_1(self) -> int:
        """The payload as an unsigned 16-bit integer, or 1 if it is not one."""
        try:
            return self.payload_int()
        except ValueError:
            return 1

    def payload_bool(self) -> bool:
        """True for the usual spellings of yes; anything else is False."""
        return self.payload.lower() in _TRUE_WORDS

    def payload_start_end_time(self) -> tuple[int, int, int, int]:
        """Parse ``{"start": "HH:MM", "end": "HH:MM"}`` into four numbers."""
        document = json.loads(self.payload)
        if not isinstance(document, dict):
            raise ValueError("expected a JSON object with start and end")
        start = document.get("start")
        end = document.get("end")
        if not isinstance(start, str) or not isinstance(end, str):
            raise ValueError("start and end must both be strings")
        start_parts = start.split(":")
        end_parts = end.split(":")
        if len(start_parts) != 2 or len(end_parts) != 2:
            raise ValueError("badly formatted time, use HH:MM")
        h1, m1 = (_parse_unsigned(p, 0xFF, "time") for p in start_parts)
        h2, m2 = (_parse_unsigned(p, 0xFF, "time") for p in end_parts)
        return h1, m1, h2, m2