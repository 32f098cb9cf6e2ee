"""Binary packet layouts exchanged with the field device.

Sensor packet (data topic), 6 bytes little-endian::

    int16 temperature*10 | int16 humidity*10 | int16 soil*10

Status packet (status topic), 1 byte: ``1`` = pump on, anything else = off.

Command packet (command topic), 2 bytes: ``[tag, value]``.
"""
from __future__ import annotations

import struct

from .models import ActuatorState, Reading

READING_PACKET_SIZE = 6
STATUS_PACKET_SIZE = 1

PUMP_COMMAND_TAG = 2

_READING = struct.Struct("<hhh")
_COMMAND = struct.Struct("<BB")


def decode_reading(buf: bytes) -> Reading:
    if len(buf) != READING_PACKET_SIZE:
        raise ValueError(f"Sensor packet must be {READING_PACKET_SIZE} bytes, got {len(buf)}")
    temp, hum, soil = _READING.unpack(buf)
    return Reading(temperature=temp / 10, humidity=hum / 10, soil_moisture=soil / 10)


def decode_actuator_status(buf: bytes) -> ActuatorState:
    if len(buf) != STATUS_PACKET_SIZE:
        raise ValueError(f"Status packet must be {STATUS_PACKET_SIZE} byte, got {len(buf)}")
    return ActuatorState(pump_on=buf[0] == 1)


def encode_pump_command(on: bool) -> bytes:
    return _COMMAND.pack(PUMP_COMMAND_TAG, 1 if on else 0)
