# protocol.py - SegBot line protocol: command encoding and telemetry reply parsing
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

ANGLE = "angle"
SPEED_LEFT = "speedLeft"
SPEED_RIGHT = "speedRight"
DISTANCE = "distance"
VOLTAGE = "voltage"

# Fixed per-tick query order.
TELEMETRY_FIELDS = (ANGLE, SPEED_LEFT, SPEED_RIGHT, DISTANCE, VOLTAGE)

QUERY_PREFIX = "?"
COMMAND_PREFIX = "!"
SEPARATOR = ":"

SERVO_LEFT = 0
SERVO_RIGHT = 1
SERVO_CHANNELS = (SERVO_LEFT, SERVO_RIGHT)
SERVO_MIN_POS = 0
SERVO_MAX_POS = 180

_QUERY_RE = re.compile(r"^\?(?P<name>[A-Za-z]+)$")
_TELEMETRY_RE = re.compile(r"^\?(?P<name>[A-Za-z]+):(?P<value>[+-]?\d+)$")


class ProtocolError(ValueError):
    """A reply could not be matched to its request."""


class ProtocolMismatchError(ProtocolError):
    """The echoed name differs from the queried one."""


class ParseFailedError(ProtocolError):
    """The reply is not of the form ?<name>:<int>."""


@dataclass(frozen=True, slots=True)
class Query:
    name: str

    def __post_init__(self) -> None:
        if self.name not in TELEMETRY_FIELDS:
            raise ValueError(f"Unknown telemetry field: {self.name!r}")


@dataclass(frozen=True, slots=True)
class Move:
    speed: int


@dataclass(frozen=True, slots=True)
class TurnLeft:
    speed: int

    def __post_init__(self) -> None:
        if self.speed < 0:
            raise ValueError("turn speed must be >= 0")


@dataclass(frozen=True, slots=True)
class TurnRight:
    speed: int

    def __post_init__(self) -> None:
        if self.speed < 0:
            raise ValueError("turn speed must be >= 0")


@dataclass(frozen=True, slots=True)
class Stop:
    pass


@dataclass(frozen=True, slots=True)
class Servo:
    channel: int
    position: int

    def __post_init__(self) -> None:
        if self.channel not in SERVO_CHANNELS:
            raise ValueError(f"Invalid servo channel: {self.channel}")
        if not SERVO_MIN_POS <= self.position <= SERVO_MAX_POS:
            raise ValueError(f"Servo position out of range: {self.position}")


Command = Union[Query, Move, TurnLeft, TurnRight, Stop, Servo]


@dataclass(frozen=True, slots=True)
class TelemetryReading:
    name: str
    value: int


def encode_command(command: Command) -> bytes:
    """Wire form of `command`, without the line terminator."""
    if isinstance(command, Query):
        text = f"{QUERY_PREFIX}{command.name}"
    elif isinstance(command, Move):
        text = f"{COMMAND_PREFIX}move{SEPARATOR}{int(command.speed)}"
    elif isinstance(command, TurnLeft):
        text = f"{COMMAND_PREFIX}turnLeft{SEPARATOR}{int(command.speed)}"
    elif isinstance(command, TurnRight):
        text = f"{COMMAND_PREFIX}turnRight{SEPARATOR}{int(command.speed)}"
    elif isinstance(command, Stop):
        text = f"{COMMAND_PREFIX}stop"
    elif isinstance(command, Servo):
        text = f"{COMMAND_PREFIX}servo{SEPARATOR}{command.channel}{SEPARATOR}{command.position}"
    else:
        raise TypeError(f"Not a SegBot command: {command!r}")
    return text.encode("ascii")


def _strip_line(line: bytes) -> str:
    try:
        return bytes(line).decode("ascii").rstrip("\r\n")
    except UnicodeDecodeError as exc:
        raise ParseFailedError(f"Non-ASCII reply: {bytes(line)!r}") from exc


def decode_query(line: bytes) -> Query:
    text = _strip_line(line)
    match = _QUERY_RE.match(text)
    if match is None:
        raise ParseFailedError(f"Not a query: {text!r}")
    try:
        return Query(match.group("name"))
    except ValueError as exc:
        raise ParseFailedError(str(exc)) from exc


def decode_telemetry(line: bytes) -> TelemetryReading:
    text = _strip_line(line)
    match = _TELEMETRY_RE.match(text)
    if match is None:
        raise ParseFailedError(f"Malformed telemetry reply: {text!r}")
    return TelemetryReading(name=match.group("name"), value=int(match.group("value")))


def encode_telemetry(reading: TelemetryReading) -> bytes:
    return f"{QUERY_PREFIX}{reading.name}{SEPARATOR}{int(reading.value)}".encode("ascii")


def parse_telemetry(query: Query, line: bytes) -> int:
    """Value carried by the reply to `query`."""
    reading = decode_telemetry(line)
    if reading.name != query.name:
        raise ProtocolMismatchError(
            f"Reply to ?{query.name} carried ?{reading.name}"
        )
    return reading.value
