"""Periodic telemetry polling with change-only notification."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Protocol

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from segbot.core.configio import DEFAULT_UPDATE_INTERVAL_MS, clamp_interval_ms
from segbot.core.logger import APP_LOGGER
from segbot.core.protocol import (
    ANGLE,
    DISTANCE,
    SPEED_LEFT,
    SPEED_RIGHT,
    TELEMETRY_FIELDS,
    VOLTAGE,
    Command,
    ProtocolError,
    Query,
    parse_telemetry,
)
from segbot.drivers.controller_driver import ControllerDriverError

# Wire name -> snapshot attribute
FIELD_ATTRS = {
    ANGLE: "angle",
    SPEED_LEFT: "speed_left",
    SPEED_RIGHT: "speed_right",
    DISTANCE: "distance",
    VOLTAGE: "voltage",
}


class CommandLink(Protocol):
    """What the poller and the input mapper need from the communicator."""

    @property
    def is_active(self) -> bool: ...

    def exchange(self, command: Command) -> bytes: ...

    def resync(self) -> None: ...


@dataclass
class TelemetrySnapshot:
    angle: int = 0
    speed_left: int = 0
    speed_right: int = 0
    distance: int = 0
    voltage: int = 0

    def get(self, name: str) -> int:
        return getattr(self, FIELD_ATTRS[name])

    def as_dict(self) -> dict:
        return {name: self.get(name) for name in TELEMETRY_FIELDS}


class TelemetryPoller(QObject):
    """
    Issues the five read-only queries once per tick, in TELEMETRY_FIELDS order.

    A tick is all-or-nothing: if any exchange or parse fails, the snapshot is
    left untouched and no signal fires. The QTimer never re-enters poll_once;
    an overrunning tick delays the next one instead of stacking.
    """
    angleChanged = Signal(int)
    speedLeftChanged = Signal(int)
    speedRightChanged = Signal(int)
    sensorDistanceChanged = Signal(int)
    voltageChanged = Signal(int)
    fieldChanged = Signal(str, int)

    def __init__(self, link: CommandLink, interval_ms: int = DEFAULT_UPDATE_INTERVAL_MS, parent: QObject | None = None):
        super().__init__(parent)
        self._link = link
        self._snapshot = TelemetrySnapshot()
        self._signals = {
            ANGLE: self.angleChanged,
            SPEED_LEFT: self.speedLeftChanged,
            SPEED_RIGHT: self.speedRightChanged,
            DISTANCE: self.sensorDistanceChanged,
            VOLTAGE: self.voltageChanged,
        }
        self.ticks_ok = 0
        self.ticks_failed = 0
        self._timer = QTimer(self)
        self._timer.setInterval(clamp_interval_ms(interval_ms))
        self._timer.timeout.connect(self.poll_once)

    @property
    def snapshot(self) -> TelemetrySnapshot:
        return replace(self._snapshot)

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def set_interval(self, interval_ms: int) -> int:
        interval_ms = clamp_interval_ms(interval_ms)
        self._timer.setInterval(interval_ms)
        return interval_ms

    def start(self):
        self._timer.start()

    def stop(self):
        self._timer.stop()

    def is_running(self) -> bool:
        return self._timer.isActive()

    @Slot()
    def poll_once(self) -> bool:
        """Run one telemetry tick. Returns True if all five replies were applied."""
        if not self._link.is_active:
            return False

        values = {}
        for name in TELEMETRY_FIELDS:
            query = Query(name)
            try:
                reply = self._link.exchange(query)
                values[name] = parse_telemetry(query, reply)
            except ControllerDriverError as e:
                self.ticks_failed += 1
                APP_LOGGER.debug(f"Telemetry tick abandoned at ?{name}: {e}")
                return False
            except ProtocolError as e:
                # Replies are out of step with requests; drop whatever is queued.
                self.ticks_failed += 1
                APP_LOGGER.debug(f"Telemetry tick abandoned at ?{name}: {e}")
                self._link.resync()
                return False

        changed = []
        for name in TELEMETRY_FIELDS:
            value = values[name]
            if value != self._snapshot.get(name):
                setattr(self._snapshot, FIELD_ATTRS[name], value)
                changed.append((name, value))

        self.ticks_ok += 1
        for name, value in changed:
            self._signals[name].emit(value)
            self.fieldChanged.emit(name, value)
        return True
