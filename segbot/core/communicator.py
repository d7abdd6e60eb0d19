"""Lifecycle and wiring for the SegBot channel, poller and input mapper."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal, Slot

from segbot.core.configio import DEFAULT_UPDATE_INTERVAL_MS, clamp_interval_ms
from segbot.core.input_mapper import InputMapper, ServoState
from segbot.core.logger import APP_LOGGER
from segbot.core.protocol import Command, encode_command
from segbot.core.telemetry import TelemetryPoller, TelemetrySnapshot
from segbot.drivers.controller_driver import ControllerDriver, ControllerDriverError, IoFailedError
from segbot.drivers.gamepad import Gamepad
from segbot.drivers.tty_driver import DEFAULT_READ_TIMEOUT_S, TtyChannel


class SegBotCommunicator(QObject):
    """
    Owns the tty channel and the two periodic tasks.

    Constructed inert; init() builds the tasks and set_device() opens a
    channel and starts them. `active` gates every outbound write and is only
    true while a channel is open. All calls belong on the Qt thread that owns
    this object.
    """
    angleChanged = Signal(int)
    speedLeftChanged = Signal(int)
    speedRightChanged = Signal(int)
    sensorDistanceChanged = Signal(int)
    voltageChanged = Signal(int)
    errorStringChanged = Signal(str)

    def __init__(
        self,
        parent: QObject | None = None,
        gamepad: Optional[Gamepad] = None,
        read_timeout_s: Optional[float] = DEFAULT_READ_TIMEOUT_S,
        baudrate: int = 115200,
        channel_factory: Optional[Callable[[], ControllerDriver]] = None,
    ):
        super().__init__(parent)
        self._gamepad = gamepad
        self._channel_factory = channel_factory or (
            lambda: TtyChannel(read_timeout_s=read_timeout_s, baudrate=baudrate)
        )
        self._channel: Optional[ControllerDriver] = None
        self._device = ""
        self._active = False
        self._error_string = ""
        self._update_interval = DEFAULT_UPDATE_INTERVAL_MS
        self._poller: Optional[TelemetryPoller] = None
        self._mapper: Optional[InputMapper] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # --- lifecycle ---
    def init(self):
        if self._poller is not None:
            return
        self._poller = TelemetryPoller(self, self._update_interval, parent=self)
        self._poller.angleChanged.connect(self.angleChanged)
        self._poller.speedLeftChanged.connect(self.speedLeftChanged)
        self._poller.speedRightChanged.connect(self.speedRightChanged)
        self._poller.sensorDistanceChanged.connect(self.sensorDistanceChanged)
        self._poller.voltageChanged.connect(self.voltageChanged)
        self._mapper = InputMapper(self, self._gamepad, parent=self)

    def set_device(self, device: str):
        """Close the current channel, then open `device` (empty string only closes)."""
        if self._poller is None:
            self.init()
        self.close()
        self._device = device or ""
        if not self._device:
            return

        channel = self._channel_factory()
        try:
            channel.open(self._device)
        except ControllerDriverError as e:
            APP_LOGGER.warning(f"Cannot use {self._device}: {e}")
            self._set_error_string(str(e))
            return

        self._channel = channel
        self._active = True
        self._set_error_string("")
        self._poller.start()
        self._mapper.start()
        APP_LOGGER.info(f"SegBot channel active on {self._device} (update every {self.update_interval} ms)")

    def close(self):
        """Stop both tasks and release the channel. Never raises."""
        if self._poller is not None:
            self._poller.stop()
        if self._mapper is not None:
            self._mapper.stop_arms()
        self._active = False
        channel, self._channel = self._channel, None
        if channel is not None:
            try:
                channel.close()
            except Exception as e:
                APP_LOGGER.error(f"Error while closing {self._device}: {e}")

    def set_update_interval(self, interval_ms: int):
        self._update_interval = clamp_interval_ms(interval_ms)
        if self._poller is not None:
            self._poller.set_interval(self._update_interval)

    def set_gamepad(self, gamepad: Optional[Gamepad]):
        self._gamepad = gamepad
        if self._mapper is not None:
            self._mapper.set_gamepad(gamepad)

    # --- channel access for the periodic tasks ---
    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_open(self) -> bool:
        return self._channel is not None and self._channel.is_open()

    def exchange(self, command: Command) -> bytes:
        if not self._active or self._channel is None:
            raise IoFailedError("channel is not active")
        return self._channel.exchange(encode_command(command))

    def resync(self):
        if self._channel is not None:
            self._channel.resync()

    # --- observable state ---
    @property
    def telemetry(self) -> TelemetrySnapshot:
        if self._poller is None:
            return TelemetrySnapshot()
        return self._poller.snapshot

    @property
    def angle(self) -> int:
        return self.telemetry.angle

    @property
    def speed_left(self) -> int:
        return self.telemetry.speed_left

    @property
    def speed_right(self) -> int:
        return self.telemetry.speed_right

    @property
    def sensor_distance(self) -> int:
        return self.telemetry.distance

    @property
    def voltage(self) -> int:
        return self.telemetry.voltage

    @property
    def servo_state(self) -> ServoState:
        if self._mapper is None:
            return ServoState()
        return self._mapper.servo_state

    @property
    def error_string(self) -> str:
        return self._error_string

    @property
    def device(self) -> str:
        return self._device

    @property
    def update_interval(self) -> int:
        return self._update_interval

    @property
    def poller(self) -> Optional[TelemetryPoller]:
        return self._poller

    @property
    def input_mapper(self) -> Optional[InputMapper]:
        return self._mapper

    def _set_error_string(self, message: str):
        if message == self._error_string:
            return
        self._error_string = message
        self.errorStringChanged.emit(message)

    # --- input slots for UIs ---
    @Slot(bool)
    def forward(self, pressed: bool):
        if self._mapper is not None:
            self._mapper.forward(pressed)

    @Slot(bool)
    def reverse(self, pressed: bool):
        if self._mapper is not None:
            self._mapper.reverse(pressed)

    @Slot(bool)
    def turn_left(self, pressed: bool):
        if self._mapper is not None:
            self._mapper.turn_left(pressed)

    @Slot(bool)
    def turn_right(self, pressed: bool):
        if self._mapper is not None:
            self._mapper.turn_right(pressed)

    @Slot()
    def stop(self):
        if self._mapper is not None:
            self._mapper.stop()
