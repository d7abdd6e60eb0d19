"""Translate gamepad edges and stick positions into drive and servo commands."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Slot

from segbot.core.logger import APP_LOGGER
from segbot.core.protocol import (
    SERVO_LEFT,
    SERVO_MAX_POS,
    SERVO_MIN_POS,
    SERVO_RIGHT,
    Command,
    Move,
    Servo,
    Stop,
    TurnLeft,
    TurnRight,
)
from segbot.core.telemetry import CommandLink
from segbot.drivers.controller_driver import ControllerDriverError
from segbot.drivers.gamepad import Gamepad

MOVE_SPEED = 8
TURN_SPEED = 50
ARM_INTERVAL_MS = 100
SERVO_CENTER = 90
SERVO_GAIN = 30


@dataclass
class ServoState:
    left_pos: int = 0
    right_pos: int = 0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_servo(pos: int) -> int:
    return max(SERVO_MIN_POS, min(SERVO_MAX_POS, pos))


def right_servo_position(axis_right_y: float) -> int:
    return _clamp_servo(_round_half_up(SERVO_CENTER - axis_right_y * SERVO_GAIN))


def left_servo_position(axis_left_y: float) -> int:
    return _clamp_servo(_round_half_up(SERVO_CENTER + axis_left_y * SERVO_GAIN))


class InputMapper(QObject):
    """
    Edge-driven motion plus a 100 ms arm task.

    Pressing a direction sends its motion command; releasing ANY direction
    sends stop, even while another one is still held. Servo commands are only
    sent when the computed position differs from the last one sent on that
    channel.
    """
    def __init__(self, link: CommandLink, gamepad: Optional[Gamepad] = None, parent: QObject | None = None):
        super().__init__(parent)
        self._link = link
        self._gamepad: Optional[Gamepad] = None
        self._servos = ServoState()
        self._arm_timer = QTimer(self)
        self._arm_timer.setInterval(ARM_INTERVAL_MS)
        self._arm_timer.timeout.connect(self.update_arms)
        self.set_gamepad(gamepad)

    @property
    def servo_state(self) -> ServoState:
        return replace(self._servos)

    @property
    def gamepad(self) -> Optional[Gamepad]:
        return self._gamepad

    def set_gamepad(self, gamepad: Optional[Gamepad]):
        if self._gamepad is not None:
            self._gamepad.buttonUpChanged.disconnect(self.forward)
            self._gamepad.buttonDownChanged.disconnect(self.reverse)
            self._gamepad.buttonRightChanged.disconnect(self.turn_right)
            self._gamepad.buttonLeftChanged.disconnect(self.turn_left)
        self._gamepad = gamepad
        if gamepad is not None:
            gamepad.buttonUpChanged.connect(self.forward)
            gamepad.buttonDownChanged.connect(self.reverse)
            gamepad.buttonRightChanged.connect(self.turn_right)
            gamepad.buttonLeftChanged.connect(self.turn_left)

    def start(self):
        # Positions sent to a previous device mean nothing to a new one.
        self._servos = ServoState()
        self._arm_timer.start()

    def stop_arms(self):
        self._arm_timer.stop()

    def is_running(self) -> bool:
        return self._arm_timer.isActive()

    @Slot(bool)
    def forward(self, pressed: bool):
        self._on_edge(pressed, Move(MOVE_SPEED))

    @Slot(bool)
    def reverse(self, pressed: bool):
        self._on_edge(pressed, Move(-MOVE_SPEED))

    @Slot(bool)
    def turn_left(self, pressed: bool):
        self._on_edge(pressed, TurnLeft(TURN_SPEED))

    @Slot(bool)
    def turn_right(self, pressed: bool):
        self._on_edge(pressed, TurnRight(TURN_SPEED))

    @Slot()
    def stop(self) -> bool:
        return self._send(Stop())

    def _on_edge(self, pressed: bool, command: Command):
        if pressed:
            self._send(command)
        else:
            self.stop()

    @Slot()
    def update_arms(self):
        pad = self._gamepad
        if pad is None or not pad.is_connected:
            return

        right = right_servo_position(pad.axis_right_y)
        left = left_servo_position(pad.axis_left_y)

        if right != self._servos.right_pos and self._send(Servo(SERVO_RIGHT, right)):
            self._servos.right_pos = right
        if left != self._servos.left_pos and self._send(Servo(SERVO_LEFT, left)):
            self._servos.left_pos = left

    def _send(self, command: Command) -> bool:
        if not self._link.is_active:
            return False
        try:
            self._link.exchange(command)
            return True
        except ControllerDriverError as e:
            APP_LOGGER.debug(f"Dropped {command}: {e}")
            return False
