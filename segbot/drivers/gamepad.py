"""Game controller state as seen by the communicator.

Discovery and the OS-level event source live outside this package; whatever
reads the physical controller pushes button and axis state through the
setters below. Button signals fire only when the state actually changes, so
listeners receive clean press/release edges.
"""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal

AXIS_MIN = -1.0
AXIS_MAX = 1.0


def _clamp_axis(value: float) -> float:
    return max(AXIS_MIN, min(AXIS_MAX, float(value)))


class Gamepad(QObject):
    buttonUpChanged = Signal(bool)
    buttonDownChanged = Signal(bool)
    buttonLeftChanged = Signal(bool)
    buttonRightChanged = Signal(bool)
    connectedChanged = Signal(bool)

    def __init__(self, parent: QObject | None = None, connected: bool = True):
        super().__init__(parent)
        self._connected = bool(connected)
        self._buttons = {"up": False, "down": False, "left": False, "right": False}
        self._axis_left_y = 0.0
        self._axis_right_y = 0.0

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def axis_left_y(self) -> float:
        return self._axis_left_y

    @property
    def axis_right_y(self) -> float:
        return self._axis_right_y

    def button(self, name: str) -> bool:
        return self._buttons[name]

    def set_connected(self, connected: bool):
        connected = bool(connected)
        if connected == self._connected:
            return
        self._connected = connected
        if not connected:
            # Held buttons count as released so listeners see the falling edge.
            self.set_button_up(False)
            self.set_button_down(False)
            self.set_button_left(False)
            self.set_button_right(False)
            self._axis_left_y = 0.0
            self._axis_right_y = 0.0
        self.connectedChanged.emit(connected)

    def set_axis_left_y(self, value: float):
        self._axis_left_y = _clamp_axis(value)

    def set_axis_right_y(self, value: float):
        self._axis_right_y = _clamp_axis(value)

    def set_button_up(self, pressed: bool):
        self._set_button("up", pressed, self.buttonUpChanged)

    def set_button_down(self, pressed: bool):
        self._set_button("down", pressed, self.buttonDownChanged)

    def set_button_left(self, pressed: bool):
        self._set_button("left", pressed, self.buttonLeftChanged)

    def set_button_right(self, pressed: bool):
        self._set_button("right", pressed, self.buttonRightChanged)

    def _set_button(self, name: str, pressed: bool, signal):
        pressed = bool(pressed)
        if self._buttons[name] == pressed:
            return
        self._buttons[name] = pressed
        signal.emit(pressed)
