"""Device drivers and input sources for the SegBot communicator."""

from .controller_driver import (
    ControllerDriver,
    ControllerDriverError,
    DeviceMissingError,
    IoFailedError,
    OpenFailedError,
)
from .gamepad import Gamepad
from .tty_driver import TtyChannel

__all__ = [
    "ControllerDriver",
    "ControllerDriverError",
    "DeviceMissingError",
    "OpenFailedError",
    "IoFailedError",
    "Gamepad",
    "TtyChannel",
]
