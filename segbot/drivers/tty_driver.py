# tty_driver.py - Lockstep line channel over a raw tty (pyserial)
import termios
from pathlib import Path
from typing import Optional

import serial

from segbot.core.logger import APP_LOGGER
from .controller_driver import (
    ControllerDriver,
    DeviceMissingError,
    IoFailedError,
    OpenFailedError,
)

DEFAULT_BAUD = 115200
DEFAULT_READ_TIMEOUT_S = 0.2
DEFAULT_WRITE_TIMEOUT_S = 0.2
DEFAULT_MAX_LINE_BYTES = 64
LINE_TERMINATOR = b"\n"
# termios.error (tcdrain, tcflush) is not an OSError subclass.
IO_ERRORS = (OSError, serial.SerialException, termios.error)


class TtyChannel(ControllerDriver):
    """
    Bidirectional line channel to the co-processor's tty.

    pyserial puts the port in raw mode on open (no canonical processing, no
    echo, no signal chars, no output post-processing, 8-N-1, no flow control).
    Exactly one request may be outstanding; callers use `exchange`.
    """
    def __init__(
        self,
        read_timeout_s: Optional[float] = DEFAULT_READ_TIMEOUT_S,
        baudrate: int = DEFAULT_BAUD,
        write_timeout_s: Optional[float] = DEFAULT_WRITE_TIMEOUT_S,
    ):
        self.ser: Optional[serial.Serial] = None
        self._port: Optional[str] = None
        self._read_timeout_s = read_timeout_s
        self._write_timeout_s = write_timeout_s
        self._baudrate = int(baudrate)
        self._stale_input = False

    @property
    def port(self) -> Optional[str]:
        return self._port

    def open(self, path: str):
        if self.is_open():
            self.close()

        if not path or not Path(path).exists():
            raise DeviceMissingError(f"Device file does not exist: {path}")

        try:
            ser = serial.Serial(
                port=path,
                baudrate=self._baudrate,
                timeout=self._read_timeout_s,
                write_timeout=self._write_timeout_s,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                xonxoff=False,
                rtscts=False,
            )
        except (OSError, ValueError, serial.SerialException) as e:
            raise OpenFailedError(f"File failed to open: {path}: {e}") from e

        try:
            ser.reset_input_buffer()
        except IO_ERRORS as e:
            APP_LOGGER.warning(f"Could not flush stale input on {path}: {e}")

        self.ser = ser
        self._port = path
        self._stale_input = False
        APP_LOGGER.info(f"Opened {path}")

    def is_open(self) -> bool:
        return bool(self.ser and self.ser.is_open)

    def close(self):
        if self.ser is None:
            return
        try:
            self.ser.close()
        except Exception as e:
            APP_LOGGER.warning(f"Error while closing {self._port}: {e}")
        finally:
            self.ser = None
        APP_LOGGER.info(f"Closed {self._port}")

    def write_line(self, payload: bytes):
        """Write one line (terminator appended) and flush."""
        if not self.is_open():
            raise IoFailedError("write on closed channel")
        data = bytes(payload) + LINE_TERMINATOR
        try:
            written = self.ser.write(data)
            self.ser.flush()
        except IO_ERRORS as e:
            self._stale_input = True
            raise IoFailedError(f"write failed: {e}") from e
        if written != len(data):
            raise IoFailedError(f"short write: {written} of {len(data)} bytes")

    def read_line(self, max_bytes: int = DEFAULT_MAX_LINE_BYTES) -> bytes:
        """Read through the first newline or `max_bytes`, terminator included."""
        if not self.is_open():
            raise IoFailedError("read on closed channel")
        try:
            data = self.ser.read_until(LINE_TERMINATOR, max_bytes)
        except IO_ERRORS as e:
            self._stale_input = True
            raise IoFailedError(f"read failed: {e}") from e
        if not data.endswith(LINE_TERMINATOR):
            # The rest of the line may still arrive and would shift every following response.
            self._stale_input = True
            if len(data) < max_bytes:
                raise IoFailedError(f"read timed out after {len(data)} bytes")
        return data

    def resync(self):
        """Discard pending input before the next request."""
        self._stale_input = True

    def exchange(self, payload: bytes, max_bytes: int = DEFAULT_MAX_LINE_BYTES) -> bytes:
        """Send one request line and return the single reply line."""
        if self._stale_input and self.is_open():
            try:
                self.ser.reset_input_buffer()
            except IO_ERRORS as e:
                raise IoFailedError(f"input flush failed: {e}") from e
            self._stale_input = False
        self.write_line(payload)
        return self.read_line(max_bytes)
