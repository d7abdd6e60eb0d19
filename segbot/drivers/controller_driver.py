"""Common interfaces and exceptions for SegBot device drivers."""


class ControllerDriverError(RuntimeError):
    """Raised when the co-processor channel cannot be used."""


class DeviceMissingError(ControllerDriverError):
    """The device path does not exist."""


class OpenFailedError(ControllerDriverError):
    """The device exists but could not be opened."""


class IoFailedError(ControllerDriverError):
    """A read or write on an open channel failed or timed out."""


class ControllerDriver:
    """Abstract interface for line-oriented device backends.

    The communicator only needs a lockstep request/response primitive on top
    of open/close, so that is all a backend has to provide.
    """

    def open(self, path: str):  # pragma: no cover - interface placeholder
        raise NotImplementedError

    def close(self):  # pragma: no cover - interface placeholder
        raise NotImplementedError

    def is_open(self) -> bool:  # pragma: no cover - interface placeholder
        raise NotImplementedError

    def exchange(self, payload: bytes, max_bytes: int = 64) -> bytes:  # pragma: no cover - interface placeholder
        raise NotImplementedError

    def resync(self):
        """Called after a reply that did not match its request."""
