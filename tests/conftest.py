from collections import deque

import pytest
from PySide6.QtCore import QCoreApplication

from segbot.core.protocol import encode_command
from segbot.drivers.controller_driver import ControllerDriver, DeviceMissingError, IoFailedError


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class ScriptedChannel(ControllerDriver):
    """In-memory stand-in for the tty: answers each line from a script."""

    def __init__(self, telemetry=None, existing=None):
        self.telemetry = dict(telemetry or {})
        self.existing = existing
        self.replies = deque()
        self.events = []
        self.path = None
        self._open = False
        self.closed_count = 0
        self.resync_count = 0

    @property
    def writes(self):
        return [data for kind, data in self.events if kind == "w"]

    def open(self, path):
        if self.existing is not None and path not in self.existing:
            raise DeviceMissingError(f"Device file does not exist: {path}")
        self.path = path
        self._open = True

    def is_open(self):
        return self._open

    def close(self):
        self._open = False
        self.closed_count += 1

    def resync(self):
        self.resync_count += 1

    def exchange(self, payload, max_bytes=64):
        if not self._open:
            raise IoFailedError("closed")
        self.events.append(("w", payload + b"\n"))
        reply = self._reply_for(payload)
        if isinstance(reply, Exception):
            raise reply
        self.events.append(("r", reply))
        return reply

    def _reply_for(self, payload):
        if self.replies:
            return self.replies.popleft()
        text = payload.decode("ascii")
        if text.startswith("?"):
            name = text[1:]
            return f"?{name}:{self.telemetry.get(name, 0)}\n".encode("ascii")
        return b"ok\n"


class FakeLink:
    """Minimal command link backed by a ScriptedChannel."""

    def __init__(self, channel=None, active=True):
        self.channel = channel or ScriptedChannel()
        self.channel.open("/dev/fake")
        self.is_active = active

    def exchange(self, command):
        if not self.is_active:
            raise IoFailedError("inactive")
        return self.channel.exchange(encode_command(command))

    def resync(self):
        self.channel.resync()


@pytest.fixture
def channel():
    return ScriptedChannel()


@pytest.fixture
def link(channel):
    return FakeLink(channel)


@pytest.fixture
def channels():
    """Channels created by a communicator's factory, in creation order."""
    return []


@pytest.fixture
def communicator(channels):
    from segbot.core.communicator import SegBotCommunicator

    def factory():
        ch = ScriptedChannel(existing={"/dev/rpmsg0", "/dev/rpmsg1"})
        channels.append(ch)
        return ch

    comm = SegBotCommunicator(channel_factory=factory)
    comm.init()
    yield comm
    comm.close()
