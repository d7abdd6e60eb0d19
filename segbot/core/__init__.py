"""Core runtime modules of the SegBot communicator."""

from . import configio, logger, protocol

__all__ = [
    "configio",
    "logger",
    "protocol",
]
