"""Host-side communicator for the SegBot self-balancing robot."""

__version__ = "0.1.0"
