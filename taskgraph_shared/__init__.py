"""Wire schemas shared between the task graph service and its API consumers."""

__version__ = "0.1.0"
