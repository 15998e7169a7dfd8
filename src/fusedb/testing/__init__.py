"""Testing utilities for FuseDB."""

from .mocks import (
    RecordingDriver,
    BareDriver,
    RecordingMiddleware,
)

__all__ = [
    "RecordingDriver",
    "BareDriver",
    "RecordingMiddleware",
]
