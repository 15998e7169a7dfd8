"""Driver interface and implementations.

Drivers are swappable storage backends behind one contract. The engine
binds exactly one driver for its lifetime.
"""

from .base import Driver
from .memory import InMemoryDriver
from .file import CSVFileDriver, FileDriver, JSONFileDriver, TOMLFileDriver, YAMLFileDriver
from .sqlite import SQLiteDriver

__all__ = [
    # Base interface
    "Driver",
    # Implementations
    "InMemoryDriver",
    "FileDriver",
    "JSONFileDriver",
    "YAMLFileDriver",
    "TOMLFileDriver",
    "CSVFileDriver",
    "SQLiteDriver",
]
