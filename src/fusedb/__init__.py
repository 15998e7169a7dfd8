"""FuseDB - a unified async key-value layer.

Application code talks to one ``Engine``; where the data lives and what
happens to it on the way is decided by configuration:

1. **Drivers**: storage backends (in-memory, JSON/YAML/TOML/CSV files,
   SQLite) behind one contract. Optional batch and snapshot capabilities
   are used when a driver has them.

2. **Middleware**: ordered before/after hooks around get, set, remove and
   has (encryption, logging, validation, caching).

3. **Events**: ``connected``, ``disconnected`` and ``error`` notifications
   on an injectable bus.

Usage:
    from fusedb import Engine, CryptoMiddleware

    engine = Engine(middleware=[CryptoMiddleware(key)])
    async with engine:
        await engine.set("foo", 42)
        assert await engine.get("foo") == 42
"""

from .config import EngineConfig, DriverConfig, DriverType
from .drivers import (
    Driver,
    InMemoryDriver,
    JSONFileDriver,
    YAMLFileDriver,
    TOMLFileDriver,
    CSVFileDriver,
    SQLiteDriver,
)
from .engine import Engine
from .errors import (
    FuseError,
    DriverConnectionError,
    DriverOperationError,
    DecryptionError,
    ContractViolation,
)
from .events import EventBus, LifecycleEvent
from .hooks import HookChain
from .interfaces import MISSING, ConnectionInfo
from .middleware import Middleware, CryptoMiddleware, LoggingMiddleware

__version__ = "0.1.0"

__all__ = [
    "Engine",
    "EngineConfig",
    "DriverConfig",
    "DriverType",
    # Drivers
    "Driver",
    "InMemoryDriver",
    "JSONFileDriver",
    "YAMLFileDriver",
    "TOMLFileDriver",
    "CSVFileDriver",
    "SQLiteDriver",
    # Middleware
    "Middleware",
    "CryptoMiddleware",
    "LoggingMiddleware",
    "HookChain",
    # Events
    "EventBus",
    "LifecycleEvent",
    # Types
    "MISSING",
    "ConnectionInfo",
    # Errors
    "FuseError",
    "DriverConnectionError",
    "DriverOperationError",
    "DecryptionError",
    "ContractViolation",
]
