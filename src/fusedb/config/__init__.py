"""Configuration system for FuseDB.

Provides typed configuration objects that can be loaded from:
- Environment variables
- YAML files
- Programmatic construction

Validation is explicit: call ``EngineConfig.validate()`` or let
``Engine.from_config`` do it.
"""

from .engine import EngineConfig
from .drivers import DriverConfig, DriverType, CryptoConfig, LoggingConfig

__all__ = [
    "EngineConfig",
    "DriverConfig",
    "DriverType",
    "CryptoConfig",
    "LoggingConfig",
]
