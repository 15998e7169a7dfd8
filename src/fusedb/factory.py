"""Build drivers and middleware from configuration."""

import logging
from typing import Any

from .config import EngineConfig
from .config.drivers import DriverConfig, DriverType
from .drivers.base import Driver

logger = logging.getLogger(__name__)


def create_driver(config: DriverConfig) -> Driver:
    """Create the driver a ``DriverConfig`` names."""
    from .drivers.file import CSVFileDriver, JSONFileDriver, TOMLFileDriver, YAMLFileDriver
    from .drivers.memory import InMemoryDriver
    from .drivers.sqlite import SQLiteDriver

    if config.type == DriverType.MEMORY:
        return InMemoryDriver()
    elif config.type == DriverType.JSON:
        return JSONFileDriver(config)
    elif config.type == DriverType.YAML:
        return YAMLFileDriver(config)
    elif config.type == DriverType.TOML:
        return TOMLFileDriver(config)
    elif config.type == DriverType.CSV:
        return CSVFileDriver(config)
    elif config.type == DriverType.SQLITE:
        return SQLiteDriver(config)
    else:
        raise ValueError(f"Unknown driver type: {config.type}")


def create_middleware(config: EngineConfig) -> list[Any]:
    """Create the configured middleware, encryption first, then logging."""
    from .middleware.crypto import CryptoMiddleware
    from .middleware.logger import LoggingMiddleware

    chain: list[Any] = []
    if config.crypto.enabled:
        chain.append(CryptoMiddleware(config.crypto.key))
    if config.logging.enabled:
        chain.append(LoggingMiddleware(
            logger_name=config.logging.logger_name,
            level=config.logging.level,
            include_values=config.logging.include_values,
        ))
    logger.debug(f"Built middleware chain: {[type(m).__name__ for m in chain]}")
    return chain
