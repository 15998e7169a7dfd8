"""Driver and middleware configuration classes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DriverType(Enum):
    """Available storage drivers."""
    MEMORY = "memory"
    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    CSV = "csv"
    SQLITE = "sqlite"


@dataclass
class DriverConfig:
    """Configuration for the storage driver.
    
    Attributes:
        type: Which driver to use
        path: Database file path (every driver but memory)
        table_name: Table holding entries (sqlite)
        autosave: Write the file after every mutation (json, yaml, toml, csv)
        indent: Indentation for JSON and YAML documents; None for compact JSON
    """
    type: DriverType = DriverType.MEMORY
    path: Optional[str] = None
    table_name: str = "fuse_data"
    autosave: bool = True
    indent: Optional[int] = 2


@dataclass
class CryptoConfig:
    """Configuration for value encryption.
    
    Attributes:
        enabled: Add the encryption middleware to the chain
        key: 32-byte key (UTF-8 string)
    """
    enabled: bool = False
    key: Optional[str] = None


@dataclass
class LoggingConfig:
    """Configuration for the operation logging middleware.
    
    Attributes:
        enabled: Add the logging middleware to the chain
        logger_name: Name passed to ``logging.getLogger``
        level: Level name for hook records (DEBUG, INFO, ...)
        include_values: Log values; False logs keys only
    """
    enabled: bool = False
    logger_name: str = "fusedb.ops"
    level: str = "INFO"
    include_values: bool = True
