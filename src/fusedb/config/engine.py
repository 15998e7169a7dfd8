"""Engine-wide configuration."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .drivers import CryptoConfig, DriverConfig, DriverType, LoggingConfig

DEFAULT_CONFIG_PATH = "~/.fusedb/config.yaml"


@dataclass
class EngineConfig:
    """Complete engine configuration.

    Combines the driver and middleware settings into a single object.
    Middleware built from this config runs in a fixed order: encryption
    first, then logging, so the logger sees the values the driver stores.

    Attributes:
        driver: Storage driver configuration
        crypto: Encryption middleware configuration
        logging: Logging middleware configuration
        require_connection: Reject data operations until connect() succeeds
        strict_contracts: Raise on out-of-contract hook results
        debug: Enable debug logging (CLI)
    """
    driver: DriverConfig = field(default_factory=DriverConfig)
    crypto: CryptoConfig = field(default_factory=CryptoConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    require_connection: bool = False
    strict_contracts: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls, prefix: str = "FUSEDB") -> "EngineConfig":
        """Load configuration from environment variables.

        Environment variables:
            {prefix}_DRIVER: memory|json|yaml|toml|csv|sqlite
            {prefix}_PATH: Database file path
            {prefix}_TABLE: SQLite table name
            {prefix}_AUTOSAVE: true|false

            {prefix}_CRYPTO_KEY: Encryption key (enables encryption)
            {prefix}_LOG_OPERATIONS: true|false
            {prefix}_LOG_LEVEL: Level for operation records

            {prefix}_REQUIRE_CONNECTION: true|false
            {prefix}_STRICT_CONTRACTS: true|false
            {prefix}_DEBUG: true|false
        """
        def get(key: str, default: str = None) -> Optional[str]:
            return os.environ.get(f"{prefix}_{key}", default)

        def get_bool(key: str, default: bool = False) -> bool:
            val = get(key)
            if val is None:
                return default
            return val.lower() in ("true", "1", "yes")

        driver = DriverConfig(
            type=DriverType(get("DRIVER", "memory")),
            path=get("PATH"),
            table_name=get("TABLE", "fuse_data"),
            autosave=get_bool("AUTOSAVE", True),
        )

        key = get("CRYPTO_KEY")
        crypto = CryptoConfig(enabled=key is not None, key=key)

        log_config = LoggingConfig(
            enabled=get_bool("LOG_OPERATIONS", False),
            level=get("LOG_LEVEL", "INFO"),
        )

        return cls(
            driver=driver,
            crypto=crypto,
            logging=log_config,
            require_connection=get_bool("REQUIRE_CONNECTION", False),
            strict_contracts=get_bool("STRICT_CONTRACTS", False),
            debug=get_bool("DEBUG", False),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "EngineConfig":
        """Load configuration from a YAML file.

        A missing file yields the defaults. ``crypto.key`` falls back to
        ``FUSEDB_CRYPTO_KEY`` so keys can stay out of the file.
        """
        path = Path(path).expanduser()
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "EngineConfig":
        """Create configuration from a dictionary (e.g. parsed YAML)."""
        driver_data = dict(data.get("driver", {}))
        crypto_data = dict(data.get("crypto", {}))
        logging_data = data.get("logging", {})

        if "type" in driver_data:
            driver_data["type"] = DriverType(driver_data["type"])
        if crypto_data.get("enabled") and not crypto_data.get("key"):
            crypto_data["key"] = os.environ.get("FUSEDB_CRYPTO_KEY")

        return cls(
            driver=DriverConfig(**driver_data),
            crypto=CryptoConfig(**crypto_data),
            logging=LoggingConfig(**logging_data),
            require_connection=data.get("require_connection", False),
            strict_contracts=data.get("strict_contracts", False),
            debug=data.get("debug", False),
        )

    @classmethod
    def from_default_location(cls) -> "EngineConfig":
        """Load the file named by ``FUSEDB_CONFIG`` (default ~/.fusedb/config.yaml)."""
        return cls.from_file(os.environ.get("FUSEDB_CONFIG", DEFAULT_CONFIG_PATH))

    @classmethod
    def for_testing(cls) -> "EngineConfig":
        """Create a configuration suitable for testing.

        In-memory driver, no middleware, contract violations raised.
        """
        return cls(
            driver=DriverConfig(type=DriverType.MEMORY),
            strict_contracts=True,
            debug=True,
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Checks:
        - File-backed drivers have a path
        - SQLite table name is a plain identifier
        - Encryption key is present and 32 bytes
        - Logging level is a known level name
        """
        errors = []

        if self.driver.type != DriverType.MEMORY and not self.driver.path:
            errors.append(f"{self.driver.type.value} driver requires a path")

        if self.driver.type == DriverType.SQLITE:
            if not self.driver.table_name.isidentifier():
                errors.append(
                    f"driver.table_name must be an identifier, got {self.driver.table_name!r}"
                )

        if self.driver.indent is not None and self.driver.indent < 0:
            errors.append(f"driver.indent must be non-negative, got {self.driver.indent}")

        if self.crypto.enabled:
            if not self.crypto.key:
                errors.append("crypto requires a key (or set FUSEDB_CRYPTO_KEY)")
            elif len(self.crypto.key.encode("utf-8")) != 32:
                errors.append(
                    f"crypto.key must be 32 bytes for AES-256, "
                    f"got {len(self.crypto.key.encode('utf-8'))}"
                )

        if not isinstance(logging.getLevelName(self.logging.level.upper()), int):
            errors.append(f"Unknown logging level: {self.logging.level}")

        return errors
