"""Abstract base class for storage drivers.

A driver owns the data; the engine only orchestrates calls to it. The base
class declares the required primitives. Optional capabilities are detected
on the instance by name and are not declared here:

    async bulk_set(entries: dict[str, Any]) -> None
    async bulk_remove(keys: list[str]) -> None
    async export_snapshot() -> str | bytes
    async import_snapshot(blob: str | bytes) -> None

Implement any of them to give the engine a backend-optimised path; leave
them out and the engine falls back to per-key primitives.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from ..errors import DriverOperationError
from ..interfaces import ConnectionInfo

# Type variable for driver-specific configuration
TConfig = TypeVar('TConfig')


class Driver(ABC, Generic[TConfig]):
    """Base class for all drivers.
    
    Provides common functionality:
    - Configuration storage
    - Connection state tracking
    - Async context manager lifecycle (connect/disconnect)
    """
    
    name: str = "driver"
    
    def __init__(self, config: Optional[TConfig] = None):
        self.config = config
        self._connected = False
    
    @abstractmethod
    async def connect(self) -> ConnectionInfo:
        """Open the session. Raise ``DriverConnectionError`` if unavailable."""
        pass
    
    @abstractmethod
    async def disconnect(self) -> None:
        """Release the session. Must be a no-op if never connected."""
        pass
    
    @abstractmethod
    async def get(self, key: str) -> Any:
        """Return the stored value, or ``MISSING`` if the key is absent."""
        pass
    
    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Create or overwrite ``key``."""
        pass
    
    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is not an error."""
        pass
    
    @abstractmethod
    async def has(self, key: str) -> bool:
        pass
    
    @abstractmethod
    async def size(self) -> int:
        pass
    
    @abstractmethod
    async def keys(self) -> list[str]:
        """Return every key, in the backend's natural order."""
        pass
    
    @abstractmethod
    async def values(self) -> list[Any]:
        """Return every value, aligned with :meth:`keys`."""
        pass
    
    @abstractmethod
    async def clear(self) -> None:
        pass
    
    @property
    def is_connected(self) -> bool:
        return self._connected
    
    def _ensure_connected(self) -> None:
        if not self._connected:
            raise DriverOperationError(
                f"{type(self).__name__} not connected. Call connect() first."
            )
    
    async def __aenter__(self):
        if not self._connected:
            await self.connect()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
