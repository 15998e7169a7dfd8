"""In-memory driver."""

from typing import Any

from .base import Driver
from ..interfaces import ConnectionInfo, MISSING
from ..utils import dumps_snapshot, loads_snapshot


class InMemoryDriver(Driver[None]):
    """Dict-backed driver for tests, caching and development.
    
    Data lives only as long as the driver object; ``disconnect`` does not
    discard it, so an engine can reconnect and find its entries again.
    """
    
    name = "memory"
    
    def __init__(self, config: None = None):
        super().__init__(config)
        self._data: dict[str, Any] = {}
    
    async def connect(self) -> ConnectionInfo:
        self._connected = True
        return ConnectionInfo(driver=self.name)
    
    async def disconnect(self) -> None:
        self._connected = False
    
    async def get(self, key: str) -> Any:
        return self._data.get(key, MISSING)
    
    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value
    
    async def remove(self, key: str) -> None:
        self._data.pop(key, None)
    
    async def has(self, key: str) -> bool:
        return key in self._data
    
    async def size(self) -> int:
        return len(self._data)
    
    async def keys(self) -> list[str]:
        return list(self._data)
    
    async def values(self) -> list[Any]:
        return list(self._data.values())
    
    async def clear(self) -> None:
        self._data = {}
    
    async def export_snapshot(self) -> str:
        return dumps_snapshot(self._data)
    
    async def import_snapshot(self, blob: str | bytes) -> None:
        self._data = loads_snapshot(blob)
