"""Test doubles for drivers and middleware."""

import asyncio
import json
from typing import Any, Optional

from ..drivers.base import Driver
from ..errors import DriverConnectionError, DriverOperationError
from ..interfaces import ConnectionInfo, MISSING


class BareDriver(Driver[None]):
    """Driver with only the required primitives.
    
    Has no bulk or snapshot capabilities, so the engine must use its
    fallbacks. Records every call as ``(method, args)`` in ``calls``.
    Can be configured to fail and to simulate latency.
    """
    
    name = "bare"
    
    def __init__(
        self,
        latency_ms: float = 0,
        fail_on: Optional[set[str]] = None,
        fail_connect: bool = False,
    ):
        """Initialize the driver.
        
        Args:
            latency_ms: Simulated latency per call.
            fail_on: Method names that raise ``DriverOperationError``.
            fail_connect: Make ``connect`` raise ``DriverConnectionError``.
        """
        super().__init__()
        self.data: dict[str, Any] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.latency_ms = latency_ms
        self.fail_on = set(fail_on or ())
        self.fail_connect = fail_connect
    
    def call_count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)
    
    async def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000)
        if method in self.fail_on:
            raise DriverOperationError(f"Mock {method} failure")
    
    async def connect(self) -> ConnectionInfo:
        self.calls.append(("connect", ()))
        if self.fail_connect:
            raise DriverConnectionError("Mock backend unavailable")
        self._connected = True
        return ConnectionInfo(driver=self.name)
    
    async def disconnect(self) -> None:
        await self._record("disconnect")
        self._connected = False
    
    async def get(self, key: str) -> Any:
        await self._record("get", key)
        return self.data.get(key, MISSING)
    
    async def set(self, key: str, value: Any) -> None:
        await self._record("set", key, value)
        self.data[key] = value
    
    async def remove(self, key: str) -> None:
        await self._record("remove", key)
        self.data.pop(key, None)
    
    async def has(self, key: str) -> bool:
        await self._record("has", key)
        return key in self.data
    
    async def size(self) -> int:
        await self._record("size")
        return len(self.data)
    
    async def keys(self) -> list[str]:
        await self._record("keys")
        return list(self.data)
    
    async def values(self) -> list[Any]:
        await self._record("values")
        return list(self.data.values())
    
    async def clear(self) -> None:
        await self._record("clear")
        self.data.clear()


class RecordingDriver(BareDriver):
    """``BareDriver`` plus every optional capability, also recorded."""
    
    name = "recording"
    
    async def bulk_set(self, entries: dict[str, Any]) -> None:
        await self._record("bulk_set", entries)
        self.data.update(entries)
    
    async def bulk_remove(self, keys: list[str]) -> None:
        await self._record("bulk_remove", keys)
        for key in keys:
            self.data.pop(key, None)
    
    async def export_snapshot(self) -> str:
        await self._record("export_snapshot")
        return json.dumps(self.data, sort_keys=True)
    
    async def import_snapshot(self, blob: str) -> None:
        await self._record("import_snapshot", blob)
        self.data = json.loads(blob)


class RecordingMiddleware:
    """Middleware that records hook calls into a shared log.
    
    Does not subclass ``Middleware``: any object with hook attributes
    works. Each hook appends ``(name, hook, args)`` to ``log``.
    
    Args:
        name: Label written into the log
        log: List shared between middleware to observe ordering
        overrides: Optional return values per hook name
    """
    
    def __init__(
        self,
        name: str,
        log: Optional[list] = None,
        overrides: Optional[dict[str, Any]] = None,
    ):
        self.name = name
        self.log = log if log is not None else []
        self.overrides = overrides or {}
        self.errors: list[BaseException] = []
    
    def _hit(self, hook: str, *args: Any) -> Any:
        self.log.append((self.name, hook, args))
        return self.overrides.get(hook)
    
    async def before_get(self, key):
        return self._hit("before_get", key)
    
    async def after_get(self, key, value):
        return self._hit("after_get", key, value)
    
    async def before_set(self, key, value):
        return self._hit("before_set", key, value)
    
    async def after_set(self, key, value):
        return self._hit("after_set", key, value)
    
    async def before_remove(self, key):
        return self._hit("before_remove", key)
    
    async def after_remove(self, key):
        return self._hit("after_remove", key)
    
    async def before_has(self, key):
        return self._hit("before_has", key)
    
    async def after_has(self, key, exists):
        return self._hit("after_has", key, exists)
    
    def on_error(self, err):
        self.errors.append(err)
        self._hit("on_error", err)
