"""FuseDB engine - the unified key-value API.

The engine binds one driver and an ordered middleware chain, wraps the
primitive operations (get, set, remove, has) in before/after hooks, and
derives everything else (bulk, search, sampling, iteration, snapshots)
from the driver contract and its own primitives. It stores no data.
"""

import asyncio
import inspect
import logging
import random as _random
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Sequence, Union

from .config import EngineConfig
from .drivers.base import Driver
from .drivers.memory import InMemoryDriver
from .errors import DriverConnectionError
from .events import EventBus, EventName, Handler, LifecycleEvent
from .hooks import HookChain
from .interfaces import ConnectionInfo, MISSING
from .utils import dumps_snapshot, glob_to_regex, loads_snapshot, sample_keys, strict_equals

logger = logging.getLogger(__name__)

Predicate = Callable[[str, Any], Union[bool, Awaitable[bool]]]
Visitor = Callable[[str, Any], Any]


class Engine:
    """Storage-agnostic key-value engine.

    Usage:
        engine = Engine(
            driver=SQLiteDriver.from_path("data/app.sqlite"),
            middleware=[CryptoMiddleware(key), LoggingMiddleware()],
        )
        engine.once("connected", lambda info: print(info.driver))

        async with engine:
            await engine.set("user:1", {"name": "Ada"})
            users = await engine.find("user:*")

    Args:
        driver: Storage driver (default: a fresh ``InMemoryDriver``)
        middleware: Middleware in hook order (default: none)
        events: Bus for lifecycle notifications (default: a private bus)
        require_connection: Reject data operations until ``connect()``
            succeeds. Off by default: the connection flag is informational.
        strict_contracts: Raise ``ContractViolation`` when a has-hook
            returns something other than a bool or None
    """

    def __init__(
        self,
        driver: Optional[Driver] = None,
        middleware: Optional[Iterable[Any]] = None,
        events: Optional[EventBus] = None,
        *,
        require_connection: bool = False,
        strict_contracts: bool = False,
    ):
        self._driver = driver if driver is not None else InMemoryDriver()
        self._chain = HookChain(middleware or (), strict_contracts=strict_contracts)
        self.events = events if events is not None else EventBus()
        self.require_connection = require_connection
        self._connected = False

    @classmethod
    def from_config(cls, config: EngineConfig, events: Optional[EventBus] = None) -> "Engine":
        """Build an engine with the driver and middleware a config describes.

        Raises:
            ValueError: If the configuration does not validate
        """
        from .factory import create_driver, create_middleware

        errors = config.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {errors}")

        return cls(
            driver=create_driver(config.driver),
            middleware=create_middleware(config),
            events=events,
            require_connection=config.require_connection,
            strict_contracts=config.strict_contracts,
        )

    @property
    def driver(self) -> Driver:
        return self._driver

    @property
    def middleware(self) -> tuple[Any, ...]:
        return self._chain.middleware

    @property
    def is_connected(self) -> bool:
        return self._connected

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: EventName, handler: Handler) -> Handler:
        return self.events.on(event, handler)

    def once(self, event: EventName, handler: Handler) -> Handler:
        return self.events.once(event, handler)

    def off(self, event: EventName, handler: Handler) -> bool:
        return self.events.off(event, handler)

    # ------------------------------------------------------------------
    # Error routing
    # ------------------------------------------------------------------

    async def _handle_error(self, err: Exception) -> None:
        """Fan an error out to ``on_error`` hooks and ``error`` subscribers."""
        logger.debug(f"Routing {type(err).__name__}: {err}")
        await self._chain.on_error(err)
        await self.events.emit(LifecycleEvent.ERROR, err)

    @asynccontextmanager
    async def _errors(self):
        """Route any failure in the block through the error path, then re-raise."""
        try:
            yield
        except Exception as e:
            await self._handle_error(e)
            raise

    def _check_ready(self) -> None:
        if self.require_connection and not self._connected:
            raise DriverConnectionError("Engine not connected. Call connect() first.")

    @staticmethod
    def _check_key(key: str) -> None:
        if not isinstance(key, str) or not key:
            raise ValueError(f"Key must be a non-empty string, got {key!r}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> ConnectionInfo:
        """Connect the driver and emit ``connected`` with its info."""
        async with self._errors():
            info = await self._driver.connect()
        self._connected = True
        logger.info(f"Connected to {getattr(info, 'driver', info)}")
        await self.events.emit(LifecycleEvent.CONNECTED, info)
        return info

    async def disconnect(self) -> None:
        """Disconnect the driver and emit ``disconnected``."""
        async with self._errors():
            await self._driver.disconnect()
        self._connected = False
        logger.info("Disconnected")
        await self.events.emit(LifecycleEvent.DISCONNECTED)

    # ------------------------------------------------------------------
    # Primitive operations (middleware-wrapped)
    # ------------------------------------------------------------------

    async def get(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key`` after every ``after_get`` hook.

        A ``before_get`` override skips the driver but still runs the
        ``after_get`` hooks.

        Args:
            key: Entry key
            default: Returned when the key is absent. Pass ``MISSING`` to
                tell an absent key from a stored ``None``.
        """
        async with self._errors():
            self._check_ready()
            self._check_key(key)
            value = await self._chain.before_get(key)
            if value is MISSING:
                value = await self._driver.get(key)
            value = await self._chain.after_get(key, value)
        return default if value is MISSING else value

    async def set(self, key: str, value: Any) -> None:
        """Create or overwrite ``key``; ``before_set`` hooks may replace the value."""
        async with self._errors():
            self._check_ready()
            self._check_key(key)
            value = await self._chain.before_set(key, value)
            await self._driver.set(key, value)
            await self._chain.after_set(key, value)

    async def remove(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is not an error."""
        async with self._errors():
            self._check_ready()
            self._check_key(key)
            await self._chain.before_remove(key)
            await self._driver.remove(key)
            await self._chain.after_remove(key)

    async def has(self, key: str) -> bool:
        async with self._errors():
            self._check_ready()
            self._check_key(key)
            exists = await self._chain.before_has(key)
            if exists is None:
                exists = await self._driver.has(key)
            return await self._chain.after_has(key, exists)

    # ------------------------------------------------------------------
    # Store-wide operations (driver only, no hooks)
    # ------------------------------------------------------------------

    async def size(self) -> int:
        async with self._errors():
            self._check_ready()
            return await self._driver.size()

    async def keys(self) -> list[str]:
        async with self._errors():
            self._check_ready()
            return list(await self._driver.keys())

    async def values(self) -> list[Any]:
        """Return raw stored values; ``after_get`` hooks are not applied."""
        async with self._errors():
            self._check_ready()
            return list(await self._driver.values())

    async def clear(self) -> None:
        async with self._errors():
            self._check_ready()
            await self._driver.clear()

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    async def bulk_get(self, keys: Sequence[str], default: Any = None) -> list[Any]:
        """Fetch keys concurrently; the result is aligned with ``keys``."""
        return list(await asyncio.gather(*(self.get(key, default) for key in keys)))

    async def bulk_set(self, entries: Mapping[str, Any]) -> None:
        """Write many entries.

        Uses the driver's ``bulk_set`` when it has one (middleware does not
        see those writes); otherwise calls :meth:`set` once per key, in
        order, so every hook sees every key.
        """
        native = getattr(self._driver, "bulk_set", None)
        if callable(native):
            async with self._errors():
                self._check_ready()
                for key in entries:
                    self._check_key(key)
                await native(dict(entries))
            return
        for key, value in entries.items():
            await self.set(key, value)

    async def bulk_remove(self, keys: Sequence[str]) -> None:
        """Remove many keys; same driver-or-fallback rule as :meth:`bulk_set`."""
        native = getattr(self._driver, "bulk_remove", None)
        if callable(native):
            keys = list(keys)
            async with self._errors():
                self._check_ready()
                for key in keys:
                    self._check_key(key)
                await native(keys)
            return
        for key in keys:
            await self.remove(key)

    # ------------------------------------------------------------------
    # Search and iteration
    # ------------------------------------------------------------------

    async def find(self, pattern: str) -> dict[str, Any]:
        """Return entries whose key matches a glob (``*`` and ``?``).

        Keys come from one ``keys()`` call; each match is then read with
        :meth:`get`, so values pass through the middleware chain.
        """
        regex = glob_to_regex(pattern)
        result = {}
        for key in await self.keys():
            if regex.fullmatch(key):
                result[key] = await self.get(key)
        return result

    async def filter(self, predicate: Predicate) -> dict[str, Any]:
        """Return entries for which ``predicate(key, value)`` is truthy.

        The scan is sequential in ``keys()`` order. Keys added or removed
        by someone else while it runs may or may not be seen; there is no
        snapshot isolation.
        """
        result = {}
        for key in await self.keys():
            value = await self.get(key)
            keep = predicate(key, value)
            if inspect.isawaitable(keep):
                keep = await keep
            if keep:
                result[key] = value
        return result

    async def includes(self, value: Any) -> bool:
        """True if some stored value is identical to ``value``.

        Scalars compare by value and type, containers by identity only;
        there is no deep equality. Compares raw stored values.
        """
        return any(strict_equals(stored, value) for stored in await self.values())

    async def random(
        self,
        count: Optional[int] = None,
        rng: Optional[_random.Random] = None,
    ) -> Optional[Union[dict[str, Any], list[dict[str, Any]]]]:
        """Sample entries uniformly.

        Args:
            count: None or <= 1 for one ``{key: value}`` mapping; > 1 for a
                list of up to ``count`` mappings with distinct keys.
                Fractional counts are truncated.
            rng: Random source (default: the ``random`` module)

        Returns:
            A mapping, a list of mappings, or None / [] on an empty store
        """
        rng = rng or _random
        if count is not None:
            count = int(count)
        keys = await self.keys()
        many = count is not None and count > 1

        if not keys:
            return [] if many else None

        if many:
            picked = sample_keys(keys, count, rng)
            values = await self.bulk_get(picked)
            return [{key: value} for key, value in zip(picked, values)]

        key = keys[rng.randrange(len(keys))]
        return {key: await self.get(key)}

    async def for_each(self, fn: Visitor) -> None:
        """Call ``fn(key, value)`` for every entry, one at a time, in key order.

        Async callbacks are awaited before the next key is read.
        """
        for key in await self.keys():
            value = await self.get(key)
            result = fn(key, value)
            if inspect.isawaitable(result):
                await result

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    async def export_snapshot(self) -> str | bytes:
        """Serialize the whole store.

        The driver's own format is used when it exports natively; otherwise
        a JSON object built from ``keys()`` and :meth:`get`.
        """
        native = getattr(self._driver, "export_snapshot", None)
        if callable(native):
            async with self._errors():
                self._check_ready()
                return await native()

        entries = {}
        for key in await self.keys():
            entries[key] = await self.get(key)
        return dumps_snapshot(entries)

    async def import_snapshot(self, blob: str | bytes) -> None:
        """Replace the store with a snapshot from :meth:`export_snapshot`.

        Without a native import the store is cleared and refilled. The
        synthesized export holds values as ``after_get`` returned them, so
        with middleware in the chain each entry is written with :meth:`set`
        to pass through ``before_set`` again.
        """
        native = getattr(self._driver, "import_snapshot", None)
        if callable(native):
            async with self._errors():
                self._check_ready()
                await native(blob)
            return

        async with self._errors():
            entries = loads_snapshot(blob)
            for key in entries:
                self._check_key(key)
        await self.clear()
        if len(self._chain):
            for key, value in entries.items():
                await self.set(key, value)
        else:
            await self.bulk_set(entries)

    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        state = "connected" if self._connected else "disconnected"
        return (
            f"<Engine driver={type(self._driver).__name__} "
            f"middleware={len(self._chain)} {state}>"
        )

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
