"""Tests for Engine lifecycle, primitive operations and error routing."""

import pytest

from fusedb import (
    ConnectionInfo,
    DriverConnectionError,
    DriverOperationError,
    Engine,
    EngineConfig,
    InMemoryDriver,
    LifecycleEvent,
    MISSING,
)
from fusedb.config import DriverConfig, DriverType
from fusedb.drivers import SQLiteDriver
from fusedb.testing import BareDriver, RecordingMiddleware


class TestEngineConstruction:
    """Tests for defaults and config-driven construction."""

    def test_defaults_to_in_memory_driver(self):
        """Test engine with no options uses a fresh in-memory driver."""
        engine = Engine()
        assert isinstance(engine.driver, InMemoryDriver)
        assert engine.middleware == ()
        assert not engine.is_connected

    def test_middleware_list_is_copied(self, recorder):
        """Test later edits to the caller's list do not change the chain."""
        chain = [recorder]
        engine = Engine(middleware=chain)
        chain.append(RecordingMiddleware("late"))
        assert engine.middleware == (recorder,)

    def test_from_config_builds_driver(self, tmp_path):
        """Test from_config creates the configured driver."""
        config = EngineConfig(
            driver=DriverConfig(type=DriverType.SQLITE, path=str(tmp_path / "db.sqlite")),
        )
        engine = Engine.from_config(config)
        assert isinstance(engine.driver, SQLiteDriver)

    def test_from_config_rejects_invalid(self):
        """Test from_config validates first."""
        config = EngineConfig(driver=DriverConfig(type=DriverType.JSON, path=None))
        with pytest.raises(ValueError, match="Invalid configuration"):
            Engine.from_config(config)

    def test_repr(self):
        assert "InMemoryDriver" in repr(Engine())


class TestEngineLifecycle:
    """Tests for connect/disconnect and lifecycle events."""

    async def test_connect_emits_connected_with_info(self, bus):
        """Test connect emits the driver-reported info."""
        seen = []
        bus.once("connected", seen.append)
        engine = Engine(events=bus)

        info = await engine.connect()

        assert engine.is_connected
        assert isinstance(info, ConnectionInfo)
        assert info.driver == "memory"
        assert seen == [info]

    async def test_disconnect_emits_disconnected(self, bus):
        """Test disconnect flips the flag and emits."""
        calls = []
        bus.on(LifecycleEvent.DISCONNECTED, lambda: calls.append("bye"))
        engine = Engine(events=bus)
        await engine.connect()

        await engine.disconnect()

        assert not engine.is_connected
        assert calls == ["bye"]

    async def test_failed_connect_stays_disconnected(self, bus):
        """Test a connect failure is routed, re-raised and leaves state alone."""
        errors = []
        bus.on("error", errors.append)
        connected = []
        bus.on("connected", connected.append)
        recorder = RecordingMiddleware("rec")
        engine = Engine(driver=BareDriver(fail_connect=True), middleware=[recorder], events=bus)

        with pytest.raises(DriverConnectionError):
            await engine.connect()

        assert not engine.is_connected
        assert connected == []
        assert len(errors) == 1
        assert recorder.errors == errors

    async def test_context_manager(self):
        """Test async context manager connects and disconnects."""
        async with Engine() as engine:
            assert engine.is_connected
        assert not engine.is_connected

    async def test_operations_allowed_while_disconnected(self):
        """Test the connection flag is informational by default."""
        engine = Engine()
        await engine.set("a", 1)
        assert await engine.get("a") == 1

    async def test_require_connection_rejects_operations(self, bus):
        """Test require_connection rejects data operations before connect."""
        errors = []
        bus.on("error", errors.append)
        engine = Engine(events=bus, require_connection=True)

        with pytest.raises(DriverConnectionError, match="not connected"):
            await engine.set("a", 1)
        assert len(errors) == 1

        await engine.connect()
        await engine.set("a", 1)
        assert await engine.size() == 1


class TestPrimitiveOperations:
    """Tests for get/set/remove/has and the store-wide calls."""

    async def test_set_then_get_round_trip(self, engine):
        """Test a value comes back unchanged."""
        value = {"nested": [1, 2, {"x": None}], "flag": True}
        await engine.set("k", value)
        assert await engine.get("k") == value

    async def test_set_overwrites(self, engine):
        await engine.set("k", 1)
        await engine.set("k", 2)
        assert await engine.get("k") == 2
        assert await engine.size() == 1

    async def test_absent_key(self, engine):
        """Test an unset key is absent."""
        assert await engine.has("nope") is False
        assert await engine.get("nope") is None
        assert await engine.get("nope", MISSING) is MISSING
        assert await engine.get("nope", default="fallback") == "fallback"

    async def test_stored_none_distinguishable_from_absent(self, engine):
        """Test a stored None is not reported as missing."""
        await engine.set("null", None)
        assert await engine.has("null") is True
        assert await engine.get("null", MISSING) is None

    async def test_remove_is_idempotent(self, engine):
        """Test removing absent or already-removed keys is fine."""
        await engine.set("k", 1)
        await engine.remove("k")
        await engine.remove("k")
        await engine.remove("never-set")
        assert await engine.has("k") is False

    async def test_size_counts_live_keys(self, engine):
        """Test size reflects sets, removes and clear."""
        for key in ("a", "b", "c"):
            await engine.set(key, key)
        await engine.set("a", "again")
        await engine.remove("b")
        assert await engine.size() == 2

        await engine.clear()
        assert await engine.size() == 0
        assert await engine.keys() == []

    async def test_keys_and_values_aligned(self, engine):
        """Test keys and values come back in insertion order."""
        await engine.set("x", 1)
        await engine.set("y", 2)
        await engine.set("z", 3)
        assert await engine.keys() == ["x", "y", "z"]
        assert await engine.values() == [1, 2, 3]

    @pytest.mark.parametrize("bad_key", ["", None, 42])
    async def test_rejects_invalid_keys(self, engine, bad_key):
        """Test keys must be non-empty strings."""
        with pytest.raises(ValueError, match="non-empty string"):
            await engine.set(bad_key, 1)


class TestErrorRouting:
    """Tests for the error fan-out and re-raise policy."""

    async def test_driver_error_reaches_hooks_event_and_caller(self, bus):
        """Test a driver failure goes to on_error, the error event, then the caller."""
        events = []
        bus.on("error", events.append)
        recorder = RecordingMiddleware("rec")
        engine = Engine(driver=BareDriver(fail_on={"get"}), middleware=[recorder], events=bus)

        with pytest.raises(DriverOperationError) as exc_info:
            await engine.get("k")

        assert events == [exc_info.value]
        assert recorder.errors == [exc_info.value]

    async def test_hook_error_aborts_operation(self, bus):
        """Test an exception in a before hook stops the driver call."""
        class Exploding:
            def before_set(self, key, value):
                raise RuntimeError("boom")

        driver = BareDriver()
        engine = Engine(driver=driver, middleware=[Exploding()], events=bus)

        with pytest.raises(RuntimeError, match="boom"):
            await engine.set("k", 1)
        assert driver.call_count("set") == 0

    async def test_failing_on_error_hook_does_not_block_others(self, bus):
        """Test one on_error failure neither masks the error nor stops other hooks."""
        class BrokenReporter:
            def on_error(self, err):
                raise ValueError("reporter broke")

        recorder = RecordingMiddleware("rec")
        engine = Engine(
            driver=BareDriver(fail_on={"set"}),
            middleware=[BrokenReporter(), recorder],
            events=bus,
        )

        with pytest.raises(DriverOperationError):
            await engine.set("k", 1)
        assert len(recorder.errors) == 1

    async def test_async_on_error_hook_is_awaited(self):
        """Test coroutine on_error hooks run."""
        seen = []

        class AsyncReporter:
            async def on_error(self, err):
                seen.append(err)

        engine = Engine(driver=BareDriver(fail_on={"keys"}), middleware=[AsyncReporter()])
        with pytest.raises(DriverOperationError):
            await engine.keys()
        assert len(seen) == 1

    async def test_store_wide_errors_are_routed(self, bus):
        """Test size/keys/values/clear failures use the same path."""
        events = []
        bus.on("error", events.append)
        engine = Engine(driver=BareDriver(fail_on={"size", "values", "clear"}), events=bus)

        for op in (engine.size, engine.values, engine.clear):
            with pytest.raises(DriverOperationError):
                await op()
        assert len(events) == 3

    async def test_error_without_subscribers_still_raises(self):
        engine = Engine(driver=BareDriver(fail_on={"has"}))
        with pytest.raises(DriverOperationError):
            await engine.has("k")
