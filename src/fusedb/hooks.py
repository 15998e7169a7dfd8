"""Middleware hook chain.

The engine never calls middleware directly; it folds over a ``HookChain``.
Every phase walks the middleware in list order, both before and after the
driver call. The chain is not reversed on the way out.

Hook signatures (all optional, sync or async):

    before_get(key)              -> override value or None
    before_set(key, value)       -> replacement value or None
    before_remove(key)           -> ignored
    before_has(key)              -> override bool or None
    after_get(key, value)        -> replacement value or None
    after_set(key, value)        -> ignored
    after_remove(key)            -> ignored
    after_has(key, exists)       -> replacement bool or None
    on_error(err)                -> ignored, failures swallowed

``None`` always means "no opinion": the propagated value is kept.
"""

import inspect
import logging
from typing import Any, Callable, Iterable, Optional

from .errors import ContractViolation
from .interfaces import MISSING

logger = logging.getLogger(__name__)


async def _call(hook: Callable[..., Any], *args: Any) -> Any:
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class HookChain:
    """Ordered, immutable view over a middleware list.

    Args:
        middleware: Middleware objects in the order their hooks should run
        strict_contracts: Raise ``ContractViolation`` on bad hook results
            instead of logging and ignoring them
    """

    def __init__(self, middleware: Iterable[Any] = (), strict_contracts: bool = False):
        self._middleware: tuple[Any, ...] = tuple(middleware)
        self.strict_contracts = strict_contracts

    @property
    def middleware(self) -> tuple[Any, ...]:
        return self._middleware

    def __len__(self) -> int:
        return len(self._middleware)

    def hooks(self, name: str) -> list[Callable[..., Any]]:
        """Return the callables registered for ``name``, in chain order.

        A middleware has a capability when it exposes a callable attribute
        with the hook's name; nothing else is inspected.
        """
        found = []
        for m in self._middleware:
            hook = getattr(m, name, None)
            if callable(hook):
                found.append(hook)
        return found

    # -- get -------------------------------------------------------------

    async def before_get(self, key: str) -> Any:
        """Return the first override, or ``MISSING`` when no hook supplies one."""
        for hook in self.hooks("before_get"):
            override = await _call(hook, key)
            if override is not None:
                return override
        return MISSING

    async def after_get(self, key: str, value: Any) -> Any:
        for hook in self.hooks("after_get"):
            replacement = await _call(hook, key, value)
            if replacement is not None:
                value = replacement
        return value

    # -- set -------------------------------------------------------------

    async def before_set(self, key: str, value: Any) -> Any:
        """Thread ``value`` through every hook; each sees the latest replacement."""
        for hook in self.hooks("before_set"):
            replacement = await _call(hook, key, value)
            if replacement is not None:
                value = replacement
        return value

    async def after_set(self, key: str, value: Any) -> None:
        for hook in self.hooks("after_set"):
            await _call(hook, key, value)

    # -- remove ----------------------------------------------------------

    async def before_remove(self, key: str) -> None:
        for hook in self.hooks("before_remove"):
            await _call(hook, key)

    async def after_remove(self, key: str) -> None:
        for hook in self.hooks("after_remove"):
            await _call(hook, key)

    # -- has -------------------------------------------------------------

    async def before_has(self, key: str) -> Optional[bool]:
        """Return the first boolean override, or None when no hook supplies one."""
        for hook in self.hooks("before_has"):
            override = await _call(hook, key)
            if isinstance(override, bool):
                return override
            if override is not None:
                self._violation(hook, "before_has", override)
        return None

    async def after_has(self, key: str, exists: bool) -> bool:
        for hook in self.hooks("after_has"):
            replacement = await _call(hook, key, exists)
            if isinstance(replacement, bool):
                exists = replacement
            elif replacement is not None:
                self._violation(hook, "after_has", replacement)
        return exists

    # -- errors ----------------------------------------------------------

    async def on_error(self, err: BaseException) -> int:
        """Notify every ``on_error`` hook; failures are logged, never raised.

        Returns:
            Number of hooks that completed without raising
        """
        delivered = 0
        for hook in self.hooks("on_error"):
            try:
                await _call(hook, err)
                delivered += 1
            except Exception:
                logger.exception(f"on_error hook {hook!r} failed")
        return delivered

    def _violation(self, hook: Callable[..., Any], phase: str, value: Any) -> None:
        message = (
            f"{phase} hook {hook!r} returned {type(value).__name__}, "
            f"expected bool or None"
        )
        if self.strict_contracts:
            raise ContractViolation(message)
        logger.warning(f"{message}; ignoring")
