"""Operation logging middleware."""

import logging
from typing import Any, Optional

from .base import Middleware
from ..interfaces import MISSING


class LoggingMiddleware(Middleware):
    """Log every intercepted operation through the ``logging`` module.
    
    Never changes a value: every hook returns None.
    
    Args:
        logger: Logger to write to (default: ``logging.getLogger(logger_name)``)
        logger_name: Name used when no logger is given
        level: Level for before/after records; errors always log at ERROR
        include_values: Include values in records; False logs keys only
    """
    
    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        logger_name: str = "fusedb.ops",
        level: int | str = logging.INFO,
        include_values: bool = True,
    ):
        self.logger = logger or logging.getLogger(logger_name)
        if isinstance(level, str):
            resolved = logging.getLevelName(level.upper())
            if not isinstance(resolved, int):
                raise ValueError(f"Unknown logging level: {level}")
            level = resolved
        self.level = level
        self.include_values = include_values
    
    def _log(self, phase: str, op: str, key: str, **meta: Any) -> None:
        if not self.logger.isEnabledFor(self.level):
            return
        if self.include_values and meta:
            details = ", ".join(f"{k}={self._show(v)}" for k, v in meta.items())
            self.logger.log(self.level, f"{phase} {op} key={key!r} {details}")
        else:
            self.logger.log(self.level, f"{phase} {op} key={key!r}")
    
    @staticmethod
    def _show(value: Any) -> str:
        return "<missing>" if value is MISSING else repr(value)
    
    def before_get(self, key: str) -> None:
        self._log("Before", "get", key)
    
    def after_get(self, key: str, value: Any) -> None:
        self._log("After", "get", key, value=value)
    
    def before_set(self, key: str, value: Any) -> None:
        self._log("Before", "set", key, value=value)
    
    def after_set(self, key: str, value: Any) -> None:
        self._log("After", "set", key, value=value)
    
    def before_remove(self, key: str) -> None:
        self._log("Before", "remove", key)
    
    def after_remove(self, key: str) -> None:
        self._log("After", "remove", key)
    
    def before_has(self, key: str) -> None:
        self._log("Before", "has", key)
    
    def after_has(self, key: str, exists: bool) -> None:
        self._log("After", "has", key, result=exists)
    
    def on_error(self, err: BaseException) -> None:
        self.logger.error(f"Operation failed: {type(err).__name__}: {err}")
