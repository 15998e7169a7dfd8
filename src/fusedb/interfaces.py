"""Shared types for drivers, middleware and the engine."""

from dataclasses import dataclass, field
from typing import Any


class _Missing:
    """Marker for an absent key.

    ``None`` is a legitimate stored value (JSON ``null``), so drivers return
    ``MISSING`` instead when a key does not exist.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Missing, ())


MISSING: Any = _Missing()


@dataclass
class ConnectionInfo:
    """What a driver reports after a successful connect.

    Attributes:
        driver: Short driver name (e.g. "memory", "sqlite")
        details: Backend-specific extras such as a file path
    """
    driver: str
    details: dict[str, Any] = field(default_factory=dict)
