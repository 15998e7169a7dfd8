"""Document-file drivers (JSON, YAML, TOML and CSV).

The whole store is one mapping serialized to one file. Reads are served
from memory; with ``autosave`` every mutation rewrites the file, otherwise
call ``save()`` (``disconnect`` saves too).
"""

import csv
import io
import json
import logging
import os
import tempfile
import tomllib
from abc import abstractmethod
from pathlib import Path
from typing import Any, Optional

import tomli_w
import yaml

from .base import Driver
from ..config.drivers import DriverConfig, DriverType
from ..errors import DriverConnectionError, DriverOperationError
from ..interfaces import ConnectionInfo, MISSING
from ..utils import dumps_snapshot, loads_snapshot

logger = logging.getLogger(__name__)


class FileDriver(Driver[DriverConfig]):
    """Base for drivers that keep the store in a single document file.

    Subclasses provide ``_load`` and ``_dump`` for their format.
    """

    driver_type: DriverType

    def __init__(self, config: DriverConfig):
        super().__init__(config)
        if not config.path:
            raise ValueError(f"{type(self).__name__} requires a path")
        self.path = Path(config.path).expanduser().resolve()
        self._data: dict[str, Any] = {}

    @classmethod
    def from_path(cls, path: str | Path, autosave: bool = True, indent: Optional[int] = 2):
        """Build a driver without spelling out a ``DriverConfig``."""
        return cls(DriverConfig(type=cls.driver_type, path=str(path), autosave=autosave, indent=indent))

    @abstractmethod
    def _load(self, text: str) -> Any:
        pass

    @abstractmethod
    def _dump(self, data: dict[str, Any]) -> str:
        pass

    def _validate(self, key: str, value: Any) -> None:
        """Reject values the format cannot represent, before the store changes."""

    async def connect(self) -> ConnectionInfo:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.path.exists():
                text = self.path.read_text(encoding="utf-8")
                data = self._load(text) if text.strip() else {}
            else:
                data = {}
        except (OSError, ValueError, TypeError, yaml.YAMLError, csv.Error) as e:
            raise DriverConnectionError(f"Failed to load {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise DriverConnectionError(
                f"{self.path} does not contain a mapping (found {type(data).__name__})"
            )

        self._data = data
        self._connected = True
        if not self.path.exists():
            self.save()
        logger.debug(f"Loaded {len(self._data)} entries from {self.path}")
        return ConnectionInfo(driver=self.name, details={"path": str(self.path)})

    async def disconnect(self) -> None:
        if not self._connected:
            return
        self.save()
        self._connected = False

    def save(self) -> None:
        """Write the store atomically (temp file + rename)."""
        self._ensure_connected()
        text = self._dump_checked()
        try:
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, self.path)
        except OSError as e:
            raise DriverOperationError(f"Failed to write {self.path}: {e}") from e

    def _dump_checked(self) -> str:
        try:
            return self._dump(self._data)
        except (TypeError, ValueError) as e:
            raise DriverOperationError(f"Cannot serialize store to {self.name}: {e}") from e

    def _auto(self) -> None:
        if self.config.autosave:
            self.save()

    async def get(self, key: str) -> Any:
        self._ensure_connected()
        return self._data.get(key, MISSING)

    async def set(self, key: str, value: Any) -> None:
        self._ensure_connected()
        self._validate(key, value)
        self._data[key] = value
        self._auto()

    async def remove(self, key: str) -> None:
        self._ensure_connected()
        if self._data.pop(key, MISSING) is not MISSING:
            self._auto()

    async def has(self, key: str) -> bool:
        self._ensure_connected()
        return key in self._data

    async def size(self) -> int:
        self._ensure_connected()
        return len(self._data)

    async def keys(self) -> list[str]:
        self._ensure_connected()
        return list(self._data)

    async def values(self) -> list[Any]:
        self._ensure_connected()
        return list(self._data.values())

    async def clear(self) -> None:
        self._ensure_connected()
        self._data = {}
        self._auto()

    async def bulk_set(self, entries: dict[str, Any]) -> None:
        self._ensure_connected()
        for key, value in entries.items():
            self._validate(key, value)
        self._data.update(entries)
        self._auto()

    async def bulk_remove(self, keys: list[str]) -> None:
        self._ensure_connected()
        for key in keys:
            self._data.pop(key, None)
        self._auto()


class JSONFileDriver(FileDriver):
    """Store entries in a JSON document.

    The native snapshot is the compact JSON form of the store.
    """

    name = "json"
    driver_type = DriverType.JSON

    def _load(self, text: str) -> Any:
        return json.loads(text)

    def _dump(self, data: dict[str, Any]) -> str:
        return json.dumps(data, indent=self.config.indent, ensure_ascii=False)

    async def export_snapshot(self) -> str:
        self._ensure_connected()
        return dumps_snapshot(self._data)

    async def import_snapshot(self, blob: str | bytes) -> None:
        self._ensure_connected()
        self._data = loads_snapshot(blob)
        self._auto()


class YAMLFileDriver(FileDriver):
    """Store entries in a YAML document (safe subset only)."""

    name = "yaml"
    driver_type = DriverType.YAML

    def _load(self, text: str) -> Any:
        return yaml.safe_load(text)

    def _dump(self, data: dict[str, Any]) -> str:
        return yaml.safe_dump(
            data,
            indent=self.config.indent or 2,
            sort_keys=False,
            allow_unicode=True,
        )


def _find_null(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, dict):
        return any(_find_null(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(_find_null(v) for v in value)
    return False


class TOMLFileDriver(FileDriver):
    """Store entries as top-level TOML keys.

    TOML has no null, so ``None`` (at any depth) is rejected with
    ``DriverOperationError`` on write. Nested mappings become tables.
    """

    name = "toml"
    driver_type = DriverType.TOML

    def _load(self, text: str) -> Any:
        return tomllib.loads(text)

    def _dump(self, data: dict[str, Any]) -> str:
        return tomli_w.dumps(data)

    def _validate(self, key: str, value: Any) -> None:
        if _find_null(value):
            raise DriverOperationError(f"TOML cannot store null (key {key!r})")


class CSVFileDriver(FileDriver):
    """Store entries as ``key,value`` rows with a header.

    Values are JSON-encoded in the ``value`` column, so structured values
    and null survive a reload.
    """

    name = "csv"
    driver_type = DriverType.CSV

    FIELDS = ("key", "value")

    def _load(self, text: str) -> Any:
        reader = csv.DictReader(io.StringIO(text))
        if tuple(reader.fieldnames or ()) != self.FIELDS:
            raise ValueError(f"expected header {','.join(self.FIELDS)}, got {reader.fieldnames}")
        return {row["key"]: json.loads(row["value"]) for row in reader}

    def _dump(self, data: dict[str, Any]) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(self.FIELDS)
        for key, value in data.items():
            writer.writerow((key, json.dumps(value, ensure_ascii=False)))
        return buf.getvalue()
