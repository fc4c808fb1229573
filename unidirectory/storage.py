"""
Key-value slots used by the local university service.

A slot is addressed by a fixed key and holds one text value (the JSON
collection). Two stores implement the same small interface:

- JsonFileStore: one file per key inside a data directory, survives restarts
- MemoryStore: a plain dict owned by whoever creates it; used when no
  durable storage is available (and in tests)

The default data directory lives inside the package, next to the bundled
seed data, so no absolute paths are hard-coded.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


def default_data_dir() -> Path:
    """
    Return the default directory for persisted local state.

    Using a function instead of a constant makes testing easier,
    because tests can pass their own directory.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "local"


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStore:
    """
    In-process store. Its lifetime is the lifetime of the instance.
    """

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStore:
    """
    File-backed store: <directory>/<key>.json

    Writes go to a temporary file first and are then moved into place,
    so a slot always holds either the old or the new full value.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        self.directory = Path(directory) if directory is not None else default_data_dir()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)

        # First run: file does not exist yet
        if not path.exists():
            return None

        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            # unreadable bytes are handed on as garbage so the caller's
            # parse step treats the slot as corrupt
            logger.warning("Slot %s is not valid UTF-8", path)
            return ""
        logger.debug("Read slot %s (%d chars)", path, len(text))
        return text

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)
        logger.debug("Wrote slot %s (%d chars)", path, len(value))

    def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        logger.debug("Removed slot %s", path)
