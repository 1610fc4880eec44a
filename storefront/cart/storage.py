"""
Local durable storage

Key/value string storage that outlives a session, used to mirror the cart.
``FileStorage`` keeps every key in one JSON file, the way a browser keeps
localStorage per origin.
"""

import json
import os
from abc import ABC, abstractmethod
from typing import Optional

from ..exceptions import StorageError


class LocalStorage(ABC):
    """Minimal localStorage-style interface"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage(LocalStorage):
    """In-memory storage, mainly for tests and headless sessions"""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileStorage(LocalStorage):
    """JSON file backed storage"""

    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Unexpected storage layout in {self.path}")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        tmp_path = f"{self.path}.tmp"
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageError:
            # An unreadable file is replaced rather than blocking every write
            data = {}
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)
