# Cart store and local storage

from .storage import LocalStorage, MemoryStorage, FileStorage
from .store import CartStore, CART_STORAGE_KEY, serialize_lines, deserialize_lines

__all__ = [
    "LocalStorage",
    "MemoryStorage",
    "FileStorage",
    "CartStore",
    "CART_STORAGE_KEY",
    "serialize_lines",
    "deserialize_lines",
]
