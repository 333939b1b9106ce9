"""In-process key/value byte store backing the transaction index."""

import threading

from blockwatch.exceptions import KeyNotFoundError, StorageError


class MemoryKeyValueStore:
    """Thread-safe dict of ``str -> bytes``. Lives for the process lifetime only."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes:
        with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise KeyNotFoundError(f"Key not found: {key}") from None

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise StorageError(f"Value for key {key} must be bytes, got {type(value).__name__}")
        with self._lock:
            self._data[key] = value

