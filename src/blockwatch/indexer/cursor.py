import threading


class ChainCursor:
    """Last block height whose relevant transactions are indexed. Never moves backwards."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError(f"Cursor start must be >= 0, got {start}")
        self._height = start
        self._lock = threading.Lock()

    def get(self) -> int:
        with self._lock:
            return self._height

    def advance(self, height: int) -> None:
        with self._lock:
            if height < self._height:
                raise ValueError(f"Cursor cannot move back from {self._height} to {height}")
            self._height = height
