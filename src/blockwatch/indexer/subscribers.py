import threading


class AddressSet:
    """Thread-safe set of watched addresses. Addresses are never removed."""

    def __init__(self) -> None:
        self._addresses: set[str] = set()
        self._lock = threading.Lock()

    def add(self, address: str) -> bool:
        """Add an address. Returns False (and changes nothing) if it was already watched."""
        with self._lock:
            if address in self._addresses:
                return False
            self._addresses.add(address)
            return True

    def snapshot(self) -> frozenset[str]:
        """Point-in-time copy, safe to iterate while other callers keep adding."""
        with self._lock:
            return frozenset(self._addresses)

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._addresses

    def __len__(self) -> int:
        with self._lock:
            return len(self._addresses)
