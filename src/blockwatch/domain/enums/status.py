from enum import Enum


class EngineState(str, Enum):
    """Polling engine lifecycle state."""

    STOPPED = "STOPPED"
    RUNNING = "RUNNING"
