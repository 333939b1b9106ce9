from blockwatch.domain.enums.status import EngineState

__all__ = [
    "EngineState",
]
