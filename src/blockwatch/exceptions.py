"""Error taxonomy shared by the indexer, the store and the ledger gateways."""


class BlockwatchError(Exception):
    """Base class for all blockwatch errors."""


class ExternalServiceError(BlockwatchError):
    """Ledger backend failed: network, timeout, RPC error object or malformed payload."""


class StorageError(BlockwatchError):
    """Transaction store could not read, write or (de)serialize a ledger."""


class KeyNotFoundError(StorageError):
    """Key is absent from the key/value store."""


class BatchIndexError(StorageError):
    """Some address groups of a batch could not be written.

    ``failures`` maps each failed address to its error, ``indexed`` maps each
    address whose append went through to the hashes written for it.
    """

    def __init__(self, failures: dict[str, Exception], indexed: dict[str, set[str]]) -> None:
        self.failures = failures
        self.indexed = indexed
        addresses = ", ".join(sorted(failures))
        super().__init__(f"Failed to index transactions for {len(failures)} address(es): {addresses}")


class ParserNotRunningError(BlockwatchError):
    """Operation requires a running parser."""


class ParserAlreadyRunningError(BlockwatchError):
    """Parser was started twice."""
