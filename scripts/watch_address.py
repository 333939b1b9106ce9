"""Watch one address and print what the parser indexes for it.

Usage:
    PYTHONPATH=src python scripts/watch_address.py 0x1234567890abcdef1234567890abcdef12345678

Reads the ledger backend settings from the environment (BLOCKWATCH_*), starts the
parser, subscribes the address and prints its ledger every poll interval until
interrupted.
"""

import asyncio
import logging
import sys

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
logger = logging.getLogger("watch_address")
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


async def main(address: str) -> None:
    from blockwatch.container import Container

    container = Container()
    settings = container.settings()
    parser = container.parser()

    parser.run()
    parser.subscribe(address)
    logger.info("Subscribed to %s via %s (%s)", address, settings.rpc_url, settings.ledger_backend)

    try:
        while True:
            await asyncio.sleep(settings.poll_interval)
            txs = parser.get_transactions(address)
            logger.info("Block %d: %d transaction(s) for %s", parser.get_current_block(), len(txs), address)
            for tx in txs:
                print(f"  #{tx.block} {tx.tx_hash} {tx.from_addr} -> {tx.to_addr} value={tx.value} fee={tx.fee}")
    finally:
        await parser.stop()
        await container.http_client().close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    try:
        asyncio.run(main(sys.argv[1]))
    except KeyboardInterrupt:
        pass
