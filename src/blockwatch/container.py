from dependency_injector import containers, providers

from blockwatch.config import Settings
from blockwatch.db.keyvalue import MemoryKeyValueStore
from blockwatch.db.repos.transaction_repo import TransactionRepo
from blockwatch.indexer.cursor import ChainCursor
from blockwatch.indexer.engine import PollingEngine
from blockwatch.indexer.subscribers import AddressSet
from blockwatch.infra.blockchain.evm.gateway import EthereumGateway
from blockwatch.infra.blockchain.jsonrpc_client import JsonRpcClient
from blockwatch.infra.blockchain.node.gateway import NodeGateway
from blockwatch.infra.http.rate_limited_client import RateLimitedClient
from blockwatch.parser import Parser


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["blockwatch.api.deps"])

    settings = providers.Singleton(Settings)

    http_client = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.rpc_rate_per_second,
        timeout=settings.provided.rpc_timeout,
        headers=settings.provided.rpc_headers,
    )

    rpc_client = providers.Singleton(
        JsonRpcClient,
        endpoint=settings.provided.rpc_url,
        http_client=http_client,
    )

    gateway = providers.Selector(
        settings.provided.ledger_backend,
        ethereum=providers.Singleton(EthereumGateway, rpc=rpc_client),
        node=providers.Singleton(NodeGateway, rpc=rpc_client),
    )

    kv_store = providers.Singleton(MemoryKeyValueStore)

    transaction_repo = providers.Singleton(TransactionRepo, store=kv_store)

    engine = providers.Singleton(
        PollingEngine,
        gateway=gateway,
        repo=transaction_repo,
        subscribers=providers.Singleton(AddressSet),
        cursor=providers.Singleton(ChainCursor, start=settings.provided.start_block),
        poll_interval=settings.provided.poll_interval,
        call_timeout=settings.provided.rpc_timeout,
        max_blocks_per_tick=settings.provided.max_blocks_per_tick,
    )

    parser = providers.Singleton(Parser, engine=engine, repo=transaction_repo)
