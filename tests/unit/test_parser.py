"""Tests for the Parser facade."""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from blockwatch.domain.models import Transaction
from blockwatch.exceptions import ParserAlreadyRunningError, ParserNotRunningError, StorageError
from blockwatch.indexer.engine import PollingEngine
from blockwatch.parser import Parser


class TestPreconditions:
    async def test_subscribe_before_run(self, parser):
        with pytest.raises(ParserNotRunningError):
            parser.subscribe("0xaaa")

    async def test_get_transactions_before_run(self, parser):
        with pytest.raises(ParserNotRunningError):
            parser.get_transactions("0xaaa")

    async def test_current_block_before_run(self, parser):
        assert parser.get_current_block() == 0

    async def test_double_run(self, parser):
        parser.run()
        with pytest.raises(ParserAlreadyRunningError):
            parser.run()

    async def test_operations_after_run(self, parser):
        parser.run()
        assert parser.subscribe("0xaaa") is True
        assert parser.get_transactions("0xaaa") == []

    async def test_not_running_after_stop(self, parser):
        parser.run()
        await parser.stop()
        assert not parser.is_running
        with pytest.raises(ParserNotRunningError):
            parser.subscribe("0xaaa")


class TestSubscribe:
    async def test_idempotent(self, parser, engine):
        parser.run()
        assert parser.subscribe("0xaaa") is True
        assert parser.subscribe("0xaaa") is False
        assert len(engine.subscribers) == 1

    async def test_concurrent_subscribe(self, parser, engine):
        parser.run()
        addresses = [f"0x{i % 50:040x}" for i in range(100)]

        with ThreadPoolExecutor(max_workers=32) as pool:
            results = list(pool.map(parser.subscribe, addresses))

        assert sum(results) == 50
        assert len(engine.subscribers) == 50


class TestGetTransactions:
    async def test_never_seen_address_is_empty(self, parser):
        parser.run()
        assert parser.get_transactions("never-seen") == []

    async def test_storage_error_propagates(self, parser, store):
        parser.run()
        store.set("0xaaa", b"garbage")
        with pytest.raises(StorageError):
            parser.get_transactions("0xaaa")

    async def test_end_to_end(self, parser, gateway):
        parser.run()
        parser.subscribe("0xaaa")
        tx = gateway.add(Transaction(tx_hash="0x1", from_addr="0xbbb", to_addr="0xaaa", block=3))
        gateway.height = 3

        for _ in range(200):
            if parser.get_current_block() == 3:
                break
            await asyncio.sleep(0.01)

        assert parser.get_current_block() == 3
        assert parser.get_transactions("0xaaa") == [tx]
        assert parser.get_transactions("0xbbb") == [tx]

    async def test_current_block_tracks_cursor(self, gateway, repo):
        engine = PollingEngine(gateway, repo)
        parser = Parser(engine, repo)
        gateway.height = 9
        await engine.process_new_blocks()
        assert parser.get_current_block() == 9


class TestAddressCase:
    @pytest.fixture()
    def hex_parser(self, gateway, repo):
        class HexLedgerGateway(type(gateway)):
            def normalize_address(self, address):
                return address.strip().lower()

        hex_gateway = HexLedgerGateway()
        engine = PollingEngine(hex_gateway, repo, poll_interval=0.01)
        return Parser(engine, repo), engine, hex_gateway

    async def test_mixed_case_subscription_is_indexed(self, hex_parser):
        parser, engine, gateway = hex_parser
        parser.run()
        try:
            assert parser.subscribe("0xAbC") is True
            assert parser.subscribe("0xabc") is False
            assert "0xabc" in engine.subscribers

            tx = gateway.add(Transaction(tx_hash="0x1", from_addr="0xbbb", to_addr="0xabc", block=1))
            gateway.height = 1
            for _ in range(200):
                if parser.get_current_block() == 1:
                    break
                await asyncio.sleep(0.01)

            assert parser.get_transactions("0xABC") == [tx]
        finally:
            await parser.stop()

    async def test_opaque_addresses_keep_their_case(self, parser, engine):
        parser.run()
        assert parser.subscribe("AbC") is True
        assert "AbC" in engine.subscribers
        assert "abc" not in engine.subscribers
