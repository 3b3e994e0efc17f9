"""
tests/unit/test_pipeline.py - Scan loop driver tests (in-memory chain).
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from chains.cursor import ScanCursor
from conftest import ASSET_A, ASSET_B, POLICY_A, POLICY_B, FakeChain
from core.exceptions import BlockScanError
from core.models import generate_pool_id
from discovery.ledger import PoolLedger
from discovery.matcher import PoolMatcher
from discovery.tokens import TokenResolver
from execution.trade_hook import TradeResult
from monitoring.stats import ScanStatistics
from strategy.decision import DecisionRouter
from strategy.pipeline import PoolScanner
from strategy.scoring import RiskScoringEngine

POOL_LOVELACE = 15_000_000_000  # 15000 ADA


def build(chain, registry, start_height=10, max_concurrency=4, hook=None, **kwargs):
    stats = ScanStatistics()
    hook = hook or AsyncMock(return_value=TradeResult(success=True, amount=Decimal("5")))
    return PoolScanner(
        provider=chain,
        cursor=ScanCursor(chain, start_height=start_height),
        matcher=PoolMatcher(registry, TokenResolver(chain), Decimal("1000")),
        ledger=PoolLedger(),
        engine=RiskScoringEngine(chain, Decimal("0.3")),
        router=DecisionRouter(hook, stats),
        stats=stats,
        max_concurrency=max_concurrency,
        **kwargs,
    )


@pytest.fixture
def chain():
    chain = FakeChain(tip=12)
    chain.add_token(ASSET_A, "Hawk Token", "HAWK", minted_at=1)
    chain.add_token(ASSET_B, "Second Token", "SEC", minted_at=1)
    return chain


class TestRunCycle:

    @pytest.mark.asyncio
    async def test_new_pool_detected_scored_and_traded(self, chain, registry):
        chain.add_pool_tx(11, "tx_pool", POOL_LOVELACE, [(ASSET_A, 2_000_000), (ASSET_B, 1_000_000)])
        hook = AsyncMock(return_value=TradeResult(success=True, amount=Decimal("5")))
        scanner = build(chain, registry, hook=hook)

        block_range = await scanner.run_cycle()

        assert (block_range.start, block_range.end) == (11, 12)
        assert scanner.cursor.height == 12
        assert scanner.stats.blocks_scanned == 2
        assert scanner.stats.pools_detected == 1
        assert scanner.stats.trades_executed == 1
        assert scanner.stats.last_check is not None

        event, assessment = hook.await_args.args
        assert event.pool_id == generate_pool_id("minswap", POLICY_A, POLICY_B)
        assert event.block_height == 11
        assert assessment.risk_score == Decimal("0")

    @pytest.mark.asyncio
    async def test_same_pool_twice_scored_once(self, chain, registry):
        chain.add_pool_tx(11, "tx_first", POOL_LOVELACE, [(ASSET_A, 2_000_000), (ASSET_B, 1_000_000)])
        # Re-fetched data with the token slots swapped
        chain.add_pool_tx(12, "tx_again", POOL_LOVELACE, [(ASSET_B, 1_000_000), (ASSET_A, 2_000_000)])
        scanner = build(chain, registry)
        scanner.engine.assess = AsyncMock(wraps=scanner.engine.assess)

        await scanner.run_cycle()

        assert scanner.stats.pools_detected == 1
        assert scanner.engine.assess.await_count == 1
        assert len(scanner.ledger) == 1

    @pytest.mark.asyncio
    async def test_no_new_blocks(self, chain, registry):
        scanner = build(chain, registry, start_height=12)

        assert await scanner.run_cycle() is None
        assert scanner.cursor.height == 12
        assert scanner.stats.last_check is not None

    @pytest.mark.asyncio
    async def test_block_failure_confirms_earlier_blocks(self, chain, registry):
        chain.tip = 13
        chain.failing_blocks.add(12)
        scanner = build(chain, registry)

        with pytest.raises(BlockScanError) as exc_info:
            await scanner.run_cycle()

        assert exc_info.value.height == 12
        assert scanner.cursor.height == 11
        assert scanner.stats.blocks_scanned == 1

        chain.failing_blocks.clear()
        block_range = await scanner.run_cycle()

        assert block_range.start == 12
        assert scanner.cursor.height == 13

    @pytest.mark.asyncio
    async def test_transaction_failure_is_contained(self, chain, registry):
        chain.blocks[11] = ["tx_broken"]
        chain.failing_txs.add("tx_broken")
        chain.add_pool_tx(11, "tx_pool", POOL_LOVELACE, [(ASSET_A, 2_000_000), (ASSET_B, 1_000_000)])
        scanner = build(chain, registry)

        await scanner.run_cycle()

        assert scanner.tx_failures == 1
        assert scanner.stats.pools_detected == 1
        assert scanner.cursor.height == 12

    @pytest.mark.asyncio
    async def test_small_pool_skips_lookups(self, chain, registry):
        chain.add_pool_tx(11, "tx_small", 500_000_000, [(ASSET_A, 2_000_000), (ASSET_B, 1_000_000)])
        scanner = build(chain, registry)

        await scanner.run_cycle()

        assert scanner.stats.pools_detected == 0
        assert "asset" not in chain.calls
        assert len(scanner.ledger) == 0

    @pytest.mark.asyncio
    async def test_unresolvable_token_still_assessed(self, chain, registry):
        chain.failing_assets.add(ASSET_B)
        chain.add_pool_tx(11, "tx_pool", POOL_LOVELACE, [(ASSET_A, 2_000_000), (ASSET_B, 1_000_000)])
        hook = AsyncMock(return_value=TradeResult(success=True, amount=Decimal("5")))
        scanner = build(chain, registry, hook=hook)

        await scanner.run_cycle()

        assert scanner.stats.pools_detected == 1
        assert scanner.stats.analysis_failures == 0
        # Metadata penalty alone is under the threshold
        event, assessment = hook.await_args.args
        assert event.token_b.name == "Unknown Token"
        assert event.pool_id == generate_pool_id("minswap", POLICY_A, POLICY_B)
        assert "UNK has no proper metadata" in assessment.reasons


class SlowChain(FakeChain):
    """Tracks how many output fetches run at once."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.in_flight = 0
        self.max_in_flight = 0

    async def transaction_outputs(self, tx_hash):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        return await super().transaction_outputs(tx_hash)


class MalformedTipChain(FakeChain):
    """Returns a tip payload without a height for the first few calls."""

    def __init__(self, *args, bad_tips: int = 1, **kwargs):
        super().__init__(*args, **kwargs)
        self.bad_tips = bad_tips

    async def latest_block(self):
        if self.bad_tips:
            self.bad_tips -= 1
            raise KeyError("height")
        return await super().latest_block()


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_fan_out_is_bounded(self, registry):
        chain = SlowChain(tip=11)
        chain.blocks[11] = [f"tx{i}" for i in range(8)]
        scanner = build(chain, registry, max_concurrency=2)

        await scanner.run_cycle()

        assert chain.max_in_flight == 2
        assert chain.calls["transaction_outputs"] == 8


class TestRunLoop:

    @pytest.mark.asyncio
    async def test_stops_when_event_set(self, chain, registry):
        scanner = build(chain, registry, scan_interval_ms=10, error_backoff_ms=10)
        stop_event = asyncio.Event()

        task = asyncio.create_task(scanner.run(stop_event))
        while scanner.cursor.height != 12:
            await asyncio.sleep(0.005)
        stop_event.set()
        await asyncio.wait_for(task, timeout=1)

        assert task.done()
        assert scanner.stats.blocks_scanned == 2

    @pytest.mark.asyncio
    async def test_backs_off_and_recovers(self, chain, registry):
        chain.failing_blocks.add(11)
        scanner = build(chain, registry, scan_interval_ms=10, error_backoff_ms=10)
        stop_event = asyncio.Event()

        task = asyncio.create_task(scanner.run(stop_event))
        while chain.calls.get("transactions_in_block", 0) < 2:
            await asyncio.sleep(0.005)
        assert scanner.cursor.height == 10

        chain.failing_blocks.clear()
        while scanner.cursor.height != 12:
            await asyncio.sleep(0.005)
        stop_event.set()
        await asyncio.wait_for(task, timeout=1)

        assert scanner.stats.blocks_scanned == 2

    @pytest.mark.asyncio
    async def test_malformed_tip_backs_off_instead_of_exiting(self, registry):
        broken = MalformedTipChain(tip=12, bad_tips=2)
        scanner = build(broken, registry, scan_interval_ms=10, error_backoff_ms=10)
        stop_event = asyncio.Event()

        task = asyncio.create_task(scanner.run(stop_event))
        while scanner.cursor.height != 12:
            assert not task.done()
            await asyncio.sleep(0.005)
        stop_event.set()
        await asyncio.wait_for(task, timeout=1)

        assert broken.bad_tips == 0
        assert scanner.stats.blocks_scanned == 2
