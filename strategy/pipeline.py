"""
strategy/pipeline.py - Scan loop driver.

Flow per cycle:
  cursor.advance() -> for each block: tx hashes -> outputs -> matcher
  -> ledger.observe() -> (FIRST) engine.assess() -> router.route()
  -> cursor.confirm(block)

Blocks are processed in order; transactions inside a block fan out
under a semaphore. A failed block stops the cycle after confirming
every block before it, so the next cycle resumes at the failed block.
"""

import asyncio
from decimal import Decimal
from typing import Optional

from chains.cursor import BlockRange, ScanCursor
from chains.providers import ChainDataPort
from core.constants import DEFAULT_MAX_CONCURRENCY, Observation
from core.exceptions import BlockScanError, HawkError
from core.logging import get_logger, log_pool_event
from core.models import PoolEvent, RiskAssessment
from discovery.ledger import PoolLedger
from discovery.matcher import PoolMatcher
from monitoring.stats import ScanStatistics
from strategy.decision import DecisionRouter
from strategy.scoring import RiskScoringEngine

logger = get_logger("hawk.pipeline")


class PoolScanner:
    """Owns the pipeline stages and the statistics they update."""

    def __init__(
        self,
        provider: ChainDataPort,
        cursor: ScanCursor,
        matcher: PoolMatcher,
        ledger: PoolLedger,
        engine: RiskScoringEngine,
        router: DecisionRouter,
        stats: ScanStatistics,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        scan_interval_ms: int = 10000,
        error_backoff_ms: int = 5000,
    ):
        self.provider = provider
        self.cursor = cursor
        self.matcher = matcher
        self.ledger = ledger
        self.engine = engine
        self.router = router
        self.stats = stats
        self.max_concurrency = max(1, max_concurrency)
        self.scan_interval_ms = scan_interval_ms
        self.error_backoff_ms = error_backoff_ms
        self.tx_failures = 0

    async def run_cycle(self) -> Optional[BlockRange]:
        """
        Process every block between the cursor and the tip.

        Returns:
            The processed range, or None if there were no new blocks

        Raises:
            InfraError: tip fetch failed (nothing processed)
            BlockScanError: a block failed; earlier blocks are confirmed
        """
        block_range = await self.cursor.advance()
        if block_range is None:
            self.stats.record_check()
            return None

        logger.debug(
            f"Scanning blocks {block_range.start}-{block_range.end}",
            extra={"context": {"start": block_range.start, "end": block_range.end}},
        )

        for height in block_range:
            try:
                await self.scan_block(height)
            except HawkError as e:
                raise BlockScanError(
                    f"Failed to scan block {height}: {e}",
                    height=height,
                    details={"confirmed": self.cursor.height},
                ) from e
            self.cursor.confirm(height)
            self.stats.record_block()

        self.stats.record_check()
        return block_range

    async def scan_block(self, height: int) -> int:
        """
        Process all transactions of one block.

        Returns:
            Number of pools first seen in this block
        """
        tx_hashes = await self.provider.transactions_in_block(height)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(tx_hash: str) -> Optional[RiskAssessment]:
            async with semaphore:
                try:
                    return await self.process_transaction(tx_hash, height)
                except Exception as e:
                    self.tx_failures += 1
                    logger.warning(
                        f"Transaction skipped: {e}",
                        extra={"context": {"tx_hash": tx_hash, "block_height": height}},
                        exc_info=not isinstance(e, HawkError),
                    )
                    return None

        results = await asyncio.gather(*(bounded(tx_hash) for tx_hash in tx_hashes))
        return sum(1 for r in results if r is not None)

    async def process_transaction(self, tx_hash: str, height: int) -> Optional[RiskAssessment]:
        """
        Run one transaction through the pipeline.

        Returns:
            The assessment for a newly seen pool, otherwise None
        """
        outputs = await self.provider.transaction_outputs(tx_hash)
        event = await self.matcher.match(tx_hash, height, outputs)
        if event is None:
            return None

        if await self.ledger.observe(event.pool_id) == Observation.DUPLICATE:
            logger.debug("Pool already seen", extra={"context": {"pool_id": event.pool_id}})
            return None

        return await self.handle_new_pool(event)

    async def handle_new_pool(self, event: PoolEvent) -> RiskAssessment:
        self.stats.record_pool_detected()
        log_pool_event(
            logger,
            pool_id=event.pool_id,
            dex=event.dex.name,
            tx_hash=event.tx_hash,
            block_height=event.block_height,
            liquidity=str(event.liquidity),
            token_a=event.token_a.name,
            token_b=event.token_b.name,
        )

        assessment = await self.engine.assess(event)
        await self.router.route(event, assessment)
        return assessment

    async def run(self, stop_event: asyncio.Event) -> None:
        """Scan until stop_event is set."""
        logger.info(
            "Scan loop started",
            extra={"context": {
                "interval_ms": self.scan_interval_ms,
                "max_concurrency": self.max_concurrency,
            }},
        )

        while not stop_event.is_set():
            delay_ms = self.scan_interval_ms
            try:
                await self.run_cycle()
            except HawkError as e:
                delay_ms = self.error_backoff_ms
                logger.error(
                    f"Scan cycle failed: {e}",
                    extra={"context": {
                        "error_code": e.code.value,
                        "cursor_height": self.cursor.height,
                        **e.details,
                    }},
                )
            except Exception as e:
                # Malformed provider payloads land here; keep scanning
                delay_ms = self.error_backoff_ms
                logger.error(
                    f"Scan cycle failed unexpectedly: {e}",
                    extra={"context": {"cursor_height": self.cursor.height}},
                    exc_info=True,
                )

            await wait_or_stop(stop_event, Decimal(delay_ms) / 1000)

        logger.info("Scan loop terminated", extra={"context": {"cursor_height": self.cursor.height}})


async def wait_or_stop(stop_event: asyncio.Event, seconds: Decimal | float) -> None:
    """Sleep for `seconds`, returning early if stop_event is set."""
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=float(seconds))
    except asyncio.TimeoutError:
        pass
