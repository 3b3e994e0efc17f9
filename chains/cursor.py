"""
chains/cursor.py - Incremental block scanning cursor.

Tracks the last fully processed block height:
- advance() proposes the next range without mutating anything
- confirm() moves the cursor forward once blocks are done
- the stored height never decreases
"""

from dataclasses import dataclass

from chains.providers import ChainDataPort
from core.logging import get_logger

logger = get_logger("hawk.cursor")


@dataclass(frozen=True)
class BlockRange:
    """Inclusive range of block heights."""
    start: int
    end: int

    def __iter__(self):
        return iter(range(self.start, self.end + 1))

    def __len__(self) -> int:
        return max(0, self.end - self.start + 1)


class ScanCursor:
    """
    Last processed block height for one chain.

    At-least-once: a range is only confirmed after it was processed, so a
    crash mid-range re-scans those blocks on restart. The pool ledger
    absorbs the duplicates.
    """

    def __init__(
        self,
        provider: ChainDataPort,
        start_height: int | None = None,
        max_blocks_per_cycle: int | None = None,
    ):
        self.provider = provider
        self.max_blocks_per_cycle = max_blocks_per_cycle
        self._height: int | None = start_height

    @property
    def height(self) -> int | None:
        """Last fully processed height (None before initialize)."""
        return self._height

    @property
    def is_initialized(self) -> bool:
        return self._height is not None

    async def initialize(self) -> int:
        """
        Pin the cursor to the current tip unless a start height was given.

        Only blocks produced after startup are scanned.

        Returns:
            Cursor height
        """
        if self._height is None:
            self._height = await self.provider.latest_height()
            logger.info(
                f"Cursor pinned to tip {self._height}",
                extra={"context": {"height": self._height}},
            )
        return self._height

    async def advance(self) -> BlockRange | None:
        """
        Propose the next block range to process.

        Returns:
            BlockRange(cursor + 1, tip), or None when there are no new blocks

        Raises:
            InfraError: If the tip fetch fails (cursor unchanged)
        """
        if self._height is None:
            await self.initialize()
            return None

        tip = await self.provider.latest_height()
        if tip <= self._height:
            return None

        end = tip
        if self.max_blocks_per_cycle:
            end = min(tip, self._height + self.max_blocks_per_cycle)

        return BlockRange(start=self._height + 1, end=end)

    def confirm(self, height: int) -> int:
        """
        Mark every block up to `height` as processed.

        Stale confirmations (below the current height) are ignored.

        Returns:
            Cursor height after the confirmation
        """
        if self._height is None or height > self._height:
            self._height = height
        return self._height

    def get_stats(self) -> dict:
        return {
            "height": self._height,
            "max_blocks_per_cycle": self.max_blocks_per_cycle,
        }
