"""
Scan statistics for HAWK.

ScanStatistics is owned by the pipeline driver and handed to the stages
that produce each event. The reporter task only reads it.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from core.logging import get_logger
from core.time import format_uptime, now_utc

logger = get_logger("hawk.stats")


@dataclass
class ScanStatistics:
    """Process-wide counters. Reset only by restart."""
    blocks_scanned: int = 0
    pools_detected: int = 0
    scams_filtered: int = 0
    trades_executed: int = 0
    trade_failures: int = 0
    analysis_failures: int = 0
    total_volume: Decimal = Decimal("0")
    started_at: datetime = field(default_factory=now_utc)
    last_check: Optional[datetime] = None

    def record_block(self) -> None:
        self.blocks_scanned += 1

    def record_pool_detected(self) -> None:
        self.pools_detected += 1

    def record_filtered(self) -> None:
        self.scams_filtered += 1

    def record_trade(self, amount: Decimal) -> None:
        self.trades_executed += 1
        self.total_volume += amount

    def record_trade_failure(self) -> None:
        self.trade_failures += 1

    def record_analysis_failure(self) -> None:
        self.analysis_failures += 1

    def record_check(self, when: Optional[datetime] = None) -> None:
        self.last_check = when or now_utc()

    def uptime_seconds(self, now: Optional[datetime] = None) -> float:
        return ((now or now_utc()) - self.started_at).total_seconds()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "uptime_seconds": int(self.uptime_seconds()),
            "blocks_scanned": self.blocks_scanned,
            "pools_detected": self.pools_detected,
            "scams_filtered": self.scams_filtered,
            "trades_executed": self.trades_executed,
            "trade_failures": self.trade_failures,
            "analysis_failures": self.analysis_failures,
            "total_volume_ada": str(self.total_volume),
            "started_at": self.started_at.isoformat(),
            "last_check": self.last_check.isoformat() if self.last_check else None,
        }


def format_report(stats: ScanStatistics, now: Optional[datetime] = None) -> str:
    """Human-readable statistics block."""
    last_check = stats.last_check.strftime("%H:%M:%S") if stats.last_check else "Never"
    lines = [
        "HAWK STATISTICS",
        "=" * 28,
        f"Uptime: {format_uptime(stats.uptime_seconds(now))}",
        f"Blocks Scanned: {stats.blocks_scanned}",
        f"Pools Detected: {stats.pools_detected}",
        f"Scams Filtered: {stats.scams_filtered}",
        f"Trades Executed: {stats.trades_executed}",
        f"Analysis Failures: {stats.analysis_failures}",
        f"Total Volume: {stats.total_volume} ADA",
        f"Last Check: {last_check}",
        "=" * 28,
    ]
    return "\n".join(lines)


async def report_periodically(
    stats: ScanStatistics,
    interval_seconds: float,
    stop_event: asyncio.Event,
) -> None:
    """Log a statistics report every interval until stopped."""
    while not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            logger.info(
                "\n" + format_report(stats),
                extra={"context": stats.snapshot()},
            )
