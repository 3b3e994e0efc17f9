# PATH: execution/trade_hook.py
"""
HAWK trade hooks.

TRADE HOOK CONTRACT:
====================

Interface:
  await hook(event, assessment) -> TradeResult
    - success: bool
    - amount: Decimal (ADA committed, counted as volume on success)
    - detail: str

Guarantees from the pipeline:
  - Called only for SAFE_TO_TRADE assessments
  - Called at most once per pool id (the ledger dedupes upstream)

Hooks report failure through TradeResult; the router still catches
anything they raise, logs it, and never retries.

Building, signing and submitting transactions is not implemented: both
hooks below only simulate.
====================
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Protocol

from core.logging import get_logger
from core.models import PoolEvent, RiskAssessment
from core.time import now_iso

logger = get_logger("hawk.trade")


@dataclass
class TradeResult:
    """Result of a trade hook invocation."""
    success: bool
    amount: Decimal = Decimal("0")
    detail: str = ""
    simulated: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "amount": str(self.amount),
            "detail": self.detail,
            "simulated": self.simulated,
        }


class TradeHook(Protocol):
    async def __call__(self, event: PoolEvent, assessment: RiskAssessment) -> TradeResult: ...


class DryRunTradeHook:
    """Logs the trade that would be made."""

    def __init__(self, base_trade_amount: Decimal):
        self.base_trade_amount = base_trade_amount

    async def __call__(self, event: PoolEvent, assessment: RiskAssessment) -> TradeResult:
        detail = (
            f"Would swap {self.base_trade_amount} ADA for {event.token_a.name} "
            f"on {event.dex.name}"
        )
        logger.info(
            f"DRY RUN: {detail}",
            extra={"context": {
                "pool_id": event.pool_id,
                "pool_address": event.pool_address,
                "risk_score": str(assessment.risk_score),
            }},
        )
        return TradeResult(success=True, amount=self.base_trade_amount, detail=detail)


class PaperTradeHook:
    """
    Simulated execution with JSONL persistence.

    One record per accepted pool in {trades_dir}/paper_trades.jsonl.
    """

    def __init__(self, base_trade_amount: Decimal, trades_dir: Path):
        self.base_trade_amount = base_trade_amount
        self.trades_dir = Path(trades_dir)
        self.trades_file = self.trades_dir / "paper_trades.jsonl"

    async def __call__(self, event: PoolEvent, assessment: RiskAssessment) -> TradeResult:
        record = {
            "timestamp": now_iso(),
            "pool_id": event.pool_id,
            "dex": event.dex.key,
            "pool_address": event.pool_address,
            "tx_hash": event.tx_hash,
            "block_height": event.block_height,
            "token_in": "ADA",
            "token_out": event.token_a.name,
            "token_out_unit": event.token_a.asset_id,
            "amount_in_ada": str(self.base_trade_amount),
            "protocol_fee": str(event.dex.protocol_fee),
            "risk_score": str(assessment.risk_score),
        }

        try:
            self.trades_dir.mkdir(parents=True, exist_ok=True)
            with open(self.trades_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            logger.error(
                f"Failed to record paper trade: {e}",
                extra={"context": {"pool_id": event.pool_id, "path": str(self.trades_file)}},
            )
            return TradeResult(success=False, detail=str(e))

        detail = f"Swapped {self.base_trade_amount} ADA for {event.token_a.name} on {event.dex.name} (simulated)"
        logger.info(detail, extra={"context": {"pool_id": event.pool_id}})
        return TradeResult(success=True, amount=self.base_trade_amount, detail=detail)


def build_trade_hook(dry_run: bool, base_trade_amount: Decimal, trades_dir: Path) -> TradeHook:
    """Select the hook for the configured mode."""
    if dry_run:
        return DryRunTradeHook(base_trade_amount)
    return PaperTradeHook(base_trade_amount, trades_dir)
