"""
strategy/decision.py - Accept/reject policy for scored pools.

decide() is a pure threshold comparison (inclusive accept boundary).
DecisionRouter applies the outcome: trade hook + counters.
"""

from decimal import Decimal
from typing import Optional, Union

from core.constants import ErrorCode, Recommendation
from core.logging import get_logger, log_error
from core.math import safe_decimal
from core.models import PoolEvent, RiskAssessment
from execution.trade_hook import TradeHook, TradeResult
from monitoring.stats import ScanStatistics

logger = get_logger("hawk.decision")

Number = Union[Decimal, int, float, str]


def decide(score: Number, threshold: Number) -> Recommendation:
    """
    Accept when score <= threshold.

    Floats are converted through str() so decide(0.3, 0.3) is exact.
    """
    if safe_decimal(score) <= safe_decimal(threshold):
        return Recommendation.SAFE_TO_TRADE
    return Recommendation.TOO_RISKY


class DecisionRouter:
    """Routes an assessed pool to the trade hook or the filtered counter."""

    def __init__(self, trade_hook: TradeHook, stats: ScanStatistics):
        self.trade_hook = trade_hook
        self.stats = stats

    async def route(self, event: PoolEvent, assessment: RiskAssessment) -> Optional[TradeResult]:
        """
        Apply the assessment's recommendation.

        Returns:
            TradeResult when the hook ran, otherwise None
        """
        recommendation = assessment.recommendation

        if recommendation == Recommendation.SAFE_TO_TRADE:
            result = await self._execute(event, assessment)
            if result.success:
                self.stats.record_trade(result.amount)
            else:
                self.stats.record_trade_failure()
            return result

        if recommendation == Recommendation.TOO_RISKY:
            self.stats.record_filtered()
            logger.info(
                f"Pool too risky (risk score {assessment.risk_score})",
                extra={"context": {"pool_id": event.pool_id}},
            )
            return None

        self.stats.record_analysis_failure()
        log_error(
            logger,
            ErrorCode.ANALYSIS_FAILED.value,
            f"Pool needs manual review: {event.pool_id}",
            pool_id=event.pool_id,
            tx_hash=event.tx_hash,
            error=assessment.error,
        )
        return None

    async def _execute(self, event: PoolEvent, assessment: RiskAssessment) -> TradeResult:
        try:
            result = await self.trade_hook(event, assessment)
        except Exception as e:
            logger.error(
                f"Trade hook failed: {e}",
                extra={"context": {"pool_id": event.pool_id}},
                exc_info=True,
            )
            return TradeResult(success=False, detail=str(e))

        if not result.success:
            logger.warning(
                f"Trade not executed: {result.detail}",
                extra={"context": {"pool_id": event.pool_id}},
            )
        return result
