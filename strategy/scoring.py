"""
strategy/scoring.py - Pool risk scoring.

Four independent checks, each returning a CheckResult:
  1. token_policy  - policy script type and mint/burn count
  2. liquidity     - locked ADA and token quantity ratio
  3. minting       - blocks between first mint and pool creation
  4. metadata      - suspicious names, missing metadata

The aggregate score is the plain sum of contributions (no weights, no
normalization); reasons are concatenated in check order.

Lookup failures (provider errors, malformed payloads) are absorbed inside
the check as a flat penalty and flagged soft_failure. Anything else aborts
the assessment with ERROR_ANALYSIS_FAILED and the partial result.
"""

from decimal import Decimal
from typing import Awaitable, Callable

from chains.providers import ChainDataPort
from core.constants import (
    EXTREME_RATIO,
    GOOD_LIQUIDITY_ADA,
    HIGH_RATIO,
    LOW_LIQUIDITY_ADA,
    MANY_MINTS_THRESHOLD,
    PolicyType,
    RECENT_MINT_BLOCKS,
    RISK_EXTREME_RATIO,
    RISK_HIGH_RATIO,
    RISK_LOW_LIQUIDITY,
    RISK_MANY_MINTS,
    RISK_MINT_UNVERIFIED,
    RISK_MISSING_METADATA,
    RISK_PLUTUS_POLICY,
    RISK_POLICY_UNVERIFIED,
    RISK_RECENT_MINT,
    RISK_SUSPICIOUS_NAME,
    Recommendation,
    SUSPICIOUS_NAME_WORDS,
    UNKNOWN_TOKEN_NAME,
)
from core.exceptions import InfraError
from core.logging import get_logger, log_assessment
from core.math import quantity_ratio, safe_decimal
from core.models import CheckResult, PoolEvent, RiskAssessment, TokenInfo
from strategy.decision import decide

logger = get_logger("hawk.scoring")

# Failures a check absorbs as a flat penalty
SOFT_FAILURES = (InfraError, AttributeError, KeyError, TypeError, ValueError)

Check = Callable[[PoolEvent], Awaitable[CheckResult]]


def has_suspicious_name(name: str) -> bool:
    lowered = (name or "").lower()
    return any(word in lowered for word in SUSPICIOUS_NAME_WORDS)


def has_proper_metadata(token: TokenInfo) -> bool:
    return bool(token.name) and token.name != UNKNOWN_TOKEN_NAME


class RiskScoringEngine:
    """Runs the heuristic checks against a PoolEvent."""

    def __init__(self, provider: ChainDataPort, max_risk_threshold: Decimal):
        self.provider = provider
        self.max_risk_threshold = safe_decimal(max_risk_threshold)
        self.checks: list[tuple[str, Check]] = [
            ("token_policy", self.check_token_policies),
            ("liquidity", self.check_liquidity),
            ("minting", self.check_minting),
            ("metadata", self.check_metadata),
        ]

    async def assess(self, event: PoolEvent) -> RiskAssessment:
        """
        Score a pool.

        Returns:
            RiskAssessment with recommendation set. Never raises.
        """
        assessment = RiskAssessment()
        current = ""

        try:
            for current, check in self.checks:
                assessment.absorb(await check(event))
        except Exception as e:
            assessment.recommendation = Recommendation.ERROR_ANALYSIS_FAILED
            assessment.error = f"{current}: {e}"
            logger.error(
                f"Analysis failed for {event.pool_id}: {e}",
                extra={"context": {
                    "pool_id": event.pool_id,
                    "tx_hash": event.tx_hash,
                    "check": current,
                    "partial_score": str(assessment.risk_score),
                }},
                exc_info=True,
            )
            return assessment

        assessment.recommendation = decide(assessment.risk_score, self.max_risk_threshold)

        log_assessment(
            logger,
            pool_id=event.pool_id,
            risk_score=str(assessment.risk_score),
            recommendation=assessment.recommendation.value,
            reasons=assessment.reasons,
            threshold=str(self.max_risk_threshold),
        )
        return assessment

    # =========================================================================
    # CHECKS
    # =========================================================================

    async def check_token_policies(self, event: PoolEvent) -> CheckResult:
        check = CheckResult(name="token_policy")

        try:
            for token in event.tokens:
                if token.is_native:
                    continue

                script = await self.provider.policy_script(token.policy_id)
                policy_type = PolicyType.parse(script.get("type"))

                if policy_type == PolicyType.TIMELOCK:
                    check.note(f"{token.name} has timelock policy (safer)")
                elif policy_type.is_plutus:
                    check.add(RISK_PLUTUS_POLICY, f"{token.name} uses Plutus script (check carefully)")

                if token.minting_txs > MANY_MINTS_THRESHOLD:
                    check.add(
                        RISK_MANY_MINTS,
                        f"{token.name} has many minting transactions ({token.minting_txs})",
                    )
        except SOFT_FAILURES as e:
            logger.debug(f"Policy lookup failed: {e}", extra={"context": {"pool_id": event.pool_id}})
            check.add(RISK_POLICY_UNVERIFIED, "Could not verify token policies")
            check.soft_failure = True

        return check

    async def check_liquidity(self, event: PoolEvent) -> CheckResult:
        check = CheckResult(name="liquidity")

        if event.liquidity < LOW_LIQUIDITY_ADA:
            check.add(RISK_LOW_LIQUIDITY, f"Low liquidity: {event.liquidity} ADA")
        elif event.liquidity > GOOD_LIQUIDITY_ADA:
            check.note(f"Good liquidity: {event.liquidity} ADA")
        else:
            check.note(f"Moderate liquidity: {event.liquidity} ADA")

        # Raw quantities, not value-adjusted; a zero side is unbounded
        ratio = quantity_ratio(event.amount_a, event.amount_b)
        if ratio is None or ratio > EXTREME_RATIO:
            check.add(RISK_EXTREME_RATIO, "Extreme token ratio detected (possible scam)")
        elif ratio > HIGH_RATIO:
            check.add(RISK_HIGH_RATIO, "High token ratio (check carefully)")
        else:
            check.note("Token ratio looks normal")

        return check

    async def check_minting(self, event: PoolEvent) -> CheckResult:
        check = CheckResult(name="minting")

        try:
            for token in event.tokens:
                if token.is_native:
                    continue

                history = await self.provider.asset_mint_history(token.asset_id)
                if not history:
                    continue

                first_mint = await self.provider.transaction(history[0]["tx_hash"])
                blocks_since_mint = event.block_height - first_mint.block_height

                if blocks_since_mint < RECENT_MINT_BLOCKS:
                    check.add(
                        RISK_RECENT_MINT,
                        f"{token.name} was minted very recently ({blocks_since_mint} blocks ago)",
                    )
                else:
                    check.note(f"{token.name} has been around for {blocks_since_mint} blocks")
        except SOFT_FAILURES as e:
            logger.debug(f"Mint history lookup failed: {e}", extra={"context": {"pool_id": event.pool_id}})
            check.add(RISK_MINT_UNVERIFIED, "Could not verify minting history")
            check.soft_failure = True

        return check

    async def check_metadata(self, event: PoolEvent) -> CheckResult:
        check = CheckResult(name="metadata")

        for token in event.tokens:
            if token.is_native:
                continue

            if has_suspicious_name(token.name):
                check.add(RISK_SUSPICIOUS_NAME, f"{token.name} has suspicious name pattern")

            if not has_proper_metadata(token):
                check.add(RISK_MISSING_METADATA, f"{token.ticker or token.asset_id} has no proper metadata")
            else:
                check.note(f"{token.name} has proper metadata")

        return check
