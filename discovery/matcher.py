"""
discovery/matcher.py - Pool-creation pattern matching.

Pipeline per transaction, for each DEX in registry order:
1. Select the outputs the DEX owns (pool address or script hash)
2. Sum lovelace across those outputs (liquidity, in ADA)
3. Reject below min liquidity (before any asset lookup)
4. Take the first two distinct non-lovelace assets as token A / token B
5. Build a PoolEvent with a canonical pool id

The first DEX producing an event wins.
"""

from decimal import Decimal
from typing import Optional

from chains.providers import AmountEntry, TxOutput
from core.logging import get_logger
from core.math import lovelace_to_ada
from core.models import DexDescriptor, PoolEvent, generate_pool_id
from core.time import now_utc
from discovery.registry import DexRegistry
from discovery.tokens import TokenResolver

logger = get_logger("hawk.matcher")


def select_dex_outputs(outputs: list[TxOutput], dex: DexDescriptor) -> list[TxOutput]:
    """Outputs sent to the DEX's pool address or to one of its scripts."""
    return [o for o in outputs if dex.owns_address(o.address)]


def sum_lovelace(outputs: list[TxOutput]) -> int:
    return sum(
        entry.quantity
        for output in outputs
        for entry in output.amounts
        if entry.is_lovelace
    )


def pick_pool_assets(outputs: list[TxOutput]) -> list[AmountEntry]:
    """
    First two distinct non-lovelace entries, in encounter order.

    A pool-creation output may carry extra assets (LP or NFT markers);
    only the first two distinct units are treated as the pair.
    """
    picked: list[AmountEntry] = []
    for output in outputs:
        for entry in output.amounts:
            if entry.is_lovelace:
                continue
            if any(p.unit == entry.unit for p in picked):
                continue
            picked.append(entry)
            if len(picked) == 2:
                return picked
    return picked


class PoolMatcher:
    """Decides whether a transaction created a pool on a known DEX."""

    def __init__(
        self,
        registry: DexRegistry,
        resolver: TokenResolver,
        min_liquidity: Decimal,
    ):
        self.registry = registry
        self.resolver = resolver
        self.min_liquidity = min_liquidity

    async def match(
        self,
        tx_hash: str,
        block_height: int,
        outputs: list[TxOutput],
    ) -> Optional[PoolEvent]:
        """
        Extract a PoolEvent from a transaction's outputs.

        Returns:
            PoolEvent, or None if the transaction did not create a pool
        """
        for dex in self.registry:
            event = await self.match_dex(dex, tx_hash, block_height, outputs)
            if event is not None:
                return event
        return None

    async def match_dex(
        self,
        dex: DexDescriptor,
        tx_hash: str,
        block_height: int,
        outputs: list[TxOutput],
    ) -> Optional[PoolEvent]:
        """Check a single DEX's pool-creation pattern."""
        dex_outputs = select_dex_outputs(outputs, dex)
        if not dex_outputs:
            return None

        liquidity = lovelace_to_ada(sum_lovelace(dex_outputs))
        if liquidity < self.min_liquidity:
            logger.debug(
                f"{dex.name} output below min liquidity",
                extra={"context": {"tx_hash": tx_hash, "liquidity_ada": str(liquidity)}},
            )
            return None

        assets = pick_pool_assets(dex_outputs)
        if len(assets) < 2:
            logger.debug(
                f"{dex.name} output without a token pair",
                extra={"context": {"tx_hash": tx_hash, "assets": len(assets)}},
            )
            return None

        entry_a, entry_b = assets
        token_a = await self.resolver.resolve(entry_a.unit)
        token_b = await self.resolver.resolve(entry_b.unit)

        return PoolEvent(
            pool_id=generate_pool_id(dex.key, token_a.policy_id, token_b.policy_id),
            dex=dex,
            tx_hash=tx_hash,
            block_height=block_height,
            token_a=token_a,
            token_b=token_b,
            amount_a=entry_a.quantity,
            amount_b=entry_b.quantity,
            liquidity=liquidity,
            created_at=now_utc(),
            pool_address=dex_outputs[0].address,
        )
