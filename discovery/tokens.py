"""
discovery/tokens.py - Asset id to TokenInfo resolution.

resolve() never raises: the base currency maps to the native sentinel
and any lookup or parsing failure maps to TokenInfo.unknown().
"""

from chains.providers import ChainDataPort
from core.constants import LOVELACE_UNIT, UNKNOWN_TOKEN_NAME
from core.exceptions import InfraError
from core.logging import get_logger
from core.math import safe_int
from core.models import TokenInfo

logger = get_logger("hawk.tokens")


def token_from_asset(asset_id: str, asset: dict) -> TokenInfo:
    """Build TokenInfo from an indexer asset payload."""
    metadata = asset.get("metadata") or {}
    return TokenInfo(
        name=metadata.get("name") or UNKNOWN_TOKEN_NAME,
        ticker=metadata.get("ticker") or asset.get("asset_name") or "",
        policy_id=asset["policy_id"],
        asset_name=asset.get("asset_name") or "",
        decimals=safe_int(metadata.get("decimals")),
        is_native=False,
        total_supply=safe_int(asset.get("quantity")),
        minting_txs=safe_int(asset.get("mint_or_burn_count")),
        unit=asset_id,
    )


class TokenResolver:
    """Resolves asset ids through the chain data port, caching successes."""

    def __init__(self, provider: ChainDataPort):
        self.provider = provider
        self._cache: dict[str, TokenInfo] = {}
        self.lookups = 0
        self.failures = 0

    async def resolve(self, asset_id: str) -> TokenInfo:
        if asset_id == LOVELACE_UNIT:
            return TokenInfo.native()

        cached = self._cache.get(asset_id)
        if cached is not None:
            return cached

        self.lookups += 1
        try:
            asset = await self.provider.asset(asset_id)
            token = token_from_asset(asset_id, asset)
        except (InfraError, KeyError, TypeError, ValueError, AttributeError) as e:
            self.failures += 1
            logger.debug(
                f"Asset lookup failed, using fallback: {e}",
                extra={"context": {"asset_id": asset_id}},
            )
            return TokenInfo.unknown(asset_id)

        self._cache[asset_id] = token
        return token
