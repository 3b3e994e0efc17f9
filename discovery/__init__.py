"""
discovery/ - Pool detection.

Modules:
- registry: Known DEXes (config/dexes.yaml)
- tokens: Asset id -> TokenInfo resolution with fallback
- matcher: Pool-creation pattern matching
- ledger: Pool id deduplication
"""

from discovery.ledger import PoolLedger
from discovery.matcher import PoolMatcher, pick_pool_assets, select_dex_outputs, sum_lovelace
from discovery.registry import DexRegistry, load_dex_registry
from discovery.tokens import TokenResolver, token_from_asset

__all__ = [
    "DexRegistry",
    "PoolLedger",
    "PoolMatcher",
    "TokenResolver",
    "load_dex_registry",
    "pick_pool_assets",
    "select_dex_outputs",
    "sum_lovelace",
    "token_from_asset",
]
