"""
chains/ - Blockchain interaction layer.

Modules:
- providers: Chain data port and its Blockfrost implementation
- cursor: Incremental block scanning cursor
"""

from chains.providers import (
    AmountEntry,
    BlockfrostProvider,
    BlockInfo,
    ChainDataPort,
    EndpointStats,
    TransactionInfo,
    TxOutput,
)
from chains.cursor import (
    BlockRange,
    ScanCursor,
)

__all__ = [
    # Providers
    "AmountEntry",
    "BlockfrostProvider",
    "BlockInfo",
    "ChainDataPort",
    "EndpointStats",
    "TransactionInfo",
    "TxOutput",
    # Cursor
    "BlockRange",
    "ScanCursor",
]
