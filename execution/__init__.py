# PATH: execution/__init__.py
"""
HAWK execution layer.

- trade_hook: Trade hook contract, dry-run and paper (simulated) hooks

Transaction building and submission are not implemented.
"""

from execution.trade_hook import (
    DryRunTradeHook,
    PaperTradeHook,
    TradeHook,
    TradeResult,
    build_trade_hook,
)

__all__ = [
    "DryRunTradeHook",
    "PaperTradeHook",
    "TradeHook",
    "TradeResult",
    "build_trade_hook",
]
