# PATH: core/models.py
"""
Core data models for HAWK.

POOL_ID CONTRACT
================
  Format: "{dex_key}_{policy_low}_{policy_high}"
  where (policy_low, policy_high) is the lexicographically sorted pair of
  the two token policy ids.

  Sorting makes the id independent of the order in which the two tokens
  were encountered in the pool-creation outputs, so a re-fetched
  transaction always maps to the same id.
================
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.constants import (
    ADA_DECIMALS,
    LOVELACE_UNIT,
    POLICY_ID_HEX_LENGTH,
    Recommendation,
    UNKNOWN_TOKEN_NAME,
    UNKNOWN_TOKEN_TICKER,
)


def generate_pool_id(dex_key: str, policy_a: str, policy_b: str) -> str:
    """
    Generate deterministic pool id.

    Example:
        generate_pool_id("minswap", "ffff", "aaaa") -> "minswap_aaaa_ffff"
    """
    low, high = sorted((policy_a, policy_b))
    return f"{dex_key}_{low}_{high}"


@dataclass(frozen=True)
class DexDescriptor:
    """A known exchange and the addresses its pools live at."""
    key: str
    name: str
    pool_address: str
    script_hashes: tuple[str, ...] = ()
    protocol_fee: Decimal = Decimal("0")
    pool_prefix: str = ""

    def owns_address(self, address: str) -> bool:
        """True if the address is this DEX's pool address or embeds one of its script hashes."""
        if address == self.pool_address:
            return True
        return any(script_hash in address for script_hash in self.script_hashes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "pool_address": self.pool_address,
            "script_hashes": list(self.script_hashes),
            "protocol_fee": str(self.protocol_fee),
        }


@dataclass
class TokenInfo:
    """Token metadata resolved from the chain indexer."""
    name: str
    ticker: str
    policy_id: str
    asset_name: str = ""
    decimals: int = 0
    is_native: bool = False
    total_supply: int = 0
    minting_txs: int = 0
    unit: str = ""

    @property
    def asset_id(self) -> str:
        """Full asset id (policy id + hex asset name)."""
        return self.unit or f"{self.policy_id}{self.asset_name}"

    @classmethod
    def native(cls) -> "TokenInfo":
        """Base currency sentinel. Never looked up."""
        return cls(
            name="ADA",
            ticker="ADA",
            policy_id="ada",
            decimals=ADA_DECIMALS,
            is_native=True,
            unit=LOVELACE_UNIT,
        )

    @classmethod
    def unknown(cls, asset_id: str) -> "TokenInfo":
        """Fallback used when the asset lookup fails."""
        asset_id = asset_id or ""
        return cls(
            name=UNKNOWN_TOKEN_NAME,
            ticker=UNKNOWN_TOKEN_TICKER,
            policy_id=asset_id[:POLICY_ID_HEX_LENGTH],
            asset_name=asset_id[POLICY_ID_HEX_LENGTH:],
            unit=asset_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ticker": self.ticker,
            "policy_id": self.policy_id,
            "asset_name": self.asset_name,
            "decimals": self.decimals,
            "is_native": self.is_native,
            "total_supply": self.total_supply,
            "minting_txs": self.minting_txs,
        }


@dataclass
class PoolEvent:
    """A newly created pool, ready for risk scoring."""
    pool_id: str
    dex: DexDescriptor
    tx_hash: str
    block_height: int
    token_a: TokenInfo
    token_b: TokenInfo
    amount_a: int
    amount_b: int
    liquidity: Decimal
    created_at: datetime
    pool_address: str

    @property
    def tokens(self) -> tuple[TokenInfo, TokenInfo]:
        return self.token_a, self.token_b

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool_id": self.pool_id,
            "dex": self.dex.key,
            "tx_hash": self.tx_hash,
            "block_height": self.block_height,
            "token_a": {**self.token_a.to_dict(), "amount": str(self.amount_a)},
            "token_b": {**self.token_b.to_dict(), "amount": str(self.amount_b)},
            "liquidity_ada": str(self.liquidity),
            "created_at": self.created_at.isoformat(),
            "pool_address": self.pool_address,
        }


@dataclass
class CheckResult:
    """Outcome of one heuristic check."""
    name: str
    risk: Decimal = Decimal("0")
    reasons: List[str] = field(default_factory=list)
    soft_failure: bool = False

    def add(self, risk: Decimal, reason: str) -> None:
        self.risk += risk
        self.reasons.append(reason)

    def note(self, reason: str) -> None:
        self.reasons.append(reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk": str(self.risk),
            "reasons": list(self.reasons),
            "soft_failure": self.soft_failure,
        }


@dataclass
class RiskAssessment:
    """Aggregated risk score with itemized explanation."""
    risk_score: Decimal = Decimal("0")
    reasons: List[str] = field(default_factory=list)
    checks: Dict[str, CheckResult] = field(default_factory=dict)
    recommendation: Optional[Recommendation] = None
    error: Optional[str] = None

    def absorb(self, check: CheckResult) -> None:
        """Add a check's contribution to the aggregate."""
        self.checks[check.name] = check
        self.risk_score += check.risk
        self.reasons.extend(check.reasons)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk_score": str(self.risk_score),
            "reasons": list(self.reasons),
            "checks": {name: c.to_dict() for name, c in self.checks.items()},
            "recommendation": self.recommendation.value if self.recommendation else None,
            "error": self.error,
        }
