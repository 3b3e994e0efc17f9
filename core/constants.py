# PATH: core/constants.py
"""
Constants for HAWK.

Contains enums, defaults, and the risk-scoring constants shared by the
matcher, the scoring engine and the decision policy.
"""

from decimal import Decimal
from enum import Enum
from typing import Final

# =============================================================================
# CHAIN CONSTANTS
# =============================================================================

# Base currency unit as reported in UTxO amount entries
LOVELACE_UNIT: Final[str] = "lovelace"
ADA_DECIMALS: Final[int] = 6

# Policy ids are 28 bytes, hex encoded
POLICY_ID_HEX_LENGTH: Final[int] = 56

UNKNOWN_TOKEN_NAME: Final[str] = "Unknown Token"
UNKNOWN_TOKEN_TICKER: Final[str] = "UNK"

# Blockfrost returns at most this many items per page
PROVIDER_PAGE_SIZE: Final[int] = 100

BLOCKFROST_URLS: Final[dict[str, str]] = {
    "mainnet": "https://cardano-mainnet.blockfrost.io/api/v0",
    "preprod": "https://cardano-preprod.blockfrost.io/api/v0",
    "preview": "https://cardano-preview.blockfrost.io/api/v0",
}

PLACEHOLDER_PROJECT_ID: Final[str] = "your_blockfrost_project_id_here"

# =============================================================================
# RISK SCORING
# =============================================================================

# Token policy check
RISK_PLUTUS_POLICY: Final[Decimal] = Decimal("0.1")
RISK_MANY_MINTS: Final[Decimal] = Decimal("0.2")
RISK_POLICY_UNVERIFIED: Final[Decimal] = Decimal("0.15")
MANY_MINTS_THRESHOLD: Final[int] = 100

# Liquidity check (base currency units)
RISK_LOW_LIQUIDITY: Final[Decimal] = Decimal("0.3")
LOW_LIQUIDITY_ADA: Final[Decimal] = Decimal("1000")
GOOD_LIQUIDITY_ADA: Final[Decimal] = Decimal("10000")

# Token ratio check (raw on-chain quantities)
RISK_EXTREME_RATIO: Final[Decimal] = Decimal("0.4")
RISK_HIGH_RATIO: Final[Decimal] = Decimal("0.2")
EXTREME_RATIO: Final[Decimal] = Decimal("1000000")
HIGH_RATIO: Final[Decimal] = Decimal("10000")

# Minting recency check
RISK_RECENT_MINT: Final[Decimal] = Decimal("0.3")
RISK_MINT_UNVERIFIED: Final[Decimal] = Decimal("0.1")
RECENT_MINT_BLOCKS: Final[int] = 10

# Metadata check
RISK_SUSPICIOUS_NAME: Final[Decimal] = Decimal("0.25")
RISK_MISSING_METADATA: Final[Decimal] = Decimal("0.15")
SUSPICIOUS_NAME_WORDS: Final[tuple[str, ...]] = (
    "test",
    "fake",
    "scam",
    "rug",
    "honeypot",
    "moon",
    "safe",
    "baby",
)

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_BASE_TRADE_AMOUNT: Final[Decimal] = Decimal("5")
DEFAULT_MAX_RISK_THRESHOLD: Final[Decimal] = Decimal("0.3")
DEFAULT_MIN_LIQUIDITY_ADA: Final[Decimal] = Decimal("1000")
DEFAULT_SCAN_INTERVAL_MS = 10000
DEFAULT_ERROR_BACKOFF_MS = 5000
DEFAULT_STATS_INTERVAL_SECONDS = 60
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10
DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_MAX_BLOCKS_PER_CYCLE = 50


class Recommendation(str, Enum):
    """Terminal outcome of a pool risk assessment."""
    SAFE_TO_TRADE = "SAFE_TO_TRADE"
    TOO_RISKY = "TOO_RISKY"
    ERROR_ANALYSIS_FAILED = "ERROR_ANALYSIS_FAILED"


class Observation(str, Enum):
    """Result of recording a pool id in the ledger."""
    FIRST = "FIRST"
    DUPLICATE = "DUPLICATE"


class PolicyType(str, Enum):
    """Policy script types reported by the chain indexer."""
    TIMELOCK = "timelock"
    PLUTUS_V1 = "plutusV1"
    PLUTUS_V2 = "plutusV2"
    PLUTUS_V3 = "plutusV3"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "PolicyType":
        if not value:
            return cls.UNKNOWN
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        if value.lower().startswith("plutus"):
            return cls.PLUTUS_V2
        return cls.UNKNOWN

    @property
    def is_plutus(self) -> bool:
        return self.value.startswith("plutus")


class ErrorCode(str, Enum):
    """Error codes carried by HawkError."""
    # Infrastructure
    INFRA_PROVIDER_ERROR = "INFRA_PROVIDER_ERROR"
    INFRA_TIMEOUT = "INFRA_TIMEOUT"
    INFRA_RATE_LIMIT = "INFRA_RATE_LIMIT"
    INFRA_NOT_FOUND = "INFRA_NOT_FOUND"

    # Configuration
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Pipeline
    BLOCK_SCAN_FAILED = "BLOCK_SCAN_FAILED"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"

    UNKNOWN = "UNKNOWN"
