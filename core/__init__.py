"""
core - Core utilities and models for HAWK.

This package contains:
- models.py: Data models (DexDescriptor, TokenInfo, PoolEvent, RiskAssessment)
- constants.py: Enums, risk weights and defaults
- exceptions.py: Typed exceptions with error codes
- math.py: Safe Decimal utilities (no float money)
- time.py: Clock helpers
- logging.py: Structured JSON logging
"""

from core.constants import (
    ErrorCode,
    Observation,
    PolicyType,
    Recommendation,
)
from core.exceptions import (
    BlockScanError,
    ConfigError,
    HawkError,
    InfraError,
    NotFoundError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitError,
)
from core.logging import get_logger, setup_logging
from core.models import (
    CheckResult,
    DexDescriptor,
    PoolEvent,
    RiskAssessment,
    TokenInfo,
    generate_pool_id,
)

__all__ = [
    # Constants
    "ErrorCode",
    "Observation",
    "PolicyType",
    "Recommendation",
    # Exceptions
    "BlockScanError",
    "ConfigError",
    "HawkError",
    "InfraError",
    "NotFoundError",
    "ProviderError",
    "ProviderTimeoutError",
    "RateLimitError",
    # Models
    "CheckResult",
    "DexDescriptor",
    "PoolEvent",
    "RiskAssessment",
    "TokenInfo",
    "generate_pool_id",
    # Logging
    "get_logger",
    "setup_logging",
]
