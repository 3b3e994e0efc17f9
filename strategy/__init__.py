"""
strategy/ - Risk scoring, decision policy and the scan loop.

Modules:
- scoring: RiskScoringEngine (four heuristic checks)
- decision: decide() threshold policy and DecisionRouter
- pipeline: PoolScanner, the scan loop driver
- config: HawkConfig loading and validation
"""

from strategy.config import HawkConfig, load_hawk_config
from strategy.decision import DecisionRouter, decide
from strategy.pipeline import PoolScanner
from strategy.scoring import RiskScoringEngine

__all__ = [
    "DecisionRouter",
    "HawkConfig",
    "PoolScanner",
    "RiskScoringEngine",
    "decide",
    "load_hawk_config",
]
