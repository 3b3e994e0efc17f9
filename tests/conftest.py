# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for HAWK tests.
"""

import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from chains.providers import AmountEntry, BlockInfo, TransactionInfo, TxOutput  # noqa: E402
from core.exceptions import NotFoundError, ProviderError  # noqa: E402
from core.models import DexDescriptor, PoolEvent, TokenInfo, generate_pool_id  # noqa: E402
from discovery.registry import DexRegistry  # noqa: E402

POLICY_A = "a1" * 28
POLICY_B = "b2" * 28
ASSET_A = POLICY_A + "4841574b"  # HAWK
ASSET_B = POLICY_B + "4d4f4f4e"  # MOON

MINSWAP_ADDRESS = "addr1_minswap_pool"
SUNDAE_SCRIPT = "sundae0script0hash"


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


class FakeChain:
    """In-memory ChainDataPort."""

    def __init__(self, tip: int = 100):
        self.tip = tip
        self.blocks: dict[int, list[str]] = {}
        self.outputs: dict[str, list[TxOutput]] = {}
        self.txs: dict[str, TransactionInfo] = {}
        self.assets: dict[str, dict[str, Any]] = {}
        self.scripts: dict[str, dict[str, Any]] = {}
        self.mint_history: dict[str, list[dict[str, Any]]] = {}
        self.failing_blocks: set[int] = set()
        self.failing_txs: set[str] = set()
        self.failing_assets: set[str] = set()
        self.calls: dict[str, int] = {}

    def _count(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    async def latest_block(self) -> BlockInfo:
        self._count("latest_block")
        return BlockInfo(height=self.tip, time=1700000000, hash=f"hash{self.tip}")

    async def latest_height(self) -> int:
        return (await self.latest_block()).height

    async def transactions_in_block(self, height: int) -> list[str]:
        self._count("transactions_in_block")
        if height in self.failing_blocks:
            raise ProviderError(f"block {height} unavailable")
        return list(self.blocks.get(height, []))

    async def transaction(self, tx_hash: str) -> TransactionInfo:
        self._count("transaction")
        if tx_hash not in self.txs:
            raise NotFoundError(f"tx {tx_hash}")
        return self.txs[tx_hash]

    async def transaction_outputs(self, tx_hash: str) -> list[TxOutput]:
        self._count("transaction_outputs")
        if tx_hash in self.failing_txs:
            raise ProviderError(f"tx {tx_hash} unavailable")
        return list(self.outputs.get(tx_hash, []))

    async def asset(self, asset_id: str) -> dict[str, Any]:
        self._count("asset")
        if asset_id in self.failing_assets:
            raise ProviderError(f"asset {asset_id} unavailable")
        if asset_id not in self.assets:
            raise NotFoundError(f"asset {asset_id}")
        return self.assets[asset_id]

    async def policy_script(self, policy_id: str) -> dict[str, Any]:
        self._count("policy_script")
        if policy_id not in self.scripts:
            raise NotFoundError(f"script {policy_id}")
        return self.scripts[policy_id]

    async def asset_mint_history(self, asset_id: str) -> list[dict[str, Any]]:
        self._count("asset_mint_history")
        if asset_id not in self.mint_history:
            raise NotFoundError(f"history {asset_id}")
        return self.mint_history[asset_id]

    # Builders

    def add_token(
        self,
        asset_id: str,
        name: str,
        ticker: str,
        policy_type: str = "timelock",
        minted_at: int | None = None,
        mint_count: int = 1,
    ) -> None:
        policy_id = asset_id[:56]
        self.assets[asset_id] = {
            "asset": asset_id,
            "policy_id": policy_id,
            "asset_name": asset_id[56:],
            "quantity": "1000000000",
            "mint_or_burn_count": mint_count,
            "metadata": {"name": name, "ticker": ticker, "decimals": 6},
        }
        self.scripts[policy_id] = {"script_hash": policy_id, "type": policy_type}
        if minted_at is not None:
            mint_tx = f"mint_{asset_id[:8]}"
            self.mint_history[asset_id] = [{"tx_hash": mint_tx, "action": "minted", "amount": "1000000000"}]
            self.txs[mint_tx] = TransactionInfo(hash=mint_tx, block_height=minted_at)

    def add_pool_tx(
        self,
        height: int,
        tx_hash: str,
        lovelace: int,
        units: list[tuple[str, int]],
        address: str = MINSWAP_ADDRESS,
    ) -> None:
        amounts = [AmountEntry(unit="lovelace", quantity=lovelace)]
        amounts += [AmountEntry(unit=u, quantity=q) for u, q in units]
        self.blocks.setdefault(height, []).append(tx_hash)
        self.outputs[tx_hash] = [
            TxOutput(address="addr1_change", amounts=[AmountEntry(unit="lovelace", quantity=2_000_000)]),
            TxOutput(address=address, amounts=amounts),
        ]


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def minswap():
    return DexDescriptor(
        key="minswap",
        name="Minswap",
        pool_address=MINSWAP_ADDRESS,
        protocol_fee=Decimal("0.003"),
    )


@pytest.fixture
def sundaeswap():
    return DexDescriptor(
        key="sundaeswap",
        name="SundaeSwap",
        pool_address="addr1_sundae_pool",
        script_hashes=(SUNDAE_SCRIPT,),
        protocol_fee=Decimal("0.003"),
    )


@pytest.fixture
def registry(sundaeswap, minswap):
    return DexRegistry([sundaeswap, minswap])


def make_token(
    name: str = "Hawk Token",
    ticker: str = "HAWK",
    asset_id: str = ASSET_A,
    minting_txs: int = 1,
) -> TokenInfo:
    return TokenInfo(
        name=name,
        ticker=ticker,
        policy_id=asset_id[:56],
        asset_name=asset_id[56:],
        decimals=6,
        total_supply=1_000_000_000,
        minting_txs=minting_txs,
        unit=asset_id,
    )


def make_event(
    dex: DexDescriptor,
    token_a: TokenInfo | None = None,
    token_b: TokenInfo | None = None,
    amount_a: int = 2_000_000,
    amount_b: int = 1_000_000,
    liquidity: Decimal = Decimal("15000"),
    block_height: int = 1000,
) -> PoolEvent:
    token_a = token_a or make_token()
    token_b = token_b or make_token("Second Token", "SEC", ASSET_B)
    return PoolEvent(
        pool_id=generate_pool_id(dex.key, token_a.policy_id, token_b.policy_id),
        dex=dex,
        tx_hash="tx_pool",
        block_height=block_height,
        token_a=token_a,
        token_b=token_b,
        amount_a=amount_a,
        amount_b=amount_b,
        liquidity=liquidity,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        pool_address=dex.pool_address,
    )


@pytest.fixture(name="make_token")
def make_token_fixture():
    return make_token


@pytest.fixture(name="make_event")
def make_event_fixture():
    return make_event
