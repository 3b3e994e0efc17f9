# PATH: tests/integration/test_cli_run.py
"""
Integration tests for the CLI entry points.

The Blockfrost provider is replaced with the in-memory chain, so these
run offline and deterministically.
"""

import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conftest import ASSET_A, ASSET_B, FakeChain
from core.logging import clear_global_context
from strategy.jobs import check_connection, run_hawk


def _close_all_handlers():
    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)


class OfflineChain(FakeChain):
    """FakeChain usable where a BlockfrostProvider is expected."""

    network = "mainnet"

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def health(self):
        return True

    async def network_status(self):
        return {"supply": {"circulating": "35000000000000000"}}

    def get_stats_summary(self):
        return {}


@pytest.fixture
def chain():
    chain = OfflineChain(tip=100)
    chain.add_token(ASSET_A, "Hawk Token", "HAWK", minted_at=1)
    chain.add_token(ASSET_B, "Second Token", "SEC", minted_at=1)
    return chain


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BLOCKFROST_PROJECT_ID", "mainnetTESTKEY")
    monkeypatch.delenv("TESTNET_MODE", raising=False)
    monkeypatch.delenv("HAWK_NETWORK", raising=False)
    monkeypatch.delenv("DRY_RUN", raising=False)
    yield
    _close_all_handlers()
    clear_global_context()


class TestRunHawkCli:

    def test_once_scans_tip_block(self, env, chain):
        minswap_address = "addr1zxn9efv2f6w82hagxqtn62ju4m293tqvw0uhmdl64ch8uw6j2c79gy9l76sdg0xwhd7r0c0kna0tycz4y5s6mlenh8pq6s3z70"
        chain.add_pool_tx(100, "tx_pool", 15_000_000_000, [(ASSET_A, 2_000_000), (ASSET_B, 1_000_000)], address=minswap_address)

        with patch.object(run_hawk, "BlockfrostProvider", lambda *args, **kwargs: chain):
            result = CliRunner().invoke(run_hawk.main, ["--once", "--no-json-logs", "--log-level", "ERROR"])

        assert result.exit_code == 0, result.output
        assert "Blocks Scanned: 1" in result.output
        assert "Pools Detected: 1" in result.output
        assert "Trades Executed: 1" in result.output
        assert "Total Volume: 5 ADA" in result.output

    def test_missing_project_id_exits(self, env, monkeypatch):
        monkeypatch.setenv("BLOCKFROST_PROJECT_ID", "your_blockfrost_project_id_here")

        result = CliRunner().invoke(run_hawk.main, ["--once", "--no-json-logs"])

        assert result.exit_code == 1

    def test_live_mode_records_paper_trades(self, env, chain, tmp_path):
        minswap_address = "addr1zxn9efv2f6w82hagxqtn62ju4m293tqvw0uhmdl64ch8uw6j2c79gy9l76sdg0xwhd7r0c0kna0tycz4y5s6mlenh8pq6s3z70"
        chain.add_pool_tx(100, "tx_pool", 15_000_000_000, [(ASSET_A, 2_000_000), (ASSET_B, 1_000_000)], address=minswap_address)

        with patch.object(run_hawk, "BlockfrostProvider", lambda *args, **kwargs: chain):
            result = CliRunner().invoke(run_hawk.main, ["--once", "--live", "--no-json-logs", "--log-level", "ERROR"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "data" / "trades" / "paper_trades.jsonl").exists()


class TestCheckConnectionCli:

    def test_all_checks_pass(self, env, chain):
        with patch.object(check_connection, "BlockfrostProvider", lambda *args, **kwargs: chain):
            result = CliRunner().invoke(check_connection.main, ["--asset", ASSET_A, "--probe-depth", "10"])

        assert result.exit_code == 0, result.output
        assert "Latest block: 100" in result.output
        assert "Name: Hawk Token (HAWK)" in result.output
        assert "Policy type: timelock" in result.output
        assert "All checks passed" in result.output

    def test_failed_asset_lookup_fails_checks(self, env, chain):
        chain.failing_assets.add(ASSET_B)

        with patch.object(check_connection, "BlockfrostProvider", lambda *args, **kwargs: chain):
            result = CliRunner().invoke(check_connection.main, ["--asset", ASSET_B])

        assert result.exit_code == 1
        assert "Asset lookup failed" in result.output

    @pytest.mark.asyncio
    async def test_metadata_check_uses_registered_dex(self, chain, minswap):
        from discovery.tokens import TokenResolver
        from strategy.scoring import RiskScoringEngine

        seen = []
        original = RiskScoringEngine.check_metadata

        async def spy(engine, event):
            seen.append(event)
            return await original(engine, event)

        with patch.object(RiskScoringEngine, "check_metadata", spy):
            ok = await check_connection.check_asset(chain, TokenResolver(chain), minswap, ASSET_A)

        assert ok
        assert seen[0].dex is minswap
        assert seen[0].token_b.is_native
