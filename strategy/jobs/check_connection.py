#!/usr/bin/env python3
"""
strategy/jobs/check_connection.py - Pre-flight checks before running the scanner.

Checks:
1. Configuration (project id, network, dry run)
2. Provider connection (health, network, latest block)
3. DEX registry
4. Token analysis for --asset ids (resolution, policy type, metadata check)
5. Pool detection on a recent block (--probe-depth blocks behind the tip)

Usage:
    python -m strategy.jobs.check_connection
    python -m strategy.jobs.check_connection --asset <asset_id> --probe-depth 100
"""

import asyncio
import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Optional

import click

from chains.providers import BlockfrostProvider
from core.constants import PolicyType
from core.exceptions import ConfigError, HawkError, InfraError
from core.logging import get_logger, set_global_context, setup_logging
from core.models import DexDescriptor, PoolEvent
from discovery.matcher import select_dex_outputs
from discovery.registry import DexRegistry, load_dex_registry
from discovery.tokens import TokenResolver
from strategy.config import HawkConfig, load_hawk_config
from strategy.scoring import RiskScoringEngine

logger = get_logger("hawk.check")

# Transactions inspected by the pool-detection probe
PROBE_TX_LIMIT = 10


def echo_result(ok: bool, message: str) -> None:
    click.echo(f"  [{'OK' if ok else 'FAIL'}] {message}")


async def check_provider(provider: BlockfrostProvider) -> bool:
    click.echo("Provider connection")
    try:
        healthy = await provider.health()
        echo_result(healthy, f"Blockfrost API: {'Healthy' if healthy else 'Unhealthy'}")

        network = await provider.network_status()
        supply = network.get("supply", {}) if isinstance(network, dict) else {}
        echo_result(True, f"Connected to {provider.network} (circulating supply: {supply.get('circulating', 'n/a')})")

        block = await provider.latest_block()
        block_time = datetime.fromtimestamp(block.time, tz=timezone.utc).isoformat()
        echo_result(True, f"Latest block: {block.height} at {block_time}")
        return healthy
    except InfraError as e:
        echo_result(False, f"Connection failed: {e}")
        return False


async def check_asset(
    provider: BlockfrostProvider,
    resolver: TokenResolver,
    dex: DexDescriptor,
    asset_id: str,
) -> bool:
    click.echo(f"Token analysis: {asset_id[:20]}...")
    failures = resolver.failures
    token = await resolver.resolve(asset_id)
    if resolver.failures > failures:
        echo_result(False, "Asset lookup failed (fallback metadata used)")
        return False

    echo_result(True, f"Name: {token.name} ({token.ticker})")
    echo_result(True, f"Policy id: {token.policy_id}")
    echo_result(True, f"Total supply: {token.total_supply}")
    echo_result(True, f"Mint/burn count: {token.minting_txs}")

    try:
        script = await provider.policy_script(token.policy_id)
        echo_result(True, f"Policy type: {PolicyType.parse(script.get('type')).value}")
    except InfraError:
        click.echo("  [INFO] Could not fetch policy details (normal for native script policies)")

    # Metadata check in isolation, paired with ADA on the first registered DEX
    engine = RiskScoringEngine(provider, max_risk_threshold=0)
    event = PoolEvent(
        pool_id=asset_id,
        dex=dex,
        tx_hash="",
        block_height=0,
        token_a=token,
        token_b=token.native(),
        amount_a=0,
        amount_b=0,
        liquidity=Decimal("0"),
        created_at=datetime.now(timezone.utc),
        pool_address="",
    )
    metadata = await engine.check_metadata(event)
    for reason in metadata.reasons:
        click.echo(f"  [INFO] {reason}")
    echo_result(True, f"Metadata risk: {metadata.risk}")
    return True


async def probe_pool_detection(provider: BlockfrostProvider, registry: DexRegistry, depth: int) -> bool:
    click.echo("Pool detection probe")
    try:
        tip = await provider.latest_height()
        height = tip - depth
        tx_hashes = await provider.transactions_in_block(height)
        echo_result(True, f"Block {height}: {len(tx_hashes)} transactions")

        dex_txs = 0
        multi_asset_txs = 0
        for tx_hash in tx_hashes[:PROBE_TX_LIMIT]:
            outputs = await provider.transaction_outputs(tx_hash)
            owned = [o for dex in registry for o in select_dex_outputs(outputs, dex)]
            if not owned:
                continue
            dex_txs += 1
            if any(len(o.amounts) > 1 for o in owned):
                multi_asset_txs += 1

        echo_result(True, f"DEX transactions: {dex_txs}, with token pairs: {multi_asset_txs}")
        return True
    except InfraError as e:
        echo_result(False, f"Probe failed: {e}")
        return False


async def run_checks(
    config: HawkConfig,
    asset_ids: tuple[str, ...],
    probe_depth: int,
    dexes_path: Optional[Path] = None,
) -> bool:
    registry = load_dex_registry(dexes_path)

    click.echo("DEX registry")
    for dex in registry:
        echo_result(True, f"{dex.name}: fee {dex.protocol_fee}, {len(dex.script_hashes)} script hashes")

    async with BlockfrostProvider(
        config.blockfrost_project_id,
        network=config.network,
        timeout_seconds=config.request_timeout_seconds,
    ) as provider:
        results = [await check_provider(provider)]

        resolver = TokenResolver(provider)
        dex = next(iter(registry))
        for asset_id in asset_ids:
            results.append(await check_asset(provider, resolver, dex, asset_id))

        if probe_depth > 0:
            results.append(await probe_pool_detection(provider, registry, probe_depth))

    return all(results)


@click.command()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, path_type=Path), default=None)
@click.option("--asset", "-a", "asset_ids", multiple=True, help="Asset id to analyze (repeatable)")
@click.option("--probe-depth", default=0, help="Scan the block this many blocks behind the tip (0 = skip)")
@click.option("--log-level", "-l", default="WARNING", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]))
def main(config_path: Optional[Path], asset_ids: tuple[str, ...], probe_depth: int, log_level: str) -> None:
    """Verify configuration and provider connectivity."""
    setup_logging(level=log_level, json_output=False)
    set_global_context(service="hawk-check")

    click.echo("Configuration")
    try:
        config = load_hawk_config(config_path)
        config.validate()
    except ConfigError as e:
        echo_result(False, str(e))
        sys.exit(1)

    echo_result(True, "Blockfrost project id configured")
    echo_result(True, f"Network: {config.network}")
    if config.dry_run:
        echo_result(True, "Dry run mode enabled")
    else:
        click.echo("  [WARN] Dry run disabled: accepted pools are recorded as paper trades")

    try:
        ok = asyncio.run(run_checks(config, asset_ids, probe_depth))
    except HawkError as e:
        logger.error(f"Checks aborted: {e}", extra={"context": e.details})
        sys.exit(1)

    click.echo("All checks passed" if ok else "Some checks failed")
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
