#!/usr/bin/env python3
"""
strategy/jobs/run_hawk.py - CLI entrypoint for the pool scanner.

Usage:
    python -m strategy.jobs.run_hawk
    python -m strategy.jobs.run_hawk --once --no-json-logs
    python -m strategy.jobs.run_hawk --live --interval 5000
"""

import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

import click

from chains.cursor import ScanCursor
from chains.providers import BlockfrostProvider, ChainDataPort
from core.exceptions import ConfigError, HawkError
from core.logging import get_logger, set_global_context, setup_logging
from discovery.ledger import PoolLedger
from discovery.matcher import PoolMatcher
from discovery.registry import DexRegistry, load_dex_registry
from discovery.tokens import TokenResolver
from execution.trade_hook import build_trade_hook
from monitoring.stats import ScanStatistics, format_report, report_periodically
from strategy.config import HawkConfig, load_hawk_config
from strategy.decision import DecisionRouter
from strategy.pipeline import PoolScanner
from strategy.scoring import RiskScoringEngine

logger = get_logger("hawk.run")

VERSION = "0.1.0"


def build_scanner(
    config: HawkConfig,
    provider: ChainDataPort,
    registry: DexRegistry,
    stats: Optional[ScanStatistics] = None,
    start_height: Optional[int] = None,
) -> PoolScanner:
    """Wire the pipeline stages from a validated config."""
    stats = stats or ScanStatistics()
    hook = build_trade_hook(config.dry_run, config.base_trade_amount, config.trades_dir)

    return PoolScanner(
        provider=provider,
        cursor=ScanCursor(
            provider,
            start_height=start_height - 1 if start_height is not None else None,
            max_blocks_per_cycle=config.max_blocks_per_cycle or None,
        ),
        matcher=PoolMatcher(registry, TokenResolver(provider), config.min_liquidity),
        ledger=PoolLedger(config.ledger_path),
        engine=RiskScoringEngine(provider, config.max_risk_threshold),
        router=DecisionRouter(hook, stats),
        stats=stats,
        max_concurrency=config.max_concurrency,
        scan_interval_ms=config.scan_interval_ms,
        error_backoff_ms=config.error_backoff_ms,
    )


def install_signal_handlers(stop_event: asyncio.Event) -> None:
    """SIGINT/SIGTERM set the stop event; the loop finishes its current wait."""
    loop = asyncio.get_running_loop()

    def handle_shutdown(signum: int, frame: object) -> None:
        logger.info("Shutdown requested", extra={"context": {"signal": signum}})
        loop.call_soon_threadsafe(stop_event.set)

    signal.signal(signal.SIGINT, handle_shutdown)
    signal.signal(signal.SIGTERM, handle_shutdown)


async def run_hawk(
    config: HawkConfig,
    once: bool = False,
    start_height: Optional[int] = None,
) -> ScanStatistics:
    """Run the scanner until stopped (or for a single cycle)."""
    registry = load_dex_registry()
    stats = ScanStatistics()
    stop_event = asyncio.Event()

    async with BlockfrostProvider(
        config.blockfrost_project_id,
        network=config.network,
        timeout_seconds=config.request_timeout_seconds,
    ) as provider:
        scanner = build_scanner(config, provider, registry, stats, start_height)

        if once:
            if not scanner.cursor.is_initialized:
                # Single cycle over the tip block
                scanner.cursor.confirm(await provider.latest_height() - 1)
            await scanner.run_cycle()
            return stats

        install_signal_handlers(stop_event)
        reporter = asyncio.create_task(
            report_periodically(stats, config.stats_interval_seconds, stop_event)
        )
        try:
            await scanner.run(stop_event)
        finally:
            stop_event.set()
            await reporter

        logger.info("Scanner stopped", extra={"context": scanner.cursor.get_stats()})
        logger.info("Provider stats", extra={"context": provider.get_stats_summary()})

    return stats


@click.command()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, path_type=Path), default=None,
              help="YAML config (default: config/hawk.yaml)")
@click.option("--once", is_flag=True, help="Run a single scan cycle and exit")
@click.option("--interval", "-i", type=int, default=None, help="Scan interval in milliseconds")
@click.option("--log-level", "-l", default="INFO", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]))
@click.option("--json-logs/--no-json-logs", default=True)
@click.option("--dry-run/--live", default=None, help="Log trades only, or record simulated trades")
@click.option("--start-height", type=int, default=None, help="First block to scan (default: current tip)")
def main(
    config_path: Optional[Path],
    once: bool,
    interval: Optional[int],
    log_level: str,
    json_logs: bool,
    dry_run: Optional[bool],
    start_height: Optional[int],
) -> None:
    """HAWK - New liquidity pool scanner for Cardano DEXes."""
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="hawk", version=VERSION)

    try:
        config = load_hawk_config(config_path)
        if interval is not None:
            config.scan_interval_ms = interval
        if dry_run is not None:
            config.dry_run = dry_run
        config.validate()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}", extra={"context": e.details})
        sys.exit(1)

    set_global_context(network=config.network)
    logger.info(
        "Starting HAWK",
        extra={"context": {**config.to_dict(), "once": once, "start_height": start_height}},
    )

    try:
        stats = asyncio.run(run_hawk(config, once=once, start_height=start_height))
    except KeyboardInterrupt:
        logger.info("Scanner interrupted")
        return
    except HawkError as e:
        logger.error(f"Scanner error: {e}", extra={"context": e.details})
        sys.exit(1)
    except Exception as e:
        logger.error(f"Scanner error: {e}", exc_info=True)
        sys.exit(1)

    click.echo(format_report(stats))
    logger.info("Final session summary", extra={"context": stats.snapshot()})


if __name__ == "__main__":
    main()
