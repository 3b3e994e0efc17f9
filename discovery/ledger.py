"""
discovery/ledger.py - Pool deduplication ledger.

The only dedup point in the pipeline: each pool id is observed as FIRST
exactly once, so scoring runs at most once per pool.

Optional JSON persistence (state_path) keeps the seen set across restarts.
"""

import asyncio
import json
import os
from pathlib import Path

from core.constants import Observation
from core.logging import get_logger
from core.time import now_iso

logger = get_logger("hawk.ledger")


class PoolLedger:
    """Set of seen pool ids with atomic check-and-insert."""

    def __init__(self, state_path: Path | None = None):
        self.state_path = Path(state_path) if state_path else None
        self._seen: set[str] = set()
        self._lock = asyncio.Lock()
        if self.state_path is not None:
            self._load()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, pool_id: str) -> bool:
        return pool_id in self._seen

    async def observe(self, pool_id: str) -> Observation:
        """
        Record a pool id.

        Returns:
            Observation.FIRST on first sighting, Observation.DUPLICATE afterwards
        """
        async with self._lock:
            if pool_id in self._seen:
                return Observation.DUPLICATE
            if self.state_path is not None:
                # Persist before marking seen so a failed write leaves the pool unseen
                await asyncio.to_thread(self._save, self._seen | {pool_id})
            self._seen.add(pool_id)
            return Observation.FIRST

    def _load(self) -> None:
        if not self.state_path.exists():
            return
        with open(self.state_path, encoding="utf-8") as f:
            data = json.load(f)
        self._seen = set(data.get("pool_ids", []))
        logger.info(
            f"Loaded {len(self._seen)} known pools",
            extra={"context": {"path": str(self.state_path)}},
        )

    def _save(self, pool_ids: set[str]) -> None:
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.state_path.with_suffix(self.state_path.suffix + ".tmp")
        snapshot = {
            "updated_at": now_iso(),
            "pool_ids": sorted(pool_ids),
        }
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2)
        os.replace(tmp_path, self.state_path)
