"""
chains/providers.py - Chain data provider (Blockfrost HTTP API).

Provides read access to the chain with:
- Per-call timeout handling
- Connection pooling
- Latency and error tracking per endpoint
- Typed error mapping (404, 429, timeouts)
"""

import time
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
from dotenv import load_dotenv

from core.constants import BLOCKFROST_URLS, LOVELACE_UNIT, PROVIDER_PAGE_SIZE
from core.exceptions import (
    ConfigError,
    NotFoundError,
    ProviderError,
    ProviderTimeoutError,
    RateLimitError,
)
from core.logging import get_logger
from core.math import safe_int

logger = get_logger("hawk.provider")

# Load environment variables
load_dotenv()


@dataclass
class BlockInfo:
    """Block header fields used by the scanner."""
    height: int
    time: int
    hash: str = ""


@dataclass
class TransactionInfo:
    """Transaction fields used by the scanner."""
    hash: str
    block_height: int


@dataclass
class AmountEntry:
    """One value entry of a transaction output."""
    unit: str
    quantity: int

    @property
    def is_lovelace(self) -> bool:
        return self.unit == LOVELACE_UNIT


@dataclass
class TxOutput:
    """A transaction output (address + value entries)."""
    address: str
    amounts: list[AmountEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "TxOutput":
        return cls(
            address=data["address"],
            amounts=[
                AmountEntry(unit=a["unit"], quantity=safe_int(a.get("quantity")))
                for a in data.get("amount", [])
            ],
        )


@dataclass
class EndpointStats:
    """Statistics for one API path family."""
    path: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


class ChainDataPort(Protocol):
    """Read-only chain access consumed by the pipeline."""

    async def latest_block(self) -> BlockInfo: ...

    async def latest_height(self) -> int: ...

    async def transactions_in_block(self, height: int) -> list[str]: ...

    async def transaction(self, tx_hash: str) -> TransactionInfo: ...

    async def transaction_outputs(self, tx_hash: str) -> list[TxOutput]: ...

    async def asset(self, asset_id: str) -> dict[str, Any]: ...

    async def policy_script(self, policy_id: str) -> dict[str, Any]: ...

    async def asset_mint_history(self, asset_id: str) -> list[dict[str, Any]]: ...


def _endpoint_family(path: str) -> str:
    """Collapse ids out of a path so stats group by endpoint ("/txs/{}/utxos")."""
    parts = path.strip("/").split("/")
    if not parts:
        return "/"
    family = [parts[0]]
    for part in parts[1:]:
        family.append(part if part in ("latest", "txs", "utxos", "history") else "{}")
    return "/" + "/".join(family)


class BlockfrostProvider:
    """
    Blockfrost API client implementing ChainDataPort.

    Every call has a timeout; cancelling the calling task cancels the
    in-flight request.
    """

    def __init__(
        self,
        project_id: str,
        network: str = "mainnet",
        timeout_seconds: float = 10,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if network not in BLOCKFROST_URLS and base_url is None:
            raise ConfigError(
                f"Unknown network: {network}",
                details={"known": sorted(BLOCKFROST_URLS)},
            )
        self.project_id = project_id
        self.network = network
        self.base_url = base_url or BLOCKFROST_URLS[network]
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.stats: dict[str, EndpointStats] = {}

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"project_id": self.project_id},
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BlockfrostProvider":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def get(self, path: str, params: dict | None = None) -> Any:
        """
        GET a Blockfrost path and return decoded JSON.

        Raises:
            NotFoundError: 404
            RateLimitError: 429 (or 418 ban)
            ProviderTimeoutError: request timed out
            ProviderError: any other HTTP or transport failure
        """
        family = _endpoint_family(path)
        stats = self.stats.setdefault(family, EndpointStats(path=family))
        stats.total_requests += 1
        details = {"path": path, "network": self.network}

        client = self._get_client()
        start_ms = int(time.time() * 1000)

        try:
            resp = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            latency_ms = int(time.time() * 1000) - start_ms
            stats.failed_requests += 1
            stats.last_error = f"Timeout after {latency_ms}ms"
            raise ProviderTimeoutError(f"Timeout calling {path}", details) from e
        except httpx.HTTPError as e:
            stats.failed_requests += 1
            stats.last_error = str(e)
            raise ProviderError(f"Transport error calling {path}: {e}", details=details) from e

        latency_ms = int(time.time() * 1000) - start_ms

        if resp.status_code >= 400:
            stats.failed_requests += 1
            stats.last_error = f"HTTP {resp.status_code}"
            details["status_code"] = resp.status_code
            if resp.status_code == 404:
                raise NotFoundError(f"Not found: {path}", details)
            if resp.status_code in (418, 429):
                raise RateLimitError(f"Rate limited on {path}", details)
            raise ProviderError(f"HTTP {resp.status_code} from {path}", details=details)

        try:
            payload = resp.json()
        except ValueError as e:
            stats.failed_requests += 1
            stats.last_error = "Invalid JSON"
            raise ProviderError(f"Invalid JSON from {path}", details=details) from e

        stats.successful_requests += 1
        stats.total_latency_ms += latency_ms
        logger.debug(f"GET {path} ({latency_ms}ms)")
        return payload

    async def health(self) -> bool:
        data = await self.get("/health")
        return bool(data.get("is_healthy", False))

    async def network_status(self) -> dict[str, Any]:
        return await self.get("/network")

    async def latest_block(self) -> BlockInfo:
        data = await self.get("/blocks/latest")
        return BlockInfo(height=int(data["height"]), time=int(data.get("time", 0)), hash=data.get("hash", ""))

    async def latest_height(self) -> int:
        return (await self.latest_block()).height

    async def block_by_height(self, height: int) -> BlockInfo:
        data = await self.get(f"/blocks/{height}")
        return BlockInfo(height=int(data["height"]), time=int(data.get("time", 0)), hash=data.get("hash", ""))

    async def transactions_in_block(self, height: int) -> list[str]:
        """All transaction hashes of a block, following pagination."""
        hashes: list[str] = []
        page = 1
        while True:
            batch = await self.get(
                f"/blocks/{height}/txs",
                params={"page": page, "count": PROVIDER_PAGE_SIZE},
            )
            hashes.extend(batch)
            if len(batch) < PROVIDER_PAGE_SIZE:
                return hashes
            page += 1

    async def transaction(self, tx_hash: str) -> TransactionInfo:
        data = await self.get(f"/txs/{tx_hash}")
        return TransactionInfo(hash=data["hash"], block_height=int(data["block_height"]))

    async def transaction_outputs(self, tx_hash: str) -> list[TxOutput]:
        data = await self.get(f"/txs/{tx_hash}/utxos")
        return [TxOutput.from_dict(o) for o in data.get("outputs", [])]

    async def asset(self, asset_id: str) -> dict[str, Any]:
        return await self.get(f"/assets/{asset_id}")

    async def policy_script(self, policy_id: str) -> dict[str, Any]:
        return await self.get(f"/scripts/{policy_id}")

    async def asset_mint_history(self, asset_id: str) -> list[dict[str, Any]]:
        """Mint/burn history of an asset, earliest first."""
        return await self.get(f"/assets/{asset_id}/history", params={"order": "asc"})

    def get_stats_summary(self) -> dict:
        """Get statistics summary per endpoint family."""
        return {
            path: {
                "total_requests": s.total_requests,
                "success_rate": round(s.success_rate, 3),
                "avg_latency_ms": s.avg_latency_ms,
                "last_error": s.last_error,
            }
            for path, s in self.stats.items()
        }
