"""
discovery/registry.py - Registry of known DEXes.

Config-driven: config/dexes.yaml is an ordered mapping of
dex_key -> {name, pool_address, script_hashes, protocol_fee, pool_prefix}.
Iteration order is the YAML order, which is also the tie-break order when
an output address could belong to more than one DEX.
"""

from pathlib import Path
from typing import Iterator

from config import DEXES_PATH, load_yaml
from core.exceptions import ConfigError
from core.logging import get_logger
from core.math import safe_decimal
from core.models import DexDescriptor

logger = get_logger("hawk.registry")


class DexRegistry:
    """Immutable, ordered table of DexDescriptors."""

    def __init__(self, dexes: list[DexDescriptor]):
        keys = [d.key for d in dexes]
        if len(keys) != len(set(keys)):
            raise ConfigError("Duplicate DEX keys in registry", details={"keys": keys})
        self._dexes: tuple[DexDescriptor, ...] = tuple(dexes)

    @classmethod
    def from_config(cls, dexes_config: dict) -> "DexRegistry":
        """Build registry from a parsed dexes.yaml mapping."""
        dexes = []
        for dex_key, dex_config in (dexes_config or {}).items():
            if not dex_config.get("enabled", True):
                logger.debug(f"Skipping disabled DEX {dex_key}")
                continue

            pool_address = dex_config.get("pool_address") or dex_config.get("factory_address")
            script_hashes = tuple(dex_config.get("script_hashes") or ())
            if not pool_address and not script_hashes:
                raise ConfigError(
                    f"DEX {dex_key} has neither pool_address nor script_hashes",
                    details={"dex": dex_key},
                )

            dexes.append(DexDescriptor(
                key=dex_key,
                name=dex_config.get("name", dex_key),
                pool_address=pool_address or "",
                script_hashes=script_hashes,
                protocol_fee=safe_decimal(dex_config.get("protocol_fee")),
                pool_prefix=dex_config.get("pool_prefix", ""),
            ))

        logger.info(
            f"Loaded {len(dexes)} DEXes",
            extra={"context": {"dexes": [d.key for d in dexes]}},
        )
        return cls(dexes)

    def __iter__(self) -> Iterator[DexDescriptor]:
        return iter(self._dexes)

    def __len__(self) -> int:
        return len(self._dexes)

    def get(self, dex_key: str) -> DexDescriptor | None:
        for dex in self._dexes:
            if dex.key == dex_key:
                return dex
        return None

    @property
    def keys(self) -> list[str]:
        return [d.key for d in self._dexes]

    def get_summary(self) -> dict:
        return {
            "total_dexes": len(self._dexes),
            "dexes": [d.to_dict() for d in self._dexes],
        }


def load_dex_registry(config_path: Path | None = None) -> DexRegistry:
    """
    Load the DEX registry.

    Args:
        config_path: Path to dexes.yaml (default: config/dexes.yaml in the package)

    Raises:
        ConfigError: File missing, malformed, or no enabled DEX
    """
    registry = DexRegistry.from_config(load_yaml(config_path or DEXES_PATH))
    if not registry.keys:
        raise ConfigError("DEX registry has no enabled DEXes", details={"path": str(config_path or DEXES_PATH)})
    return registry
