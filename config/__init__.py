"""
config/ - Shipped YAML configuration for HAWK.

- dexes.yaml: ordered DEX registry
- hawk.yaml: scanner defaults
"""

from pathlib import Path
from typing import Any, Dict

import yaml

from core.exceptions import ConfigError


CONFIG_DIR = Path(__file__).parent
DEXES_PATH = CONFIG_DIR / "dexes.yaml"
HAWK_DEFAULTS_PATH = CONFIG_DIR / "hawk.yaml"


def load_yaml(path: Path) -> Dict[str, Any]:
    """
    Load a YAML mapping.

    Args:
        path: YAML file

    Returns:
        Parsed mapping ({} for an empty file)

    Raises:
        ConfigError: File missing or not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}", details={"path": str(path)})

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a mapping: {path}", details={"path": str(path)})
    return data
