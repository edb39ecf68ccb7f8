"""
Configuration loaders for dipindex.

Collection settings come from an optional dips.env file in the DIP
directory. Status vocabulary overrides come from statuses.yaml (see
status_config).
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from . import envparse
from .constants import DEFAULT_GLOB
from .status_config import StatusConfig, load_status_config

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "dips.env"

TRUE_VALUES = ("true", "yes", "1")
FALSE_VALUES = ("false", "no", "0")


@dataclass
class CollectionConfig:
    """Collection-level configuration from dips.env"""
    glob: str = DEFAULT_GLOB
    recursive: bool = False
    strict_status: bool = True  # Unknown statuses are parse errors
    statuses: StatusConfig = field(default_factory=StatusConfig)


def _parse_bool(env: dict, key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    logger.warning(f"Unknown {key} '{raw}', using default '{str(default).lower()}'")
    return default


def load_collection_config(directory: Path) -> CollectionConfig:
    """Load dips.env and statuses.yaml from a DIP directory.

    Missing files mean defaults. A malformed dips.env raises ValueError.
    """
    env = {}
    env_path = directory / CONFIG_FILENAME
    if env_path.exists():
        env = envparse.load_env(str(env_path))

    glob = env.get("DIP_GLOB", DEFAULT_GLOB).strip()
    if not glob:
        logger.warning(f"Empty DIP_GLOB in {env_path}, using '{DEFAULT_GLOB}'")
        glob = DEFAULT_GLOB

    return CollectionConfig(
        glob=glob,
        recursive=_parse_bool(env, "RECURSIVE", False),
        strict_status=_parse_bool(env, "STRICT_STATUS", True),
        statuses=load_status_config(directory),
    )
