"""
Status vocabulary configuration.

Loads statuses.yaml to extend the built-in status list and alias table.
If no config file exists, returns the built-in vocabulary.

Example statuses.yaml:

    aliases:
      Approved: Accepted
      In Review: Community Review
    extra:
      - Experimental
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .constants import STATUS_ALIASES, STATUSES

logger = logging.getLogger(__name__)

STATUS_CONFIG_FILENAME = "statuses.yaml"


@dataclass
class StatusConfig:
    """Known statuses and aliases (alias keys are lowercase)."""
    statuses: list[str] = field(default_factory=lambda: STATUSES.copy())
    aliases: dict[str, str] = field(default_factory=lambda: STATUS_ALIASES.copy())

    def normalize(self, value: str) -> str | None:
        """Map a raw Status value to its canonical name.

        Matching is case-insensitive and ignores a trailing parenthetical
        note, e.g. "Withdrawn (see DIP1011)".

        Returns:
            Canonical status, or None if unknown
        """
        text = value.split('(', 1)[0].strip().rstrip('.').strip()
        if not text:
            return None
        folded = " ".join(text.split()).casefold()
        for status in self.statuses:
            if status.casefold() == folded:
                return status
        return self.aliases.get(folded)


def load_status_config(directory: Optional[Path]) -> StatusConfig:
    """Load statuses.yaml and return StatusConfig.

    If directory is None or the file doesn't exist, returns defaults.
    """
    if directory is None:
        return StatusConfig()

    config_path = directory / STATUS_CONFIG_FILENAME
    if not config_path.exists():
        return StatusConfig()

    try:
        data = yaml.safe_load(config_path.read_text()) or {}
        config = StatusConfig()

        for status in data.get("extra") or []:
            status = str(status).strip()
            if status and status not in config.statuses:
                config.statuses.append(status)

        for alias, target in (data.get("aliases") or {}).items():
            canonical = config.normalize(str(target))
            if canonical is None:
                logger.warning(f"Alias '{alias}' in {config_path} points to unknown status '{target}'")
                continue
            config.aliases[" ".join(str(alias).split()).casefold()] = canonical

        return config
    except (yaml.YAMLError, AttributeError, TypeError) as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return StatusConfig()
