"""
Proposal collection: loading and lookup.

A collection is a directory of DIP markdown files:
  <dir>/DIP1000.md
  <dir>/DIP1003.md
  <dir>/dips.env        (optional settings)
  <dir>/statuses.yaml   (optional status vocabulary)

Loading never stops at a bad document. Each malformed file is reported as
a ParseError in LoadResult.errors and the rest are indexed.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Optional

from dipindex.lib.config import CollectionConfig, load_collection_config
from dipindex.lib.status_config import StatusConfig
from dipindex.store.errors import NotFoundError, ParseError
from dipindex.store.models import Proposal
from dipindex.store.parser import parse_proposal

logger = logging.getLogger(__name__)


class ProposalStore:
    """Read-only index of proposals by identifier and status."""

    def __init__(self, proposals: list[Proposal], statuses: Optional[StatusConfig] = None):
        by_id = {}
        for p in proposals:
            if p.id in by_id:
                raise ValueError(f"Duplicate DIP identifier {p.id}")
            by_id[p.id] = p
        self._by_id = MappingProxyType(dict(sorted(by_id.items())))
        self._statuses = statuses or StatusConfig()

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Proposal]:
        return iter(self._by_id.values())

    def __contains__(self, dip_id) -> bool:
        return dip_id in self._by_id

    def ids(self) -> list[int]:
        return list(self._by_id)

    def find_by_id(self, dip_id: int) -> Proposal:
        """Return the proposal with this identifier.

        Raises:
            NotFoundError: if no proposal has this identifier
        """
        try:
            return self._by_id[dip_id]
        except KeyError:
            raise NotFoundError(dip_id) from None

    def filter_by_status(self, status: str) -> Iterator[Proposal]:
        """Yield proposals with the given status, in identifier order.

        Each call returns a fresh generator over the same immutable index.
        Status names are normalized, so "accepted" matches "Accepted".
        """
        wanted = self._statuses.normalize(status) or status.strip()
        return (p for p in self._by_id.values() if p.status == wanted)

    def status_counts(self) -> dict[str, int]:
        """Count proposals per status. Known statuses come first, in lifecycle order."""
        counts: dict[str, int] = {}
        for status in self._statuses.statuses:
            n = sum(1 for p in self._by_id.values() if p.status == status)
            if n:
                counts[status] = n
        known = set(self._statuses.statuses)
        for p in self._by_id.values():
            if p.status not in known:
                counts[p.status] = counts.get(p.status, 0) + 1
        return counts


@dataclass
class LoadResult:
    """Outcome of loading a directory."""
    store: ProposalStore
    errors: list[ParseError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def discover(directory: Path, config: CollectionConfig) -> list[Path]:
    """List candidate DIP files in sorted path order."""
    pattern = f"**/{config.glob}" if config.recursive else config.glob
    return sorted(p for p in directory.glob(pattern) if p.is_file())


def load(directory: Path, config: Optional[CollectionConfig] = None) -> LoadResult:
    """Load every DIP document in a directory.

    Args:
        directory: Collection directory
        config: Settings; loaded from the directory when omitted

    Returns:
        LoadResult with the well-formed proposals and per-file ParseErrors

    Raises:
        FileNotFoundError: if directory doesn't exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"DIP directory not found: {directory}")

    if config is None:
        config = load_collection_config(directory)

    proposals: list[Proposal] = []
    seen: dict[int, Path] = {}
    errors: list[ParseError] = []

    for path in discover(directory, config):
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping {path.name}: unreadable: {e}")
            errors.append(ParseError(path, "file", f"unreadable: {e}"))
            continue

        try:
            proposal = parse_proposal(path, text, config.statuses, config.strict_status)
        except ParseError as e:
            logger.warning(f"Skipping {path.name}: {e.message}")
            errors.append(e)
            continue

        if proposal.id in seen:
            err = ParseError(path, "DIP", f"duplicate identifier {proposal.id} (also in {seen[proposal.id].name})")
            logger.warning(f"Skipping {path.name}: {err.message}")
            errors.append(err)
            continue

        seen[proposal.id] = path
        proposals.append(proposal)

    logger.debug(f"Loaded {len(proposals)} proposal(s) from {directory}, {len(errors)} error(s)")
    return LoadResult(store=ProposalStore(proposals, config.statuses), errors=errors)
