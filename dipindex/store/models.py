"""
Data models for the proposal store.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class Proposal:
    """One DIP document.

    Proposals are historical record: the store never deletes them, and the
    only field that changes over time is status (with review_count), by
    rewriting the document's metadata table.
    """
    id: int                                    # 1003
    title: str
    author: str
    status: str                                # Canonical status, e.g. "Formal Review"
    review_count: Optional[int] = None
    implementation: Optional[str] = None       # URL, resolved from reference links
    body: str = ""                             # Everything after the metadata table
    path: Optional[Path] = None
    metadata: dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def label(self) -> str:
        return f"DIP{self.id}"
