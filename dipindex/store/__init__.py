"""
Proposal store for dipindex.

Loads a directory of DIP documents, indexes them by identifier and status,
and moves proposals through the review lifecycle.
"""

from dipindex.store.collection import LoadResult, ProposalStore, load
from dipindex.store.errors import NotFoundError, ParseError
from dipindex.store.lifecycle import ProposalLifecycle, advance
from dipindex.store.models import Proposal
from dipindex.store.parser import parse_proposal

__all__ = [
    "Proposal",
    "ProposalStore",
    "LoadResult",
    "load",
    "parse_proposal",
    "ParseError",
    "NotFoundError",
    "ProposalLifecycle",
    "advance",
]
