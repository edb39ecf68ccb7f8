"""
dips show - Show proposal details.
"""

from dipindex.lib.constants import FIELD_KEYS
from dipindex.lib.mdtable import normalize_key
from dipindex.store import LoadResult, NotFoundError, Proposal
from dipindex.store.parser import parse_id


def find_proposal(result: LoadResult, raw_id: str) -> Proposal | None:
    """Look up a proposal by '1003' or 'DIP1003', printing an error on a miss."""
    dip_id = parse_id(raw_id)
    if dip_id is None:
        print(f"ERROR: Invalid DIP identifier '{raw_id}'")
        return None

    try:
        return result.store.find_by_id(dip_id)
    except NotFoundError as e:
        print(f"ERROR: {e}")
        broken = [err for err in result.errors if err.path and str(dip_id) in err.path.stem]
        for err in broken:
            print(f"  (possibly unparsed: {err})")
        return None


def cmd_show(args, result: LoadResult) -> int:
    """Show metadata (and optionally body) of one proposal."""
    proposal = find_proposal(result, args.id)
    if proposal is None:
        return 1

    print(f"{proposal.label}: {proposal.title}")
    print("=" * 60)
    print(f"Status:         {proposal.status}")
    print(f"Author:         {proposal.author or '-'}")
    if proposal.review_count is not None:
        print(f"Review Count:   {proposal.review_count}")
    if proposal.implementation:
        print(f"Implementation: {proposal.implementation}")
    if proposal.path:
        print(f"File:           {proposal.path}")

    extra = {k: v for k, v in proposal.metadata.items() if normalize_key(k) not in FIELD_KEYS}
    if extra:
        print()
        for key, value in extra.items():
            print(f"{key + ':':<15} {value}")

    if args.body:
        print()
        print(proposal.body)

    return 0
