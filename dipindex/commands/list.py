"""
dips list - List proposals.
"""

from dipindex.store import LoadResult


def cmd_list(args, result: LoadResult) -> int:
    """List proposals, optionally filtered by status."""
    store = result.store
    status = getattr(args, 'status', None)
    proposals = list(store.filter_by_status(status)) if status else list(store)

    if not proposals:
        if status:
            print(f"No proposals with status '{status}'")
        else:
            print("Proposals: none")
        return 0

    print(f"  {'DIP':<8} {'Status':<28} Title")
    print("-" * 72)
    for p in proposals:
        title = p.title[:40] + "..." if len(p.title) > 40 else p.title
        print(f"  {p.label:<8} {p.status:<28} {title}")
    print()
    print(f"{len(proposals)} proposal(s)")

    if result.errors:
        print(f"[!] {len(result.errors)} document(s) could not be parsed - run 'dips check'")

    return 0
