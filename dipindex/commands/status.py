"""
dips status - Count proposals per status.
"""

from dipindex.store import LoadResult


def cmd_status(args, result: LoadResult) -> int:
    """Show how many proposals sit in each review stage."""
    counts = result.store.status_counts()

    print(f"Proposals: {len(result.store)}")
    print("-" * 40)
    for status, count in counts.items():
        print(f"  {status + ':':<30} {count}")

    if not counts:
        print("  No proposals found.")

    if result.errors:
        print()
        print(f"Unparsed documents: {len(result.errors)}")

    return 0
