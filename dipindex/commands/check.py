"""
dips check - Report malformed DIP documents.
"""

from dipindex.store import LoadResult


def cmd_check(args, result: LoadResult) -> int:
    """Print every ParseError. Exit 1 if any document is malformed."""
    if result.ok:
        print(f"OK: {len(result.store)} proposal(s), no errors")
        return 0

    print(f"{len(result.errors)} malformed document(s):")
    for err in result.errors:
        print(f"  [x] {err}")
    print()
    print(f"{len(result.store)} proposal(s) loaded")
    return 1
