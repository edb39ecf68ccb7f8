"""
dips table - Print a proposal's metadata table, re-rendered with aligned columns.
"""

from dipindex.commands.show import find_proposal
from dipindex.lib.mdtable import parse_table, render_table
from dipindex.store import LoadResult


def cmd_table(args, result: LoadResult) -> int:
    proposal = find_proposal(result, args.id)
    if proposal is None:
        return 1

    table = parse_table(proposal.path.read_text(encoding="utf-8"))
    print(render_table(table), end="")
    return 0
