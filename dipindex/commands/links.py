"""
dips links - Show a proposal's reference links, code blocks and grammar diffs.
"""

from dipindex.commands.show import find_proposal
from dipindex.lib.body import extract_code_blocks, extract_grammar_diffs, extract_reference_links
from dipindex.store import LoadResult


def cmd_links(args, result: LoadResult) -> int:
    proposal = find_proposal(result, args.id)
    if proposal is None:
        return 1

    text = proposal.path.read_text(encoding="utf-8")
    refs = extract_reference_links(text)
    blocks = extract_code_blocks(text)
    diffs = extract_grammar_diffs(text)

    print(f"{proposal.label}: {proposal.title}")
    print("=" * 60)

    print(f"Reference links: {len(refs)}")
    for label, url in refs.items():
        print(f"  [{label}] {url}")
    print()

    print(f"Code blocks: {len(blocks)}")
    for block in blocks:
        lang = block.language or "text"
        print(f"  line {block.line_number:<5} {lang:<8} {len(block.content.splitlines())} line(s)")
    print()

    print(f"Grammar diffs: {len(diffs)}")
    for diff in diffs:
        print(f"  line {diff.line_number:<5} -{len(diff.removed)} +{len(diff.added)}")

    return 0
