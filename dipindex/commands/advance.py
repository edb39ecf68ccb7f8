"""
dips advance - Move a proposal through the review lifecycle.

Rewrites the Status row (and Review Count, when a review round starts)
of the proposal's metadata table.
"""

from transitions import MachineError

from dipindex.commands.show import find_proposal
from dipindex.lib.config import CollectionConfig
from dipindex.store import LoadResult, ProposalLifecycle, advance


def cmd_advance(args, result: LoadResult, config: CollectionConfig) -> int:
    """Fire a lifecycle trigger on one proposal."""
    proposal = find_proposal(result, args.id)
    if proposal is None:
        return 1

    try:
        updated = advance(proposal, args.trigger, config.statuses)
    except (ValueError, MachineError) as e:
        # MachineError keeps its text in .value
        print(f"ERROR: {getattr(e, 'value', e)}")
        return 1
    except OSError as e:
        print(f"ERROR: Could not update {proposal.path}: {e}")
        return 1

    print(f"{updated.label}: {proposal.status} -> {updated.status}")
    if updated.review_count != proposal.review_count:
        print(f"Review Count: {updated.review_count}")
    return 0


def cmd_triggers(args, result: LoadResult, config: CollectionConfig) -> int:
    """List the triggers that can fire from a proposal's current status."""
    proposal = find_proposal(result, args.id)
    if proposal is None:
        return 1

    try:
        lifecycle = ProposalLifecycle(proposal, config.statuses)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    triggers = lifecycle.available_triggers()
    print(f"{proposal.label} ({proposal.status})")
    if not triggers:
        print("  No further transitions.")
    for trigger in triggers:
        print(f"  dips advance {proposal.id} {trigger}")
    return 0
