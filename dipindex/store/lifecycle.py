"""DIP review lifecycle using the transitions library.

A proposal moves through review by firing named triggers. Each transition
rewrites the Status row of the document's metadata table (and bumps
Review Count when a new review round starts). Nothing else in the
document is touched.

Usage:
    from dipindex.store.lifecycle import ProposalLifecycle

    lc = ProposalLifecycle(proposal)
    lc.start_review()   # Draft -> Community Review
    lc.final_review()   # Community Review -> Final Review
    lc.submit()         # Final Review -> Formal Assessment
    lc.accept()         # Formal Assessment -> Accepted
    lc.proposal         # Re-parsed proposal
"""

import dataclasses
import logging
from typing import Callable, Optional

from transitions import Machine, MachineError

from dipindex.lib.constants import STATUSES
from dipindex.lib.mdtable import replace_value
from dipindex.lib.status_config import StatusConfig
from dipindex.store.models import Proposal
from dipindex.store.parser import parse_proposal

logger = logging.getLogger(__name__)


def state_name(status: str) -> str:
    """Machine state name for a display status: "Formal Review" -> "formal_review"."""
    return "_".join(status.lower().split())


STATES = [state_name(s) for s in STATUSES]
DISPLAY = {state_name(s): s for s in STATUSES}

DECISION_SOURCES = ["formal_assessment", "formal_review"]
REVIEW_STAGES = ["community_review", "final_review", "formal_review", "formal_assessment"]

# States whose entry starts a new review round
REVIEW_ROUND_STATES = {"community_review", "final_review"}

TRANSITIONS = [
    {"trigger": "start_review", "source": "draft", "dest": "community_review"},
    {"trigger": "final_review", "source": "community_review", "dest": "final_review"},
    {"trigger": "submit", "source": "final_review", "dest": "formal_assessment"},

    # Formal decision (Formal Review is the older name of the assessment stage)
    {"trigger": "accept", "source": DECISION_SOURCES, "dest": "accepted"},
    {"trigger": "accept_with_modifications", "source": DECISION_SOURCES, "dest": "accepted_with_modifications"},
    {"trigger": "reject", "source": DECISION_SOURCES, "dest": "rejected"},

    # Parking and abandoning
    {"trigger": "postpone", "source": REVIEW_STAGES, "dest": "postponed"},
    {"trigger": "resume", "source": "postponed", "dest": "community_review"},
    {"trigger": "withdraw", "source": ["draft", "postponed"] + REVIEW_STAGES, "dest": "withdrawn"},

    # After acceptance
    {"trigger": "finalize", "source": ["accepted", "accepted_with_modifications"], "dest": "final"},
    {"trigger": "supersede", "source": ["accepted", "accepted_with_modifications", "final"], "dest": "superseded"},
]

TRIGGERS = sorted({t["trigger"] for t in TRANSITIONS})


class ProposalLifecycle:
    """State machine for one proposal's status.

    Wraps the transitions library with DIP-specific logic:
    - Initial state comes from the proposal's Status
    - State changes are written back to the document's metadata table
    - All transitions are logged
    """

    def __init__(
        self,
        proposal: Proposal,
        statuses: Optional[StatusConfig] = None,
        on_transition: Callable[[str, str, str], None] | None = None,
    ):
        """Initialize the lifecycle for a proposal.

        Args:
            proposal: Proposal to manage. If it has a path, transitions rewrite that file.
            statuses: Status vocabulary used to re-parse the document
            on_transition: Optional callback(from_status, to_status, trigger)

        Raises:
            ValueError: if the proposal's status has no place in the lifecycle
        """
        self.proposal = proposal
        self.statuses = statuses or StatusConfig()
        self.on_transition = on_transition

        initial = state_name(proposal.status)
        if initial not in STATES:
            raise ValueError(f"{proposal.label}: status '{proposal.status}' is not part of the review lifecycle")

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",
        )

    @property
    def status(self) -> str:
        return DISPLAY[self.state]

    def on_state_change(self, event) -> None:
        """Callback after any state transition.

        Persists the new status and logs the transition. If the document
        cannot be rewritten the machine is put back in the source state and
        the error is re-raised.
        """
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        review_count = self.proposal.review_count
        if to_state in REVIEW_ROUND_STATES:
            review_count = (review_count or 0) + 1

        try:
            self._save(DISPLAY[to_state], review_count)
        except (OSError, ValueError) as e:
            logger.error(f"[lifecycle] {self.proposal.label}: failed to save {DISPLAY[to_state]}: {e}")
            self.machine.set_state(from_state, model=self)
            raise

        logger.info(f"[lifecycle] {self.proposal.label}: {DISPLAY[from_state]} -> {DISPLAY[to_state]} ({trigger})")

        if self.on_transition:
            self.on_transition(DISPLAY[from_state], DISPLAY[to_state], trigger)

    def _save(self, status: str, review_count: Optional[int]) -> None:
        path = self.proposal.path
        if path is None:
            self.proposal = dataclasses.replace(self.proposal, status=status, review_count=review_count)
            return

        text = path.read_text(encoding="utf-8")
        text = replace_value(text, "Status", status)
        if review_count != self.proposal.review_count:
            text = replace_value(text, "Review Count", str(review_count))
        path.write_text(text, encoding="utf-8")

        self.proposal = parse_proposal(path, text, self.statuses, strict_status=False)

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be fired in the current state."""
        return trigger in self.machine.get_triggers(self.state)

    def available_triggers(self) -> list[str]:
        """Triggers available in the current state."""
        return sorted(self.machine.get_triggers(self.state))


def advance(proposal: Proposal, trigger: str, statuses: Optional[StatusConfig] = None) -> Proposal:
    """Fire one lifecycle trigger and return the updated proposal.

    Raises:
        ValueError: if trigger is unknown or the status has no lifecycle
        MachineError: if trigger is not allowed from the current status
    """
    if trigger not in TRIGGERS:
        raise ValueError(f"Unknown trigger '{trigger}'. Known: {', '.join(TRIGGERS)}")

    lifecycle = ProposalLifecycle(proposal, statuses)
    if not lifecycle.can(trigger):
        raise MachineError(f"Can't {trigger} {proposal.label} from '{proposal.status}'")

    lifecycle.trigger(trigger)
    return lifecycle.proposal
