"""Tests for dipindex.store.lifecycle module."""

import pytest
from pathlib import Path
from unittest.mock import patch

from transitions import MachineError

from dipindex.lib.constants import STATUSES
from dipindex.lib.mdtable import parse_table
from dipindex.store import Proposal, load
from dipindex.store.lifecycle import (
    DISPLAY,
    STATES,
    TRANSITIONS,
    TRIGGERS,
    ProposalLifecycle,
    advance,
    state_name,
)
from dipindex.store.parser import parse_proposal


DOC = """# Named Arguments

| Field   | Value |
|---------|-------|
| DIP:    | 1019  |
| Author: | Someone |
| Status: | Draft |

## Rationale

Body stays untouched.
"""


@pytest.fixture
def dip_file(tmp_path):
    path = tmp_path / "DIP1019.md"
    path.write_text(DOC)
    return path


@pytest.fixture
def proposal(dip_file):
    return parse_proposal(dip_file, dip_file.read_text())


class TestLifecycleDefinitions:
    """Tests for state and transition definitions."""

    def test_every_status_is_a_state(self):
        assert len(STATES) == len(STATUSES)
        assert all(DISPLAY[state_name(s)] == s for s in STATUSES)

    def test_state_name(self):
        assert state_name("Accepted with modifications") == "accepted_with_modifications"

    def test_transitions_reference_known_states(self):
        for t in TRANSITIONS:
            sources = t["source"] if isinstance(t["source"], list) else [t["source"]]
            assert t["dest"] in STATES
            assert all(s in STATES for s in sources)

    def test_triggers_sorted_unique(self):
        assert TRIGGERS == sorted(set(TRIGGERS))
        assert "accept" in TRIGGERS


class TestProposalLifecycle:
    """ProposalLifecycle behaviour."""

    def test_initial_state_from_proposal(self, proposal):
        lc = ProposalLifecycle(proposal)
        assert lc.state == "draft"
        assert lc.status == "Draft"

    def test_unknown_status_rejected(self):
        p = Proposal(id=1, title="t", author="", status="Pending")
        with pytest.raises(ValueError, match="not part of the review lifecycle"):
            ProposalLifecycle(p)

    def test_available_triggers(self, proposal):
        lc = ProposalLifecycle(proposal)
        assert lc.available_triggers() == ["start_review", "withdraw"]
        assert lc.can("start_review")
        assert not lc.can("accept")

    def test_transition_rewrites_status_row(self, proposal, dip_file):
        lc = ProposalLifecycle(proposal)
        lc.start_review()

        content = dip_file.read_text()
        table = parse_table(content)
        assert table.get("status") == "Community Review"
        assert "Body stays untouched." in content
        assert lc.proposal.status == "Community Review"

    def test_review_round_bumps_review_count(self, proposal, dip_file):
        lc = ProposalLifecycle(proposal)
        lc.start_review()
        assert lc.proposal.review_count == 1
        assert "| Review Count: | 1 |" in dip_file.read_text()

        lc.final_review()
        assert lc.proposal.review_count == 2

    def test_decision_keeps_review_count(self, proposal):
        lc = ProposalLifecycle(proposal)
        lc.start_review()
        lc.final_review()
        lc.submit()
        lc.accept()
        assert lc.proposal.status == "Accepted"
        assert lc.proposal.review_count == 2

    def test_full_happy_path(self, proposal, dip_file):
        lc = ProposalLifecycle(proposal)
        for trigger in ["start_review", "final_review", "submit", "accept_with_modifications", "finalize"]:
            lc.trigger(trigger)
        assert lc.status == "Final"
        assert parse_table(dip_file.read_text()).get("status") == "Final"

    def test_postpone_and_resume(self, proposal):
        lc = ProposalLifecycle(proposal)
        lc.start_review()
        lc.postpone()
        assert lc.status == "Postponed"
        lc.resume()
        assert lc.status == "Community Review"
        assert lc.proposal.review_count == 2

    def test_legacy_formal_review_can_be_decided(self):
        p = Proposal(id=1003, title="t", author="", status="Formal Review", review_count=2)
        lc = ProposalLifecycle(p)
        lc.reject()
        assert lc.proposal.status == "Rejected"
        assert lc.proposal.review_count == 2

    def test_invalid_transition_raises(self, proposal):
        lc = ProposalLifecycle(proposal)
        with pytest.raises(MachineError):
            lc.accept()
        assert lc.state == "draft"

    def test_on_transition_callback(self, proposal):
        calls = []
        lc = ProposalLifecycle(proposal, on_transition=lambda *a: calls.append(a))
        lc.withdraw()
        assert calls == [("Draft", "Withdrawn", "withdraw")]

    def test_transition_is_logged(self, proposal, caplog):
        import logging
        caplog.set_level(logging.INFO)
        ProposalLifecycle(proposal).start_review()
        assert "DIP1019: Draft -> Community Review (start_review)" in caplog.text

    def test_in_memory_proposal(self):
        p = Proposal(id=7, title="t", author="", status="Accepted")
        lc = ProposalLifecycle(p)
        lc.supersede()
        assert lc.proposal.status == "Superseded"
        assert lc.proposal.path is None


class TestAdvance:
    """Tests for advance()."""

    def test_returns_updated_proposal(self, proposal):
        updated = advance(proposal, "start_review")
        assert updated.status == "Community Review"
        assert updated.id == proposal.id

    def test_reload_sees_new_status(self, proposal, dip_file):
        advance(proposal, "withdraw")
        store = load(dip_file.parent).store
        assert store.find_by_id(1019).status == "Withdrawn"

    def test_unknown_trigger(self, proposal):
        with pytest.raises(ValueError, match="Unknown trigger"):
            advance(proposal, "explode")

    def test_disallowed_trigger(self, proposal, dip_file):
        with pytest.raises(MachineError):
            advance(proposal, "finalize")
        assert parse_table(dip_file.read_text()).get("status") == "Draft"


ALIASED_DOC = """# Aliased Keys

| Field                | Value |
|----------------------|-------|
| DIP:                 | 1020  |
| Authors:             | Someone, Someone Else |
| Reviews:             | 1     |
| Implementation Link: | https://example.com/pr |
| Status:              | Draft |
"""


class TestAliasedKeys:
    """Documents that spell fields with their alias keys."""

    @pytest.fixture
    def aliased(self, tmp_path):
        path = tmp_path / "DIP1020.md"
        path.write_text(ALIASED_DOC)
        return parse_proposal(path, ALIASED_DOC)

    def test_review_count_keeps_counting(self, aliased):
        assert aliased.review_count == 1
        lc = ProposalLifecycle(aliased)

        lc.start_review()
        assert lc.proposal.review_count == 2
        lc.final_review()
        assert lc.proposal.review_count == 3

    def test_no_second_count_row(self, aliased):
        lc = ProposalLifecycle(aliased)
        lc.start_review()
        lc.final_review()

        content = aliased.path.read_text()
        assert "| Reviews: | 3 |" in content
        assert "Review Count" not in content
        assert len(parse_table(content).rows) == 5

    def test_other_aliases_survive(self, aliased):
        updated = advance(aliased, "withdraw")
        assert updated.status == "Withdrawn"
        assert updated.author == "Someone, Someone Else"
        assert updated.implementation == "https://example.com/pr"


class TestFailedSave:
    """A transition whose document cannot be written is undone."""

    def test_state_rolled_back(self, proposal, dip_file):
        lc = ProposalLifecycle(proposal)
        with patch("pathlib.Path.write_text", side_effect=PermissionError("read-only")):
            with pytest.raises(PermissionError):
                lc.start_review()

        assert lc.state == "draft"
        assert lc.status == "Draft"
        assert lc.proposal.review_count is None
        assert parse_table(dip_file.read_text()).get("status") == "Draft"
        assert lc.can("start_review")

    def test_retry_after_failure(self, proposal, dip_file):
        lc = ProposalLifecycle(proposal)
        with patch("pathlib.Path.write_text", side_effect=PermissionError("read-only")):
            with pytest.raises(PermissionError):
                lc.start_review()

        lc.start_review()
        assert lc.status == "Community Review"
        assert lc.proposal.review_count == 1

    def test_failure_is_logged_and_callback_skipped(self, proposal, caplog):
        calls = []
        lc = ProposalLifecycle(proposal, on_transition=lambda *a: calls.append(a))
        with patch("pathlib.Path.write_text", side_effect=PermissionError("read-only")):
            with pytest.raises(PermissionError):
                lc.withdraw()
        assert calls == []
        assert "failed to save Withdrawn" in caplog.text
