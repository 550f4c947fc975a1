# This project was developed with assistance from AI tools.
"""Deal pipeline enum tests."""

import pytest

from db.enums import DealStatus, FundingStatus, UnderwritingStatus


class TestDealStatusTransitions:
    def test_every_status_has_an_entry(self):
        assert set(DealStatus.valid_transitions()) == set(DealStatus)

    @pytest.mark.parametrize("status", [DealStatus.CLOSED, DealStatus.REJECTED])
    def test_terminal_statuses_have_no_exits(self, status):
        assert DealStatus.valid_transitions()[status] == frozenset()
        assert status in DealStatus.terminal_statuses()

    def test_every_active_status_can_be_rejected(self):
        transitions = DealStatus.valid_transitions()
        for status in set(DealStatus) - DealStatus.terminal_statuses():
            assert DealStatus.REJECTED in transitions[status]

    def test_submitted_cannot_jump_to_closed(self):
        assert DealStatus.CLOSED not in DealStatus.valid_transitions()[DealStatus.SUBMITTED]

    def test_offer_can_go_back_to_underwriting(self):
        assert DealStatus.UNDERWRITING in DealStatus.valid_transitions()[DealStatus.OFFER_PREPARED]

    def test_fundable_statuses(self):
        assert DealStatus.fundable_statuses() == {
            DealStatus.OFFER_PREPARED,
            DealStatus.OFFER_SENT,
            DealStatus.IN_CONTRACT,
        }

    def test_labels(self):
        assert DealStatus.NEEDS_INFO.label == "Needs Info"
        assert DealStatus.OFFER_SENT.label == "Offer Sent"
        assert all(s.label for s in DealStatus)


class TestUnderwritingStatus:
    def test_approved_is_final(self):
        assert UnderwritingStatus.valid_transitions()[UnderwritingStatus.APPROVED] == frozenset()

    def test_rejected_reopens_as_draft(self):
        assert UnderwritingStatus.valid_transitions()[UnderwritingStatus.REJECTED] == {
            UnderwritingStatus.DRAFT
        }


class TestFundingStatus:
    def test_withdrawn_is_terminal(self):
        assert FundingStatus.WITHDRAWN in FundingStatus.terminal_statuses()
        assert FundingStatus.valid_transitions()[FundingStatus.WITHDRAWN] == frozenset()

    def test_reviewers_cannot_withdraw(self):
        for targets in FundingStatus.valid_transitions().values():
            assert FundingStatus.WITHDRAWN not in targets
