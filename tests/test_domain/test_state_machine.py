"""Tests for the EscrowStateMachine domain guard.

These tests verify that:
    1. All valid transitions are allowed.
    2. All invalid transitions are blocked.
    3. The convenience function validate_transition works.
    4. Terminal states admit no further events.
"""

from __future__ import annotations

import warnings

import pytest
from statemachine.exceptions import TransitionNotAllowed

from escrow_ledger.domain.enums import EscrowAction, EscrowState
from escrow_ledger.domain.state_machine import (
    TRANSITIONS,
    EscrowStateMachine,
    validate_transition,
)


class TestHappyPath:
    """AWAITING_PAYMENT -> AWAITING_DELIVERY -> COMPLETED."""

    def test_full_lifecycle(self) -> None:
        sm = EscrowStateMachine()
        assert sm.status == "AWAITING_PAYMENT"

        sm.deposit()
        assert sm.status == "AWAITING_DELIVERY"

        sm.confirm_delivery()
        assert sm.status == "COMPLETED"


class TestRefundPath:
    def test_refund_after_deposit(self) -> None:
        sm = EscrowStateMachine("AWAITING_DELIVERY")
        sm.refund_buyer()
        assert sm.status == "REFUNDED"


class TestIllegalTransitions:
    """Verify that illegal transitions raise TransitionNotAllowed."""

    def test_cannot_confirm_before_payment(self) -> None:
        sm = EscrowStateMachine("AWAITING_PAYMENT")
        with pytest.raises(TransitionNotAllowed):
            sm.confirm_delivery()

    def test_cannot_refund_before_payment(self) -> None:
        sm = EscrowStateMachine("AWAITING_PAYMENT")
        with pytest.raises(TransitionNotAllowed):
            sm.refund_buyer()

    def test_cannot_deposit_twice(self) -> None:
        sm = EscrowStateMachine("AWAITING_DELIVERY")
        with pytest.raises(TransitionNotAllowed):
            sm.deposit()

    @pytest.mark.parametrize("state", ["COMPLETED", "REFUNDED"])
    @pytest.mark.parametrize("event", ["deposit", "confirm_delivery", "refund_buyer"])
    def test_terminal_states_reject_everything(self, state: str, event: str) -> None:
        sm = EscrowStateMachine(state)
        with pytest.raises(TransitionNotAllowed):
            sm.send(event)
        assert sm.status == state


class TestAllowedEvents:
    def test_awaiting_payment(self) -> None:
        assert EscrowStateMachine("AWAITING_PAYMENT").get_allowed_events() == ["deposit"]

    def test_awaiting_delivery(self) -> None:
        allowed = EscrowStateMachine("AWAITING_DELIVERY").get_allowed_events()
        assert allowed == ["confirm_delivery", "refund_buyer"]

    def test_completed_is_final(self) -> None:
        assert EscrowStateMachine("COMPLETED").get_allowed_events() == []

    def test_refunded_is_final(self) -> None:
        assert EscrowStateMachine("REFUNDED").get_allowed_events() == []


class TestTransitionTable:
    def test_table_matches_machine(self) -> None:
        for action, (source, target) in TRANSITIONS.items():
            assert validate_transition(source.value, action.value) == target.value

    def test_every_action_has_an_edge(self) -> None:
        assert set(TRANSITIONS) == set(EscrowAction)

    def test_no_edge_leaves_a_terminal_state(self) -> None:
        assert not [s for s, _ in TRANSITIONS.values() if s.is_terminal]

    def test_only_initial_state_is_awaiting_payment(self) -> None:
        targets = {t for _, t in TRANSITIONS.values()}
        assert EscrowState.AWAITING_PAYMENT not in targets


class TestValidateTransitionFunction:
    def test_valid_transition(self) -> None:
        assert validate_transition("AWAITING_PAYMENT", "deposit") == "AWAITING_DELIVERY"

    def test_invalid_event_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown event"):
            validate_transition("AWAITING_PAYMENT", "dispute")

    def test_illegal_edge(self) -> None:
        with pytest.raises(TransitionNotAllowed):
            validate_transition("COMPLETED", "refund_buyer")

    def test_invalid_state(self) -> None:
        with pytest.raises(ValueError, match="Unknown state"):
            EscrowStateMachine("DISPUTED")


class TestStatusProperty:
    def test_status_reads_state_value_without_deprecation(self) -> None:
        sm = EscrowStateMachine("AWAITING_DELIVERY")
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            assert sm.status == "AWAITING_DELIVERY"
            assert sm.get_allowed_events() == ["confirm_delivery", "refund_buyer"]
