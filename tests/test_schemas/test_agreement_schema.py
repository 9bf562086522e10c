"""Tests for the agreement snapshot and status schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from escrow_ledger.domain.agreement import EscrowAgreement
from escrow_ledger.domain.enums import EscrowAction, EscrowState
from escrow_ledger.schemas.agreement import AgreementStatus, EscrowAgreementSnapshot


class TestSnapshot:
    def test_captures_every_field(self, funded_agreement: EscrowAgreement) -> None:
        snapshot = EscrowAgreementSnapshot.from_agreement(funded_agreement)
        assert snapshot.model_dump() == {
            "buyer": "alice",
            "seller": "bob",
            "arbiter": None,
            "amount": 100,
            "balance": 100,
            "state": EscrowState.AWAITING_DELIVERY,
        }

    def test_json_round_trip_keeps_behaviour(self, funded_agreement: EscrowAgreement) -> None:
        payload = EscrowAgreementSnapshot.from_agreement(funded_agreement).model_dump_json()
        restored = EscrowAgreementSnapshot.model_validate_json(payload).to_agreement()

        assert restored == funded_agreement
        assert restored.refund_buyer("bob") == 100
        assert restored.state is EscrowState.REFUNDED

    def test_arbiter_survives(self) -> None:
        agreement = EscrowAgreement("alice", "bob", 100, arbiter="carol")
        snapshot = EscrowAgreementSnapshot.from_agreement(agreement)
        assert snapshot.to_agreement().arbiter == "carol"

    def test_rejects_balance_outside_awaiting_delivery(self) -> None:
        with pytest.raises(ValidationError, match="balance must be 0"):
            EscrowAgreementSnapshot(
                buyer="alice", seller="bob", amount=100, balance=100, state="COMPLETED"
            )

    def test_rejects_partial_balance(self) -> None:
        with pytest.raises(ValidationError, match="balance must be 100"):
            EscrowAgreementSnapshot(
                buyer="alice", seller="bob", amount=100, balance=40, state="AWAITING_DELIVERY"
            )

    def test_rejects_stringly_amount(self) -> None:
        with pytest.raises(ValidationError):
            EscrowAgreementSnapshot.model_validate_json(
                '{"buyer": "alice", "seller": "bob", "amount": "100"}'
            )

    def test_any_accepted_amount_round_trips(self) -> None:
        agreement = EscrowAgreement.create("alice", "bob", -5)
        agreement.deposit("alice", -5)

        payload = EscrowAgreementSnapshot.from_agreement(agreement).model_dump_json()
        restored = EscrowAgreementSnapshot.model_validate_json(payload).to_agreement()

        assert restored == agreement
        assert restored.balance == -5

    def test_is_frozen(self, agreement: EscrowAgreement) -> None:
        snapshot = EscrowAgreementSnapshot.from_agreement(agreement)
        with pytest.raises(ValidationError):
            snapshot.balance = 100


class TestAgreementStatus:
    def test_serializes_actions_as_event_names(self) -> None:
        status = AgreementStatus(
            agreement_id="abc",
            state=EscrowState.AWAITING_DELIVERY,
            amount=100,
            balance=100,
            allowed_actions=[EscrowAction.CONFIRM_DELIVERY, EscrowAction.REFUND_BUYER],
        )
        assert status.model_dump(mode="json")["allowed_actions"] == [
            "confirm_delivery",
            "refund_buyer",
        ]
