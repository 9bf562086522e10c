"""Pydantic schemas for escrow agreements.

The snapshot is the persistence format: it carries every field of an
agreement and rebuilds an identical one. Amounts are not range-checked here;
whatever the core accepted must round-trip. It is kept separate from the domain
class so the domain layer stays free of pydantic.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from escrow_ledger.domain.agreement import EscrowAgreement
from escrow_ledger.domain.enums import EscrowAction, EscrowState


class EscrowAgreementSnapshot(BaseModel):
    """All fields of an agreement, ready for JSON or a database row."""

    model_config = ConfigDict(frozen=True, strict=True)

    buyer: str = Field(..., description="Identifier of the paying party")
    seller: str = Field(..., description="Identifier of the receiving party")
    arbiter: str | None = Field(default=None, description="Reserved neutral third party")
    amount: int = Field(..., description="Agreed amount in the smallest currency unit")
    balance: int = Field(default=0, description="Amount currently held")
    state: EscrowState = Field(
        default=EscrowState.AWAITING_PAYMENT,
        strict=False,
        description="Current lifecycle state",
    )

    @model_validator(mode="after")
    def _check_balance_matches_state(self) -> EscrowAgreementSnapshot:
        expected = self.amount if self.state is EscrowState.AWAITING_DELIVERY else 0
        if self.balance != expected:
            raise ValueError(
                f"balance must be {expected} in state {self.state.value}, got {self.balance}"
            )
        return self

    @classmethod
    def from_agreement(cls, agreement: EscrowAgreement) -> EscrowAgreementSnapshot:
        return cls(
            buyer=agreement.buyer,
            seller=agreement.seller,
            arbiter=agreement.arbiter,
            amount=agreement.amount,
            balance=agreement.balance,
            state=agreement.state,
        )

    def to_agreement(self) -> EscrowAgreement:
        return EscrowAgreement.restore(
            buyer=self.buyer,
            seller=self.seller,
            arbiter=self.arbiter,
            amount=self.amount,
            balance=self.balance,
            state=self.state,
        )


class AgreementStatus(BaseModel):
    """Lightweight status report for an agreement held by the service."""

    agreement_id: str
    state: EscrowState
    amount: int
    balance: int
    allowed_actions: list[EscrowAction] = Field(
        description="Actions whose state precondition holds in the current state"
    )
