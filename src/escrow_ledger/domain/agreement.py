"""Escrow agreement: a single guarded balance between a buyer and a seller.

The agreement records that the buyer paid the exact agreed amount, then hands
that balance back out exactly once: to the seller when the buyer confirms
delivery, or to the buyer when the seller agrees to refund. It never moves
real value; the returned payout tells the host how much to transfer.

Every operation checks, in order:
    1. the agreement is in the state the action requires  (InvalidStateError)
    2. the sender holds the role the action requires      (UnauthorizedError)
    3. action-specific arguments, i.e. the deposit amount  (InsufficientFundsError)

Nothing is mutated until all checks pass.
"""

from __future__ import annotations

from escrow_ledger.domain.enums import EscrowAction, EscrowState, PartyRole
from escrow_ledger.domain.exceptions import (
    InconsistentSnapshotError,
    InsufficientFundsError,
    InvalidStateError,
    UnauthorizedError,
)
from escrow_ledger.domain.state_machine import TRANSITIONS, EscrowStateMachine

REQUIRED_ROLE: dict[EscrowAction, PartyRole] = {
    EscrowAction.DEPOSIT: PartyRole.BUYER,
    EscrowAction.CONFIRM_DELIVERY: PartyRole.BUYER,
    EscrowAction.REFUND_BUYER: PartyRole.SELLER,
}


class EscrowAgreement:
    """Escrow agreement holding at most one deposit of ``amount``.

    Party identifiers are opaque tokens compared by equality only.
    Amounts are integers in the smallest currency unit.

    Usage:
        agreement = EscrowAgreement.create("alice", "bob", 100)
        agreement.deposit("alice", 100)
        payout = agreement.confirm_delivery("alice")  # 100, now COMPLETED
    """

    __slots__ = ("_buyer", "_seller", "_arbiter", "_amount", "_balance", "_state")

    def __init__(
        self,
        buyer: str,
        seller: str,
        amount: int,
        arbiter: str | None = None,
    ) -> None:
        self._buyer = buyer
        self._seller = seller
        self._arbiter = arbiter
        self._amount = amount
        self._balance = 0
        self._state = EscrowState.AWAITING_PAYMENT

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, buyer: str, seller: str, amount: int) -> EscrowAgreement:
        """Create a new agreement awaiting payment, with no arbiter."""
        return cls(buyer, seller, amount)

    @classmethod
    def restore(
        cls,
        buyer: str,
        seller: str,
        amount: int,
        balance: int,
        state: EscrowState | str,
        arbiter: str | None = None,
    ) -> EscrowAgreement:
        """Rebuild an agreement from persisted fields.

        Raises:
            InconsistentSnapshotError: If balance and state disagree.
            ValueError: If ``state`` is not a known EscrowState value.
        """
        state = EscrowState(state)
        expected = amount if state is EscrowState.AWAITING_DELIVERY else 0
        if balance != expected:
            raise InconsistentSnapshotError(
                f"Balance {balance} is inconsistent with state {state} "
                f"(expected {expected} for amount {amount})"
            )
        agreement = cls(buyer, seller, amount, arbiter=arbiter)
        agreement._balance = balance
        agreement._state = state
        return agreement

    # ------------------------------------------------------------------
    # Read-only fields
    # ------------------------------------------------------------------

    @property
    def buyer(self) -> str:
        return self._buyer

    @property
    def seller(self) -> str:
        return self._seller

    @property
    def arbiter(self) -> str | None:
        """Reserved for dispute resolution; no transition consults it."""
        return self._arbiter

    @property
    def amount(self) -> int:
        return self._amount

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def state(self) -> EscrowState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return self._state.is_terminal

    def role_of(self, sender: str) -> PartyRole | None:
        """Return the role ``sender`` holds, or None for outsiders."""
        if sender == self._buyer:
            return PartyRole.BUYER
        if sender == self._seller:
            return PartyRole.SELLER
        if self._arbiter is not None and sender == self._arbiter:
            return PartyRole.ARBITER
        return None

    def allowed_actions(self) -> list[EscrowAction]:
        """Actions whose state precondition holds right now."""
        return [
            action for action, (source, _) in TRANSITIONS.items() if source is self._state
        ]

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def deposit(self, sender: str, amount: int) -> None:
        """Record the buyer's deposit of exactly the agreed amount.

        Raises:
            InvalidStateError: Not AWAITING_PAYMENT.
            UnauthorizedError: Sender is not the buyer.
            InsufficientFundsError: ``amount`` differs from the agreed amount.
        """
        self._authorize(EscrowAction.DEPOSIT, sender)
        if amount != self._amount:
            raise InsufficientFundsError(required=self._amount, received=amount)

        self._fire(EscrowAction.DEPOSIT)
        self._balance = amount

    def confirm_delivery(self, sender: str) -> int:
        """Buyer confirms delivery; returns the payout owed to the seller."""
        self._authorize(EscrowAction.CONFIRM_DELIVERY, sender)
        return self._release(EscrowAction.CONFIRM_DELIVERY)

    def refund_buyer(self, sender: str) -> int:
        """Seller gives up the deposit; returns the refund owed to the buyer."""
        self._authorize(EscrowAction.REFUND_BUYER, sender)
        return self._release(EscrowAction.REFUND_BUYER)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _authorize(self, action: EscrowAction, sender: str) -> None:
        required_state, _ = TRANSITIONS[action]
        if self._state is not required_state:
            raise InvalidStateError(
                action=action.value,
                current_state=self._state.value,
                required_state=required_state.value,
            )

        required_role = REQUIRED_ROLE[action]
        party = self._buyer if required_role is PartyRole.BUYER else self._seller
        if sender != party:
            raise UnauthorizedError(
                action=action.value, sender=sender, required_role=required_role.value
            )

    def _release(self, action: EscrowAction) -> int:
        payout = self._balance
        self._fire(action)
        self._balance = 0
        return payout

    def _fire(self, action: EscrowAction) -> None:
        """Run the transition through the guard and adopt its resulting state."""
        sm = EscrowStateMachine(current_state=self._state.value)
        sm.send(action.value)
        self._state = EscrowState(sm.status)

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EscrowAgreement):
            return NotImplemented
        return all(getattr(self, slot) == getattr(other, slot) for slot in self.__slots__)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"EscrowAgreement(buyer={self._buyer!r}, seller={self._seller!r}, "
            f"arbiter={self._arbiter!r}, amount={self._amount}, "
            f"balance={self._balance}, state={self._state.value})"
        )
