"""Escrow Service: an in-process host for escrow agreements.

This is the application layer that coordinates between:
    - Domain agreements (state, authorization and balance checks)
    - An in-memory registry keyed by agreement id
    - Event log (audit trail)

The service adds no locking. Callers that share it across threads must
serialize calls per agreement.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from escrow_ledger.config import Settings, get_settings
from escrow_ledger.domain.agreement import EscrowAgreement
from escrow_ledger.domain.enums import EscrowAction, EscrowState, EventType, PartyRole
from escrow_ledger.domain.exceptions import (
    AgreementNotFoundError,
    AlreadyInitializedError,
    EscrowError,
    InvalidAmountError,
)
from escrow_ledger.logging_config import agreement_context, get_logger
from escrow_ledger.schemas.agreement import AgreementStatus, EscrowAgreementSnapshot

logger = get_logger(__name__)

_ACTION_EVENTS: dict[EscrowAction, tuple[EventType, str]] = {
    EscrowAction.DEPOSIT: (EventType.FUNDS_DEPOSITED, "escrow.deposited"),
    EscrowAction.CONFIRM_DELIVERY: (EventType.DELIVERY_CONFIRMED, "escrow.delivery_confirmed"),
    EscrowAction.REFUND_BUYER: (EventType.BUYER_REFUNDED, "escrow.refunded"),
}

# who receives the released balance
_PAYEE: dict[EscrowAction, PartyRole] = {
    EscrowAction.CONFIRM_DELIVERY: PartyRole.SELLER,
    EscrowAction.REFUND_BUYER: PartyRole.BUYER,
}


@dataclass(frozen=True)
class EscrowEvent:
    """One append-only audit record.

    Attributes:
        agreement_id: Agreement the event belongs to.
        event_type: What happened.
        old_state: State before the event (None on creation).
        new_state: State after the event (unchanged on rejection).
        actor: Sender identifier that triggered the event.
        amount: Amount deposited or paid out, if any.
        metadata: Extra detail such as the rejection code.
    """

    agreement_id: str
    event_type: EventType
    old_state: EscrowState | None
    new_state: EscrowState
    actor: str
    amount: int | None = None
    metadata: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class EscrowService:
    """Manages a set of escrow agreements and their audit trail."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._agreements: dict[str, EscrowAgreement] = {}
        self._events: list[EscrowEvent] = []

    # ------------------------------------------------------------------
    # Agreement Creation
    # ------------------------------------------------------------------

    def create_agreement(
        self,
        buyer: str,
        seller: str,
        amount: int,
        agreement_id: str | None = None,
    ) -> str:
        """Register a new agreement in AWAITING_PAYMENT state and return its id."""
        if agreement_id is None:
            agreement_id = uuid.uuid4().hex
        if agreement_id in self._agreements:
            raise AlreadyInitializedError(agreement_id)
        if self._settings.escrow_require_positive_amount and amount <= 0:
            raise InvalidAmountError(amount)

        agreement = EscrowAgreement.create(buyer, seller, amount)
        self._agreements[agreement_id] = agreement

        self._record(
            agreement_id=agreement_id,
            event_type=EventType.AGREEMENT_CREATED,
            old_state=None,
            new_state=agreement.state,
            actor=buyer,
            amount=amount,
            metadata={"seller": seller},
        )

        logger.info("escrow.created", agreement_id=agreement_id, amount=amount)
        return agreement_id

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def deposit(self, agreement_id: str, sender: str, amount: int) -> None:
        """Record the buyer's deposit and transition to AWAITING_DELIVERY."""
        self._apply(
            agreement_id,
            EscrowAction.DEPOSIT,
            sender,
            lambda agreement: agreement.deposit(sender, amount),
        )

    def confirm_delivery(self, agreement_id: str, sender: str) -> int:
        """Buyer confirms delivery; returns the payout owed to the seller."""
        return self._apply(
            agreement_id,
            EscrowAction.CONFIRM_DELIVERY,
            sender,
            lambda agreement: agreement.confirm_delivery(sender),
        )

    def refund_buyer(self, agreement_id: str, sender: str) -> int:
        """Seller refunds the buyer; returns the amount owed back to the buyer."""
        return self._apply(
            agreement_id,
            EscrowAction.REFUND_BUYER,
            sender,
            lambda agreement: agreement.refund_buyer(sender),
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self, agreement_id: str) -> EscrowAgreementSnapshot:
        """Capture every field of an agreement for storage."""
        return EscrowAgreementSnapshot.from_agreement(self._get_agreement_or_raise(agreement_id))

    def load_snapshot(self, agreement_id: str, snapshot: EscrowAgreementSnapshot) -> None:
        """Register an agreement rebuilt from a stored snapshot."""
        if agreement_id in self._agreements:
            raise AlreadyInitializedError(agreement_id)
        self._agreements[agreement_id] = snapshot.to_agreement()
        logger.debug("escrow.loaded", agreement_id=agreement_id, state=snapshot.state.value)

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    def get_agreement(self, agreement_id: str) -> EscrowAgreement:
        """Get an agreement or raise."""
        return self._get_agreement_or_raise(agreement_id)

    def get_status(self, agreement_id: str) -> AgreementStatus:
        """Lightweight status check, including the actions open in this state."""
        agreement = self._get_agreement_or_raise(agreement_id)
        return AgreementStatus(
            agreement_id=agreement_id,
            state=agreement.state,
            amount=agreement.amount,
            balance=agreement.balance,
            allowed_actions=agreement.allowed_actions(),
        )

    def list_events(self, agreement_id: str | None = None) -> list[EscrowEvent]:
        """Return the audit trail, oldest first, optionally for one agreement."""
        if agreement_id is None:
            return list(self._events)
        return [e for e in self._events if e.agreement_id == agreement_id]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_agreement_or_raise(self, agreement_id: str) -> EscrowAgreement:
        agreement = self._agreements.get(agreement_id)
        if agreement is None:
            raise AgreementNotFoundError(agreement_id)
        return agreement

    def _record(self, **kwargs) -> EscrowEvent:
        event = EscrowEvent(**kwargs)
        self._events.append(event)
        return event

    def _apply(
        self,
        agreement_id: str,
        action: EscrowAction,
        sender: str,
        call: Callable[[EscrowAgreement], int | None],
    ) -> int | None:
        """Run one transition, recording an event whether it succeeds or not."""
        agreement = self._get_agreement_or_raise(agreement_id)
        old_state = agreement.state

        with agreement_context(agreement_id):
            try:
                payout = call(agreement)
            except EscrowError as exc:
                self._reject(agreement_id, agreement, action, sender, exc)
                raise

            event_type, log_event = _ACTION_EVENTS[action]
            amount = agreement.amount if payout is None else payout
            payee = _PAYEE.get(action)
            self._record(
                agreement_id=agreement_id,
                event_type=event_type,
                old_state=old_state,
                new_state=agreement.state,
                actor=sender,
                amount=amount,
                metadata={"payee": getattr(agreement, payee.value)} if payee else {},
            )
            logger.info(log_event, sender=sender, amount=amount, state=agreement.state.value)
        return payout

    def _reject(
        self,
        agreement_id: str,
        agreement: EscrowAgreement,
        action: EscrowAction,
        sender: str,
        exc: EscrowError,
    ) -> None:
        self._record(
            agreement_id=agreement_id,
            event_type=EventType.TRANSITION_REJECTED,
            old_state=agreement.state,
            new_state=agreement.state,
            actor=sender,
            metadata={"action": action.value, "code": exc.code, "message": exc.message},
        )
        logger.warning("escrow.rejected", action=action.value, sender=sender, code=exc.code)
